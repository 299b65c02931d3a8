"""Entity types and the numeric normalization shared by the repositories.

Entities are plain dataclasses. The wire format (what lands in storage) uses
the camelCase keys of the original records, so ``to_dict``/``from_dict`` do
the mapping. Keys that are not entity fields ride along in ``extra`` and are
written back untouched.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar

TBD = "TBD"
ACTIVE = "active"


def new_id() -> str:
    """Random UUID4 hex, unique for the lifetime of the store."""
    return uuid.uuid4().hex


def to_number(value: Any) -> int | float:
    """Coerce user input to a finite number; anything unusable becomes 0.

    Integral floats collapse to ``int`` so stored JSON reads ``500``, not
    ``500.0``. No range checks are applied.
    """
    if value is None or isinstance(value, bool):
        return int(bool(value))
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip() or 0)
        except ValueError:
            return 0
    else:
        return 0

    if isinstance(number, float):
        if not math.isfinite(number):
            return 0
        if number.is_integer():
            return int(number)
    return number


class _Entity:
    """Mixin: wire-key mapping, numeric fields and merge semantics."""

    # wire key -> attribute name, for keys that differ
    _WIRE_KEYS: ClassVar[dict[str, str]] = {}
    _NUMERIC: ClassVar[frozenset[str]] = frozenset()
    _INTEGER: ClassVar[frozenset[str]] = frozenset()
    _TEXT: ClassVar[frozenset[str]] = frozenset()

    extra: dict[str, Any]

    @classmethod
    def _attr_for(cls, key: str) -> str | None:
        attr = cls._WIRE_KEYS.get(key, key)
        if attr == "extra" or attr not in {f.name for f in fields(cls)}:
            return None
        return attr

    @classmethod
    def _normalize(cls, attr: str, value: Any) -> Any:
        if attr in cls._INTEGER:
            return int(to_number(value))
        if attr in cls._NUMERIC:
            return to_number(value)
        if attr in cls._TEXT:
            return "" if value is None else str(value)
        return value

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        """Build an entity from a stored or user-supplied mapping.

        A missing or empty ``id`` gets a fresh one.
        """
        kwargs: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in data.items():
            attr = cls._attr_for(key)
            if attr is None:
                extra[key] = value
            else:
                kwargs[attr] = cls._normalize(attr, value)
        if kwargs.get("id") in (None, ""):
            kwargs["id"] = new_id()
        return cls(extra=extra, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        attr_to_wire = {attr: key for key, attr in self._WIRE_KEYS.items()}
        out: dict[str, Any] = {}
        for f in fields(self):
            if f.name == "extra":
                continue
            out[attr_to_wire.get(f.name, f.name)] = getattr(self, f.name)
        for key, value in self.extra.items():
            out.setdefault(key, value)
        return out

    def apply(self, updates: dict[str, Any]) -> None:
        """Merge ``updates`` into this entity in place. The id never changes."""
        for key, value in updates.items():
            attr = self._attr_for(key)
            if attr == "id":
                continue
            if attr is None:
                self.extra[key] = value
            else:
                setattr(self, attr, self._normalize(attr, value))


@dataclass
class Project(_Entity):
    """A unit of billable work. ``client`` is a free-text name, not a key."""

    id: str
    name: str = ""
    client: str = ""
    budget: int | float = 0
    deadline: str = TBD
    progress: int | float = 0
    extra: dict[str, Any] = field(default_factory=dict)

    _NUMERIC: ClassVar[frozenset[str]] = frozenset({"budget", "progress"})
    _TEXT: ClassVar[frozenset[str]] = frozenset({"name", "client", "deadline"})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Project:
        project = super().from_dict(data)
        if not project.deadline:
            project.deadline = TBD
        return project


@dataclass
class Client(_Entity):
    """A customer with aggregates maintained by the aggregation engine."""

    id: str
    name: str = ""
    avatar: str = ""
    projects: int = 0
    total_paid: int | float = 0
    status: str = ACTIVE
    extra: dict[str, Any] = field(default_factory=dict)

    _WIRE_KEYS: ClassVar[dict[str, str]] = {"totalPaid": "total_paid"}
    _NUMERIC: ClassVar[frozenset[str]] = frozenset({"total_paid"})
    _INTEGER: ClassVar[frozenset[str]] = frozenset({"projects"})
    _TEXT: ClassVar[frozenset[str]] = frozenset({"name", "avatar", "status"})

    @staticmethod
    def avatar_for(name: str) -> str:
        return name[:2].upper()


@dataclass
class TimerSnapshot:
    """Persisted timer state. ``start_ts`` is set iff ``is_running``."""

    is_running: bool = False
    start_ts: int | None = None
    elapsed_ms: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> TimerSnapshot:
        if not isinstance(data, dict):
            return cls()
        elapsed = max(0, int(to_number(data.get("elapsedMs"))))
        start_ts = data.get("startTs")
        if (
            isinstance(start_ts, bool)
            or not isinstance(start_ts, (int, float))
            or not math.isfinite(start_ts)
        ):
            start_ts = None
        is_running = bool(data.get("isRunning")) and start_ts is not None
        return cls(
            is_running=is_running,
            start_ts=int(start_ts) if is_running else None,
            elapsed_ms=elapsed,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "isRunning": self.is_running,
            "startTs": self.start_ts,
            "elapsedMs": self.elapsed_ms,
        }
