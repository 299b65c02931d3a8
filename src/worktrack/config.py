"""Configuration loading from environment variables and worktrack.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_DEFAULT_DATA_DIR = Path.home() / ".worktrack" / "data"
_CONFIG_FILENAME = "worktrack.toml"
_MIN_TICK_INTERVAL = 0.01


@dataclass
class TimerConfig:
    """Stopwatch configuration."""

    tick_interval: float = 1.0
    persist_on_tick: bool = True


@dataclass
class StatsConfig:
    """Dashboard statistics configuration."""

    due_within_days: int = 7


@dataclass
class WorktrackConfig:
    """Top-level worktrack configuration."""

    timer: TimerConfig = field(default_factory=TimerConfig)
    stats: StatsConfig = field(default_factory=StatsConfig)
    data_dir: Path = _DEFAULT_DATA_DIR
    log_level: str = "INFO"


def _as_bool(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def load_config(config_path: Path | None = None) -> WorktrackConfig:
    """Load configuration from environment variables and optional worktrack.toml.

    Priority: environment variables > worktrack.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.worktrack/
        for candidate in [
            Path.cwd() / _CONFIG_FILENAME,
            Path.home() / ".worktrack" / _CONFIG_FILENAME,
        ]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    timer_data = file_data.get("timer", {})
    stats_data = file_data.get("stats", {})
    data_dir = os.getenv("WORKTRACK_DATA_DIR", file_data.get("data_dir"))

    config = WorktrackConfig(
        timer=TimerConfig(
            tick_interval=max(
                _MIN_TICK_INTERVAL,
                float(os.getenv("WORKTRACK_TICK_INTERVAL", timer_data.get("tick_interval", 1.0))),
            ),
            persist_on_tick=_as_bool(
                os.getenv("WORKTRACK_PERSIST_ON_TICK", timer_data.get("persist_on_tick", True))
            ),
        ),
        stats=StatsConfig(
            due_within_days=int(stats_data.get("due_within_days", 7)),
        ),
        data_dir=Path(data_dir).expanduser() if data_dir else _DEFAULT_DATA_DIR,
        log_level=os.getenv("WORKTRACK_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
    return config
