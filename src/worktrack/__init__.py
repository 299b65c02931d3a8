"""worktrack — freelance project, client and time tracking."""

__version__ = "0.1.0"
