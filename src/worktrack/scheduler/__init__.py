from worktrack.scheduler.timer import TimerService, format_elapsed

__all__ = ["TimerService", "format_elapsed"]
