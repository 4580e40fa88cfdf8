"""Custom exceptions for cronkit."""

class CronkitError(Exception):
    pass


class ConfigurationError(CronkitError, TypeError):
    """Raised when a job is registered with bad arguments.

    Always raised before the engine is contacted. Subclasses TypeError so
    generic bad-argument handling keeps working.
    """
    pass


class InvalidScheduleError(ConfigurationError):
    """Raised when a schedule is not well-formed."""

    def __init__(self, schedule, reason: str | None = None):
        self.schedule = schedule
        self.reason = reason
        message = "Invalid cron schedule"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class EngineError(CronkitError):
    """Raised when a scheduling engine rejects an operation."""
    pass


class DuplicateJobError(EngineError):
    """Raised when a job name is already registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Cron job '{name}' is already registered")


class AppNotRunningError(CronkitError):
    """Raised when launching a job on a stopped app."""

    def __init__(self):
        super().__init__("Cronkit app is not running. Call start() first.")
