class SchedulerError(Exception):
    """Base error for scheduling runs."""


class MissingDataError(SchedulerError):
    """Raised when an essential input table is empty and no schedule can be built."""
