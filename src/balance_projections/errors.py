class ProjectionError(ValueError):
    """Base class for all validation failures reported by the projection core."""


class InvalidDateFormat(ProjectionError):
    pass


class InvalidCalendarDate(ProjectionError):
    pass


class InvalidRange(ProjectionError):
    pass


class InvalidRecurrenceRule(ProjectionError):
    pass


class InvalidTransaction(ProjectionError):
    pass


class AccountNotFound(ProjectionError):
    pass
