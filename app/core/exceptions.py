"""Domain errors raised by the answer pipeline."""


class CourseAssistantError(Exception):
    """Base class for errors raised by the course assistant services."""


class InvalidInputError(CourseAssistantError, ValueError):
    """The caller supplied a missing or empty message / session id."""


class InternalFailureError(CourseAssistantError, RuntimeError):
    """An unexpected persistence failure prevented the exchange from being recorded."""
