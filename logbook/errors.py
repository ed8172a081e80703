"""
Logbook exceptions
"""


class LogbookError(Exception):
    """Base class for every error raised by the logbook package"""


class TripLifecycleError(LogbookError):
    """Raised when a trip is asked to move to a status its lifecycle does not allow"""

    def __init__(self, current, requested):
        self.current = current
        self.requested = requested
        super().__init__(f"Trip cannot go from '{current.value}' to '{requested.value}'")


class ActionNotAvailable(LogbookError):
    """Raised when firing a tag that is unknown or not visible in the current state"""

    def __init__(self, tag: str, reason: str = "not available"):
        self.tag = tag
        super().__init__(f"Action {tag} is {reason}")


class PositionUnavailable(LogbookError):
    """Raised by a position source that cannot deliver a fix"""
