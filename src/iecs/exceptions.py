"""
Common exception hierarchy for iecs.

These exceptions are shared by the gateway, the selection pipeline and the
command runners so that the command shell can report every failure the same
way.
"""


class IecsError(Exception):
    """Base exception for all iecs errors."""

    pass


class NotFoundError(IecsError):
    """Raised when a list or describe call returned nothing for its scope."""

    pass


class SelectionCancelled(IecsError):
    """Raised when the operator aborts an interactive prompt."""

    def __init__(self, title: str = "") -> None:
        message = f"selection cancelled: {title}" if title else "selection cancelled"
        super().__init__(message)
        self.title = title


class RemoteError(IecsError):
    """Raised when AWS rejects a request or the network fails."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(message)
        self.operation = operation
        self.message = message


class StreamClosedError(IecsError):
    """Raised when a live tail stream ends without being cancelled."""

    pass


class UnknownEventError(IecsError):
    """Raised when a live tail stream delivers an unexpected event."""

    def __init__(self, event_type: str) -> None:
        super().__init__(f"unknown event type: {event_type}")
        self.event_type = event_type


class PreflightError(IecsError):
    """Raised for failures detected before any network I/O."""

    def __init__(self, message: str, hints: list[str] | None = None) -> None:
        super().__init__(message)
        self.hints = list(hints or [])


class ConfigurationError(IecsError):
    """Raised when configuration (local or task definition) is unusable."""

    pass


class SessionPluginError(IecsError):
    """Raised when the session-manager-plugin child fails to start."""

    pass
