"""Domain-specific errors for powermon."""


class PowermonError(Exception):
    """Base error for powermon."""


class ConfigurationError(PowermonError):
    """Raised when startup options are invalid; fatal before any loop starts."""


class ProbeError(PowermonError):
    """Raised when a single liveness probe fails."""


class ShutdownError(PowermonError):
    """Raised when the OS-level terminal action fails."""


class NotificationError(PowermonError):
    """Raised when a notification cannot be dispatched."""


class WakeError(PowermonError):
    """Raised when a wake packet cannot be sent."""


class PayloadError(PowermonError):
    """Raised when an inbound verification payload is malformed."""


class ServerError(PowermonError):
    """Raised when the HTTP server cannot start or stops with an error."""
