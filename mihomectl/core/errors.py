"""Domain-specific errors for mihomectl."""


class MihomeError(Exception):
    """Base error for mihomectl."""


class InvalidParameterError(MihomeError):
    """Raised for a bad socket index, repeat count, device address or receive mode."""


class UnsupportedError(MihomeError):
    """Raised when an operation needs hardware that is not wired (reset line, indicator)."""


class InternalInvariantError(MihomeError):
    """Raised when an encoded OOK field has an unexpected length."""


class TransportError(MihomeError):
    """Base error for GPIO and transceiver I/O failures.

    Collaborator implementations should raise this (or a subclass). The driver
    never wraps or retries these, they reach the caller unchanged.
    """


class DecodeError(MihomeError):
    """Raised by protocol decoders for a malformed received frame."""


class BusClosedError(MihomeError):
    """Raised when publishing to or subscribing on a shut down event bus."""


class ConfigLoadError(MihomeError):
    """Raised when reading config files or driver factories fails."""


class ConfigValidationError(MihomeError):
    """Raised when a config file does not conform to schema or semantics."""
