"""Exception types raised by the encoder, dispatcher and transports."""


class EscposError(Exception):
    """Base class for every error this package raises."""


class InvalidParameterError(EscposError, ValueError):
    """A parameter is missing, unparseable or outside its allowed domain."""

    def __init__(self, message: str, param: str | None = None):
        super().__init__(message)
        self.param = param


class MalformedPayloadError(EscposError, ValueError):
    """A node payload could not be decoded."""


class TransportError(EscposError, RuntimeError):
    """The byte stream could not be delivered to the printer."""
