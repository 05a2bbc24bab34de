"""
Domain exceptions raised by the services and mapped to HTTP responses in main.
"""


class ScoutError(Exception):
    """Base class for errors the API surface knows how to present."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ScoutError):
    """Bad input: disallowed media type, oversize file, missing field."""


class NotFoundError(ScoutError):
    """Record does not exist or is not owned by the caller."""


class PreconditionError(ScoutError):
    """Action attempted before the record reached the required state."""


class AIUnavailableError(ScoutError):
    """The language model is configured but the remote call failed."""
