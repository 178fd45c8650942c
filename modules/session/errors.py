"""Error types raised along the submission pipeline."""

from __future__ import annotations

from typing import Optional

GENERIC_FAILURE_MESSAGE = "Request failed"
UNKNOWN_FAILURE_MESSAGE = "Something went wrong"


class SubmissionError(RuntimeError):
    """Base class for every error surfaced to the user as a single message."""

    default_message = UNKNOWN_FAILURE_MESSAGE

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InputValidationError(SubmissionError):
    """Input is not ready to submit; raised before any network call."""


class MissingImageError(InputValidationError):
    default_message = "Please upload an image first."


class MissingPromptError(InputValidationError):
    default_message = "Please enter a prompt."


class SubmissionBusyError(SubmissionError):
    default_message = "A description is already being generated."


class TransportError(SubmissionError):
    """The request never reached the server or never completed."""


class ServerError(SubmissionError):
    """The server answered with a non-2xx status."""

    default_message = GENERIC_FAILURE_MESSAGE

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(ServerError):
    """A 2xx response whose body is not the expected JSON object."""


class UnsupportedModelError(ValueError):
    """Model identifier is not part of the configured set."""


class PayloadPreconditionError(AssertionError):
    """A payload was requested for input that never passed validation."""
