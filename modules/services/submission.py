"""Submission lifecycle against the remote description endpoint."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional, Protocol, Union

import requests

from modules.services.history_service import HistoryEntry, HistoryStore
from modules.services.request_builder import MultipartPayload, build_payload
from modules.session.errors import (
    GENERIC_FAILURE_MESSAGE,
    MalformedResponseError,
    ServerError,
    SubmissionBusyError,
    SubmissionError,
    TransportError,
)
from modules.session.input_state import InputState

logger = logging.getLogger(__name__)


class SubmissionStatus(str, Enum):
    """Lifecycle of the current submission."""

    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class Pending:
    """Request issued, no answer yet."""


@dataclass(frozen=True, slots=True)
class Success:
    description: str
    model_used: str


@dataclass(frozen=True, slots=True)
class Failure:
    message: str
    error: SubmissionError


SubmissionOutcome = Union[Pending, Success, Failure]


class Transport(Protocol):
    def post(self, url: str, payload: MultipartPayload) -> Any:
        """Send the payload and return a response with ``status_code`` and ``json()``."""


class HttpTransport:
    """``requests`` based transport."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self._session = session or requests.Session()

    def post(self, url: str, payload: MultipartPayload) -> requests.Response:
        return self._session.post(url, files=payload.as_requests_files(), timeout=self.timeout)


def _error_detail(response: Any) -> Optional[str]:
    """Pull a human readable message out of an error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    detail = body.get("detail")
    if isinstance(detail, str):
        return detail.strip() or None
    # FastAPI validation errors: [{"loc": [...], "msg": "...", ...}, ...]
    if isinstance(detail, list):
        messages = [str(item.get("msg")) for item in detail if isinstance(item, dict) and item.get("msg")]
        return "; ".join(messages) or None
    return None


def _locale_time(moment: datetime) -> str:
    return moment.strftime("%X")


class SubmissionController:
    """Runs one submission at a time and records successes in the history."""

    def __init__(
        self,
        endpoint_url: str,
        history: HistoryStore,
        transport: Optional[Transport] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.endpoint_url = endpoint_url
        self.history = history
        self.transport: Transport = transport or HttpTransport()
        self._clock = clock
        self._status = SubmissionStatus.IDLE
        self._outcome: Optional[SubmissionOutcome] = None

    @property
    def status(self) -> SubmissionStatus:
        return self._status

    @property
    def is_pending(self) -> bool:
        """True while a request is in flight; the UI disables resubmission."""
        return self._status is SubmissionStatus.PENDING

    @property
    def last_outcome(self) -> Optional[SubmissionOutcome]:
        return self._outcome

    @property
    def error_message(self) -> Optional[str]:
        if isinstance(self._outcome, Failure):
            return self._outcome.message
        return None

    def submit(self, state: InputState) -> SubmissionOutcome:
        """Send the current input and return its terminal outcome.

        Validation errors and ``SubmissionBusyError`` are raised without any
        state change or network call. Every other failure is returned as a
        ``Failure`` outcome.
        """
        if self.is_pending:
            raise SubmissionBusyError()
        state.validate_for_submit()
        payload = build_payload(state)

        image = state.image
        logger.info(
            "Submitting %s to %s with model %s",
            image.filename if image else "<none>",
            self.endpoint_url,
            state.model,
        )
        self._status = SubmissionStatus.PENDING
        self._outcome = Pending()
        try:
            success = self._exchange(payload, requested_model=state.model)
        except SubmissionError as exc:
            logger.warning("Submission failed: %s", exc.message)
            return self._resolve(Failure(message=exc.message, error=exc))
        except Exception as exc:
            error = SubmissionError(str(exc))
            self._resolve(Failure(message=error.message, error=error))
            raise

        entry = HistoryEntry(
            id=self.history.next_id(),
            text=success.description,
            model=success.model_used,
            timestamp=_locale_time(self._clock()),
        )
        self.history.prepend(entry)
        logger.info("Description %s received from %s", entry.id, entry.model)
        return self._resolve(success)

    def _resolve(self, outcome: SubmissionOutcome) -> SubmissionOutcome:
        self._outcome = outcome
        self._status = (
            SubmissionStatus.SUCCEEDED if isinstance(outcome, Success) else SubmissionStatus.FAILED
        )
        return outcome

    def _exchange(self, payload: MultipartPayload, requested_model: str) -> Success:
        try:
            response = self.transport.post(self.endpoint_url, payload)
        except requests.RequestException as exc:
            raise TransportError(str(exc)) from exc

        status_code = int(response.status_code)
        if not 200 <= status_code < 300:
            raise ServerError(_error_detail(response), status_code=status_code)

        try:
            body = response.json()
        except ValueError as exc:
            raise MalformedResponseError(status_code=status_code) from exc
        if not isinstance(body, dict) or not isinstance(body.get("description"), str):
            raise MalformedResponseError(GENERIC_FAILURE_MESSAGE, status_code=status_code)

        model = body.get("model")
        model_used = model if isinstance(model, str) and model else requested_model
        return Success(description=body["description"], model_used=model_used)
