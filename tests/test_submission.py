"""SubmissionController tests with a stub transport."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, List, Optional

import pytest
import requests

from config.settings import DEFAULT_MODELS
from modules.services.history_service import HistoryStore
from modules.services.request_builder import MultipartPayload
from modules.services.submission import (
    Failure,
    HttpTransport,
    Pending,
    SubmissionController,
    SubmissionStatus,
    Success,
)
from modules.session.errors import (
    MalformedResponseError,
    MissingImageError,
    MissingPromptError,
    ServerError,
    SubmissionBusyError,
    TransportError,
)
from modules.session.input_state import ImageBlob, InputState

API_URL = "http://localhost:8000/api/generate-description"
FIXED_NOW = datetime(2024, 5, 1, 14, 30, 15)


class DummyResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(self, status_code: int, body: Any = None, text: Optional[str] = None) -> None:
        self.status_code = status_code
        if text is None:
            text = "" if body is None else json.dumps(body)
        self.text = text

    def json(self) -> Any:
        return json.loads(self.text)


class DummyTransport:
    """Records every call and replays queued responses or errors."""

    def __init__(self, *responses: Any) -> None:
        self.responses: List[Any] = list(responses)
        self.calls: List[tuple[str, MultipartPayload]] = []
        self.controller: Optional[SubmissionController] = None
        self.seen_pending: List[bool] = []

    def post(self, url: str, payload: MultipartPayload) -> DummyResponse:
        self.calls.append((url, payload))
        if self.controller is not None:
            self.seen_pending.append(self.controller.is_pending)
        result = self.responses.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result


def make_state(prompt: str = "Describe this image in detail.", model: str = "gpt-4o") -> InputState:
    state = InputState(DEFAULT_MODELS, model=model)
    state.set_image(ImageBlob(filename="shoe.png", content_type="image/png", data=b"png-bytes"))
    state.set_prompt(prompt)
    return state


def make_controller(*responses: Any) -> tuple[SubmissionController, DummyTransport, HistoryStore]:
    transport = DummyTransport(*responses)
    history = HistoryStore()
    controller = SubmissionController(API_URL, history, transport=transport, clock=lambda: FIXED_NOW)
    transport.controller = controller
    return controller, transport, history


def test_success_prepends_history_entry():
    controller, transport, history = make_controller(
        DummyResponse(200, {"description": "A red shoe.", "model": "gpt-4o"})
    )

    outcome = controller.submit(make_state())

    assert outcome == Success(description="A red shoe.", model_used="gpt-4o")
    assert controller.status is SubmissionStatus.SUCCEEDED
    assert controller.error_message is None
    entries = history.all()
    assert len(entries) == 1
    assert entries[0].text == "A red shoe."
    assert entries[0].model == "gpt-4o"
    assert entries[0].timestamp == FIXED_NOW.strftime("%X")
    url, payload = transport.calls[0]
    assert url == API_URL
    assert payload.names() == ["prompt", "image", "model_name"]


def test_pending_flag_is_set_during_exchange():
    controller, transport, _ = make_controller(DummyResponse(200, {"description": "d", "model": "m"}))

    assert controller.status is SubmissionStatus.IDLE
    assert controller.is_pending is False
    controller.submit(make_state())

    assert transport.seen_pending == [True]
    assert controller.is_pending is False


def test_history_is_most_recent_first():
    controller, _, history = make_controller(
        DummyResponse(200, {"description": "D1", "model": "gpt-4o"}),
        DummyResponse(200, {"description": "D2", "model": "gpt-4o"}),
        DummyResponse(200, {"description": "D3", "model": "gpt-4o"}),
    )
    state = make_state()

    for _ in range(3):
        controller.submit(state)

    assert [entry.text for entry in history.all()] == ["D3", "D2", "D1"]
    ids = [entry.id for entry in history.all()]
    assert len(set(ids)) == 3
    assert ids == sorted(ids, reverse=True)


def test_server_error_uses_detail():
    controller, _, history = make_controller(DummyResponse(400, {"detail": "Invalid image format"}))

    outcome = controller.submit(make_state())

    assert isinstance(outcome, Failure)
    assert outcome.message == "Invalid image format"
    assert isinstance(outcome.error, ServerError)
    assert outcome.error.status_code == 400
    assert controller.status is SubmissionStatus.FAILED
    assert controller.error_message == "Invalid image format"
    assert len(history) == 0


def test_server_error_without_body_is_generic():
    controller, _, history = make_controller(DummyResponse(500, text=""))

    outcome = controller.submit(make_state())

    assert isinstance(outcome, Failure)
    assert outcome.message == "Request failed"
    assert len(history) == 0


def test_server_error_with_html_body_is_generic():
    controller, _, _ = make_controller(DummyResponse(502, text="<html>Bad gateway</html>"))

    outcome = controller.submit(make_state())

    assert outcome.message == "Request failed"


def test_validation_error_list_is_joined():
    body = {
        "detail": [
            {"loc": ["body", "image"], "msg": "Field required", "type": "missing"},
            {"loc": ["body", "prompt"], "msg": "Field required", "type": "missing"},
        ]
    }
    controller, _, _ = make_controller(DummyResponse(422, body))

    outcome = controller.submit(make_state())

    assert outcome.message == "Field required; Field required"


def test_transport_error_message_is_surfaced():
    controller, _, history = make_controller(requests.ConnectionError("Connection refused"))

    outcome = controller.submit(make_state())

    assert isinstance(outcome, Failure)
    assert isinstance(outcome.error, TransportError)
    assert outcome.message == "Connection refused"
    assert controller.status is SubmissionStatus.FAILED
    assert len(history) == 0


def test_transport_error_without_message():
    controller, _, _ = make_controller(requests.Timeout())

    outcome = controller.submit(make_state())

    assert outcome.message == "Something went wrong"


@pytest.mark.parametrize(
    "response",
    [
        DummyResponse(200, text="not json"),
        DummyResponse(200, ["a", "list"]),
        DummyResponse(200, {"model": "gpt-4o"}),
        DummyResponse(200, {"description": 42, "model": "gpt-4o"}),
    ],
)
def test_malformed_success_body(response):
    controller, _, history = make_controller(response)

    outcome = controller.submit(make_state())

    assert isinstance(outcome, Failure)
    assert isinstance(outcome.error, MalformedResponseError)
    assert outcome.message == "Request failed"
    assert len(history) == 0


def test_missing_model_falls_back_to_requested_model():
    controller, _, history = make_controller(DummyResponse(200, {"description": "A bag."}))

    controller.submit(make_state(model="gpt-5-nano"))

    assert history.all()[0].model == "gpt-5-nano"


def test_extra_response_fields_are_ignored():
    controller, _, history = make_controller(
        DummyResponse(201, {"description": "A lamp.", "model": "gpt-4.1", "usage": {"tokens": 12}})
    )

    outcome = controller.submit(make_state())

    assert outcome == Success(description="A lamp.", model_used="gpt-4.1")
    assert len(history) == 1


def test_missing_image_never_calls_transport():
    controller, transport, history = make_controller()
    state = InputState(DEFAULT_MODELS)
    state.set_prompt("x")

    with pytest.raises(MissingImageError):
        controller.submit(state)

    assert transport.calls == []
    assert controller.status is SubmissionStatus.IDLE
    assert controller.last_outcome is None
    assert len(history) == 0


def test_missing_prompt_never_calls_transport():
    controller, transport, _ = make_controller()

    with pytest.raises(MissingPromptError):
        controller.submit(make_state(prompt="   "))

    assert transport.calls == []


def test_failed_then_succeeded_is_reentrant():
    controller, _, history = make_controller(
        DummyResponse(500, text=""),
        DummyResponse(200, {"description": "Second try.", "model": "gpt-4o"}),
    )
    state = make_state()

    assert isinstance(controller.submit(state), Failure)
    assert isinstance(controller.submit(state), Success)
    assert controller.status is SubmissionStatus.SUCCEEDED
    assert [entry.text for entry in history.all()] == ["Second try."]


def test_overlapping_submit_is_rejected():
    controller, transport, _ = make_controller()
    nested: List[BaseException] = []

    def reentrant_post(url, payload):
        try:
            controller.submit(make_state())
        except SubmissionBusyError as exc:
            nested.append(exc)
        return DummyResponse(200, {"description": "Only one.", "model": "gpt-4o"})

    transport.post = reentrant_post  # type: ignore[method-assign]

    outcome = controller.submit(make_state())

    assert isinstance(outcome, Success)
    assert len(nested) == 1


def test_unexpected_error_leaves_pending_state():
    controller, _, history = make_controller(KeyError("boom"))

    with pytest.raises(KeyError):
        controller.submit(make_state())

    assert controller.is_pending is False
    assert controller.status is SubmissionStatus.FAILED
    assert isinstance(controller.last_outcome, Failure)
    assert len(history) == 0


def test_pending_outcome_is_exposed_mid_flight():
    controller, transport, _ = make_controller()
    seen: List[Any] = []

    def observing_post(url, payload):
        seen.append(controller.last_outcome)
        return DummyResponse(200, {"description": "x", "model": "y"})

    transport.post = observing_post  # type: ignore[method-assign]
    controller.submit(make_state())

    assert seen == [Pending()]


def test_http_transport_posts_multipart():
    captured = {}

    class DummySession:
        def post(self, url, **kwargs):
            captured["url"] = url
            captured.update(kwargs)
            return DummyResponse(200, {"description": "ok", "model": "gpt-4o"})

    transport = HttpTransport(timeout=12.5, session=DummySession())
    controller = SubmissionController(API_URL, HistoryStore(), transport=transport)

    outcome = controller.submit(make_state())

    assert isinstance(outcome, Success)
    assert captured["url"] == API_URL
    assert captured["timeout"] == 12.5
    assert [name for name, _ in captured["files"]] == ["prompt", "image", "model_name"]
    assert "data" not in captured
    assert "headers" not in captured
