"""Callback implementations for the Gradio interface."""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from config.settings import AppConfig
from modules.services.history_service import ClipboardBuffer, HistoryStore
from modules.services.submission import Failure, HttpTransport, SubmissionController, Transport
from modules.session.errors import SubmissionError, UnsupportedModelError
from modules.session.input_state import InputState
from modules.session.prompt_presets import PromptPresetRegistry
from modules.utils.image_utils import load_image_blob

logger = logging.getLogger(__name__)

EMPTY_HISTORY_TEXT = "No descriptions yet. Upload an image and submit a prompt to get started."


@dataclass
class DescriptionSession:
    """Everything one browser session owns."""

    input_state: InputState
    history: HistoryStore
    clipboard: ClipboardBuffer
    controller: SubmissionController
    image_path: Optional[str] = None


def render_history(history: HistoryStore) -> str:
    """Render history entries as HTML cards, newest first."""
    entries = history.all()
    if not entries:
        return f'<p class="empty-state">{html.escape(EMPTY_HISTORY_TEXT)}</p>'

    cards: list[str] = []
    for entry in entries:
        cards.append(
            '<article class="description-card">'
            '<header class="description-header">'
            f'<strong class="model-name">{html.escape(entry.model or "Model")}</strong>'
            f' <span class="meta">{html.escape(entry.timestamp)}</span>'
            "</header>"
            f'<p class="description-text">{html.escape(entry.text)}</p>'
            "</article>"
        )
    return '<div class="description-list">' + "".join(cards) + "</div>"


def history_choices(history: HistoryStore) -> List[Tuple[str, int]]:
    """Dropdown choices (label, entry id) for the copy control."""
    choices: List[Tuple[str, int]] = []
    for entry in history.all():
        preview = entry.text if len(entry.text) <= 40 else entry.text[:40] + "..."
        choices.append((f"{entry.timestamp} · {entry.model or 'Model'} · {preview}", entry.id))
    return choices


def build_callbacks(
    config: AppConfig,
    transport: Optional[Transport] = None,
    presets: Optional[PromptPresetRegistry] = None,
) -> dict[str, Any]:
    """Return a dictionary of Gradio callback functions."""

    registry = presets or PromptPresetRegistry()
    shared_transport = transport or HttpTransport(timeout=config.request_timeout)

    def new_session() -> DescriptionSession:
        clipboard = ClipboardBuffer()
        history = HistoryStore(clipboard=clipboard)
        state = InputState(
            config.supported_models,
            model=config.default_model,
            max_prompt_length=config.max_prompt_length,
        )
        controller = SubmissionController(config.api_url, history, transport=shared_transport)
        return DescriptionSession(
            input_state=state,
            history=history,
            clipboard=clipboard,
            controller=controller,
        )

    def _ensure_session(session: Optional[DescriptionSession]) -> DescriptionSession:
        if isinstance(session, DescriptionSession):
            return session
        return new_session()

    def _counter(session: DescriptionSession) -> str:
        state = session.input_state
        return f"{state.prompt_length} / {state.max_prompt_length}"

    def _sync_image(session: DescriptionSession, image_path: Optional[str]) -> None:
        path = image_path or None
        if path == session.image_path:
            return
        session.input_state.set_image(load_image_blob(path))
        session.image_path = path

    def on_image_change(
        session: Optional[DescriptionSession], image_path: Optional[str]
    ) -> tuple[DescriptionSession, str]:
        session = _ensure_session(session)
        try:
            _sync_image(session, image_path)
        except OSError as exc:
            logger.warning("Could not read uploaded image %s: %s", image_path, exc)
            return session, f"Could not read the image: {exc}"
        return session, ""

    def on_prompt_change(
        session: Optional[DescriptionSession], text: Optional[str]
    ) -> tuple[DescriptionSession, str]:
        session = _ensure_session(session)
        session.input_state.set_prompt(text)
        return session, _counter(session)

    def on_apply_preset(
        session: Optional[DescriptionSession], preset_name: str
    ) -> tuple[DescriptionSession, str, str]:
        session = _ensure_session(session)
        preset = registry.get(preset_name)
        session.input_state.apply_preset(preset)
        return session, session.input_state.prompt, _counter(session)

    def on_model_change(
        session: Optional[DescriptionSession], model: str
    ) -> tuple[DescriptionSession, str]:
        session = _ensure_session(session)
        try:
            session.input_state.set_model(model)
        except UnsupportedModelError as exc:
            return session, str(exc)
        return session, ""

    def on_submit(
        session: Optional[DescriptionSession],
        image_path: Optional[str],
        prompt: Optional[str],
        model: str,
    ) -> tuple[DescriptionSession, str, str, List[Tuple[str, int]]]:
        session = _ensure_session(session)
        state = session.input_state
        try:
            _sync_image(session, image_path)
            state.set_prompt(prompt)
            if model:
                state.set_model(model)
            outcome = session.controller.submit(state)
        except (SubmissionError, UnsupportedModelError) as exc:
            message = exc.message if isinstance(exc, SubmissionError) else str(exc)
            return session, message, render_history(session.history), history_choices(session.history)
        except OSError as exc:
            logger.warning("Could not read uploaded image %s: %s", image_path, exc)
            return (
                session,
                f"Could not read the image: {exc}",
                render_history(session.history),
                history_choices(session.history),
            )

        error = outcome.message if isinstance(outcome, Failure) else ""
        return session, error, render_history(session.history), history_choices(session.history)

    def on_copy(
        session: Optional[DescriptionSession], entry_id: Optional[int]
    ) -> tuple[DescriptionSession, str, str]:
        session = _ensure_session(session)
        if entry_id is None:
            return session, "", "Select a description to copy."
        if not session.history.copy_text(int(entry_id)):
            return session, "", "Copy failed."
        return session, session.clipboard.take() or "", "Copied to clipboard."

    return {
        "new_session": new_session,
        "on_image_change": on_image_change,
        "on_prompt_change": on_prompt_change,
        "on_apply_preset": on_apply_preset,
        "on_model_change": on_model_change,
        "on_submit": on_submit,
        "on_copy": on_copy,
    }
