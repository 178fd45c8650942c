"""Editable input of a description request."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from modules.session.errors import MissingImageError, MissingPromptError, UnsupportedModelError
from modules.session.prompt_presets import PromptPreset

logger = logging.getLogger(__name__)

MAX_PROMPT_LENGTH = 500


@dataclass(frozen=True, slots=True)
class ImageBlob:
    """Raw image bytes plus the metadata sent along with them."""

    filename: str
    content_type: str
    data: bytes

    @property
    def is_image(self) -> bool:
        return self.content_type.lower().startswith("image/")


class InputState:
    """Image, prompt and model currently selected in a session.

    The state is never reset after a submission, so the same image and prompt
    can be sent again with another model.
    """

    def __init__(
        self,
        supported_models: Iterable[str],
        model: Optional[str] = None,
        max_prompt_length: int = MAX_PROMPT_LENGTH,
    ) -> None:
        self.supported_models: tuple[str, ...] = tuple(supported_models)
        if not self.supported_models:
            raise ValueError("At least one model must be configured")
        self.max_prompt_length = max_prompt_length
        self.image: Optional[ImageBlob] = None
        self.prompt: str = ""
        self.model: str = self.supported_models[0]
        if model is not None:
            self.set_model(model)

    def set_image(self, blob: Optional[ImageBlob]) -> None:
        """Replace the selected image; ``None`` clears it."""
        if blob is not None and not blob.is_image:
            logger.warning(
                "Accepting %s with non-image content type %s", blob.filename, blob.content_type
            )
        self.image = blob

    def set_prompt(self, text: Optional[str]) -> None:
        """Set the prompt, dropping everything past the length limit."""
        self.prompt = (text or "")[: self.max_prompt_length]

    def set_model(self, identifier: str) -> None:
        if identifier not in self.supported_models:
            raise UnsupportedModelError(f"Unsupported model '{identifier}'")
        self.model = identifier

    def apply_preset(self, preset: PromptPreset) -> None:
        self.set_prompt(preset.prompt)

    @property
    def prompt_length(self) -> int:
        return len(self.prompt)

    def validate_for_submit(self) -> None:
        """Raise the first validation error; the image is checked before the prompt."""
        if self.image is None:
            raise MissingImageError()
        if not self.prompt.strip():
            raise MissingPromptError()

    def is_ready(self) -> bool:
        return self.image is not None and bool(self.prompt.strip())
