"""Multipart payload construction for the description endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple, Union

from modules.session.errors import InputValidationError, PayloadPreconditionError
from modules.session.input_state import InputState


@dataclass(frozen=True, slots=True)
class MultipartPart:
    """One named form part; text parts carry neither filename nor content type."""

    name: str
    value: Union[str, bytes]
    filename: Optional[str] = None
    content_type: Optional[str] = None

    @property
    def is_file(self) -> bool:
        return self.filename is not None


@dataclass(frozen=True, slots=True)
class MultipartPayload:
    """Ordered form parts of a single submission."""

    parts: Tuple[MultipartPart, ...]

    def names(self) -> List[str]:
        return [part.name for part in self.parts]

    def get(self, name: str) -> MultipartPart:
        for part in self.parts:
            if part.name == name:
                return part
        raise KeyError(name)

    def as_requests_files(self) -> List[Tuple[str, Tuple[Any, ...]]]:
        """Render the parts in the shape ``requests`` expects for ``files=``."""
        rendered: List[Tuple[str, Tuple[Any, ...]]] = []
        for part in self.parts:
            if part.is_file:
                rendered.append((part.name, (part.filename, part.value, part.content_type)))
            else:
                rendered.append((part.name, (None, part.value)))
        return rendered


def build_payload(state: InputState) -> MultipartPayload:
    """Return the ``prompt``/``image``/``model_name`` payload for a validated state."""
    try:
        state.validate_for_submit()
    except InputValidationError as exc:
        raise PayloadPreconditionError(
            f"Payload requested for unvalidated input: {exc.message}"
        ) from exc

    image = state.image
    if image is None:
        raise PayloadPreconditionError("Payload requested without an image")
    return MultipartPayload(
        parts=(
            MultipartPart(name="prompt", value=state.prompt),
            MultipartPart(
                name="image",
                value=image.data,
                filename=image.filename,
                content_type=image.content_type,
            ),
            MultipartPart(name="model_name", value=state.model),
        )
    )
