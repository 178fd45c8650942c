"""Canned prompt presets."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PromptPreset:
    """A named prompt the user can apply with one click."""

    name: str
    label: str
    prompt: str


DETAIL_PRESET = PromptPreset(
    name="detail",
    label="Describe this image in detail",
    prompt="Describe this image in detail.",
)
OBJECTS_PRESET = PromptPreset(
    name="objects",
    label="What objects are in this image?",
    prompt="What objects are present in this image?",
)


class PromptPresetRegistry:
    """In-memory registry of prompt presets, seeded with the built-in pair."""

    def __init__(self, include_defaults: bool = True) -> None:
        self._presets: Dict[str, PromptPreset] = {}
        if include_defaults:
            self.add(DETAIL_PRESET)
            self.add(OBJECTS_PRESET)

    def load_from_file(self, path: Path) -> None:
        """Load extra presets from a JSON list of {name, label, prompt} objects.

        Entries without a string ``name`` and ``prompt`` are skipped with a
        warning; ``label`` defaults to the prompt text.
        """
        if not path.exists():
            return
        with path.open("r", encoding="utf-8") as fp:
            data = json.load(fp)
        if not isinstance(data, list):
            logger.warning("Ignoring %s: expected a JSON list of presets", path)
            return
        for index, entry in enumerate(data):
            name = entry.get("name") if isinstance(entry, dict) else None
            prompt = entry.get("prompt") if isinstance(entry, dict) else None
            if not isinstance(name, str) or not name or not isinstance(prompt, str) or not prompt:
                logger.warning("Skipping malformed preset #%d in %s", index, path)
                continue
            self.add(PromptPreset(name=name, label=entry.get("label") or prompt, prompt=prompt))

    def add(self, preset: PromptPreset) -> None:
        """Register a preset, replacing any preset with the same name."""
        self._presets[preset.name] = preset

    def list_presets(self) -> List[PromptPreset]:
        """Return all registered presets in insertion order."""
        return list(self._presets.values())

    def get(self, name: str) -> PromptPreset:
        """Retrieve a preset by name."""
        try:
            return self._presets[name]
        except KeyError as exc:
            raise KeyError(f"Prompt preset '{name}' not found") from exc
