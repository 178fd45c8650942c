"""Configuration helpers for the ProductVision description client."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

DEFAULT_API_URL = "http://localhost:8000/api/generate-description"
DEFAULT_MODELS: tuple[str, ...] = (
    "gpt-4o-mini",
    "gpt-4o",
    "gpt-4.1-mini",
    "gpt-4.1",
    "gpt-5-nano",
    "gpt-5-mini",
    "gpt-5.1",
)


@dataclass(slots=True)
class AppConfig:
    """Centralized application configuration."""

    api_url: str = DEFAULT_API_URL
    supported_models: tuple[str, ...] = DEFAULT_MODELS
    default_model: str = "gpt-4o-mini"
    request_timeout: Optional[float] = 60.0
    max_prompt_length: int = 500
    assets_dir: Path = Path("assets")
    log_dir: Path = Path("logs")
    metadata: dict[str, Any] = field(default_factory=dict)


def _load_env_file(path: Path) -> None:
    """Populate environment variables from a simple KEY=VALUE .env file."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ[key.strip()] = value.strip()


def _parse_models(raw: Optional[str]) -> tuple[str, ...]:
    """Split a comma separated model list, keeping order and dropping duplicates."""
    if not raw:
        return DEFAULT_MODELS
    models: list[str] = []
    for item in raw.split(","):
        name = item.strip()
        if name and name not in models:
            models.append(name)
    return tuple(models) or DEFAULT_MODELS


def _parse_timeout(raw: Optional[str]) -> Optional[float]:
    if raw is None or not raw.strip():
        return 60.0
    if raw.strip().lower() in ("0", "none", "off"):
        return None
    try:
        value = float(raw)
    except ValueError:
        return 60.0
    return value if value > 0 else None


def _parse_int(raw: Optional[str], default: int) -> int:
    try:
        value = int(raw) if raw else default
    except ValueError:
        return default
    return value if value > 0 else default


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Return an AppConfig instance with environment-aware settings."""
    env_path = Path(config_path) if config_path else Path(".env")
    _load_env_file(env_path)

    supported_models = _parse_models(os.getenv("DESCRIPTION_MODELS"))
    default_model = os.getenv("DEFAULT_MODEL", "gpt-4o-mini").strip()
    if default_model not in supported_models:
        default_model = supported_models[0]

    metadata: dict[str, Any] = {}
    server_name = os.getenv("SERVER_NAME")
    server_port = os.getenv("SERVER_PORT")
    if server_name:
        metadata["server_name"] = server_name
    if server_port:
        metadata["server_port"] = _parse_int(server_port, 7860)

    return AppConfig(
        api_url=os.getenv("DESCRIPTION_API_URL", DEFAULT_API_URL).strip() or DEFAULT_API_URL,
        supported_models=supported_models,
        default_model=default_model,
        request_timeout=_parse_timeout(os.getenv("REQUEST_TIMEOUT")),
        max_prompt_length=_parse_int(os.getenv("MAX_PROMPT_LENGTH"), 500),
        assets_dir=Path(os.getenv("ASSETS_DIR", "assets")).expanduser(),
        log_dir=Path(os.getenv("LOG_DIR", "logs")).expanduser(),
        metadata=metadata,
    )
