"""Application entry point for the ProductVision description client."""

from __future__ import annotations

import locale
import logging
from typing import Optional

from config.settings import load_config
from modules.ui.layout import build_app
from modules.utils.logging import setup_logging


def _use_system_time_locale(logger: logging.Logger) -> None:
    """Switch LC_TIME to the user's locale so history timestamps use its time format."""
    try:
        locale.setlocale(locale.LC_TIME, "")
    except locale.Error as exc:
        logger.warning("Keeping the default time locale: %s", exc)


def main(config_path: Optional[str] = None) -> None:
    """Load configuration and launch the Gradio interface."""
    config = load_config(config_path)
    logger = setup_logging(config)
    _use_system_time_locale(logger)
    logger.info("Description endpoint: %s", config.api_url)

    app = build_app(config)
    app.queue()
    app.launch(
        server_name=config.metadata.get("server_name"),
        server_port=config.metadata.get("server_port"),
        share=False,
        inbrowser=False,
    )


if __name__ == "__main__":
    main()
