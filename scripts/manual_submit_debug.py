"""One-off script for debugging a description request against a live endpoint."""

import argparse

from config.settings import load_config
from modules.ui.callbacks import build_callbacks
from modules.utils.logging import setup_logging


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("image", help="path of the image to describe")
    parser.add_argument("--prompt", default="Describe this image in detail.")
    parser.add_argument("--model", default=None, help="model identifier, defaults to DEFAULT_MODEL")
    args = parser.parse_args()

    # 1. Real configuration; DESCRIPTION_API_URL points at the endpoint
    config = load_config()
    setup_logging(config)
    callbacks = build_callbacks(config)

    # 2. Same path the UI takes when the button is pressed
    session = callbacks["new_session"]()
    session, error, _, _ = callbacks["on_submit"](
        session,
        args.image,
        args.prompt,
        args.model or config.default_model,
    )

    if error:
        print("Failed:", error)
        return
    for entry in session.history.all():
        print(f"[{entry.timestamp}] {entry.model}: {entry.text}")


if __name__ == "__main__":
    main()
