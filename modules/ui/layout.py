"""Gradio layout for the image description client."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Optional

try:
    import gradio as gr
except ImportError:  # pragma: no cover
    gr = None  # type: ignore

from config.settings import AppConfig
from modules.session.prompt_presets import PromptPresetRegistry
from modules.ui.callbacks import EMPTY_HISTORY_TEXT, DescriptionSession, build_callbacks

GENERATE_LABEL = "Generate Description"
PENDING_LABEL = "Generating..."

COPY_TO_CLIPBOARD_JS = """
(text) => {
    if (text && navigator.clipboard) {
        navigator.clipboard.writeText(text).catch(() => {});
    }
    return text;
}
"""


def _load_preset_registry(config: AppConfig) -> PromptPresetRegistry:
    registry = PromptPresetRegistry()
    registry.load_from_file(Path(config.assets_dir) / "prompts.json")
    return registry


def build_image_input() -> Any:
    """Upload component that hands callbacks the uploaded file as-is.

    ``image_mode=None`` keeps Gradio from converting and re-saving uploads
    whose pixel mode is not RGB (RGBA, palette, grayscale, CMYK).
    """
    return gr.Image(
        label="Drag & drop your image here, or browse files",
        type="filepath",
        image_mode=None,
        sources=["upload", "clipboard"],
    )


def build_app(config: AppConfig) -> Any:
    """Compose and return the Gradio application."""
    if gr is None:
        raise RuntimeError("Gradio is not installed; install the project dependencies first.")

    presets = _load_preset_registry(config)
    callbacks_map = build_callbacks(config, presets=presets)

    def _submit(
        session: Optional[DescriptionSession],
        image_path: Optional[str],
        prompt: Optional[str],
        model: str,
    ) -> tuple[DescriptionSession, str, str, Any]:
        session, error, history_html, choices = callbacks_map["on_submit"](
            session, image_path, prompt, model
        )
        selected = choices[0][1] if choices else None
        return session, error, history_html, gr.update(choices=choices, value=selected)

    def _set_pending() -> Any:
        return gr.update(value=PENDING_LABEL, interactive=False)

    def _set_ready() -> Any:
        return gr.update(value=GENERATE_LABEL, interactive=True)

    with gr.Blocks(title="ProductVision") as demo:
        gr.Markdown("## ProductVision")
        session = gr.State(None)

        with gr.Row():
            # Upload + prompt
            with gr.Column():
                image = build_image_input()
                prompt = gr.Textbox(
                    label="Prompt Input",
                    lines=5,
                    max_length=config.max_prompt_length,
                    placeholder="Enter your prompt here...",
                )
                counter = gr.Markdown(f"0 / {config.max_prompt_length}")
                with gr.Row():
                    preset_buttons = [
                        (gr.Button(preset.label, size="sm"), preset.name)
                        for preset in presets.list_presets()
                    ]
                model_select = gr.Dropdown(
                    label="Select Model",
                    choices=list(config.supported_models),
                    value=config.default_model,
                )
                error_text = gr.Markdown("", elem_classes=["error-text"])
                submit_btn = gr.Button(GENERATE_LABEL, variant="primary")

            # Generated descriptions
            with gr.Column():
                gr.Markdown("### AI Generated Descriptions")
                history_html = gr.HTML(f'<p class="empty-state">{EMPTY_HISTORY_TEXT}</p>')
                with gr.Row():
                    copy_select = gr.Dropdown(label="Description", choices=[], value=None)
                    copy_btn = gr.Button("Copy", size="sm")
                copy_status = gr.Markdown("")
                copy_buffer = gr.Textbox(visible=False)

        gr.Markdown(f"© {datetime.now().year} ProductVision. All rights reserved.")

        image.change(
            fn=callbacks_map["on_image_change"],
            inputs=[session, image],
            outputs=[session, error_text],
        )
        prompt.change(
            fn=callbacks_map["on_prompt_change"],
            inputs=[session, prompt],
            outputs=[session, counter],
        )
        for button, preset_name in preset_buttons:
            button.click(
                fn=callbacks_map["on_apply_preset"],
                inputs=[session, gr.State(preset_name)],
                outputs=[session, prompt, counter],
            )
        model_select.change(
            fn=callbacks_map["on_model_change"],
            inputs=[session, model_select],
            outputs=[session, error_text],
        )

        submit_btn.click(fn=_set_pending, outputs=submit_btn, queue=False).then(
            fn=_submit,
            inputs=[session, image, prompt, model_select],
            outputs=[session, error_text, history_html, copy_select],
        ).then(fn=_set_ready, outputs=submit_btn, queue=False)

        copy_btn.click(
            fn=callbacks_map["on_copy"],
            inputs=[session, copy_select],
            outputs=[session, copy_buffer, copy_status],
        ).then(fn=None, inputs=[copy_buffer], outputs=[copy_buffer], js=COPY_TO_CLIPBOARD_JS)

    return demo
