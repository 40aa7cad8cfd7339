"""Render the menu model as rich renderables."""
from __future__ import annotations

from typing import Optional

from rich import box
from rich.align import Align
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.spinner import Spinner
from rich.text import Text

from .menu import (
    AddPreset,
    CustomURLEntry,
    DeleteConfirm,
    EditPreset,
    Field,
    Loading,
    MainMenu,
    ManagePresets,
    MenuModel,
    PresetForm,
    QuitConfirm,
    RestoreDefaultsConfirm,
)
from .themes import ACCENT, DANGER, HINT, SPINNER, WARNING

MAIN_TITLE = "LofiTUI - Select a Stream"
MANAGE_TITLE = "Manage Presets"
MAIN_HELP = "m=manage presets • c=custom URL • q=quit"
MANAGE_HELP = "a=add • e=edit • d=delete • r=restore defaults • Enter=play • ESC=back"

CURSOR = "█"


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def _hint(message: str) -> Text:
    return Text(message, style=HINT)


def text_field(value: str, placeholder: str, *, focused: bool, width: int) -> Text:
    """Render a single-line input showing the tail of long values."""

    prompt = Text("> ", style=ACCENT if focused else HINT)
    if not value:
        if focused:
            prompt.append(CURSOR)
        prompt.append(placeholder, style=HINT)
        return prompt
    visible = max(width - 3, 1)
    shown = value if len(value) < visible else "…" + value[-(visible - 2) :]
    prompt.append(shown)
    if focused:
        prompt.append(CURSOR)
    return prompt


def _dialog(model: MenuModel, body: RenderableType, *, border: str, width: int) -> RenderableType:
    panel = Panel(body, box=box.ROUNDED, border_style=border, padding=(1, 2), width=width)
    return Align.center(panel, vertical="middle", height=max(model.height, 1))


def _list_view(model: MenuModel, title: str, help_text: str) -> RenderableType:
    lines = model.presets.render(title, model.width, model.list_height)
    return Group(*lines, Text(""), Text("  " + help_text, style=HINT))


def _custom_url(model: MenuModel, state: CustomURLEntry) -> RenderableType:
    width = _clamp(model.width - 10, 40, 80)
    body = Group(
        Text("Enter Custom YouTube URL"),
        Text(""),
        text_field(state.text, "Paste YouTube URL here", focused=True, width=width - 6),
        Text(""),
        _hint("Press Enter to play • ESC to cancel"),
    )
    return _dialog(model, body, border=ACCENT, width=width)


def _quit_confirm(model: MenuModel) -> RenderableType:
    width = _clamp(model.width - 20, 30, 50)
    body = Group(
        Text("Are you sure you want to quit?"),
        Text(""),
        _hint("Press Y to quit • N to cancel"),
    )
    return _dialog(model, body, border=DANGER, width=width)


def _loading(model: MenuModel, state: Loading, spinner: Spinner) -> RenderableType:
    spinner.text = Text(f"Loading {state.title}...")
    body = Group(spinner, Text(""), Text("Please wait while we fetch the stream"))
    return _dialog(model, body, border=SPINNER, width=50)


def _preset_form(model: MenuModel, title: str, form: PresetForm) -> RenderableType:
    width = _clamp(model.width - 10, 60, 80)
    field_width = width - 6
    body = Group(
        Text(title),
        Text(""),
        Text("Name:"),
        text_field(form.name, "Preset Name", focused=form.focus is Field.NAME, width=field_width),
        Text(""),
        Text("URL:"),
        text_field(form.url, "YouTube URL", focused=form.focus is Field.URL, width=field_width),
        Text(""),
        _hint("Press Enter to save • TAB to switch fields • ESC to cancel"),
    )
    return _dialog(model, body, border=ACCENT, width=width)


def _delete_confirm(model: MenuModel, state: DeleteConfirm) -> RenderableType:
    width = _clamp(model.width - 20, 40, 60)
    body = Group(
        Text(f"Delete preset '{state.name}'?"),
        Text(""),
        _hint("Press Y to confirm • N to cancel"),
    )
    return _dialog(model, body, border=DANGER, width=width)


def _restore_confirm(model: MenuModel) -> RenderableType:
    width = _clamp(model.width - 20, 50, 70)
    body = Group(
        Text("Restore Default Presets?"),
        Text(""),
        _hint("This will replace all current presets with the original 10 defaults."),
        Text(""),
        _hint("Press Y to confirm • N to cancel"),
    )
    return _dialog(model, body, border=WARNING, width=width)


def render_model(model: MenuModel, spinner: Optional[Spinner] = None) -> RenderableType:
    """Return the renderable for the active state.

    *spinner* is shared across frames so the loading animation advances.
    """

    if not model.ready:
        return Text("\n  Initializing...")
    state = model.state
    if isinstance(state, MainMenu):
        return _list_view(model, MAIN_TITLE, MAIN_HELP)
    if isinstance(state, ManagePresets):
        return _list_view(model, MANAGE_TITLE, MANAGE_HELP)
    if isinstance(state, CustomURLEntry):
        return _custom_url(model, state)
    if isinstance(state, QuitConfirm):
        return _quit_confirm(model)
    if isinstance(state, Loading):
        return _loading(model, state, spinner or Spinner("dots", style=SPINNER))
    if isinstance(state, AddPreset):
        return _preset_form(model, "Add New Preset", state.form)
    if isinstance(state, EditPreset):
        return _preset_form(model, "Edit Preset", state.form)
    if isinstance(state, DeleteConfirm):
        return _delete_confirm(model, state)
    if isinstance(state, RestoreDefaultsConfirm):
        return _restore_confirm(model)
    return Text("")


__all__ = ["MAIN_HELP", "MAIN_TITLE", "MANAGE_HELP", "MANAGE_TITLE", "render_model", "text_field"]
