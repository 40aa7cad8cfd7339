"""Menu state machine.

Every UI state is its own frozen dataclass carrying only the data that state
needs, and :func:`update` maps ``(model, event)`` to a new model plus the
side effects the host application must perform. Nothing in this module
touches the terminal, the file system or subprocesses.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import ClassVar, Optional, Union

from .config import Configuration, StreamEntry, default_configuration
from .logging_utils import get_logger
from .selection import PresetList

log = get_logger(__name__)

CUSTOM_STREAM_TITLE = "Custom Stream"

QUIT_KEYS = frozenset({"q", "ctrl+c", "ctrl+q"})
YES_KEYS = frozenset({"y", "Y", "shift+y"})
NO_KEYS = frozenset({"n", "N", "shift+n", "escape"})
TAB_KEYS = frozenset({"tab", "shift+tab"})


class View(Enum):
    """Identifies which handler and render path are active."""

    MAIN_MENU = "main_menu"
    CUSTOM_URL = "custom_url"
    QUIT_CONFIRM = "quit_confirm"
    LOADING = "loading"
    MANAGE_PRESETS = "manage_presets"
    ADD_PRESET = "add_preset"
    EDIT_PRESET = "edit_preset"
    DELETE_CONFIRM = "delete_confirm"
    RESTORE_DEFAULTS_CONFIRM = "restore_defaults_confirm"


class Field(Enum):
    NAME = "name"
    URL = "url"


@dataclass(frozen=True, slots=True)
class PresetForm:
    """Name/URL buffers for the add and edit dialogs."""

    name: str = ""
    url: str = ""
    focus: Field = Field.NAME

    def toggle_focus(self) -> "PresetForm":
        return replace(self, focus=Field.URL if self.focus is Field.NAME else Field.NAME)

    @property
    def focused_text(self) -> str:
        return self.name if self.focus is Field.NAME else self.url

    def with_focused_text(self, text: str) -> "PresetForm":
        if self.focus is Field.NAME:
            return replace(self, name=text)
        return replace(self, url=text)

    def submission(self) -> Optional[StreamEntry]:
        """Return the trimmed entry, or ``None`` when a field is blank."""

        name = self.name.strip()
        url = self.url.strip()
        if not name or not url:
            return None
        return StreamEntry(name=name, url=url)


@dataclass(frozen=True, slots=True)
class MainMenu:
    view: ClassVar[View] = View.MAIN_MENU


@dataclass(frozen=True, slots=True)
class CustomURLEntry:
    view: ClassVar[View] = View.CUSTOM_URL
    text: str = ""


@dataclass(frozen=True, slots=True)
class QuitConfirm:
    view: ClassVar[View] = View.QUIT_CONFIRM


@dataclass(frozen=True, slots=True)
class Loading:
    view: ClassVar[View] = View.LOADING
    title: str = ""


@dataclass(frozen=True, slots=True)
class ManagePresets:
    view: ClassVar[View] = View.MANAGE_PRESETS


@dataclass(frozen=True, slots=True)
class AddPreset:
    view: ClassVar[View] = View.ADD_PRESET
    form: PresetForm = field(default_factory=PresetForm)


@dataclass(frozen=True, slots=True)
class EditPreset:
    view: ClassVar[View] = View.EDIT_PRESET
    index: int = 0
    form: PresetForm = field(default_factory=PresetForm)


@dataclass(frozen=True, slots=True)
class DeleteConfirm:
    view: ClassVar[View] = View.DELETE_CONFIRM
    index: int = 0
    name: str = ""


@dataclass(frozen=True, slots=True)
class RestoreDefaultsConfirm:
    view: ClassVar[View] = View.RESTORE_DEFAULTS_CONFIRM


State = Union[
    MainMenu,
    CustomURLEntry,
    QuitConfirm,
    Loading,
    ManagePresets,
    AddPreset,
    EditPreset,
    DeleteConfirm,
    RestoreDefaultsConfirm,
]


# Events ---------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class KeyPressed:
    key: str
    character: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Resized:
    width: int
    height: int


@dataclass(frozen=True, slots=True)
class StreamResolved:
    title: str
    url: str


@dataclass(frozen=True, slots=True)
class ResolutionFailed:
    title: str
    reason: str = ""


@dataclass(frozen=True, slots=True)
class TextPasted:
    text: str


@dataclass(frozen=True, slots=True)
class PlaybackEnded:
    title: str = ""


Event = Union[KeyPressed, TextPasted, Resized, StreamResolved, ResolutionFailed, PlaybackEnded]


# Effects --------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PersistConfiguration:
    configuration: Configuration


@dataclass(frozen=True, slots=True)
class ResolveStream:
    title: str
    url: str


@dataclass(frozen=True, slots=True)
class PlayStream:
    title: str
    url: str


@dataclass(frozen=True, slots=True)
class Exit:
    pass


Effect = Union[PersistConfiguration, ResolveStream, PlayStream, Exit]


@dataclass(frozen=True, slots=True)
class MenuModel:
    """Everything the menu needs to handle an event and render itself."""

    configuration: Configuration
    presets: PresetList
    state: State = field(default_factory=MainMenu)
    width: int = 0
    height: int = 0
    ready: bool = False
    quitting: bool = False

    @classmethod
    def initial(cls, configuration: Configuration) -> "MenuModel":
        return cls(configuration=configuration, presets=PresetList.from_entries(configuration.entries))

    @property
    def view(self) -> View:
        return self.state.view

    @property
    def list_height(self) -> int:
        """Rows available to the preset list below the title and help lines."""

        return max(self.height - 4, 5)


@dataclass(frozen=True, slots=True)
class Transition:
    model: MenuModel
    effects: tuple[Effect, ...] = ()


def _stay(model: MenuModel) -> Transition:
    return Transition(model)


def _go(model: MenuModel, state: State, *effects: Effect) -> Transition:
    return Transition(replace(model, state=state), effects)


def _with_configuration(model: MenuModel, configuration: Configuration, state: State) -> Transition:
    """Swap in *configuration*, refresh the list and request a save."""

    updated = replace(
        model,
        configuration=configuration,
        presets=model.presets.replace(configuration.entries),
        state=state,
    )
    return Transition(updated, (PersistConfiguration(configuration),))


def _start_loading(model: MenuModel, title: str, url: str) -> Transition:
    log.info("Resolving stream %s", title)
    return _go(model, Loading(title=title), ResolveStream(title=title, url=url))


# Text editing ---------------------------------------------------------------


def _is_printable(event: KeyPressed) -> bool:
    character = event.character
    return bool(character) and len(character) == 1 and character.isprintable()


def edit_text(text: str, event: KeyPressed) -> str:
    """Apply a line-editing key to *text*."""

    if event.key == "backspace":
        return text[:-1]
    if event.key == "ctrl+u":
        return ""
    if event.key == "ctrl+w":
        trimmed = text.rstrip()
        cut = trimmed.rfind(" ")
        return trimmed[: cut + 1] if cut >= 0 else ""
    if _is_printable(event):
        return text + (event.character or "")
    return text


def _handle_paste(model: MenuModel, event: TextPasted) -> Transition:
    lines = event.text.strip().splitlines()
    # Fields are single-line; keep the first line of the paste.
    text = "".join(ch for ch in lines[0] if ch.isprintable()) if lines else ""
    if not text:
        return _stay(model)
    state = model.state
    if isinstance(state, CustomURLEntry):
        return _go(model, CustomURLEntry(text=state.text + text))
    if isinstance(state, (AddPreset, EditPreset)):
        form = state.form
        return _go(model, replace(state, form=form.with_focused_text(form.focused_text + text)))
    return _stay(model)


def _navigate(model: MenuModel, key: str) -> Transition:
    presets = model.presets
    per_page = PresetList.per_page(model.list_height)
    if key in ("up", "k"):
        presets = presets.move_up()
    elif key in ("down", "j"):
        presets = presets.move_down()
    elif key in ("pageup", "left", "h"):
        presets = presets.page_up(per_page)
    elif key in ("pagedown", "right", "l"):
        presets = presets.page_down(per_page)
    elif key in ("home", "g"):
        presets = presets.first()
    elif key in ("end", "G", "shift+g"):
        presets = presets.last()
    else:
        return _stay(model)
    return Transition(replace(model, presets=presets))


# State handlers -------------------------------------------------------------


def _main_menu(model: MenuModel, event: KeyPressed) -> Transition:
    key = event.key
    if key in QUIT_KEYS:
        return _go(model, QuitConfirm())
    if key == "c":
        return _go(model, CustomURLEntry())
    if key == "m":
        return _go(model, ManagePresets())
    if key == "enter":
        entry = model.presets.selected()
        if entry is None:
            return _stay(model)
        return _start_loading(model, entry.name, entry.url)
    return _navigate(model, key)


def _custom_url(model: MenuModel, state: CustomURLEntry, event: KeyPressed) -> Transition:
    key = event.key
    if key in ("escape", "ctrl+c"):
        return _go(model, MainMenu())
    if key == "enter":
        url = state.text.strip()
        if not url:
            return _stay(model)
        return _start_loading(model, CUSTOM_STREAM_TITLE, url)
    text = edit_text(state.text, event)
    if text == state.text:
        return _stay(model)
    return _go(model, CustomURLEntry(text=text))


def _quit_confirm(model: MenuModel, event: KeyPressed) -> Transition:
    if event.key in YES_KEYS:
        log.info("Quit confirmed")
        return Transition(replace(model, quitting=True), (Exit(),))
    if event.key in NO_KEYS:
        return _go(model, MainMenu())
    return _stay(model)


def _manage_presets(model: MenuModel, event: KeyPressed) -> Transition:
    key = event.key
    if key == "escape":
        return _go(model, MainMenu())
    if key == "a":
        return _go(model, AddPreset())
    if key == "r":
        return _go(model, RestoreDefaultsConfirm())
    entry = model.presets.selected()
    if key in ("e", "d", "x", "enter"):
        if entry is None:
            return _stay(model)
        index = model.presets.index
        if key == "e":
            return _go(model, EditPreset(index=index, form=PresetForm(name=entry.name, url=entry.url)))
        if key in ("d", "x"):
            return _go(model, DeleteConfirm(index=index, name=entry.name))
        return _start_loading(model, entry.name, entry.url)
    return _navigate(model, key)


def _form_key(
    model: MenuModel,
    state: Union[AddPreset, EditPreset],
    event: KeyPressed,
) -> Transition:
    key = event.key
    form = state.form
    if key == "escape":
        return _go(model, ManagePresets())
    if key in TAB_KEYS:
        return _go(model, replace(state, form=form.toggle_focus()))
    if key == "enter":
        entry = form.submission()
        if entry is None:
            return _stay(model)
        if isinstance(state, AddPreset):
            log.info("Adding preset %s", entry.name)
            return _with_configuration(model, model.configuration.append(entry), ManagePresets())
        if not 0 <= state.index < len(model.configuration):
            return _stay(model)
        log.info("Updating preset #%d to %s", state.index + 1, entry.name)
        return _with_configuration(
            model, model.configuration.replace_at(state.index, entry), ManagePresets()
        )
    text = edit_text(form.focused_text, event)
    if text == form.focused_text:
        return _stay(model)
    return _go(model, replace(state, form=form.with_focused_text(text)))


def _delete_confirm(model: MenuModel, state: DeleteConfirm, event: KeyPressed) -> Transition:
    if event.key in YES_KEYS:
        if 0 <= state.index < len(model.configuration):
            log.info("Deleting preset #%d (%s)", state.index + 1, state.name)
            return _with_configuration(
                model, model.configuration.remove_at(state.index), ManagePresets()
            )
        return _go(model, ManagePresets())
    if event.key in NO_KEYS:
        return _go(model, ManagePresets())
    return _stay(model)


def _restore_confirm(model: MenuModel, event: KeyPressed) -> Transition:
    if event.key in YES_KEYS:
        log.info("Restoring default presets")
        return _with_configuration(model, default_configuration(), ManagePresets())
    if event.key in NO_KEYS:
        return _go(model, ManagePresets())
    return _stay(model)


def _handle_key(model: MenuModel, event: KeyPressed) -> Transition:
    state = model.state
    if isinstance(state, MainMenu):
        return _main_menu(model, event)
    if isinstance(state, CustomURLEntry):
        return _custom_url(model, state, event)
    if isinstance(state, QuitConfirm):
        return _quit_confirm(model, event)
    if isinstance(state, ManagePresets):
        return _manage_presets(model, event)
    if isinstance(state, (AddPreset, EditPreset)):
        return _form_key(model, state, event)
    if isinstance(state, DeleteConfirm):
        return _delete_confirm(model, state, event)
    if isinstance(state, RestoreDefaultsConfirm):
        return _restore_confirm(model, event)
    # Loading: resolution cannot be interrupted.
    return _stay(model)


def update(model: MenuModel, event: Event) -> Transition:
    """Return the model and effects that follow from *event*."""

    if model.quitting:
        return _stay(model)
    if isinstance(event, Resized):
        return Transition(replace(model, width=event.width, height=event.height, ready=True))
    if isinstance(event, KeyPressed):
        return _handle_key(model, event)
    if isinstance(event, TextPasted):
        return _handle_paste(model, event)
    if isinstance(event, StreamResolved):
        if not isinstance(model.state, Loading):
            log.debug("Ignoring resolved stream for %s outside the loading view", event.title)
            return _stay(model)
        return Transition(model, (PlayStream(title=event.title, url=event.url),))
    if isinstance(event, ResolutionFailed):
        log.warning("Could not resolve %s: %s", event.title, event.reason)
        if not isinstance(model.state, Loading):
            return _stay(model)
        return _go(model, MainMenu())
    if isinstance(event, PlaybackEnded):
        log.info("Playback ended for %s", event.title or "stream")
        return _go(model, MainMenu())
    raise TypeError(f"unsupported menu event: {event!r}")


__all__ = [
    "AddPreset",
    "CUSTOM_STREAM_TITLE",
    "CustomURLEntry",
    "DeleteConfirm",
    "EditPreset",
    "Effect",
    "Event",
    "Exit",
    "Field",
    "KeyPressed",
    "Loading",
    "MainMenu",
    "ManagePresets",
    "MenuModel",
    "PersistConfiguration",
    "PlayStream",
    "PlaybackEnded",
    "PresetForm",
    "QuitConfirm",
    "ResolutionFailed",
    "ResolveStream",
    "Resized",
    "RestoreDefaultsConfirm",
    "State",
    "StreamResolved",
    "TextPasted",
    "Transition",
    "View",
    "edit_text",
    "update",
]
