"""Textual application hosting the LofiTUI menu."""
from __future__ import annotations

from functools import partial
from pathlib import Path
from typing import Optional

try:
    from textual import events
    from textual.app import App, ComposeResult, SuspendNotSupported
    from textual.binding import Binding
    from textual.message import Message
    from textual.timer import Timer
    from textual.widgets import Static
except ModuleNotFoundError as exc:  # pragma: no cover - dependency guard
    raise ModuleNotFoundError(
        "The 'textual' package is required to run lofitui. "
        "Install dependencies with 'pip install -e .[test]' or 'pip install lofitui'."
    ) from exc

from rich.spinner import Spinner

from .config import ConfigError, Configuration, config_path, save_config
from .logging_utils import detach_console_logging, get_logger
from .menu import (
    Effect,
    Event,
    Exit,
    KeyPressed,
    MenuModel,
    PersistConfiguration,
    PlaybackEnded,
    PlayStream,
    ResolutionFailed,
    Resized,
    ResolveStream,
    StreamResolved,
    TextPasted,
    View,
    update,
)
from .player import ResolutionError, PlayerLaunchError, StreamBridge
from .themes import CUSTOM_THEMES, DEFAULT_THEME_NAME, SPINNER
from .view import render_model

log = get_logger(__name__)


class MenuMessage(Message):
    """Carries a menu event into the app's message queue.

    Worker threads use this to hand results back; ``post_message`` is safe to
    call from any thread.
    """

    def __init__(self, event: Event) -> None:
        super().__init__()
        self.event = event


class MenuView(Static):
    """Shows whatever the active menu state renders."""


DEFAULT_CSS = """
Screen {
    layout: vertical;
    overflow: hidden;
}

#menu {
    width: 1fr;
    height: 1fr;
}
"""


class LofiApp(App[None]):
    """Full-screen stream picker."""

    CSS = DEFAULT_CSS
    ENABLE_COMMAND_PALETTE = False
    SPINNER_INTERVAL = 1 / 12
    # These keys would otherwise be claimed by Textual's own bindings.
    BINDINGS = [
        Binding("ctrl+c", "forward_key('ctrl+c')", "Quit", show=False, priority=True),
        Binding("ctrl+q", "forward_key('ctrl+q')", "Quit", show=False, priority=True),
        Binding("escape", "forward_key('escape')", "Back", show=False, priority=True),
        Binding("tab", "forward_key('tab')", "Next field", show=False, priority=True),
        Binding("shift+tab", "forward_key('shift+tab')", "Previous field", show=False, priority=True),
    ]

    def _register_custom_themes(self) -> None:
        for theme in CUSTOM_THEMES.values():
            self.register_theme(theme)

    def _apply_requested_theme(self, requested: Optional[str]) -> None:
        preferred = requested or DEFAULT_THEME_NAME
        if self.get_theme(preferred) is None:
            log.warning(
                "Requested theme '%s' is unavailable; falling back to %s",
                preferred,
                DEFAULT_THEME_NAME,
            )
            preferred = DEFAULT_THEME_NAME
        self.theme = preferred

    def __init__(
        self,
        configuration: Configuration,
        *,
        bridge: Optional[StreamBridge] = None,
        config_path: Optional[Path] = None,
        theme: Optional[str] = None,
    ) -> None:
        super().__init__()
        self._register_custom_themes()
        self._apply_requested_theme(theme)
        self._model = MenuModel.initial(configuration)
        self._bridge = bridge or StreamBridge()
        self._config_path = config_path
        self._spinner = Spinner("dots", style=SPINNER)
        self._spinner_timer: Optional[Timer] = None
        log.info(
            "LofiApp initialized with %d preset(s); config path=%s",
            len(configuration),
            self._config_path or "default",
        )

    @property
    def model(self) -> MenuModel:
        return self._model

    def compose(self) -> ComposeResult:
        yield MenuView(id="menu")

    def on_mount(self) -> None:
        log.debug("Application mounted")
        detach_console_logging()
        self._spinner_timer = self.set_interval(self.SPINNER_INTERVAL, self._refresh_view, pause=True)
        self.apply_event(Resized(self.size.width, self.size.height))

    def on_resize(self, event: events.Resize) -> None:
        self.apply_event(Resized(event.size.width, event.size.height))

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        self.apply_event(KeyPressed(event.key, event.character))

    def on_paste(self, event: events.Paste) -> None:
        event.stop()
        self.apply_event(TextPasted(event.text))

    def on_menu_message(self, message: MenuMessage) -> None:
        self.apply_event(message.event)

    def action_forward_key(self, key: str) -> None:
        self.apply_event(KeyPressed(key))

    def apply_event(self, event: Event) -> None:
        """Feed *event* through the state machine and apply its effects."""

        transition = update(self._model, event)
        self._model = transition.model
        for effect in transition.effects:
            self._apply_effect(effect)
        self._update_spinner_timer()
        self._refresh_view()

    def _apply_effect(self, effect: Effect) -> None:
        if isinstance(effect, PersistConfiguration):
            self._persist(effect.configuration)
        elif isinstance(effect, ResolveStream):
            self._start_resolution(effect)
        elif isinstance(effect, PlayStream):
            self._play_stream(effect)
        elif isinstance(effect, Exit):
            log.info("Exiting application")
            self.exit()

    def _persist(self, configuration: Configuration) -> None:
        try:
            save_config(configuration, self._config_path or config_path())
        except ConfigError as exc:
            log.error("Failed to save configuration: %s", exc)

    def _start_resolution(self, effect: ResolveStream) -> None:
        self.run_worker(
            partial(self._resolve_in_thread, effect),
            name=f"resolve:{effect.title}",
            group="resolve",
            thread=True,
            exclusive=True,
            exit_on_error=False,
        )

    def _resolve_in_thread(self, effect: ResolveStream) -> None:
        try:
            stream_url = self._bridge.resolve(effect.url)
        except ResolutionError as exc:
            self.post_message(MenuMessage(ResolutionFailed(effect.title, str(exc))))
        except Exception as exc:  # pragma: no cover - unexpected resolver failure
            log.exception("Unexpected error resolving %s", effect.title)
            self.post_message(MenuMessage(ResolutionFailed(effect.title, str(exc))))
        else:
            log.info("Resolved stream for %s", effect.title)
            self.post_message(MenuMessage(StreamResolved(effect.title, stream_url)))

    def _play_stream(self, effect: PlayStream) -> None:
        try:
            with self.suspend():
                self._bridge.play(effect.url)
        except SuspendNotSupported:
            log.warning("Terminal cannot be handed to the player; skipping %s", effect.title)
        except PlayerLaunchError as exc:
            log.error("Failed to launch player for %s: %s", effect.title, exc)
        finally:
            self.post_message(MenuMessage(PlaybackEnded(effect.title)))

    def _update_spinner_timer(self) -> None:
        timer = self._spinner_timer
        if timer is None:
            return
        if self._model.view is View.LOADING:
            timer.resume()
        else:
            timer.pause()

    def _refresh_view(self) -> None:
        try:
            menu_view = self.query_one("#menu", MenuView)
        except Exception:  # pragma: no cover - only before compose
            return
        menu_view.update(render_model(self._model, self._spinner))


__all__ = ["LofiApp", "MenuMessage", "MenuView"]
