"""Stream resolution and player spawning helpers."""
from __future__ import annotations

import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence

from .logging_utils import get_logger

RESOLVER_DEFAULT = "yt-dlp"
PLAYER_DEFAULT = "mpv"

RESOLVER_ENV = "LOFITUI_RESOLVER"
PLAYER_ENV = "LOFITUI_PLAYER"

DEFAULT_PLAYER_CANDIDATES: Sequence[str] = (PLAYER_DEFAULT,)

# mpv plugin exposing media keys over D-Bus; passed only when installed.
MPRIS_SCRIPT_PATH = Path("/usr/share/mpv/scripts/mpris.so")

PLAYER_FLAGS: Sequence[str] = ("--vo=tct", "--quiet")


log = get_logger(__name__)


class ResolutionError(RuntimeError):
    """The resolver could not produce a playable stream URL."""


class PlayerLaunchError(RuntimeError):
    """The media player could not be started."""


@dataclass(slots=True)
class PlayerCommand:
    """Describe a player invocation."""

    executable: str
    args: list[str]

    def as_sequence(self) -> list[str]:
        return [self.executable, *self.args]


def resolver_executable() -> str:
    return os.getenv(RESOLVER_ENV) or RESOLVER_DEFAULT


def build_resolver_command(url: str, executable: Optional[str] = None) -> list[str]:
    """Return the resolver invocation printing the best direct stream URL."""

    return [executable or resolver_executable(), "-f", "best", "-g", url]


def resolve_stream_url(url: str, *, executable: Optional[str] = None) -> str:
    """Return a directly playable URL for *url*.

    Raises :class:`ResolutionError` when the resolver cannot be executed,
    exits non-zero or prints nothing.
    """

    command = build_resolver_command(url, executable)
    log.info("Resolving stream URL with %s", command[0])
    log.debug("Resolver command: %s", command)
    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise ResolutionError(f"Failed to execute {command[0]}: {exc}") from exc
    if result.returncode != 0:
        output = (result.stderr or "").strip() or (result.stdout or "").strip()
        raise ResolutionError(f"{Path(command[0]).name} exited with {result.returncode}: {output}")
    lines = [line.strip() for line in (result.stdout or "").strip().splitlines() if line.strip()]
    if not lines:
        raise ResolutionError(f"{Path(command[0]).name} returned no stream URL for {url}")
    if len(lines) > 1:
        log.debug("Resolver returned %d URLs; using the first", len(lines))
    return lines[0]


def detect_player(
    preferred: Optional[str] = None,
    *,
    candidates: Iterable[str] = DEFAULT_PLAYER_CANDIDATES,
) -> Optional[str]:
    """Return the path to the first available player executable."""

    search_order: list[str] = []
    if preferred:
        log.debug("Preferred player requested: %s", preferred)
        search_order.append(str(preferred))
    for candidate in candidates:
        if candidate not in search_order:
            search_order.append(candidate)
    for executable in search_order:
        path = shutil.which(executable)
        if path:
            log.info("Selected player executable: %s (from candidate %s)", path, executable)
            return path
        log.debug("Player candidate %s not found on PATH", executable)
    return None


def build_player_command(stream_url: str, *, preferred: Optional[str] = None) -> PlayerCommand:
    """Construct the terminal-video player command for *stream_url*."""

    executable = detect_player(preferred or os.getenv(PLAYER_ENV))
    if executable is None:
        log.error("Unable to locate a media player")
        raise PlayerLaunchError(f"No media player found (looked for {PLAYER_DEFAULT})")
    args = list(PLAYER_FLAGS)
    if MPRIS_SCRIPT_PATH.exists():
        args.append(f"--script={MPRIS_SCRIPT_PATH}")
    args.append(stream_url)
    command = PlayerCommand(executable=executable, args=args)
    log.debug("Built player command: %s", command.as_sequence())
    return command


def play_stream(stream_url: str, *, preferred: Optional[str] = None) -> Optional[int]:
    """Run the player in the foreground and return its exit code."""

    command = build_player_command(stream_url, preferred=preferred)
    log.info("Launching player %s", command.executable)
    try:
        completed = subprocess.run(command.as_sequence(), check=False)
    except OSError as exc:
        raise PlayerLaunchError(f"Failed to execute {command.executable}: {exc}") from exc
    log.info("Player exited with code %s", completed.returncode)
    return completed.returncode


class StreamBridge:
    """Resolve and play streams through external programs."""

    def __init__(self, *, resolver: Optional[str] = None, player: Optional[str] = None) -> None:
        self.resolver = resolver
        self.player = player

    def resolve(self, url: str) -> str:
        return resolve_stream_url(url, executable=self.resolver)

    def play(self, stream_url: str) -> Optional[int]:
        return play_stream(stream_url, preferred=self.player)


__all__ = [
    "MPRIS_SCRIPT_PATH",
    "PLAYER_DEFAULT",
    "RESOLVER_DEFAULT",
    "PlayerCommand",
    "PlayerLaunchError",
    "ResolutionError",
    "StreamBridge",
    "build_player_command",
    "build_resolver_command",
    "detect_player",
    "play_stream",
    "resolve_stream_url",
]
