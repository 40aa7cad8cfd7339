"""Preset storage for LofiTUI."""
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Optional

from .logging_utils import get_logger

CONFIG_DIR_NAME = "lofitui"
CONFIG_FILE_NAME = "config.json"
CONFIG_HOME_ENV = "XDG_CONFIG_HOME"

DIRECTORY_MODE = 0o755
FILE_MODE = 0o644

log = get_logger(__name__)


class ConfigError(Exception):
    """Base class for configuration storage failures."""


class ConfigReadError(ConfigError, OSError):
    """The configuration file exists but could not be read."""


class ConfigParseError(ConfigError, ValueError):
    """The configuration file does not contain a valid preset document."""


class ConfigWriteError(ConfigError, OSError):
    """The configuration could not be written to disk."""


@dataclass(frozen=True, slots=True)
class StreamEntry:
    """A named stream preset."""

    name: str
    url: str

    def as_dict(self) -> dict[str, str]:
        return {"name": self.name, "url": self.url}


@dataclass(frozen=True, slots=True)
class Configuration:
    """Ordered preset collection; display order is insertion order."""

    entries: tuple[StreamEntry, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def append(self, entry: StreamEntry) -> "Configuration":
        """Return a copy with *entry* added at the end."""

        return Configuration((*self.entries, entry))

    def replace_at(self, index: int, entry: StreamEntry) -> "Configuration":
        """Return a copy with the entry at *index* overwritten."""

        if not 0 <= index < len(self.entries):
            raise IndexError(f"preset index {index} out of range")
        entries = list(self.entries)
        entries[index] = entry
        return Configuration(tuple(entries))

    def remove_at(self, index: int) -> "Configuration":
        """Return a copy without the entry at *index*."""

        if not 0 <= index < len(self.entries):
            raise IndexError(f"preset index {index} out of range")
        return Configuration(self.entries[:index] + self.entries[index + 1 :])

    def as_dict(self) -> dict[str, list[dict[str, str]]]:
        return {"presets": [entry.as_dict() for entry in self.entries]}


_DEFAULT_PRESETS: tuple[tuple[str, str], ...] = (
    ("Lofi Girl - Study", "https://www.youtube.com/watch?v=jfKfPfyJRdk"),
    ("Lofi Girl - Sleep", "https://www.youtube.com/watch?v=DWcJFNfaw9c"),
    ("Lofi Girl - Jazz", "https://www.youtube.com/watch?v=HuFYqnbVbzY"),
    ("Synthwave Radio", "https://www.youtube.com/watch?v=4xDzrJKXOOY"),
    ("Chillhop Music", "https://www.youtube.com/watch?v=5yx6BWlEVcY"),
    ("The Bootleg Boy", "https://www.youtube.com/watch?v=FWjZ0x2M8og"),
    ("Dreamhop Music", "https://www.youtube.com/live/D5bqo8lcny4"),
    ("Lofi Geek", "https://www.youtube.com/watch?v=1tJ8sc8I4z0"),
    ("STEEZYASFUCK", "https://www.youtube.com/watch?v=S_MOd40zlYU"),
    ("Homework Radio", "https://www.youtube.com/watch?v=lTRiuFIWV54"),
)


def default_configuration() -> Configuration:
    """Return the bundled preset list."""

    return Configuration(tuple(StreamEntry(name, url) for name, url in _DEFAULT_PRESETS))


def config_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Return the directory holding ``config.json``.

    ``$XDG_CONFIG_HOME/lofitui`` when the variable is set, otherwise
    ``~/.config/lofitui``.
    """

    env = os.environ if environ is None else environ
    config_home = env.get(CONFIG_HOME_ENV)
    base = Path(config_home) if config_home else Path.home() / ".config"
    return base / CONFIG_DIR_NAME


def config_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Return the full path of the configuration file."""

    return config_dir(environ) / CONFIG_FILE_NAME


def _parse_entries(raw_presets: Iterable[object]) -> list[StreamEntry]:
    entries: list[StreamEntry] = []
    for position, entry in enumerate(raw_presets):
        if not isinstance(entry, dict):
            log.warning("Skipping preset #%d: expected an object", position + 1)
            continue
        name = entry.get("name")
        url = entry.get("url")
        if not isinstance(name, str) or not isinstance(url, str):
            log.warning(
                "Skipping preset #%d with missing fields (name present: %s, url present: %s)",
                position + 1,
                isinstance(name, str),
                isinstance(url, str),
            )
            continue
        entries.append(StreamEntry(name=name, url=url))
    return entries


def load_config(path: Optional[Path] = None) -> Configuration:
    """Load presets from *path*, or return the defaults when it is missing."""

    config_file = path or config_path()
    if not config_file.exists():
        log.info("Configuration file missing at %s; using defaults", config_file)
        return default_configuration()
    log.debug("Loading configuration from %s", config_file)
    try:
        raw = config_file.read_text(encoding="utf8")
    except UnicodeDecodeError as exc:
        raise ConfigParseError(f"failed to parse config: {exc}") from exc
    except OSError as exc:
        raise ConfigReadError(f"failed to read config: {exc}") from exc
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise ConfigParseError(f"failed to parse config: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigParseError("failed to parse config: expected a JSON object")
    raw_presets = data.get("presets")
    if raw_presets is None:
        raw_presets = []
    if not isinstance(raw_presets, list):
        raise ConfigParseError("failed to parse config: 'presets' must be a list")
    entries = _parse_entries(raw_presets)
    log.info("Loaded %d preset(s) from %s", len(entries), config_file)
    return Configuration(tuple(entries))


def dump_config(config: Configuration) -> str:
    """Serialize *config* the way it is stored on disk."""

    return json.dumps(config.as_dict(), indent=2, ensure_ascii=False)


def save_config(config: Configuration, path: Optional[Path] = None) -> None:
    """Persist *config* to *path*, replacing the file contents in full."""

    config_file = path or config_path()
    log.debug("Writing configuration with %d preset(s) to %s", len(config), config_file)
    payload = dump_config(config)
    try:
        config_file.parent.mkdir(mode=DIRECTORY_MODE, parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigWriteError(f"failed to create config directory: {exc}") from exc
    try:
        fd = os.open(config_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf8") as handle:
            handle.write(payload)
    except OSError as exc:
        raise ConfigWriteError(f"failed to write config: {exc}") from exc
    log.info("Configuration saved to %s", config_file)


def load_or_default_config(path: Optional[Path] = None) -> Configuration:
    """Load presets for start-up, falling back to the defaults on any error."""

    try:
        return load_config(path)
    except ConfigError as exc:
        log.warning("Could not load configuration (%s); restoring defaults", exc)
    config = default_configuration()
    try:
        save_config(config, path)
    except ConfigError as exc:
        log.warning("Could not save default configuration: %s", exc)
    return config


__all__ = [
    "CONFIG_DIR_NAME",
    "CONFIG_FILE_NAME",
    "ConfigError",
    "ConfigParseError",
    "ConfigReadError",
    "ConfigWriteError",
    "Configuration",
    "StreamEntry",
    "config_dir",
    "config_path",
    "default_configuration",
    "dump_config",
    "load_config",
    "load_or_default_config",
    "save_config",
]
