import json
import os
import stat
from pathlib import Path

import pytest

from lofitui.config import (
    ConfigParseError,
    ConfigReadError,
    ConfigWriteError,
    Configuration,
    StreamEntry,
    config_dir,
    config_path,
    default_configuration,
    dump_config,
    load_config,
    load_or_default_config,
    save_config,
)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path / "config.json")
    assert config == default_configuration()
    assert not (tmp_path / "config.json").exists()


def test_default_configuration_is_stable() -> None:
    first = default_configuration()
    second = default_configuration()
    assert first == second
    assert len(first) == 10
    assert first.entries[0] == StreamEntry(
        "Lofi Girl - Study", "https://www.youtube.com/watch?v=jfKfPfyJRdk"
    )
    assert first.entries[6].url == "https://www.youtube.com/live/D5bqo8lcny4"
    assert first.entries[-1].name == "Homework Radio"


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "lofitui" / "config.json"
    config = Configuration(
        (
            StreamEntry("Study", "https://example.com/study"),
            StreamEntry("Café Beats", "https://example.com/cafe"),
        )
    )
    save_config(config, path)
    assert load_config(path) == config

    first_write = path.read_text(encoding="utf8")
    save_config(load_config(path), path)
    assert path.read_text(encoding="utf8") == first_write


def test_save_config_writes_indented_presets_document(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    save_config(Configuration((StreamEntry("Test", "https://x/y"),)), path)
    raw = path.read_text(encoding="utf8")
    assert raw == (
        "{\n"
        '  "presets": [\n'
        "    {\n"
        '      "name": "Test",\n'
        '      "url": "https://x/y"\n'
        "    }\n"
        "  ]\n"
        "}"
    )
    assert json.loads(raw) == {"presets": [{"name": "Test", "url": "https://x/y"}]}


def test_save_config_overwrites_existing_file(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    save_config(default_configuration(), path)
    save_config(Configuration((StreamEntry("Only", "https://only"),)), path)
    assert json.loads(path.read_text(encoding="utf8"))["presets"] == [
        {"name": "Only", "url": "https://only"}
    ]


@pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
def test_save_config_creates_directories_with_expected_modes(tmp_path: Path) -> None:
    old_umask = os.umask(0o022)
    try:
        path = tmp_path / "nested" / "lofitui" / "config.json"
        save_config(default_configuration(), path)
    finally:
        os.umask(old_umask)
    assert stat.S_IMODE(path.parent.stat().st_mode) == 0o755
    assert stat.S_IMODE(path.stat().st_mode) == 0o644


def test_load_config_rejects_malformed_json(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf8")
    with pytest.raises(ConfigParseError):
        load_config(path)


@pytest.mark.parametrize("document", ["[]", '{"presets": {"name": "x"}}', '"text"'])
def test_load_config_rejects_unexpected_shapes(tmp_path: Path, document: str) -> None:
    path = tmp_path / "config.json"
    path.write_text(document, encoding="utf8")
    with pytest.raises(ConfigParseError):
        load_config(path)


def test_load_config_reports_unreadable_file(tmp_path: Path) -> None:
    # A directory in place of the file cannot be read as text.
    path = tmp_path / "config.json"
    path.mkdir()
    with pytest.raises(ConfigReadError):
        load_config(path)


def test_load_config_skips_incomplete_entries(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "presets": [
                    {"name": "Missing URL"},
                    "not an object",
                    {"name": "Valid", "url": "https://example.com/valid"},
                    {"name": 3, "url": "https://example.com/bad-name"},
                ]
            }
        ),
        encoding="utf8",
    )
    config = load_config(path)
    assert config.entries == (StreamEntry("Valid", "https://example.com/valid"),)


def test_load_config_without_presets_key_is_empty(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{}", encoding="utf8")
    assert load_config(path) == Configuration()


def test_save_config_reports_write_failure(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf8")
    with pytest.raises(ConfigWriteError):
        save_config(default_configuration(), blocker / "config.json")


def test_load_or_default_config_recovers_from_parse_error(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{broken", encoding="utf8")
    config = load_or_default_config(path)
    assert config == default_configuration()
    assert json.loads(path.read_text(encoding="utf8")) == default_configuration().as_dict()


def test_load_config_rejects_invalid_utf8(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_bytes(b'{"presets": [{"name": "\xff\xfe", "url": "u"}]}')
    with pytest.raises(ConfigParseError):
        load_config(path)
    assert load_or_default_config(path) == default_configuration()


def test_load_config_rejects_deeply_nested_json(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    depth = 200_000
    path.write_text('{"presets": ' + "[" * depth + "]" * depth + "}", encoding="utf8")
    with pytest.raises(ConfigParseError):
        load_config(path)
    assert load_or_default_config(path) == default_configuration()


def test_load_or_default_config_ignores_save_failure(tmp_path: Path) -> None:
    # Unreadable (directory) and unwritable at the same path.
    path = tmp_path / "config.json"
    path.mkdir()
    assert load_or_default_config(path) == default_configuration()


def test_config_dir_honours_xdg_config_home(tmp_path: Path) -> None:
    environ = {"XDG_CONFIG_HOME": str(tmp_path)}
    assert config_dir(environ) == tmp_path / "lofitui"
    assert config_path(environ) == tmp_path / "lofitui" / "config.json"


def test_config_dir_defaults_to_dot_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
    assert config_dir({}) == tmp_path / ".config" / "lofitui"
    assert config_dir({"XDG_CONFIG_HOME": ""}) == tmp_path / ".config" / "lofitui"


def test_configuration_mutations_return_new_values() -> None:
    base = Configuration((StreamEntry("A", "a"), StreamEntry("B", "b"), StreamEntry("C", "c")))
    assert base.append(StreamEntry("D", "d")).entries[-1] == StreamEntry("D", "d")
    assert base.replace_at(1, StreamEntry("X", "x")).entries[1] == StreamEntry("X", "x")
    assert [entry.name for entry in base.remove_at(0).entries] == ["B", "C"]
    assert [entry.name for entry in base.entries] == ["A", "B", "C"]
    with pytest.raises(IndexError):
        base.remove_at(3)


def test_dump_config_keeps_non_ascii() -> None:
    raw = dump_config(Configuration((StreamEntry("Café", "https://example.com"),)))
    assert "Café" in raw
