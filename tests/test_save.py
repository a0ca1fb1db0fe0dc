from __future__ import annotations

import errno
import io
import logging
from pathlib import Path

import pytest

from pysettings import GLOBAL_SECTION, MessageKind, Settings, SettingsIOError
from pysettings import core


def _load(path: Path) -> Settings:
    settings = Settings()
    settings.load(path)
    return settings


def test_save_without_changes_is_byte_identical(settings_file):
    before = settings_file.read_bytes()
    _load(settings_file).save()
    assert settings_file.read_bytes() == before


def test_save_rewrites_only_changed_line(settings_file):
    before = settings_file.read_text().splitlines()
    settings = _load(settings_file)
    settings.set(GLOBAL_SECTION, "bool_value", False)
    settings.save()
    after = settings_file.read_text().splitlines()
    assert after[1] == "bool_value = false"
    assert after[:1] + after[2:] == before[:1] + before[2:]


def test_save_keeps_trailing_comment(settings_file):
    settings = _load(settings_file)
    settings.set(GLOBAL_SECTION, "i64_value", -2000)
    settings.set("LOG", "enabled", False)
    settings.save()
    lines = settings_file.read_text().splitlines()
    assert lines[4] == "i64_value = -2000 # signed 64 bit"
    assert lines[11] == "enabled = false # logging switch"


def test_saved_values_load_back(settings_file):
    settings = _load(settings_file)
    settings.set(GLOBAL_SECTION, "string_value", "boh!!!")
    settings.set(GLOBAL_SECTION, "u64_value", 2**64 - 1, kind="u64")
    settings.save()
    fresh = _load(settings_file)
    assert fresh.get(GLOBAL_SECTION, "string_value", "").value == "boh!!!"
    assert fresh.get(GLOBAL_SECTION, "u64_value", 0).value == 2**64 - 1
    assert fresh == settings


def test_save_clears_pending_changes(settings_file):
    settings = _load(settings_file)
    settings.set(GLOBAL_SECTION, "bool_value", False)
    assert settings.has_changes
    settings.save()
    assert not settings.has_changes


def test_save_rereads_file_from_disk(settings_file):
    settings = _load(settings_file)
    text = settings_file.read_text().replace("# Settings used", "# Edited meanwhile, settings used")
    settings_file.write_text(text)
    settings.set("LOG", "path", "/tmp/other.log")
    settings.save()
    saved = settings_file.read_text()
    assert saved.startswith("# Edited meanwhile")
    assert "path = /tmp/other.log\n" in saved


def test_save_keeps_line_endings(tmp_path: Path):
    path = tmp_path / "crlf.ini"
    path.write_bytes(b"[S]\r\nkey = v\r\nlast = x")
    settings = _load(path)
    settings.set("S", "key", "w")
    settings.set("S", "last", "y")
    settings.save()
    assert path.read_bytes() == b"[S]\r\nkey = w\r\nlast = y"


def test_save_keeps_byte_order_mark(tmp_path: Path):
    path = tmp_path / "bom.ini"
    path.write_bytes("\ufeffkey = v # note\n".encode("utf-8"))
    settings = _load(path)
    settings.set(GLOBAL_SECTION, "key", "w")
    settings.save()
    assert path.read_bytes() == "\ufeffkey = w # note\n".encode("utf-8")


def test_save_on_unloaded_instance_does_nothing(tmp_path: Path):
    Settings().save()
    assert list(tmp_path.iterdir()) == []


def test_save_missing_file(settings_file):
    settings = _load(settings_file)
    settings_file.unlink()
    with pytest.raises(SettingsIOError) as info:
        settings.save()
    assert info.value.kind is MessageKind.OPENING_FILE_ERROR
    assert not settings_file.exists()


def test_save_skips_lines_past_end(settings_file, caplog):
    settings = _load(settings_file)
    settings_file.write_text("bool_value = true\n")
    settings.set("LOG", "path", "/tmp/x.log")
    settings.set(GLOBAL_SECTION, "bool_value", False)
    with caplog.at_level(logging.WARNING, logger="pysettings"):
        settings.save()
    assert "past the end of the file" in caplog.text
    # line 2 does not exist any more either, so nothing was patched
    assert settings_file.read_text() == "bool_value = true\n"


class _FullDisk(io.BytesIO):
    def write(self, data):
        raise OSError(errno.ENOSPC, "No space left on device")


def test_save_write_failure(settings_file, monkeypatch):
    settings = _load(settings_file)
    settings.set(GLOBAL_SECTION, "bool_value", False)
    real_open = open

    def fake_open(path, mode="r", *args, **kwargs):
        if "w" in mode:
            return _FullDisk()
        return real_open(path, mode, *args, **kwargs)

    monkeypatch.setattr(core, "open", fake_open, raising=False)
    with pytest.raises(SettingsIOError) as info:
        settings.save()
    assert info.value.kind is MessageKind.WRITING_FILE_ERROR
    assert str(info.value) == (
        f"Error writing file: '{settings_file}': 'No space left on device (errno {errno.ENOSPC})'"
    )
    assert settings.has_changes


def test_save_unencodable_value_leaves_file_untouched(tmp_path: Path):
    path = tmp_path / "latin.ini"
    path.write_bytes(b"[S]\nname = cafe\n")
    settings = Settings(encoding="latin-1")
    settings.load(path)
    settings.set("S", "name", "日本")
    with pytest.raises(SettingsIOError) as info:
        settings.save()
    assert info.value.kind is MessageKind.WRITING_FILE_ERROR
    assert path.read_bytes() == b"[S]\nname = cafe\n"
