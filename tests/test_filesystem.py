from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from paste2md.filesystem import (
    MAX_FILE_SIZE_ENV_VAR,
    contains_symlink,
    enforce_size,
    get_max_file_size,
    normalize_output_path,
    read_text_file,
    write_text_atomic,
)


def _symlink(target: Path, link: Path, target_is_directory: bool = False) -> None:
    try:
        os.symlink(target, link, target_is_directory=target_is_directory)
    except OSError as error:  # pragma: no cover - platform dependent
        pytest.skip(f"Unable to create symlink: {error}")


def test_max_file_size_defaults(monkeypatch):
    monkeypatch.delenv(MAX_FILE_SIZE_ENV_VAR, raising=False)

    assert get_max_file_size(default=123) == 123


def test_max_file_size_from_environment(monkeypatch):
    monkeypatch.setenv(MAX_FILE_SIZE_ENV_VAR, "2048")

    assert get_max_file_size() == 2048


@pytest.mark.parametrize("value", ["lots", "0", "-5"])
def test_max_file_size_rejects_invalid_environment(monkeypatch, value):
    monkeypatch.setenv(MAX_FILE_SIZE_ENV_VAR, value)

    with pytest.raises(ValueError, match=MAX_FILE_SIZE_ENV_VAR):
        get_max_file_size()


def test_enforce_size():
    enforce_size(10, 10, "stdin")

    with pytest.raises(IOError, match="stdin is 11 bytes, over the 10 byte limit"):
        enforce_size(11, 10, "stdin")


def test_read_text_file(tmp_path: Path):
    source = tmp_path / "notes.txt"
    source.write_text("Café\n", encoding="utf-8")

    assert read_text_file(source, 100) == "Café\n"


def test_read_text_file_rejects_large_file(tmp_path: Path):
    source = tmp_path / "big.txt"
    source.write_text("x" * 50, encoding="utf-8")

    with pytest.raises(IOError, match="byte limit"):
        read_text_file(source, 10)


def test_read_text_file_rejects_invalid_utf8(tmp_path: Path):
    source = tmp_path / "latin1.txt"
    source.write_bytes(b"caf\xe9")

    with pytest.raises(IOError, match="not valid UTF-8"):
        read_text_file(source, 100)


def test_read_text_file_rejects_missing_file(tmp_path: Path):
    with pytest.raises(IOError, match="Cannot read"):
        read_text_file(tmp_path / "missing.txt", 100)


def test_read_text_file_rejects_directory(tmp_path: Path):
    with pytest.raises(IOError, match="not a regular file"):
        read_text_file(tmp_path, 100)


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="Symlink support is required")
def test_read_text_file_rejects_symlink(tmp_path: Path):
    source = tmp_path / "source.txt"
    source.write_text("text", encoding="utf-8")
    link = tmp_path / "alias.txt"
    _symlink(source, link)

    with pytest.raises(IOError, match="symlink"):
        read_text_file(link, 100)


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="Symlink support is required")
def test_contains_symlink_checks_parents(tmp_path: Path):
    real_dir = tmp_path / "real"
    real_dir.mkdir()
    link_dir = tmp_path / "link"
    _symlink(real_dir, link_dir, target_is_directory=True)

    assert contains_symlink(link_dir / "out.md") is True
    assert contains_symlink(real_dir / "out.md") is False


def test_normalize_output_path_resolves_relative_path(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert normalize_output_path("out.md") == (tmp_path / "out.md").resolve()


def test_normalize_output_path_rejects_directory(tmp_path: Path):
    with pytest.raises(ValueError, match="is a directory"):
        normalize_output_path(str(tmp_path))


def test_normalize_output_path_rejects_missing_parent(tmp_path: Path):
    with pytest.raises(ValueError, match="does not exist"):
        normalize_output_path(str(tmp_path / "missing" / "out.md"))


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="Symlink support is required")
def test_normalize_output_path_rejects_symlink(tmp_path: Path):
    target = tmp_path / "real.md"
    target.write_text("", encoding="utf-8")
    link = tmp_path / "alias.md"
    _symlink(target, link)

    with pytest.raises(ValueError, match="symlink"):
        normalize_output_path(str(link))


def test_write_text_atomic_creates_file(tmp_path: Path):
    destination = tmp_path / "out.md"

    write_text_atomic(destination, "# Title\n")

    assert destination.read_text(encoding="utf-8") == "# Title\n"
    assert [path.name for path in tmp_path.iterdir()] == ["out.md"]


@pytest.mark.skipif(os.name == "nt", reason="POSIX permissions required")
def test_write_text_atomic_preserves_permissions(tmp_path: Path):
    destination = tmp_path / "out.md"
    destination.write_text("old", encoding="utf-8")
    destination.chmod(0o640)

    write_text_atomic(destination, "new")

    assert destination.read_text(encoding="utf-8") == "new"
    assert stat.S_IMODE(destination.stat().st_mode) == 0o640


def test_write_text_atomic_reports_missing_directory(tmp_path: Path):
    with pytest.raises(IOError, match="Cannot write"):
        write_text_atomic(tmp_path / "missing" / "out.md", "text")
