from __future__ import annotations

import os
import stat
import time
import uuid
from pathlib import Path

import pytest

import html_helper.cli as cli_module

UNINDENTED = "<ul>\n<li>one\n</ul>\n"


def _write(tmp_path: Path, name: str, content: str) -> Path:
    target = tmp_path / name
    target.write_text(content, encoding="utf-8")
    return target


def _error_text(result) -> str:
    """Return combined output and exception text for assertions."""
    return f"{result.output}{result.exception}"


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="Symlink support is required")
def test_symlink_rejected(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    source = _write(tmp_path, "source.html", UNINDENTED)
    link = tmp_path / "alias.html"
    try:
        os.symlink(source, link, target_is_directory=False)
    except OSError as error:  # pragma: no cover - platform dependent
        pytest.skip(f"Unable to create symlink: {error}")

    result = cli_runner.invoke(cli_module.cli, ["indent", str(link)])
    assert result.exit_code != 0
    assert "Symlinks" in result.output
    assert source.read_text(encoding="utf-8") == UNINDENTED


def test_path_traversal_prevented(cli_runner, tmp_path, monkeypatch):
    workdir = tmp_path / "site"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    outside = tmp_path / f"outside-{uuid.uuid4().hex}.html"
    outside.write_text(UNINDENTED, encoding="utf-8")

    result = cli_runner.invoke(cli_module.cli, ["indent", str(outside)])
    assert result.exit_code != 0
    assert "outside of the working directory" in result.output


def test_skeleton_output_outside_working_directory_rejected(cli_runner, tmp_path, monkeypatch):
    workdir = tmp_path / "site"
    workdir.mkdir()
    monkeypatch.chdir(workdir)

    result = cli_runner.invoke(cli_module.cli, ["skeleton", "-o", "../escape.html"])
    assert result.exit_code != 0
    assert "outside of the working directory" in result.output
    assert not (tmp_path / "escape.html").exists()


def test_file_size_limit_enforced(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HTML_HELPER_MAX_FILE_SIZE", "10")
    target = _write(tmp_path, "large.html", "X" * 20)

    result = cli_runner.invoke(cli_module.cli, ["indent", str(target)])
    assert result.exit_code != 0
    assert "maximum allowed size" in _error_text(result)


def test_file_size_limit_from_config(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("HTML_HELPER_MAX_FILE_SIZE", raising=False)
    (tmp_path / ".html-helper.toml").write_text(
        "[html-helper]\nmax_file_size = 5\n", encoding="utf-8"
    )
    target = _write(tmp_path, "large.html", UNINDENTED)

    result = cli_runner.invoke(cli_module.cli, ["indent", str(target)])
    assert result.exit_code != 0
    assert "maximum allowed size of 5 bytes" in _error_text(result)


def test_invalid_size_environment_reported(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HTML_HELPER_MAX_FILE_SIZE", "lots")
    target = _write(tmp_path, "doc.html", UNINDENTED)

    result = cli_runner.invoke(cli_module.cli, ["indent", str(target)])
    assert result.exit_code != 0
    assert "HTML_HELPER_MAX_FILE_SIZE" in result.output


def test_non_html_extension_rejected(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(tmp_path, "notes.txt", UNINDENTED)

    result = cli_runner.invoke(cli_module.cli, ["indent", str(target)])
    assert result.exit_code == 2
    assert "is not an HTML file" in result.output


def test_permissions_preserved_on_update(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(tmp_path, "permissions.html", UNINDENTED)
    desired_mode = 0o640
    os.chmod(target, desired_mode)

    result = cli_runner.invoke(cli_module.cli, ["indent", str(target)])
    assert result.exit_code == 0
    assert stat.S_IMODE(target.stat().st_mode) == desired_mode


def test_atime_preserved_mtime_updated(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(tmp_path, "timestamps.html", UNINDENTED)

    specific_atime = time.time() - 86400
    specific_mtime = time.time() - 3600
    os.utime(target, times=(specific_atime, specific_mtime))

    original_stat = target.stat()

    result = cli_runner.invoke(cli_module.cli, ["indent", str(target)])
    assert result.exit_code == 0

    updated_stat = target.stat()
    assert updated_stat.st_atime_ns == original_stat.st_atime_ns
    assert updated_stat.st_mtime_ns > original_stat.st_mtime_ns


def test_ownership_fails_gracefully_when_unprivileged(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(tmp_path, "owned.html", UNINDENTED)

    def _deny_chown(*args, **kwargs):
        raise PermissionError("not permitted")

    monkeypatch.setattr(os, "chown", _deny_chown, raising=False)

    result = cli_runner.invoke(cli_module.cli, ["indent", str(target)])
    assert result.exit_code == 0
    assert "Could not preserve file ownership" in result.output
    assert target.read_text(encoding="utf-8") == "<ul>\n  <li>one\n</ul>\n"


def test_invalid_utf8_handling(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = tmp_path / "broken.html"
    target.write_bytes(b"\xff\xfe<ul>\n")

    result = cli_runner.invoke(cli_module.cli, ["indent", str(target)])
    assert result.exit_code != 0
    assert "Invalid UTF-8" in _error_text(result)


def test_race_condition_detection(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(tmp_path, "race.html", UNINDENTED)

    original_read = cli_module.read_document

    def _read_and_mutate(path: Path, max_size: int):
        result = original_read(path, max_size)
        existing = path.read_text(encoding="utf-8")
        path.write_text(existing + "<p>mutated\n", encoding="utf-8")
        return result

    monkeypatch.setattr(cli_module, "read_document", _read_and_mutate)
    result = cli_runner.invoke(cli_module.cli, ["indent", str(target)])

    assert result.exit_code != 0
    assert "changed during processing" in _error_text(result)
    assert target.read_text(encoding="utf-8") == UNINDENTED + "<p>mutated\n"


def test_crlf_line_endings_preserved(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = tmp_path / "crlf.html"
    target.write_bytes(b"<ul>\r\n<li>one\r\n</ul>\r\n")

    result = cli_runner.invoke(cli_module.cli, ["indent", str(target)])
    assert result.exit_code == 0
    assert target.read_bytes() == b"<ul>\r\n  <li>one\r\n</ul>\r\n"
