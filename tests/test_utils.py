from __future__ import annotations

import os
from pathlib import Path

import pytest

from watchlink.utils import (
    env_value,
    expand_env,
    load_yaml_file,
    parse_env_bool,
    symlink_directory,
    validate_url,
)


def test_symlink_directory_creates_link(tmp_path) -> None:
    source = tmp_path / "source" / "Alpha"
    source.mkdir(parents=True)
    destination = tmp_path / "Alpha"

    result = symlink_directory(source, destination)

    assert result.created is True
    assert result.reason is None
    assert destination.is_symlink()
    assert os.readlink(destination) == str(source)


def test_symlink_directory_never_overwrites(tmp_path) -> None:
    source = tmp_path / "source"
    source.mkdir()
    destination = tmp_path / "dest"
    destination.write_text("keep", encoding="utf-8")

    result = symlink_directory(source, destination)

    assert result.created is False
    assert "already exists" in result.reason
    assert destination.read_text(encoding="utf-8") == "keep"


def test_symlink_directory_requires_source(tmp_path) -> None:
    result = symlink_directory(tmp_path / "missing", tmp_path / "dest")

    assert result.created is False
    assert "source does not exist" in result.reason
    assert not (tmp_path / "dest").is_symlink()


def test_symlink_directory_reports_errors_while_checking_paths(tmp_path, monkeypatch) -> None:
    def denied(self) -> bool:
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "is_symlink", denied)

    result = symlink_directory(tmp_path / "source", tmp_path / "dest")

    assert result.created is False
    assert "Permission denied" in result.reason


def test_symlink_directory_reports_os_errors(tmp_path) -> None:
    source = tmp_path / "source"
    source.mkdir()

    result = symlink_directory(source, tmp_path / "no-such-dir" / "dest")

    assert result.created is False
    assert result.reason


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("true", True),
        (" YES ", True),
        ("1", True),
        ("off", False),
        ("0", False),
        ("maybe", None),
        (None, None),
    ],
)
def test_parse_env_bool(value, expected) -> None:
    assert parse_env_bool(value) is expected


def test_env_value_treats_blank_as_unset() -> None:
    environ = {"A": "  value ", "B": "   "}

    assert env_value(environ, "A") == "value"
    assert env_value(environ, "B") is None
    assert env_value(environ, "C") is None


@pytest.mark.parametrize(
    ("url", "valid"),
    [
        ("http://radarr.local", True),
        ("https://hooks.slack.com/services/x", True),
        ("ftp://example.com", False),
        ("radarr.local:7878", False),
        ("", False),
        (None, False),
    ],
)
def test_validate_url(url, valid) -> None:
    assert validate_url(url) is valid


def test_expand_env_walks_nested_values(monkeypatch) -> None:
    monkeypatch.setenv("WATCHLINK_TEST_ROOT", "/mnt/media")

    data = {"paths": ["$WATCHLINK_TEST_ROOT/movies"], "port": 7878}

    assert expand_env(data) == {"paths": ["/mnt/media/movies"], "port": 7878}


def test_load_yaml_file_requires_mapping(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError, match="mapping"):
        load_yaml_file(path)


def test_load_yaml_file_empty_is_empty_mapping(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")

    assert load_yaml_file(path) == {}
