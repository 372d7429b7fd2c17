from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

import yaml


# Boolean true/false string values
_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def ensure_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def expand_env(value: Any) -> Any:
    if isinstance(value, str):
        return os.path.expandvars(value)
    if isinstance(value, list):
        return [expand_env(item) for item in value]
    if isinstance(value, dict):
        return {key: expand_env(val) for key, val in value.items()}
    return value


def load_yaml_file(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping at the top level")
    return expand_env(data)


@dataclass
class LinkResult:
    created: bool
    reason: Optional[str] = None


def symlink_directory(source: Path, destination: Path) -> LinkResult:
    """Create a directory symlink at ``destination`` pointing to ``source``.

    Nothing is overwritten: an existing destination (including a dangling
    symlink), a missing source or any OS error while checking either path is
    reported as a failed result.
    """
    try:
        if destination.is_symlink() or destination.exists():
            return LinkResult(created=False, reason=f"destination already exists: {destination}")
        if not source.exists():
            return LinkResult(created=False, reason=f"source does not exist: {source}")
        destination.symlink_to(source, target_is_directory=True)
    except OSError as exc:
        return LinkResult(created=False, reason=str(exc))

    return LinkResult(created=True)


def parse_env_bool(value: Optional[str]) -> Optional[bool]:
    """Parse a boolean from an environment variable string.

    Returns None if value is None or not a recognized boolean string.
    """
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return None


def env_value(environ: Mapping[str, str], name: str) -> Optional[str]:
    """Return a stripped environment value, treating blank strings as unset."""
    raw = environ.get(name)
    if raw is None:
        return None
    stripped = raw.strip()
    return stripped or None


def validate_url(url: Optional[str]) -> bool:
    """Validate that URL is a valid http/https URL."""
    if not url:
        return False
    try:
        parsed = urlparse(url)
        return parsed.scheme in ("http", "https") and bool(parsed.netloc)
    except ValueError:
        return False
