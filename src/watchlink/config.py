"""Immutable runtime configuration built from environment variables.

Values are resolved once at startup, lowest precedence first: built-in
defaults, an optional YAML file, then environment variables. The resulting
``AppConfig`` is passed explicitly to the orchestrator; nothing downstream
reads the environment.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .errors import ConfigurationError
from .models import MediaKind
from .utils import env_value, load_yaml_file, parse_env_bool, validate_url

LOGGER = logging.getLogger(__name__)

DEFAULT_HISTORY_FILENAME = "history.txt"
DEFAULT_REQUEST_TIMEOUT = 30.0
CONFIG_FILE_ENV = "WATCHLINK_CONFIG"

# Library service name -> media kind it provides
LIBRARY_SERVICES: dict[str, MediaKind] = {
    "radarr": MediaKind.MOVIE,
    "sonarr": MediaKind.SHOW,
}
_LIBRARY_FIELDS = ("url", "port", "api_key", "container_path", "host_path")


@dataclass(frozen=True)
class TraktSettings:
    user_id: str
    client_id: str


@dataclass(frozen=True)
class PathMapping:
    """Container-side prefix and the host-side prefix it is mounted at."""

    container_path: str
    host_path: str


@dataclass(frozen=True)
class LibraryServiceSettings:
    name: str
    kind: MediaKind
    url: str
    port: int
    api_key: str
    path_mapping: PathMapping

    @property
    def base_url(self) -> str:
        return f"{self.url.rstrip('/')}:{self.port}"


@dataclass(frozen=True)
class NotificationSettings:
    slack_webhook_url: Optional[str] = None
    webhook_url: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return bool(self.slack_webhook_url or self.webhook_url)


@dataclass(frozen=True)
class AppConfig:
    trakt: TraktSettings
    output_dir: Path
    config_dir: Path
    libraries: tuple[LibraryServiceSettings, ...] = ()
    notifications: NotificationSettings = field(default_factory=NotificationSettings)
    history_filename: str = DEFAULT_HISTORY_FILENAME
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    strict_path_mapping: bool = True
    dry_run: bool = False

    @property
    def history_path(self) -> Path:
        return self.config_dir / self.history_filename

    @property
    def enabled_kinds(self) -> tuple[MediaKind, ...]:
        return tuple(library.kind for library in self.libraries)

    def library_for(self, kind: MediaKind) -> Optional[LibraryServiceSettings]:
        return next((library for library in self.libraries if library.kind is kind), None)

    def path_mappings(self) -> dict[MediaKind, PathMapping]:
        return {library.kind: library.path_mapping for library in self.libraries}


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"'{key}' must be provided as a mapping when specified")
    return value


def _pick(environ: Mapping[str, str], env_name: str, file_value: Any) -> Optional[str]:
    """Environment value if set, else the file value, stripped; blanks become None."""
    value = env_value(environ, env_name)
    if value is not None:
        return value
    if file_value is None:
        return None
    text = str(file_value).strip()
    return text or None


def _pick_bool(environ: Mapping[str, str], env_name: str, file_value: Any, default: bool) -> bool:
    raw = _pick(environ, env_name, file_value)
    if raw is None:
        return default
    parsed = parse_env_bool(raw)
    if parsed is None:
        raise ConfigurationError(f"'{env_name}' must be a boolean (true/false), got {raw!r}")
    return parsed


def _build_trakt_settings(environ: Mapping[str, str], data: Mapping[str, Any]) -> TraktSettings:
    section = _section(data, "trakt")
    user_id = _pick(environ, "TRAKT_USER_ID", section.get("user_id"))
    client_id = _pick(environ, "TRAKT_CLIENT_ID", section.get("client_id"))
    missing = [name for name, value in (("TRAKT_USER_ID", user_id), ("TRAKT_CLIENT_ID", client_id)) if not value]
    if missing:
        raise ConfigurationError(f"Missing required Trakt settings: {', '.join(missing)}")
    return TraktSettings(user_id=user_id, client_id=client_id)


def _build_library_settings(
    name: str,
    kind: MediaKind,
    environ: Mapping[str, str],
    data: Mapping[str, Any],
) -> Optional[LibraryServiceSettings]:
    section = _section(data, name)
    values = {
        field_name: _pick(environ, f"{name.upper()}_{field_name.upper()}", section.get(field_name))
        for field_name in _LIBRARY_FIELDS
    }

    present = [field_name for field_name, value in values.items() if value]
    if not present:
        LOGGER.info("%s is not configured; %s will not be processed", name.capitalize(), kind.label.lower())
        return None
    if len(present) < len(_LIBRARY_FIELDS):
        missing = [f"{name.upper()}_{field_name.upper()}" for field_name in _LIBRARY_FIELDS if not values[field_name]]
        LOGGER.warning(
            "%s is partially configured (missing %s); %s will not be processed",
            name.capitalize(),
            ", ".join(missing),
            kind.label.lower(),
        )
        return None

    url = values["url"]
    if not validate_url(url):
        raise ConfigurationError(f"'{name.upper()}_URL' must be a valid http/https URL, got: {url}")
    try:
        port = int(values["port"])
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"'{name.upper()}_PORT' must be an integer, got: {values['port']}") from exc
    if not 0 < port < 65536:
        raise ConfigurationError(f"'{name.upper()}_PORT' must be between 1 and 65535, got: {port}")

    return LibraryServiceSettings(
        name=name,
        kind=kind,
        url=url,
        port=port,
        api_key=values["api_key"],
        path_mapping=PathMapping(container_path=values["container_path"], host_path=values["host_path"]),
    )


def _build_directory(environ: Mapping[str, str], env_name: str, file_value: Any) -> Path:
    raw = _pick(environ, env_name, file_value)
    if not raw:
        raise ConfigurationError(f"Missing required setting {env_name}")
    path = Path(raw).expanduser()
    if not path.is_dir():
        raise ConfigurationError(f"{env_name} directory does not exist: {path}")
    return path


def _build_notification_settings(environ: Mapping[str, str], data: Mapping[str, Any]) -> NotificationSettings:
    section = _section(data, "notifications")
    slack = _pick(environ, "SLACK_WEBHOOK_URL", section.get("slack_webhook_url"))
    webhook = _pick(environ, "NOTIFY_WEBHOOK_URL", section.get("webhook_url"))
    for env_name, url in (("SLACK_WEBHOOK_URL", slack), ("NOTIFY_WEBHOOK_URL", webhook)):
        if url and not validate_url(url):
            raise ConfigurationError(f"'{env_name}' must be a valid http/https URL, got: {url}")
    return NotificationSettings(slack_webhook_url=slack, webhook_url=webhook)


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    config_file: Optional[Path] = None,
) -> AppConfig:
    """Build the application configuration.

    Args:
        environ: Environment mapping; defaults to ``os.environ``
        config_file: Optional YAML file; defaults to ``$WATCHLINK_CONFIG`` when set

    Raises:
        ConfigurationError: If a required value is missing or invalid, or no
            library service is fully configured
    """
    environ = os.environ if environ is None else environ

    if config_file is None:
        configured = env_value(environ, CONFIG_FILE_ENV)
        config_file = Path(configured) if configured else None

    data: Mapping[str, Any] = {}
    if config_file is not None:
        try:
            data = load_yaml_file(config_file)
        except (OSError, ValueError) as exc:
            raise ConfigurationError(f"Unable to load config file {config_file}: {exc}") from exc

    trakt = _build_trakt_settings(environ, data)
    output_dir = _build_directory(environ, "OUTPUT_DIR", data.get("output_dir"))
    config_dir = _build_directory(environ, "CONFIG_DIR", data.get("config_dir"))

    libraries = tuple(
        library
        for name, kind in LIBRARY_SERVICES.items()
        if (library := _build_library_settings(name, kind, environ, data)) is not None
    )
    if not libraries:
        raise ConfigurationError("No library service is fully configured; set the RADARR_* or SONARR_* variables")

    history_filename = _pick(environ, "HISTORY_FILENAME", data.get("history_filename")) or DEFAULT_HISTORY_FILENAME
    if "/" in history_filename:
        raise ConfigurationError(f"'HISTORY_FILENAME' must be a plain file name, got: {history_filename}")

    timeout_raw = _pick(environ, "REQUEST_TIMEOUT", data.get("request_timeout"))
    try:
        request_timeout = float(timeout_raw) if timeout_raw is not None else DEFAULT_REQUEST_TIMEOUT
    except ValueError as exc:
        raise ConfigurationError(f"'REQUEST_TIMEOUT' must be a number, got: {timeout_raw}") from exc
    if request_timeout <= 0:
        raise ConfigurationError("'REQUEST_TIMEOUT' must be greater than 0")

    return AppConfig(
        trakt=trakt,
        output_dir=output_dir,
        config_dir=config_dir,
        libraries=libraries,
        notifications=_build_notification_settings(environ, data),
        history_filename=history_filename,
        request_timeout=request_timeout,
        strict_path_mapping=_pick_bool(environ, "STRICT_PATH_MAPPING", data.get("strict_path_mapping"), True),
        dry_run=_pick_bool(environ, "DRY_RUN", data.get("dry_run"), False),
    )
