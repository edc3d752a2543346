from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping


APP_DIRNAME = "welfaredesk"
SETTINGS_FILENAME = "settings.json"

API_URL_ENV = "WELFAREDESK_API_URL"
API_TOKEN_ENV = "WELFAREDESK_API_TOKEN"

DEFAULT_API_BASE_URL = "http://localhost:5000/api"
DEFAULT_API_TIMEOUT_SECONDS = 10.0
MIN_API_TIMEOUT_SECONDS = 1.0

# Keys in settings.json.
DARK_MODE_KEY = "darkMode"
API_BASE_URL_KEY = "apiBaseUrl"
API_TOKEN_KEY = "apiToken"
API_TIMEOUT_KEY = "apiTimeoutSeconds"


@dataclass(frozen=True, slots=True)
class ApiSettings:
    """Connection details for the admin API."""

    base_url: str = DEFAULT_API_BASE_URL
    token: str = ""
    timeout_seconds: float = DEFAULT_API_TIMEOUT_SECONDS

    @property
    def configured(self) -> bool:
        return bool(self.base_url)

    def to_mapping(self, *, redact_token: bool = False) -> dict[str, Any]:
        return {
            "base_url": self.base_url,
            "token": "********" if redact_token and self.token else self.token,
            "timeout_seconds": self.timeout_seconds,
        }


def _env(name: str) -> str:
    return str(os.environ.get(name, "") or "").strip()


def settings_path() -> Path:
    """Location of settings.json for this platform.

    Windows uses ``%APPDATA%`` (then ``%LOCALAPPDATA%``) under ``config``;
    elsewhere ``$XDG_CONFIG_HOME`` or ``~/.config``. Falls back to ``./config``.
    """
    if os.name == "nt":
        roots = [_env("APPDATA"), _env("LOCALAPPDATA")]
        for root in roots:
            if root:
                return Path(root) / APP_DIRNAME / "config" / SETTINGS_FILENAME
    else:
        xdg = _env("XDG_CONFIG_HOME")
        if xdg:
            return Path(xdg) / APP_DIRNAME / SETTINGS_FILENAME
        home = _env("HOME")
        if home:
            return Path(home) / ".config" / APP_DIRNAME / SETTINGS_FILENAME
    return Path.cwd() / "config" / SETTINGS_FILENAME


def load_settings() -> dict[str, Any]:
    """Whole settings document, or an empty dict if it is missing or unreadable."""
    try:
        data = json.loads(settings_path().read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_settings(settings: Mapping[str, Any]) -> None:
    path = settings_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(dict(settings), indent=2), encoding="utf-8")


def _update_settings(**changes: Any) -> None:
    settings = load_settings()
    settings.update(changes)
    save_settings(settings)


def _coerce_timeout(value: Any) -> float:
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        seconds = DEFAULT_API_TIMEOUT_SECONDS
    return max(MIN_API_TIMEOUT_SECONDS, seconds)


def normalize_api_settings(value: ApiSettings | Mapping[str, Any] | None) -> ApiSettings:
    if isinstance(value, ApiSettings):
        value = value.to_mapping()
    source: Mapping[str, Any] = value if isinstance(value, Mapping) else {}
    return ApiSettings(
        base_url=str(source.get("base_url") or "").strip().rstrip("/") or DEFAULT_API_BASE_URL,
        token=str(source.get("token") or "").strip(),
        timeout_seconds=_coerce_timeout(source.get("timeout_seconds", DEFAULT_API_TIMEOUT_SECONDS)),
    )


def load_api_settings(default: ApiSettings | None = None) -> ApiSettings:
    """Stored API settings with ``WELFAREDESK_API_URL``/``WELFAREDESK_API_TOKEN`` taking precedence."""
    fallback = normalize_api_settings(default)
    stored = load_settings()
    return normalize_api_settings(
        {
            "base_url": _env(API_URL_ENV) or stored.get(API_BASE_URL_KEY, fallback.base_url),
            "token": _env(API_TOKEN_ENV) or stored.get(API_TOKEN_KEY, fallback.token),
            "timeout_seconds": stored.get(API_TIMEOUT_KEY, fallback.timeout_seconds),
        }
    )


def save_api_settings(value: ApiSettings | Mapping[str, Any]) -> ApiSettings:
    normalized = normalize_api_settings(value)
    _update_settings(
        **{
            API_BASE_URL_KEY: normalized.base_url,
            API_TOKEN_KEY: normalized.token,
            API_TIMEOUT_KEY: normalized.timeout_seconds,
        }
    )
    return normalized


def load_dark_mode(default: bool = False) -> bool:
    value = load_settings().get(DARK_MODE_KEY)
    return value if isinstance(value, bool) else bool(default)


def save_dark_mode(enabled: bool) -> None:
    _update_settings(**{DARK_MODE_KEY: bool(enabled)})
