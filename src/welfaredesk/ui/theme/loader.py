from __future__ import annotations

from functools import lru_cache
from importlib import resources
from typing import Literal

from PySide6.QtWidgets import QApplication


ThemeMode = Literal["light", "dark"]
THEME_MODES: tuple[ThemeMode, ...] = ("light", "dark")
_DEFAULT_MODE: ThemeMode = "light"
_APP_PROPERTY = "welfaredesk.theme_mode"
_BASE_SHEET = "window.qss"


def normalize_theme_mode(mode: object) -> ThemeMode:
    if str(mode or "").strip().casefold() == "dark":
        return "dark"
    return _DEFAULT_MODE


def theme_mode_for(dark: bool) -> ThemeMode:
    return "dark" if dark else "light"


@lru_cache(maxsize=len(THEME_MODES))
def load_stylesheet(mode: ThemeMode = _DEFAULT_MODE) -> str:
    """Shared ``window.qss`` followed by the ``window_<mode>.qss`` colour overrides."""
    sheets = resources.files(__package__)
    parts: list[str] = []
    for name in (_BASE_SHEET, f"window_{normalize_theme_mode(mode)}.qss"):
        sheet = sheets / name
        if not sheet.is_file():
            continue
        text = sheet.read_text(encoding="utf-8").strip()
        if text:
            parts.append(text)
    return "\n\n".join(parts)


def apply_app_theme(app: QApplication, *, mode: ThemeMode = _DEFAULT_MODE) -> ThemeMode:
    resolved = normalize_theme_mode(mode)
    app.setProperty(_APP_PROPERTY, resolved)
    app.setStyleSheet(load_stylesheet(resolved))
    return resolved


def current_theme_mode(default: ThemeMode = _DEFAULT_MODE) -> ThemeMode:
    """Mode last applied to the running application, for dialogs opened without one."""
    app = QApplication.instance()
    value = app.property(_APP_PROPERTY) if app is not None else None
    if value in THEME_MODES:
        return value
    return default
