from welfaredesk.ui.theme.loader import (
    THEME_MODES,
    apply_app_theme,
    current_theme_mode,
    load_stylesheet,
    normalize_theme_mode,
    theme_mode_for,
)

__all__ = [
    "THEME_MODES",
    "apply_app_theme",
    "current_theme_mode",
    "load_stylesheet",
    "normalize_theme_mode",
    "theme_mode_for",
]
