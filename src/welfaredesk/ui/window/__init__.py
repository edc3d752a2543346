from __future__ import annotations

from welfaredesk.ui.window.app_dialogs import AppConfirmDialog, AppMessageDialog
from welfaredesk.ui.window.frameless_dialog import FramelessDialog

__all__ = [
    "AppConfirmDialog",
    "AppMessageDialog",
    "FramelessDialog",
]
