from __future__ import annotations

from PySide6.QtWidgets import QLabel, QWidget

from welfaredesk.ui.window.frameless_dialog import FramelessDialog


def _message_label(dialog: FramelessDialog, message: str, *, emphasized: bool) -> QLabel:
    label = QLabel(message, dialog.body)
    label.setWordWrap(True)
    label.setObjectName("DialogWarning" if emphasized else "DialogHint")
    dialog.body_layout.addWidget(label)
    dialog.body_layout.addStretch(1)
    return label


class AppMessageDialog(FramelessDialog):
    """One-button notice used for save results and request failures."""

    def __init__(
        self,
        *,
        title: str,
        message: str,
        warning: bool,
        parent: QWidget | None = None,
        theme_mode: str | None = None,
    ) -> None:
        super().__init__(title=title, parent=parent, theme_mode=theme_mode)
        self.resize(500, 220)
        _message_label(self, message, emphasized=warning)
        ok_button = self.add_footer_button("OK", primary=True)
        ok_button.clicked.connect(self.accept)
        ok_button.setDefault(True)
        ok_button.setFocus()

    @classmethod
    def show_info(cls, *, parent, title: str, message: str, theme_mode: str | None = None) -> None:
        cls(title=title, message=message, warning=False, parent=parent, theme_mode=theme_mode).exec()

    @classmethod
    def show_warning(cls, *, parent, title: str, message: str, theme_mode: str | None = None) -> None:
        cls(title=title, message=message, warning=True, parent=parent, theme_mode=theme_mode).exec()


class AppConfirmDialog(FramelessDialog):
    """Two-button question. Focus starts on cancel so Enter never confirms a delete."""

    def __init__(
        self,
        *,
        title: str,
        message: str,
        confirm_text: str = "Confirm",
        cancel_text: str = "Cancel",
        danger: bool = False,
        parent: QWidget | None = None,
        theme_mode: str | None = None,
    ) -> None:
        super().__init__(title=title, parent=parent, theme_mode=theme_mode)
        self.resize(500, 230)
        _message_label(self, message, emphasized=danger)

        cancel_button = self.add_footer_button(cancel_text)
        cancel_button.clicked.connect(self.reject)
        confirm_button = self.add_footer_button(confirm_text, primary=True, danger=danger)
        confirm_button.clicked.connect(self.accept)
        cancel_button.setDefault(True)
        cancel_button.setFocus()

    @classmethod
    def ask(
        cls,
        *,
        parent,
        title: str,
        message: str,
        confirm_text: str = "Confirm",
        cancel_text: str = "Cancel",
        danger: bool = False,
        theme_mode: str | None = None,
    ) -> bool:
        dialog = cls(
            title=title,
            message=message,
            confirm_text=confirm_text,
            cancel_text=cancel_text,
            danger=danger,
            parent=parent,
            theme_mode=theme_mode,
        )
        return dialog.exec() == FramelessDialog.DialogCode.Accepted
