from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QDialog,
    QFrame,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from welfaredesk.ui.theme import current_theme_mode, normalize_theme_mode


class DialogTitleBar(QWidget):
    """Title strip of a frameless dialog. Dragging it moves the window."""

    close_requested = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)

        self._title_label = QLabel(self)
        self._title_label.setObjectName("DialogTitleLabel")
        self._busy_label = QLabel(self)
        self._busy_label.setObjectName("DialogHint")
        self._busy_label.hide()

        self._close_button = QToolButton(self)
        self._close_button.setObjectName("DialogCloseButton")
        self._close_button.setAutoRaise(True)
        self._close_button.setFixedSize(30, 24)
        self._close_button.setCursor(Qt.CursorShape.PointingHandCursor)
        self._close_button.setToolTip("Close")
        self._close_button.setText("x")
        self._close_button.clicked.connect(self.close_requested.emit)

        row = QHBoxLayout(self)
        row.setContentsMargins(10, 7, 8, 7)
        row.setSpacing(8)
        row.addWidget(self._title_label)
        row.addWidget(self._busy_label)
        row.addStretch(1)
        row.addWidget(self._close_button)

    def set_title(self, text: str) -> None:
        self._title_label.setText(text)

    def set_busy_text(self, text: str) -> None:
        self._busy_label.setText(text)
        self._busy_label.setVisible(bool(text))
        self._close_button.setEnabled(not text)

    def mousePressEvent(self, event) -> None:
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        child = self.childAt(event.position().toPoint())
        handle = self.window().windowHandle()
        if handle is None or (child is not None and child is self._close_button):
            super().mousePressEvent(event)
            return
        handle.startSystemMove()
        event.accept()


class FramelessDialog(QDialog):
    """Modal shell shared by every form.

    Subclasses fill ``body_layout`` and add their actions with
    ``add_footer_button``. ``set_busy`` shows a progress note in the title
    bar and disables its close button while a request is in flight.
    """

    def __init__(
        self,
        title: str = "",
        parent: Optional[QWidget] = None,
        *,
        theme_mode: str | None = None,
    ) -> None:
        super().__init__(parent)
        self._theme_mode = (
            normalize_theme_mode(theme_mode)
            if theme_mode in ("light", "dark")
            else current_theme_mode()
        )
        self.setObjectName("FramelessDialog")
        self.setWindowFlags(Qt.WindowType.Dialog | Qt.WindowType.FramelessWindowHint)
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground, True)
        self.setModal(True)
        self.setMinimumSize(460, 200)

        outer = QVBoxLayout(self)
        outer.setContentsMargins(14, 14, 14, 14)

        frame = QFrame(self)
        frame.setObjectName("FramelessDialogFrame")
        outer.addWidget(frame)
        column = QVBoxLayout(frame)
        column.setContentsMargins(0, 0, 0, 0)
        column.setSpacing(0)

        self.title_bar = DialogTitleBar(frame)
        self.title_bar.setObjectName("DialogTitleBar")
        self.title_bar.close_requested.connect(self.reject)
        column.addWidget(self.title_bar)

        self.body = QWidget(frame)
        self.body.setObjectName("DialogBody")
        self.body_layout = QVBoxLayout(self.body)
        self.body_layout.setContentsMargins(14, 14, 14, 8)
        self.body_layout.setSpacing(10)
        column.addWidget(self.body, 1)

        footer = QWidget(frame)
        footer.setObjectName("DialogFooter")
        self.footer_layout = QHBoxLayout(footer)
        self.footer_layout.setContentsMargins(14, 6, 14, 14)
        self.footer_layout.setSpacing(8)
        self.footer_layout.addStretch(1)
        column.addWidget(footer)

        self.set_dialog_title(title)

    @property
    def theme_mode(self) -> str:
        return self._theme_mode

    def set_dialog_title(self, title: str) -> None:
        self.title_bar.set_title(title)
        self.setWindowTitle(title)

    def set_busy(self, text: str = "") -> None:
        self.title_bar.set_busy_text(text)

    def add_footer_button(
        self,
        text: str,
        *,
        primary: bool = False,
        danger: bool = False,
    ) -> QPushButton:
        button = QPushButton(text, self)
        button.setObjectName("DangerButton" if danger else "DialogButton")
        if primary and not danger:
            button.setProperty("primary", "true")
        self.footer_layout.addWidget(button)
        return button
