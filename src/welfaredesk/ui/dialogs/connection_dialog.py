from __future__ import annotations

from PySide6.QtWidgets import (
    QDoubleSpinBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QWidget,
)

from welfaredesk.app.settings_store import MIN_API_TIMEOUT_SECONDS, ApiSettings
from welfaredesk.ui.window.frameless_dialog import FramelessDialog


class ConnectionDialog(FramelessDialog):
    """Edits the API base URL, token and timeout. The caller saves the result."""

    def __init__(
        self,
        settings: ApiSettings,
        *,
        parent: QWidget | None = None,
        theme_mode: str | None = None,
    ) -> None:
        super().__init__(title="API Connection", parent=parent, theme_mode=theme_mode)
        self.resize(560, 300)

        hint = QLabel(
            "WELFAREDESK_API_URL and WELFAREDESK_API_TOKEN override these values when set.",
            self.body,
        )
        hint.setObjectName("DialogHint")
        hint.setWordWrap(True)
        self.body_layout.addWidget(hint)

        form = QFormLayout()
        form.setContentsMargins(0, 0, 0, 0)
        form.setHorizontalSpacing(12)
        form.setVerticalSpacing(10)

        self._url_input = QLineEdit(settings.base_url, self.body)
        self._url_input.setObjectName("FormInput")
        self._url_input.setPlaceholderText("https://erp.example.org/api")
        form.addRow("Base URL", self._url_input)

        self._token_input = QLineEdit(settings.token, self.body)
        self._token_input.setObjectName("FormInput")
        self._token_input.setEchoMode(QLineEdit.EchoMode.Password)
        form.addRow("Token", self._token_input)

        self._timeout_input = QDoubleSpinBox(self.body)
        self._timeout_input.setRange(MIN_API_TIMEOUT_SECONDS, 300.0)
        self._timeout_input.setDecimals(1)
        self._timeout_input.setSuffix(" s")
        self._timeout_input.setValue(settings.timeout_seconds)
        form.addRow("Timeout", self._timeout_input)

        self.body_layout.addLayout(form)
        self.body_layout.addStretch(1)

        cancel_button = self.add_footer_button("Cancel")
        cancel_button.clicked.connect(self.reject)
        save_button = self.add_footer_button("Save", primary=True)
        save_button.clicked.connect(self.accept)
        save_button.setDefault(True)

    def values(self) -> dict[str, object]:
        return {
            "base_url": self._url_input.text(),
            "token": self._token_input.text(),
            "timeout_seconds": self._timeout_input.value(),
        }
