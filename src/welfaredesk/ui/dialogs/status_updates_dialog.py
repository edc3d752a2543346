from __future__ import annotations

from PySide6.QtWidgets import (
    QComboBox,
    QFormLayout,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPlainTextEdit,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from welfaredesk.app.admin_models import STATUS_UPDATE_STATUSES, StatusUpdateRecord
from welfaredesk.app.delete_controller import DELETE_DONE, DeleteController
from welfaredesk.app.display_config import DEFAULT_DISPLAY_CONFIG, DisplayConfig
from welfaredesk.app.form_controller import FORM_CLOSED, FORM_EDITING, FORM_SUBMITTING, MODE_EDIT, FormController
from welfaredesk.app.status_update_controller import StatusUpdateFormController
from welfaredesk.ui.window.app_dialogs import AppConfirmDialog, AppMessageDialog
from welfaredesk.ui.window.frameless_dialog import FramelessDialog


def _badge_style(colors: tuple[str, str]) -> str:
    background, foreground = colors
    return f"background: {background}; color: {foreground};"


def _format_timestamp(update: StatusUpdateRecord) -> str:
    if not update.updated_at:
        return ""
    return update.sort_key.astimezone().strftime("%d %b %Y, %H:%M")


class StatusUpdateCard(QFrame):
    def __init__(
        self,
        update: StatusUpdateRecord,
        *,
        display: DisplayConfig,
        on_edit,
        on_delete,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.setObjectName("StatusUpdateCard")
        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 10, 12, 10)
        layout.setSpacing(6)

        header = QHBoxLayout()
        header.setContentsMargins(0, 0, 0, 0)
        stage_label = QLabel(update.stage or "(No stage)", self)
        stage_label.setObjectName("FormSectionTitle")
        header.addWidget(stage_label)
        badge = QLabel(display.status_label(update.status), self)
        badge.setObjectName("Badge")
        badge.setStyleSheet(_badge_style(display.status_color(update.status)))
        header.addWidget(badge)
        header.addStretch(1)
        edit_button = QPushButton("Edit", self)
        edit_button.setObjectName("DialogButton")
        edit_button.clicked.connect(lambda: on_edit(update.update_id))
        header.addWidget(edit_button)
        delete_button = QPushButton("Delete", self)
        delete_button.setObjectName("DangerButton")
        delete_button.clicked.connect(lambda: on_delete(update))
        header.addWidget(delete_button)
        layout.addLayout(header)

        description = QLabel(update.description, self)
        description.setWordWrap(True)
        layout.addWidget(description)
        if update.remarks:
            remarks = QLabel(f"Remarks: {update.remarks}", self)
            remarks.setObjectName("DialogHint")
            remarks.setWordWrap(True)
            layout.addWidget(remarks)
        meta_parts = [part for part in (_format_timestamp(update), update.updated_by) if part]
        if meta_parts:
            meta = QLabel(" - ".join(meta_parts), self)
            meta.setObjectName("DialogHint")
            layout.addWidget(meta)


class StatusUpdatesDialog(FramelessDialog):
    """Status history of one project with an inline add/edit form."""

    def __init__(
        self,
        controller: StatusUpdateFormController,
        delete_controller: DeleteController,
        *,
        display: DisplayConfig = DEFAULT_DISPLAY_CONFIG,
        parent: QWidget | None = None,
        theme_mode: str | None = None,
    ) -> None:
        super().__init__(
            title=f"Status Updates - {controller.project.name}",
            parent=parent,
            theme_mode=theme_mode,
        )
        self.setMinimumSize(720, 600)
        self.resize(820, 720)
        self._controller = controller
        self._delete_controller = delete_controller
        self._display = display
        self._changed = False
        self._history_key: tuple[tuple[str, ...], ...] = ()

        history_title = QLabel("Status Updates", self.body)
        history_title.setObjectName("FormSectionTitle")
        self.body_layout.addWidget(history_title)

        self._scroll = QScrollArea(self.body)
        self._scroll.setWidgetResizable(True)
        self._history_host = QWidget(self._scroll)
        self._history_layout = QVBoxLayout(self._history_host)
        self._history_layout.setContentsMargins(0, 0, 0, 0)
        self._history_layout.setSpacing(8)
        self._scroll.setWidget(self._history_host)
        self.body_layout.addWidget(self._scroll, 1)

        self._form_title = QLabel(self.body)
        self._form_title.setObjectName("FormSectionTitle")
        self.body_layout.addWidget(self._form_title)

        form = QFormLayout()
        form.setContentsMargins(0, 0, 0, 0)
        form.setHorizontalSpacing(12)
        form.setVerticalSpacing(8)
        self._stage_input = QLineEdit(self.body)
        self._stage_input.setObjectName("FormInput")
        self._stage_input.setPlaceholderText("e.g. Planning, Implementation")
        self._stage_input.textEdited.connect(controller.set_stage)
        form.addRow("Stage", self._stage_input)

        self._status_combo = QComboBox(self.body)
        self._status_combo.setObjectName("FormCombo")
        for status in STATUS_UPDATE_STATUSES:
            self._status_combo.addItem(display.status_label(status), status)
        self._status_combo.currentIndexChanged.connect(self._on_status_changed)
        form.addRow("Status", self._status_combo)

        self._description_input = QPlainTextEdit(self.body)
        self._description_input.setObjectName("FormInput")
        self._description_input.setFixedHeight(72)
        self._description_input.textChanged.connect(
            lambda: controller.set_description(self._description_input.toPlainText())
        )
        form.addRow("Description", self._description_input)

        self._remarks_input = QLineEdit(self.body)
        self._remarks_input.setObjectName("FormInput")
        self._remarks_input.setPlaceholderText("Optional")
        self._remarks_input.textEdited.connect(controller.set_remarks)
        form.addRow("Remarks", self._remarks_input)
        self.body_layout.addLayout(form)

        self._error_label = QLabel(self.body)
        self._error_label.setObjectName("FormErrorLabel")
        self._error_label.setWordWrap(True)
        self.body_layout.addWidget(self._error_label)

        self._cancel_edit_button = self.add_footer_button("Cancel Edit")
        self._cancel_edit_button.clicked.connect(controller.open_create)
        self._close_button = self.add_footer_button("Close")
        self._close_button.clicked.connect(self.reject)
        self._save_button = self.add_footer_button("Add Status Update", primary=True)
        self._save_button.clicked.connect(controller.submit)

        self._unsubscribe = controller.subscribe(self._on_controller_changed)
        self._unsubscribe_delete = delete_controller.subscribe(self._on_delete_changed)
        if not controller.is_open:
            controller.open_create()
        self._sync_from_controller()

    def reject(self) -> None:
        if self._controller.is_busy or self._delete_controller.is_busy:
            return
        self._unsubscribe()
        self._unsubscribe_delete()
        self._controller.close()
        if self._changed:
            super().accept()
            return
        super().reject()

    def _on_controller_changed(self, controller: FormController) -> None:
        if controller.phase == FORM_CLOSED and controller.refresh_requested:
            self._changed = True
            controller.open_create()
            return
        self._sync_from_controller()

    def _on_status_changed(self, _index: int) -> None:
        self._controller.set_status(str(self._status_combo.currentData() or ""))

    def _on_edit(self, update_id: str) -> None:
        self._controller.open_edit(update_id)

    def _on_delete(self, update: StatusUpdateRecord) -> None:
        target = self._controller.delete_target(update)
        self._delete_controller.request(target)
        confirmed = AppConfirmDialog.ask(
            parent=self,
            title=target.title,
            message=target.description,
            confirm_text="Delete",
            danger=True,
            theme_mode=self._theme_mode,
        )
        if not confirmed:
            self._delete_controller.cancel()
            return
        self._delete_controller.confirm()

    def _on_delete_changed(self, controller: DeleteController) -> None:
        if controller.phase == DELETE_DONE and controller.target is not None:
            self._changed = True
            self._controller.forget(controller.target.record_id)
            if self._controller.record_id == controller.target.record_id:
                self._controller.open_create()
            controller.cancel()
            return
        if controller.error_message:
            AppMessageDialog.show_warning(
                parent=self,
                title="Delete Failed",
                message=controller.error_message,
                theme_mode=self._theme_mode,
            )
            controller.cancel()

    def _sync_from_controller(self) -> None:
        controller = self._controller
        editing_existing = controller.mode == MODE_EDIT
        interactive = controller.phase == FORM_EDITING
        submitting = controller.phase == FORM_SUBMITTING

        self._sync_history()
        self._form_title.setText("Edit Status Update" if editing_existing else "Add Status Update")

        self._stage_input.blockSignals(True)
        self._description_input.blockSignals(True)
        self._remarks_input.blockSignals(True)
        self._status_combo.blockSignals(True)
        try:
            if self._stage_input.text() != controller.stage:
                self._stage_input.setText(controller.stage)
            if self._description_input.toPlainText() != controller.description:
                self._description_input.setPlainText(controller.description)
            if self._remarks_input.text() != controller.remarks:
                self._remarks_input.setText(controller.remarks)
            index = self._status_combo.findData(controller.status)
            self._status_combo.setCurrentIndex(index if index >= 0 else 0)
        finally:
            self._stage_input.blockSignals(False)
            self._description_input.blockSignals(False)
            self._remarks_input.blockSignals(False)
            self._status_combo.blockSignals(False)

        for widget in (self._stage_input, self._description_input, self._remarks_input, self._status_combo):
            widget.setEnabled(interactive)

        message = controller.error_message or "\n".join(controller.warnings)
        self._error_label.setText(message)
        self._error_label.setVisible(bool(message))

        self._save_button.setText("Update Status" if editing_existing else "Add Status Update")
        self._save_button.setEnabled(interactive)
        self._cancel_edit_button.setVisible(editing_existing)
        self._cancel_edit_button.setEnabled(not submitting)
        self._close_button.setEnabled(not submitting)
        self.set_busy("Saving status update..." if submitting else "")

    def _sync_history(self) -> None:
        history = self._controller.history
        key = tuple(
            (row.update_id, row.stage, row.status, row.description, row.remarks, row.updated_at)
            for row in history
        )
        if key == self._history_key and self._history_layout.count():
            return
        self._history_key = key
        while self._history_layout.count():
            item = self._history_layout.takeAt(0)
            widget = item.widget()
            if widget is not None:
                widget.deleteLater()
        if not history:
            empty = QLabel("No status updates yet.", self._history_host)
            empty.setObjectName("DialogHint")
            self._history_layout.addWidget(empty)
        for update in history:
            card = StatusUpdateCard(
                update,
                display=self._display,
                on_edit=self._on_edit,
                on_delete=self._on_delete,
                parent=self._history_host,
            )
            self._history_layout.addWidget(card)
        self._history_layout.addStretch(1)
