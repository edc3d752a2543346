from __future__ import annotations

from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from welfaredesk.app.display_config import DEFAULT_DISPLAY_CONFIG, DisplayConfig
from welfaredesk.app.form_controller import FORM_CLOSED, FORM_EDITING, FORM_LOADING, FORM_SUBMITTING, FormController
from welfaredesk.app.stage_config_controllers import ProjectStagesFormController, SchemeStagesFormController
from welfaredesk.ui.widgets.stage_row import StageRowCard
from welfaredesk.ui.window.app_dialogs import AppConfirmDialog
from welfaredesk.ui.window.frameless_dialog import FramelessDialog


class StagesConfigDialog(FramelessDialog):
    """Stage list editor for a project's workflow or a scheme's checklist."""

    def __init__(
        self,
        controller: ProjectStagesFormController | SchemeStagesFormController,
        *,
        display: DisplayConfig = DEFAULT_DISPLAY_CONFIG,
        parent: QWidget | None = None,
        theme_mode: str | None = None,
    ) -> None:
        super().__init__(title=controller.title, parent=parent, theme_mode=theme_mode)
        self.setMinimumSize(720, 560)
        self.resize(820, 680)
        self._controller = controller
        self._display = display
        self._is_project = isinstance(controller, ProjectStagesFormController)
        self._cards: list[StageRowCard] = []

        self._status_label = QLabel(self.body)
        self._status_label.setObjectName("DialogHint")
        self._status_label.setWordWrap(True)
        self.body_layout.addWidget(self._status_label)

        self._project_combo: QComboBox | None = None
        self._tracking_box: QCheckBox | None = None
        self._email_box: QCheckBox | None = None
        self._sms_box: QCheckBox | None = None
        if isinstance(controller, ProjectStagesFormController):
            settings_form = QFormLayout()
            settings_form.setContentsMargins(0, 0, 0, 0)
            settings_form.setHorizontalSpacing(12)
            settings_form.setVerticalSpacing(8)

            self._project_combo = QComboBox(self.body)
            self._project_combo.setObjectName("FormCombo")
            self._project_combo.currentIndexChanged.connect(self._on_project_changed)
            settings_form.addRow("Project", self._project_combo)

            self._tracking_box = QCheckBox("Allow public status tracking", self.body)
            self._tracking_box.toggled.connect(controller.set_enable_public_tracking)
            settings_form.addRow("", self._tracking_box)
            self._email_box = QCheckBox("Email notifications", self.body)
            self._email_box.toggled.connect(controller.set_email_notifications)
            settings_form.addRow("", self._email_box)
            self._sms_box = QCheckBox("SMS notifications", self.body)
            self._sms_box.toggled.connect(controller.set_sms_notifications)
            settings_form.addRow("", self._sms_box)
            self.body_layout.addLayout(settings_form)

        stages_header = QHBoxLayout()
        stages_header.setContentsMargins(0, 0, 0, 0)
        stages_title = QLabel("Project Stages" if self._is_project else "Checklist Stages", self.body)
        stages_title.setObjectName("FormSectionTitle")
        stages_header.addWidget(stages_title)
        stages_header.addStretch(1)
        self._defaults_button: QPushButton | None = None
        if isinstance(controller, SchemeStagesFormController):
            self._defaults_button = QPushButton("Load Defaults", self.body)
            self._defaults_button.setObjectName("DialogButton")
            self._defaults_button.clicked.connect(self._on_load_defaults)
            stages_header.addWidget(self._defaults_button)
        self._add_button = QPushButton("Add Stage", self.body)
        self._add_button.setObjectName("DialogButton")
        self._add_button.clicked.connect(controller.add_stage)
        stages_header.addWidget(self._add_button)
        self.body_layout.addLayout(stages_header)

        self._scroll = QScrollArea(self.body)
        self._scroll.setWidgetResizable(True)
        self._cards_host = QWidget(self._scroll)
        self._cards_layout = QVBoxLayout(self._cards_host)
        self._cards_layout.setContentsMargins(0, 0, 0, 0)
        self._cards_layout.setSpacing(8)
        self._cards_layout.addStretch(1)
        self._scroll.setWidget(self._cards_host)
        self.body_layout.addWidget(self._scroll, 1)

        self._warning_label = QLabel(self.body)
        self._warning_label.setObjectName("DialogHint")
        self._warning_label.setWordWrap(True)
        self.body_layout.addWidget(self._warning_label)

        self._error_label = QLabel(self.body)
        self._error_label.setObjectName("FormErrorLabel")
        self._error_label.setWordWrap(True)
        self.body_layout.addWidget(self._error_label)

        self._cancel_button = self.add_footer_button("Cancel")
        self._cancel_button.clicked.connect(self.reject)
        self._save_button = self.add_footer_button("Save Configuration", primary=True)
        self._save_button.clicked.connect(controller.submit)

        self._unsubscribe = controller.subscribe(self._on_controller_changed)
        self._sync_from_controller()

    def reject(self) -> None:
        if self._controller.is_busy:
            return
        self._unsubscribe()
        self._controller.close()
        super().reject()

    def _on_controller_changed(self, controller: FormController) -> None:
        if controller.phase == FORM_CLOSED:
            if controller.refresh_requested:
                self._unsubscribe()
                self.accept()
            return
        self._sync_from_controller()

    def _on_project_changed(self, _index: int) -> None:
        if self._project_combo is None or not isinstance(self._controller, ProjectStagesFormController):
            return
        self._controller.select_project(str(self._project_combo.currentData() or ""))

    def _on_load_defaults(self) -> None:
        if not isinstance(self._controller, SchemeStagesFormController):
            return
        confirmed = AppConfirmDialog.ask(
            parent=self,
            title="Load Defaults",
            message="Replace the current checklist with the default stages?",
            confirm_text="Replace",
            theme_mode=self._theme_mode,
        )
        if confirmed:
            self._controller.load_defaults()

    def _on_stage_changed(self, index: int, changes: dict) -> None:
        self._controller.update_stage(index, **changes)

    def _on_remove_requested(self, index: int) -> None:
        self._controller.remove_stage(index)

    def _sync_from_controller(self) -> None:
        controller = self._controller
        self.set_dialog_title(controller.title)
        editing = controller.phase == FORM_EDITING
        loading = controller.phase == FORM_LOADING
        submitting = controller.phase == FORM_SUBMITTING

        self._sync_project_settings()
        self._sync_cards(enabled=editing)

        self._status_label.setText("Loading configuration..." if loading else "")
        self._status_label.setVisible(loading)
        self._warning_label.setText("\n".join(controller.warnings))
        self._warning_label.setVisible(bool(controller.warnings))
        self._error_label.setText(controller.error_message)
        self._error_label.setVisible(bool(controller.error_message))

        self._add_button.setEnabled(editing)
        if self._defaults_button is not None:
            self._defaults_button.setEnabled(editing)
        self._save_button.setEnabled(editing and bool(controller.record_id))
        self._cancel_button.setEnabled(not submitting)
        self.set_busy("Saving stages..." if submitting else "")

    def _sync_project_settings(self) -> None:
        controller = self._controller
        if not isinstance(controller, ProjectStagesFormController):
            return
        combo = self._project_combo
        if combo is not None:
            project_ids = [project.project_id for project in controller.projects]
            combo.blockSignals(True)
            try:
                if combo.count() == 0 or project_ids != [combo.itemData(row) for row in range(1, combo.count())]:
                    combo.clear()
                    combo.addItem("Select a project", "")
                    for project in controller.projects:
                        label = f"{project.name} ({project.code})" if project.code else project.name
                        combo.addItem(label, project.project_id)
                index = combo.findData(controller.project_id)
                combo.setCurrentIndex(index if index >= 0 else 0)
            finally:
                combo.blockSignals(False)
            combo.setEnabled(controller.phase == FORM_EDITING)

        boxes = (
            (self._tracking_box, controller.enable_public_tracking),
            (self._email_box, controller.email_notifications),
            (self._sms_box, controller.sms_notifications),
        )
        for box, checked in boxes:
            if box is None:
                continue
            box.blockSignals(True)
            box.setChecked(checked)
            box.blockSignals(False)
            box.setEnabled(controller.phase == FORM_EDITING)

    def _sync_cards(self, *, enabled: bool) -> None:
        stages = self._controller.stages
        while len(self._cards) > len(stages):
            card = self._cards.pop()
            self._cards_layout.removeWidget(card)
            card.deleteLater()
        for index, stage in enumerate(stages):
            if index < len(self._cards):
                self._cards[index].set_stage(index, stage)
                continue
            card = StageRowCard(
                index,
                stage,
                show_duration=self._is_project,
                display=self._display,
                parent=self._cards_host,
            )
            card.changed.connect(self._on_stage_changed)
            card.remove_requested.connect(self._on_remove_requested)
            self._cards_layout.insertWidget(self._cards_layout.count() - 1, card)
            self._cards.append(card)
        can_remove = self._controller.can_remove_stage
        for card in self._cards:
            card.setEnabled(enabled)
            card.set_remove_enabled(can_remove)
