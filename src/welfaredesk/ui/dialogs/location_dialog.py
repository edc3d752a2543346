from __future__ import annotations

from PySide6.QtWidgets import (
    QComboBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QWidget,
)

from welfaredesk.app.form_controller import (
    FORM_CLOSED,
    FORM_LOADING,
    FORM_SUBMITTING,
    FormController,
    LocationFormController,
)
from welfaredesk.ui.window.frameless_dialog import FramelessDialog


class LocationDialog(FramelessDialog):
    """Add/edit dialog for a district, area or unit."""

    def __init__(
        self,
        controller: LocationFormController,
        *,
        parent: QWidget | None = None,
        theme_mode: str | None = None,
    ) -> None:
        super().__init__(title=controller.title, parent=parent, theme_mode=theme_mode)
        self.setMinimumSize(520, 340)
        self.resize(580, 380)
        self._controller = controller

        self._status_label = QLabel(self.body)
        self._status_label.setObjectName("DialogHint")
        self._status_label.setWordWrap(True)
        self.body_layout.addWidget(self._status_label)

        form = QFormLayout()
        form.setContentsMargins(0, 0, 0, 0)
        form.setHorizontalSpacing(12)
        form.setVerticalSpacing(10)

        label = controller.entity_label
        self._name_input = QLineEdit(self.body)
        self._name_input.setObjectName("FormInput")
        self._name_input.setPlaceholderText(f"Enter {label.lower()} name")
        self._name_input.textEdited.connect(controller.set_name)
        form.addRow(f"{label} Name", self._name_input)

        self._code_input = QLineEdit(self.body)
        self._code_input.setObjectName("FormInput")
        if controller.code_is_derived:
            self._code_input.setReadOnly(True)
            self._code_input.setPlaceholderText("Generated from the name")
        else:
            self._code_input.setPlaceholderText(f"Enter {label.lower()} code")
            self._code_input.textEdited.connect(controller.set_code)
        form.addRow(f"{label} Code", self._code_input)

        self._parent_combo: QComboBox | None = None
        if controller.requires_parent:
            self._parent_combo = QComboBox(self.body)
            self._parent_combo.setObjectName("FormCombo")
            self._parent_combo.currentIndexChanged.connect(self._on_parent_changed)
            form.addRow(f"Parent {controller.parent_type.title()}", self._parent_combo)

        self.body_layout.addLayout(form)

        self._warning_label = QLabel(self.body)
        self._warning_label.setObjectName("DialogHint")
        self._warning_label.setWordWrap(True)
        self.body_layout.addWidget(self._warning_label)

        self._error_label = QLabel(self.body)
        self._error_label.setObjectName("FormErrorLabel")
        self._error_label.setWordWrap(True)
        self.body_layout.addWidget(self._error_label)
        self.body_layout.addStretch(1)

        self._cancel_button = self.add_footer_button("Cancel")
        self._cancel_button.clicked.connect(self.reject)
        self._save_button = self.add_footer_button("Save", primary=True)
        self._save_button.clicked.connect(controller.submit)

        self._unsubscribe = controller.subscribe(self._on_controller_changed)
        self._sync_from_controller()
        self._name_input.setFocus()

    def reject(self) -> None:
        if self._controller.is_busy:
            return
        self._unsubscribe()
        self._controller.close()
        super().reject()

    def _on_controller_changed(self, controller: FormController) -> None:
        if controller.phase == FORM_CLOSED:
            self._unsubscribe()
            if controller.refresh_requested:
                self.accept()
            else:
                super().reject()
            return
        self._sync_from_controller()

    def _on_parent_changed(self, _index: int) -> None:
        if self._parent_combo is None:
            return
        self._controller.set_parent(str(self._parent_combo.currentData() or ""))

    def _sync_from_controller(self) -> None:
        controller = self._controller
        self.set_dialog_title(controller.title)
        loading = controller.phase == FORM_LOADING
        submitting = controller.phase == FORM_SUBMITTING

        if self._name_input.text() != controller.name:
            self._name_input.setText(controller.name)
        if self._code_input.text() != controller.code:
            self._code_input.setText(controller.code)
        self._name_input.setEnabled(not loading and not submitting)
        self._code_input.setEnabled(not loading and not submitting)

        if self._parent_combo is not None:
            self._sync_parent_combo()

        if loading:
            self._status_label.setText(f"Loading {controller.entity_label.lower()}...")
        elif controller.parents_loading:
            self._status_label.setText(f"Loading {controller.parent_type}s...")
        else:
            self._status_label.setText("")
        self._status_label.setVisible(bool(self._status_label.text()))

        self._warning_label.setText("\n".join(controller.warnings))
        self._warning_label.setVisible(bool(controller.warnings))
        self._error_label.setText(controller.error_message)
        self._error_label.setVisible(bool(controller.error_message))

        self._save_button.setEnabled(controller.can_submit)
        self._cancel_button.setEnabled(not submitting)
        self.set_busy(f"Saving {controller.entity_label.lower()}..." if submitting else "")

    def _sync_parent_combo(self) -> None:
        combo = self._parent_combo
        controller = self._controller
        if combo is None:
            return
        candidate_ids = [candidate.node_id for candidate in controller.parent_candidates]
        combo.blockSignals(True)
        try:
            if combo.count() == 0 or candidate_ids != [combo.itemData(row) for row in range(1, combo.count())]:
                combo.clear()
                combo.addItem(f"Select {controller.parent_type}", "")
                for candidate in controller.parent_candidates:
                    combo.addItem(candidate.name or "(Unnamed)", candidate.node_id)
            index = combo.findData(controller.parent_id)
            combo.setCurrentIndex(index if index >= 0 else 0)
        finally:
            combo.blockSignals(False)
        combo.setEnabled(controller.parent_selection_enabled)
