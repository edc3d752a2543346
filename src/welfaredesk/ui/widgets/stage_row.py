from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QCheckBox,
    QDoubleSpinBox,
    QFormLayout,
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from welfaredesk.app.admin_models import ROLE_TAGS, StageRecord
from welfaredesk.app.display_config import DEFAULT_DISPLAY_CONFIG, DisplayConfig


class StageRowCard(QFrame):
    """Editor card for one stage; reports edits as keyword changes."""

    changed = Signal(int, dict)
    remove_requested = Signal(int)

    def __init__(
        self,
        index: int,
        stage: StageRecord,
        *,
        show_duration: bool = True,
        display: DisplayConfig = DEFAULT_DISPLAY_CONFIG,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setObjectName("StageRowCard")
        self._index = index
        self._role_boxes: dict[str, QCheckBox] = {}

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 10, 12, 10)
        layout.setSpacing(8)

        header = QHBoxLayout()
        header.setContentsMargins(0, 0, 0, 0)
        self._title = QLabel(self)
        self._title.setObjectName("FormSectionTitle")
        header.addWidget(self._title)
        header.addStretch(1)
        self._remove_button = QPushButton("Remove", self)
        self._remove_button.setObjectName("DialogButton")
        self._remove_button.clicked.connect(lambda: self.remove_requested.emit(self._index))
        header.addWidget(self._remove_button)
        layout.addLayout(header)

        form = QFormLayout()
        form.setContentsMargins(0, 0, 0, 0)
        form.setHorizontalSpacing(12)
        form.setVerticalSpacing(8)

        self._name_input = QLineEdit(self)
        self._name_input.setObjectName("FormInput")
        self._name_input.setPlaceholderText("Stage name")
        self._name_input.textEdited.connect(lambda text: self._emit(name=text))
        form.addRow("Name", self._name_input)

        self._description_input = QLineEdit(self)
        self._description_input.setObjectName("FormInput")
        self._description_input.setPlaceholderText("Optional")
        self._description_input.textEdited.connect(lambda text: self._emit(description=text))
        form.addRow("Description", self._description_input)

        self._order_input = QSpinBox(self)
        self._order_input.setObjectName("FormSpin")
        self._order_input.setRange(1, 999)
        self._order_input.valueChanged.connect(lambda value: self._emit(order=value))
        form.addRow("Order", self._order_input)

        self._duration_input: QDoubleSpinBox | None = None
        if show_duration:
            self._duration_input = QDoubleSpinBox(self)
            self._duration_input.setObjectName("FormSpin")
            self._duration_input.setRange(0, 3650)
            self._duration_input.setDecimals(0)
            self._duration_input.setSuffix(" days")
            self._duration_input.valueChanged.connect(
                lambda value: self._emit(estimated_duration=float(value))
            )
            form.addRow("Estimated duration", self._duration_input)

        self._required_box = QCheckBox("Required stage", self)
        self._required_box.toggled.connect(lambda checked: self._emit(is_required=checked))
        form.addRow("", self._required_box)
        layout.addLayout(form)

        roles_label = QLabel("Allowed roles", self)
        roles_label.setObjectName("DialogHint")
        layout.addWidget(roles_label)
        roles_grid = QGridLayout()
        roles_grid.setContentsMargins(0, 0, 0, 0)
        roles_grid.setHorizontalSpacing(12)
        roles_grid.setVerticalSpacing(4)
        for position, role in enumerate(ROLE_TAGS):
            box = QCheckBox(display.role_label(role), self)
            box.toggled.connect(self._emit_roles)
            roles_grid.addWidget(box, position // 3, position % 3)
            self._role_boxes[role] = box
        layout.addLayout(roles_grid)

        self.set_stage(index, stage)

    def set_stage(self, index: int, stage: StageRecord) -> None:
        self._index = index
        self._title.setText(f"Stage {index + 1}")
        widgets: list[QWidget] = [
            self._name_input,
            self._description_input,
            self._order_input,
            self._required_box,
            *self._role_boxes.values(),
        ]
        if self._duration_input is not None:
            widgets.append(self._duration_input)
        for widget in widgets:
            widget.blockSignals(True)
        try:
            if self._name_input.text() != stage.name:
                self._name_input.setText(stage.name)
            if self._description_input.text() != stage.description:
                self._description_input.setText(stage.description)
            self._order_input.setValue(stage.order)
            self._required_box.setChecked(stage.is_required)
            for role, box in self._role_boxes.items():
                box.setChecked(role in stage.allowed_roles)
            if self._duration_input is not None:
                self._duration_input.setValue(stage.estimated_duration or 0)
        finally:
            for widget in widgets:
                widget.blockSignals(False)

    def set_remove_enabled(self, enabled: bool) -> None:
        self._remove_button.setEnabled(enabled)

    def _emit(self, **changes: object) -> None:
        self.changed.emit(self._index, dict(changes))

    def _emit_roles(self, _checked: bool) -> None:
        roles = [role for role, box in self._role_boxes.items() if box.isChecked()]
        self._emit(allowed_roles=roles)
