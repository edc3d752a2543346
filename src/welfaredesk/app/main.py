from __future__ import annotations

import logging
import sys
from typing import Callable, Sequence

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction
from PySide6.QtWidgets import (
    QAbstractItemView,
    QApplication,
    QComboBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from welfaredesk import __version__
from welfaredesk.app.admin_models import (
    NODE_TYPES,
    BeneficiaryRecord,
    HierarchyNode,
    ProjectRecord,
    TransactionRecord,
    UserRecord,
    node_type_label,
)
from welfaredesk.app.api_client import AdminApi, WelfareApiClient
from welfaredesk.app.delete_controller import (
    DELETE_DONE,
    DeleteController,
    DeleteTarget,
    beneficiary_delete_target,
    location_delete_target,
    user_delete_target,
)
from welfaredesk.app.display_config import DEFAULT_DISPLAY_CONFIG, DisplayConfig
from welfaredesk.app.errors import DeleteBlockedError, user_message
from welfaredesk.app.form_controller import LocationFormController
from welfaredesk.app.request_runner import RequestRunner
from welfaredesk.app.settings_store import (
    ApiSettings,
    load_api_settings,
    load_dark_mode,
    save_api_settings,
    save_dark_mode,
)
from welfaredesk.app.stage_config_controllers import ProjectStagesFormController, SchemeStagesFormController
from welfaredesk.app.status_update_controller import StatusUpdateFormController
from welfaredesk.ui.dialogs import ConnectionDialog, LocationDialog, StagesConfigDialog, StatusUpdatesDialog
from welfaredesk.ui.qt_request_runner import QtRequestRunner
from welfaredesk.ui.theme import apply_app_theme, theme_mode_for
from welfaredesk.ui.window import AppConfirmDialog, AppMessageDialog


def _table(parent: QWidget, headers: Sequence[str]) -> QTableWidget:
    table = QTableWidget(0, len(headers), parent)
    table.setHorizontalHeaderLabels(list(headers))
    table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
    table.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
    table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
    table.verticalHeader().setVisible(False)
    table.horizontalHeader().setStretchLastSection(True)
    return table


def _button(text: str, parent: QWidget, *, primary: bool = False, danger: bool = False) -> QPushButton:
    button = QPushButton(text, parent)
    button.setObjectName("DangerButton" if danger else "DialogButton")
    if primary:
        button.setProperty("primary", "true")
    return button


class AdminWindow(QMainWindow):
    """Lists the admin records and launches the editing dialogs."""

    def __init__(
        self,
        api: AdminApi,
        runner: RequestRunner,
        *,
        theme_mode: str,
        display: DisplayConfig = DEFAULT_DISPLAY_CONFIG,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__()
        self._api = api
        self._runner = runner
        self._theme_mode = theme_mode
        self._display = display
        self._logger = logger or logging.getLogger("welfaredesk.window")
        self._locations: list[HierarchyNode] = []
        self._projects: list[ProjectRecord] = []
        self._beneficiaries: list[BeneficiaryRecord] = []
        self._users: list[UserRecord] = []
        self._location_generation = 0

        self.setWindowTitle("Welfare Desk")
        self.resize(980, 640)

        tabs = QTabWidget(self)
        tabs.addTab(self._build_locations_tab(tabs), "Locations")
        tabs.addTab(self._build_projects_tab(tabs), "Projects")
        tabs.addTab(self._build_schemes_tab(tabs), "Schemes")
        tabs.addTab(self._build_beneficiaries_tab(tabs), "Beneficiaries")
        tabs.addTab(self._build_users_tab(tabs), "Users")
        tabs.addTab(self._build_transactions_tab(tabs), "Transactions")
        self.setCentralWidget(tabs)
        self._build_menus()

        self.refresh_all()

    # Locations.

    def _build_locations_tab(self, parent: QWidget) -> QWidget:
        page = QWidget(parent)
        layout = QVBoxLayout(page)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(8)

        toolbar = QHBoxLayout()
        toolbar.setContentsMargins(0, 0, 0, 0)
        self._location_type_combo = QComboBox(page)
        self._location_type_combo.setObjectName("FormCombo")
        for node_type in NODE_TYPES:
            self._location_type_combo.addItem(f"{node_type_label(node_type)}s", node_type)
        self._location_type_combo.currentIndexChanged.connect(lambda _index: self.refresh_locations())
        toolbar.addWidget(self._location_type_combo)
        toolbar.addStretch(1)

        refresh_button = _button("Refresh", page)
        refresh_button.clicked.connect(self.refresh_locations)
        toolbar.addWidget(refresh_button)
        add_button = _button("Add", page, primary=True)
        add_button.clicked.connect(self._add_location)
        toolbar.addWidget(add_button)
        self._edit_location_button = _button("Edit", page)
        self._edit_location_button.clicked.connect(self._edit_location)
        toolbar.addWidget(self._edit_location_button)
        self._delete_location_button = _button("Delete", page, danger=True)
        self._delete_location_button.clicked.connect(self._delete_location)
        toolbar.addWidget(self._delete_location_button)
        layout.addLayout(toolbar)

        self._locations_table = _table(page, ("Name", "Code", "Parent", "Dependents"))
        self._locations_table.itemSelectionChanged.connect(self._sync_location_actions)
        self._locations_table.itemDoubleClicked.connect(lambda _item: self._edit_location())
        layout.addWidget(self._locations_table, 1)

        self._locations_status = QLabel(page)
        self._locations_status.setObjectName("DialogHint")
        self._locations_status.setWordWrap(True)
        layout.addWidget(self._locations_status)
        return page

    def _current_node_type(self) -> str:
        return str(self._location_type_combo.currentData() or NODE_TYPES[0])

    def _selected_location(self) -> HierarchyNode | None:
        row = self._locations_table.currentRow()
        if 0 <= row < len(self._locations):
            return self._locations[row]
        return None

    def refresh_locations(self) -> None:
        self._location_generation += 1
        generation = self._location_generation
        node_type = self._current_node_type()
        self._locations_status.setText(f"Loading {node_type}s...")

        def _loaded(nodes: list[HierarchyNode]) -> None:
            if generation != self._location_generation:
                return
            self._populate_locations(nodes)

        def _failed(exc: Exception) -> None:
            if generation != self._location_generation:
                return
            self._logger.warning("Failed to load %s list: %s", node_type, exc)
            self._populate_locations([])
            self._locations_status.setText(user_message(exc, fallback=f"Failed to load {node_type}s"))

        self._runner.run(lambda: self._api.list_by_type(node_type, active=True), _loaded, _failed)

    def _populate_locations(self, nodes: list[HierarchyNode]) -> None:
        self._locations = sorted(nodes, key=lambda node: node.name.casefold())
        table = self._locations_table
        table.setRowCount(len(self._locations))
        for row, node in enumerate(self._locations):
            for column, text in enumerate((node.name, node.code, node.parent_name, str(node.dependent_count))):
                item = QTableWidgetItem(text)
                if column == 3:
                    item.setTextAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
                table.setItem(row, column, item)
        count = len(self._locations)
        self._locations_status.setText(f"{count} {self._current_node_type()}{'' if count == 1 else 's'}")
        self._sync_location_actions()

    def _sync_location_actions(self) -> None:
        node = self._selected_location()
        self._edit_location_button.setEnabled(node is not None)
        blocked = node is not None and node.has_dependents
        self._delete_location_button.setEnabled(node is not None and not blocked)
        if blocked and node is not None:
            self._delete_location_button.setToolTip(
                str(location_delete_target(self._api, node).blocked_error())
            )
        else:
            self._delete_location_button.setToolTip("")

    def _location_controller(self) -> LocationFormController:
        return LocationFormController(self._api, self._current_node_type(), runner=self._runner)

    def _add_location(self) -> None:
        controller = self._location_controller()
        controller.open_create()
        self._run_location_dialog(controller)

    def _edit_location(self) -> None:
        node = self._selected_location()
        if node is None:
            return
        controller = self._location_controller()
        controller.open_edit(node.node_id)
        self._run_location_dialog(controller)

    def _run_location_dialog(self, controller: LocationFormController) -> None:
        dialog = LocationDialog(controller, parent=self, theme_mode=self._theme_mode)
        if dialog.exec() == dialog.DialogCode.Accepted and controller.refresh_requested:
            controller.acknowledge_refresh()
            self.refresh_locations()

    def _delete_location(self) -> None:
        node = self._selected_location()
        if node is None:
            return
        self._run_delete(location_delete_target(self._api, node), self.refresh_locations)

    def _run_delete(self, target: DeleteTarget, on_deleted: Callable[[], None]) -> None:
        controller = DeleteController(runner=self._runner)
        try:
            controller.request(target)
        except DeleteBlockedError as exc:
            AppMessageDialog.show_warning(
                parent=self,
                title=target.title,
                message=str(exc),
                theme_mode=self._theme_mode,
            )
            return
        confirmed = AppConfirmDialog.ask(
            parent=self,
            title=target.title,
            message=target.description,
            confirm_text="Delete",
            danger=True,
            theme_mode=self._theme_mode,
        )
        if not confirmed:
            controller.cancel()
            return

        def _on_change(delete_controller: DeleteController) -> None:
            if delete_controller.phase == DELETE_DONE:
                unsubscribe()
                on_deleted()
            elif delete_controller.error_message:
                unsubscribe()
                AppMessageDialog.show_warning(
                    parent=self,
                    title="Delete Failed",
                    message=delete_controller.error_message,
                    theme_mode=self._theme_mode,
                )

        unsubscribe = controller.subscribe(_on_change)
        controller.confirm()

    # Projects.

    def _build_projects_tab(self, parent: QWidget) -> QWidget:
        page = QWidget(parent)
        layout = QVBoxLayout(page)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(8)

        toolbar = QHBoxLayout()
        toolbar.setContentsMargins(0, 0, 0, 0)
        toolbar.addStretch(1)
        refresh_button = _button("Refresh", page)
        refresh_button.clicked.connect(self.refresh_projects)
        toolbar.addWidget(refresh_button)
        self._stages_button = _button("Configure Stages", page)
        self._stages_button.clicked.connect(self._configure_project_stages)
        toolbar.addWidget(self._stages_button)
        self._updates_button = _button("Status Updates", page, primary=True)
        self._updates_button.clicked.connect(self._open_status_updates)
        toolbar.addWidget(self._updates_button)
        layout.addLayout(toolbar)

        self._projects_table = _table(page, ("Name", "Code", "Status", "Updates"))
        self._projects_table.itemSelectionChanged.connect(self._sync_project_actions)
        layout.addWidget(self._projects_table, 1)

        self._projects_status = QLabel(page)
        self._projects_status.setObjectName("DialogHint")
        layout.addWidget(self._projects_status)
        self._sync_project_actions()
        return page

    def _selected_project(self) -> ProjectRecord | None:
        row = self._projects_table.currentRow()
        if 0 <= row < len(self._projects):
            return self._projects[row]
        return None

    def refresh_projects(self) -> None:
        self._projects_status.setText("Loading projects...")

        def _failed(exc: Exception) -> None:
            self._logger.warning("Failed to load projects: %s", exc)
            self._populate_projects([])
            self._projects_status.setText(user_message(exc, fallback="Failed to load projects"))

        self._runner.run(self._api.list_projects, self._populate_projects, _failed)

    def _populate_projects(self, projects: list[ProjectRecord]) -> None:
        self._projects = sorted(projects, key=lambda project: project.name.casefold())
        table = self._projects_table
        table.setRowCount(len(self._projects))
        for row, project in enumerate(self._projects):
            values = (project.name, project.code, project.status, str(len(project.status_updates)))
            for column, text in enumerate(values):
                table.setItem(row, column, QTableWidgetItem(text))
        self._projects_status.setText(f"{len(self._projects)} projects")
        self._sync_project_actions()

    def _sync_project_actions(self) -> None:
        self._updates_button.setEnabled(self._selected_project() is not None)

    def _configure_project_stages(self) -> None:
        controller = ProjectStagesFormController(self._api, runner=self._runner)
        project = self._selected_project()
        controller.select_project(project.project_id if project is not None else "")
        dialog = StagesConfigDialog(controller, display=self._display, parent=self, theme_mode=self._theme_mode)
        if dialog.exec() == dialog.DialogCode.Accepted:
            controller.acknowledge_refresh()
            self.refresh_projects()

    def _open_status_updates(self) -> None:
        project = self._selected_project()
        if project is None:
            return
        controller = StatusUpdateFormController(self._api, project, runner=self._runner)
        dialog = StatusUpdatesDialog(
            controller,
            DeleteController(runner=self._runner),
            display=self._display,
            parent=self,
            theme_mode=self._theme_mode,
        )
        if dialog.exec() == dialog.DialogCode.Accepted:
            self.refresh_projects()

    # Beneficiaries.

    def _build_beneficiaries_tab(self, parent: QWidget) -> QWidget:
        page = QWidget(parent)
        layout = QVBoxLayout(page)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(8)

        toolbar = QHBoxLayout()
        toolbar.setContentsMargins(0, 0, 0, 0)
        toolbar.addStretch(1)
        refresh_button = _button("Refresh", page)
        refresh_button.clicked.connect(self.refresh_beneficiaries)
        toolbar.addWidget(refresh_button)
        self._delete_beneficiary_button = _button("Delete", page, danger=True)
        self._delete_beneficiary_button.clicked.connect(self._delete_beneficiary)
        toolbar.addWidget(self._delete_beneficiary_button)
        layout.addLayout(toolbar)

        self._beneficiaries_table = _table(page, ("Name", "Phone", "Applications"))
        self._beneficiaries_table.itemSelectionChanged.connect(self._sync_beneficiary_actions)
        layout.addWidget(self._beneficiaries_table, 1)

        self._beneficiaries_status = QLabel(page)
        self._beneficiaries_status.setObjectName("DialogHint")
        self._beneficiaries_status.setWordWrap(True)
        layout.addWidget(self._beneficiaries_status)
        return page

    def _selected_beneficiary(self) -> BeneficiaryRecord | None:
        row = self._beneficiaries_table.currentRow()
        if 0 <= row < len(self._beneficiaries):
            return self._beneficiaries[row]
        return None

    def refresh_beneficiaries(self) -> None:
        self._beneficiaries_status.setText("Loading beneficiaries...")

        def _failed(exc: Exception) -> None:
            self._logger.warning("Failed to load beneficiaries: %s", exc)
            self._populate_beneficiaries([])
            self._beneficiaries_status.setText(user_message(exc, fallback="Failed to load beneficiaries"))

        self._runner.run(self._api.list_beneficiaries, self._populate_beneficiaries, _failed)

    def _populate_beneficiaries(self, beneficiaries: list[BeneficiaryRecord]) -> None:
        self._beneficiaries = sorted(beneficiaries, key=lambda row: row.name.casefold())
        table = self._beneficiaries_table
        table.setRowCount(len(self._beneficiaries))
        for row, beneficiary in enumerate(self._beneficiaries):
            values = (beneficiary.name, beneficiary.phone, str(beneficiary.application_count))
            for column, text in enumerate(values):
                table.setItem(row, column, QTableWidgetItem(text))
        self._beneficiaries_status.setText(f"{len(self._beneficiaries)} beneficiaries")
        self._sync_beneficiary_actions()

    def _sync_beneficiary_actions(self) -> None:
        beneficiary = self._selected_beneficiary()
        target = beneficiary_delete_target(self._api, beneficiary) if beneficiary is not None else None
        self._delete_beneficiary_button.setEnabled(target is not None and not target.blocked)
        self._delete_beneficiary_button.setToolTip(
            str(target.blocked_error()) if target is not None and target.blocked else ""
        )

    def _delete_beneficiary(self) -> None:
        beneficiary = self._selected_beneficiary()
        if beneficiary is None:
            return
        self._run_delete(beneficiary_delete_target(self._api, beneficiary), self.refresh_beneficiaries)

    # Users.

    def _build_users_tab(self, parent: QWidget) -> QWidget:
        page = QWidget(parent)
        layout = QVBoxLayout(page)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(8)

        toolbar = QHBoxLayout()
        toolbar.setContentsMargins(0, 0, 0, 0)
        toolbar.addStretch(1)
        refresh_button = _button("Refresh", page)
        refresh_button.clicked.connect(self.refresh_users)
        toolbar.addWidget(refresh_button)
        self._delete_user_button = _button("Delete", page, danger=True)
        self._delete_user_button.clicked.connect(self._delete_user)
        toolbar.addWidget(self._delete_user_button)
        layout.addLayout(toolbar)

        self._users_table = _table(page, ("Name", "Email", "Phone", "Role", "Active"))
        self._users_table.itemSelectionChanged.connect(
            lambda: self._delete_user_button.setEnabled(self._selected_user() is not None)
        )
        layout.addWidget(self._users_table, 1)

        self._users_status = QLabel(page)
        self._users_status.setObjectName("DialogHint")
        layout.addWidget(self._users_status)
        self._delete_user_button.setEnabled(False)
        return page

    def _selected_user(self) -> UserRecord | None:
        row = self._users_table.currentRow()
        if 0 <= row < len(self._users):
            return self._users[row]
        return None

    def refresh_users(self) -> None:
        self._users_status.setText("Loading users...")

        def _failed(exc: Exception) -> None:
            self._logger.warning("Failed to load users: %s", exc)
            self._populate_users([])
            self._users_status.setText(user_message(exc, fallback="Failed to load users"))

        self._runner.run(self._api.list_users, self._populate_users, _failed)

    def _populate_users(self, users: list[UserRecord]) -> None:
        self._users = sorted(users, key=lambda row: row.name.casefold())
        table = self._users_table
        table.setRowCount(len(self._users))
        for row, user in enumerate(self._users):
            values = (user.name, user.email, user.phone, user.role_label, "Yes" if user.is_active else "No")
            for column, text in enumerate(values):
                table.setItem(row, column, QTableWidgetItem(text))
        self._users_status.setText(f"{len(self._users)} users")
        self._delete_user_button.setEnabled(self._selected_user() is not None)

    def _delete_user(self) -> None:
        user = self._selected_user()
        if user is None:
            return
        self._run_delete(user_delete_target(self._api, user), self.refresh_users)

    # Transactions.

    def _build_transactions_tab(self, parent: QWidget) -> QWidget:
        page = QWidget(parent)
        layout = QVBoxLayout(page)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(8)

        toolbar = QHBoxLayout()
        toolbar.setContentsMargins(0, 0, 0, 0)
        toolbar.addStretch(1)
        refresh_button = _button("Refresh", page)
        refresh_button.clicked.connect(self.refresh_transactions)
        toolbar.addWidget(refresh_button)
        layout.addLayout(toolbar)

        self._transactions_table = _table(
            page, ("Reference", "Beneficiary", "Type", "Status", "Method", "Amount", "Date")
        )
        layout.addWidget(self._transactions_table, 1)

        self._transactions_status = QLabel(page)
        self._transactions_status.setObjectName("DialogHint")
        layout.addWidget(self._transactions_status)
        return page

    def refresh_transactions(self) -> None:
        self._transactions_status.setText("Loading transactions...")

        def _failed(exc: Exception) -> None:
            self._logger.warning("Failed to load transactions: %s", exc)
            self._populate_transactions([])
            self._transactions_status.setText(user_message(exc, fallback="Failed to load transactions"))

        self._runner.run(self._api.list_transactions, self._populate_transactions, _failed)

    def _populate_transactions(self, transactions: list[TransactionRecord]) -> None:
        table = self._transactions_table
        table.setRowCount(len(transactions))
        for row, transaction in enumerate(transactions):
            values = (
                transaction.reference,
                transaction.beneficiary_name,
                transaction.type_label,
                transaction.status.replace("_", " "),
                transaction.method.replace("_", " "),
                f"{transaction.amount:,.2f}",
                transaction.date[:10],
            )
            for column, text in enumerate(values):
                item = QTableWidgetItem(text)
                if column == 5:
                    item.setTextAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
                table.setItem(row, column, item)
        self._transactions_status.setText(f"{len(transactions)} recent transactions")

    # Settings.

    def _build_menus(self) -> None:
        settings_menu = self.menuBar().addMenu("&Settings")
        connection_action = QAction("API Connection...", self)
        connection_action.triggered.connect(self._edit_connection)
        settings_menu.addAction(connection_action)
        dark_action = QAction("Dark Mode", self)
        dark_action.setCheckable(True)
        dark_action.setChecked(self._theme_mode == "dark")
        dark_action.toggled.connect(self._set_dark_mode)
        settings_menu.addAction(dark_action)

    def _set_dark_mode(self, enabled: bool) -> None:
        save_dark_mode(enabled)
        app = QApplication.instance()
        if app is not None:
            self._theme_mode = apply_app_theme(app, mode=theme_mode_for(enabled))

    def _edit_connection(self) -> None:
        current = getattr(self._api, "settings", None)
        dialog = ConnectionDialog(
            current if isinstance(current, ApiSettings) else load_api_settings(),
            parent=self,
            theme_mode=self._theme_mode,
        )
        if dialog.exec() != dialog.DialogCode.Accepted:
            return
        saved = save_api_settings(dialog.values())
        self._logger.info("API connection changed to %s", saved.base_url)
        self._api = WelfareApiClient(saved)
        self.refresh_all()

    def refresh_all(self) -> None:
        self.refresh_locations()
        self.refresh_projects()
        self.refresh_beneficiaries()
        self.refresh_users()
        self.refresh_transactions()

    # Schemes.

    def _build_schemes_tab(self, parent: QWidget) -> QWidget:
        page = QWidget(parent)
        layout = QVBoxLayout(page)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(8)

        hint = QLabel("Enter a scheme id to edit its application checklist.", page)
        hint.setObjectName("DialogHint")
        layout.addWidget(hint)

        row = QHBoxLayout()
        row.setContentsMargins(0, 0, 0, 0)
        self._scheme_id_input = QLineEdit(page)
        self._scheme_id_input.setObjectName("FormInput")
        self._scheme_id_input.setPlaceholderText("Scheme id")
        row.addWidget(self._scheme_id_input, 1)
        open_button = _button("Edit Checklist", page, primary=True)
        open_button.clicked.connect(self._configure_scheme_stages)
        self._scheme_id_input.returnPressed.connect(self._configure_scheme_stages)
        row.addWidget(open_button)
        layout.addLayout(row)
        layout.addStretch(1)
        return page

    def _configure_scheme_stages(self) -> None:
        scheme_id = self._scheme_id_input.text().strip()
        if not scheme_id:
            AppMessageDialog.show_warning(
                parent=self,
                title="Missing Scheme",
                message="Please enter a scheme id.",
                theme_mode=self._theme_mode,
            )
            return
        controller = SchemeStagesFormController(self._api, runner=self._runner)
        controller.open_edit(scheme_id)
        dialog = StagesConfigDialog(controller, display=self._display, parent=self, theme_mode=self._theme_mode)
        if dialog.exec() == dialog.DialogCode.Accepted:
            controller.acknowledge_refresh()
            AppMessageDialog.show_info(
                parent=self,
                title="Checklist Saved",
                message="Checklist stages updated successfully.",
                theme_mode=self._theme_mode,
            )


def run(argv: Sequence[str] | None = None) -> int:
    app = QApplication.instance()
    if app is None:
        app = QApplication(list(argv or sys.argv))

    app.setApplicationName("welfaredesk")
    app.setApplicationVersion(__version__)

    theme_mode = apply_app_theme(app, mode=theme_mode_for(load_dark_mode(default=False)))

    settings = load_api_settings()
    logging.getLogger("welfaredesk.app").info(
        "Starting welfaredesk %s against %s", __version__, settings.base_url
    )
    runner = QtRequestRunner(app)
    window = AdminWindow(WelfareApiClient(settings), runner, theme_mode=theme_mode)
    app.aboutToQuit.connect(runner.shutdown)
    window.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(run())
