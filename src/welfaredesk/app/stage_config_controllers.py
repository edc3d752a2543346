from __future__ import annotations

import logging
from functools import partial
from typing import Any

from welfaredesk.app.admin_models import (
    ProjectRecord,
    SchemeRecord,
    StageRecord,
    StagesConfiguration,
)
from welfaredesk.app.api_client import AdminApi
from welfaredesk.app.errors import FieldError
from welfaredesk.app.form_controller import FORM_EDITING, MODE_EDIT, FormController, LoadRequest
from welfaredesk.app.request_runner import RequestRunner, Task
from welfaredesk.app.stage_list_editor import StageListEditor


LOAD_PROJECTS = "projects"

_FIELD_ADMIN_ROLES = ("super_admin", "state_admin", "district_admin", "area_admin", "unit_admin")
_REVIEW_ROLES = ("super_admin", "state_admin", "district_admin", "area_admin")
_APPROVER_ROLES = ("super_admin", "state_admin", "district_admin")


def default_project_stages() -> list[StageRecord]:
    return [
        StageRecord(
            name="Project Initiation",
            description="Initial project setup and planning",
            order=1,
            is_required=True,
            allowed_roles=["super_admin", "state_admin", "project_coordinator"],
            estimated_duration=7,
        )
    ]


def default_scheme_stages(*, requires_interview: bool = False) -> list[StageRecord]:
    """Eight-step application checklist used until a scheme saves its own."""
    rows = [
        ("Application Received", "Tick when application is received and logged", True, _FIELD_ADMIN_ROLES),
        ("Document Verification", "Tick when all documents are verified", True, _FIELD_ADMIN_ROLES),
        ("Field Verification", "Tick when field verification is completed", False, _FIELD_ADMIN_ROLES),
        (
            "Interview Process",
            "Tick when interview is completed",
            requires_interview,
            (*_FIELD_ADMIN_ROLES, "scheme_coordinator"),
        ),
        ("Final Review", "Tick when final review is completed", True, _REVIEW_ROLES),
        ("Approved", "Tick when application is approved", True, _APPROVER_ROLES),
        ("Disbursement", "Tick when money is disbursed", True, _APPROVER_ROLES),
        ("Completed", "Tick when the process is completed", True, _APPROVER_ROLES),
    ]
    return [
        StageRecord(
            name=name,
            description=description,
            order=position,
            is_required=required,
            allowed_roles=list(roles),
        )
        for position, (name, description, required, roles) in enumerate(rows, start=1)
    ]


def new_scheme_stage() -> StageRecord:
    return StageRecord(
        name="New Checklist Item",
        description="Tick when this task is completed",
        is_required=True,
        allowed_roles=["super_admin"],
    )


class _StageListFormController(FormController):
    _owner_label = "record"

    def __init__(
        self,
        api: AdminApi,
        *,
        runner: RequestRunner | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(api, runner=runner, logger=logger)
        self._editor = StageListEditor()

    @property
    def editor(self) -> StageListEditor:
        return self._editor

    @property
    def stages(self) -> list[StageRecord]:
        return self._editor.stages

    @property
    def can_remove_stage(self) -> bool:
        return self._phase == FORM_EDITING and self._editor.can_remove

    def add_stage(self) -> StageRecord | None:
        if self._phase != FORM_EDITING:
            return None
        stage = self._editor.append(self._new_stage())
        self._notify()
        return stage

    def remove_stage(self, index: int) -> bool:
        if self._phase != FORM_EDITING:
            return False
        removed = self._editor.remove(index)
        if removed:
            self._notify()
        return removed

    def update_stage(self, index: int, **changes: Any) -> StageRecord | None:
        """Apply ``changes`` to one row. Rows are read-only outside the editing phase."""
        if self._phase != FORM_EDITING:
            return None
        stage = self._editor.update(index, **changes)
        self._notify()
        return stage

    def _new_stage(self) -> StageRecord | None:
        return None

    def _validation_errors(self) -> list[FieldError]:
        return self._editor.validate()

    def _submit_blocked_reason(self) -> str:
        if self._mode != MODE_EDIT or not self._record_id:
            return f"Select a {self._owner_label} first"
        return ""


class ProjectStagesFormController(_StageListFormController):
    """Stage list and tracking/notification settings for one project."""

    entity_label = "Stages configuration"
    _owner_label = "project"

    def __init__(
        self,
        api: AdminApi,
        *,
        runner: RequestRunner | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(api, runner=runner, logger=logger)
        self._enable_public_tracking = False
        self._email_notifications = True
        self._sms_notifications = False
        self._projects: list[ProjectRecord] = []

    @property
    def project_id(self) -> str:
        return self._record_id

    @property
    def projects(self) -> tuple[ProjectRecord, ...]:
        return tuple(self._projects)

    @property
    def enable_public_tracking(self) -> bool:
        return self._enable_public_tracking

    @property
    def email_notifications(self) -> bool:
        return self._email_notifications

    @property
    def sms_notifications(self) -> bool:
        return self._sms_notifications

    def select_project(self, project_id: str) -> bool:
        """Load the saved configuration for ``project_id`` into the form."""
        normalized = str(project_id or "").strip()
        if not normalized:
            return self.open_create()
        return self.open_edit(normalized)

    def set_enable_public_tracking(self, enabled: bool) -> None:
        self._enable_public_tracking = bool(enabled)
        self._notify()

    def set_email_notifications(self, enabled: bool) -> None:
        self._email_notifications = bool(enabled)
        self._notify()

    def set_sms_notifications(self, enabled: bool) -> None:
        self._sms_notifications = bool(enabled)
        self._notify()

    def configuration(self) -> StagesConfiguration:
        return StagesConfiguration(
            stages=self._editor.stages,
            enable_public_tracking=self._enable_public_tracking,
            email_notifications=self._email_notifications,
            sms_notifications=self._sms_notifications,
        )

    def _reset_values(self) -> None:
        self._editor.replace(default_project_stages())
        self._enable_public_tracking = False
        self._email_notifications = True
        self._sms_notifications = False

    def _fetch_record(self, record_id: str) -> StagesConfiguration | None:
        return self._api.get_stage_configuration(record_id)

    def _apply_record(self, record: StagesConfiguration) -> None:
        if not record.stages:
            self._reset_values()
            self._warnings.append(self._missing_record_warning())
            return
        self._editor.replace(sorted(record.stages, key=lambda stage: stage.order))
        self._enable_public_tracking = record.enable_public_tracking
        self._email_notifications = record.email_notifications
        self._sms_notifications = record.sms_notifications

    def _missing_record_warning(self) -> str:
        return "This project has no saved stages yet. The default configuration is shown."

    def _auxiliary_loads(self) -> list[LoadRequest]:
        if self._projects:
            return []
        return [
            LoadRequest(
                key=LOAD_PROJECTS,
                task=self._api.list_projects,
                on_success=self._on_projects_loaded,
                on_failure=self._on_projects_failed,
            )
        ]

    def _on_projects_loaded(self, projects: list[ProjectRecord]) -> None:
        self._projects = sorted(
            (project for project in projects or [] if project.project_id),
            key=lambda project: project.name.casefold(),
        )

    def _on_projects_failed(self, exc: Exception) -> None:
        self._logger.warning("Failed to load projects: %s", exc)
        self._warnings.append("Could not load the project list.")

    def _submit_task(self) -> Task:
        return partial(self._api.set_stage_configuration, self._record_id, self.configuration())

    def _submit_failure_fallback(self) -> str:
        return "Failed to save stages configuration"


class SchemeStagesFormController(_StageListFormController):
    """Application checklist stages for one scheme."""

    entity_label = "Scheme"
    _owner_label = "scheme"

    def __init__(
        self,
        api: AdminApi,
        *,
        runner: RequestRunner | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(api, runner=runner, logger=logger)
        self._scheme_name = ""
        self._requires_interview = False

    @property
    def title(self) -> str:
        if self._scheme_name:
            return f"Checklist Stages - {self._scheme_name}"
        return "Checklist Stages"

    @property
    def scheme_name(self) -> str:
        return self._scheme_name

    @property
    def requires_interview(self) -> bool:
        return self._requires_interview

    def load_defaults(self) -> None:
        """Discard the current rows in favour of the standard checklist."""
        if self._phase != FORM_EDITING:
            return
        self._editor.replace(default_scheme_stages(requires_interview=self._requires_interview))
        self._notify()

    def _new_stage(self) -> StageRecord:
        return new_scheme_stage()

    def _reset_values(self) -> None:
        self._editor.replace(default_scheme_stages(requires_interview=self._requires_interview))

    def _fetch_record(self, record_id: str) -> SchemeRecord:
        return self._api.get_scheme(record_id)

    def _apply_record(self, record: SchemeRecord) -> None:
        self._scheme_name = record.name
        self._requires_interview = record.requires_interview
        if record.status_stages:
            self._editor.replace(sorted(record.status_stages, key=lambda stage: stage.order))
        else:
            self._reset_values()

    def _begin_session(self, mode: str, record_id: str) -> bool:
        if not super()._begin_session(mode, record_id):
            return False
        self._scheme_name = ""
        self._requires_interview = False
        return True

    def _submit_task(self) -> Task:
        return partial(self._api.set_scheme_stages, self._record_id, self._editor.stages)

    def _submit_failure_fallback(self) -> str:
        return "Failed to update checklist stages"
