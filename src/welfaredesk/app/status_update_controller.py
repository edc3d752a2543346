from __future__ import annotations

import logging
from functools import partial
from typing import Any

from welfaredesk.app.admin_models import (
    ProjectRecord,
    StatusUpdateRecord,
    normalize_status,
    sort_status_updates,
)
from welfaredesk.app.api_client import AdminApi
from welfaredesk.app.delete_controller import DeleteTarget, status_update_delete_target
from welfaredesk.app.errors import ApiRequestError, FieldError
from welfaredesk.app.field_validator import ENTITY_STATUS_UPDATE, validate
from welfaredesk.app.form_controller import MODE_EDIT, FormController
from welfaredesk.app.request_runner import RequestRunner, Task


class StatusUpdateFormController(FormController):
    """Add or edit one entry in a project's status history.

    The controller also keeps the project's history, newest first, and
    replaces it with the list the backend returns after every save.
    """

    entity_label = "Status update"

    def __init__(
        self,
        api: AdminApi,
        project: ProjectRecord,
        *,
        runner: RequestRunner | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if not project.project_id:
            raise ValueError("A saved project is required to record status updates.")
        super().__init__(api, runner=runner, logger=logger)
        self._project = project
        self._history: list[StatusUpdateRecord] = sort_status_updates(list(project.status_updates))
        self._stage = ""
        self._status = "pending"
        self._description = ""
        self._remarks = ""

    @property
    def project(self) -> ProjectRecord:
        return self._project

    @property
    def history(self) -> tuple[StatusUpdateRecord, ...]:
        return tuple(self._history)

    @property
    def stage(self) -> str:
        return self._stage

    @property
    def status(self) -> str:
        return self._status

    @property
    def description(self) -> str:
        return self._description

    @property
    def remarks(self) -> str:
        return self._remarks

    def set_stage(self, value: str) -> None:
        self._stage = str(value or "")
        self._notify()

    def set_status(self, value: str) -> None:
        self._status = normalize_status(value) or self._status
        self._notify()

    def set_description(self, value: str) -> None:
        self._description = str(value or "")
        self._notify()

    def set_remarks(self, value: str) -> None:
        self._remarks = str(value or "")
        self._notify()

    def values(self) -> dict[str, str]:
        return {
            "stage": self._stage,
            "status": self._status,
            "description": self._description,
            "remarks": self._remarks,
        }

    def delete_target(self, update: StatusUpdateRecord) -> DeleteTarget:
        return status_update_delete_target(self._api, self._project.project_id, update)

    def forget(self, update_id: str) -> None:
        """Drop ``update_id`` from the local history after a confirmed delete."""
        self._history = [row for row in self._history if row.update_id != update_id]
        self._notify()

    def _reset_values(self) -> None:
        self._stage = ""
        self._status = "pending"
        self._description = ""
        self._remarks = ""

    def _fetch_record(self, record_id: str) -> StatusUpdateRecord | None:
        for row in tuple(self._history):
            if row.update_id == record_id:
                return row
        for row in self._api.list_status_updates(self._project.project_id):
            if row.update_id == record_id:
                return row
        raise ApiRequestError("Status update not found", status_code=404)

    def _apply_record(self, record: StatusUpdateRecord) -> None:
        self._stage = record.stage
        self._status = normalize_status(record.status) or "pending"
        self._description = record.description
        self._remarks = record.remarks

    def _validation_errors(self) -> list[FieldError]:
        return validate(ENTITY_STATUS_UPDATE, self.values())

    def _submit_task(self) -> Task:
        update = StatusUpdateRecord(
            update_id=self._record_id,
            stage=self._stage.strip(),
            status=self._status,
            description=self._description.strip(),
            remarks=self._remarks.strip(),
        )
        project_id = self._project.project_id
        if self._mode == MODE_EDIT:
            return partial(self._api.update_status_update, project_id, self._record_id, update)
        return partial(self._api.add_status_update, project_id, update)

    def _submit_failure_fallback(self) -> str:
        verb = "update" if self._mode == MODE_EDIT else "add"
        return f"Failed to {verb} status update"

    def _after_submit(self, result: Any) -> None:
        if isinstance(result, list) and result:
            self._history = sort_status_updates(result)
