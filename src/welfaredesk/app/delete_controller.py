from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Callable

from welfaredesk.app.admin_models import (
    BeneficiaryRecord,
    HierarchyNode,
    StatusUpdateRecord,
    UserRecord,
    node_type_label,
)
from welfaredesk.app.api_client import AdminApi
from welfaredesk.app.errors import DeleteBlockedError, user_message
from welfaredesk.app.request_runner import ImmediateRequestRunner, RequestRunner, Task


DELETE_IDLE = "idle"
DELETE_CONFIRMING = "confirming"
DELETE_DELETING = "deleting"
DELETE_DONE = "done"


@dataclass(frozen=True, slots=True)
class DeleteTarget:
    label: str
    record_id: str
    title: str
    description: str
    dependent_count: int
    task: Task
    dependent_noun: str = "dependent record"
    blocked_hint: str = "Please remove or move them first."

    @property
    def blocked(self) -> bool:
        return self.dependent_count > 0

    def blocked_error(self) -> DeleteBlockedError:
        return DeleteBlockedError(
            label=self.label,
            dependent_count=self.dependent_count,
            dependent_noun=self.dependent_noun,
            hint=self.blocked_hint,
        )


def location_delete_target(api: AdminApi, node: HierarchyNode) -> DeleteTarget:
    label = node_type_label(node.node_type)
    return DeleteTarget(
        label=label,
        record_id=node.node_id,
        title=f"Delete {label}",
        description=(
            f"This will permanently delete {label.lower()} \"{node.name}\" and all associated data. "
            "This action cannot be undone."
        ),
        dependent_count=node.dependent_count,
        task=partial(api.delete_location, node.node_id),
    )


def status_update_delete_target(
    api: AdminApi,
    project_id: str,
    update: StatusUpdateRecord,
) -> DeleteTarget:
    return DeleteTarget(
        label="Status update",
        record_id=update.update_id,
        title="Delete Status Update",
        description=f"Delete the \"{update.stage}\" status update? This action cannot be undone.",
        dependent_count=0,
        task=partial(api.delete_status_update, project_id, update.update_id),
    )


def beneficiary_delete_target(api: AdminApi, beneficiary: BeneficiaryRecord) -> DeleteTarget:
    """Beneficiaries with applications on file stay blocked until those are moved."""
    contact = f" ({beneficiary.phone})" if beneficiary.phone else ""
    return DeleteTarget(
        label="Beneficiary",
        record_id=beneficiary.beneficiary_id,
        title="Delete Beneficiary",
        description=(
            f"Delete beneficiary \"{beneficiary.name}\"{contact}? This action cannot be undone."
        ),
        dependent_count=beneficiary.application_count,
        task=partial(api.delete_beneficiary, beneficiary.beneficiary_id),
        dependent_noun="application",
        blocked_hint="Please remove or transfer the applications first.",
    )


def user_delete_target(api: AdminApi, user: UserRecord) -> DeleteTarget:
    return DeleteTarget(
        label="User",
        record_id=user.user_id,
        title="Delete User",
        description=(
            f"This will permanently delete the account of \"{user.name}\" and remove all associated data. "
            "This action cannot be undone."
        ),
        dependent_count=0,
        task=partial(api.delete_user, user.user_id),
    )


class DeleteController:
    """Confirm-then-delete flow. Records with dependents are never sent to the API."""

    def __init__(
        self,
        *,
        runner: RequestRunner | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._runner: RequestRunner = runner or ImmediateRequestRunner()
        self._logger = logger or logging.getLogger("welfaredesk.forms")
        self._listeners: list[Callable[[DeleteController], None]] = []
        self._phase = DELETE_IDLE
        self._target: DeleteTarget | None = None
        self._error_message = ""

    @property
    def phase(self) -> str:
        return self._phase

    @property
    def target(self) -> DeleteTarget | None:
        return self._target

    @property
    def error_message(self) -> str:
        return self._error_message

    @property
    def is_busy(self) -> bool:
        return self._phase == DELETE_DELETING

    @property
    def deleted(self) -> bool:
        return self._phase == DELETE_DONE

    def subscribe(self, callback: Callable[["DeleteController"], None]) -> Callable[[], None]:
        self._listeners.append(callback)

        def _unsubscribe() -> None:
            try:
                self._listeners.remove(callback)
            except ValueError:
                return

        return _unsubscribe

    def request(self, target: DeleteTarget) -> None:
        """Stage ``target`` for confirmation; raises when dependents block it."""
        if self._phase == DELETE_DELETING:
            self._logger.debug("Ignored delete request for %s while deleting.", target.label)
            return
        if target.blocked:
            raise target.blocked_error()
        self._target = target
        self._error_message = ""
        self._phase = DELETE_CONFIRMING
        self._notify()

    def cancel(self) -> bool:
        if self._phase == DELETE_DELETING:
            return False
        self._target = None
        self._error_message = ""
        self._phase = DELETE_IDLE
        self._notify()
        return True

    def confirm(self) -> bool:
        if self._phase != DELETE_CONFIRMING or self._target is None:
            return False
        self._phase = DELETE_DELETING
        self._error_message = ""
        self._notify()
        self._runner.run(self._target.task, self._on_deleted, self._on_failed)
        return True

    def _on_deleted(self, _result: object) -> None:
        self._phase = DELETE_DONE
        self._notify()

    def _on_failed(self, exc: Exception) -> None:
        target = self._target
        label = target.label if target is not None else "Record"
        self._logger.warning("Failed to delete %s: %s", label, exc)
        self._phase = DELETE_CONFIRMING
        self._error_message = user_message(
            exc,
            fallback=f"Failed to delete {label.lower()}. Please try again.",
            label=label,
        )
        self._notify()

    def _notify(self) -> None:
        for listener in tuple(self._listeners):
            try:
                listener(self)
            except Exception:
                self._logger.exception("Delete listener failed.")
