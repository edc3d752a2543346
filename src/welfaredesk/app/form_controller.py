from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable

from welfaredesk.app.admin_models import (
    NODE_TYPE_DISTRICT,
    HierarchyNode,
    node_type_label,
    normalize_node_type,
    parent_node_type,
)
from welfaredesk.app.api_client import AdminApi
from welfaredesk.app.errors import FieldError, user_message
from welfaredesk.app.field_validator import derive_code, normalize_code, validate
from welfaredesk.app.parent_resolver import ParentResolver
from welfaredesk.app.request_runner import ImmediateRequestRunner, RequestRunner, Task


FORM_CLOSED = "closed"
FORM_LOADING = "loading"
FORM_EDITING = "editing"
FORM_SUBMITTING = "submitting"

MODE_CREATE = "create"
MODE_EDIT = "edit"

LOAD_RECORD = "record"
LOAD_PARENTS = "parents"


@dataclass(frozen=True, slots=True)
class LoadRequest:
    key: str
    task: Task
    on_success: Callable[[Any], None]
    on_failure: Callable[[Exception], None]


class FormController:
    """Dialog session state machine shared by every entity form.

    A session runs ``closed -> loading (edit only) -> editing -> submitting``
    and ends either ``closed`` with ``refresh_requested`` set or back in
    ``editing`` with an error message. Every open bumps the load generation;
    results delivered for an older generation are dropped so a late response
    can never reach a form that was closed or reopened in the meantime.

    Subclasses provide the entity specifics through the ``_reset_values``,
    ``_fetch_record``, ``_apply_record``, ``_auxiliary_loads``,
    ``_validation_errors`` and ``_submit_task`` hooks.
    """

    entity_label = "Record"

    def __init__(
        self,
        api: AdminApi,
        *,
        runner: RequestRunner | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._api = api
        self._runner: RequestRunner = runner or ImmediateRequestRunner()
        self._logger = logger or logging.getLogger("welfaredesk.forms")
        self._listeners: list[Callable[[FormController], None]] = []
        self._generation = 0
        self._pending: set[str] = set()
        self._phase = FORM_CLOSED
        self._mode = MODE_CREATE
        self._record_id = ""
        self._error: FieldError | None = None
        self._warnings: list[str] = []
        self._refresh_requested = False

    @property
    def phase(self) -> str:
        return self._phase

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def record_id(self) -> str:
        return self._record_id

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_open(self) -> bool:
        return self._phase != FORM_CLOSED

    @property
    def is_busy(self) -> bool:
        return self._phase == FORM_SUBMITTING

    @property
    def pending_loads(self) -> frozenset[str]:
        return frozenset(self._pending)

    @property
    def error_message(self) -> str:
        return self._error.message if self._error is not None else ""

    @property
    def error_field(self) -> str:
        return self._error.field if self._error is not None else ""

    @property
    def warnings(self) -> tuple[str, ...]:
        return tuple(self._warnings)

    @property
    def refresh_requested(self) -> bool:
        return self._refresh_requested

    @property
    def title(self) -> str:
        verb = "Edit" if self._mode == MODE_EDIT else "Add"
        return f"{verb} {self.entity_label}"

    def subscribe(self, callback: Callable[["FormController"], None]) -> Callable[[], None]:
        self._listeners.append(callback)

        def _unsubscribe() -> None:
            try:
                self._listeners.remove(callback)
            except ValueError:
                return

        return _unsubscribe

    def open_create(self) -> bool:
        if not self._begin_session(MODE_CREATE, ""):
            return False
        self._reset_values()
        self._phase = FORM_EDITING
        self._notify()
        self._start_loads(self._auxiliary_loads())
        return True

    def open_edit(self, record_id: str) -> bool:
        normalized_id = str(record_id or "").strip()
        if not normalized_id:
            raise ValueError("A record id is required to open the form in edit mode.")
        if not self._begin_session(MODE_EDIT, normalized_id):
            return False
        self._reset_values()
        self._phase = FORM_LOADING
        self._notify()
        requests = [
            LoadRequest(
                key=LOAD_RECORD,
                task=partial(self._fetch_record, normalized_id),
                on_success=self._on_record_loaded,
                on_failure=self._on_record_failed,
            ),
            *self._auxiliary_loads(),
        ]
        self._start_loads(requests)
        return True

    def close(self) -> bool:
        if self._phase == FORM_SUBMITTING:
            self._logger.debug("Ignored close of %s form while submitting.", self.entity_label)
            return False
        if self._phase == FORM_CLOSED:
            return True
        self._generation += 1
        self._pending.clear()
        self._phase = FORM_CLOSED
        self._notify()
        return True

    def submit(self) -> bool:
        """Validate and send the form; returns True when a request was issued."""
        if self._phase != FORM_EDITING:
            self._logger.debug("Ignored submit of %s form in phase %s.", self.entity_label, self._phase)
            return False
        reason = self._submit_blocked_reason()
        if reason:
            self._set_error(FieldError("form", reason))
            return False
        errors = self._validation_errors()
        if errors:
            self._set_error(errors[0])
            return False

        task = self._submit_task()
        self._phase = FORM_SUBMITTING
        self._error = None
        self._notify()
        self._runner.run(task, self._on_submit_succeeded, self._on_submit_failed)
        return True

    def dismiss_warnings(self) -> None:
        if not self._warnings:
            return
        self._warnings.clear()
        self._notify()

    def acknowledge_refresh(self) -> None:
        self._refresh_requested = False

    # Hooks.

    def _reset_values(self) -> None:
        raise NotImplementedError

    def _fetch_record(self, record_id: str) -> Any:
        raise NotImplementedError

    def _apply_record(self, record: Any) -> None:
        raise NotImplementedError

    def _auxiliary_loads(self) -> list[LoadRequest]:
        return []

    def _validation_errors(self) -> list[FieldError]:
        return []

    def _submit_task(self) -> Task:
        raise NotImplementedError

    def _submit_blocked_reason(self) -> str:
        return ""

    def _submit_failure_fallback(self) -> str:
        verb = "update" if self._mode == MODE_EDIT else "create"
        return f"Failed to {verb} {self.entity_label.lower()}"

    def _missing_record_warning(self) -> str:
        return f"No saved {self.entity_label.lower()} was found. Default values are shown."

    def _after_submit(self, result: Any) -> None:
        return None

    # Internals.

    def _begin_session(self, mode: str, record_id: str) -> bool:
        if self._phase == FORM_SUBMITTING:
            self._logger.debug("Ignored open of %s form while submitting.", self.entity_label)
            return False
        self._generation += 1
        self._pending.clear()
        self._mode = mode
        self._record_id = record_id
        self._error = None
        self._warnings = []
        self._refresh_requested = False
        return True

    def _start_loads(self, requests: list[LoadRequest]) -> None:
        if not requests:
            return
        generation = self._generation
        self._pending.update(request.key for request in requests)
        for request in requests:
            self._runner.run(
                request.task,
                partial(self._deliver, generation, request.key, request.on_success),
                partial(self._deliver, generation, request.key, request.on_failure),
            )

    def _deliver(
        self,
        generation: int,
        key: str,
        handler: Callable[[Any], None],
        payload: Any,
    ) -> None:
        if generation != self._generation or key not in self._pending:
            self._logger.debug(
                "Discarded stale %s load for %s form (generation %s, current %s).",
                key,
                self.entity_label,
                generation,
                self._generation,
            )
            return
        self._pending.discard(key)
        handler(payload)
        if not self._pending and self._phase == FORM_LOADING:
            self._phase = FORM_EDITING
        self._notify()

    def _on_record_loaded(self, record: Any) -> None:
        if record is None:
            self._reset_values()
            self._warnings.append(self._missing_record_warning())
            return
        self._apply_record(record)

    def _on_record_failed(self, exc: Exception) -> None:
        self._logger.warning("Failed to load %s %s: %s", self.entity_label, self._record_id, exc)
        self._reset_values()
        detail = user_message(exc, label=self.entity_label)
        self._warnings.append(f"Could not load the saved {self.entity_label.lower()}: {detail}")

    def _on_submit_succeeded(self, result: Any) -> None:
        self._generation += 1
        self._pending.clear()
        self._phase = FORM_CLOSED
        self._refresh_requested = True
        self._after_submit(result)
        self._notify()

    def _on_submit_failed(self, exc: Exception) -> None:
        self._logger.warning("Failed to save %s: %s", self.entity_label, exc)
        self._phase = FORM_EDITING
        self._error = FieldError(
            "form",
            user_message(exc, fallback=self._submit_failure_fallback(), label=self.entity_label),
        )
        self._notify()

    def _set_error(self, error: FieldError) -> None:
        self._error = error
        self._notify()

    def _notify(self) -> None:
        for listener in tuple(self._listeners):
            try:
                listener(self)
            except Exception:
                self._logger.exception("Form listener failed for %s form.", self.entity_label)


class LocationFormController(FormController):
    """Create/edit form for one location type with a cascading parent picker."""

    def __init__(
        self,
        api: AdminApi,
        node_type: str,
        *,
        runner: RequestRunner | None = None,
        resolver: ParentResolver | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        normalized = normalize_node_type(node_type)
        if not normalized:
            raise ValueError(f"Unknown location type: {node_type!r}")
        super().__init__(api, runner=runner, logger=logger)
        self._node_type = normalized
        self._resolver = resolver or ParentResolver(api, logger=self._logger)
        self._name = ""
        self._code = ""
        self._parent_id = ""
        self._is_active = True
        self._parent_candidates: list[HierarchyNode] = []

    @property
    def entity_label(self) -> str:  # type: ignore[override]
        return node_type_label(self._node_type)

    @property
    def node_type(self) -> str:
        return self._node_type

    @property
    def parent_type(self) -> str:
        return parent_node_type(self._node_type)

    @property
    def requires_parent(self) -> bool:
        return bool(self.parent_type)

    @property
    def code_is_derived(self) -> bool:
        return self._node_type == NODE_TYPE_DISTRICT

    @property
    def name(self) -> str:
        return self._name

    @property
    def code(self) -> str:
        return self._code

    @property
    def parent_id(self) -> str:
        return self._parent_id

    @property
    def parent_candidates(self) -> tuple[HierarchyNode, ...]:
        return tuple(self._parent_candidates)

    @property
    def parents_loading(self) -> bool:
        return LOAD_PARENTS in self._pending

    @property
    def parent_selection_enabled(self) -> bool:
        return (
            self.requires_parent
            and self._phase == FORM_EDITING
            and not self.parents_loading
            and bool(self._parent_candidates)
        )

    @property
    def can_submit(self) -> bool:
        return self._phase == FORM_EDITING and not self._submit_blocked_reason()

    def set_name(self, value: str) -> None:
        self._name = str(value or "")
        if self.code_is_derived:
            self._code = derive_code(self._name)
        self._notify()

    def set_code(self, value: str) -> None:
        if self.code_is_derived:
            return
        self._code = normalize_code(value)
        self._notify()

    def set_parent(self, parent_id: str) -> None:
        if not self.requires_parent:
            return
        self._parent_id = str(parent_id or "").strip()
        self._notify()

    def values(self) -> dict[str, str]:
        return {
            "name": self._name,
            "code": self._code,
            "parent_id": self._parent_id,
        }

    def _reset_values(self) -> None:
        self._name = ""
        self._code = ""
        self._parent_id = ""
        self._is_active = True

    def _begin_session(self, mode: str, record_id: str) -> bool:
        if not super()._begin_session(mode, record_id):
            return False
        self._parent_candidates = []
        return True

    def _fetch_record(self, record_id: str) -> HierarchyNode:
        return self._api.get_location(record_id)

    def _apply_record(self, record: HierarchyNode) -> None:
        self._name = record.name
        self._code = derive_code(record.name) if self.code_is_derived else normalize_code(record.code)
        self._parent_id = record.parent_id if self.requires_parent else ""
        self._is_active = record.is_active
        self._drop_unavailable_parent()

    def _auxiliary_loads(self) -> list[LoadRequest]:
        if not self.requires_parent:
            return []
        return [
            LoadRequest(
                key=LOAD_PARENTS,
                task=partial(self._resolver.resolve_parents, self._node_type),
                on_success=self._on_parents_loaded,
                on_failure=self._on_parents_failed,
            )
        ]

    def _on_parents_loaded(self, candidates: list[HierarchyNode]) -> None:
        self._parent_candidates = list(candidates or [])
        if not self._parent_candidates:
            self._warnings.append(
                f"No active {self.parent_type}s are available. "
                f"Create a {self.parent_type} before adding a {self._node_type}."
            )
        self._drop_unavailable_parent()

    def _is_candidate(self, parent_id: str) -> bool:
        return any(candidate.node_id == parent_id for candidate in self._parent_candidates)

    def _drop_unavailable_parent(self) -> None:
        """Clear a loaded parent that is inactive or of the wrong type."""
        if not self._parent_id or not self._parent_candidates or self._is_candidate(self._parent_id):
            return
        self._logger.info(
            "Saved parent %s of %s %s is not selectable; clearing it.",
            self._parent_id,
            self._node_type,
            self._record_id or "(new)",
        )
        self._parent_id = ""
        self._warnings.append(
            f"The saved {self.parent_type} is inactive or no longer exists. "
            f"Select an active {self.parent_type}."
        )

    def _on_parents_failed(self, exc: Exception) -> None:
        self._logger.warning("Parent lookup for %s failed: %s", self._node_type, exc)
        self._on_parents_loaded([])

    def _submit_blocked_reason(self) -> str:
        if self.requires_parent and self.parents_loading:
            return f"Parent {self.parent_type}s are still loading"
        if self.requires_parent and not self._parent_candidates:
            return f"No {self.parent_type} is available to select as parent"
        return ""

    def _validation_errors(self) -> list[FieldError]:
        errors = validate(self._node_type, self.values())
        if errors:
            return errors
        if self.requires_parent and not self._is_candidate(self._parent_id):
            return [FieldError("parent_id", f"Select a valid {self.parent_type}")]
        return []

    def _submit_task(self) -> Task:
        node = HierarchyNode(
            node_id=self._record_id,
            name=self._name.strip(),
            code=derive_code(self._name) if self.code_is_derived else normalize_code(self._code),
            node_type=self._node_type,
            parent_id=self._parent_id if self.requires_parent else "",
            is_active=self._is_active,
        )
        if self._mode == MODE_EDIT:
            return partial(self._api.update_location, self._record_id, node)
        return partial(self._api.create_location, node)
