from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Callable

from welfaredesk.app.admin_models import (
    NODE_TYPE_DISTRICT,
    NODE_TYPES,
    STATUS_UPDATE_STATUSES,
    StageRecord,
    node_type_label,
    normalize_node_type,
    normalize_role_tags,
    normalize_status,
    parent_node_type,
)
from welfaredesk.app.errors import FieldError


ENTITY_STAGE = "stage"
ENTITY_STATUS_UPDATE = "status_update"

STAGE_NAME_MAX_LENGTH = 100
STAGE_DESCRIPTION_MAX_LENGTH = 500
STATUS_DESCRIPTION_MAX_LENGTH = 1000
STATUS_REMARKS_MAX_LENGTH = 500

_NON_ALPHA_RUN_PATTERN = re.compile(r"[^A-Z]+")

Rule = Callable[[str, Mapping[str, Any]], "FieldError | None"]


def derive_code(name: Any) -> str:
    """Uppercase ``name`` and collapse every non-letter run to a single underscore."""
    text = str(name or "").strip().upper()
    return _NON_ALPHA_RUN_PATTERN.sub("_", text).strip("_")


def normalize_code(code: Any) -> str:
    return str(code or "").strip().upper()


def _text(values: Mapping[str, Any], key: str) -> str:
    value = values.get(key)
    if value is None:
        return ""
    return str(value).strip()


def _name_required(entity_type: str, values: Mapping[str, Any]) -> FieldError | None:
    if _text(values, "name"):
        return None
    return FieldError("name", f"{node_type_label(entity_type)} name is required")


def _code_required(entity_type: str, values: Mapping[str, Any]) -> FieldError | None:
    if entity_type == NODE_TYPE_DISTRICT or _text(values, "code"):
        return None
    return FieldError("code", f"{node_type_label(entity_type)} code is required")


def _parent_required(entity_type: str, values: Mapping[str, Any]) -> FieldError | None:
    parent_type = parent_node_type(entity_type)
    if not parent_type or _text(values, "parent_id"):
        return None
    return FieldError("parent_id", f"Parent {parent_type} is required")


_LOCATION_RULES: tuple[Rule, ...] = (_name_required, _code_required, _parent_required)


def _validate_stage(values: Mapping[str, Any]) -> FieldError | None:
    name = _text(values, "name")
    if not name:
        return FieldError("name", "Stage name is required")
    if len(name) > STAGE_NAME_MAX_LENGTH:
        return FieldError("name", f"Name must be less than {STAGE_NAME_MAX_LENGTH} characters")
    if len(_text(values, "description")) > STAGE_DESCRIPTION_MAX_LENGTH:
        return FieldError(
            "description",
            f"Description must be less than {STAGE_DESCRIPTION_MAX_LENGTH} characters",
        )
    try:
        order = int(values.get("order"))
    except (TypeError, ValueError):
        order = 0
    if order < 1:
        return FieldError("order", "Order must be at least 1")
    if not normalize_role_tags(values.get("allowed_roles")):
        return FieldError("allowed_roles", "At least one role must be selected")
    duration = values.get("estimated_duration")
    if duration is not None and duration != "":
        try:
            parsed_duration = float(duration)
        except (TypeError, ValueError):
            return FieldError("estimated_duration", "Duration must be a number")
        if parsed_duration < 0:
            return FieldError("estimated_duration", "Duration must be non-negative")
    return None


def _validate_status_update(values: Mapping[str, Any]) -> FieldError | None:
    if not _text(values, "stage"):
        return FieldError("stage", "Stage is required")
    if normalize_status(values.get("status")) not in STATUS_UPDATE_STATUSES:
        return FieldError("status", "Status must be one of: " + ", ".join(STATUS_UPDATE_STATUSES))
    description = _text(values, "description")
    if not description:
        return FieldError("description", "Description is required")
    if len(description) > STATUS_DESCRIPTION_MAX_LENGTH:
        return FieldError(
            "description",
            f"Description must be less than {STATUS_DESCRIPTION_MAX_LENGTH} characters",
        )
    if len(_text(values, "remarks")) > STATUS_REMARKS_MAX_LENGTH:
        return FieldError("remarks", f"Remarks must be less than {STATUS_REMARKS_MAX_LENGTH} characters")
    return None


def validate(entity_type: str, values: Mapping[str, Any]) -> list[FieldError]:
    """Check ``values`` for ``entity_type``; stops at the first failing rule.

    Returns an empty list when the values are acceptable. Only one error is
    ever reported so the form can show a single message at a time.
    """
    normalized = str(entity_type or "").strip().casefold()
    if normalized == ENTITY_STAGE:
        error = _validate_stage(values)
        return [error] if error is not None else []
    if normalized == ENTITY_STATUS_UPDATE:
        error = _validate_status_update(values)
        return [error] if error is not None else []

    node_type = normalize_node_type(normalized)
    if node_type not in NODE_TYPES:
        raise ValueError(f"Unknown entity type: {entity_type!r}")
    for rule in _LOCATION_RULES:
        error = rule(node_type, values)
        if error is not None:
            return [error]
    return []


def stage_values(stage: StageRecord) -> dict[str, Any]:
    return {
        "name": stage.name,
        "description": stage.description,
        "order": stage.order,
        "allowed_roles": stage.allowed_roles,
        "estimated_duration": stage.estimated_duration,
    }
