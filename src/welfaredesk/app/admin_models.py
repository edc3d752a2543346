from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


NODE_TYPE_DISTRICT = "district"
NODE_TYPE_AREA = "area"
NODE_TYPE_UNIT = "unit"
NODE_TYPES: tuple[str, ...] = (NODE_TYPE_DISTRICT, NODE_TYPE_AREA, NODE_TYPE_UNIT)
_PARENT_NODE_TYPES: dict[str, str] = {
    NODE_TYPE_AREA: NODE_TYPE_DISTRICT,
    NODE_TYPE_UNIT: NODE_TYPE_AREA,
}

STATUS_UPDATE_STATUSES: tuple[str, ...] = (
    "pending",
    "in_progress",
    "completed",
    "on_hold",
    "cancelled",
)
_STATUS_ALIASES: dict[str, str] = {
    "in progress": "in_progress",
    "inprogress": "in_progress",
    "on hold": "on_hold",
    "onhold": "on_hold",
    "canceled": "cancelled",
    "done": "completed",
}

ROLE_TAGS: tuple[str, ...] = (
    "super_admin",
    "state_admin",
    "district_admin",
    "area_admin",
    "unit_admin",
    "project_coordinator",
    "scheme_coordinator",
)
DEFAULT_STAGE_ROLES: tuple[str, ...] = ("super_admin",)

_ROLE_TAG_NORMALIZE_PATTERN = re.compile(r"[^a-z0-9_]+")


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return str(value).strip()


def _as_positive_int(value: Any, *, default: int = 1) -> int:
    try:
        parsed = int(value)
    except Exception:
        return max(1, int(default))
    return max(1, parsed)


def _as_non_negative_int(value: Any) -> int:
    try:
        parsed = int(value)
    except Exception:
        return 0
    return max(0, parsed)


def _as_optional_duration(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        parsed = float(value)
    except Exception:
        return None
    return max(0.0, parsed)


def _as_bool(value: Any, *, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    text = _as_text(value).casefold()
    if text in {"1", "true", "yes", "y", "on"}:
        return True
    if text in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _record_id(value: Mapping[str, Any]) -> str:
    return _as_text(value.get("id") or value.get("_id"))


def _reference_id(value: Any) -> str:
    if isinstance(value, Mapping):
        return _record_id(value)
    return _as_text(value)


def normalize_node_type(value: Any) -> str:
    normalized = _as_text(value).casefold()
    if normalized in NODE_TYPES:
        return normalized
    return ""


def parent_node_type(node_type: Any) -> str:
    """Return the type one level above ``node_type`` or "" for roots."""
    return _PARENT_NODE_TYPES.get(normalize_node_type(node_type), "")


def requires_parent(node_type: Any) -> bool:
    return bool(parent_node_type(node_type))


def node_type_label(node_type: Any) -> str:
    normalized = normalize_node_type(node_type)
    return normalized.title() if normalized else "Location"


def normalize_status(value: Any) -> str:
    raw = _as_text(value).casefold()
    raw = _STATUS_ALIASES.get(raw, raw).replace("-", "_").replace(" ", "_")
    if raw in STATUS_UPDATE_STATUSES:
        return raw
    return ""


def normalize_role_tags(value: Any) -> list[str]:
    if isinstance(value, str):
        candidates: list[Any] = value.replace(";", ",").split(",")
    elif isinstance(value, (list, tuple, set, frozenset)):
        candidates = list(value)
    else:
        candidates = []

    roles: list[str] = []
    seen: set[str] = set()
    for candidate in candidates:
        text = _as_text(candidate).casefold().replace("-", "_").replace(" ", "_")
        tag = _ROLE_TAG_NORMALIZE_PATTERN.sub("", text)
        if not tag or tag in seen:
            continue
        seen.add(tag)
        roles.append(tag)
    return roles


def _parse_iso_datetime(value: Any) -> datetime | None:
    text = _as_text(value)
    if not text:
        return None
    normalized = text.replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(normalized)
    except Exception:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(slots=True)
class HierarchyNode:
    node_id: str
    name: str
    code: str = ""
    node_type: str = NODE_TYPE_DISTRICT
    parent_id: str = ""
    parent_name: str = ""
    is_active: bool = True
    dependent_count: int = 0

    @classmethod
    def from_mapping(cls, value: Mapping[str, Any] | None) -> "HierarchyNode":
        if not isinstance(value, Mapping):
            return cls(node_id="", name="")
        parent = value.get("parent") or value.get("parentId") or value.get("parent_id")
        parent_name = ""
        if isinstance(parent, Mapping):
            parent_name = _as_text(parent.get("name"))
        return cls(
            node_id=_record_id(value),
            name=_as_text(value.get("name")),
            code=_as_text(value.get("code")).upper(),
            node_type=normalize_node_type(value.get("type") or value.get("node_type")) or NODE_TYPE_DISTRICT,
            parent_id=_reference_id(parent),
            parent_name=parent_name,
            is_active=_as_bool(value.get("isActive"), default=True),
            dependent_count=_as_non_negative_int(
                value.get("childrenCount") or value.get("dependent_count")
            ),
        )

    def to_mapping(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": _as_text(self.name),
            "code": _as_text(self.code).upper(),
            "type": normalize_node_type(self.node_type) or NODE_TYPE_DISTRICT,
        }
        if requires_parent(self.node_type) and _as_text(self.parent_id):
            payload["parent"] = {"id": _as_text(self.parent_id)}
        return payload

    @property
    def has_dependents(self) -> bool:
        return self.dependent_count > 0


@dataclass(slots=True)
class StageRecord:
    name: str = ""
    description: str = ""
    order: int = 1
    is_required: bool = True
    allowed_roles: list[str] = field(default_factory=lambda: list(DEFAULT_STAGE_ROLES))
    estimated_duration: float | None = None

    @classmethod
    def from_mapping(cls, value: Mapping[str, Any] | None) -> "StageRecord":
        if not isinstance(value, Mapping):
            return cls()
        roles = normalize_role_tags(value.get("allowedRoles") or value.get("allowed_roles"))
        return cls(
            name=_as_text(value.get("name")),
            description=_as_text(value.get("description")),
            order=_as_positive_int(value.get("order")),
            # A missing flag means required, matching the backend default.
            is_required=value.get("isRequired") is not False,
            allowed_roles=roles or list(DEFAULT_STAGE_ROLES),
            estimated_duration=_as_optional_duration(
                value.get("estimatedDuration", value.get("estimated_duration"))
            ),
        )

    def to_mapping(self, *, include_duration: bool = True) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": _as_text(self.name),
            "description": _as_text(self.description),
            "order": int(self.order),
            "isRequired": bool(self.is_required),
            "allowedRoles": normalize_role_tags(self.allowed_roles),
        }
        if include_duration and self.estimated_duration is not None:
            payload["estimatedDuration"] = self.estimated_duration
        return payload

    def copy(self) -> "StageRecord":
        return StageRecord(
            name=self.name,
            description=self.description,
            order=self.order,
            is_required=self.is_required,
            allowed_roles=list(self.allowed_roles),
            estimated_duration=self.estimated_duration,
        )


def _parse_stages(value: Any) -> list[StageRecord]:
    if not isinstance(value, list):
        return []
    rows: list[StageRecord] = []
    for item in value:
        if not isinstance(item, Mapping):
            continue
        rows.append(StageRecord.from_mapping(item))
    return rows


@dataclass(slots=True)
class StagesConfiguration:
    stages: list[StageRecord] = field(default_factory=list)
    enable_public_tracking: bool = False
    email_notifications: bool = True
    sms_notifications: bool = False

    @classmethod
    def from_mapping(cls, value: Mapping[str, Any] | None) -> "StagesConfiguration":
        if not isinstance(value, Mapping):
            return cls()
        notifications = value.get("notificationSettings")
        if not isinstance(notifications, Mapping):
            notifications = {}
        return cls(
            stages=_parse_stages(value.get("stages")),
            enable_public_tracking=_as_bool(value.get("enablePublicTracking"), default=False),
            email_notifications=_as_bool(notifications.get("emailNotifications"), default=True),
            sms_notifications=_as_bool(notifications.get("smsNotifications"), default=False),
        )

    def to_mapping(self) -> dict[str, Any]:
        return {
            "stages": [stage.to_mapping() for stage in self.stages],
            "enablePublicTracking": bool(self.enable_public_tracking),
            "notificationSettings": {
                "emailNotifications": bool(self.email_notifications),
                "smsNotifications": bool(self.sms_notifications),
            },
        }


@dataclass(slots=True)
class StatusUpdateRecord:
    update_id: str = ""
    stage: str = ""
    status: str = "pending"
    description: str = ""
    remarks: str = ""
    updated_at: str = ""
    updated_by: str = ""

    @classmethod
    def from_mapping(cls, value: Mapping[str, Any] | None) -> "StatusUpdateRecord":
        if not isinstance(value, Mapping):
            return cls()
        actor = value.get("updatedBy") or value.get("createdBy")
        if isinstance(actor, Mapping):
            actor_name = _as_text(actor.get("name")) or _record_id(actor)
        else:
            actor_name = _as_text(actor)
        return cls(
            update_id=_record_id(value),
            stage=_as_text(value.get("stage")),
            status=normalize_status(value.get("status")) or "pending",
            description=_as_text(value.get("description")),
            remarks=_as_text(value.get("remarks")),
            updated_at=_as_text(value.get("updatedAt") or value.get("createdAt")),
            updated_by=actor_name,
        )

    def to_mapping(self) -> dict[str, str]:
        payload = {
            "stage": _as_text(self.stage),
            "status": normalize_status(self.status) or "pending",
            "description": _as_text(self.description),
        }
        remarks = _as_text(self.remarks)
        if remarks:
            payload["remarks"] = remarks
        return payload

    @property
    def sort_key(self) -> datetime:
        return _parse_iso_datetime(self.updated_at) or datetime.min.replace(tzinfo=timezone.utc)


def sort_status_updates(updates: list[StatusUpdateRecord]) -> list[StatusUpdateRecord]:
    """Newest first; entries without a timestamp sink to the end."""
    return sorted(updates, key=lambda row: row.sort_key, reverse=True)


@dataclass(slots=True)
class ProjectRecord:
    project_id: str
    name: str
    code: str = ""
    status: str = ""
    status_updates: list[StatusUpdateRecord] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, value: Mapping[str, Any] | None) -> "ProjectRecord":
        if not isinstance(value, Mapping):
            return cls(project_id="", name="")
        raw_updates = value.get("statusUpdates")
        updates: list[StatusUpdateRecord] = []
        if isinstance(raw_updates, list):
            updates = [
                StatusUpdateRecord.from_mapping(item)
                for item in raw_updates
                if isinstance(item, Mapping)
            ]
        return cls(
            project_id=_record_id(value),
            name=_as_text(value.get("name")),
            code=_as_text(value.get("code")),
            status=_as_text(value.get("status")),
            status_updates=sort_status_updates(updates),
        )


@dataclass(slots=True)
class SchemeRecord:
    scheme_id: str
    name: str
    requires_interview: bool = False
    status_stages: list[StageRecord] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, value: Mapping[str, Any] | None) -> "SchemeRecord":
        if not isinstance(value, Mapping):
            return cls(scheme_id="", name="")
        settings = value.get("applicationSettings")
        if not isinstance(settings, Mapping):
            settings = {}
        return cls(
            scheme_id=_record_id(value),
            name=_as_text(value.get("name")),
            requires_interview=_as_bool(settings.get("requiresInterview"), default=False),
            status_stages=_parse_stages(value.get("statusStages")),
        )


@dataclass(slots=True)
class BeneficiaryRecord:
    beneficiary_id: str
    name: str
    phone: str = ""
    application_count: int = 0

    @classmethod
    def from_mapping(cls, value: Mapping[str, Any] | None) -> "BeneficiaryRecord":
        if not isinstance(value, Mapping):
            return cls(beneficiary_id="", name="")
        applications = value.get("applications")
        if isinstance(applications, list):
            count = len(applications)
        else:
            count = _as_non_negative_int(value.get("applicationCount"))
        return cls(
            beneficiary_id=_record_id(value),
            name=_as_text(value.get("name")),
            phone=_as_text(value.get("phone")),
            application_count=count,
        )


@dataclass(slots=True)
class UserRecord:
    user_id: str
    name: str
    email: str = ""
    phone: str = ""
    role: str = ""
    is_active: bool = True

    @classmethod
    def from_mapping(cls, value: Mapping[str, Any] | None) -> "UserRecord":
        if not isinstance(value, Mapping):
            return cls(user_id="", name="")
        return cls(
            user_id=_record_id(value),
            name=_as_text(value.get("name")),
            email=_as_text(value.get("email")),
            phone=_as_text(value.get("phone")),
            role=next(iter(normalize_role_tags([value.get("role")])), ""),
            is_active=_as_bool(value.get("isActive"), default=True),
        )

    @property
    def role_label(self) -> str:
        return self.role.replace("_", " ").title()


TRANSACTION_TYPES: tuple[str, ...] = ("full_payment", "installment", "advance", "refund")
TRANSACTION_STATUSES: tuple[str, ...] = ("pending", "processing", "completed", "failed", "cancelled")
PAYMENT_METHODS: tuple[str, ...] = ("cash", "bank_transfer", "upi", "cheque", "card")


def _as_choice(value: Any, choices: tuple[str, ...], *, default: str = "") -> str:
    normalized = _as_text(value).casefold().replace(" ", "_").replace("-", "_")
    return normalized if normalized in choices else default


def _as_amount(value: Any) -> float:
    try:
        parsed = float(value)
    except Exception:
        return 0.0
    return parsed if math.isfinite(parsed) else 0.0


@dataclass(slots=True)
class TransactionRecord:
    """One payment from ``/budget/transactions``.

    ``transaction_type``, ``status`` and ``method`` are narrowed to their known
    values on the way in; anything unrecognised becomes ``""`` (or ``pending``
    for the status) instead of leaking raw server text into the UI.
    """

    transaction_id: str
    reference: str = ""
    transaction_type: str = ""
    status: str = "pending"
    amount: float = 0.0
    net_amount: float | None = None
    method: str = ""
    date: str = ""
    beneficiary_name: str = ""
    scheme_name: str = ""
    project_name: str = ""

    @classmethod
    def from_mapping(cls, value: Mapping[str, Any] | None) -> "TransactionRecord":
        if not isinstance(value, Mapping):
            return cls(transaction_id="")
        net = value.get("netAmount")
        return cls(
            transaction_id=_record_id(value),
            reference=_as_text(value.get("paymentNumber") or value.get("reference")),
            transaction_type=_as_choice(value.get("type"), TRANSACTION_TYPES),
            status=_as_choice(value.get("status"), TRANSACTION_STATUSES, default="pending"),
            amount=_as_amount(value.get("amount")),
            net_amount=None if net is None or net == "" else _as_amount(net),
            method=_as_choice(value.get("method"), PAYMENT_METHODS),
            date=_as_text(value.get("date")),
            beneficiary_name=_as_text(value.get("beneficiaryName")),
            scheme_name=_as_text(value.get("schemeName")),
            project_name=_as_text(value.get("projectName")),
        )

    @property
    def type_label(self) -> str:
        return self.transaction_type.replace("_", " ").title() if self.transaction_type else "Unknown"

    @property
    def sort_key(self) -> datetime:
        return _parse_iso_datetime(self.date) or datetime.min.replace(tzinfo=timezone.utc)
