from __future__ import annotations

from typing import Any, Iterable, Iterator

from welfaredesk.app.admin_models import DEFAULT_STAGE_ROLES, StageRecord, normalize_role_tags
from welfaredesk.app.errors import FieldError
from welfaredesk.app.field_validator import ENTITY_STAGE, stage_values, validate


_EDITABLE_FIELDS = frozenset(
    {"name", "description", "order", "is_required", "allowed_roles", "estimated_duration"}
)


class StageListEditor:
    """Ordered stage list that keeps at least one row and repairs orders on removal."""

    def __init__(self, stages: Iterable[StageRecord] = ()) -> None:
        self._stages: list[StageRecord] = [stage.copy() for stage in stages]

    def __len__(self) -> int:
        return len(self._stages)

    def __iter__(self) -> Iterator[StageRecord]:
        return iter(self._stages)

    def __getitem__(self, index: int) -> StageRecord:
        return self._stages[index]

    @property
    def stages(self) -> list[StageRecord]:
        return [stage.copy() for stage in self._stages]

    @property
    def orders(self) -> list[int]:
        return [stage.order for stage in self._stages]

    @property
    def can_remove(self) -> bool:
        return len(self._stages) > 1

    def replace(self, stages: Iterable[StageRecord]) -> None:
        self._stages = [stage.copy() for stage in stages]

    def next_order(self) -> int:
        return max(self.orders, default=0) + 1

    def append(self, stage: StageRecord | None = None) -> StageRecord:
        row = stage.copy() if stage is not None else StageRecord(
            allowed_roles=list(DEFAULT_STAGE_ROLES),
            estimated_duration=0,
        )
        row.order = self.next_order()
        self._stages.append(row)
        return row

    def remove(self, index: int) -> bool:
        if not self.can_remove:
            return False
        if index < 0 or index >= len(self._stages):
            raise IndexError(f"Stage index out of range: {index}")
        del self._stages[index]
        for position in range(index, len(self._stages)):
            self._stages[position].order = position + 1
        return True

    def update(self, index: int, **changes: Any) -> StageRecord:
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise KeyError(f"Unknown stage fields: {', '.join(sorted(unknown))}")
        stage = self._stages[index]
        for name, value in changes.items():
            if name == "allowed_roles":
                value = normalize_role_tags(value)
            elif name == "order":
                value = int(value)
            elif name == "is_required":
                value = bool(value)
            setattr(stage, name, value)
        return stage

    def validate_orders(self) -> list[FieldError]:
        orders = self.orders
        if len(set(orders)) < len(orders):
            return [FieldError("order", "Stage orders must be unique")]
        return []

    def validate(self) -> list[FieldError]:
        if not self._stages:
            return [FieldError("stages", "At least one stage is required")]
        for position, stage in enumerate(self._stages, start=1):
            errors = validate(ENTITY_STAGE, stage_values(stage))
            if errors:
                first = errors[0]
                return [FieldError(f"stages.{position - 1}.{first.field}", f"Stage {position}: {first.message}")]
        return self.validate_orders()
