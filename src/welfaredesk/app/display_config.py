from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


BadgeColors = tuple[str, str]

_GRAY: BadgeColors = ("#f3f4f6", "#1f2937")
_RED: BadgeColors = ("#fee2e2", "#991b1b")
_PURPLE: BadgeColors = ("#f3e8ff", "#6b21a8")
_BLUE: BadgeColors = ("#dbeafe", "#1e40af")
_GREEN: BadgeColors = ("#dcfce7", "#166534")
_YELLOW: BadgeColors = ("#fef9c3", "#854d0e")
_ORANGE: BadgeColors = ("#ffedd5", "#9a3412")
_PINK: BadgeColors = ("#fce7f3", "#9d174d")


def _frozen(values: dict[str, object]) -> Mapping[str, object]:
    return MappingProxyType(dict(values))


@dataclass(frozen=True, slots=True)
class DisplayConfig:
    """Read-only label and badge colour tables handed to the dialogs."""

    role_labels: Mapping[str, str] = field(
        default_factory=lambda: _frozen(
            {
                "super_admin": "Super Admin",
                "state_admin": "State Admin",
                "district_admin": "District Admin",
                "area_admin": "Area Admin",
                "unit_admin": "Unit Admin",
                "project_coordinator": "Project Coordinator",
                "scheme_coordinator": "Scheme Coordinator",
                "beneficiary": "Beneficiary",
            }
        )
    )
    role_colors: Mapping[str, BadgeColors] = field(
        default_factory=lambda: _frozen(
            {
                "super_admin": _RED,
                "state_admin": _PURPLE,
                "district_admin": _BLUE,
                "area_admin": _GREEN,
                "unit_admin": _YELLOW,
                "project_coordinator": _ORANGE,
                "scheme_coordinator": _PINK,
                "beneficiary": _GRAY,
            }
        )
    )
    status_labels: Mapping[str, str] = field(
        default_factory=lambda: _frozen(
            {
                "pending": "Pending",
                "in_progress": "In Progress",
                "completed": "Completed",
                "on_hold": "On Hold",
                "cancelled": "Cancelled",
            }
        )
    )
    status_colors: Mapping[str, BadgeColors] = field(
        default_factory=lambda: _frozen(
            {
                "pending": _GRAY,
                "in_progress": _BLUE,
                "completed": _GREEN,
                "on_hold": _YELLOW,
                "cancelled": _RED,
            }
        )
    )

    def role_label(self, role: str) -> str:
        return self.role_labels.get(role) or role.replace("_", " ").title()

    def role_color(self, role: str) -> BadgeColors:
        return self.role_colors.get(role, _GRAY)

    def status_label(self, status: str) -> str:
        return self.status_labels.get(status) or status.replace("_", " ").title()

    def status_color(self, status: str) -> BadgeColors:
        return self.status_colors.get(status, _GRAY)


DEFAULT_DISPLAY_CONFIG = DisplayConfig()
