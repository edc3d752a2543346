"""
Field validator tests: location rules, code derivation and the stage /
status update rule sets. Every rule set reports only its first failure.
"""

import pytest

from welfaredesk.app.admin_models import StageRecord
from welfaredesk.app.field_validator import (
    ENTITY_STAGE,
    ENTITY_STATUS_UPDATE,
    derive_code,
    normalize_code,
    stage_values,
    validate,
)


# ── Location rules ───────────────────────────────────────────────────────


@pytest.mark.parametrize("node_type", ["district", "area", "unit"])
@pytest.mark.parametrize("name", ["", "   ", None])
def test_blank_name_is_rejected_for_every_type(node_type, name):
    errors = validate(node_type, {"name": name, "code": "X", "parent_id": "p1"})

    assert len(errors) == 1
    assert errors[0].field == "name"
    assert errors[0].message == f"{node_type.title()} name is required"


@pytest.mark.parametrize("node_type", ["district", "area", "unit"])
def test_trimmed_name_is_accepted(node_type):
    errors = validate(node_type, {"name": "  Riverside  ", "code": "RIV", "parent_id": "p1"})

    assert errors == []


@pytest.mark.parametrize("node_type,parent", [("area", "district"), ("unit", "area")])
def test_missing_parent_is_rejected_below_district(node_type, parent):
    errors = validate(node_type, {"name": "Riverside", "code": "RIV", "parent_id": ""})

    assert [(error.field, error.message) for error in errors] == [
        ("parent_id", f"Parent {parent} is required"),
    ]


@pytest.mark.parametrize("parent_id", ["", "d1", None])
def test_district_ignores_parent(parent_id):
    assert validate("district", {"name": "North", "parent_id": parent_id}) == []


def test_district_does_not_require_code():
    assert validate("district", {"name": "North", "code": ""}) == []


@pytest.mark.parametrize("node_type", ["area", "unit"])
def test_code_is_required_below_district(node_type):
    errors = validate(node_type, {"name": "Riverside", "code": " ", "parent_id": "p1"})

    assert errors[0].field == "code"


def test_only_first_failing_rule_is_reported():
    errors = validate("unit", {"name": "", "code": "", "parent_id": ""})

    assert len(errors) == 1
    assert errors[0].field == "name"


def test_unknown_entity_type_raises():
    with pytest.raises(ValueError):
        validate("province", {"name": "X"})


# ── Code derivation ──────────────────────────────────────────────────────


def test_derive_code_example():
    assert derive_code("North Zone!") == "NORTH_ZONE"


@pytest.mark.parametrize(
    "name",
    ["North Zone!", "  east   side 42 ", "Ward-7/B", "already_CODE", "", "!!!"],
)
def test_derive_code_is_idempotent(name):
    once = derive_code(name)

    assert derive_code(once) == once
    assert derive_code(name) == once


def test_derive_code_collapses_non_letter_runs():
    assert derive_code("a1b--c  d") == "A_B_C_D"


def test_normalize_code_uppercases_and_trims():
    assert normalize_code("  riv-01 ") == "RIV-01"


# ── Stage rules ──────────────────────────────────────────────────────────


def test_valid_stage_passes():
    values = stage_values(StageRecord(name="Planning", order=2, allowed_roles=["super_admin"]))

    assert validate(ENTITY_STAGE, values) == []


@pytest.mark.parametrize(
    "changes,field",
    [
        ({"name": ""}, "name"),
        ({"name": "x" * 101}, "name"),
        ({"description": "d" * 501}, "description"),
        ({"order": 0}, "order"),
        ({"allowed_roles": []}, "allowed_roles"),
        ({"estimated_duration": -1}, "estimated_duration"),
    ],
)
def test_stage_rule_failures(changes, field):
    values = {"name": "Planning", "order": 1, "allowed_roles": ["super_admin"], **changes}

    errors = validate(ENTITY_STAGE, values)

    assert [error.field for error in errors] == [field]


# ── Status update rules ──────────────────────────────────────────────────


def test_valid_status_update_passes():
    values = {"stage": "Planning", "status": "in_progress", "description": "Kickoff held"}

    assert validate(ENTITY_STATUS_UPDATE, values) == []


@pytest.mark.parametrize(
    "changes,field",
    [
        ({"stage": ""}, "stage"),
        ({"status": "archived"}, "status"),
        ({"description": ""}, "description"),
        ({"description": "d" * 1001}, "description"),
        ({"remarks": "r" * 501}, "remarks"),
    ],
)
def test_status_update_rule_failures(changes, field):
    values = {"stage": "Planning", "status": "pending", "description": "Kickoff", **changes}

    errors = validate(ENTITY_STATUS_UPDATE, values)

    assert [error.field for error in errors] == [field]
