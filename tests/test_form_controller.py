"""
Form session tests for the location forms: phase transitions, the busy
guard, stale-load discarding, error propagation and district code
derivation.
"""

import logging

import pytest

from welfaredesk.app.errors import ApiRequestError
from welfaredesk.app.form_controller import (
    FORM_CLOSED,
    FORM_EDITING,
    FORM_LOADING,
    FORM_SUBMITTING,
    LOAD_PARENTS,
    LOAD_RECORD,
    MODE_EDIT,
    LocationFormController,
)


def _fill_area(form, name="Hillside", code="hil", parent_id="d1"):
    form.set_name(name)
    form.set_code(code)
    form.set_parent(parent_id)


# ── Opening ──────────────────────────────────────────────────────────────


def test_unknown_location_type_is_rejected(api):
    with pytest.raises(ValueError):
        LocationFormController(api, "province")


def test_create_goes_straight_to_editing_while_parents_load(api, manual_runner):
    form = LocationFormController(api, "area", runner=manual_runner)

    assert form.open_create() is True

    assert form.phase == FORM_EDITING
    assert form.title == "Add Area"
    assert form.pending_loads == frozenset({LOAD_PARENTS})
    assert form.parents_loading is True
    assert form.parent_selection_enabled is False
    assert form.can_submit is False


def test_parents_arrive_sorted_and_enable_selection(api, manual_runner):
    form = LocationFormController(api, "area", runner=manual_runner)
    form.open_create()

    manual_runner.complete()

    assert [node.node_id for node in form.parent_candidates] == ["d2", "d1"]
    assert form.parent_selection_enabled is True
    assert form.pending_loads == frozenset()


def test_district_form_makes_no_parent_lookup(api, manual_runner):
    form = LocationFormController(api, "district", runner=manual_runner)

    form.open_create()

    assert len(manual_runner) == 0
    assert form.requires_parent is False
    assert form.can_submit is True


def test_edit_stays_loading_until_every_load_finishes(api, manual_runner):
    form = LocationFormController(api, "area", runner=manual_runner)

    form.open_edit("a1")

    assert form.phase == FORM_LOADING
    assert form.mode == MODE_EDIT
    assert form.title == "Edit Area"
    assert form.pending_loads == frozenset({LOAD_RECORD, LOAD_PARENTS})

    manual_runner.complete(0)
    assert form.phase == FORM_LOADING
    assert form.name == "Riverside"
    assert form.code == "RIV"
    assert form.parent_id == "d1"

    manual_runner.complete(0)
    assert form.phase == FORM_EDITING


def test_edit_requires_record_id(api):
    form = LocationFormController(api, "area")

    with pytest.raises(ValueError):
        form.open_edit("  ")


def test_record_load_failure_falls_back_to_defaults_with_warning(api, runner):
    form = LocationFormController(api, "area", runner=runner)

    form.open_edit("missing")

    assert form.phase == FORM_EDITING
    assert form.name == ""
    assert form.code == ""
    assert form.warnings == (
        "Could not load the saved area: Area not found. Please check if it still exists.",
    )
    assert len(form.parent_candidates) == 2


def test_empty_parent_list_warns_and_blocks_submit(api, runner):
    api.fail("list_by_type")
    form = LocationFormController(api, "area", runner=runner)
    form.open_create()
    _fill_area(form)

    assert form.warnings[0].startswith("No active districts are available.")
    assert form.submit() is False
    assert form.error_message == "No district is available to select as parent"
    assert api.calls_to("create_location") == []


def test_failed_parent_lookup_still_shows_loaded_record(api, runner):
    api.fail("list_by_type")
    form = LocationFormController(api, "area", runner=runner)

    form.open_edit("a1")

    assert form.phase == FORM_EDITING
    assert form.name == "Riverside"
    assert form.code == "RIV"
    assert form.warnings[0].startswith("No active districts are available.")
    assert form.parent_selection_enabled is False


# ── Parent candidates ────────────────────────────────────────────────────


def test_parent_outside_candidates_is_rejected(api, runner):
    form = LocationFormController(api, "area", runner=runner)
    form.open_create()
    _fill_area(form, parent_id="a1")

    assert form.submit() is False

    assert form.phase == FORM_EDITING
    assert form.error_field == "parent_id"
    assert form.error_message == "Select a valid district"
    assert api.calls_to("create_location") == []


def test_inactive_saved_parent_is_cleared_on_edit(api, runner):
    api.add_node("a9", "Old Town", "area", code="OLD", parent_id="d3")
    form = LocationFormController(api, "area", runner=runner)

    form.open_edit("a9")

    assert [node.node_id for node in form.parent_candidates] == ["d2", "d1"]
    assert form.parent_id == ""
    assert form.warnings == (
        "The saved district is inactive or no longer exists. Select an active district.",
    )
    assert form.submit() is False
    assert form.error_field == "parent_id"
    assert api.calls_to("update_location") == []


def test_saved_parent_checked_when_parents_arrive_first(api, manual_runner):
    api.add_node("a9", "Old Town", "area", code="OLD", parent_id="d3")
    form = LocationFormController(api, "area", runner=manual_runner)
    form.open_edit("a9")

    manual_runner.complete(1)
    assert form.phase == FORM_LOADING
    manual_runner.complete(0)

    assert form.phase == FORM_EDITING
    assert form.name == "Old Town"
    assert form.parent_id == ""
    assert len(form.warnings) == 1


def test_dismiss_warnings_clears_them(api, runner):
    form = LocationFormController(api, "area", runner=runner)
    form.open_edit("missing")

    form.dismiss_warnings()

    assert form.warnings == ()


# ── Stale loads ──────────────────────────────────────────────────────────


def test_parents_from_closed_session_are_discarded(api, manual_runner, caplog):
    form = LocationFormController(
        api, "area", runner=manual_runner, logger=logging.getLogger("tests.forms")
    )
    form.open_create()
    form.close()
    form.open_create()
    assert len(manual_runner) == 2

    with caplog.at_level(logging.DEBUG, logger="tests.forms"):
        manual_runner.complete(0)

    assert form.parent_candidates == ()
    assert form.parents_loading is True
    assert "Discarded stale parents load" in caplog.text

    manual_runner.complete(0)

    assert len(form.parent_candidates) == 2
    assert form.parents_loading is False


def test_record_from_previous_edit_session_is_discarded(api, manual_runner):
    api.add_node("a2", "Lakeside", "area", code="LAK", parent_id="d2")
    form = LocationFormController(api, "area", runner=manual_runner)
    form.open_edit("a1")
    form.open_edit("a2")

    manual_runner.complete(0)
    assert form.name == ""

    manual_runner.complete_all()
    assert form.name == "Lakeside"
    assert form.record_id == "a2"


def test_late_result_after_close_leaves_form_closed(api, manual_runner):
    form = LocationFormController(api, "area", runner=manual_runner)
    form.open_edit("a1")
    form.close()

    manual_runner.complete_all()

    assert form.phase == FORM_CLOSED
    assert form.name == ""


# ── Submitting ───────────────────────────────────────────────────────────


def test_double_submit_issues_one_request(api, manual_runner):
    form = LocationFormController(api, "area", runner=manual_runner)
    form.open_create()
    manual_runner.complete()
    _fill_area(form)

    assert form.submit() is True
    assert form.phase == FORM_SUBMITTING
    assert form.is_busy is True
    assert form.submit() is False

    manual_runner.complete_all()

    assert len(api.calls_to("create_location")) == 1


def test_submit_while_parents_loading_is_blocked(api, manual_runner):
    form = LocationFormController(api, "area", runner=manual_runner)
    form.open_create()
    _fill_area(form)

    assert form.submit() is False
    assert form.error_message == "Parent districts are still loading"


def test_successful_create_closes_and_requests_refresh(api, runner):
    form = LocationFormController(api, "area", runner=runner)
    form.open_create()
    _fill_area(form)

    assert form.submit() is True

    assert form.phase == FORM_CLOSED
    assert form.refresh_requested is True
    (_, node), = api.calls_to("create_location")
    assert (node.name, node.code, node.parent_id, node.node_type) == ("Hillside", "HIL", "d1", "area")

    form.acknowledge_refresh()
    assert form.refresh_requested is False


def test_edit_submit_updates_existing_record(api, runner):
    form = LocationFormController(api, "area", runner=runner)
    form.open_edit("a1")
    form.set_name("Riverside North")

    form.submit()

    (_, node_id, node), = api.calls_to("update_location")
    assert node_id == "a1"
    assert node.name == "Riverside North"
    assert node.parent_id == "d1"


def test_validation_error_keeps_form_open(api, runner):
    form = LocationFormController(api, "area", runner=runner)
    form.open_create()
    form.set_name("Hillside")
    form.set_parent("d1")

    assert form.submit() is False

    assert form.phase == FORM_EDITING
    assert form.error_field == "code"
    assert form.error_message == "Area code is required"
    assert api.calls_to("create_location") == []


def test_server_error_keeps_values_and_reports_message(api, runner):
    api.fail("create_location")
    form = LocationFormController(api, "area", runner=runner)
    form.open_create()
    _fill_area(form)

    form.submit()

    assert form.phase == FORM_EDITING
    assert form.error_message == "Server exploded"
    assert form.refresh_requested is False
    assert form.values() == {"name": "Hillside", "code": "HIL", "parent_id": "d1"}


def test_forbidden_update_maps_to_permission_message(api, runner):
    api.fail("update_location", ApiRequestError("Forbidden", status_code=403))
    form = LocationFormController(api, "area", runner=runner)
    form.open_edit("a1")

    form.submit()

    assert form.error_message == "You don't have permission to modify this area."


def test_empty_failure_uses_fallback_message(api, runner):
    api.fail("create_location", RuntimeError())
    form = LocationFormController(api, "district", runner=runner)
    form.open_create()
    form.set_name("West")

    form.submit()

    assert form.error_message == "Failed to create district"


def test_close_and_reopen_refused_while_submitting(api, manual_runner):
    form = LocationFormController(api, "district", runner=manual_runner)
    form.open_create()
    form.set_name("West")
    form.submit()

    assert form.close() is False
    assert form.open_create() is False
    assert form.phase == FORM_SUBMITTING

    manual_runner.complete()
    assert form.phase == FORM_CLOSED


def test_submit_from_closed_form_is_ignored(api, runner):
    form = LocationFormController(api, "district", runner=runner)

    assert form.submit() is False
    assert api.calls == []


# ── District codes ───────────────────────────────────────────────────────


def test_district_code_follows_name(api, runner):
    form = LocationFormController(api, "district", runner=runner)
    form.open_create()

    form.set_name("North Zone!")
    form.set_code("SOMETHING_ELSE")

    assert form.code_is_derived is True
    assert form.code == "NORTH_ZONE"

    form.submit()

    (_, node), = api.calls_to("create_location")
    assert node.code == "NORTH_ZONE"
    assert node.parent_id == ""


def test_district_parent_is_ignored(api, runner):
    form = LocationFormController(api, "district", runner=runner)
    form.open_create()

    form.set_parent("d1")

    assert form.parent_id == ""


# ── Listeners ────────────────────────────────────────────────────────────


def test_subscribe_and_unsubscribe(api, runner):
    form = LocationFormController(api, "district", runner=runner)
    seen = []
    unsubscribe = form.subscribe(lambda controller: seen.append(controller.phase))

    form.open_create()
    unsubscribe()
    form.set_name("West")
    unsubscribe()

    assert seen == [FORM_EDITING]


def test_failing_listener_does_not_break_notification(api, runner):
    form = LocationFormController(api, "district", runner=runner)
    seen = []

    def _broken(_controller):
        raise RuntimeError("boom")

    form.subscribe(_broken)
    form.subscribe(lambda controller: seen.append(controller.phase))

    form.open_create()

    assert seen == [FORM_EDITING]
