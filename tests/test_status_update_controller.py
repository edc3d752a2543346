"""
Status update form tests: history ordering, add/edit flows and deletes
through the shared delete controller.
"""

import pytest

from welfaredesk.app.admin_models import ProjectRecord, StatusUpdateRecord
from welfaredesk.app.delete_controller import DeleteController
from welfaredesk.app.form_controller import FORM_CLOSED, FORM_EDITING
from welfaredesk.app.status_update_controller import StatusUpdateFormController


@pytest.fixture
def project(api):
    record = ProjectRecord(
        project_id="p1",
        name="Bridge Works",
        status_updates=[
            StatusUpdateRecord(
                update_id="u1",
                stage="Planning",
                status="pending",
                description="Kickoff",
                updated_at="2025-12-01T09:00:00Z",
            ),
            StatusUpdateRecord(
                update_id="u2",
                stage="Build",
                status="in_progress",
                description="Foundations poured",
                remarks="On schedule",
                updated_at="2025-12-05T09:00:00Z",
            ),
        ],
    )
    api.projects["p1"] = record
    return record


@pytest.fixture
def form(api, project, runner):
    return StatusUpdateFormController(api, project, runner=runner)


def _fill(form, stage="Inspection", status="completed", description="Passed"):
    form.set_stage(stage)
    form.set_status(status)
    form.set_description(description)


def test_unsaved_project_is_rejected(api):
    with pytest.raises(ValueError):
        StatusUpdateFormController(api, ProjectRecord(project_id="", name="Draft"))


def test_history_is_newest_first(form):
    assert [row.update_id for row in form.history] == ["u2", "u1"]


def test_add_replaces_history_with_server_list(api, form):
    form.open_create()
    _fill(form)
    form.set_remarks("  signed off  ")

    assert form.submit() is True

    (_, project_id, update), = api.calls_to("add_status_update")
    assert project_id == "p1"
    assert (update.stage, update.status, update.description, update.remarks) == (
        "Inspection",
        "completed",
        "Passed",
        "signed off",
    )
    assert form.phase == FORM_CLOSED
    assert form.refresh_requested is True
    assert [row.update_id for row in form.history] == ["su-1", "u2", "u1"]


def test_unknown_status_keeps_previous_value(form):
    form.open_create()
    form.set_status("in progress")
    form.set_status("archived")

    assert form.status == "in_progress"


def test_edit_uses_local_history_first(api, form):
    form.open_edit("u2")

    assert form.phase == FORM_EDITING
    assert form.values() == {
        "stage": "Build",
        "status": "in_progress",
        "description": "Foundations poured",
        "remarks": "On schedule",
    }
    assert api.calls_to("list_status_updates") == []


def test_edit_of_unknown_update_warns(api, form):
    form.open_edit("u9")

    assert api.calls_to("list_status_updates") == [("list_status_updates", "p1")]
    assert form.warnings == (
        "Could not load the saved status update: "
        "Status update not found. Please check if it still exists.",
    )
    assert form.description == ""


def test_edit_submit_targets_the_update(api, form):
    form.open_edit("u1")
    form.set_description("Kickoff meeting held")

    form.submit()

    (_, project_id, update_id, update), = api.calls_to("update_status_update")
    assert (project_id, update_id) == ("p1", "u1")
    assert update.description == "Kickoff meeting held"
    assert form.history[-1].description == "Kickoff meeting held"


def test_missing_description_blocks_submit(api, form):
    form.open_create()
    _fill(form, description="   ")

    assert form.submit() is False

    assert form.error_field == "description"
    assert api.calls_to("add_status_update") == []


def test_failed_add_uses_fallback(api, form):
    api.fail("add_status_update", RuntimeError())
    form.open_create()
    _fill(form)

    form.submit()

    assert form.phase == FORM_EDITING
    assert form.error_message == "Failed to add status update"


def test_delete_then_forget(api, form, runner):
    deleter = DeleteController(runner=runner)
    target = form.delete_target(form.history[0])

    deleter.request(target)
    deleter.confirm()
    form.forget(target.record_id)

    assert deleter.deleted is True
    assert api.calls_to("delete_status_update") == [("delete_status_update", "p1", "u2")]
    assert [row.update_id for row in form.history] == ["u1"]
    assert target.title == "Delete Status Update"
