"""
Project stage configuration and scheme checklist form tests.
"""

import pytest

from welfaredesk.app.admin_models import (
    ProjectRecord,
    SchemeRecord,
    StageRecord,
    StagesConfiguration,
)
from welfaredesk.app.form_controller import (
    FORM_CLOSED,
    FORM_EDITING,
    FORM_LOADING,
    FORM_SUBMITTING,
    LOAD_RECORD,
)
from welfaredesk.app.stage_config_controllers import (
    LOAD_PROJECTS,
    ProjectStagesFormController,
    SchemeStagesFormController,
    default_project_stages,
    default_scheme_stages,
)


@pytest.fixture
def projects_api(api):
    api.projects["p1"] = ProjectRecord(project_id="p1", name="Bridge Works")
    api.projects["p2"] = ProjectRecord(project_id="p2", name="Annual Survey")
    return api


def _stage(name, order, roles=("super_admin",)):
    return StageRecord(name=name, order=order, allowed_roles=list(roles))


# ── Defaults ─────────────────────────────────────────────────────────────


def test_default_project_stage():
    (stage,) = default_project_stages()

    assert stage.name == "Project Initiation"
    assert stage.order == 1
    assert stage.is_required is True
    assert stage.allowed_roles == ["super_admin", "state_admin", "project_coordinator"]
    assert stage.estimated_duration == 7


def test_default_scheme_checklist_follows_interview_flag():
    without = default_scheme_stages()
    with_interview = default_scheme_stages(requires_interview=True)

    assert [stage.order for stage in without] == list(range(1, 9))
    assert without[0].name == "Application Received"
    assert without[-1].name == "Completed"
    assert without[2].is_required is False
    assert without[3].name == "Interview Process"
    assert without[3].is_required is False
    assert with_interview[3].is_required is True
    assert "scheme_coordinator" in with_interview[3].allowed_roles


# ── Project stages ───────────────────────────────────────────────────────


def test_project_without_saved_configuration_shows_defaults_and_warns(projects_api, runner):
    form = ProjectStagesFormController(projects_api, runner=runner)

    form.select_project("p1")

    assert form.phase == FORM_EDITING
    assert form.project_id == "p1"
    assert [stage.name for stage in form.stages] == ["Project Initiation"]
    assert form.warnings == (
        "This project has no saved stages yet. The default configuration is shown.",
    )
    assert [project.name for project in form.projects] == ["Annual Survey", "Bridge Works"]


def test_saved_configuration_is_applied_in_order(projects_api, runner):
    projects_api.configurations["p1"] = StagesConfiguration(
        stages=[_stage("Review", 2), _stage("Plan", 1)],
        enable_public_tracking=True,
        email_notifications=False,
        sms_notifications=True,
    )
    form = ProjectStagesFormController(projects_api, runner=runner)

    form.select_project("p1")

    assert [stage.name for stage in form.stages] == ["Plan", "Review"]
    assert form.enable_public_tracking is True
    assert form.email_notifications is False
    assert form.sms_notifications is True
    assert form.warnings == ()


def test_project_list_loads_once(projects_api, runner):
    form = ProjectStagesFormController(projects_api, runner=runner)

    form.select_project("p1")
    form.select_project("p2")

    assert len(projects_api.calls_to("list_projects")) == 1
    assert form.project_id == "p2"


def test_edit_waits_for_configuration_and_projects(projects_api, manual_runner):
    form = ProjectStagesFormController(projects_api, runner=manual_runner)

    form.select_project("p1")

    assert form.pending_loads == frozenset({LOAD_RECORD, LOAD_PROJECTS})
    manual_runner.complete_all()
    assert form.phase == FORM_EDITING


def test_submit_without_project_is_blocked(projects_api, runner):
    form = ProjectStagesFormController(projects_api, runner=runner)
    form.select_project("")

    assert form.submit() is False

    assert form.error_message == "Select a project first"
    assert projects_api.calls_to("set_stage_configuration") == []


def test_submit_sends_stages_and_settings(projects_api, runner):
    form = ProjectStagesFormController(projects_api, runner=runner)
    form.select_project("p1")
    added = form.add_stage()
    form.update_stage(1, name="Execution", allowed_roles=["project_coordinator"])
    form.set_enable_public_tracking(True)
    form.set_sms_notifications(True)

    assert added.order == 2
    assert form.submit() is True

    (_, project_id, configuration), = projects_api.calls_to("set_stage_configuration")
    assert project_id == "p1"
    assert [stage.name for stage in configuration.stages] == ["Project Initiation", "Execution"]
    assert configuration.to_mapping()["enablePublicTracking"] is True
    assert configuration.to_mapping()["notificationSettings"] == {
        "emailNotifications": True,
        "smsNotifications": True,
    }
    assert form.phase == FORM_CLOSED
    assert form.refresh_requested is True


def test_duplicate_orders_block_submit(projects_api, runner):
    form = ProjectStagesFormController(projects_api, runner=runner)
    form.select_project("p1")
    form.add_stage()
    form.update_stage(1, name="Execution", order=1)

    assert form.submit() is False

    assert form.error_message == "Stage orders must be unique"


def test_incomplete_new_stage_blocks_submit(projects_api, runner):
    form = ProjectStagesFormController(projects_api, runner=runner)
    form.select_project("p1")
    form.add_stage()

    assert form.submit() is False

    assert form.error_field == "stages.1.name"
    assert form.error_message == "Stage 2: Stage name is required"


def test_last_stage_cannot_be_removed(projects_api, runner):
    form = ProjectStagesFormController(projects_api, runner=runner)
    form.select_project("p1")

    assert form.can_remove_stage is False
    assert form.remove_stage(0) is False
    assert len(form.stages) == 1


def test_stage_edits_ignored_outside_editing(projects_api, manual_runner):
    form = ProjectStagesFormController(projects_api, runner=manual_runner)
    form.select_project("p1")

    assert form.phase == FORM_LOADING
    assert form.add_stage() is None
    assert form.update_stage(0, name="Too early") is None

    manual_runner.complete_all()
    assert [stage.name for stage in form.stages] == ["Project Initiation"]

    assert form.submit() is True
    assert form.phase == FORM_SUBMITTING
    assert form.add_stage() is None
    assert form.update_stage(0, name="Too late") is None
    assert form.remove_stage(0) is False
    assert [stage.name for stage in form.stages] == ["Project Initiation"]


def test_save_failure_without_detail_uses_fallback(projects_api, runner):
    projects_api.fail("set_stage_configuration", RuntimeError())
    form = ProjectStagesFormController(projects_api, runner=runner)
    form.select_project("p1")

    form.submit()

    assert form.phase == FORM_EDITING
    assert form.error_message == "Failed to save stages configuration"


# ── Scheme checklist ─────────────────────────────────────────────────────


@pytest.fixture
def scheme_api(api):
    api.schemes["s1"] = SchemeRecord(scheme_id="s1", name="Housing Aid", requires_interview=True)
    return api


def test_scheme_without_stages_gets_default_checklist(scheme_api, runner):
    form = SchemeStagesFormController(scheme_api, runner=runner)

    form.open_edit("s1")

    assert form.title == "Checklist Stages - Housing Aid"
    assert form.requires_interview is True
    assert len(form.stages) == 8
    assert form.stages[3].is_required is True


def test_saved_scheme_stages_are_kept(scheme_api, runner):
    scheme_api.schemes["s1"].status_stages = [_stage("Check", 2), _stage("Receive", 1)]
    form = SchemeStagesFormController(scheme_api, runner=runner)

    form.open_edit("s1")

    assert [stage.name for stage in form.stages] == ["Receive", "Check"]


def test_added_checklist_item_uses_template(scheme_api, runner):
    form = SchemeStagesFormController(scheme_api, runner=runner)
    form.open_edit("s1")

    added = form.add_stage()

    assert added.name == "New Checklist Item"
    assert added.description == "Tick when this task is completed"
    assert added.order == 9


def test_load_defaults_replaces_rows(scheme_api, runner):
    scheme_api.schemes["s1"].status_stages = [_stage("Only", 1)]
    form = SchemeStagesFormController(scheme_api, runner=runner)
    form.open_edit("s1")

    form.load_defaults()

    assert len(form.stages) == 8


def test_scheme_submit_sends_stage_list(scheme_api, runner):
    form = SchemeStagesFormController(scheme_api, runner=runner)
    form.open_edit("s1")
    form.remove_stage(2)

    form.submit()

    (_, scheme_id, stages), = scheme_api.calls_to("set_scheme_stages")
    assert scheme_id == "s1"
    assert [stage.order for stage in stages] == list(range(1, 8))
    assert form.phase == FORM_CLOSED


def test_missing_scheme_warns(scheme_api, runner):
    form = SchemeStagesFormController(scheme_api, runner=runner)

    form.open_edit("nope")

    assert form.warnings == (
        "Could not load the saved scheme: Scheme not found. Please check if it still exists.",
    )
    assert form.phase == FORM_EDITING
    assert len(form.stages) == 8
