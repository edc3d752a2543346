"""
Delete flow tests: dependents block the request up front, confirmation is
required, and failures return to the confirm step with a message.
"""

import pytest

from welfaredesk.app.admin_models import BeneficiaryRecord, HierarchyNode, UserRecord
from welfaredesk.app.delete_controller import (
    DELETE_CONFIRMING,
    DELETE_DELETING,
    DELETE_DONE,
    DELETE_IDLE,
    DeleteController,
    beneficiary_delete_target,
    location_delete_target,
    user_delete_target,
)
from welfaredesk.app.errors import ApiRequestError, DeleteBlockedError


def _district(dependents=0):
    return HierarchyNode(
        node_id="d1",
        name="North District",
        node_type="district",
        dependent_count=dependents,
    )


def test_node_with_dependents_is_never_sent(api, runner):
    controller = DeleteController(runner=runner)
    target = location_delete_target(api, _district(dependents=3))

    with pytest.raises(DeleteBlockedError) as excinfo:
        controller.request(target)

    assert str(excinfo.value) == (
        "District cannot be deleted because it has 3 dependent records. "
        "Please remove or move them first."
    )
    assert excinfo.value.dependent_count == 3
    assert controller.phase == DELETE_IDLE
    assert api.calls_to("delete_location") == []


def test_single_dependent_message_is_singular():
    error = DeleteBlockedError(label="Area", dependent_count=1)

    assert "1 dependent record." in str(error)


def test_confirmed_delete_calls_api(api, runner):
    controller = DeleteController(runner=runner)
    target = location_delete_target(api, _district())

    controller.request(target)
    assert controller.phase == DELETE_CONFIRMING
    assert target.title == "Delete District"
    assert '"North District"' in target.description

    assert controller.confirm() is True

    assert controller.phase == DELETE_DONE
    assert controller.deleted is True
    assert api.calls_to("delete_location") == [("delete_location", "d1")]


def test_confirm_without_request_does_nothing(api, runner):
    controller = DeleteController(runner=runner)

    assert controller.confirm() is False
    assert api.calls == []


def test_cancel_returns_to_idle(api, runner):
    controller = DeleteController(runner=runner)
    controller.request(location_delete_target(api, _district()))

    assert controller.cancel() is True

    assert controller.phase == DELETE_IDLE
    assert controller.target is None


def test_busy_delete_ignores_cancel_and_second_confirm(api, manual_runner):
    controller = DeleteController(runner=manual_runner)
    controller.request(location_delete_target(api, _district()))
    controller.confirm()

    assert controller.phase == DELETE_DELETING
    assert controller.is_busy is True
    assert controller.cancel() is False
    assert controller.confirm() is False
    assert len(manual_runner) == 1

    manual_runner.complete()
    assert controller.deleted is True


def test_failure_returns_to_confirmation_with_message(api, runner):
    api.fail("delete_location", ApiRequestError("Forbidden", status_code=403))
    controller = DeleteController(runner=runner)
    controller.request(location_delete_target(api, _district()))

    controller.confirm()

    assert controller.phase == DELETE_CONFIRMING
    assert controller.error_message == "You don't have permission to modify this district."


def test_failure_without_detail_uses_fallback(api, runner):
    api.fail("delete_location", RuntimeError())
    controller = DeleteController(runner=runner)
    controller.request(location_delete_target(api, _district()))

    controller.confirm()

    assert controller.error_message == "Failed to delete district. Please try again."


def test_listeners_see_each_phase(api, runner):
    controller = DeleteController(runner=runner)
    phases = []
    controller.subscribe(lambda current: phases.append(current.phase))

    controller.request(location_delete_target(api, _district()))
    controller.confirm()

    assert phases == [DELETE_CONFIRMING, DELETE_DELETING, DELETE_DONE]


# ── Beneficiaries and users ──────────────────────────────────────────────


def test_beneficiary_with_applications_is_never_sent(api, runner):
    api.beneficiaries["b1"] = BeneficiaryRecord(
        beneficiary_id="b1", name="Asha Menon", phone="9800000001", application_count=2
    )
    controller = DeleteController(runner=runner)
    target = beneficiary_delete_target(api, api.beneficiaries["b1"])

    assert target.blocked is True
    with pytest.raises(DeleteBlockedError) as excinfo:
        controller.request(target)

    assert str(excinfo.value) == (
        "Beneficiary cannot be deleted because it has 2 applications. "
        "Please remove or transfer the applications first."
    )
    assert controller.phase == DELETE_IDLE
    assert api.calls_to("delete_beneficiary") == []
    assert "b1" in api.beneficiaries


def test_beneficiary_without_applications_is_deleted(api, runner):
    beneficiary = BeneficiaryRecord(beneficiary_id="b2", name="Ravi Kumar", phone="9800000002")
    api.beneficiaries["b2"] = beneficiary
    controller = DeleteController(runner=runner)
    target = beneficiary_delete_target(api, beneficiary)

    controller.request(target)
    assert target.description == 'Delete beneficiary "Ravi Kumar" (9800000002)? This action cannot be undone.'
    controller.confirm()

    assert controller.deleted is True
    assert api.calls_to("delete_beneficiary") == [("delete_beneficiary", "b2")]


def test_user_delete_is_a_plain_confirmation(api, runner):
    user = UserRecord(user_id="u1", name="Field Officer", role="unit_admin")
    controller = DeleteController(runner=runner)
    target = user_delete_target(api, user)

    controller.request(target)
    assert target.title == "Delete User"
    assert controller.phase == DELETE_CONFIRMING
    controller.confirm()

    assert api.calls_to("delete_user") == [("delete_user", "u1")]


def test_user_delete_failure_uses_user_label(api, runner):
    api.fail("delete_user", ApiRequestError("", status_code=404))
    controller = DeleteController(runner=runner)
    controller.request(user_delete_target(api, UserRecord(user_id="u9", name="Gone")))

    controller.confirm()

    assert controller.phase == DELETE_CONFIRMING
    assert controller.error_message == "User not found. Please check if it still exists."
