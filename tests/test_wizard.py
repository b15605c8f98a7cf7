import asyncio

import pytest

from fakes import FakeGateway
from gbp_pulse.errors import ResponseShapeError
from gbp_pulse.wizard import VALIDATION_FAILED_MESSAGE, ProfileWizard, WizardPhase, parse_validation


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


def _wizard_at_contact(gateway: FakeGateway) -> ProfileWizard:
    wizard = ProfileWizard(gateway, submit_delay=0)
    wizard.update(business_name="Sunrise Bakery", category="Bakery", description="We bake bread.")
    asyncio.run(wizard.next())
    asyncio.run(wizard.next())
    assert wizard.phase is WizardPhase.CONTACT
    return wizard


def test_business_name_is_required_to_leave_info(gateway: FakeGateway) -> None:
    wizard = ProfileWizard(gateway, submit_delay=0)
    wizard.update(business_name="   ")

    assert wizard.can_advance is False
    assert asyncio.run(wizard.next()) is WizardPhase.INFO
    assert wizard.stage == 1


def test_update_ignores_unset_fields(gateway: FakeGateway) -> None:
    wizard = ProfileWizard(gateway)
    wizard.update(business_name="Sunrise Bakery", phone="555-0100")
    wizard.update(phone=None, is_service_area=True)

    assert wizard.data.phone == "555-0100"
    assert wizard.data.is_service_area is True


def test_audit_failure_stays_on_contact(gateway: FakeGateway) -> None:
    gateway.fail.add("validate_profile")
    wizard = _wizard_at_contact(gateway)

    asyncio.run(wizard.next())

    assert wizard.phase is WizardPhase.CONTACT
    assert wizard.stage == 3
    assert wizard.error == VALIDATION_FAILED_MESSAGE
    assert wizard.validation is None


def test_audit_failure_without_issues_counts_as_failure(gateway: FakeGateway) -> None:
    gateway.validation_payload = {"isValid": False, "issues": []}
    wizard = _wizard_at_contact(gateway)

    asyncio.run(wizard.next())

    assert wizard.phase is WizardPhase.CONTACT
    assert wizard.error == VALIDATION_FAILED_MESSAGE


def test_audit_success_without_rewrite_keeps_description(gateway: FakeGateway) -> None:
    wizard = _wizard_at_contact(gateway)

    asyncio.run(wizard.next())

    assert wizard.phase is WizardPhase.AUDIT
    assert wizard.stage == 4
    assert wizard.validation is not None and wizard.validation.is_valid
    assert wizard.data.description == "We bake bread."
    assert wizard.error is None


def test_audit_rewrite_replaces_description(gateway: FakeGateway) -> None:
    gateway.validation_payload = {
        "isValid": False,
        "issues": ["Description mentions a URL"],
        "optimizedDescription": "Family bakery serving fresh sourdough daily.",
    }
    wizard = _wizard_at_contact(gateway)

    asyncio.run(wizard.next())

    assert wizard.phase is WizardPhase.AUDIT
    assert wizard.validation.issues == ["Description mentions a URL"]
    assert wizard.data.description == "Family bakery serving fresh sourdough daily."


def test_back_never_reruns_the_audit(gateway: FakeGateway) -> None:
    wizard = _wizard_at_contact(gateway)
    asyncio.run(wizard.next())

    assert wizard.back() is WizardPhase.CONTACT
    assert wizard.back() is WizardPhase.LOCATION
    assert wizard.back() is WizardPhase.INFO
    assert wizard.back() is WizardPhase.INFO
    assert gateway.call_names() == ["validate_profile"]


def test_submit_completes_and_freezes_the_wizard(gateway: FakeGateway) -> None:
    wizard = _wizard_at_contact(gateway)
    asyncio.run(wizard.next())

    asyncio.run(wizard.next())

    assert wizard.completed
    assert wizard.stage is None
    assert wizard.can_advance is False
    assert wizard.back() is WizardPhase.COMPLETED
    wizard.update(business_name="Other")
    assert wizard.data.business_name == "Sunrise Bakery"
    checklist = wizard.launch_checklist()
    assert checklist[0] == {"label": "Business Name", "value": "Sunrise Bakery"}


def test_back_is_ignored_while_validating(gateway: FakeGateway) -> None:
    wizard = _wizard_at_contact(gateway)
    observed = []

    async def slow_validate(draft):
        observed.append((wizard.phase, wizard.busy, wizard.back()))
        return {"isValid": True, "issues": []}

    gateway.validate_profile = slow_validate
    asyncio.run(wizard.next())

    assert observed == [(WizardPhase.VALIDATING, True, WizardPhase.VALIDATING)]
    assert wizard.phase is WizardPhase.AUDIT


@pytest.mark.parametrize(
    "payload",
    [
        None,
        {"issues": []},
        {"isValid": "maybe"},
        {"isValid": False},
    ],
)
def test_parse_validation_rejects_bad_shapes(payload) -> None:
    with pytest.raises(ResponseShapeError):
        parse_validation(payload)


def test_parse_validation_drops_blank_rewrite() -> None:
    result = parse_validation({"isValid": True, "optimizedDescription": "   "})

    assert result.optimized_description is None
