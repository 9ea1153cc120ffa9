import pytest

from prediction_provisioner.models import (DeploymentResult, EventSpec, OutcomeStatus, OwnershipStatus,
                                           ProvisionBatch, ProvisionMode, ProvisionOutcome, VerificationReport)
from prediction_provisioner.record import read_last_deploy, write_last_deploy
from prediction_provisioner.report import ResultReporter
from prediction_provisioner.verification import pick_record_id

DEPLOYMENT = DeploymentResult("0xContract", "0xOwner", 0, contract_name="PrivacyPredictionPlatform")
SPEC = EventSpec("Title", "Description", 60)


def test_failures_become_warnings():
    batch = ProvisionBatch(
        ProvisionMode.ALWAYS_CREATE, 0,
        outcomes=(
            ProvisionOutcome(0, SPEC, OutcomeStatus.SUCCEEDED, transaction_id="0xaa"),
            ProvisionOutcome(1, SPEC, OutcomeStatus.FAILED, error_message="Event 1: confirm failed: boom"),
        ),
        final_record_count=1,
    )
    verification = VerificationReport(0, errors=["getPredictionStats failed: nope"])

    report = ResultReporter().build("simple", DEPLOYMENT, OwnershipStatus.PASSED, batch, verification)

    assert report.success
    assert report.warnings == ("Event 1: confirm failed: boom", "getPredictionStats failed: nope")
    text = ResultReporter().render(report)
    assert "1 succeeded, 1 failed" in text
    assert "0xaa" in text
    assert "Deployment completed successfully" in text
    assert report.to_dict()["provisioning"]["outcomes"][1]["status"] == "failed"


def test_skipped_batch_rendering():
    batch = ProvisionBatch(ProvisionMode.IDEMPOTENT_SKIP, 3, final_record_count=3, skipped=True)
    report = ResultReporter().build("seed", DEPLOYMENT, OwnershipStatus.PASSED, batch)

    assert report.outcomes == ()
    assert "skipped, 3 events already present" in ResultReporter().render(report)


def test_emit_returns_exit_code(capsys):
    report = ResultReporter().build("platform", DEPLOYMENT, OwnershipStatus.NOT_REQUIRED)

    assert ResultReporter().emit(report) == 0
    assert "0xContract" in capsys.readouterr().out


def test_deploy_record_round_trip(tmp_path):
    path = tmp_path / "deploy" / "last_deploy.json"

    assert read_last_deploy(path) == ""
    assert write_last_deploy(path, DEPLOYMENT, "standard")
    assert read_last_deploy(path) == "0xContract"


def test_corrupt_deploy_record_is_ignored(tmp_path):
    path = tmp_path / "last_deploy.json"
    path.write_text("{not json")
    assert read_last_deploy(path) == ""


def _batch(initial, final, succeeded=2, failed=0):
    outcomes = tuple(ProvisionOutcome(i, SPEC, OutcomeStatus.SUCCEEDED, transaction_id="0xaa")
                     for i in range(succeeded))
    outcomes += tuple(ProvisionOutcome(succeeded + i, SPEC, OutcomeStatus.FAILED, error_message="boom")
                      for i in range(failed))
    return ProvisionBatch(ProvisionMode.ALWAYS_CREATE, initial, outcomes=outcomes, final_record_count=final)


@pytest.mark.parametrize("batch, expected", [
    (None, 0),
    (_batch(5, 7), 5),
    (_batch(0, 2), 0),
    (_batch(None, 7), 5),
    (_batch(None, 6, succeeded=1, failed=1), 5),
    (_batch(None, None), 0),
    (_batch(4, 4, succeeded=0, failed=2), 0),
])
def test_verified_event_is_first_fresh_one(batch, expected):
    assert pick_record_id(batch) == expected


def test_deployed_contract_address_is_ready_to_paste():
    text = ResultReporter().render(ResultReporter().build("platform", DEPLOYMENT, OwnershipStatus.PASSED))
    assert 'const CONTRACT_ADDRESS_RAW = "0xContract";' in text

    attached = DeploymentResult("0xContract", "0xOwner", 3, deployed=False)
    text = ResultReporter().render(ResultReporter().build("seed", attached, OwnershipStatus.PASSED))
    assert "CONTRACT_ADDRESS_RAW" not in text
