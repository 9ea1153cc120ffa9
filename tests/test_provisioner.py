import pytest

from prediction_provisioner.catalog import LAUNCH_CATALOG
from prediction_provisioner.errors import EventSpecError
from prediction_provisioner.models import EventSpec, OutcomeStatus, ProvisionMode
from prediction_provisioner.provisioner import BulkProvisioner

WORLD_CUP = EventSpec("World Cup Winner", "desc", 7776000)


@pytest.mark.asyncio
async def test_single_event_on_empty_contract(ledger, make_ctx):
    contract = ledger.install()
    ctx = make_ctx(contract=contract)

    batch = await BulkProvisioner(ProvisionMode.IDEMPOTENT_SKIP, [WORLD_CUP]).run(ctx)

    assert len(batch.outcomes) == 1
    outcome = batch.outcomes[0]
    assert outcome.status is OutcomeStatus.SUCCEEDED
    assert outcome.index == 0
    assert outcome.transaction_id in ledger.submitted
    assert outcome.block_number == ledger.block_number
    assert batch.initial_record_count == 0
    assert batch.final_record_count == 1
    assert contract.events[0].title == "World Cup Winner"


@pytest.mark.asyncio
async def test_idempotent_mode_skips_populated_contract(ledger, make_ctx):
    contract = ledger.install(events=3)
    ctx = make_ctx(contract=contract)

    batch = await BulkProvisioner(ProvisionMode.IDEMPOTENT_SKIP, LAUNCH_CATALOG).run(ctx)

    assert batch.skipped
    assert batch.outcomes == ()
    assert contract.create_calls == 0
    assert ledger.submitted == []
    assert len(contract.events) == 3


@pytest.mark.asyncio
async def test_idempotent_rerun_creates_nothing_new(ledger, make_ctx):
    contract = ledger.install()
    ctx = make_ctx(contract=contract)
    provisioner = BulkProvisioner(ProvisionMode.IDEMPOTENT_SKIP, LAUNCH_CATALOG)

    first = await provisioner.run(ctx)
    second = await provisioner.run(ctx)

    assert len(first.outcomes) == len(LAUNCH_CATALOG)
    assert second.outcomes == ()
    assert second.skipped
    assert len(contract.events) == len(LAUNCH_CATALOG)


@pytest.mark.asyncio
async def test_always_create_duplicates_on_rerun(ledger, make_ctx):
    contract = ledger.install(events=2)
    ctx = make_ctx(contract=contract)

    batch = await BulkProvisioner(ProvisionMode.ALWAYS_CREATE, LAUNCH_CATALOG).run(ctx)

    assert not batch.skipped
    assert [o.status for o in batch.outcomes] == [OutcomeStatus.SUCCEEDED] * 3
    assert batch.initial_record_count == 2
    assert batch.final_record_count == 5


@pytest.mark.asyncio
async def test_rejected_item_does_not_stop_the_batch(ledger, make_ctx):
    contract = ledger.install()
    contract.revert_creates = {1}
    ctx = make_ctx(contract=contract)

    batch = await BulkProvisioner(ProvisionMode.IDEMPOTENT_SKIP, LAUNCH_CATALOG).run(ctx)

    assert [o.status for o in batch.outcomes] == [
        OutcomeStatus.SUCCEEDED, OutcomeStatus.FAILED, OutcomeStatus.SUCCEEDED,
    ]
    assert [o.index for o in batch.outcomes] == [0, 1, 2]
    assert [o.spec for o in batch.outcomes] == list(LAUNCH_CATALOG)
    failed = batch.outcomes[1]
    assert "reverted" in failed.error_message
    assert "confirm failed" in failed.error_message
    assert failed.transaction_id is not None
    assert batch.final_record_count == 2


@pytest.mark.asyncio
async def test_every_item_fails_and_all_are_attempted(ledger, make_ctx):
    contract = ledger.install()
    contract.revert_creates = {0, 1}
    contract.timeout_creates = {2}
    ctx = make_ctx(contract=contract)

    batch = await BulkProvisioner(ProvisionMode.ALWAYS_CREATE, LAUNCH_CATALOG).run(ctx)

    assert len(batch.outcomes) == 3
    assert all(o.status is OutcomeStatus.FAILED for o in batch.outcomes)
    assert "not confirmed" in batch.outcomes[2].error_message
    assert contract.create_calls == 3
    assert batch.final_record_count == 0


@pytest.mark.asyncio
async def test_submission_error_is_recorded_without_transaction(ledger, make_ctx):
    contract = ledger.install(owner="0xAb8483F64d9C6d1EcF9b849Ae677dD3315835cb2")
    ctx = make_ctx(contract=contract)

    batch = await BulkProvisioner(ProvisionMode.ALWAYS_CREATE, [WORLD_CUP]).run(ctx)

    outcome = batch.outcomes[0]
    assert outcome.status is OutcomeStatus.FAILED
    assert outcome.transaction_id is None
    assert "submit failed" in outcome.error_message
    assert "Only owner" in outcome.error_message


def test_zero_duration_spec_is_invalid():
    with pytest.raises(EventSpecError):
        EventSpec("Bad", "desc", 0).validate()


@pytest.mark.parametrize("spec", [
    EventSpec("", "desc", 10),
    EventSpec("Title", "  ", 10),
    EventSpec("Title", "desc", -5),
    EventSpec("Title", "desc", True),
])
def test_malformed_specs_are_invalid(spec):
    with pytest.raises(ValueError):
        spec.validate()


@pytest.mark.asyncio
async def test_invalid_spec_is_rejected_before_submission(ledger, make_ctx):
    contract = ledger.install()
    ctx = make_ctx(contract=contract)
    catalog = [EventSpec("Bad", "desc", 0), WORLD_CUP]

    batch = await BulkProvisioner(ProvisionMode.ALWAYS_CREATE, catalog).run(ctx)

    bad, good = batch.outcomes
    assert bad.status is OutcomeStatus.FAILED
    assert "validate failed" in bad.error_message
    assert bad.transaction_id is None
    assert good.status is OutcomeStatus.SUCCEEDED
    # only the valid spec reached the contract
    assert contract.create_calls == 1
    assert len(ledger.submitted) == 1


@pytest.mark.asyncio
async def test_unreadable_count_skips_idempotent_creation(ledger, make_ctx):
    contract = ledger.install()
    contract.failing_queries = {"getTotalEvents"}
    ctx = make_ctx(contract=contract)

    batch = await BulkProvisioner(ProvisionMode.IDEMPOTENT_SKIP, LAUNCH_CATALOG).run(ctx)

    assert batch.skipped
    assert batch.initial_record_count is None
    assert "getTotalEvents" in batch.count_error
    assert contract.create_calls == 0


def test_none_mode_is_not_a_provisioning_mode():
    with pytest.raises(ValueError):
        BulkProvisioner(ProvisionMode.NONE, LAUNCH_CATALOG)
