import enum
import logging
from typing import Iterable, List, Optional

from prediction_provisioner.context import RunContext
from prediction_provisioner.errors import ProvisionerError, ProvisionItemError
from prediction_provisioner.models import (EventSpec, OutcomeStatus, ProvisionBatch, ProvisionMode,
                                           ProvisionOutcome)

logger = logging.getLogger(__name__)


class ItemPhase(str, enum.Enum):
    VALIDATE = "validate"
    SUBMIT = "submit"
    CONFIRM = "confirm"


# Errors that stop a single item but never the batch. ValueError/KeyError/TypeError
# cover malformed responses from the node.
ITEM_ERRORS = (ProvisionerError, ValueError, KeyError, TypeError)


class BulkProvisioner:
    """Creates a catalog of events one transaction at a time.

    Items are processed strictly in catalog order: validate, submit, wait for
    confirmation, record. The next item is only submitted once the previous
    one has a terminal outcome, so nonces from the shared signer are consumed
    in order. Nothing is retried.
    """

    def __init__(self, mode: ProvisionMode, catalog: Iterable[EventSpec],
                 confirmation_timeout: Optional[float] = None):
        if mode is ProvisionMode.NONE:
            raise ValueError("BulkProvisioner needs a provisioning mode other than 'none'")
        self.mode = mode
        self.catalog = tuple(catalog)
        self.confirmation_timeout = confirmation_timeout

    async def run(self, ctx: RunContext) -> ProvisionBatch:
        contract = ctx.contract
        try:
            initial = await contract.get_total_events()
        except ITEM_ERRORS as e:
            logger.warning("Could not read event count before provisioning: %s", e)
            if self.mode is ProvisionMode.IDEMPOTENT_SKIP:
                # Without the count we cannot prove the contract is empty
                print("⚠️ Could not read current event count, skipping creation")
                return ProvisionBatch(self.mode, None, skipped=True, count_error=str(e))
            initial = None
        else:
            print(f"📊 Current total events: {initial}")

        if self.mode is ProvisionMode.IDEMPOTENT_SKIP and initial:
            print("ℹ️ Events already exist, skipping creation")
            return ProvisionBatch(self.mode, initial, final_record_count=initial, skipped=True)

        print(f"🚀 Creating {len(self.catalog)} events...")
        outcomes: List[ProvisionOutcome] = []
        for index, spec in enumerate(self.catalog):
            outcomes.append(await self._provision_one(contract, index, spec))

        final, count_error = None, None
        try:
            final = await contract.get_total_events()
            print(f"\n📊 Final total events: {final}")
        except ITEM_ERRORS as e:
            count_error = str(e)
            logger.warning("Could not read event count after provisioning: %s", e)
        return ProvisionBatch(self.mode, initial, tuple(outcomes), final_record_count=final,
                              count_error=count_error)

    async def _provision_one(self, contract, index: int, spec: EventSpec) -> ProvisionOutcome:
        print(f"\n📝 Creating event {index + 1}: {spec.title}")
        phase = ItemPhase.VALIDATE
        tx_hash = None
        try:
            spec.validate()
            phase = ItemPhase.SUBMIT
            tx = await contract.create_event(spec.title, spec.description, spec.duration_seconds)
            tx_hash = tx.hash
            print(f"⏳ Transaction sent: {tx_hash}")
            phase = ItemPhase.CONFIRM
            receipt = await tx.wait(timeout=self.confirmation_timeout)
        except ITEM_ERRORS as e:
            error = ProvisionItemError(index, f"{phase.value} failed: {e}")
            print(f"❌ Failed to create event {index + 1}: {e}")
            logger.warning("%s", error)
            return ProvisionOutcome(index, spec, OutcomeStatus.FAILED, transaction_id=tx_hash,
                                    error_message=str(error))
        print(f"✅ Event created! Block: {receipt.block_number}")
        return ProvisionOutcome(index, spec, OutcomeStatus.SUCCEEDED, transaction_id=tx_hash,
                                block_number=receipt.block_number)
