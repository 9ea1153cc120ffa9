import logging
from typing import Optional, Tuple

from prediction_provisioner.context import RunContext
from prediction_provisioner.errors import DeploymentError, RpcError, TransactionError
from prediction_provisioner.models import DeploymentResult
from prediction_provisioner.profiles import ATTACH

logger = logging.getLogger(__name__)


class DeploymentOrchestrator:
    """Deploys a new contract instance (or binds an existing one) and resolves its state.

    Either a confirmed address comes back, or DeploymentError is raised and
    nothing from the attempt is handed to later stages.
    """

    def __init__(self, ctx: RunContext, contract_address: Optional[str] = None):
        self.factory = ctx.factory
        self.profile = ctx.profile
        self.contract_address = contract_address
        self.confirmation_timeout = ctx.confirmation_timeout

    async def run(self) -> Tuple[DeploymentResult, object]:
        if self.profile.target == ATTACH:
            return await self._attach()
        return await self._deploy()

    async def _deploy(self):
        name = self.profile.contract_name
        print(f"🚀 Deploying {name}...")
        try:
            pending = await self.factory.deploy()
            print(f"⏳ Deployment transaction sent: {pending.hash}")
            contract = await pending.wait_for_deployment(timeout=self.confirmation_timeout)
            address = await contract.get_address()
        except (TransactionError, RpcError) as e:
            raise DeploymentError(f"Deployment of {name} failed: {e}") from e
        print(f"✅ {name} deployed to: {address}")
        result = await self._describe(contract, address, deployed=True, tx_hash=pending.hash)
        return result, contract

    async def _attach(self):
        address = self.contract_address
        if not address:
            raise DeploymentError("No contract address to attach to")
        name = self.profile.contract_name
        print(f"🔗 Attaching to {name} at {address}")
        try:
            contract = self.factory.attach(address)
            address = await contract.get_address()
        except (RpcError, ValueError) as e:
            raise DeploymentError(f"Could not attach to {address}: {e}") from e
        result = await self._describe(contract, address, deployed=False)
        return result, contract

    async def _describe(self, contract, address: str, *, deployed: bool,
                        tx_hash: Optional[str] = None) -> DeploymentResult:
        try:
            owner = await contract.owner()
            total = await contract.get_total_events()
        except (RpcError, ValueError) as e:
            raise DeploymentError(f"Contract at {address} did not answer owner/getTotalEvents: {e}") from e
        print("📋 Contract Info:")
        print(f"   Owner: {owner}")
        print(f"   Total Events: {total}")
        logger.info("Contract %s at %s owned by %s with %d events", self.profile.contract_name,
                    address, owner, total)
        return DeploymentResult(
            address=address,
            owner_address=owner,
            initial_record_count=total,
            contract_name=self.profile.contract_name,
            deployed=deployed,
            transaction_id=tx_hash,
        )
