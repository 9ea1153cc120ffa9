import logging

from prediction_provisioner.context import RunContext
from prediction_provisioner.errors import NotOwnerError, PreconditionError, RpcError
from prediction_provisioner.models import OwnershipStatus

logger = logging.getLogger(__name__)


def same_address(a: str, b: str) -> bool:
    return a.strip().lower() == b.strip().lower()


class OwnershipGuard:
    """Checks that the signing identity owns the contract before privileged calls."""

    def __init__(self, required: bool):
        self.required = required

    async def check(self, ctx: RunContext) -> OwnershipStatus:
        if not self.required:
            print("🌐 Public contract: ownership check not required")
            return OwnershipStatus.NOT_REQUIRED
        try:
            owner = await ctx.contract.owner()
        except (RpcError, ValueError) as e:
            raise PreconditionError(f"Could not read contract owner: {e}") from e
        signer = ctx.signer
        print(f"📋 Using account: {signer}")
        print(f"📋 Contract owner: {owner}")
        if not same_address(signer, owner):
            logger.error("Signer %s is not the owner %s", signer, owner)
            raise NotOwnerError(actual=signer, expected=owner)
        print("✅ Owner verification passed")
        return OwnershipStatus.PASSED
