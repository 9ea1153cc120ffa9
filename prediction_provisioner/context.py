import dataclasses
from typing import Any, Optional

from prediction_provisioner.profiles import RunProfile


@dataclasses.dataclass(frozen=True)
class RunContext:
    """Everything a stage may touch during one run.

    ``client`` is the network connection bound to the signer, ``factory``
    deploys or attaches contract handles, and ``contract`` is filled in
    once deployment has resolved an address.
    """

    profile: RunProfile
    client: Any
    factory: Any
    contract: Any = None
    confirmation_timeout: Optional[float] = None

    @property
    def signer(self) -> str:
        return self.client.address

    def with_contract(self, contract) -> "RunContext":
        return dataclasses.replace(self, contract=contract)
