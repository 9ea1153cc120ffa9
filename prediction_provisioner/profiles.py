import dataclasses
from typing import Dict

from prediction_provisioner.errors import ConfigError
from prediction_provisioner.models import ProvisionMode

DEPLOY = "deploy"
ATTACH = "attach"


@dataclasses.dataclass(frozen=True)
class RunProfile:
    """Capability descriptor for one contract variant.

    Every field is declared explicitly; the orchestrator never infers whether
    ownership is required or how provisioning should behave on reruns.
    """

    name: str
    contract_name: str
    target: str
    ownership_required: bool
    provision_mode: ProvisionMode
    catalog: str = "launch"
    verify: bool = True

    def __post_init__(self):
        if self.target not in (DEPLOY, ATTACH):
            raise ConfigError(f"Profile {self.name}: target must be '{DEPLOY}' or '{ATTACH}'")

    def replace(self, **changes) -> "RunProfile":
        return dataclasses.replace(self, **changes)


PROFILES: Dict[str, RunProfile] = {p.name: p for p in (
    RunProfile("standard", "PrivacyPredictionPlatform", DEPLOY, True, ProvisionMode.IDEMPOTENT_SKIP),
    RunProfile("platform", "PrivacyPredictionPlatform", DEPLOY, True, ProvisionMode.NONE, verify=False),
    RunProfile("simple", "PrivacyPredictionPlatformSimple", DEPLOY, True, ProvisionMode.ALWAYS_CREATE,
               catalog="simple"),
    RunProfile("public", "PrivacyGuessPublic", DEPLOY, False, ProvisionMode.ALWAYS_CREATE,
               catalog="public-smoke"),
    RunProfile("fhe", "PrivacyGuessFHESimple", DEPLOY, True, ProvisionMode.ALWAYS_CREATE,
               catalog="fhe-smoke"),
    RunProfile("seed", "PrivacyPredictionPlatform", ATTACH, True, ProvisionMode.IDEMPOTENT_SKIP),
)}


def get_profile(name: str) -> RunProfile:
    try:
        return PROFILES[name]
    except KeyError:
        raise ConfigError(f"Unknown deploy profile '{name}' (known: {', '.join(sorted(PROFILES))})")
