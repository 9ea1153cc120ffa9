import dataclasses
import math
import os
from pathlib import Path
from typing import Mapping, Optional

from prediction_provisioner.contract import ContractArtifact
from prediction_provisioner.errors import ConfigError
from prediction_provisioner.models import ProvisionMode
from prediction_provisioner.profiles import RunProfile, get_profile

NETWORK_RPC = "rpc"
NETWORK_SIMULATE = "simulate"

DEFAULT_RPC_URL = "http://127.0.0.1:8545"
DEFAULT_RECORD_PATH = Path("deploy") / "last_deploy.json"

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def _flag(env: Mapping[str, str], key: str) -> Optional[bool]:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return None
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{key} must be a boolean (1/0, true/false), got {raw!r}")


def _number(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}")
    if not math.isfinite(value) or value <= 0:
        raise ConfigError(f"{key} must be a positive finite number, got {raw!r}")
    return value


def _optional(env: Mapping[str, str], key: str) -> Optional[str]:
    value = (env.get(key) or "").strip()
    return value or None


@dataclasses.dataclass(frozen=True)
class Settings:
    profile: RunProfile
    network: str = NETWORK_RPC
    rpc_url: str = DEFAULT_RPC_URL
    rpc_api_key: Optional[str] = None
    rpc_timeout: float = 20
    private_key: Optional[str] = dataclasses.field(default=None, repr=False)
    contract_address: Optional[str] = None
    artifacts_dir: Path = Path("artifacts")
    contract_artifact: Optional[Path] = None
    catalog_file: Optional[Path] = None
    confirmation_timeout: float = 180
    poll_interval: float = 2
    gas_multiplier: float = 1.2
    record_path: Path = DEFAULT_RECORD_PATH
    log_level: str = "INFO"

    @property
    def artifact_path(self) -> Path:
        if self.contract_artifact is not None:
            return self.contract_artifact
        return ContractArtifact.locate(self.artifacts_dir, self.profile.contract_name)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        profile = get_profile((env.get("DEPLOY_PROFILE") or "standard").strip())
        overrides = {}
        ownership = _flag(env, "OWNERSHIP_REQUIRED")
        if ownership is not None:
            overrides["ownership_required"] = ownership
        verify = _flag(env, "VERIFY_DEPLOYMENT")
        if verify is not None:
            overrides["verify"] = verify
        mode = _optional(env, "PROVISION_MODE")
        if mode is not None:
            try:
                overrides["provision_mode"] = ProvisionMode(mode.lower())
            except ValueError:
                known = ", ".join(m.value for m in ProvisionMode)
                raise ConfigError(f"PROVISION_MODE must be one of {known}, got {mode!r}")
        if overrides:
            profile = profile.replace(**overrides)

        network = (env.get("DEPLOY_NETWORK") or NETWORK_RPC).strip().lower()
        if network not in (NETWORK_RPC, NETWORK_SIMULATE):
            raise ConfigError(f"DEPLOY_NETWORK must be '{NETWORK_RPC}' or '{NETWORK_SIMULATE}', got {network!r}")

        private_key = _optional(env, "DEPLOYER_PRIVATE_KEY")
        if network == NETWORK_RPC and not private_key:
            raise ConfigError("DEPLOYER_PRIVATE_KEY not set")

        artifact = _optional(env, "CONTRACT_ARTIFACT")
        catalog = _optional(env, "EVENT_CATALOG_FILE")
        return cls(
            profile=profile,
            network=network,
            rpc_url=_optional(env, "RPC_URL") or DEFAULT_RPC_URL,
            rpc_api_key=_optional(env, "RPC_API_KEY"),
            rpc_timeout=_number(env, "RPC_TIMEOUT", 20),
            private_key=private_key,
            contract_address=_optional(env, "CONTRACT_ADDRESS"),
            artifacts_dir=Path(_optional(env, "ARTIFACTS_DIR") or "artifacts"),
            contract_artifact=Path(artifact) if artifact else None,
            catalog_file=Path(catalog) if catalog else None,
            confirmation_timeout=_number(env, "CONFIRMATION_TIMEOUT", 180),
            poll_interval=_number(env, "CONFIRMATION_POLL_INTERVAL", 2),
            gas_multiplier=_number(env, "GAS_MULTIPLIER", 1.2),
            record_path=Path(_optional(env, "DEPLOY_RECORD_PATH") or DEFAULT_RECORD_PATH),
            log_level=(_optional(env, "LOG_LEVEL") or "INFO").upper(),
        )
