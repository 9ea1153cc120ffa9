"""Typed proxy for the prediction contract's callable surface.

Only the calls the provisioner needs are encoded here; the rest of the
contract (commit/reveal, encryption, round management) is never touched.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import DecodingError
from eth_utils import function_signature_to_4byte_selector, is_address, to_checksum_address, to_hex

from prediction_provisioner.errors import ArtifactNotFoundError, DeploymentError, PreconditionError
from prediction_provisioner.network import NetworkClient, TransactionReceipt

logger = logging.getLogger(__name__)

# name -> (argument types, return types)
FUNCTIONS: Dict[str, Tuple[List[str], List[str]]] = {
    "owner": ([], ["address"]),
    "getTotalEvents": ([], ["uint256"]),
    "createEvent": (["string", "string", "uint256"], []),
    "getCurrentRoundInfo": (["uint256"], ["uint256", "bool", "uint256"]),
    "isGuessTimeActive": (["uint256"], ["bool"]),
    "getPredictionStats": (["uint256"], ["uint256", "bool", "bool"]),
}


def encode_call(name: str, args: Sequence[Any] = ()) -> str:
    arg_types, _ = FUNCTIONS[name]
    selector = function_signature_to_4byte_selector(f"{name}({','.join(arg_types)})")
    return to_hex(selector + abi_encode(arg_types, list(args)))


def decode_result(name: str, data: bytes) -> Tuple[Any, ...]:
    _, return_types = FUNCTIONS[name]
    if not data:
        raise ValueError(f"{name} returned no data (is the address a contract?)")
    try:
        return tuple(abi_decode(return_types, data))
    except DecodingError as e:
        raise ValueError(f"{name} returned malformed data: {e}") from e


class ContractArtifact:
    """A compiled contract as emitted by Hardhat (``artifacts/contracts/X.sol/X.json``)."""

    def __init__(self, contract_name: str, abi: list, bytecode: str):
        self.contract_name = contract_name
        self.abi = abi
        self.bytecode = bytecode

    @staticmethod
    def locate(artifacts_dir: Path, contract_name: str) -> Path:
        return Path(artifacts_dir) / "contracts" / f"{contract_name}.sol" / f"{contract_name}.json"

    @classmethod
    def load(cls, path: Path, contract_name: Optional[str] = None) -> "ContractArtifact":
        path = Path(path)
        if not path.exists():
            raise ArtifactNotFoundError(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except ValueError as e:
            raise PreconditionError(f"Artifact {path} is not valid JSON: {e}") from e
        bytecode = data.get("bytecode")
        # Foundry nests the hex under "object"
        if isinstance(bytecode, dict):
            bytecode = bytecode.get("object")
        if not bytecode or bytecode in ("0x", "0x0"):
            raise PreconditionError(f"Artifact {path} has no deployable bytecode")
        if not bytecode.startswith("0x"):
            bytecode = "0x" + bytecode
        name = data.get("contractName") or contract_name or path.stem
        return cls(name, data.get("abi", []), bytecode)


class PendingTransaction:
    def __init__(self, client: NetworkClient, tx_hash: str):
        self.client = client
        self.hash = tx_hash

    async def wait(self, timeout: Optional[float] = None) -> TransactionReceipt:
        return await self.client.wait_for_receipt(self.hash, timeout=timeout)


class PredictionContract:
    """Handle bound to a deployed prediction contract address."""

    def __init__(self, client: NetworkClient, address: str, contract_name: str = ""):
        if not is_address(address):
            raise PreconditionError(f"Invalid contract address: {address!r}")
        self.client = client
        self.address = to_checksum_address(address)
        self.contract_name = contract_name

    def _read(self, name: str, *args) -> Tuple[Any, ...]:
        return decode_result(name, self.client.call(self.address, encode_call(name, args)))

    async def get_address(self) -> str:
        return self.address

    async def owner(self) -> str:
        (owner,) = self._read("owner")
        return to_checksum_address(owner)

    async def get_total_events(self) -> int:
        (total,) = self._read("getTotalEvents")
        return int(total)

    async def create_event(self, title: str, description: str, duration_seconds: int) -> PendingTransaction:
        data = encode_call("createEvent", [title, description, duration_seconds])
        tx_hash = await self.client.send_transaction(data, to=self.address)
        return PendingTransaction(self.client, tx_hash)

    async def get_current_round_info(self, event_id: int) -> Tuple[int, bool, int]:
        round_id, is_active, time_remaining = self._read("getCurrentRoundInfo", event_id)
        return int(round_id), bool(is_active), int(time_remaining)

    async def is_guess_time_active(self, event_id: int) -> bool:
        (active,) = self._read("isGuessTimeActive", event_id)
        return bool(active)

    async def get_prediction_stats(self, event_id: int) -> Tuple[int, bool, bool]:
        total, finalized, active = self._read("getPredictionStats", event_id)
        return int(total), bool(finalized), bool(active)


class PendingDeployment:
    def __init__(self, client: NetworkClient, tx_hash: str, contract_name: str):
        self.client = client
        self.hash = tx_hash
        self.contract_name = contract_name

    async def wait_for_deployment(self, timeout: Optional[float] = None) -> PredictionContract:
        receipt = await self.client.wait_for_receipt(self.hash, timeout=timeout)
        if not receipt.contract_address:
            raise DeploymentError(f"Deployment receipt for {self.hash} carries no contract address")
        return PredictionContract(self.client, receipt.contract_address, self.contract_name)


class PredictionContractFactory:
    """Deploys new instances from an artifact, or binds to an existing address."""

    def __init__(self, client: NetworkClient, artifact: Optional[ContractArtifact] = None,
                 contract_name: str = ""):
        self.client = client
        self.artifact = artifact
        self.contract_name = artifact.contract_name if artifact else contract_name

    async def deploy(self) -> PendingDeployment:
        if self.artifact is None:
            raise PreconditionError(f"No artifact loaded for {self.contract_name or 'contract'}")
        tx_hash = await self.client.send_transaction(self.artifact.bytecode)
        logger.info("Deployment of %s submitted: %s", self.contract_name, tx_hash)
        return PendingDeployment(self.client, tx_hash, self.contract_name)

    def attach(self, address: str) -> PredictionContract:
        return PredictionContract(self.client, address, self.contract_name)
