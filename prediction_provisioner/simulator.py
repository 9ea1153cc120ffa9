"""In-memory ledger and prediction contract.

Mirrors the on-chain surface used by the provisioner so a full run can be
rehearsed locally (``DEPLOY_NETWORK=simulate``) and so the stages can be
tested deterministically. Failures can be injected per call.
"""
import dataclasses
import time
import uuid
from typing import Callable, Dict, List, Optional, Set

from eth_utils import to_checksum_address

from prediction_provisioner.errors import ConfirmationTimeout, RpcError, TransactionReverted
from prediction_provisioner.network import TransactionReceipt

DEFAULT_SIGNER = "0x5b38da6a701c568545dcfcb03fcb875f56beddc4"


def _random_address() -> str:
    return to_checksum_address("0x" + uuid.uuid4().hex + uuid.uuid4().hex[:8])


def _random_hash() -> str:
    return "0x" + uuid.uuid4().hex + uuid.uuid4().hex


@dataclasses.dataclass
class SimulatedEvent:
    id: int
    title: str
    description: str
    creator: str
    end_time: float
    round_id: int = 1
    total_predictions: int = 0
    is_finalized: bool = False


class SimulatedLedger:
    """Block counter, signer and contract registry shared by simulated handles."""

    def __init__(self, signer: str = DEFAULT_SIGNER, clock: Callable[[], float] = time.time):
        self.signer = to_checksum_address(signer)
        self.clock = clock
        self.block_number = 0
        self.contracts: Dict[str, "SimulatedPredictionContract"] = {}
        self.reject_deployments = False
        self.submitted: List[str] = []

    @property
    def address(self) -> str:
        return self.signer

    def mine(self, tx_hash: str, contract_address: Optional[str] = None) -> TransactionReceipt:
        self.block_number += 1
        return TransactionReceipt(tx_hash=tx_hash, block_number=self.block_number, status=1,
                                  contract_address=contract_address, gas_used=21000)

    def install(self, contract_name: str = "PrivacyPredictionPlatform", owner: Optional[str] = None,
                events: int = 0, owner_only: bool = True) -> "SimulatedPredictionContract":
        """Place an already-deployed contract on the ledger, optionally pre-seeded."""
        contract = SimulatedPredictionContract(self, _random_address(), owner or self.signer,
                                               contract_name, owner_only=owner_only)
        for i in range(events):
            contract._store_event(f"Existing event {i}", "Seeded before this run", 86400)
        self.contracts[contract.address] = contract
        return contract


class SimulatedTransaction:
    def __init__(self, ledger: SimulatedLedger, on_confirm: Optional[Callable[[], None]] = None,
                 error: Optional[Exception] = None):
        self.ledger = ledger
        self.hash = _random_hash()
        self._on_confirm = on_confirm
        self._error = error
        self._receipt: Optional[TransactionReceipt] = None
        ledger.submitted.append(self.hash)

    async def wait(self, timeout: Optional[float] = None) -> TransactionReceipt:
        if self._error is not None:
            raise self._error
        if self._receipt is None:
            if self._on_confirm is not None:
                self._on_confirm()
            self._receipt = self.ledger.mine(self.hash)
        return self._receipt


class SimulatedPredictionContract:
    """Local stand-in for the deployed prediction contract."""

    def __init__(self, ledger: SimulatedLedger, address: str, owner: str, contract_name: str,
                 owner_only: bool = True):
        self.ledger = ledger
        self.address = address
        self._owner = to_checksum_address(owner)
        self.contract_name = contract_name
        self.owner_only = owner_only
        self.events: List[SimulatedEvent] = []
        self.create_calls = 0
        # injected failures
        self.revert_creates: Set[int] = set()
        self.timeout_creates: Set[int] = set()
        self.failing_queries: Set[str] = set()

    def _store_event(self, title: str, description: str, duration_seconds: int) -> SimulatedEvent:
        event = SimulatedEvent(
            id=len(self.events),
            title=title,
            description=description,
            creator=self.ledger.signer,
            end_time=self.ledger.clock() + duration_seconds,
        )
        self.events.append(event)
        return event

    def _get_event(self, event_id: int) -> SimulatedEvent:
        if event_id < 0 or event_id >= len(self.events):
            raise RpcError("execution reverted: Event does not exist", code=3)
        return self.events[event_id]

    def _query(self, name: str) -> None:
        if name in self.failing_queries:
            raise RpcError(f"execution reverted: {name} unavailable", code=3)

    async def get_address(self) -> str:
        return self.address

    async def owner(self) -> str:
        self._query("owner")
        return self._owner

    async def get_total_events(self) -> int:
        self._query("getTotalEvents")
        return len(self.events)

    async def create_event(self, title: str, description: str, duration_seconds: int) -> SimulatedTransaction:
        call_index = self.create_calls
        self.create_calls += 1
        # Mirrors the contract's require() checks, surfaced at gas estimation
        if self.owner_only and self.ledger.signer.lower() != self._owner.lower():
            raise RpcError("execution reverted: Only owner can call this function", code=3)
        if duration_seconds <= 0:
            raise RpcError("execution reverted: Duration must be positive", code=3)
        if not title:
            raise RpcError("execution reverted: Title cannot be empty", code=3)

        tx = SimulatedTransaction(self.ledger)
        if call_index in self.revert_creates:
            tx._error = TransactionReverted(tx.hash, self.ledger.block_number + 1)
        elif call_index in self.timeout_creates:
            tx._error = ConfirmationTimeout(tx.hash, 0)
        else:
            tx._on_confirm = lambda: self._store_event(title, description, duration_seconds)
        return tx

    async def get_current_round_info(self, event_id: int):
        self._query("getCurrentRoundInfo")
        event = self._get_event(event_id)
        remaining = max(0, int(event.end_time - self.ledger.clock()))
        return event.round_id, remaining > 0 and not event.is_finalized, remaining

    async def is_guess_time_active(self, event_id: int) -> bool:
        self._query("isGuessTimeActive")
        event = self._get_event(event_id)
        return self.ledger.clock() < event.end_time and not event.is_finalized

    async def get_prediction_stats(self, event_id: int):
        self._query("getPredictionStats")
        event = self._get_event(event_id)
        active = self.ledger.clock() < event.end_time and not event.is_finalized
        return event.total_predictions, event.is_finalized, active


class SimulatedDeployment:
    def __init__(self, ledger: SimulatedLedger, contract: SimulatedPredictionContract):
        self.ledger = ledger
        self.contract = contract
        self.hash = _random_hash()
        ledger.submitted.append(self.hash)

    async def wait_for_deployment(self, timeout: Optional[float] = None) -> SimulatedPredictionContract:
        if self.ledger.reject_deployments:
            raise TransactionReverted(self.hash, self.ledger.block_number + 1)
        self.ledger.mine(self.hash, self.contract.address)
        self.ledger.contracts[self.contract.address] = self.contract
        return self.contract


class SimulatedContractFactory:
    def __init__(self, ledger: SimulatedLedger, contract_name: str = "PrivacyPredictionPlatform",
                 owner_only: bool = True):
        self.ledger = ledger
        self.contract_name = contract_name
        self.owner_only = owner_only

    async def deploy(self) -> SimulatedDeployment:
        contract = SimulatedPredictionContract(self.ledger, _random_address(), self.ledger.signer,
                                               self.contract_name, owner_only=self.owner_only)
        return SimulatedDeployment(self.ledger, contract)

    def attach(self, address: str) -> SimulatedPredictionContract:
        contract = self.ledger.contracts.get(to_checksum_address(address))
        if contract is None:
            raise RpcError(f"No contract code at {address}")
        return contract
