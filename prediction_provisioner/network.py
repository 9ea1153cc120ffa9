import asyncio
import dataclasses
import logging
import time
from typing import Any, Dict, Optional

from eth_account import Account
from eth_utils import decode_hex, to_checksum_address, to_hex, to_int

from prediction_provisioner.errors import ConfirmationTimeout, RpcError, TransactionReverted
from prediction_provisioner.rpc import RpcClient

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class TransactionReceipt:
    tx_hash: str
    block_number: int
    status: int
    contract_address: Optional[str] = None
    gas_used: Optional[int] = None

    @classmethod
    def from_rpc(cls, raw: Dict[str, Any]) -> "TransactionReceipt":
        address = raw.get("contractAddress")
        gas_used = raw.get("gasUsed")
        return cls(
            tx_hash=raw["transactionHash"],
            block_number=to_int(hexstr=raw["blockNumber"]),
            # pre-byzantium receipts carry no status field
            status=to_int(hexstr=raw.get("status") or "0x1"),
            contract_address=to_checksum_address(address) if address else None,
            gas_used=to_int(hexstr=gas_used) if gas_used else None,
        )


class NetworkClient:
    """Connection to the ledger network bound to a single signing identity.

    Transactions are signed locally and submitted one at a time; the nonce
    is read from the node's pending pool for every submission.
    """

    def __init__(self, rpc: RpcClient, account, *, confirmation_timeout: float = 180,
                 poll_interval: float = 2, gas_multiplier: float = 1.2):
        self.rpc = rpc
        self._account = account
        self.confirmation_timeout = confirmation_timeout
        self.poll_interval = poll_interval
        self.gas_multiplier = gas_multiplier
        self._chain_id: Optional[int] = None

    @classmethod
    def from_private_key(cls, rpc: RpcClient, private_key: str, **kwargs) -> "NetworkClient":
        return cls(rpc, Account.from_key(private_key), **kwargs)

    @property
    def address(self) -> str:
        return self._account.address

    @property
    def chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = to_int(hexstr=self.rpc.call("eth_chainId"))
        return self._chain_id

    def transaction_count(self) -> int:
        return to_int(hexstr=self.rpc.call("eth_getTransactionCount", [self.address, "pending"]))

    def estimate_gas(self, tx: Dict[str, Any]) -> int:
        estimate = to_int(hexstr=self.rpc.call("eth_estimateGas", [tx]))
        return int(estimate * self.gas_multiplier)

    def call(self, to: str, data: str) -> bytes:
        result = self.rpc.call("eth_call", [{"to": to, "data": data}, "latest"])
        return decode_hex(result or "0x")

    async def send_transaction(self, data: str, to: Optional[str] = None, value: int = 0) -> str:
        """Sign and submit a transaction, returning its hash without waiting."""
        call_tx: Dict[str, Any] = {"from": self.address, "data": data, "value": hex(value)}
        if to is not None:
            call_tx["to"] = to
        tx: Dict[str, Any] = {
            "chainId": self.chain_id,
            "nonce": self.transaction_count(),
            "gasPrice": to_int(hexstr=self.rpc.call("eth_gasPrice")),
            "gas": self.estimate_gas(call_tx),
            "value": value,
            "data": data,
        }
        if to is not None:
            tx["to"] = to
        signed = self._account.sign_transaction(tx)
        tx_hash = self.rpc.call("eth_sendRawTransaction", [to_hex(signed.raw_transaction)])
        logger.info("Submitted transaction %s (nonce %s)", tx_hash, tx["nonce"])
        return tx_hash

    async def wait_for_receipt(self, tx_hash: str, timeout: Optional[float] = None) -> TransactionReceipt:
        """Poll until the transaction is mined; raise if it reverted or never lands."""
        timeout = self.confirmation_timeout if timeout is None else timeout
        deadline = time.monotonic() + timeout
        while True:
            try:
                raw = self.rpc.call("eth_getTransactionReceipt", [tx_hash])
            except RpcError as e:
                # Node-answered errors ("unknown transaction") mean not indexed yet; transport errors do not
                if e.code is None:
                    raise
                logger.debug("Receipt lookup for %s failed: %s", tx_hash, e)
                raw = None
            if raw:
                receipt = TransactionReceipt.from_rpc(raw)
                if receipt.status != 1:
                    raise TransactionReverted(tx_hash, receipt.block_number)
                logger.info("Transaction %s confirmed in block %s", tx_hash, receipt.block_number)
                return receipt
            if time.monotonic() >= deadline:
                raise ConfirmationTimeout(tx_hash, timeout)
            await asyncio.sleep(self.poll_interval)
