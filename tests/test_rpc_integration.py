import asyncio
import os

import pytest

from prediction_provisioner.contract import PredictionContract
from prediction_provisioner.network import NetworkClient
from prediction_provisioner.rpc import RpcClient

REQUIRED = ("RPC_URL", "DEPLOYER_PRIVATE_KEY", "CONTRACT_ADDRESS")


@pytest.mark.skipif(not all(os.getenv(k) for k in REQUIRED), reason='RPC_URL/DEPLOYER_PRIVATE_KEY/CONTRACT_ADDRESS not set')
def test_live_contract_reads():
    """Read-only check against a deployed contract on a live node.

    Requires environment variables:
      - RPC_URL
      - DEPLOYER_PRIVATE_KEY
      - CONTRACT_ADDRESS
      - (optional) RPC_API_KEY

    No transactions are sent.
    """
    rpc = RpcClient(os.environ["RPC_URL"], api_key=os.getenv("RPC_API_KEY"))
    client = NetworkClient.from_private_key(rpc, os.environ["DEPLOYER_PRIVATE_KEY"])
    contract = PredictionContract(client, os.environ["CONTRACT_ADDRESS"])

    owner = asyncio.run(contract.owner())
    total = asyncio.run(contract.get_total_events())

    assert owner.startswith("0x") and len(owner) == 42
    assert total >= 0
    assert client.chain_id > 0
