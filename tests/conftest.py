import os
import sys

import pytest

# Ensure project root is on sys.path so tests can import local package
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from prediction_provisioner.context import RunContext
from prediction_provisioner.profiles import get_profile
from prediction_provisioner.simulator import SimulatedContractFactory, SimulatedLedger

NOW = 1_767_225_600.0


@pytest.fixture
def ledger():
    return SimulatedLedger(clock=lambda: NOW)


@pytest.fixture
def make_ctx(ledger):
    def _make(profile_name="standard", contract=None, **changes):
        profile = get_profile(profile_name)
        if changes:
            profile = profile.replace(**changes)
        factory = SimulatedContractFactory(ledger, profile.contract_name,
                                           owner_only=profile.ownership_required)
        return RunContext(profile, ledger, factory, contract=contract)
    return _make
