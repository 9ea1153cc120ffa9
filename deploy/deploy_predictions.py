"""Deploy and seed the prediction contract.

Run from the project root with the environment configured, e.g.:

    RPC_URL=https://sepolia.example/rpc DEPLOYER_PRIVATE_KEY=0x... \
        python deploy/deploy_predictions.py

Set DEPLOY_PROFILE to pick a contract variant (standard, platform, simple,
public, fhe, seed) and DEPLOY_NETWORK=simulate for a dry run against an
in-memory ledger.
"""
import os
import sys

# ensure project root is on sys.path when run as a script
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from prediction_provisioner.cli import main

if __name__ == '__main__':
    sys.exit(main())
