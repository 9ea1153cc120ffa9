"""Staged run: deploy, check ownership, provision, verify, report.

Deployment and ownership failures raise and end the run. Provisioning and
verification never raise for per-item or per-query problems; those land in
the report.
"""
import logging
from pathlib import Path
from typing import Optional, Tuple

from prediction_provisioner.catalog import get_catalog, load_catalog, validate_catalog
from prediction_provisioner.config import NETWORK_SIMULATE, Settings
from prediction_provisioner.context import RunContext
from prediction_provisioner.contract import ContractArtifact, PredictionContractFactory
from prediction_provisioner.deployment import DeploymentOrchestrator
from prediction_provisioner.errors import PreconditionError
from prediction_provisioner.models import EventSpec, ProvisionMode, RunReport
from prediction_provisioner.network import NetworkClient
from prediction_provisioner.ownership import OwnershipGuard
from prediction_provisioner.profiles import ATTACH, DEPLOY
from prediction_provisioner.provisioner import BulkProvisioner
from prediction_provisioner.record import read_last_deploy, write_last_deploy
from prediction_provisioner.report import ResultReporter
from prediction_provisioner.rpc import RpcClient
from prediction_provisioner.simulator import SimulatedContractFactory, SimulatedLedger
from prediction_provisioner.verification import PostDeployVerifier, pick_record_id

logger = logging.getLogger(__name__)


def resolve_catalog(settings: Settings) -> Tuple[EventSpec, ...]:
    if settings.profile.provision_mode is ProvisionMode.NONE:
        return ()
    if settings.catalog_file is not None:
        return load_catalog(settings.catalog_file)
    return validate_catalog(get_catalog(settings.profile.catalog))


def build_context(settings: Settings) -> Tuple[RunContext, Optional[str]]:
    """Create the network client and contract factory; return them with the attach address."""
    profile = settings.profile
    address = None

    if settings.network == NETWORK_SIMULATE:
        ledger = SimulatedLedger()
        factory = SimulatedContractFactory(ledger, profile.contract_name,
                                           owner_only=profile.ownership_required)
        if profile.target == ATTACH:
            # a fresh ledger has nothing at CONTRACT_ADDRESS; rehearse against an empty contract
            address = ledger.install(profile.contract_name,
                                     owner_only=profile.ownership_required).address
        print(f"🧪 Simulated network, signer {ledger.address}")
        return RunContext(profile, ledger, factory, confirmation_timeout=settings.confirmation_timeout), address

    artifact = None
    if profile.target == DEPLOY:
        artifact = ContractArtifact.load(settings.artifact_path, profile.contract_name)
    else:
        address = settings.contract_address or read_last_deploy(settings.record_path)
        if not address:
            raise PreconditionError(
                f"CONTRACT_ADDRESS not set and no deployment record at {settings.record_path}"
            )

    rpc = RpcClient(settings.rpc_url, api_key=settings.rpc_api_key, timeout=settings.rpc_timeout)
    client = NetworkClient.from_private_key(
        rpc,
        settings.private_key,
        confirmation_timeout=settings.confirmation_timeout,
        poll_interval=settings.poll_interval,
        gas_multiplier=settings.gas_multiplier,
    )
    factory = PredictionContractFactory(client, artifact, contract_name=profile.contract_name)
    print(f"📋 Using account: {client.address} on {settings.rpc_url}")
    return RunContext(profile, client, factory, confirmation_timeout=settings.confirmation_timeout), address


async def run_pipeline(ctx: RunContext, catalog, contract_address: Optional[str] = None,
                       record_path: Optional[Path] = None) -> RunReport:
    profile = ctx.profile
    logger.info("Starting %s run as %s", profile.name, ctx.signer)
    deployment, contract = await DeploymentOrchestrator(ctx, contract_address).run()
    ctx = ctx.with_contract(contract)
    if record_path is not None and deployment.deployed:
        write_last_deploy(record_path, deployment, profile.name)

    ownership = await OwnershipGuard(profile.ownership_required).check(ctx)

    batch = None
    if profile.provision_mode is not ProvisionMode.NONE:
        provisioner = BulkProvisioner(profile.provision_mode, catalog,
                                      confirmation_timeout=ctx.confirmation_timeout)
        batch = await provisioner.run(ctx)

    verification = None
    if profile.verify:
        verification = await PostDeployVerifier().run(ctx, pick_record_id(batch))

    return ResultReporter().build(profile.name, deployment, ownership, batch, verification)


async def run(settings: Settings) -> RunReport:
    catalog = resolve_catalog(settings)
    ctx, address = build_context(settings)
    record_path = None if settings.network == NETWORK_SIMULATE else settings.record_path
    return await run_pipeline(ctx, catalog, contract_address=address, record_path=record_path)
