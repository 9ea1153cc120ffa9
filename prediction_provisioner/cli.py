"""No-argument entry point. All configuration comes from the environment."""
import asyncio
import logging
import sys

from prediction_provisioner.config import Settings
from prediction_provisioner.errors import DeploymentError, FatalError, PreconditionError
from prediction_provisioner.report import ResultReporter
from prediction_provisioner.runner import run

logger = logging.getLogger("prediction_provisioner")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main() -> int:
    try:
        settings = Settings.from_env()
    except PreconditionError as e:
        print(f"❌ Configuration error: {e}")
        return 1
    configure_logging(settings.log_level)
    print(f"🎯 Profile: {settings.profile.name} ({settings.profile.contract_name})")

    try:
        report = asyncio.run(run(settings))
    except KeyboardInterrupt:
        print("Deploy cancelled by user.")
        return 130
    except (PreconditionError, DeploymentError, FatalError) as e:
        print(f"❌ Deployment failed: {e}")
        return 1
    except Exception as e:
        logger.exception("Unhandled error during run")
        print(f"❌ Deployment failed: {FatalError(f'{type(e).__name__}: {e}')}")
        return 1
    return ResultReporter().emit(report)


if __name__ == "__main__":
    sys.exit(main())
