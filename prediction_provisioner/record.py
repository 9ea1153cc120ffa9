import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from prediction_provisioner.models import DeploymentResult

logger = logging.getLogger(__name__)


def write_last_deploy(path: Path, result: DeploymentResult, profile: str) -> bool:
    path = Path(path)
    payload = {
        "contract_address": result.address,
        "owner_address": result.owner_address,
        "contract_name": result.contract_name,
        "profile": profile,
        "transaction_id": result.transaction_id,
        "updated_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        logger.warning("Could not write deployment record %s: %s", path, e)
        return False
    print(f"📝 Wrote {path}")
    return True


def read_last_deploy(path: Path) -> str:
    path = Path(path)
    if not path.exists():
        return ""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable deployment record %s: %s", path, e)
        return ""
    if not isinstance(data, dict):
        return ""
    return str(data.get("contract_address", "")).strip()
