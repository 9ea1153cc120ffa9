import json
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

from prediction_provisioner.errors import EventSpecError, PreconditionError
from prediction_provisioner.models import EventSpec

DAY = 24 * 60 * 60

LAUNCH_CATALOG: Tuple[EventSpec, ...] = (
    EventSpec(
        title="🏆 2026 FIFA World Cup Winner Prediction",
        description="Predict which team will win the 2026 FIFA World Cup! Your prediction will be "
                    "encrypted and protected until the tournament ends.",
        duration_seconds=90 * DAY,
    ),
    EventSpec(
        title="💎 Bitcoin $100K Breakthrough Prediction",
        description="Will Bitcoin break through $100,000 by the end of 2024? Use FHE encryption "
                    "technology to protect your prediction.",
        duration_seconds=60 * DAY,
    ),
    EventSpec(
        title="🎮 Gaming Championship Prediction",
        description="Predict the outcome of major esports and gaming championships. Your predictions "
                    "are secured with homomorphic encryption.",
        duration_seconds=30 * DAY,
    ),
)

SIMPLE_CATALOG: Tuple[EventSpec, ...] = (
    EventSpec(
        title="🏆 2026 FIFA World Cup Winner Prediction",
        description="Predict which team will win the 2026 FIFA World Cup! Your prediction will be "
                    "protected until the tournament ends.",
        duration_seconds=90 * DAY,
    ),
    EventSpec(
        title="💎 Bitcoin $100K Breakthrough Prediction",
        description="Will Bitcoin break through $100,000 by the end of 2024? Make your confidential "
                    "prediction now!",
        duration_seconds=60 * DAY,
    ),
    EventSpec(
        title="🎮 Gaming Championship Prediction",
        description="Predict the outcome of major esports and gaming championships. Your predictions "
                    "are secured with cryptographic hashing.",
        duration_seconds=30 * DAY,
    ),
)

PUBLIC_SMOKE_CATALOG: Tuple[EventSpec, ...] = (
    EventSpec(
        title="🎯 Test Event - Bitcoin $100K Prediction",
        description="Test event to verify anyone can create predictions",
        duration_seconds=7 * DAY,
    ),
)

FHE_SMOKE_CATALOG: Tuple[EventSpec, ...] = (
    EventSpec(
        title="🧪 FHE Test Event - Bitcoin $100K Prediction",
        description="Test event for FHE encrypted predictions using enhanced privacy mechanisms",
        duration_seconds=7 * DAY,
    ),
)

CATALOGS: Dict[str, Tuple[EventSpec, ...]] = {
    "launch": LAUNCH_CATALOG,
    "simple": SIMPLE_CATALOG,
    "public-smoke": PUBLIC_SMOKE_CATALOG,
    "fhe-smoke": FHE_SMOKE_CATALOG,
}


def get_catalog(name: str) -> Tuple[EventSpec, ...]:
    try:
        return CATALOGS[name]
    except KeyError:
        raise PreconditionError(f"Unknown event catalog '{name}' (known: {', '.join(sorted(CATALOGS))})")


def validate_catalog(specs: Iterable[EventSpec]) -> Tuple[EventSpec, ...]:
    specs = tuple(specs)
    for i, spec in enumerate(specs):
        try:
            spec.validate()
        except EventSpecError as e:
            raise PreconditionError(f"Catalog entry {i} is invalid: {e}") from e
    return specs


def _spec_from_dict(i: int, item) -> EventSpec:
    if not isinstance(item, dict):
        raise PreconditionError(f"Catalog entry {i} must be an object, got {type(item).__name__}")
    duration = item.get("duration_seconds", item.get("duration"))
    missing = [k for k, v in (("title", item.get("title")), ("description", item.get("description")),
                              ("duration_seconds", duration)) if v is None]
    if missing:
        raise PreconditionError(f"Catalog entry {i} is missing {', '.join(missing)}")
    return EventSpec(title=item["title"], description=item["description"], duration_seconds=duration)


def load_catalog(path: Path) -> Tuple[EventSpec, ...]:
    """Read a JSON catalog: a list of events, or an object with an ``events`` list."""
    path = Path(path)
    if not path.exists():
        raise PreconditionError(f"Event catalog file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise PreconditionError(f"Event catalog {path} is not valid JSON: {e}") from e
    if isinstance(data, dict):
        data = data.get("events")
    if not isinstance(data, list):
        raise PreconditionError(f"Event catalog {path} must hold a list of events")
    items: List[EventSpec] = [_spec_from_dict(i, item) for i, item in enumerate(data)]
    return validate_catalog(items)
