import dataclasses
import enum
from typing import Any, Dict, List, Optional, Tuple

from prediction_provisioner.errors import EventSpecError


class ProvisionMode(str, enum.Enum):
    IDEMPOTENT_SKIP = "idempotent-skip"
    ALWAYS_CREATE = "always-create"
    NONE = "none"


class OutcomeStatus(str, enum.Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class OwnershipStatus(str, enum.Enum):
    PASSED = "passed"
    NOT_REQUIRED = "not-required"


@dataclasses.dataclass(frozen=True)
class EventSpec:
    title: str
    description: str
    duration_seconds: int

    def validate(self) -> "EventSpec":
        if not isinstance(self.title, str) or not self.title.strip():
            raise EventSpecError("Event title must be a non-empty string")
        if not isinstance(self.description, str) or not self.description.strip():
            raise EventSpecError(f"Event '{self.title}' needs a non-empty description")
        # bool is an int subclass; reject it explicitly
        if isinstance(self.duration_seconds, bool) or not isinstance(self.duration_seconds, int):
            raise EventSpecError(f"Event '{self.title}' duration must be an integer number of seconds")
        if self.duration_seconds <= 0:
            raise EventSpecError(
                f"Event '{self.title}' duration must be positive, got {self.duration_seconds}"
            )
        return self

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


@dataclasses.dataclass(frozen=True)
class DeploymentResult:
    address: str
    owner_address: str
    initial_record_count: int
    contract_name: str = ""
    deployed: bool = True
    transaction_id: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class ProvisionOutcome:
    index: int
    spec: EventSpec
    status: OutcomeStatus
    transaction_id: Optional[str] = None
    error_message: Optional[str] = None
    block_number: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.SUCCEEDED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "title": self.spec.title,
            "status": self.status.value,
            "transaction_id": self.transaction_id,
            "error_message": self.error_message,
            "block_number": self.block_number,
        }


@dataclasses.dataclass(frozen=True)
class ProvisionBatch:
    """What one BulkProvisioner pass did against the contract."""

    mode: ProvisionMode
    initial_record_count: Optional[int]
    outcomes: Tuple[ProvisionOutcome, ...] = ()
    final_record_count: Optional[int] = None
    skipped: bool = False
    count_error: Optional[str] = None

    @property
    def succeeded(self) -> List[ProvisionOutcome]:
        return [o for o in self.outcomes if o.succeeded]

    @property
    def failed(self) -> List[ProvisionOutcome]:
        return [o for o in self.outcomes if not o.succeeded]


@dataclasses.dataclass
class VerificationReport:
    record_id: int
    round_id: Optional[int] = None
    round_is_active: Optional[bool] = None
    time_remaining_seconds: Optional[int] = None
    guess_time_active: Optional[bool] = None
    total_predictions: Optional[int] = None
    is_finalized: Optional[bool] = None
    errors: List[str] = dataclasses.field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


@dataclasses.dataclass(frozen=True)
class RunReport:
    profile: str
    deployment: DeploymentResult
    ownership: OwnershipStatus
    batch: Optional[ProvisionBatch]
    verification: Optional[VerificationReport]
    warnings: Tuple[str, ...]
    success: bool

    @property
    def outcomes(self) -> Tuple[ProvisionOutcome, ...]:
        return self.batch.outcomes if self.batch else ()

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    def to_dict(self) -> Dict[str, Any]:
        batch = None
        if self.batch is not None:
            batch = {
                "mode": self.batch.mode.value,
                "skipped": self.batch.skipped,
                "initial_record_count": self.batch.initial_record_count,
                "final_record_count": self.batch.final_record_count,
                "outcomes": [o.to_dict() for o in self.batch.outcomes],
            }
        return {
            "profile": self.profile,
            "deployment": dataclasses.asdict(self.deployment),
            "ownership": self.ownership.value,
            "provisioning": batch,
            "verification": self.verification.to_dict() if self.verification else None,
            "warnings": list(self.warnings),
            "success": self.success,
        }
