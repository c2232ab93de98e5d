"""
Data models for stream reconciliation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class StreamStatus(Enum):
    """Live status of a Kinesis stream."""
    CREATING = "CREATING"
    DELETING = "DELETING"
    ACTIVE = "ACTIVE"
    UPDATING = "UPDATING"
    NOT_FOUND = "NOT_FOUND"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_provider(cls, value: Optional[str]) -> "StreamStatus":
        """Map a provider status string, falling back to UNKNOWN."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class StreamSpec:
    """Desired state of one stream."""
    name: str
    shard_count: int

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Stream name must not be empty")
        if self.shard_count < 1:
            raise ValueError(f"Invalid shard count for stream {self.name}: {self.shard_count}")


@dataclass(frozen=True)
class OwnershipTags:
    """The four tags stamped on every stream this system creates."""
    sbu: Tuple[str, str]
    org: Tuple[str, str]
    app: Tuple[str, str]
    cluster: Tuple[str, str]

    def as_dict(self) -> Dict[str, str]:
        return dict([self.sbu, self.org, self.app, self.cluster])

    @property
    def owner_tag(self) -> Tuple[str, str]:
        """Application-name tag used to recognise owned streams."""
        return self.app


class ReconcileOutcome(Enum):
    """How a single reconciliation ended."""
    ALREADY_ACTIVE = "already_active"
    PROVISIONED = "provisioned"
    CREATED_UNCONFIGURED = "created_unconfigured"
    FAILED_BEFORE_CREATE = "failed_before_create"


@dataclass
class ReconcileResult:
    """Outcome of reconciling one StreamSpec."""
    spec: StreamSpec
    outcome: ReconcileOutcome
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome in (ReconcileOutcome.ALREADY_ACTIVE, ReconcileOutcome.PROVISIONED)

    def to_dict(self) -> Dict[str, object]:
        return {
            "stream": self.spec.name,
            "shard_count": self.spec.shard_count,
            "outcome": self.outcome.value,
            "error": self.error,
        }


@dataclass
class SweepResult:
    """Outcome of a sweep over owned streams."""
    deleted: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    kept: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)  # tags could not be read
    error: Optional[str] = None  # listing itself failed

    @property
    def succeeded(self) -> bool:
        return self.error is None and not self.failed

    def to_dict(self) -> Dict[str, object]:
        return {
            "deleted": self.deleted,
            "failed": self.failed,
            "kept": self.kept,
            "skipped": self.skipped,
            "error": self.error,
        }
