"""Data models for the WORM uploader."""

import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Union


class InputError(ValueError):
    """Raised when required user input is missing or empty."""

    pass


class RetentionMode(Enum):
    """Object Lock retention modes (values are the S3 wire strings)."""

    GOVERNANCE = "GOVERNANCE"
    COMPLIANCE = "COMPLIANCE"


class StepStatus(Enum):
    """Outcome of a single orchestration step."""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class UploadRequest:
    """What to upload and where.

    The object key defaults to the file path exactly as given.
    """

    file_path: str
    bucket_name: str
    object_key: str = ""

    def __post_init__(self):
        if not self.file_path:
            raise InputError("file path must not be empty")
        if not self.bucket_name:
            raise InputError("bucket name must not be empty")
        if not self.object_key:
            object.__setattr__(self, "object_key", self.file_path)


@dataclass
class PreparedObject:
    """A file turned into a self-describing, retention-locked payload."""

    payload: bytes
    content_type: str
    digest_base64: str
    retain_until: datetime

    @property
    def content_length(self) -> int:
        return len(self.payload)


@dataclass
class RetentionRule:
    """Default retention rule applied at bucket level."""

    mode: RetentionMode
    duration_days: int


@dataclass
class LockConfiguration:
    """Effective Object Lock configuration of a bucket."""

    enabled: bool
    rule: Optional[RetentionRule] = None


@dataclass
class ObjectLockStatus:
    """Lock state reported for an existing object.

    ``lock_mode`` stays a plain string when the provider reports a mode
    outside :class:`RetentionMode`.
    """

    lock_mode: Optional[Union[RetentionMode, str]] = None
    retain_until: Optional[datetime] = None


# Bucket default: GOVERNANCE for 2 days
DEFAULT_BUCKET_RETENTION = RetentionRule(mode=RetentionMode.GOVERNANCE, duration_days=2)

# Per-object override: COMPLIANCE, retained for 1 day after preparation
OBJECT_RETENTION_MODE = RetentionMode.COMPLIANCE
OBJECT_RETENTION_DAYS = 1


@dataclass
class StepResult:
    """Result of one orchestration step."""

    step_id: str
    step_name: str
    status: StepStatus
    message: str = ""
    error_message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == StepStatus.SUCCESS


@dataclass
class RunResult:
    """Result of a full provisioning/upload/verification run."""

    bucket_name: str
    object_key: str
    steps: dict[str, StepResult] = field(default_factory=dict)
    prepared: Optional[PreparedObject] = None
    lock_configuration: Optional[LockConfiguration] = None
    object_status: Optional[ObjectLockStatus] = None
    timestamp: str = field(default_factory=lambda: time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()))

    @property
    def all_succeeded(self) -> bool:
        """Check if every step succeeded."""
        return bool(self.steps) and all(s.succeeded for s in self.steps.values())
