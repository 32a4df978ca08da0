"""Base reporter interface."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from worm_upload.models import (
        LockConfiguration,
        ObjectLockStatus,
        RunResult,
        StepResult,
    )


class Reporter(ABC):
    """Abstract base class for run reporters."""

    @abstractmethod
    def on_run_start(self, bucket_name: str, object_key: str) -> None:
        """Called before the first step runs."""
        pass

    @abstractmethod
    def on_step_complete(self, result: "StepResult") -> None:
        """Called when a step succeeds, fails or is skipped."""
        pass

    @abstractmethod
    def on_lock_configuration(self, config: "LockConfiguration") -> None:
        """Called with the Object Lock configuration read back from the bucket."""
        pass

    @abstractmethod
    def on_object_status(self, key: str, status: "ObjectLockStatus") -> None:
        """Called with the lock state of the uploaded object."""
        pass

    @abstractmethod
    def on_run_complete(self, result: "RunResult") -> None:
        """Called when all steps have run."""
        pass
