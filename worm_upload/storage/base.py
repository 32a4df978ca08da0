"""Object Lock storage interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from worm_upload.models import (
    LockConfiguration,
    ObjectLockStatus,
    RetentionMode,
    RetentionRule,
)


class ServiceError(Exception):
    """Raised when a call to the storage service fails.

    Carries the provider's error code (when it has one) and message.
    """

    def __init__(self, operation: str, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.operation = operation
        self.code = code
        self.message = message

    def __str__(self) -> str:
        if self.code:
            return f"{self.operation} - {self.code}: {self.message}"
        return f"{self.operation} - {self.message}"


class ObjectLockStorage(ABC):
    """Capabilities of a WORM-capable object store.

    Every method raises ServiceError on failure.
    """

    @abstractmethod
    def create_bucket(self, name: str, object_lock_enabled: bool = True) -> None:
        """Create a bucket, optionally with Object Lock enabled at creation."""
        pass

    @abstractmethod
    def put_retention_policy(self, bucket: str, rule: RetentionRule) -> None:
        """Set the bucket's default retention rule."""
        pass

    @abstractmethod
    def get_retention_policy(self, bucket: str) -> LockConfiguration:
        """Return the bucket's effective Object Lock configuration."""
        pass

    @abstractmethod
    def put_object(
        self,
        bucket: str,
        key: str,
        payload: bytes,
        content_type: str,
        content_digest: str,
        lock_mode: RetentionMode,
        retain_until: datetime,
    ) -> None:
        """Upload an object with an explicit per-object retention."""
        pass

    @abstractmethod
    def head_object(self, bucket: str, key: str) -> ObjectLockStatus:
        """Return the lock mode and retain-until date of an existing object."""
        pass
