"""In-memory Object Lock storage.

Behaves like a minimal WORM store so the orchestration can be exercised
without provisioning real buckets:
- Lock operations require a bucket created with Object Lock enabled
- Content-MD5 is verified against the payload
- An object cannot be overwritten until its retain-until date passes
"""

import base64
import hashlib
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from worm_upload.models import (
    LockConfiguration,
    ObjectLockStatus,
    RetentionMode,
    RetentionRule,
)
from worm_upload.storage.base import ObjectLockStorage, ServiceError


@dataclass
class StoredBucket:
    """A bucket held in memory."""

    name: str
    object_lock_enabled: bool
    rule: Optional[RetentionRule] = None


@dataclass
class StoredObject:
    """An object held in memory."""

    payload: bytes
    content_type: str
    lock_mode: Optional[RetentionMode]
    retain_until: Optional[datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryObjectLockStorage(ObjectLockStorage):
    """ObjectLockStorage kept entirely in process memory."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow):
        self.clock = clock
        self.buckets: dict[str, StoredBucket] = {}
        self.objects: dict[tuple[str, str], StoredObject] = {}

    def _bucket(self, operation: str, name: str) -> StoredBucket:
        bucket = self.buckets.get(name)
        if bucket is None:
            raise ServiceError(
                operation, "The specified bucket does not exist", code="NoSuchBucket"
            )
        return bucket

    def create_bucket(self, name: str, object_lock_enabled: bool = True) -> None:
        if name in self.buckets:
            raise ServiceError(
                "CreateBucket",
                "Your previous request to create the named bucket succeeded and you already own it.",
                code="BucketAlreadyOwnedByYou",
            )
        self.buckets[name] = StoredBucket(name=name, object_lock_enabled=object_lock_enabled)

    def put_retention_policy(self, bucket: str, rule: RetentionRule) -> None:
        stored = self._bucket("PutObjectLockConfiguration", bucket)
        if not stored.object_lock_enabled:
            raise ServiceError(
                "PutObjectLockConfiguration",
                "Object Lock configuration cannot be enabled on existing buckets",
                code="InvalidBucketState",
            )
        if rule.duration_days <= 0:
            raise ServiceError(
                "PutObjectLockConfiguration",
                "Default retention period must be a positive integer value",
                code="InvalidArgument",
            )
        stored.rule = rule

    def get_retention_policy(self, bucket: str) -> LockConfiguration:
        stored = self._bucket("GetObjectLockConfiguration", bucket)
        if not stored.object_lock_enabled:
            raise ServiceError(
                "GetObjectLockConfiguration",
                "Object Lock configuration does not exist for this bucket",
                code="ObjectLockConfigurationNotFoundError",
            )
        return LockConfiguration(enabled=True, rule=stored.rule)

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
        stored = self._bucket("PutObject", bucket)
        if not stored.object_lock_enabled:
            raise ServiceError(
                "PutObject",
                "Bucket is missing Object Lock Configuration",
                code="InvalidRequest",
            )

        expected = base64.b64encode(hashlib.md5(payload).digest()).decode("ascii")
        if content_digest != expected:
            raise ServiceError(
                "PutObject",
                "The Content-MD5 you specified did not match what we received.",
                code="BadDigest",
            )

        now = self.clock()
        if retain_until <= now:
            raise ServiceError(
                "PutObject",
                "The retain until date must be in the future!",
                code="InvalidArgument",
            )

        existing = self.objects.get((bucket, key))
        if existing is not None and existing.retain_until is not None and existing.retain_until > now:
            raise ServiceError(
                "PutObject",
                "Access Denied because object protected by object lock.",
                code="AccessDenied",
            )

        self.objects[(bucket, key)] = StoredObject(
            payload=bytes(payload),
            content_type=content_type,
            lock_mode=lock_mode,
            retain_until=retain_until,
        )

    def head_object(self, bucket: str, key: str) -> ObjectLockStatus:
        self._bucket("HeadObject", bucket)
        stored = self.objects.get((bucket, key))
        if stored is None:
            raise ServiceError("HeadObject", "Not Found", code="404")
        return ObjectLockStatus(lock_mode=stored.lock_mode, retain_until=stored.retain_until)
