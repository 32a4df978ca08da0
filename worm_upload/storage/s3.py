"""boto3 adapter for S3 and S3-compatible Object Lock storage."""

import logging
from datetime import datetime
from typing import Any, Optional, Union

from botocore.exceptions import BotoCoreError, ClientError

from worm_upload.models import (
    LockConfiguration,
    ObjectLockStatus,
    RetentionMode,
    RetentionRule,
)
from worm_upload.storage.base import ObjectLockStorage, ServiceError

logger = logging.getLogger(__name__)

# Buckets in this region must be created without a LocationConstraint
US_EAST_1 = "us-east-1"


def to_service_error(operation: str, error: Exception) -> ServiceError:
    """Map a botocore exception to a ServiceError."""
    if isinstance(error, ClientError):
        err = error.response.get("Error", {}) or {}
        code = err.get("Code") or None
        message = err.get("Message", "") or str(error)
        return ServiceError(operation, message, code=code)
    return ServiceError(operation, str(error))


def parse_mode(value: Optional[str]) -> Optional[Union[RetentionMode, str]]:
    """Convert a wire retention mode to RetentionMode, keeping unknown strings."""
    if not value:
        return None
    try:
        return RetentionMode(value)
    except ValueError:
        return value


class S3ObjectLockStorage(ObjectLockStorage):
    """ObjectLockStorage backed by a boto3 S3 client."""

    def __init__(self, s3_client: Any, region_name: Optional[str] = None):
        """Initialize the adapter.

        Args:
            s3_client: boto3 S3 client
            region_name: Region used for the bucket LocationConstraint
        """
        self.s3_client = s3_client
        self.region_name = region_name

    def create_bucket(self, name: str, object_lock_enabled: bool = True) -> None:
        kwargs: dict[str, Any] = {
            "Bucket": name,
            "ObjectLockEnabledForBucket": object_lock_enabled,
        }
        if self.region_name and self.region_name != US_EAST_1:
            kwargs["CreateBucketConfiguration"] = {"LocationConstraint": self.region_name}

        logger.debug("CreateBucket %s (object lock: %s)", name, object_lock_enabled)
        try:
            self.s3_client.create_bucket(**kwargs)
        except (ClientError, BotoCoreError) as e:
            raise to_service_error("CreateBucket", e) from e

    def put_retention_policy(self, bucket: str, rule: RetentionRule) -> None:
        logger.debug(
            "PutObjectLockConfiguration %s (%s, %d days)",
            bucket, rule.mode.value, rule.duration_days,
        )
        try:
            self.s3_client.put_object_lock_configuration(
                Bucket=bucket,
                ObjectLockConfiguration={
                    "ObjectLockEnabled": "Enabled",
                    "Rule": {
                        "DefaultRetention": {
                            "Mode": rule.mode.value,
                            "Days": rule.duration_days,
                        },
                    },
                },
            )
        except (ClientError, BotoCoreError) as e:
            raise to_service_error("PutObjectLockConfiguration", e) from e

    def get_retention_policy(self, bucket: str) -> LockConfiguration:
        logger.debug("GetObjectLockConfiguration %s", bucket)
        try:
            response = self.s3_client.get_object_lock_configuration(Bucket=bucket)
        except (ClientError, BotoCoreError) as e:
            raise to_service_error("GetObjectLockConfiguration", e) from e

        lock_config = response.get("ObjectLockConfiguration", {}) or {}
        enabled = lock_config.get("ObjectLockEnabled") == "Enabled"

        rule = None
        retention = (lock_config.get("Rule") or {}).get("DefaultRetention")
        if retention:
            mode = parse_mode(retention.get("Mode"))
            # Providers may report Years instead of Days
            days = retention.get("Days")
            if days is None and retention.get("Years") is not None:
                days = retention["Years"] * 365
            rule = RetentionRule(mode=mode, duration_days=days or 0)

        return LockConfiguration(enabled=enabled, rule=rule)

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
        logger.debug(
            "PutObject s3://%s/%s (%d bytes, %s, retain until %s)",
            bucket, key, len(payload), lock_mode.value, retain_until.isoformat(),
        )
        try:
            self.s3_client.put_object(
                Bucket=bucket,
                Key=key,
                Body=payload,
                ContentLength=len(payload),
                ContentType=content_type,
                ContentMD5=content_digest,
                ObjectLockMode=lock_mode.value,
                ObjectLockRetainUntilDate=retain_until,
            )
        except (ClientError, BotoCoreError) as e:
            raise to_service_error("PutObject", e) from e

    def head_object(self, bucket: str, key: str) -> ObjectLockStatus:
        logger.debug("HeadObject s3://%s/%s", bucket, key)
        try:
            response = self.s3_client.head_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise to_service_error("HeadObject", e) from e

        return ObjectLockStatus(
            lock_mode=parse_mode(response.get("ObjectLockMode")),
            retain_until=response.get("ObjectLockRetainUntilDate"),
        )
