"""Main orchestrator for provisioning, uploading and verifying.

Runs the fixed sequence against an injected ObjectLockStorage:
1. Create the bucket with Object Lock enabled
2. Set the bucket's default retention rule (GOVERNANCE, 2 days)
3. Read the lock configuration back
4. Prepare the file and upload it with a COMPLIANCE retention (1 day)
5. Head-check the object and report its lock state

Storage failures are reported and the run moves on to the next step.
A FileError skips the upload-related steps. A DigestError propagates.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from worm_upload.models import (
    DEFAULT_BUCKET_RETENTION,
    OBJECT_RETENTION_MODE,
    RetentionRule,
    RunResult,
    StepResult,
    StepStatus,
    UploadRequest,
)
from worm_upload.preparer import FileError, prepare
from worm_upload.reporters.base import Reporter
from worm_upload.storage.base import ObjectLockStorage, ServiceError

logger = logging.getLogger(__name__)

STEP_NAMES = {
    "create_bucket": "Create bucket",
    "put_retention_policy": "Set default retention",
    "get_retention_policy": "Read lock configuration",
    "prepare_upload": "Prepare upload",
    "put_object": "Upload object",
    "head_object": "Verify object",
}


class WormUploadRunner:
    """Runs the WORM provisioning and upload sequence.

    Coordinates:
    - Calling the storage service for each step
    - Preparing the payload, digest and retention date
    - Reporter callbacks for progress
    """

    def __init__(
        self,
        storage: ObjectLockStorage,
        reporter: Optional[Reporter] = None,
        default_retention: RetentionRule = DEFAULT_BUCKET_RETENTION,
    ):
        """Initialize the runner.

        Args:
            storage: Storage service the steps are run against
            reporter: Optional reporter for progress callbacks
            default_retention: Bucket-level default retention rule
        """
        self.storage = storage
        self.reporter = reporter
        self.default_retention = default_retention

    def run(self, request: UploadRequest, now: Optional[datetime] = None) -> RunResult:
        """Run every step for one upload request.

        Args:
            request: What to upload and where
            now: Preparation time (defaults to the current UTC time)

        Returns:
            RunResult with one StepResult per step

        Raises:
            DigestError: If the file cannot be hashed after being opened.
        """
        bucket = request.bucket_name
        key = request.object_key
        result = RunResult(bucket_name=bucket, object_key=key)

        if self.reporter:
            self.reporter.on_run_start(bucket, key)

        self._step(
            result,
            "create_bucket",
            lambda: self.storage.create_bucket(bucket, object_lock_enabled=True),
            success=f"{bucket} bucket created",
            failure=f"Could not create bucket {bucket}",
        )

        rule = self.default_retention
        self._step(
            result,
            "put_retention_policy",
            lambda: self.storage.put_retention_policy(bucket, rule),
            success=(
                f"Default retention set: {rule.mode.value} for {rule.duration_days} days"
            ),
            failure="Could not set the default retention",
        )

        lock_configuration = self._step(
            result,
            "get_retention_policy",
            lambda: self.storage.get_retention_policy(bucket),
            success="Lock configuration read",
            failure="Could not read the lock configuration",
        )
        if lock_configuration is not None:
            result.lock_configuration = lock_configuration
            if self.reporter:
                self.reporter.on_lock_configuration(lock_configuration)

        try:
            prepared = prepare(request, now=now)
        except FileError as e:
            logger.debug("Preparation of %s failed", request.file_path, exc_info=True)
            self._record(
                result,
                "prepare_upload",
                StepStatus.FAILED,
                f"Could not prepare {request.file_path}",
                error_message=str(e),
            )
            for step_id in ("put_object", "head_object"):
                self._record(
                    result, step_id, StepStatus.SKIPPED, f"{STEP_NAMES[step_id]} skipped"
                )
            self._complete(result)
            return result

        result.prepared = prepared
        self._record(
            result,
            "prepare_upload",
            StepStatus.SUCCESS,
            (
                f"Prepared {prepared.content_length} bytes "
                f"({prepared.content_type}, Content-MD5 {prepared.digest_base64})"
            ),
        )

        self._step(
            result,
            "put_object",
            lambda: self.storage.put_object(
                bucket,
                key,
                prepared.payload,
                content_type=prepared.content_type,
                content_digest=prepared.digest_base64,
                lock_mode=OBJECT_RETENTION_MODE,
                retain_until=prepared.retain_until,
            ),
            success=f"Putting of object {key} into bucket {bucket} has succeeded",
            failure=f"Could not put object {key} into bucket {bucket}",
        )

        object_status = self._step(
            result,
            "head_object",
            lambda: self.storage.head_object(bucket, key),
            success=f"YES - object: {key} in bucket: {bucket} exists",
            failure=f"NO - object: {key} in bucket: {bucket} does NOT exist",
        )
        if object_status is not None:
            result.object_status = object_status
            if self.reporter:
                self.reporter.on_object_status(key, object_status)

        self._complete(result)
        return result

    def _step(
        self,
        result: RunResult,
        step_id: str,
        call: Callable,
        success: str,
        failure: str,
    ):
        """Run one storage call, recording its outcome.

        Returns:
            The call's return value, or None when it failed.
        """
        try:
            value = call()
        except ServiceError as e:
            logger.debug("%s failed", step_id, exc_info=True)
            self._record(result, step_id, StepStatus.FAILED, failure, error_message=str(e))
            return None

        self._record(result, step_id, StepStatus.SUCCESS, success)
        return value

    def _record(
        self,
        result: RunResult,
        step_id: str,
        status: StepStatus,
        message: str,
        error_message: Optional[str] = None,
    ) -> None:
        step = StepResult(
            step_id=step_id,
            step_name=STEP_NAMES[step_id],
            status=status,
            message=message,
            error_message=error_message,
        )
        result.steps[step_id] = step
        if self.reporter:
            self.reporter.on_step_complete(step)

    def _complete(self, result: RunResult) -> None:
        if self.reporter:
            self.reporter.on_run_complete(result)
