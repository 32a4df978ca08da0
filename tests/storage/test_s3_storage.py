"""Tests for the boto3 Object Lock storage adapter."""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from worm_upload.models import RetentionMode, RetentionRule
from worm_upload.storage.base import ServiceError
from worm_upload.storage.s3 import S3ObjectLockStorage, parse_mode, to_service_error

RETAIN_UNTIL = datetime(2024, 5, 2, 12, 0, tzinfo=timezone.utc)


def client_error(code: str, message: str, operation: str = "Op") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


@pytest.fixture
def mock_s3_client():
    """Create a mock S3 client."""
    return Mock()


@pytest.fixture
def storage(mock_s3_client):
    return S3ObjectLockStorage(mock_s3_client, region_name="us-east-1")


class TestToServiceError:
    """Tests for to_service_error function."""

    def test_client_error_carries_code_and_message(self):
        error = to_service_error("PutObject", client_error("AccessDenied", "Access Denied"))

        assert error.operation == "PutObject"
        assert error.code == "AccessDenied"
        assert error.message == "Access Denied"
        assert str(error) == "PutObject - AccessDenied: Access Denied"

    def test_botocore_error_uses_its_text(self):
        error = to_service_error(
            "HeadObject", EndpointConnectionError(endpoint_url="http://localhost:9000")
        )

        assert error.code is None
        assert "localhost:9000" in str(error)


class TestParseMode:
    """Tests for parse_mode function."""

    def test_known_modes(self):
        assert parse_mode("COMPLIANCE") == RetentionMode.COMPLIANCE
        assert parse_mode("GOVERNANCE") == RetentionMode.GOVERNANCE

    def test_unknown_mode_kept_as_string(self):
        assert parse_mode("LEGAL") == "LEGAL"

    def test_missing_mode(self):
        assert parse_mode(None) is None
        assert parse_mode("") is None


class TestCreateBucket:
    """Tests for create_bucket method."""

    def test_enables_object_lock(self, storage, mock_s3_client):
        storage.create_bucket("test-bucket")

        mock_s3_client.create_bucket.assert_called_once_with(
            Bucket="test-bucket",
            ObjectLockEnabledForBucket=True,
        )

    def test_location_constraint_outside_us_east_1(self, mock_s3_client):
        storage = S3ObjectLockStorage(mock_s3_client, region_name="eu-west-1")

        storage.create_bucket("test-bucket")

        call_kwargs = mock_s3_client.create_bucket.call_args.kwargs
        assert call_kwargs["CreateBucketConfiguration"] == {"LocationConstraint": "eu-west-1"}

    def test_failure_raises_service_error(self, storage, mock_s3_client):
        mock_s3_client.create_bucket.side_effect = client_error(
            "BucketAlreadyOwnedByYou", "already own it"
        )

        with pytest.raises(ServiceError) as exc_info:
            storage.create_bucket("test-bucket")

        assert exc_info.value.code == "BucketAlreadyOwnedByYou"


class TestRetentionPolicy:
    """Tests for put_retention_policy and get_retention_policy."""

    def test_put_sends_default_retention(self, storage, mock_s3_client):
        storage.put_retention_policy(
            "test-bucket", RetentionRule(mode=RetentionMode.GOVERNANCE, duration_days=2)
        )

        mock_s3_client.put_object_lock_configuration.assert_called_once_with(
            Bucket="test-bucket",
            ObjectLockConfiguration={
                "ObjectLockEnabled": "Enabled",
                "Rule": {"DefaultRetention": {"Mode": "GOVERNANCE", "Days": 2}},
            },
        )

    def test_put_failure_raises_service_error(self, storage, mock_s3_client):
        mock_s3_client.put_object_lock_configuration.side_effect = client_error(
            "InvalidBucketState", "Object Lock configuration cannot be enabled"
        )

        with pytest.raises(ServiceError, match="InvalidBucketState"):
            storage.put_retention_policy(
                "test-bucket", RetentionRule(RetentionMode.GOVERNANCE, 2)
            )

    def test_get_with_rule(self, storage, mock_s3_client):
        mock_s3_client.get_object_lock_configuration.return_value = {
            "ObjectLockConfiguration": {
                "ObjectLockEnabled": "Enabled",
                "Rule": {"DefaultRetention": {"Mode": "GOVERNANCE", "Days": 2}},
            }
        }

        config = storage.get_retention_policy("test-bucket")

        assert config.enabled is True
        assert config.rule == RetentionRule(mode=RetentionMode.GOVERNANCE, duration_days=2)

    def test_get_without_rule(self, storage, mock_s3_client):
        mock_s3_client.get_object_lock_configuration.return_value = {
            "ObjectLockConfiguration": {"ObjectLockEnabled": "Enabled"}
        }

        config = storage.get_retention_policy("test-bucket")

        assert config.enabled is True
        assert config.rule is None

    def test_get_with_years(self, storage, mock_s3_client):
        mock_s3_client.get_object_lock_configuration.return_value = {
            "ObjectLockConfiguration": {
                "ObjectLockEnabled": "Enabled",
                "Rule": {"DefaultRetention": {"Mode": "COMPLIANCE", "Years": 1}},
            }
        }

        config = storage.get_retention_policy("test-bucket")

        assert config.rule.duration_days == 365

    def test_get_failure_raises_service_error(self, storage, mock_s3_client):
        mock_s3_client.get_object_lock_configuration.side_effect = client_error(
            "ObjectLockConfigurationNotFoundError", "does not exist"
        )

        with pytest.raises(ServiceError, match="ObjectLockConfigurationNotFoundError"):
            storage.get_retention_policy("test-bucket")


class TestPutObject:
    """Tests for put_object method."""

    def test_sends_lock_and_digest(self, storage, mock_s3_client):
        storage.put_object(
            "test-bucket",
            "report.pdf",
            b"%PDF-1.4",
            content_type="application/pdf",
            content_digest="abc==",
            lock_mode=RetentionMode.COMPLIANCE,
            retain_until=RETAIN_UNTIL,
        )

        mock_s3_client.put_object.assert_called_once_with(
            Bucket="test-bucket",
            Key="report.pdf",
            Body=b"%PDF-1.4",
            ContentLength=8,
            ContentType="application/pdf",
            ContentMD5="abc==",
            ObjectLockMode="COMPLIANCE",
            ObjectLockRetainUntilDate=RETAIN_UNTIL,
        )

    def test_failure_raises_service_error(self, storage, mock_s3_client):
        mock_s3_client.put_object.side_effect = client_error("BadDigest", "did not match")

        with pytest.raises(ServiceError) as exc_info:
            storage.put_object(
                "test-bucket", "k", b"x", "text/plain", "bad", RetentionMode.COMPLIANCE, RETAIN_UNTIL
            )

        assert exc_info.value.operation == "PutObject"
        assert exc_info.value.code == "BadDigest"


class TestHeadObject:
    """Tests for head_object method."""

    def test_returns_lock_state(self, storage, mock_s3_client):
        mock_s3_client.head_object.return_value = {
            "ContentLength": 8,
            "ObjectLockMode": "COMPLIANCE",
            "ObjectLockRetainUntilDate": RETAIN_UNTIL,
        }

        status = storage.head_object("test-bucket", "report.pdf")

        mock_s3_client.head_object.assert_called_once_with(Bucket="test-bucket", Key="report.pdf")
        assert status.lock_mode == RetentionMode.COMPLIANCE
        assert status.retain_until == RETAIN_UNTIL

    def test_object_without_lock(self, storage, mock_s3_client):
        mock_s3_client.head_object.return_value = {"ContentLength": 8}

        status = storage.head_object("test-bucket", "report.pdf")

        assert status.lock_mode is None
        assert status.retain_until is None

    def test_missing_object_raises_service_error(self, storage, mock_s3_client):
        mock_s3_client.head_object.side_effect = client_error("404", "Not Found", "HeadObject")

        with pytest.raises(ServiceError, match="Not Found"):
            storage.head_object("test-bucket", "report.pdf")
