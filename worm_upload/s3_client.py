"""S3 client factory for the WORM uploader.

Creates a boto3 S3 client from a StorageConfig, with the region,
optional endpoint and addressing style applied.

Credentials are resolved through a boto3 Session so that a missing
profile or an empty credential chain surfaces as a ConfigError before
any request is sent.
"""

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ProfileNotFound

from worm_upload.config import ConfigError, StorageConfig


def build_session(config: StorageConfig):
    """Build a boto3 Session and check that credentials are available.

    Raises:
        ConfigError: If the profile does not exist or no credentials
                     can be found.
    """
    try:
        session = boto3.session.Session(
            profile_name=config.profile_name,
            region_name=config.region_name,
        )
    except ProfileNotFound as e:
        raise ConfigError(f"AWS configuration error, {e}") from e

    if session.get_credentials() is None:
        raise ConfigError(
            "AWS configuration error, no credentials found. Set AWS_ACCESS_KEY_ID "
            "and AWS_SECRET_ACCESS_KEY or configure a profile."
        )

    return session


def build_s3_client(config: StorageConfig):
    """Build a boto3 S3 client for the given storage configuration.

    Args:
        config: Storage configuration containing region, endpoint and
               addressing style.

    Returns:
        A boto3 S3 client.

    Raises:
        ConfigError: If credentials cannot be established, or the region
                     or endpoint is rejected by botocore.
    """
    session = build_session(config)

    boto_config = Config(
        signature_version="s3v4",
        s3={"addressing_style": config.addressing_style},
    )

    try:
        return session.client(
            "s3",
            endpoint_url=config.endpoint_url,
            region_name=config.region_name,
            config=boto_config,
        )
    except (BotoCoreError, ValueError) as e:
        # Region names and endpoint hosts are validated here
        raise ConfigError(f"AWS configuration error, {e}") from e
