"""Configuration loading for the WORM uploader.

Configuration comes from command-line overrides first, then environment
variables. There is no configuration file.

Environment Variables:
    WORM_REGION            Region for the bucket (falls back to AWS_REGION,
                           then AWS_DEFAULT_REGION, then us-east-1)
    WORM_ENDPOINT_URL      Endpoint of an S3-compatible provider (optional)
    WORM_ADDRESSING_STYLE  auto | path | virtual (default: auto)
    AWS_PROFILE            Named profile for credentials (optional)

Credentials themselves are resolved by boto3's default chain
(environment, shared credentials file, instance metadata).

Example:
    WORM_ENDPOINT_URL=http://localhost:9000
    WORM_ADDRESSING_STYLE=path
    AWS_ACCESS_KEY_ID=minioadmin
    AWS_SECRET_ACCESS_KEY=minioadmin
"""

import os
from dataclasses import dataclass
from typing import Optional


class ConfigError(Exception):
    """Raised when credentials, region or client settings cannot be established."""

    pass


DEFAULT_REGION = "us-east-1"

ADDRESSING_STYLES = ("auto", "path", "virtual")

# Checked in order; the first non-empty value wins
REGION_ENV_VARS = ["WORM_REGION", "AWS_REGION", "AWS_DEFAULT_REGION"]


@dataclass
class StorageConfig:
    """Connection settings for the object-storage provider."""

    region_name: str = DEFAULT_REGION
    endpoint_url: Optional[str] = None
    addressing_style: str = "auto"
    profile_name: Optional[str] = None


def region_from_env() -> str:
    """Return the configured region, defaulting to us-east-1."""
    for env_key in REGION_ENV_VARS:
        value = os.environ.get(env_key, "").strip()
        if value:
            return value
    return DEFAULT_REGION


def load_storage_config(
    region: Optional[str] = None,
    endpoint_url: Optional[str] = None,
) -> StorageConfig:
    """Build the storage configuration.

    Args:
        region: Region override (from the command line).
        endpoint_url: Endpoint override (from the command line).

    Returns:
        The resolved StorageConfig.

    Raises:
        ConfigError: If the addressing style or endpoint URL is invalid.
    """
    region_name = region.strip() if region and region.strip() else region_from_env()

    if endpoint_url is None:
        endpoint_url = os.environ.get("WORM_ENDPOINT_URL", "").strip() or None
    if endpoint_url is not None and not endpoint_url.startswith(("http://", "https://")):
        raise ConfigError(
            f"Invalid endpoint URL '{endpoint_url}'. Expected http:// or https://"
        )

    addressing_style = os.environ.get("WORM_ADDRESSING_STYLE", "auto").strip().lower()
    if addressing_style not in ADDRESSING_STYLES:
        raise ConfigError(
            f"Invalid WORM_ADDRESSING_STYLE '{addressing_style}'. "
            f"Expected one of: {', '.join(ADDRESSING_STYLES)}"
        )

    profile_name = os.environ.get("AWS_PROFILE", "").strip() or None

    return StorageConfig(
        region_name=region_name,
        endpoint_url=endpoint_url,
        addressing_style=addressing_style,
        profile_name=profile_name,
    )
