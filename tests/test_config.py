"""Tests for configuration loading module."""

import os
from unittest.mock import patch

import pytest

from worm_upload.config import (
    DEFAULT_REGION,
    ConfigError,
    StorageConfig,
    load_storage_config,
    region_from_env,
)

CONFIG_ENV_VARS = (
    "WORM_REGION",
    "AWS_REGION",
    "AWS_DEFAULT_REGION",
    "WORM_ENDPOINT_URL",
    "WORM_ADDRESSING_STYLE",
    "AWS_PROFILE",
)


def clean_env(**overrides) -> dict:
    """Current environment without any config variables, plus overrides."""
    env = {k: v for k, v in os.environ.items() if k not in CONFIG_ENV_VARS}
    env.update(overrides)
    return env


class TestRegionFromEnv:
    """Tests for region_from_env function."""

    def test_defaults_to_us_east_1(self):
        with patch.dict(os.environ, clean_env(), clear=True):
            assert region_from_env() == "us-east-1"

    def test_worm_region_takes_priority(self):
        env = clean_env(WORM_REGION="eu-central-1", AWS_REGION="us-west-2")
        with patch.dict(os.environ, env, clear=True):
            assert region_from_env() == "eu-central-1"

    def test_falls_back_to_aws_region(self):
        env = clean_env(AWS_REGION="us-west-2", AWS_DEFAULT_REGION="ap-south-1")
        with patch.dict(os.environ, env, clear=True):
            assert region_from_env() == "us-west-2"

    def test_falls_back_to_aws_default_region(self):
        with patch.dict(os.environ, clean_env(AWS_DEFAULT_REGION="ap-south-1"), clear=True):
            assert region_from_env() == "ap-south-1"

    def test_blank_values_are_ignored(self):
        with patch.dict(os.environ, clean_env(WORM_REGION="  "), clear=True):
            assert region_from_env() == DEFAULT_REGION


class TestLoadStorageConfig:
    """Tests for load_storage_config function."""

    def test_defaults(self):
        with patch.dict(os.environ, clean_env(), clear=True):
            config = load_storage_config()

        assert config == StorageConfig(
            region_name="us-east-1",
            endpoint_url=None,
            addressing_style="auto",
            profile_name=None,
        )

    def test_environment_values(self):
        env = clean_env(
            WORM_REGION="eu-west-1",
            WORM_ENDPOINT_URL="http://localhost:9000",
            WORM_ADDRESSING_STYLE="Path",
            AWS_PROFILE="archive",
        )
        with patch.dict(os.environ, env, clear=True):
            config = load_storage_config()

        assert config.region_name == "eu-west-1"
        assert config.endpoint_url == "http://localhost:9000"
        assert config.addressing_style == "path"
        assert config.profile_name == "archive"

    def test_arguments_override_environment(self):
        env = clean_env(WORM_REGION="eu-west-1", WORM_ENDPOINT_URL="http://localhost:9000")
        with patch.dict(os.environ, env, clear=True):
            config = load_storage_config(
                region="us-west-2", endpoint_url="https://s3.example.com"
            )

        assert config.region_name == "us-west-2"
        assert config.endpoint_url == "https://s3.example.com"

    def test_invalid_addressing_style_raises_error(self):
        with patch.dict(os.environ, clean_env(WORM_ADDRESSING_STYLE="sideways"), clear=True):
            with pytest.raises(ConfigError, match="Invalid WORM_ADDRESSING_STYLE"):
                load_storage_config()

    def test_invalid_endpoint_raises_error(self):
        with patch.dict(os.environ, clean_env(), clear=True):
            with pytest.raises(ConfigError, match="Invalid endpoint URL"):
                load_storage_config(endpoint_url="localhost:9000")
