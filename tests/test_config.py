"""
Test suite for configuration loading.
"""

import pytest
from pydantic import ValidationError

from aggregator import config as config_module
from aggregator.config import AggregatorConfig, get_config, set_config


class TestAggregatorConfig:

    def test_defaults(self, monkeypatch):
        monkeypatch.chdir("/")
        config = AggregatorConfig()

        assert config.api_path == "/device/real/query"
        assert config.api_token == "interview_token_123"
        assert config.device_count == 500
        assert config.batch_size == 10
        assert config.rate_limit_ms == 1000
        assert config.max_retries == 3
        assert config.retry_delay_ms == 2000

    def test_derived_values(self, test_config):
        assert test_config.base_url == "http://testserver:3000"
        assert test_config.rate_limit_seconds == 1.0
        assert test_config.retry_delay_seconds == 2.0
        assert test_config.server_min_interval_ms == 950

    def test_tolerance_never_goes_negative(self):
        config = AggregatorConfig(rate_limit_ms=20, rate_limit_tolerance_ms=50)
        assert config.server_min_interval_ms == 0

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("AGGREGATOR_BATCH_SIZE", "5")
        monkeypatch.setenv("AGGREGATOR_API_PORT", "8080")
        monkeypatch.setenv("AGGREGATOR_LOG_JSON", "true")

        config = AggregatorConfig()

        assert config.batch_size == 5
        assert config.api_port == 8080
        assert config.log_json is True

    @pytest.mark.parametrize("field,value", [
        ("batch_size", 0),
        ("batch_size", 11),
        ("max_batch_size", 20),
        ("max_retries", -1),
        ("api_port", 70000),
        ("api_token", ""),
        ("log_level", "verbose"),
    ])
    def test_invalid_values_rejected(self, field, value):
        with pytest.raises(ValidationError):
            AggregatorConfig(**{field: value})

    def test_batch_size_bounded_by_endpoint_limit(self):
        with pytest.raises(ValidationError, match="exceeds max_batch_size"):
            AggregatorConfig(batch_size=8, max_batch_size=5)

        assert AggregatorConfig(batch_size=5, max_batch_size=5).batch_size == 5

    def test_oversized_batch_from_environment_rejected(self, monkeypatch):
        monkeypatch.setenv("AGGREGATOR_BATCH_SIZE", "50")

        with pytest.raises(ValidationError):
            AggregatorConfig()

    def test_log_level_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("AGGREGATOR_LOG_LEVEL", "warning")

        assert AggregatorConfig().log_level == "WARNING"

    def test_unknown_log_level_from_environment_rejected(self, monkeypatch):
        monkeypatch.setenv("AGGREGATOR_LOG_LEVEL", "verbose")

        with pytest.raises(ValidationError):
            AggregatorConfig()


class TestGlobalConfig:

    def test_set_and_get(self, test_config, monkeypatch):
        monkeypatch.setattr(config_module, "_config", None)

        set_config(test_config)

        assert get_config() is test_config

    def test_created_lazily(self, monkeypatch):
        monkeypatch.setattr(config_module, "_config", None)

        config = get_config()

        assert isinstance(config, AggregatorConfig)
        assert get_config() is config
