"""
Unit tests for application settings.
"""

import pytest
from pydantic import ValidationError

from app.core.config import EnvironmentEnum, Settings


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestSettings:
    def test_defaults(self):
        config = make_settings()

        assert config.default_model == "gemini-2.5-flash"
        assert config.ai_temperature == 0.7
        assert config.ai_stream_flush_batch_size == 5
        assert config.max_attachment_size == 10 * 1024 * 1024
        assert config.max_message_length == 10000
        assert config.max_title_length == 200
        assert config.max_api_key_length == 500
        assert config.retention_days == 30

    @pytest.mark.parametrize("raw, expected", [("dev", EnvironmentEnum.development), ("prod", EnvironmentEnum.production)])
    def test_environment_aliases(self, raw, expected):
        assert make_settings(environment=raw).environment == expected

    def test_rejects_unsupported_default_model(self):
        with pytest.raises(ValidationError):
            make_settings(default_model="gpt-4")

    def test_rejects_zero_batch_size(self):
        with pytest.raises(ValidationError):
            make_settings(ai_stream_flush_batch_size=0)

    def test_rejects_huge_attachment_limit(self):
        with pytest.raises(ValidationError):
            make_settings(max_attachment_size=101 * 1024 * 1024)

    def test_allowed_origins_list(self):
        config = make_settings(allowed_origins="http://a.test, http://b.test,")

        assert config.allowed_origins_list == ["http://a.test", "http://b.test"]

    def test_has_file_storage(self):
        assert not make_settings().has_file_storage
        assert make_settings(minio_access_key="k", minio_secret_key="s").has_file_storage

    def test_generation_rate_limit_default(self):
        config = make_settings()

        assert (config.ai_rate_limit_requests, config.ai_rate_limit_period) == (10, 60)
