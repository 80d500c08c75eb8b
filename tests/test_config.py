"""Tests for settings."""

import pytest
from pydantic import ValidationError

from labelmatch.config import CHANNELS, DEFAULT_CHANNEL, Settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        settings = Settings()

        assert settings.match_threshold == 40.0
        assert settings.brand_score == 90.0
        assert settings.containment_max_score == 80.0
        assert settings.lcs_max_score == 70.0
        assert settings.min_lcs_length == 3

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("LABELMATCH_MATCH_THRESHOLD", "60")

        assert Settings().match_threshold == 60.0

    def test_threshold_bounds(self):
        with pytest.raises(ValidationError):
            Settings(match_threshold=0)
        with pytest.raises(ValidationError):
            Settings(match_threshold=101)

    def test_database_url(self):
        settings = Settings(postgres_user="u", postgres_password="p", postgres_db="d")

        assert settings.database_url == "postgresql+asyncpg://u:p@localhost:5432/d"
        assert settings.database_url_sync == "postgresql://u:p@localhost:5432/d"

    def test_default_channel_is_known(self):
        assert DEFAULT_CHANNEL in CHANNELS
