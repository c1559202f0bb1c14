"""Tests for configuration loading."""

import os
from datetime import timezone

import pytest
from review_insights.config import EngineConfig, load_config, load_supabase_settings
from review_insights.errors import ConfigError

ENV_VARS = [
    "REVIEW_INSIGHTS_MIN_OVERLAP",
    "REVIEW_INSIGHTS_FALLBACK_MIN_OVERLAP",
    "REVIEW_INSIGHTS_COHORT_DIMENSIONS",
    "REVIEW_INSIGHTS_TIE_TOLERANCE",
    "REVIEW_INSIGHTS_TIMEZONE",
    "REVIEW_INSIGHTS_MIN_COHORT_SIZE",
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "SUPABASE_PAGE_SIZE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    # load_dotenv writes straight into os.environ; undo it so later tests are unaffected
    for name in ENV_VARS:
        os.environ.pop(name, None)


class TestEngineConfig:
    def test_defaults(self, tmp_path):
        config = load_config(tmp_path / ".env")
        assert config == EngineConfig()
        assert config.min_overlap == 5
        assert config.fallback_min_overlap == 3
        assert config.min_cohort_size == 3

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("REVIEW_INSIGHTS_MIN_OVERLAP", "4")
        monkeypatch.setenv("REVIEW_INSIGHTS_FALLBACK_MIN_OVERLAP", "none")
        monkeypatch.setenv("REVIEW_INSIGHTS_COHORT_DIMENSIONS", "city, gender")
        monkeypatch.setenv("REVIEW_INSIGHTS_TIE_TOLERANCE", "0.05")
        config = load_config(tmp_path / ".env")
        assert config.min_overlap == 4
        assert config.fallback_min_overlap is None
        assert config.cohort_dimensions == ("city", "gender")
        assert config.tie_tolerance == 0.05

    def test_dotenv_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("REVIEW_INSIGHTS_MIN_COHORT_SIZE=5\n", encoding="utf-8")
        assert load_config(env_file).min_cohort_size == 5

    def test_bad_value(self, monkeypatch, tmp_path):
        monkeypatch.setenv("REVIEW_INSIGHTS_MIN_OVERLAP", "lots")
        with pytest.raises(ConfigError):
            load_config(tmp_path / ".env")

    @pytest.mark.parametrize(
        "overrides",
        [
            {"min_overlap": 0},
            {"fallback_min_overlap": 0},
            {"min_cohort_size": 0},
            {"max_workers": 0},
            {"rating_min": 10.0, "rating_max": 4.0},
        ],
    )
    def test_validation(self, overrides):
        with pytest.raises(ConfigError):
            EngineConfig(**overrides)

    def test_unknown_timezone(self):
        with pytest.raises(ConfigError):
            EngineConfig(timezone="Mars/Olympus")

    def test_unknown_timezone_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("REVIEW_INSIGHTS_TIMEZONE", "Nowhere/Land")
        with pytest.raises(ConfigError):
            load_config(tmp_path / ".env")

    def test_utc_needs_no_database(self):
        assert EngineConfig(timezone="utc").zone() == timezone.utc


class TestSupabaseSettings:
    def test_reads_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co/")
        monkeypatch.setenv("SUPABASE_KEY", "anon-key")
        monkeypatch.setenv("SUPABASE_PAGE_SIZE", "500")
        settings = load_supabase_settings(tmp_path / ".env")
        assert settings.url == "https://example.supabase.co"
        assert settings.key == "anon-key"
        assert settings.page_size == 500

    def test_missing_credentials(self, tmp_path):
        with pytest.raises(ConfigError):
            load_supabase_settings(tmp_path / ".env")
