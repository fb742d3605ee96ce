"""Unit tests for omnify_lock.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from omnify_lock.config import STALE_MIGRATION_DAYS, Settings, load_settings


class TestSettingsDefaults:
    def test_default_file_names(self):
        settings = Settings()
        assert settings.lock_file_name == ".omnify.lock"
        assert settings.chain_file_name == ".omnify.chain"

    def test_default_driver(self):
        assert Settings().driver == "mysql"

    def test_default_environment(self):
        assert Settings().environment == "production"

    def test_default_stale_threshold(self):
        assert Settings().stale_migration_days == STALE_MIGRATION_DAYS == 7

    def test_default_debug(self):
        assert Settings().debug is False


class TestSettingsEnvOverrides:
    def test_env_var_overrides_driver(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("OMNIFY_DRIVER", "postgres")
        assert Settings().driver == "postgres"

    def test_env_var_overrides_stale_days(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("OMNIFY_STALE_MIGRATION_DAYS", "14")
        assert Settings().stale_migration_days == 14

    def test_case_insensitive(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("omnify_environment", "staging")
        assert Settings().environment == "staging"

    def test_negative_stale_days_rejected(self):
        with pytest.raises(ValueError):
            Settings(stale_migration_days=-1)


class TestPaths:
    def test_lock_file_path(self, tmp_path: Path):
        assert Settings().lock_file_path(tmp_path) == tmp_path / ".omnify.lock"

    def test_chain_file_path_custom_name(self, tmp_path: Path):
        settings = Settings(chain_file_name="deploy.chain")
        assert settings.chain_file_path(str(tmp_path)) == tmp_path / "deploy.chain"


class TestLoadSettings:
    def test_overrides_applied(self):
        settings = load_settings(driver="sqlite", debug=True)
        assert settings.driver == "sqlite"
        assert settings.debug is True

    def test_returns_settings_instance(self):
        assert isinstance(load_settings(), Settings)
