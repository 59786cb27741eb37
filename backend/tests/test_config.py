"""Tests for DatabaseConfig, AppConfig and the store factory."""

from pathlib import Path

import pytest

from lootbase.app import AppConfig
from lootbase.handlers.invitation_acceptance import DEFAULT_MAX_ATTEMPTS
from lootbase.persistence.config import DatabaseConfig, create_store
from lootbase.persistence.sqlite import SQLiteRecordStore


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "DATABASE_URL",
        "LOOTBASE_DB_PATH",
        "LOOTBASE_METADATA_PATH",
        "LOOTBASE_MEMBERSHIP_MAX_ATTEMPTS",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestDatabaseConfig:
    def test_from_env_database_url(self, clean_env):
        clean_env.setenv("DATABASE_URL", "sqlite:////srv/lootbase.db")
        config = DatabaseConfig.from_env()
        assert config.url == "sqlite:////srv/lootbase.db"
        assert config.is_sqlite
        assert config.sqlite_path == "/srv/lootbase.db"

    def test_from_env_db_path(self, clean_env):
        clean_env.setenv("LOOTBASE_DB_PATH", "/tmp/test.db")
        assert DatabaseConfig.from_env().url == "sqlite:////tmp/test.db"

    def test_database_url_takes_precedence(self, clean_env):
        clean_env.setenv("DATABASE_URL", "sqlite:///override.db")
        clean_env.setenv("LOOTBASE_DB_PATH", "/tmp/ignored.db")
        assert DatabaseConfig.from_env().url == "sqlite:///override.db"

    def test_from_env_with_base_path(self, clean_env, tmp_path):
        config = DatabaseConfig.from_env(base_path=tmp_path)
        assert config.url == f"sqlite:///{tmp_path / 'data' / 'lootbase.db'}"

    def test_from_env_default(self, clean_env):
        assert DatabaseConfig.from_env().url == "sqlite:///lootbase.db"

    def test_memory_path(self):
        assert DatabaseConfig(url="sqlite:///").sqlite_path == ":memory:"


class TestCreateStore:
    def test_sqlite(self):
        store = create_store(DatabaseConfig(url="sqlite:///:memory:"))
        assert isinstance(store, SQLiteRecordStore)
        assert store.db_path == ":memory:"

    def test_unsupported_scheme(self):
        with pytest.raises(ValueError, match="Unsupported database URL scheme"):
            create_store(DatabaseConfig(url="postgresql://localhost/db"))


class TestAppConfig:
    def test_defaults(self, clean_env, tmp_path):
        config = AppConfig.from_env(base_path=tmp_path)
        assert config.metadata_path == tmp_path / "metadata"
        assert config.membership_max_attempts == DEFAULT_MAX_ATTEMPTS

    def test_env_overrides(self, clean_env, tmp_path):
        clean_env.setenv("LOOTBASE_METADATA_PATH", "/etc/lootbase/metadata")
        clean_env.setenv("LOOTBASE_MEMBERSHIP_MAX_ATTEMPTS", "12")
        config = AppConfig.from_env(base_path=tmp_path)
        assert config.metadata_path == Path("/etc/lootbase/metadata")
        assert config.membership_max_attempts == 12

    def test_rejects_non_positive_attempts(self, clean_env, tmp_path):
        clean_env.setenv("LOOTBASE_MEMBERSHIP_MAX_ATTEMPTS", "0")
        with pytest.raises(ValueError, match="at least 1"):
            AppConfig.from_env(base_path=tmp_path)

    def test_rejects_non_numeric_attempts(self, clean_env, tmp_path):
        clean_env.setenv("LOOTBASE_MEMBERSHIP_MAX_ATTEMPTS", "lots")
        with pytest.raises(ValueError, match="must be an integer, got 'lots'"):
            AppConfig.from_env(base_path=tmp_path)

    def test_base_path_from_backend_dir(self, clean_env, tmp_path):
        backend = tmp_path / "backend"
        backend.mkdir()
        clean_env.chdir(backend)
        assert AppConfig.from_env().metadata_path == tmp_path / "metadata"
