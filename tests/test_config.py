"""Unit tests for folio.engine.config — FolioConfig and folio.yaml loading."""

import pytest

import folio.engine.config as cfg_mod
from folio.engine.config import (
    DatabaseConfig,
    DocumentsConfig,
    FolioConfig,
    LoggingConfig,
    get_config,
    load_config,
)
from folio.engine.errors import FolioConfigError


class TestFolioConfig:

    def test_defaults(self):
        cfg = FolioConfig()
        assert cfg.name == "Folio"
        assert cfg.environment == "dev"
        assert cfg.database.url == "sqlite:///folio.db"
        assert cfg.logging.level == "INFO"
        assert cfg.documents.default_folder == "general"
        assert cfg.documents.recycle_bin_retention_days == 15
        assert cfg.documents.include_hidden_in_folder_listing is False

    def test_invalid_environment(self):
        with pytest.raises(ValueError, match="dev/staging/prod"):
            FolioConfig(environment="test")

    def test_level_normalized(self):
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_invalid_level(self):
        with pytest.raises(ValueError):
            LoggingConfig(level="chatty")

    @pytest.mark.parametrize("days", [0, -3])
    def test_retention_must_be_positive(self, days):
        with pytest.raises(ValueError, match="recycle_bin_retention_days"):
            DocumentsConfig(recycle_bin_retention_days=days)

    def test_custom_database(self):
        cfg = FolioConfig(database=DatabaseConfig(url="postgresql://a:b@db/folio", pool_size=5))
        assert cfg.database.pool_size == 5


class TestLoadConfig:

    def test_missing_file_gives_defaults(self, tmp_path):
        cfg = load_config(str(tmp_path / "folio.yaml"))
        assert cfg == FolioConfig()

    def test_loads_nested_file(self, tmp_path):
        path = tmp_path / "folio.yaml"
        path.write_text(
            "folio:\n"
            "  name: Members Portal\n"
            "  environment: staging\n"
            "database:\n"
            "  url: sqlite:///portal.db\n"
            "logging:\n"
            "  directory: /var/log/folio\n"
            "documents:\n"
            "  default_folder: inbox\n",
            encoding="utf-8",
        )
        cfg = load_config(str(path))
        assert cfg.name == "Members Portal"
        assert cfg.environment == "staging"
        assert cfg.database.url == "sqlite:///portal.db"
        assert cfg.logging.directory == "/var/log/folio"
        assert cfg.documents.default_folder == "inbox"

    def test_invalid_values_raise_config_error(self, tmp_path):
        path = tmp_path / "folio.yaml"
        path.write_text("environment: local\n", encoding="utf-8")
        with pytest.raises(FolioConfigError) as exc:
            load_config(str(path))
        assert exc.value.object_ref == str(path)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "folio.yaml"
        path.write_text("database: [unclosed\n", encoding="utf-8")
        with pytest.raises(FolioConfigError):
            load_config(str(path))

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "folio.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(FolioConfigError):
            load_config(str(path))

    def test_auto_discovers_from_cwd(self, tmp_path, monkeypatch):
        (tmp_path / "folio.yaml").write_text("folio:\n  name: Found\n", encoding="utf-8")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        assert get_config().name == "Found"
        assert cfg_mod._config is not None
