"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from qtimigrator.config import MigratorConfig, load_config
from qtimigrator.errors import ParsingError, InputOutputError


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point HOME at an empty directory and clear overrides."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("QTI_MIGRATOR_VERBOSITY", raising=False)
    monkeypatch.delenv("QTI_MIGRATOR_LOG_LEVEL", raising=False)


class TestMigratorConfig:
    def test_defaults(self):
        config = MigratorConfig()
        assert (config.verbosity, config.force, config.log_level, config.log_file) == (1, False, "INFO", None)

    @pytest.mark.parametrize("verbosity", [-1, 4])
    def test_verbosity_range(self, verbosity):
        with pytest.raises(ValidationError):
            MigratorConfig(verbosity=verbosity)

    def test_log_level_normalized(self):
        assert MigratorConfig(log_level=" warning ").log_level == "WARNING"

    def test_unknown_log_level(self):
        with pytest.raises(ValidationError, match="log_level must be one of"):
            MigratorConfig(log_level="chatty")

    def test_log_file_with_unset_variable(self):
        with pytest.raises(ValidationError, match="QTI_UNSET_DIR"):
            MigratorConfig(log_file="$QTI_UNSET_DIR/run.log")


class TestFromYaml:
    def test_values_loaded(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("verbosity: 3\nforce: true\nlog_level: debug\n")
        config = MigratorConfig.from_yaml(path)
        assert (config.verbosity, config.force, config.log_level) == (3, True, "DEBUG")

    def test_env_expanded(self, tmp_path, monkeypatch):
        monkeypatch.setenv("QTI_LOGS", str(tmp_path))
        path = tmp_path / "config.yaml"
        path.write_text("log_file: $QTI_LOGS/migrate.log\n")
        assert MigratorConfig.from_yaml(path).log_file == tmp_path / "migrate.log"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert MigratorConfig.from_yaml(path) == MigratorConfig()

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("verbosity: [1, 2\n")
        with pytest.raises(ParsingError, match="invalid YAML"):
            MigratorConfig.from_yaml(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ParsingError, match="must contain a mapping"):
            MigratorConfig.from_yaml(path)

    def test_unknown_key_ignored(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("verbosity: 2\ntheme: dark\n")
        assert MigratorConfig.from_yaml(path).verbosity == 2


class TestLoadConfig:
    def test_no_files_gives_defaults(self):
        assert load_config() == MigratorConfig()

    def test_default_file_in_home(self, tmp_path):
        (tmp_path / ".qti-migrator.yaml").write_text("verbosity: 0\n")
        assert load_config().verbosity == 0

    def test_explicit_file_missing(self, tmp_path):
        with pytest.raises(InputOutputError, match="configuration file not found"):
            load_config(tmp_path / "missing.yaml")

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("verbosity: 1\nlog_level: INFO\n")
        monkeypatch.setenv("QTI_MIGRATOR_VERBOSITY", "3")
        monkeypatch.setenv("QTI_MIGRATOR_LOG_LEVEL", "error")
        config = load_config(path)
        assert (config.verbosity, config.log_level) == (3, "ERROR")

    def test_env_override_out_of_range(self, monkeypatch):
        monkeypatch.setenv("QTI_MIGRATOR_VERBOSITY", "7")
        with pytest.raises(ValidationError):
            load_config()
