"""Tests for configuration loading."""

from pathlib import Path

import pytest

from token_vesting.core import config as config_module
from token_vesting.core.config import LedgerConfig, get_config, reload_config
from token_vesting.core.exceptions import ConfigurationError

ENV_VARS = (
    "VESTING_PROGRAM_ID",
    "VESTING_DATA_DIR",
    "VESTING_CLOCK_SKEW_SECONDS",
    "VESTING_DEFAULT_DECIMALS",
    "VESTING_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from the caller's environment and working directory."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "_config", None)


class TestLedgerConfig:
    """Tests for LedgerConfig."""

    def test_defaults(self):
        """Test default values."""
        config = LedgerConfig.load()
        assert config.program_id == "tokenvesting"
        assert config.clock_skew_tolerance == 300
        assert config.default_decimals == 9
        assert config.state_file == Path(".vesting") / "ledger.json"

    def test_env_overrides(self, monkeypatch):
        """Test environment variables override defaults."""
        monkeypatch.setenv("VESTING_PROGRAM_ID", "custom")
        monkeypatch.setenv("VESTING_CLOCK_SKEW_SECONDS", "60")
        monkeypatch.setenv("VESTING_DATA_DIR", "/tmp/ledger")

        config = LedgerConfig.load()
        assert config.program_id == "custom"
        assert config.clock_skew_tolerance == 60
        assert config.data_dir == Path("/tmp/ledger")

    def test_yaml_file(self, tmp_path):
        """Test values are read from YAML."""
        path = tmp_path / "custom.yaml"
        path.write_text("program_id: fromfile\ndefault_decimals: 2\n")

        config = LedgerConfig.load(path)
        assert config.program_id == "fromfile"
        assert config.default_decimals == 2

    def test_env_beats_yaml(self, tmp_path, monkeypatch):
        """Test environment variables win over the file."""
        path = tmp_path / "custom.yaml"
        path.write_text("program_id: fromfile\n")
        monkeypatch.setenv("VESTING_PROGRAM_ID", "fromenv")

        assert LedgerConfig.load(path).program_id == "fromenv"

    def test_default_file_in_working_directory(self, tmp_path):
        """Test vesting.yaml is picked up automatically."""
        (tmp_path / "vesting.yaml").write_text("clock_skew_tolerance: 5\n")
        assert LedgerConfig.load().clock_skew_tolerance == 5

    def test_missing_explicit_file(self, tmp_path):
        """Test an explicit file must exist."""
        with pytest.raises(ConfigurationError):
            LedgerConfig.load(tmp_path / "nope.yaml")

    def test_unknown_keys(self, tmp_path):
        """Test typos in the config file are reported."""
        path = tmp_path / "custom.yaml"
        path.write_text("program_idd: typo\n")
        with pytest.raises(ConfigurationError) as exc_info:
            LedgerConfig.load(path)
        assert "program_idd" in exc_info.value.message

    def test_invalid_yaml(self, tmp_path):
        """Test malformed YAML is reported."""
        path = tmp_path / "custom.yaml"
        path.write_text("program_id: [unclosed\n")
        with pytest.raises(ConfigurationError):
            LedgerConfig.load(path)

    def test_non_integer_env(self, monkeypatch):
        """Test integer settings must parse."""
        monkeypatch.setenv("VESTING_CLOCK_SKEW_SECONDS", "soon")
        with pytest.raises(ConfigurationError):
            LedgerConfig.load()

    def test_validation(self):
        """Test out-of-range values are rejected."""
        with pytest.raises(ConfigurationError):
            LedgerConfig(clock_skew_tolerance=-1)
        with pytest.raises(ConfigurationError):
            LedgerConfig(default_decimals=19)
        with pytest.raises(ConfigurationError):
            LedgerConfig(program_id="")


class TestGlobalConfig:
    """Tests for the shared config instance."""

    def test_get_config_is_cached(self):
        """Test get_config returns one instance."""
        assert get_config() is get_config()

    def test_reload_config(self, monkeypatch):
        """Test reload picks up new environment values."""
        get_config()
        monkeypatch.setenv("VESTING_PROGRAM_ID", "reloaded")
        assert reload_config().program_id == "reloaded"
        assert get_config().program_id == "reloaded"
