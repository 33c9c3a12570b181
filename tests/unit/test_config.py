"""Test central configuration system."""

import pytest
from pathlib import Path
from dbcgen.config import Config, OutputConfig, get_config


@pytest.mark.unit
class TestConfigMerging:
    """Test configuration merging precedence."""

    def test_default_config(self):
        """Test default configuration values."""
        config = Config()

        assert config.output.format == 'bsm'
        assert config.output.timestamps is False
        assert config.output.bus_name == 'CAN'
        assert config.verbose is False
        assert config.log_level == 'WARNING'

    def test_from_dict(self):
        """Test creating config from dictionary."""
        config = Config.from_dict({
            'output': {'format': 'xml', 'timestamps': True, 'unknown_key': 1},
            'verbose': True,
        })

        assert config.output.format == 'xml'
        assert config.output.timestamps is True
        assert not hasattr(config.output, 'unknown_key')
        assert config.verbose is True

    def test_from_yaml(self, tmp_path):
        """Test loading config from the config section of a YAML file."""
        path = tmp_path / 'dbcgen.yaml'
        path.write_text("config:\n  output:\n    bus_name: Powertrain\n  log_level: INFO\n")

        config = Config.from_yaml(path)

        assert config.output.bus_name == 'Powertrain'
        assert config.log_level == 'INFO'

    def test_from_env(self, monkeypatch):
        """Test environment variable overrides."""
        monkeypatch.setenv('DBCGEN_FORMAT', 'XML')
        monkeypatch.setenv('DBCGEN_TIMESTAMPS', 'yes')
        monkeypatch.setenv('DBCGEN_LOG_LEVEL', 'debug')

        config = Config.from_env()

        assert config.output.format == 'xml'
        assert config.output.timestamps is True
        assert config.log_level == 'DEBUG'

    def test_cli_overrides_yaml_and_env(self, tmp_path, monkeypatch):
        """Test CLI > YAML > env precedence."""
        monkeypatch.setenv('DBCGEN_FORMAT', 'xml')
        monkeypatch.setenv('DBCGEN_TIMESTAMPS', '1')
        path = tmp_path / 'dbcgen.yaml'
        path.write_text("config:\n  output:\n    format: bsm\n    bus_name: Body\n")

        config = get_config(
            cli_args={'format': None, 'timestamps': False, 'bus_name': None, 'verbose': False},
            config_path=path,
        )

        assert config.output.format == 'bsm'      # YAML beats env
        assert config.output.timestamps is False  # CLI beats env
        assert config.output.bus_name == 'Body'

    def test_unset_cli_args_do_not_override(self):
        """Test that None CLI values leave lower layers alone."""
        config = get_config(
            cli_args={'format': None, 'timestamps': None, 'bus_name': None},
            use_env=False,
        )
        assert config.output.format == 'bsm'
        assert config.output.timestamps is False

    def test_verbose_sets_debug(self):
        """Test verbose flag raises log level."""
        config = get_config(cli_args={'verbose': True}, use_env=False)

        assert config.verbose is True
        assert config.log_level == 'DEBUG'

    def test_missing_yaml_is_ignored(self, tmp_path):
        """Test that a missing config path falls back to defaults."""
        config = get_config(config_path=tmp_path / 'missing.yaml', use_env=False)
        assert config.output.format == 'bsm'

    def test_invalid_format(self):
        """Test format validation."""
        with pytest.raises(ValueError, match='Output format'):
            get_config(cli_args={'format': 'pdf'}, use_env=False)

        with pytest.raises(ValueError):
            OutputConfig(format='csv').validate()

    def test_summary_and_dict(self):
        """Test summary string and dict export."""
        config = Config()

        assert config.summary() == 'Config[format=bsm, timestamps=False, bus=CAN, log=WARNING]'
        assert config.to_dict()['output']['bus_name'] == 'CAN'
