"""Central configuration for DBC conversion.

Settings are merged from several sources with clear precedence:

1. CLI arguments (highest precedence)
2. YAML configuration file (``config:`` section)
3. Environment variables
4. Code defaults (lowest precedence)

Example usage:
    config = get_config(
        cli_args={'format': 'xml', 'timestamps': True},
        config_path=Path('dbcgen.yaml'),
    )
    print(f"Format: {config.output.format}")
"""

from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any
import os
import yaml
from pathlib import Path


OUTPUT_FORMATS = ('bsm', 'xml')


@dataclass
class OutputConfig:
    """Output document configuration.

    Attributes:
        format: Document to generate ('bsm' flip test or 'xml' mirror)
        timestamps: Add a generation timestamp comment
        bus_name: Bus name written into the flip-test document
    """
    format: str = field(
        default='bsm',
        metadata={
            'description': 'Output document format',
            'choices': list(OUTPUT_FORMATS),
            'example': 'bsm'
        }
    )
    timestamps: bool = field(
        default=False,
        metadata={
            'description': 'Emit a generation timestamp comment',
            'example': 'false'
        }
    )
    bus_name: str = field(
        default='CAN',
        metadata={
            'description': 'Bus name in the flip-test document',
            'example': 'CAN'
        }
    )

    def validate(self) -> None:
        if self.format not in OUTPUT_FORMATS:
            raise ValueError(f"Output format must be one of {list(OUTPUT_FORMATS)}, got '{self.format}'")


@dataclass
class Config:
    """Central configuration for DBC conversion.

    Attributes:
        output: Output document configuration
        verbose: Show detailed progress and tracebacks
        log_level: Console log level name
    """
    output: OutputConfig = field(default_factory=OutputConfig)

    verbose: bool = field(
        default=False,
        metadata={
            'description': 'Show detailed progress and tracebacks',
            'example': 'false'
        }
    )
    log_level: str = field(
        default='WARNING',
        metadata={
            'description': 'Console log level',
            'choices': ['DEBUG', 'INFO', 'WARNING', 'ERROR'],
            'example': 'INFO'
        }
    )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create config from a dictionary (e.g. loaded from YAML).

        Example:
            config = Config.from_dict({'output': {'format': 'xml'}, 'verbose': True})
        """
        config = cls()
        config.update(data)
        return config

    def update(self, data: Dict[str, Any]) -> None:
        """Overwrite the settings present in ``data``, leaving the rest."""
        for k, v in (data.get('output') or {}).items():
            if hasattr(self.output, k):
                setattr(self.output, k, v)

        for k in ['verbose', 'log_level']:
            if k in data:
                setattr(self, k, data[k])

    @classmethod
    def from_yaml(cls, path: Path) -> 'Config':
        """Load config from the ``config:`` section of a YAML file.

        Raises:
            FileNotFoundError: If the YAML file doesn't exist
            yaml.YAMLError: If the YAML file is malformed
        """
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data.get('config', {}) or {})

    @classmethod
    def from_env(cls) -> 'Config':
        """Create config from environment variables.

        Environment Variables:
            DBCGEN_FORMAT: Output format ('bsm' or 'xml')
            DBCGEN_TIMESTAMPS: Emit timestamps ('1', 'true', 'yes')
            DBCGEN_LOG_LEVEL: Console log level
        """
        config = cls()

        if os.getenv('DBCGEN_FORMAT'):
            config.output.format = os.getenv('DBCGEN_FORMAT').lower()

        if os.getenv('DBCGEN_TIMESTAMPS'):
            config.output.timestamps = os.getenv('DBCGEN_TIMESTAMPS').lower() in ('1', 'true', 'yes', 'on')

        if os.getenv('DBCGEN_LOG_LEVEL'):
            config.log_level = os.getenv('DBCGEN_LOG_LEVEL').upper()

        return config

    def merge_cli_args(self, **kwargs) -> None:
        """Merge CLI arguments (highest precedence).

        Options left at None were not given on the command line and do not
        override anything.
        """
        if kwargs.get('format'):
            self.output.format = kwargs['format']

        if kwargs.get('timestamps') is not None:
            self.output.timestamps = kwargs['timestamps']

        if kwargs.get('bus_name'):
            self.output.bus_name = kwargs['bus_name']

        if kwargs.get('verbose'):
            self.verbose = True
            self.log_level = 'DEBUG'

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def summary(self) -> str:
        """One-line summary, e.g. "Config[format=bsm, timestamps=False, bus=CAN, log=WARNING]"."""
        return (
            f"Config[format={self.output.format}, "
            f"timestamps={self.output.timestamps}, "
            f"bus={self.output.bus_name}, "
            f"log={self.log_level}]"
        )


def get_config(cli_args: Optional[Dict] = None,
               config_path: Optional[Path] = None,
               use_env: bool = True) -> Config:
    """Get merged configuration from all sources with proper precedence.

    Args:
        cli_args: Command-line arguments dictionary
        config_path: Path to a YAML configuration file
        use_env: Whether to apply environment variable overrides

    Returns:
        Fully resolved Config instance

    Raises:
        ValueError: If the resolved output format is unknown
    """
    config = Config()

    if use_env:
        config = Config.from_env()

    if config_path and Path(config_path).exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config.update(data.get('config', {}) or {})

    if cli_args:
        config.merge_cli_args(**cli_args)

    config.output.validate()
    return config
