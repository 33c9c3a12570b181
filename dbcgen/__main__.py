"""
CLI entry point for dbcgen.

Converts DBC files into flip-test (bsm) or XML mirror documents and checks
DBC files for problems. Works both as ``python -m dbcgen`` and as the
installed ``dbcgen`` script.
"""

import sys
import traceback
from pathlib import Path

import click
import yaml

try:
    from . import __version__
    from .config import get_config, OUTPUT_FORMATS
    from .model import load_database, validate_dbc_file
    from .layout import analyze
    from .flip import database_to_flip_test
    from .mirror import database_to_xml
    from .utils.errors import DbcError, PayloadSizeError
    from .utils.logging_utils import setup_logging
except ImportError:
    from dbcgen import __version__
    from dbcgen.config import get_config, OUTPUT_FORMATS
    from dbcgen.model import load_database, validate_dbc_file
    from dbcgen.layout import analyze
    from dbcgen.flip import database_to_flip_test
    from dbcgen.mirror import database_to_xml
    from dbcgen.utils.errors import DbcError, PayloadSizeError
    from dbcgen.utils.logging_utils import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name='dbcgen')
def cli():
    """dbcgen - Convert DBC CAN databases into flip-test and XML documents."""
    pass


@cli.command()
@click.argument('dbc_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--out', '-o', type=click.Path(dir_okay=False), default=None,
              help='Output file path (default: stdout)')
@click.option('--format', 'output_format', type=click.Choice(list(OUTPUT_FORMATS)), default=None,
              help='Output format: bsm (flip test, default) or xml (database mirror)')
@click.option('--timestamps/--no-timestamps', default=None,
              help='Add a generation timestamp comment')
@click.option('--bus-name', type=str, default=None,
              help='Bus name written into the flip-test document')
@click.option('--config', 'config_file', type=click.Path(exists=True, dir_okay=False), default=None,
              help='YAML configuration file')
@click.option('--verbose', '-v', is_flag=True,
              help='Verbose output')
def convert(dbc_file, out, output_format, timestamps, bus_name, config_file, verbose):
    """Convert a DBC file to a flip-test or XML document."""
    # with stdout carrying the document, status goes to stderr
    status_to_err = out is None
    show_traceback = verbose

    try:
        config = get_config(
            cli_args={
                'format': output_format,
                'timestamps': timestamps,
                'bus_name': bus_name,
                'verbose': verbose,
            },
            config_path=Path(config_file) if config_file else None,
        )
        show_traceback = config.verbose
        setup_logging(config.log_level)

        if config.verbose:
            click.echo(f"[CONFIG] {config.summary()}", err=status_to_err)

        database = load_database(dbc_file)

        if config.verbose:
            click.echo(f"Loaded {dbc_file}: {len(database.messages)} messages", err=status_to_err)

        if database.empty:
            click.echo(f"WARNING No messages found in {dbc_file}", err=True)

        # render fully before writing so a failing message leaves no partial file
        if config.output.format == 'xml':
            document = database_to_xml(database, include_timestamp=config.output.timestamps)
        else:
            document = database_to_flip_test(database,
                                             include_timestamp=config.output.timestamps,
                                             bus_name=config.output.bus_name)

        if out is None:
            click.echo(document, nl=False)
            return

        output_path = Path(out)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8', newline='\n') as f:
            f.write(document)

        click.echo(f"[SUCCESS] Wrote {config.output.format} document: {output_path}")
        click.echo(f"  Messages: {len(database.messages)}")

    except (DbcError, OSError, ValueError, yaml.YAMLError) as e:
        click.echo(f"\n[ERROR] Conversion failed: {e}", err=True)
        if show_traceback:
            click.echo("\nDetailed error information:", err=True)
            click.echo(traceback.format_exc(), err=True)
        sys.exit(1)


@cli.command()
@click.argument('dbc_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--verbose', '-v', is_flag=True,
              help='List every message')
def check_dbc(dbc_file, verbose):
    """Validate a DBC file and show a summary."""
    filepath = Path(dbc_file)
    click.echo(f"Checking DBC: {filepath}")

    results = validate_dbc_file(filepath)

    if not results['valid']:
        click.echo(f"\nERROR DBC validation failed with {len(results['errors'])} errors:")
        for error in results['errors']:
            click.echo(f"  - {error}")
        sys.exit(1)

    database = results['database']
    signal_count = sum(len(m.signals) for m in database.messages)

    click.echo(f"\n[SUCCESS] DBC file '{filepath.name}' is valid!")
    click.echo("\nSummary:")
    if database.version:
        click.echo(f"  Version: {database.version}")
    click.echo(f"  ECUs: {len(database.ecus)}")
    click.echo(f"  Messages: {len(database.messages)}")
    click.echo(f"  Signals: {signal_count}")

    if database.empty:
        click.echo("\nWARNING No messages found")
        return

    limit = None if verbose else 10
    click.echo("\nMessages:")
    for msg in database.messages[:limit]:
        try:
            size = f"{analyze(msg).padded_size} bits"
        except PayloadSizeError as e:
            size = f"unsupported ({e.bits} bits)"
        click.echo(f"  - {msg.name}: ID {msg.id} DLC {msg.dlc} "
                   f"signals {len(msg.signals)} from {msg.ecu}, flip size {size}")

    if limit is not None and len(database.messages) > limit:
        click.echo(f"  ... and {len(database.messages) - limit} more")


def main():
    """Main entry point."""
    cli()


if __name__ == '__main__':
    main()
