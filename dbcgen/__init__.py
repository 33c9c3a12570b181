"""dbcgen - Convert DBC CAN databases into flip-test and XML documents."""

__version__ = "1.0.0"
__author__ = "dbcgen Team"

from .model import (
    Endianness, Signal, Message, Database,
    build_signal, build_message, build_database,
    parse_database, load_database, validate_dbc_file,
)
from .layout import LayoutPlan, analyze, padded_size_for
from .flip import emit_signal, emit_message, emit_database, database_to_flip_test
from .mirror import emit_database_xml, database_to_xml
from .config import get_config
from .utils.errors import (
    DbcError, DbcSyntaxError, StructuralError,
    MultiplexorError, PayloadSizeError, EmissionError,
)

__all__ = [
    'Endianness',
    'Signal',
    'Message',
    'Database',
    'build_signal',
    'build_message',
    'build_database',
    'parse_database',
    'load_database',
    'validate_dbc_file',
    'LayoutPlan',
    'analyze',
    'padded_size_for',
    'emit_signal',
    'emit_message',
    'emit_database',
    'database_to_flip_test',
    'emit_database_xml',
    'database_to_xml',
    'get_config',
    'DbcError',
    'DbcSyntaxError',
    'StructuralError',
    'MultiplexorError',
    'PayloadSizeError',
    'EmissionError',
]
