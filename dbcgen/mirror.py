"""XML mirror of a CAN database.

Every message and signal is written as nested text elements, one tab of
indentation per level. Unlike the flip-test output, multiplexed signals
are included, grouped under their multiplexor.
"""

import io
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

try:
    from .model import Database, Message, Signal
    from .core.xml_writer import XmlWriter, as_writer
    from .flip import write_header
except ImportError:
    from dbcgen.model import Database, Message, Signal
    from dbcgen.core.xml_writer import XmlWriter, as_writer
    from dbcgen.flip import write_header

logger = logging.getLogger(__name__)


def format_number(value: float) -> str:
    """Integral floats without a trailing '.0', others in full precision."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def signal_to_xml(signal: Signal, writer: XmlWriter, depth: int) -> None:
    writer.open(depth, 'signal')
    writer.node(depth + 1, 'name', signal.name)
    writer.node(depth + 1, 'startbit', signal.start_bit)
    writer.node(depth + 1, 'bitlength', signal.bit_length)
    writer.node(depth + 1, 'endianess', signal.endianness.name.lower())
    writer.node(depth + 1, 'scaling', format_number(signal.scaling))
    writer.node(depth + 1, 'offset', format_number(signal.offset))
    writer.node(depth + 1, 'minimum', format_number(signal.minimum))
    writer.node(depth + 1, 'maximum', format_number(signal.maximum))
    writer.node(depth + 1, 'signed', 'true' if signal.is_signed else 'false')
    writer.node(depth + 1, 'units', signal.units)
    writer.close(depth, 'signal')


def message_to_xml(message: Message, writer: XmlWriter, depth: int) -> None:
    """Write one message element.

    Raises:
        MultiplexorError: If the message has more than one multiplexor
    """
    multiplexor = message.multiplexor

    writer.open(depth, 'message')
    writer.node(depth + 1, 'name', message.name)
    writer.node(depth + 1, 'ecu', message.ecu)
    writer.node(depth + 1, 'id', message.id)
    writer.node(depth + 1, 'dlc', message.dlc)

    # no multiplexor means no group: multiplexed signals are written plain
    for sig in message.signals:
        if multiplexor is not None and (sig.is_multiplexor or sig.is_multiplexed):
            continue
        signal_to_xml(sig, writer, depth + 1)

    if multiplexor is not None:
        writer.open(depth + 1, 'multiplexor-group')
        writer.open(depth + 2, 'multiplexor')
        signal_to_xml(multiplexor, writer, depth + 3)
        writer.close(depth + 2, 'multiplexor')
        for sig in message.multiplexed_signals:
            writer.open(depth + 2, 'multiplexed')
            writer.node(depth + 3, 'multiplexed-on', sig.switch_value)
            signal_to_xml(sig, writer, depth + 3)
            writer.close(depth + 2, 'multiplexed')
        writer.close(depth + 1, 'multiplexor-group')

    writer.close(depth, 'message')


def emit_database_xml(database: Database, writer: Union[XmlWriter, Any],
                      include_timestamp: bool = False,
                      now: Optional[datetime] = None) -> int:
    """Write the XML mirror of a database.

    Returns:
        Number of messages written
    """
    writer = as_writer(writer)
    # raises before any output is produced
    multiplexed = [msg.name for msg in database.messages if msg.multiplexor is not None]
    logger.debug("%d multiplexed message(s)", len(multiplexed))

    if database.empty:
        logger.warning("no messages to emit")

    write_header(writer, include_timestamp, now)
    writer.open(0, 'candb')
    for msg in database.messages:
        message_to_xml(msg, writer, 1)
    writer.close(0, 'candb')
    return len(database.messages)


def database_to_xml(database: Database, include_timestamp: bool = False,
                    now: Optional[datetime] = None) -> str:
    """XML mirror of a database, as a string."""
    buffer = io.StringIO()
    emit_database_xml(database, buffer, include_timestamp, now)
    return buffer.getvalue()


def write_xml_file(database: Database, output_path: Path,
                   include_timestamp: bool = False) -> int:
    """Write the XML mirror to a file and return the message count."""
    with open(output_path, 'w', encoding='utf-8', newline='\n') as f:
        return emit_database_xml(database, f, include_timestamp)
