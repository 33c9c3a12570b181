"""Flip-test document generation.

A flip test describes, for every bit range of a message payload, a
"normal" variant and a "flipped" variant with all bits set. A receiver
decoding the frames can then be checked bit position by bit position.

Output layout:

    <!-- Generated by dbcgen -->
    <FlipTest Version="1.0">
        <Bus Name="CAN">
            <M Name="Foo" ID="100" MatchID="100" Size="8">
                <BE Name="Foo Flipper">
                    <BB Name="Foo - Normal" Bits="0" Size="8" />
                    <BB Name="Foo - Flipped" MultiBits="1,1,1,1,1,1,1,1" Size="8" />
                </BE>
            </M>
        </Bus>
    </FlipTest>

A BB element holds at most 16 bits, so wider signals are split into an
LSB part of 16 bits and an MSB part holding the rest. Multiplexed signals
are not emitted.
"""

import io
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

try:
    from .model import Database, Message, Signal
    from .layout import LayoutPlan, analyze
    from .core.xml_writer import XmlWriter, as_writer
except ImportError:
    from dbcgen.model import Database, Message, Signal
    from dbcgen.layout import LayoutPlan, analyze
    from dbcgen.core.xml_writer import XmlWriter, as_writer

logger = logging.getLogger(__name__)

GENERATOR_COMMENT = 'Generated by dbcgen'
TIMESTAMP_FORMAT = '%a %b %d %H:%M:%S %Y'
DOCUMENT_VERSION = '1.0'

SPLIT_WIDTH = 16
FLIP_MARKER = '1'
MARKER_SEPARATOR = ','

ROOT_DEPTH = 0
BUS_DEPTH = 1
MESSAGE_DEPTH = 2
GROUP_DEPTH = 3


def flip_markers(width: int) -> str:
    """All-bits-set pattern for ``width`` bits, e.g. '1,1,1' for 3."""
    return MARKER_SEPARATOR.join([FLIP_MARKER] * width)


def flip_parts(signal: Signal) -> List[Tuple[str, int]]:
    """(label, width) of each group a signal is emitted as."""
    if signal.bit_length > SPLIT_WIDTH:
        return [
            (f"{signal.name} (LSB)", SPLIT_WIDTH),
            (f"{signal.name} (MSB)", signal.bit_length - SPLIT_WIDTH),
        ]
    return [(signal.name, signal.bit_length)]


def emit_signal(signal: Signal, writer: XmlWriter, depth: int = GROUP_DEPTH) -> None:
    """Write the flipper group(s) for one signal."""
    for label, width in flip_parts(signal):
        writer.open(depth, 'BE', {'Name': f"{label} Flipper"})
        writer.empty(depth + 1, 'BB', {
            'Name': f"{label} - Normal",
            'Bits': 0,
            'Size': width,
        })
        writer.empty(depth + 1, 'BB', {
            'Name': f"{label} - Flipped",
            'MultiBits': flip_markers(width),
            'Size': width,
        })
        writer.close(depth, 'BE')


def emit_message(message: Message, padded_size: int, writer: XmlWriter,
                 entries: Optional[List[Signal]] = None,
                 depth: int = MESSAGE_DEPTH) -> None:
    """Write one message block.

    Args:
        message: Message to write
        padded_size: Payload size in bits from the layout analysis
        writer: Output writer
        entries: Signals to emit in order; computed with ``analyze`` if omitted
        depth: Nesting depth of the message element
    """
    if entries is None:
        entries = analyze(message).entries

    writer.open(depth, 'M', {
        'Name': message.name,
        'ID': message.id,
        'MatchID': message.id,
        'Size': padded_size,
    })
    for sig in entries:
        emit_signal(sig, writer, depth + 1)
    writer.close(depth, 'M')


def write_header(writer: XmlWriter, include_timestamp: bool = False,
                 now: Optional[datetime] = None) -> None:
    """Leading generator comment and, optionally, the generation time."""
    writer.comment(ROOT_DEPTH, GENERATOR_COMMENT)
    if include_timestamp:
        now = now or datetime.now()
        writer.comment(ROOT_DEPTH, f"Generated on: {now.strftime(TIMESTAMP_FORMAT)}")


def emit_database(database: Database, writer: Union[XmlWriter, Any],
                  include_timestamp: bool = False,
                  now: Optional[datetime] = None,
                  bus_name: str = 'CAN') -> Dict[str, Any]:
    """Write the flip-test document for a whole database.

    Every message is analyzed before anything is written, so a semantic
    error in any message leaves the output untouched.

    Returns:
        Statistics about the generated document

    Raises:
        MultiplexorError: If a message has more than one multiplexor
        PayloadSizeError: If a message covers more than 32 bits
        EmissionError: If writing fails
    """
    writer = as_writer(writer)
    plans: List[LayoutPlan] = [analyze(msg) for msg in database.messages]

    if database.empty:
        logger.warning("no messages to emit")

    write_header(writer, include_timestamp, now)
    writer.open(ROOT_DEPTH, 'FlipTest', {'Version': DOCUMENT_VERSION})
    writer.open(BUS_DEPTH, 'Bus', {'Name': bus_name})

    for msg, plan in zip(database.messages, plans):
        emit_message(msg, plan.padded_size, writer, plan.entries, MESSAGE_DEPTH)

    writer.close(BUS_DEPTH, 'Bus')
    writer.close(ROOT_DEPTH, 'FlipTest')

    stats = {
        'messages': len(plans),
        'signals': sum(len(p.entries) - len(p.fillers) for p in plans),
        'fillers': sum(len(p.fillers) for p in plans),
        'groups': sum(len(flip_parts(s)) for p in plans for s in p.entries),
        'padded_sizes': {msg.name: plan.padded_size
                         for msg, plan in zip(database.messages, plans)},
    }
    logger.info("flip test: %d messages, %d signals, %d fillers",
                stats['messages'], stats['signals'], stats['fillers'])
    return stats


def database_to_flip_test(database: Database, include_timestamp: bool = False,
                          now: Optional[datetime] = None,
                          bus_name: str = 'CAN') -> str:
    """Flip-test document for a database, as a string."""
    buffer = io.StringIO()
    emit_database(database, buffer, include_timestamp, now, bus_name)
    return buffer.getvalue()


def write_flip_test_file(database: Database, output_path: Path,
                         include_timestamp: bool = False,
                         bus_name: str = 'CAN') -> Dict[str, Any]:
    """Write the flip-test document to a file and return its statistics."""
    with open(output_path, 'w', encoding='utf-8', newline='\n') as f:
        return emit_database(database, f, include_timestamp, bus_name=bus_name)
