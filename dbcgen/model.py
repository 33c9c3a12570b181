"""CAN database model and the builder that creates it from a syntax tree.

Most numeric fields are parsed as floating point and then narrowed to
integers. That is exact for 32 bit values; wider integers (e.g. extended
IDs with flag bits above bit 52) are not guaranteed to survive.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

try:
    from .syntax import SyntaxNode
    from .grammar import parse_dbc, parse_dbc_file
    from .utils.errors import DbcError, MultiplexorError, StructuralError
except ImportError:
    from dbcgen.syntax import SyntaxNode
    from dbcgen.grammar import parse_dbc, parse_dbc_file
    from dbcgen.utils.errors import DbcError, MultiplexorError, StructuralError

logger = logging.getLogger(__name__)

MAX_START_BIT = 64
MAX_BIT_LENGTH = 64
FILLER_NAME = 'UNKNOWN'


class Endianness(Enum):
    """Bit numbering of a signal."""
    MOTOROLA = 0  # big endian
    INTEL = 1  # little endian

    @classmethod
    def from_char(cls, char: str) -> 'Endianness':
        if char == '0':
            return cls.MOTOROLA
        if char == '1':
            return cls.INTEL
        raise StructuralError(f"Invalid endianness '{char}' (expected '0' or '1')")


@dataclass(frozen=True)
class Signal:
    """A bit-packed field within a CAN message."""
    name: str
    start_bit: int
    bit_length: int
    endianness: Endianness = Endianness.INTEL
    is_signed: bool = False
    scaling: float = 1.0
    offset: float = 0.0
    minimum: float = 0.0
    maximum: float = 0.0
    units: str = ''
    is_multiplexor: bool = False
    is_multiplexed: bool = False
    switch_value: int = 0
    receivers: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.is_multiplexor and self.is_multiplexed:
            raise StructuralError(
                f"Signal '{self.name}' cannot be both multiplexor and multiplexed")

    @property
    def end_bit(self) -> int:
        """First bit after this signal."""
        return self.start_bit + self.bit_length

    @classmethod
    def filler(cls, start_bit: int, bit_length: int) -> 'Signal':
        """Synthetic signal covering bits no declared signal claims."""
        return cls(name=FILLER_NAME, start_bit=start_bit, bit_length=bit_length)

    def to_physical(self, raw: int) -> float:
        """Apply the linear conversion ``raw * scaling + offset``."""
        return raw * self.scaling + self.offset


@dataclass
class Message:
    """A CAN frame definition."""
    name: str
    id: int
    dlc: int
    ecu: str = ''
    signals: List[Signal] = field(default_factory=list)

    @property
    def multiplexor(self) -> Optional[Signal]:
        """The multiplexor signal, if any.

        Raises:
            MultiplexorError: If more than one signal is a multiplexor
        """
        found = [s for s in self.signals if s.is_multiplexor]
        if len(found) > 1:
            raise MultiplexorError(self.name)
        return found[0] if found else None

    @property
    def multiplexed_signals(self) -> List[Signal]:
        return [s for s in self.signals if s.is_multiplexed]

    def sort_signals(self) -> None:
        """Order signals by ascending start bit, keeping source order on ties."""
        self.signals.sort(key=lambda s: s.start_bit)

    def get_signal_by_name(self, name: str) -> Optional[Signal]:
        for sig in self.signals:
            if sig.name == name:
                return sig
        return None

    def validate(self) -> List[str]:
        """Validate message definition and return list of errors."""
        errors = []

        multiplexors = [s.name for s in self.signals if s.is_multiplexor]
        if len(multiplexors) > 1:
            errors.append(f"Multiple multiplexor signals: {', '.join(multiplexors)}")

        if self.multiplexed_signals and not multiplexors:
            errors.append("Multiplexed signals present but no multiplexor signal")

        seen_names = set()
        duplicate_names = []
        for sig in self.signals:
            if sig.name in seen_names:
                duplicate_names.append(sig.name)
            seen_names.add(sig.name)
        if duplicate_names:
            errors.append(f"Duplicate signal names: {', '.join(duplicate_names)}")

        return errors


@dataclass
class Database:
    """All messages of a parsed DBC file, in source order."""
    messages: List[Message] = field(default_factory=list)
    version: str = ''
    ecus: List[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.messages

    def validate(self) -> List[str]:
        """Validate every message, prefixing errors with the message name."""
        errors = []
        for i, msg in enumerate(self.messages):
            for error in msg.validate():
                errors.append(f"Message '{msg.name}' (index {i}): {error}")
        return errors

    def get_message_by_name(self, name: str) -> Optional[Message]:
        for msg in self.messages:
            if msg.name == name:
                return msg
        return None

    def get_message_by_id(self, message_id: int) -> Optional[Message]:
        for msg in self.messages:
            if msg.id == message_id:
                return msg
        return None


def _parse_float(node: SyntaxNode) -> float:
    try:
        return float(node.contents)
    except ValueError:
        raise StructuralError(f"'{node.label}' is not a number: {node.contents!r}")


def _parse_uint(node: SyntaxNode) -> int:
    value = _parse_float(node)
    if value < 0:
        raise StructuralError(f"'{node.label}' must not be negative: {node.contents!r}")
    return int(value)


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        text = text[1:-1]
    return text.replace('\\"', '"').replace('\\\\', '\\')


def build_signal(node: SyntaxNode) -> Signal:
    """Build a Signal from a ``signal`` syntax node."""
    name = node.require('name').contents
    start_bit = _parse_uint(node.require('start_bit'))
    if start_bit > MAX_START_BIT:
        raise StructuralError(f"Signal '{name}': start bit {start_bit} exceeds {MAX_START_BIT}")
    bit_length = _parse_uint(node.require('length'))
    if not 1 <= bit_length <= MAX_BIT_LENGTH:
        raise StructuralError(
            f"Signal '{name}': bit length {bit_length} outside 1-{MAX_BIT_LENGTH}")

    endianness = Endianness.from_char(node.require('endianness').contents[:1])

    sign_char = node.require('sign').contents[:1]
    if sign_char not in ('+', '-'):
        raise StructuralError(f"Signal '{name}': invalid sign '{sign_char}' (expected '+' or '-')")

    receivers_node = node.child('receivers')
    receivers = ()
    if receivers_node is not None:
        receivers = tuple(r.contents for r in receivers_node.children)

    is_multiplexed = False
    switch_value = 0
    multiplexed = node.child('multiplexed')
    if multiplexed is not None:
        is_multiplexed = True
        switch_value = int(_parse_float(multiplexed.require('switch_value')))

    is_multiplexor = node.child('multiplexor') is not None
    if is_multiplexor and is_multiplexed:
        raise StructuralError(f"Signal '{name}' cannot be both multiplexor and multiplexed")

    sig = Signal(
        name=name,
        start_bit=start_bit,
        bit_length=bit_length,
        endianness=endianness,
        is_signed=sign_char == '-',
        scaling=_parse_float(node.require('y_mx_c/scale')),
        offset=_parse_float(node.require('y_mx_c/offset')),
        minimum=_parse_float(node.require('range/minimum')),
        maximum=_parse_float(node.require('range/maximum')),
        units=_unquote(node.require('unit').contents),
        is_multiplexor=is_multiplexor,
        is_multiplexed=is_multiplexed,
        switch_value=switch_value,
        receivers=receivers,
    )

    logger.debug("\tname => %s; start %d length %d %s %s %s",
                 sig.name, sig.start_bit, sig.bit_length, sig.units,
                 sig.endianness.name.lower(),
                 'signed' if sig.is_signed else 'unsigned')
    return sig


def build_message(node: SyntaxNode) -> Message:
    """Build a Message, with signals sorted by start bit, from a ``message`` node."""
    msg = Message(
        name=node.require('name').contents,
        ecu=node.require('ecu').contents,
        dlc=_parse_uint(node.require('dlc')),
        id=_parse_uint(node.require('id')),
    )

    i = node.index_of('signal', 0)
    while i >= 0:
        msg.signals.append(build_signal(node.children[i]))
        i = node.index_of('signal', i + 1)

    msg.sort_signals()

    logger.debug("%s id:%d dlc:%d signals:%d ecu:%s",
                 msg.name, msg.id, msg.dlc, len(msg.signals), msg.ecu)
    return msg


def build_database(node: SyntaxNode) -> Database:
    """Build a Database from the root syntax node.

    A missing or empty ``messages`` collection is not an error: a warning
    is logged and an empty Database is returned.
    """
    db = Database()

    version = node.child('version')
    if version is not None:
        db.version = _unquote(version.contents)

    ecus = node.child('ecus')
    if ecus is not None:
        db.ecus = [e.contents for e in ecus.children]

    messages = node.child('messages')
    if messages is None:
        logger.warning("no messages found")
        return db
    if not messages.children:
        logger.warning("messages has no children")
        return db

    for msg_node in messages.iter_children('message'):
        db.messages.append(build_message(msg_node))

    if db.empty:
        logger.warning("no messages found")
    return db


def parse_database(text: str) -> Database:
    """Parse DBC text and build its Database."""
    return build_database(parse_dbc(text))


def load_database(filepath: Union[str, Path]) -> Database:
    """Load a Database from a DBC file."""
    return build_database(parse_dbc_file(filepath))


def validate_dbc_file(filepath: Union[str, Path]) -> Dict[str, Any]:
    """Load and validate a DBC file and return validation results."""
    try:
        db = load_database(filepath)
    except (DbcError, OSError) as e:
        return {
            'valid': False,
            'errors': [f"Failed to load DBC: {e}"],
            'database': None
        }

    errors = db.validate()
    return {
        'valid': len(errors) == 0,
        'errors': errors,
        'database': db
    }
