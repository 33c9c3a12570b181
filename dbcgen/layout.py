"""Bit layout analysis for flip-test generation.

For one message this works out which bit ranges no signal covers, how
far the payload must be padded, and the order in which real and filler
signals are emitted.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

try:
    from .model import Message, Signal
    from .utils.errors import MultiplexorError, PayloadSizeError
except ImportError:
    from dbcgen.model import Message, Signal
    from dbcgen.utils.errors import MultiplexorError, PayloadSizeError

logger = logging.getLogger(__name__)

PADDED_SIZES = (8, 16, 24, 32)


@dataclass
class LayoutPlan:
    """Derived layout facts for one message.

    Attributes:
        padded_size: Payload size in bits, one of PADDED_SIZES
        entries: Signals to emit in ascending bit order, fillers included
        covered_bits: Sum of emitted signal and gap lengths before padding
        fillers: The synthetic signals inserted for gaps
        multiplexor: The message's multiplexor signal, if any
    """
    padded_size: int
    entries: List[Signal] = field(default_factory=list)
    covered_bits: int = 0
    fillers: List[Signal] = field(default_factory=list)
    multiplexor: Optional[Signal] = None

    @property
    def gaps(self) -> List[Tuple[int, int]]:
        """(start_bit, length) of every uncovered range."""
        return [(f.start_bit, f.bit_length) for f in self.fillers]


def padded_size_for(bits: int, message_name: str = '') -> int:
    """Smallest supported payload size holding ``bits`` bits.

    Raises:
        PayloadSizeError: If ``bits`` exceeds the largest supported size
    """
    for size in PADDED_SIZES:
        if bits <= size:
            return size
    raise PayloadSizeError(message_name, bits, PADDED_SIZES[-1])


def analyze(message: Message) -> LayoutPlan:
    """Compute the padded size and emission order of a message.

    Signals are expected in ascending start bit order (as built by
    ``build_message``). Multiplexor and multiplexed signals take no part
    in the walk; their bits are covered by filler.

    Raises:
        MultiplexorError: If the message has more than one multiplexor
        PayloadSizeError: If the covered bits do not fit in 32 bits
    """
    entries: List[Signal] = []
    fillers: List[Signal] = []
    multiplexor: Optional[Signal] = None
    covered = 0
    last_bit = 0

    for sig in message.signals:
        if sig.is_multiplexor:
            if multiplexor is not None:
                raise MultiplexorError(message.name)
            multiplexor = sig
            continue
        if sig.is_multiplexed:
            continue

        if sig.start_bit > last_bit:
            filler = Signal.filler(last_bit, sig.start_bit - last_bit)
            entries.append(filler)
            fillers.append(filler)
            covered += filler.bit_length

        entries.append(sig)
        covered += sig.bit_length
        last_bit = sig.end_bit

    plan = LayoutPlan(
        padded_size=padded_size_for(covered, message.name),
        entries=entries,
        covered_bits=covered,
        fillers=fillers,
        multiplexor=multiplexor,
    )
    logger.debug("%s: %d bits covered, padded to %d, %d gap(s)",
                 message.name, covered, plan.padded_size, len(fillers))
    return plan
