"""
Error types raised while converting a DBC database.

The conversion pipeline distinguishes four kinds of failure:
- Syntax errors: the input text does not match the DBC grammar
- Structural errors: a required node is missing from the syntax tree, or a
  field holds a value the model cannot represent
- Semantic errors: the model is well formed but cannot be emitted
  (several multiplexors in one message, payload wider than 32 bits)
- Emission errors: writing to the output stream failed

An empty database is not an error; it is reported as a warning and
produces an empty but valid document.
"""

from typing import Optional


class DbcError(Exception):
    """Base class for every error raised by dbcgen."""


class DbcSyntaxError(DbcError):
    """Input text could not be parsed as a DBC database."""

    def __init__(self, message: str, line: Optional[int] = None,
                 column: Optional[int] = None):
        self.line = line
        self.column = column
        if line is not None:
            message = f"line {line}, column {column}: {message}"
        super().__init__(message)


class StructuralError(DbcError):
    """A syntax node required by the model is absent or malformed."""


class MultiplexorError(DbcError):
    """A message declares more than one multiplexor signal."""

    def __init__(self, message_name: str):
        self.message_name = message_name
        super().__init__(
            f"multiple multiplexor values detected (only one per CAN msg is allowed) "
            f"for {message_name}"
        )


class PayloadSizeError(DbcError):
    """A message covers more bits than the flip-test format can pad."""

    def __init__(self, message_name: str, bits: int, limit: int):
        self.message_name = message_name
        self.bits = bits
        self.limit = limit
        super().__init__(
            f"payload exceeds supported size for {message_name}: "
            f"{bits} bits covered, at most {limit} supported"
        )


class EmissionError(DbcError, OSError):
    """Writing generated output failed."""
