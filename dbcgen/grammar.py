"""DBC grammar.

Parses the subset of the DBC format the model needs (messages and their
signals) into a labeled lark tree. Statements the model does not use
(comments, attributes, value descriptions, ...) are accepted and kept as
opaque ``statement`` nodes so real-world files parse unchanged.
"""

from functools import lru_cache
from pathlib import Path
from typing import Union

from lark import Lark
from lark.exceptions import UnexpectedInput

try:
    from .syntax import LarkNode
    from .utils.errors import DbcSyntaxError
except ImportError:
    from dbcgen.syntax import LarkNode
    from dbcgen.utils.errors import DbcSyntaxError


FILE_ENCODINGS = ('utf-8-sig', 'cp1252', 'latin-1')

DBC_GRAMMAR = r'''
start: version? symbols? bit_timing? ecus? messages

version: "VERSION" STRING
symbols: NEW_SYMBOLS
bit_timing: "BS_" ":" (INT ":" INT "," INT)?
ecus: "BU_" ":" IDENT*

messages: (message | statement)*
message: "BO_" id name ":" dlc ecu signal*
id: INT
name: IDENT
dlc: INT
ecu: IDENT

signal: "SG_" name [multiplexor | multiplexed] ":" start_bit "|" length "@" endianness sign y_mx_c range unit receivers
multiplexor: MULTIPLEXOR_MARK
multiplexed: MULTIPLEXED_MARK switch_value
switch_value: INT
start_bit: INT
length: INT
endianness: ENDIANNESS
sign: SIGN
y_mx_c: "(" scale "," offset ")"
scale: NUMBER
offset: NUMBER
range: "[" minimum "|" maximum "]"
minimum: NUMBER
maximum: NUMBER
unit: STRING
receivers: IDENT ("," IDENT)*

statement: OTHER_STATEMENT

NEW_SYMBOLS: /NS_[ \t]*:[ \t]*(\r?\n[ \t]+[A-Za-z_][A-Za-z0-9_]*[ \t]*)*/
OTHER_STATEMENT.2: /(CM_|BA_DEF_DEF_REL_|BA_DEF_DEF_|BA_DEF_REL_|BA_DEF_SGTYPE_|BA_DEF_|BA_REL_|BA_SGTYPE_|BA_|VAL_TABLE_|VAL_|SIG_VALTYPE_|SIGTYPE_VALTYPE_|SIG_GROUP_|SIG_TYPE_REF_|SGTYPE_VAL_|SGTYPE_|SG_MUL_VAL_|BO_TX_BU_|BU_SG_REL_|BU_EV_REL_|BU_BO_REL_|EV_|ENVVAR_DATA_|CAT_DEF_|CAT_|FILTER)\b("(\\.|[^"\\])*"|[^";])*;/

MULTIPLEXOR_MARK: "M"
MULTIPLEXED_MARK: "m"
ENDIANNESS: /[01]/
SIGN: /[+-]/
IDENT: /[A-Za-z_][A-Za-z0-9_]*/
INT: /\d+/
NUMBER: /[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?/
STRING: /"(\\.|[^"\\])*"/

%import common.WS
%ignore WS
'''


@lru_cache(maxsize=1)
def get_parser() -> Lark:
    """Build (once) the LALR parser for DBC text."""
    return Lark(DBC_GRAMMAR, parser='lalr', propagate_positions=True,
                maybe_placeholders=True)


def parse_dbc(text: str) -> LarkNode:
    """Parse DBC text into the root node of a labeled syntax tree.

    Raises:
        DbcSyntaxError: If the text does not match the grammar
    """
    try:
        tree = get_parser().parse(text)
    except UnexpectedInput as e:
        raise DbcSyntaxError(str(e).strip().splitlines()[0],
                             line=e.line, column=e.column) from e
    return LarkNode(tree)


def decode_dbc(data: bytes) -> str:
    """Decode DBC file contents, trying each of FILE_ENCODINGS in turn."""
    for encoding in FILE_ENCODINGS[:-1]:
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    # latin-1 maps every byte
    return data.decode(FILE_ENCODINGS[-1])


def parse_dbc_file(filepath: Union[str, Path]) -> LarkNode:
    """Read and parse a DBC file.

    Files exported by Vector tools are usually cp1252 rather than UTF-8.
    """
    with open(filepath, 'rb') as f:
        return parse_dbc(decode_dbc(f.read()))
