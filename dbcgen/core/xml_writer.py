"""Minimal indented XML writer used by the document emitters."""

import re
from typing import Any, Dict, Optional, TextIO

try:
    from ..utils.errors import EmissionError
except ImportError:
    from dbcgen.utils.errors import EmissionError


ESCAPE_TABLE = {
    '"': '&quot;',
    "'": '&apos;',
    '<': '&lt;',
    '>': '&gt;',
    '&': '&amp;',
}
UNESCAPE_TABLE = {v: k for k, v in ESCAPE_TABLE.items()}
_ENTITY_RE = re.compile('|'.join(re.escape(e) for e in UNESCAPE_TABLE))
_DOUBLE_HYPHEN_RE = re.compile(r'-(?=-)')


def escape(text: str) -> str:
    """Replace XML-sensitive characters with their entities."""
    return ''.join(ESCAPE_TABLE.get(c, c) for c in text)


def unescape(text: str) -> str:
    """Reverse ``escape``."""
    return _ENTITY_RE.sub(lambda m: UNESCAPE_TABLE[m.group(0)], text)


def format_attributes(attrs: Optional[Dict[str, Any]]) -> str:
    """Render attributes as ` Key="value"` pairs, values escaped."""
    if not attrs:
        return ''
    return ''.join(f' {key}="{escape(str(value))}"' for key, value in attrs.items())


class XmlWriter:
    """Write indented XML to a text stream.

    Every method takes the nesting depth; one indent unit (a tab by
    default) is written per level. Any failure of the underlying stream
    is raised as EmissionError and nothing is retried.
    """

    def __init__(self, stream: TextIO, indent_unit: str = '\t'):
        self.stream = stream
        self.indent_unit = indent_unit

    def raw(self, text: str) -> None:
        try:
            self.stream.write(text)
        except (OSError, ValueError) as e:
            raise EmissionError(f"problem writing output to {self.stream!r}: {e}") from e

    def node(self, depth: int, name: str, text: Any) -> None:
        """``<name>text</name>`` on its own line, text escaped."""
        self.raw(f"{self.indent_unit * depth}<{name}>{escape(str(text))}</{name}>\n")

    def comment(self, depth: int, text: str) -> None:
        # '--' is not allowed inside an XML comment
        text = _DOUBLE_HYPHEN_RE.sub('- ', text)
        self.raw(f"{self.indent_unit * depth}<!-- {text} -->\n")

    def open(self, depth: int, tag: str, attrs: Optional[Dict[str, Any]] = None) -> None:
        self.raw(f"{self.indent_unit * depth}<{tag}{format_attributes(attrs)}>\n")

    def empty(self, depth: int, tag: str, attrs: Optional[Dict[str, Any]] = None) -> None:
        self.raw(f"{self.indent_unit * depth}<{tag}{format_attributes(attrs)} />\n")

    def close(self, depth: int, tag: str) -> None:
        self.raw(f"{self.indent_unit * depth}</{tag}>\n")


def as_writer(target) -> XmlWriter:
    """Wrap a text stream in an XmlWriter; writers are returned unchanged."""
    if isinstance(target, XmlWriter):
        return target
    return XmlWriter(target)
