"""Labeled syntax tree access.

The model builder never touches a concrete parse tree. It asks a
``SyntaxNode`` for children by label:

    node.child('y_mx_c/scale')        # first match, '/' descends a level
    node.index_of('signal', 3)        # index of first 'signal' at/after 3
    node.child_at('signal', 3)        # the node at that index

Two implementations are provided: ``LabeledNode`` for trees built by hand
(tests, other front ends) and ``LarkNode`` which adapts a lark parse tree.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Union

from lark import Token, Tree

try:
    from .utils.errors import StructuralError
except ImportError:
    from dbcgen.utils.errors import StructuralError


PATH_SEPARATOR = '/'


class SyntaxNode(ABC):
    """A node of a labeled syntax tree."""

    @property
    @abstractmethod
    def label(self) -> str:
        """Label of this node (rule or terminal name)."""

    @property
    @abstractmethod
    def contents(self) -> str:
        """Source text held by this node."""

    @property
    @abstractmethod
    def children(self) -> List['SyntaxNode']:
        """Direct children, in source order."""

    def index_of(self, label: str, start: int = 0) -> int:
        """Index of the first direct child labeled ``label`` at or after
        ``start``, or -1 when there is none."""
        children = self.children
        for i in range(max(start, 0), len(children)):
            if children[i].label == label:
                return i
        return -1

    def child_at(self, label: str, start: int = 0) -> Optional['SyntaxNode']:
        """First direct child labeled ``label`` at or after ``start``."""
        i = self.index_of(label, start)
        if i < 0:
            return None
        return self.children[i]

    def child(self, path: str) -> Optional['SyntaxNode']:
        """First node matching a '/'-separated label path, or None."""
        node: Optional[SyntaxNode] = self
        for label in path.split(PATH_SEPARATOR):
            node = node.child_at(label)
            if node is None:
                return None
        return node

    def require(self, path: str) -> 'SyntaxNode':
        """Like ``child`` but a missing node is a structural error."""
        node = self.child(path)
        if node is None:
            raise StructuralError(f"'{self.label}' node has no '{path}' child")
        return node

    def iter_children(self, label: str) -> Iterator['SyntaxNode']:
        """Every direct child labeled ``label``, in source order."""
        i = self.index_of(label, 0)
        while i >= 0:
            yield self.children[i]
            i = self.index_of(label, i + 1)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.label!r}, {self.contents!r})"


@dataclass(repr=False)
class LabeledNode(SyntaxNode):
    """Plain in-memory syntax node."""
    node_label: str
    text: str = ''
    nodes: List[SyntaxNode] = field(default_factory=list)

    @property
    def label(self) -> str:
        return self.node_label

    @property
    def contents(self) -> str:
        if self.text or not self.nodes:
            return self.text
        return ' '.join(n.contents for n in self.nodes)

    @property
    def children(self) -> List[SyntaxNode]:
        return self.nodes


class LarkNode(SyntaxNode):
    """Adapter exposing a lark ``Tree`` or ``Token`` as a SyntaxNode.

    Rule nodes are labeled by rule name and terminals by terminal type.
    Placeholders lark inserts for absent optional items are skipped.
    """

    def __init__(self, item: Union[Tree, Token]):
        self._item = item
        self._children: Optional[List[SyntaxNode]] = None

    @property
    def label(self) -> str:
        if isinstance(self._item, Tree):
            return str(self._item.data)
        return self._item.type

    @property
    def contents(self) -> str:
        if isinstance(self._item, Token):
            return str(self._item)
        return ' '.join(str(token) for token in self._item.scan_values(
            lambda v: isinstance(v, Token)))

    @property
    def children(self) -> List[SyntaxNode]:
        if self._children is None:
            if isinstance(self._item, Tree):
                self._children = [LarkNode(c) for c in self._item.children
                                  if c is not None]
            else:
                self._children = []
        return self._children

    @property
    def line(self) -> Optional[int]:
        """Source line of this node when lark tracked positions."""
        if isinstance(self._item, Token):
            return self._item.line
        meta = getattr(self._item, 'meta', None)
        if meta is None or getattr(meta, 'empty', True):
            return None
        return meta.line
