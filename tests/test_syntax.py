"""Tests for labeled syntax tree access."""

import pytest
from dbcgen.syntax import LabeledNode
from dbcgen.grammar import parse_dbc
from dbcgen.utils.errors import StructuralError


def leaf(label, text):
    return LabeledNode(label, text)


@pytest.fixture
def message_node():
    return LabeledNode('message', nodes=[
        leaf('id', '100'),
        leaf('name', 'Engine'),
        leaf('dlc', '8'),
        leaf('ecu', 'ECU1'),
        LabeledNode('signal', nodes=[leaf('name', 'A')]),
        leaf('comment', 'x'),
        LabeledNode('signal', nodes=[
            leaf('name', 'B'),
            LabeledNode('y_mx_c', nodes=[leaf('scale', '0.5'), leaf('offset', '-1')]),
        ]),
    ])


class TestLabeledNode:
    """Test lookups on hand-built trees."""

    def test_child_returns_first_match(self, message_node):
        assert message_node.child('name').contents == 'Engine'
        assert message_node.child('signal').child('name').contents == 'A'

    def test_child_missing(self, message_node):
        assert message_node.child('multiplexor') is None

    def test_path_lookup(self, message_node):
        sig = message_node.child_at('signal', 5)
        assert sig.child('y_mx_c/scale').contents == '0.5'
        assert sig.child('y_mx_c/offset').contents == '-1'
        assert sig.child('y_mx_c/missing') is None

    def test_index_of(self, message_node):
        assert message_node.index_of('signal') == 4
        assert message_node.index_of('signal', 4) == 4
        assert message_node.index_of('signal', 5) == 6
        assert message_node.index_of('signal', 7) == -1
        assert message_node.index_of('nothing') == -1

    def test_child_at(self, message_node):
        assert message_node.child_at('signal', 5).child('name').contents == 'B'
        assert message_node.child_at('signal', 7) is None

    def test_iter_children(self, message_node):
        names = [s.child('name').contents for s in message_node.iter_children('signal')]
        assert names == ['A', 'B']

    def test_require_raises_structural_error(self, message_node):
        with pytest.raises(StructuralError, match="no 'unit' child"):
            message_node.require('unit')

    def test_contents_of_inner_node(self):
        node = LabeledNode('pair', nodes=[leaf('a', '1'), leaf('b', '2')])
        assert node.contents == '1 2'


class TestLarkNode:
    """Test the lark adapter."""

    def test_labels_follow_rule_names(self):
        root = parse_dbc('BO_ 100 Foo: 1 ECU\n SG_ Bar : 0|8@1+ (1,0) [0|255] "" ECU\n')

        assert root.label == 'start'
        message = root.child('messages/message')
        assert message is not None
        assert message.child('name').contents == 'Foo'
        assert message.child('signal/name').contents == 'Bar'
        assert message.child('signal/y_mx_c/scale').contents == '1'

    def test_absent_optional_items_are_skipped(self):
        root = parse_dbc('BO_ 100 Foo: 1 ECU\n SG_ Bar : 0|8@1+ (1,0) [0|255] "" ECU\n')
        signal = root.child('messages/message/signal')

        assert signal.child('multiplexor') is None
        assert signal.child('multiplexed') is None
        assert all(c is not None for c in signal.children)

    def test_line_numbers(self):
        root = parse_dbc('\n\nBO_ 100 Foo: 1 ECU\n')
        message = root.child('messages/message')
        assert message.line == 3
