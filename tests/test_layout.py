"""Tests for message bit layout analysis."""

import pytest
from dbcgen.layout import analyze, padded_size_for, PADDED_SIZES
from dbcgen.model import Message, Signal
from dbcgen.utils.errors import MultiplexorError, PayloadSizeError


class TestPaddedSize:
    """Test padding to the supported payload sizes."""

    @pytest.mark.parametrize('bits,expected', [
        (0, 8), (1, 8), (8, 8), (9, 16), (16, 16), (17, 24), (24, 24), (25, 32), (32, 32),
    ])
    def test_boundaries(self, bits, expected):
        assert padded_size_for(bits) == expected

    def test_supported_sizes(self):
        assert PADDED_SIZES == (8, 16, 24, 32)

    def test_over_limit(self):
        with pytest.raises(PayloadSizeError) as exc_info:
            padded_size_for(33, 'Wide')

        assert exc_info.value.bits == 33
        assert exc_info.value.limit == 32
        assert 'Wide' in str(exc_info.value)


class TestAnalyze:
    """Test gap detection and emission order."""

    def test_contiguous(self):
        msg = Message('M', 1, 2, signals=[Signal('A', 0, 8), Signal('B', 8, 8)])
        plan = analyze(msg)

        assert [s.name for s in plan.entries] == ['A', 'B']
        assert plan.gaps == []
        assert plan.covered_bits == 16
        assert plan.padded_size == 16

    def test_gap_filled(self):
        msg = Message('M', 1, 3, signals=[Signal('A', 0, 8), Signal('B', 16, 8)])
        plan = analyze(msg)

        assert [s.name for s in plan.entries] == ['A', 'UNKNOWN', 'B']
        assert plan.gaps == [(8, 8)]
        assert plan.covered_bits == 24
        assert plan.padded_size == 24

    def test_leading_gap(self):
        msg = Message('M', 1, 1, signals=[Signal('A', 4, 4)])
        plan = analyze(msg)

        assert plan.entries[0].name == 'UNKNOWN'
        assert plan.gaps == [(0, 4)]
        assert plan.padded_size == 8

    def test_trailing_bits_are_padding_only(self):
        msg = Message('M', 1, 2, signals=[Signal('A', 0, 10)])
        plan = analyze(msg)

        assert [s.name for s in plan.entries] == ['A']
        assert plan.covered_bits == 10
        assert plan.padded_size == 16

    def test_overlapping_signals_are_not_gaps(self):
        msg = Message('M', 1, 2, signals=[Signal('A', 0, 8), Signal('B', 4, 8)])
        plan = analyze(msg)

        assert plan.gaps == []
        assert [s.name for s in plan.entries] == ['A', 'B']
        assert plan.covered_bits == 16

    def test_empty_message(self):
        plan = analyze(Message('Empty', 1, 0))

        assert plan.entries == []
        assert plan.covered_bits == 0
        assert plan.padded_size == 8

    def test_exactly_32_bits(self):
        msg = Message('M', 1, 4, signals=[Signal('A', 0, 16), Signal('B', 16, 16)])
        assert analyze(msg).padded_size == 32

    def test_over_32_bits(self):
        msg = Message('Big', 1, 8, signals=[Signal('A', 0, 32), Signal('B', 32, 8)])

        with pytest.raises(PayloadSizeError, match='Big'):
            analyze(msg)

    def test_multiplexed_signals_skipped(self):
        msg = Message('Mux', 1, 4, signals=[
            Signal('Sel', 0, 8, is_multiplexor=True),
            Signal('A', 8, 16, is_multiplexed=True, switch_value=0),
            Signal('B', 8, 16, is_multiplexed=True, switch_value=1),
            Signal('Tail', 24, 8),
        ])
        plan = analyze(msg)

        assert plan.multiplexor.name == 'Sel'
        assert [s.name for s in plan.entries] == ['UNKNOWN', 'Tail']
        assert plan.gaps == [(0, 24)]
        assert plan.padded_size == 32

    def test_multiple_multiplexors(self):
        msg = Message('Twice', 1, 2, signals=[
            Signal('S1', 0, 4, is_multiplexor=True),
            Signal('S2', 4, 4, is_multiplexor=True),
        ])

        with pytest.raises(MultiplexorError, match='Twice'):
            analyze(msg)

    def test_message_not_modified(self):
        signals = [Signal('A', 0, 8), Signal('B', 16, 8)]
        msg = Message('M', 1, 3, signals=list(signals))

        analyze(msg)
        assert msg.signals == signals
