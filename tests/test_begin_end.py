# tests/test_begin_end.py
"""
Tests for the begin/end indexer: instruction sequence → BeginEndMap.
"""

import pytest

from wasm_blockstack import (
    BeginEndMap,
    BlockStack,
    BlockStackConfig,
    InstrKind,
    UnbalancedNestingError,
    build_begin_end_map,
    parse_instrs,
)
from tests.conftest import (
    BLOCK_SRC, IF_ELSE_SRC, IF_ONLY_SRC, LOOP_SRC, NESTED_SRC,
    BR_TABLE_SRC, idx,
)


def _map(src: str, **config):
    return build_begin_end_map(parse_instrs(src), BlockStackConfig(**config))


class TestBeginEndExamples:

    def test_single_block(self):
        m = _map(BLOCK_SRC)
        assert dict(m) == {idx(0): idx(2)}
        assert m.function_end == idx(3)

    def test_if_else(self):
        m = _map(IF_ELSE_SRC)
        assert dict(m) == {idx(0): idx(2), idx(2): idx(4)}
        assert m.function_end == idx(5)

    def test_if_without_else(self):
        assert dict(_map(IF_ONLY_SRC)) == {idx(0): idx(2)}

    def test_nested(self):
        m = _map(NESTED_SRC)
        assert dict(m) == {
            idx(0): idx(10),
            idx(1): idx(8),
            idx(2): idx(4),
            idx(4): idx(6),
        }
        assert m.function_end == idx(11)

    def test_function_end_only(self):
        m = _map("end")
        assert len(m) == 0
        assert m.function_end == idx(0)


class TestBeginEndProperties:

    @pytest.mark.parametrize("src", [
        BLOCK_SRC, IF_ELSE_SRC, IF_ONLY_SRC, LOOP_SRC, NESTED_SRC, BR_TABLE_SRC,
    ], ids=["block", "if_else", "if_only", "loop", "nested", "br_table"])
    def test_one_entry_per_begin(self, src):
        instrs = parse_instrs(src)
        m = build_begin_end_map(instrs)
        begins = {
            idx(i) for i, instr in enumerate(instrs[:-1])
            if instr.kind in (InstrKind.BLOCK, InstrKind.LOOP, InstrKind.IF, InstrKind.ELSE)
        }
        assert set(m) == begins

    @pytest.mark.parametrize("src", [
        BLOCK_SRC, IF_ELSE_SRC, IF_ONLY_SRC, LOOP_SRC, NESTED_SRC, BR_TABLE_SRC,
    ], ids=["block", "if_else", "if_only", "loop", "nested", "br_table"])
    def test_begin_precedes_end(self, src):
        for begin, end in _map(src).items():
            assert begin < end

    def test_terminators_are_else_or_end(self):
        instrs = parse_instrs(NESTED_SRC)
        for end in build_begin_end_map(instrs).values():
            assert instrs[end.index].kind in (InstrKind.ELSE, InstrKind.END)

    def test_map_is_read_only(self):
        m = _map(BLOCK_SRC)
        with pytest.raises(TypeError):
            m[idx(1)] = idx(2)

    def test_function_end_is_read_only(self):
        m = _map(BLOCK_SRC)
        with pytest.raises(AttributeError):
            m.function_end = idx(0)
        assert m.function_end == idx(3)
        assert BlockStack.from_begin_end_map(m).function.end == idx(3)

    def test_equality_includes_function_end(self):
        assert _map(BLOCK_SRC) == _map(BLOCK_SRC)
        same_pairs = BeginEndMap({idx(0): idx(2)}, idx(3))
        other_end = BeginEndMap({idx(0): idx(2)}, idx(4))
        assert _map(BLOCK_SRC) == same_pairs
        assert same_pairs != other_end
        assert same_pairs == {idx(0): idx(2)}

    def test_repr_lists_pairs(self):
        assert "#0->#2" in repr(_map(BLOCK_SRC))


class TestBeginEndUnbalanced:

    def test_extra_end(self):
        with pytest.raises(UnbalancedNestingError, match="no block is open"):
            _map("block end end end")

    def test_missing_end(self):
        with pytest.raises(UnbalancedNestingError, match="not closed"):
            _map("block nop end")

    def test_missing_end_nested(self):
        with pytest.raises(UnbalancedNestingError):
            _map("block loop end end")

    def test_else_without_if(self):
        with pytest.raises(UnbalancedNestingError):
            _map("else end")

    def test_empty_sequence(self):
        with pytest.raises(UnbalancedNestingError, match="empty"):
            build_begin_end_map([])

    def test_last_instruction_must_be_end(self):
        with pytest.raises(UnbalancedNestingError, match="must finish with end"):
            _map("block end nop")

    def test_final_end_check_can_be_disabled(self):
        m = _map("block end nop", require_final_end=False)
        assert dict(m) == {idx(0): idx(1)}
        assert m.function_end == idx(2)

    def test_error_carries_code(self):
        with pytest.raises(UnbalancedNestingError) as exc_info:
            _map("block end end end")
        assert exc_info.value.code == "WBS-1001"
        assert str(exc_info.value).startswith("[WBS-1001]")
