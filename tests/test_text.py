# tests/test_text.py
"""
Tests for the flat instruction listing reader: listing text → Instr list.
"""

import pytest

from wasm_blockstack import Instr, InstrKind, InstrSyntaxError, Label, parse_instrs
from tests.conftest import NESTED_SRC


class TestParseBasic:

    def test_empty_listing(self):
        assert parse_instrs("") == []

    def test_bare_mnemonics(self):
        instrs = parse_instrs("block loop if else end nop return")
        assert [i.kind for i in instrs] == [
            InstrKind.BLOCK, InstrKind.LOOP, InstrKind.IF, InstrKind.ELSE,
            InstrKind.END, InstrKind.NOP, InstrKind.RETURN,
        ]

    def test_branch_labels(self):
        br, br_if, br_table = parse_instrs("(br 0) (br_if 3) (br_table 0 1 2)")
        assert br == Instr(InstrKind.BR, (Label(0),))
        assert br_if.labels == (Label(3),)
        assert br_table.labels == (Label(0), Label(1), Label(2))

    def test_other_mnemonics(self):
        add, const = parse_instrs("i32.add (i32.const 42)")
        assert add.kind is InstrKind.OTHER
        assert add.mnemonic == "i32.add"
        assert const.kind is InstrKind.OTHER
        assert const.name == "i32.const"

    def test_nil_and_t_are_mnemonics(self):
        instrs = parse_instrs("block t nil end end")
        assert [i.kind for i in instrs] == [
            InstrKind.BLOCK, InstrKind.OTHER, InstrKind.OTHER, InstrKind.END, InstrKind.END,
        ]
        assert [i.mnemonic for i in instrs[1:3]] == ["t", "nil"]

    def test_block_type_is_ignored(self):
        (block,) = parse_instrs("(block i32)")
        assert block == Instr(InstrKind.BLOCK)

    def test_multiline_listing(self):
        instrs = parse_instrs(NESTED_SRC)
        assert len(instrs) == 12
        assert instrs[-1].kind is InstrKind.END

    def test_str(self):
        assert [str(i) for i in parse_instrs("block (br_table 0 1) end")] == [
            "block", "br_table 0 1", "end",
        ]


class TestParseErrors:

    @pytest.mark.parametrize("src", [
        "br",
        "(br)",
        "(br 0 1)",
        "(br -1)",
        "(br x)",
        "(br_if)",
        "(br_table)",
        "()",
        "(0 1)",
        "\"block\"",
    ], ids=[
        "bare_br", "br_no_label", "br_two_labels", "negative_label",
        "symbol_label", "br_if_no_label", "br_table_empty", "empty_form",
        "numeric_head", "string_item",
    ])
    def test_rejected(self, src):
        with pytest.raises(InstrSyntaxError):
            parse_instrs(src)

    def test_unbalanced_parens(self):
        with pytest.raises(InstrSyntaxError, match="unreadable"):
            parse_instrs("(br 0")

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            parse_instrs("(br)")
