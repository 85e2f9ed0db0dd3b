"""
wasm_blockstack — Control-Stack Resolution for Structured Bytecode
==================================================================

Turns the implicit nesting of ``block``/``loop``/``if``/``else``/``end``
in a flat instruction sequence into explicit, queryable relationships:
which begin matches which end, and where a relative branch or a return
lands together with the scopes it leaves.

Core modules
------------
begin_end
    One-pass indexer pairing every structured begin with its terminator.
block_stack
    The stack of open scopes and the branch/return resolver.
scopes
    The closed set of scope records (function, block, loop, if, else).
instructions
    Instruction model and the position/label newtypes.
traversal
    Lockstep driver yielding one step per instruction.
text
    Flat s-expression listing reader for fixtures and debugging.

Quick start
-----------
>>> from wasm_blockstack import BlockStack, InstrIdx, Label, parse_instrs
>>> stack = BlockStack(parse_instrs("loop (br 0) end end"))
>>> _ = stack.begin_loop(InstrIdx(0))
>>> stack.br_target(Label(0)).absolute_instr
#0
"""

from __future__ import annotations

from typing import List

from wasm_blockstack.begin_end import BeginEndMap, build_begin_end_map
from wasm_blockstack.block_stack import BlockStack, BranchTarget
from wasm_blockstack.config import BlockStackConfig
from wasm_blockstack.errors import (
    BlockStackError,
    ContractViolationError,
    UnbalancedNestingError,
    UnresolvableLabelError,
)
from wasm_blockstack.instructions import Instr, InstrIdx, InstrKind, Label
from wasm_blockstack.scopes import Block, Else, Function, If, Loop, ScopeRecord
from wasm_blockstack.text import InstrSyntaxError, parse_instrs
from wasm_blockstack.traversal import TraversalStep, resolve_all, walk

__version__ = "0.1.0"
__license__ = "MIT"

__all__: List[str] = [
    "BeginEndMap",
    "Block",
    "BlockStack",
    "BlockStackConfig",
    "BlockStackError",
    "BranchTarget",
    "ContractViolationError",
    "Else",
    "Function",
    "If",
    "Instr",
    "InstrIdx",
    "InstrKind",
    "InstrSyntaxError",
    "Label",
    "Loop",
    "ScopeRecord",
    "TraversalStep",
    "UnbalancedNestingError",
    "UnresolvableLabelError",
    "build_begin_end_map",
    "parse_instrs",
    "resolve_all",
    "walk",
]
