"""
wasm_blockstack.traversal
=========================

Drives a :class:`BlockStack` in lockstep with a forward pass over an
instruction sequence.  Instrumentation passes that only need "what scope
does this instruction open or close, and where do its branches go" can
consume :func:`walk` instead of calling the stack operations by hand.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Sequence, Tuple

from wasm_blockstack.begin_end import BeginEndMap
from wasm_blockstack.block_stack import BlockStack, BranchTarget
from wasm_blockstack.config import BlockStackConfig
from wasm_blockstack.instructions import Instr, InstrIdx, InstrKind
from wasm_blockstack.scopes import If, ScopeRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TraversalStep:
    """What one instruction did to the block stack.

    Attributes
    ----------
    idx : InstrIdx
        Position of the instruction.
    instr : Instr
        The instruction itself.
    depth : int
        Number of open scopes *before* the instruction took effect.
    scope : ScopeRecord or None
        Scope opened (``block``/``loop``/``if``/``else``) or closed
        (``end``) by the instruction.  The function's final ``end`` reports
        the function scope.
    closed_if : If or None
        For ``else``, the then-body that was closed.
    targets : tuple[BranchTarget, ...]
        Resolved targets of ``br``/``br_if``/``return`` (one) or
        ``br_table`` (one per label, default last).
    """

    idx: InstrIdx
    instr: Instr
    depth: int
    scope: Optional[ScopeRecord] = None
    closed_if: Optional[If] = None
    targets: Tuple[BranchTarget, ...] = ()


def walk(
    instrs: Sequence[Instr],
    config: Optional[BlockStackConfig] = None,
    begin_end_map: Optional[BeginEndMap] = None,
) -> Iterator[TraversalStep]:
    """Yield one :class:`TraversalStep` per instruction of *instrs*.

    Pass *begin_end_map* to reuse a map already built for the same
    sequence.
    """
    if begin_end_map is None:
        stack = BlockStack(instrs, config)
    else:
        stack = BlockStack.from_begin_end_map(begin_end_map, config)
    function_end = stack.begin_end_map.function_end

    for i, instr in enumerate(instrs):
        idx = InstrIdx(i)
        kind = instr.kind
        depth = stack.depth

        if kind is InstrKind.BLOCK:
            yield TraversalStep(idx, instr, depth, scope=stack.begin_block(idx))
        elif kind is InstrKind.LOOP:
            yield TraversalStep(idx, instr, depth, scope=stack.begin_loop(idx))
        elif kind is InstrKind.IF:
            yield TraversalStep(idx, instr, depth, scope=stack.begin_if(idx))
        elif kind is InstrKind.ELSE:
            closed_if = stack.else_()
            yield TraversalStep(idx, instr, depth, scope=stack.top, closed_if=closed_if)
        elif kind is InstrKind.END:
            # the function frame stays on the stack past its own end
            scope = stack.function if idx == function_end else stack.end()
            yield TraversalStep(idx, instr, depth, scope=scope)
        elif kind is InstrKind.BR or kind is InstrKind.BR_IF:
            yield TraversalStep(idx, instr, depth, targets=(stack.br_target(instr.labels[0]),))
        elif kind is InstrKind.BR_TABLE:
            yield TraversalStep(idx, instr, depth, targets=stack.br_table_target(instr.labels))
        elif kind is InstrKind.RETURN:
            yield TraversalStep(idx, instr, depth, targets=(stack.return_target(),))
        else:
            yield TraversalStep(idx, instr, depth)


def resolve_all(
    instrs: Sequence[Instr],
    config: Optional[BlockStackConfig] = None,
) -> Dict[InstrIdx, Tuple[BranchTarget, ...]]:
    """Map every branch and return in *instrs* to its resolved targets."""
    resolved = {step.idx: step.targets for step in walk(instrs, config) if step.targets}
    logger.debug("resolved %d branch/return sites", len(resolved))
    return resolved
