"""
wasm_blockstack.block_stack
===========================

The control stack: the scopes open at the current point of a forward
traversal, and the branch/return queries answered against it.

Public API
----------
    BlockStack      - mutable stack of open scopes, one per traversal
    BranchTarget    - result of resolving a branch or return

Typical usage::

    from wasm_blockstack import BlockStack, InstrIdx, Label

    stack = BlockStack(instrs)
    for i, instr in enumerate(instrs):
        idx = InstrIdx(i)
        if instr.kind is InstrKind.LOOP:
            stack.begin_loop(idx)
        elif instr.kind is InstrKind.BR:
            target = stack.br_target(instr.labels[0])
        ...

The caller must report every ``block``/``loop``/``if``/``else``/``end`` in
instruction order; the queries only reflect what has been reported so far.

Implementation notes
--------------------
* Where every ``end`` is lives in the :class:`BeginEndMap` built up front,
  so opening a scope is a dictionary lookup rather than a forward scan.
* ``BranchTarget.absolute_instr`` is the structural instruction itself
  (the ``loop`` for backward branches, the ``end`` otherwise).  Getting to
  the next instruction that actually executes is up to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from wasm_blockstack.begin_end import BeginEndMap, build_begin_end_map
from wasm_blockstack.config import DEFAULT_CONFIG, BlockStackConfig
from wasm_blockstack.errors import (
    ContractViolationError,
    UnbalancedNestingError,
    UnresolvableLabelError,
)
from wasm_blockstack.instructions import Instr, InstrIdx, Label
from wasm_blockstack.scopes import (
    Block,
    Else,
    Function,
    If,
    Loop,
    ScopeRecord,
    branch_destination,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BranchTarget:
    """Where a branch or return goes, and which scopes it leaves.

    Attributes
    ----------
    absolute_instr : InstrIdx
        Resolved position; either a ``loop`` (backward) or an ``end``
        (forward).  Add one to get the next instruction executed.
    ended_blocks : tuple[ScopeRecord, ...]
        Every scope left by the jump, including the target, in the order
        they are left: innermost (current) first, target last.
    """

    absolute_instr: InstrIdx
    ended_blocks: Tuple[ScopeRecord, ...]

    @property
    def target(self) -> ScopeRecord:
        return self.ended_blocks[-1]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "absolute_instr": self.absolute_instr.index,
            "ended_blocks": [b.to_dict() for b in self.ended_blocks],
        }


class BlockStack:
    """Scopes open at the current traversal point, outermost first.

    Parameters
    ----------
    instrs : Sequence[Instr]
        The full instruction sequence of one function, finishing with the
        function's ``end``.
    config : BlockStackConfig, optional
        Indexing and tracing options.
    """

    __slots__ = ("_stack", "_begin_end_map", "_config")

    def __init__(
        self,
        instrs: Sequence[Instr],
        config: Optional[BlockStackConfig] = None,
    ) -> None:
        config = config or DEFAULT_CONFIG
        self._setup(build_begin_end_map(instrs, config), config)

    @classmethod
    def from_begin_end_map(
        cls,
        begin_end_map: BeginEndMap,
        config: Optional[BlockStackConfig] = None,
    ) -> "BlockStack":
        """Fresh stack over an already built map (one map, many traversals)."""
        stack = cls.__new__(cls)
        stack._setup(begin_end_map, config or DEFAULT_CONFIG)
        return stack

    def _setup(self, begin_end_map: BeginEndMap, config: BlockStackConfig) -> None:
        for w in config.validate():
            logger.warning("BlockStackConfig: %s", w)
        self._config = config
        self._begin_end_map = begin_end_map
        self._stack: List[ScopeRecord] = [Function(end=begin_end_map.function_end)]

    # ----- read access ------------------------------------------------------

    @property
    def begin_end_map(self) -> BeginEndMap:
        return self._begin_end_map

    @property
    def depth(self) -> int:
        return len(self._stack)

    def __len__(self) -> int:
        return len(self._stack)

    def __iter__(self) -> Iterator[ScopeRecord]:
        """Iterate outermost (function) to innermost."""
        return iter(self._stack)

    @property
    def top(self) -> ScopeRecord:
        if not self._stack:
            raise ContractViolationError("block stack is empty")
        return self._stack[-1]

    @property
    def function(self) -> Function:
        if not self._stack or not isinstance(self._stack[0], Function):
            raise ContractViolationError("missing function block at the bottom of the block stack")
        return self._stack[0]

    def elements(self) -> Tuple[ScopeRecord, ...]:
        """Open scopes, innermost first."""
        return tuple(reversed(self._stack))

    def __repr__(self) -> str:
        return f"BlockStack({self._stack!r})"

    # ----- opening scopes ---------------------------------------------------

    def _lookup(self, begin: InstrIdx, what: str) -> InstrIdx:
        try:
            return self._begin_end_map[begin]
        except KeyError:
            raise UnbalancedNestingError(
                f"could not find end for {what} begin at {begin!r}"
            ) from None

    def _push(self, scope: ScopeRecord) -> None:
        self._stack.append(scope)
        if self._config.trace_events:
            logger.debug("open %r (depth %d)", scope, len(self._stack))

    def begin_block(self, begin: InstrIdx) -> Block:
        block = Block(begin=begin, end=self._lookup(begin, "block"))
        self._push(block)
        return block

    def begin_loop(self, begin: InstrIdx) -> Loop:
        loop = Loop(begin=begin, end=self._lookup(begin, "loop"))
        self._push(loop)
        return loop

    def begin_if(self, begin_if: InstrIdx) -> If:
        """Open an ``if``; whether it has an ``else`` comes from the map.

        The if's terminator is either its ``else`` or its ``end``.  Only an
        ``else`` is itself a key of the map, so a second lookup tells them
        apart.
        """
        end_or_else = self._lookup(begin_if, "if")
        end = self._begin_end_map.get(end_or_else)
        if end is not None:
            if_ = If(begin_if=begin_if, begin_else=end_or_else, end=end)
        else:
            if_ = If(begin_if=begin_if, begin_else=None, end=end_or_else)
        self._push(if_)
        return if_

    # ----- closing scopes ---------------------------------------------------

    def else_(self) -> If:
        """Swap the open ``if`` for its ``else`` body.

        Returns the closed :class:`If` record, of which the new ``else`` is
        the sibling.
        """
        if not self._stack:
            raise ContractViolationError("expected if on block stack, but stack was empty")
        top = self._stack[-1]
        if not isinstance(top, If) or top.begin_else is None:
            raise ContractViolationError(
                f"expected if with else on block stack, but got {top!r}"
            )
        self._stack.pop()
        self._push(Else(begin_else=top.begin_else, begin_if=top.begin_if, end=top.end))
        return top

    def end(self) -> ScopeRecord:
        """Close and return the innermost open scope."""
        if not self._stack:
            raise UnbalancedNestingError("could not end block, stack was empty")
        scope = self._stack.pop()
        if self._config.trace_events:
            logger.debug("close %r (depth %d)", scope, len(self._stack))
        return scope

    # ----- resolution -------------------------------------------------------

    def br_target(self, label: Label) -> BranchTarget:
        """Resolve a relative *label* at the current point.

        Backward branch for loops, forward for every other scope.
        """
        n = label.depth + 1
        if n > len(self._stack):
            raise UnresolvableLabelError(
                f"cannot find target block for {label!r}, only {len(self._stack)} blocks are open"
            )
        ended_blocks = tuple(reversed(self._stack[-n:]))
        # the last of the ended blocks is the one branched to
        return BranchTarget(branch_destination(ended_blocks[-1]), ended_blocks)

    def br_table_target(self, labels: Sequence[Label]) -> Tuple[BranchTarget, ...]:
        """Resolve every label of a ``br_table``, default label last."""
        return tuple(self.br_target(label) for label in labels)

    def return_target(self) -> BranchTarget:
        """Like :meth:`br_target` for ``return``: every open scope is left."""
        return BranchTarget(self.function.end, self.elements())
