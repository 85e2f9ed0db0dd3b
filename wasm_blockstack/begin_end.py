"""
wasm_blockstack.begin_end
=========================

Pairs every structured begin with its terminator in one forward pass.

A ``block``, ``loop`` or ``if`` is paired with the ``else`` or ``end`` that
closes its body; an ``else`` is itself a begin, paired with the ``end`` that
closes the else-body.  The resulting :class:`BeginEndMap` is built once per
instruction sequence and never changes, so any number of traversals over
the same sequence can share it.

The last instruction of the sequence is the function's own ``end``.  It is
recorded as :attr:`BeginEndMap.function_end` and excluded from the scan.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Mapping, Optional, Sequence

from wasm_blockstack.config import DEFAULT_CONFIG, BlockStackConfig
from wasm_blockstack.errors import UnbalancedNestingError
from wasm_blockstack.instructions import BEGIN_KINDS, Instr, InstrIdx, InstrKind

logger = logging.getLogger(__name__)


class BeginEndMap(Mapping[InstrIdx, InstrIdx]):
    """Read-only mapping from begin-class positions to their terminators."""

    __slots__ = ("_pairs", "_function_end")

    def __init__(self, pairs: Mapping[InstrIdx, InstrIdx], function_end: InstrIdx) -> None:
        self._pairs: Dict[InstrIdx, InstrIdx] = dict(pairs)
        self._function_end: InstrIdx = function_end

    @property
    def function_end(self) -> InstrIdx:
        """Position of the function's own closing ``end``."""
        return self._function_end

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BeginEndMap):
            return self._function_end == other._function_end and self._pairs == other._pairs
        return super().__eq__(other)

    __hash__ = None  # type: ignore[assignment]

    def __getitem__(self, begin: InstrIdx) -> InstrIdx:
        return self._pairs[begin]

    def __iter__(self) -> Iterator[InstrIdx]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __repr__(self) -> str:
        inner = ", ".join(f"{b!r}->{e!r}" for b, e in sorted(self._pairs.items()))
        return f"BeginEndMap({{{inner}}}, function_end={self.function_end!r})"


def build_begin_end_map(
    instrs: Sequence[Instr],
    config: Optional[BlockStackConfig] = None,
) -> BeginEndMap:
    """Scan *instrs* and return the begin→end/else map.

    Raises
    ------
    UnbalancedNestingError
        If the sequence is empty, does not finish with ``end`` (when
        ``config.require_final_end``), closes more scopes than it opens, or
        leaves scopes open.
    """
    config = config or DEFAULT_CONFIG
    if not instrs:
        raise UnbalancedNestingError("empty instruction sequence has no function end")
    last = instrs[-1]
    if config.require_final_end and last.kind is not InstrKind.END:
        raise UnbalancedNestingError(
            f"instruction sequence must finish with end, got {last.name} at #{len(instrs) - 1}"
        )

    pairs: Dict[InstrIdx, InstrIdx] = {}
    pending: List[InstrIdx] = []
    for i, instr in enumerate(instrs[:-1]):
        idx = InstrIdx(i)
        kind = instr.kind
        if kind in BEGIN_KINDS:
            pending.append(idx)
        elif kind is InstrKind.ELSE or kind is InstrKind.END:
            if not pending:
                raise UnbalancedNestingError(
                    f"{kind.value} at {idx!r} closes a block, but no block is open"
                )
            pairs[pending.pop()] = idx
            # else closes the if-body and opens its own body
            if kind is InstrKind.ELSE:
                pending.append(idx)

    if pending:
        raise UnbalancedNestingError(
            f"some blocks were not closed, still open at end: {pending!r}"
        )

    logger.debug("indexed %d begin/end pairs over %d instructions", len(pairs), len(instrs))
    return BeginEndMap(pairs, InstrIdx(len(instrs) - 1))
