# wasm_blockstack/errors.py
"""
Error types for block-stack resolution.

Every condition raised here is an input-contract violation: the decoder
produced an instruction sequence that does not nest, or the caller drove
the stack out of step with the instruction order.  None of them is
recoverable, so nothing in this package catches them.

Error Hierarchy:
────────────────
    BlockStackError (base)
    ├── UnbalancedNestingError   - begin/end pairs do not match up
    ├── UnresolvableLabelError   - branch label deeper than the open scopes
    └── ContractViolationError   - else/return driven against the wrong top

Each class carries a stable ``code`` (``WBS-XXXX``) so callers that log or
report failures can key on it instead of on message text.
"""

from __future__ import annotations

from typing import ClassVar


class BlockStackError(Exception):
    """Base class for all block-stack failures."""

    code: ClassVar[str] = "WBS-1000"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class UnbalancedNestingError(BlockStackError):
    """Structured begins and ends do not pair up."""

    code: ClassVar[str] = "WBS-1001"


class UnresolvableLabelError(BlockStackError):
    """A relative label points past the outermost open scope."""

    code: ClassVar[str] = "WBS-1002"


class ContractViolationError(BlockStackError):
    """The traversal called an operation the current stack cannot satisfy."""

    code: ClassVar[str] = "WBS-1003"


__all__ = [
    "BlockStackError",
    "UnbalancedNestingError",
    "UnresolvableLabelError",
    "ContractViolationError",
]
