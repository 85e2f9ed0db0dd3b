# wasm_blockstack/config.py
"""Tuning knobs for building and driving a :class:`BlockStack`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class BlockStackConfig:
    """Options shared by the indexer, the stack and the traversal driver.

    Attributes
    ----------
    require_final_end : bool
        Reject sequences whose last instruction is not the function's
        closing ``end``.  Turning this off restores the bare behaviour of
        excluding the last instruction whatever it is.
    trace_events : bool
        Log every scope open/close at DEBUG level.
    """

    require_final_end: bool = True
    trace_events: bool = False

    def validate(self) -> List[str]:
        """Return a list of validation warnings (empty if valid)."""
        warnings: List[str] = []
        if not self.require_final_end:
            warnings.append(
                "require_final_end is off: the last instruction is treated "
                "as the function end without being checked"
            )
        return warnings


DEFAULT_CONFIG = BlockStackConfig()
