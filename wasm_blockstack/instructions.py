"""
wasm_blockstack/instructions.py
═══════════════════════════════

Minimal instruction model consumed by the indexer and the traversal
driver.  The decoder that produces real instructions lives elsewhere; all
this package needs from an instruction is its *kind* and, for branches,
its relative labels.

Structural kinds
────────────────

  Kind       Opens scope   Closes scope
  ─────────  ────────────  ──────────────────────────
  BLOCK      yes           -
  LOOP       yes           -
  IF         yes           -
  ELSE       yes (else)    yes (if-body)
  END        -             yes (innermost open scope)

Positions and labels are different types: ``InstrIdx`` is an index into
the flat sequence, ``Label`` a depth counted outward from the innermost
open scope.  Neither is an ``int``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import FrozenSet, Tuple


# ---------------------------------------------------------------------------
# Position / label newtypes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True, order=True)
class InstrIdx:
    """Position of an instruction in the flat sequence."""

    index: int

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"instruction index must be non-negative, got {self.index}")

    def __int__(self) -> int:
        return self.index

    def __repr__(self) -> str:
        return f"#{self.index}"


@dataclass(frozen=True, slots=True)
class Label:
    """Relative branch depth; 0 is the innermost open scope."""

    depth: int

    def __post_init__(self) -> None:
        if self.depth < 0:
            raise ValueError(f"label depth must be non-negative, got {self.depth}")

    def __int__(self) -> int:
        return self.depth

    def __repr__(self) -> str:
        return f"label {self.depth}"


# ---------------------------------------------------------------------------
# Instruction kinds
# ---------------------------------------------------------------------------


class InstrKind(enum.Enum):
    """Classification of an instruction as far as nesting is concerned."""

    BLOCK = "block"
    LOOP = "loop"
    IF = "if"
    ELSE = "else"
    END = "end"
    BR = "br"
    BR_IF = "br_if"
    BR_TABLE = "br_table"
    RETURN = "return"
    NOP = "nop"
    OTHER = "other"


BEGIN_KINDS: FrozenSet[InstrKind] = frozenset(
    {InstrKind.BLOCK, InstrKind.LOOP, InstrKind.IF}
)

STRUCTURAL_KINDS: FrozenSet[InstrKind] = BEGIN_KINDS | {InstrKind.ELSE, InstrKind.END}

BRANCH_KINDS: FrozenSet[InstrKind] = frozenset(
    {InstrKind.BR, InstrKind.BR_IF, InstrKind.BR_TABLE}
)


@dataclass(frozen=True, slots=True)
class Instr:
    """A single instruction.

    Parameters
    ----------
    kind : InstrKind
        What the instruction does to the scope structure.
    labels : tuple[Label, ...]
        Branch immediates.  ``br``/``br_if`` carry one label; ``br_table``
        carries its table followed by the default label.
    mnemonic : str
        Original opcode name, kept for ``OTHER`` instructions and dumps.
    """

    kind: InstrKind
    labels: Tuple[Label, ...] = ()
    mnemonic: str = ""

    def __post_init__(self) -> None:
        if self.kind in (InstrKind.BR, InstrKind.BR_IF) and len(self.labels) != 1:
            raise ValueError(f"{self.kind.value} takes exactly one label, got {len(self.labels)}")
        if self.kind is InstrKind.BR_TABLE and not self.labels:
            raise ValueError("br_table needs at least a default label")
        if self.kind not in BRANCH_KINDS and self.labels:
            raise ValueError(f"{self.kind.value} does not take labels")

    @property
    def name(self) -> str:
        return self.mnemonic or self.kind.value

    @property
    def is_structural(self) -> bool:
        return self.kind in STRUCTURAL_KINDS

    def __str__(self) -> str:
        if self.labels:
            return f"{self.name} " + " ".join(str(lbl.depth) for lbl in self.labels)
        return self.name


# Convenience constructors ---------------------------------------------------

BLOCK = Instr(InstrKind.BLOCK)
LOOP = Instr(InstrKind.LOOP)
IF = Instr(InstrKind.IF)
ELSE = Instr(InstrKind.ELSE)
END = Instr(InstrKind.END)
RETURN = Instr(InstrKind.RETURN)
NOP = Instr(InstrKind.NOP)


def br(depth: int) -> Instr:
    return Instr(InstrKind.BR, (Label(depth),))


def br_if(depth: int) -> Instr:
    return Instr(InstrKind.BR_IF, (Label(depth),))


def br_table(*depths: int) -> Instr:
    """``br_table`` whose last depth is the default target."""
    return Instr(InstrKind.BR_TABLE, tuple(Label(d) for d in depths))
