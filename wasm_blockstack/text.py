"""
wasm_blockstack.text
====================

Reads flat instruction listings written as s-expression atoms and forms::

    block
      loop
        (br_if 1)
        (br 0)
      end
    end
    end

Bare symbols are instructions without immediates; a form's head is the
mnemonic and the rest its immediates.  ``br``/``br_if``/``br_table``
immediates must be non-negative integers (``br_table``'s last one is the
default).  Every other mnemonic becomes an ``OTHER`` instruction and its
immediates are dropped, since nesting does not depend on them.

This is a convenience for fixtures and debugging, not a bytecode decoder.
"""

from __future__ import annotations

from typing import Any, List

import sexpdata
from sexpdata import Symbol

from wasm_blockstack.instructions import Instr, InstrKind, Label

# Raw sexpdata output: list, Symbol, str, int, float, bool
Sexp = Any

_KINDS_BY_MNEMONIC = {kind.value: kind for kind in InstrKind if kind is not InstrKind.OTHER}

_LABELLED_KINDS = (InstrKind.BR, InstrKind.BR_IF, InstrKind.BR_TABLE)


class InstrSyntaxError(ValueError):
    """Raised when a listing item cannot be read as an instruction."""


def _sym_name(s: Sexp) -> str:
    """Name of a ``sexpdata.Symbol``, or raise."""
    if isinstance(s, Symbol):
        return str(s)
    raise InstrSyntaxError(f"expected mnemonic, got {type(s).__name__}: {s!r}")


def _label(s: Sexp, mnemonic: str) -> Label:
    if isinstance(s, bool) or not isinstance(s, int) or s < 0:
        raise InstrSyntaxError(f"{mnemonic} expects non-negative integer labels, got {s!r}")
    return Label(s)


def _instr(name: str, immediates: List[Sexp]) -> Instr:
    kind = _KINDS_BY_MNEMONIC.get(name)
    if kind is None:
        return Instr(InstrKind.OTHER, mnemonic=name)
    if kind in _LABELLED_KINDS:
        labels = tuple(_label(s, name) for s in immediates)
        if kind is InstrKind.BR_TABLE:
            if not labels:
                raise InstrSyntaxError("br_table needs at least a default label")
        elif len(labels) != 1:
            raise InstrSyntaxError(f"{name} takes exactly one label, got {len(labels)}")
        return Instr(kind, labels)
    # block types and other immediates do not affect nesting
    return Instr(kind)


def parse_instrs(text: str) -> List[Instr]:
    """Read every instruction of a flat listing, in order."""
    # keep "nil" and "t" as symbols; they are ordinary mnemonics here
    try:
        items = sexpdata.loads(f"({text}\n)", nil=None, true=None, false=None)
    except Exception as exc:
        raise InstrSyntaxError(f"unreadable instruction listing: {exc}") from exc

    instrs: List[Instr] = []
    for item in items:
        if isinstance(item, list):
            if not item:
                raise InstrSyntaxError("empty form in instruction listing")
            instrs.append(_instr(_sym_name(item[0]), item[1:]))
        else:
            if _KINDS_BY_MNEMONIC.get(_sym_name(item)) in _LABELLED_KINDS:
                raise InstrSyntaxError(f"{_sym_name(item)} needs its labels, write ({_sym_name(item)} N)")
            instrs.append(_instr(_sym_name(item), []))
    return instrs
