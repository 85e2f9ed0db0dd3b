"""
wasm_blockstack.scopes
======================

Records for the scopes that can be open on a :class:`BlockStack`.

The set of scope kinds is closed: :data:`ScopeRecord` is the union of the
five frozen record classes below and nothing else.  Code that has to tell
them apart checks with ``isinstance`` and raises ``TypeError`` on anything
outside the union.

  Record     Fields                          Branch to it lands on
  ─────────  ──────────────────────────────  ─────────────────────
  Function   end                             end
  Block      begin, end                      end
  Loop       begin, end                      begin
  If         begin_if, begin_else?, end      end
  Else       begin_else, begin_if, end       end

``to_dict`` produces the JSON shape downstream hooks consume: a ``"type"``
tag, positions as plain ints, and for ``If``/``Else`` the scope's own
opening position under ``"begin"``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from wasm_blockstack.instructions import InstrIdx


def _check_order(begin: InstrIdx, end: InstrIdx) -> None:
    if not begin < end:
        raise ValueError(f"scope begin {begin!r} must precede its end {end!r}")


@dataclass(frozen=True, slots=True)
class Function:
    """Implicit scope of the whole function body."""

    end: InstrIdx

    kind = "function"

    @property
    def begin(self) -> Optional[InstrIdx]:
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "end": self.end.index}


@dataclass(frozen=True, slots=True)
class Block:
    begin: InstrIdx
    end: InstrIdx

    kind = "block"

    def __post_init__(self) -> None:
        _check_order(self.begin, self.end)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "begin": self.begin.index, "end": self.end.index}


@dataclass(frozen=True, slots=True)
class Loop:
    begin: InstrIdx
    end: InstrIdx

    kind = "loop"

    def __post_init__(self) -> None:
        _check_order(self.begin, self.end)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "begin": self.begin.index, "end": self.end.index}


@dataclass(frozen=True, slots=True)
class If:
    """The then-body of an ``if``.

    ``begin_else`` is set exactly when an ``else`` follows the then-body.
    """

    begin_if: InstrIdx
    begin_else: Optional[InstrIdx]
    end: InstrIdx

    kind = "if"

    def __post_init__(self) -> None:
        if self.begin_else is not None:
            _check_order(self.begin_if, self.begin_else)
            _check_order(self.begin_else, self.end)
        else:
            _check_order(self.begin_if, self.end)

    @property
    def begin(self) -> InstrIdx:
        return self.begin_if

    @property
    def has_else(self) -> bool:
        return self.begin_else is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "begin": self.begin_if.index,
            "begin_else": None if self.begin_else is None else self.begin_else.index,
            "end": self.end.index,
        }


@dataclass(frozen=True, slots=True)
class Else:
    """The else-body of an ``if``; remembers the ``if`` it belongs to."""

    begin_else: InstrIdx
    begin_if: InstrIdx
    end: InstrIdx

    kind = "else"

    def __post_init__(self) -> None:
        _check_order(self.begin_if, self.begin_else)
        _check_order(self.begin_else, self.end)

    @property
    def begin(self) -> InstrIdx:
        return self.begin_else

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "begin": self.begin_else.index,
            "begin_if": self.begin_if.index,
            "end": self.end.index,
        }


ScopeRecord = Union[Function, Block, Loop, If, Else]

SCOPE_TYPES = (Function, Block, Loop, If, Else)


def branch_destination(scope: ScopeRecord) -> InstrIdx:
    """Position a branch targeting *scope* resolves to.

    Loops are re-entered at their ``loop`` instruction; every other scope
    is left forward through its ``end``.
    """
    if isinstance(scope, Loop):
        return scope.begin
    if isinstance(scope, (Function, Block, If, Else)):
        return scope.end
    raise TypeError(f"not a scope record: {scope!r}")
