# tests/conftest.py
"""
Shared fixtures for the wasm-blockstack test suite.

Listings are written in the flat s-expression form read by
``wasm_blockstack.text.parse_instrs``; the final ``end`` of every listing
is the function's own end.
"""

import pytest

from wasm_blockstack import BlockStack, InstrIdx, parse_instrs


# ── Listings ─────────────────────────────────────────────────────

BLOCK_SRC = "block nop end end"

IF_ELSE_SRC = "if nop else nop end end"

IF_ONLY_SRC = "if nop end end"

LOOP_SRC = "loop nop (br 0) end end"

# 0 block
# 1   loop
# 2     if
# 3       (br 1)
# 4     else
# 5       (br 2)
# 6     end
# 7     (br_if 0)
# 8   end
# 9   return
# 10 end
# 11 end
NESTED_SRC = """
block
  loop
    if
      (br 1)
    else
      (br 2)
    end
    (br_if 0)
  end
  return
end
end
"""

# 0 block
# 1   block
# 2     (br_table 0 1 2)
# 3   end
# 4 end
# 5 end
BR_TABLE_SRC = """
block
  block
    (br_table 0 1 2)
  end
end
end
"""


def idx(n: int) -> InstrIdx:
    """Shorthand for an instruction position."""
    return InstrIdx(n)


# ── Fixtures ─────────────────────────────────────────────────────

@pytest.fixture
def nested_instrs():
    return parse_instrs(NESTED_SRC)


@pytest.fixture
def nested_stack(nested_instrs):
    return BlockStack(nested_instrs)
