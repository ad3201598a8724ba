"""Block-height clock shared by all ledger components."""

from __future__ import annotations


class BlockClock:
    """Monotonic block height.

    The ledger components only read ``height``. The surrounding environment
    (tests, the replay tool, a chain adapter) advances it.
    """

    def __init__(self, height: int = 0):
        if height < 0:
            raise ValueError(f"block height must be non-negative, got {height}")
        self._height = height

    @property
    def height(self) -> int:
        return self._height

    def advance_to(self, height: int) -> int:
        """Move the clock to ``height``. Staying on the same block is allowed."""
        if height < self._height:
            raise ValueError(
                f"block height cannot move backwards: {height} < {self._height}"
            )
        self._height = height
        return self._height

    def advance(self, blocks: int = 1) -> int:
        if blocks < 0:
            raise ValueError(f"cannot advance by a negative block count: {blocks}")
        self._height += blocks
        return self._height

    def __repr__(self) -> str:
        return f"BlockClock(height={self._height})"


__all__ = ["BlockClock"]
