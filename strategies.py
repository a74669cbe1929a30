# strategies.py

from enum import Enum
from typing import Callable, Dict, Optional, Sequence

from errors import InvalidRequest


class Strategy(str, Enum):
    """
    Placement rules for choosing which free block receives a request.

    FIRST: lowest-index free block that fits
    NEXT:  like FIRST but resumes from the search cursor and wraps around
    BEST:  fitting block with the smallest leftover
    WORST: largest fitting block
    """
    FIRST = "first"
    NEXT = "next"
    BEST = "best"
    WORST = "worst"

    @property
    def label(self) -> str:
        return f"{self.value.capitalize()}-Fit"

    @classmethod
    def parse(cls, name) -> "Strategy":
        """
        Accept a Strategy or one of its spellings: 'best', 'best-fit',
        'Best-Fit', 'bestFit', 'best_fit'.

        Raises:
            InvalidRequest: If the name does not match any strategy
        """
        if isinstance(name, cls):
            return name
        if isinstance(name, str):
            key = name.strip().lower().replace("-", "").replace("_", "").replace(" ", "")
            if key.endswith("fit"):
                key = key[:-3]
            for strategy in cls:
                if strategy.value == key:
                    return strategy
        raise InvalidRequest(f"Unknown allocation strategy: {name!r}")


def _fits(block, size: int) -> bool:
    return block.free and block.size >= size


# -----------------------------
# Search functions
# -----------------------------
# Each returns the chosen index or None. None of them mutate the block list;
# next-fit only reads the cursor, the engine advances it on commit.

def first_fit(blocks: Sequence, size: int, cursor: int = 0) -> Optional[int]:
    for i, block in enumerate(blocks):
        if _fits(block, size):
            return i
    return None


def next_fit(blocks: Sequence, size: int, cursor: int = 0) -> Optional[int]:
    n = len(blocks)
    if n == 0:
        return None
    start = cursor if 0 <= cursor < n else 0
    for step in range(n):
        i = (start + step) % n
        if _fits(blocks[i], size):
            return i
    return None


def best_fit(blocks: Sequence, size: int, cursor: int = 0) -> Optional[int]:
    best_index = None
    min_diff = None

    for i, block in enumerate(blocks):
        if _fits(block, size):
            diff = block.size - size
            # strictly smaller only, so ties keep the lowest index
            if min_diff is None or diff < min_diff:
                min_diff = diff
                best_index = i

    return best_index


def worst_fit(blocks: Sequence, size: int, cursor: int = 0) -> Optional[int]:
    worst_index = None
    max_size = -1

    for i, block in enumerate(blocks):
        if _fits(block, size) and block.size > max_size:
            max_size = block.size
            worst_index = i

    return worst_index


SEARCHES: Dict[Strategy, Callable[..., Optional[int]]] = {
    Strategy.FIRST: first_fit,
    Strategy.NEXT: next_fit,
    Strategy.BEST: best_fit,
    Strategy.WORST: worst_fit,
}


def search(strategy: Strategy, blocks: Sequence, size: int, cursor: int = 0) -> Optional[int]:
    """Dispatch to the search function for `strategy`."""
    return SEARCHES[strategy](blocks, size, cursor)
