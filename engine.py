# engine.py

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from errors import InsufficientMemory, InvalidRequest, LayoutError, OwnerNotFound
from history import HistoryRecorder, Replay, Snapshot
from stats import Statistics, compute_stats
from strategies import Strategy, search

logger = logging.getLogger(__name__)

DEFAULT_TOTAL_SIZE = 10240

# Mixed used/free layout for demonstrations (sums to DEFAULT_TOTAL_SIZE)
SAMPLE_LAYOUT = (
    (800, "P1"),
    (300, None),
    (1200, "P2"),
    (500, None),
    (700, "P3"),
    (400, None),
    (900, "P4"),
    (5440, None),
)


@dataclass(frozen=True)
class Block:
    """
    A contiguous run of the address space, either free or owned.

    Attributes:
        size (int): Length in size units, at least 1
        free (bool): True if nobody owns the block
        owner_id (Optional[str]): Owner of an allocated block, None when free
        allocated_by (Optional[Strategy]): Strategy that placed the block,
            kept for legends only
    """
    size: int
    free: bool = True
    owner_id: Optional[str] = None
    allocated_by: Optional[Strategy] = None

    def __post_init__(self):
        if isinstance(self.size, bool) or not isinstance(self.size, int) or self.size < 1:
            raise InvalidRequest(f"Block size must be a positive integer, got {self.size!r}")
        if self.free and (self.owner_id is not None or self.allocated_by is not None):
            raise InvalidRequest("A free block cannot have an owner")
        if not self.free and self.owner_id is None:
            raise InvalidRequest("An allocated block needs an owner")

    def __repr__(self):
        state = "F" if self.free else f"A:{self.owner_id}"
        return f"[{state}|{self.size}]"


def _check_size(size, what: str = "Size") -> None:
    if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
        raise InvalidRequest(f"{what} must be a positive integer, got {size!r}")


def _check_owner(owner_id) -> None:
    if not isinstance(owner_id, str) or not owner_id.strip():
        raise InvalidRequest(f"Owner id must be a non-empty string, got {owner_id!r}")


def _coalesce(blocks: List[Block]) -> Tuple[List[Block], List[int]]:
    """
    Merge every run of adjacent free blocks into one.

    Returns the merged list plus, for each old index, the index of the block
    that now covers it.
    """
    merged: List[Block] = []
    index_map: List[int] = []

    for block in blocks:
        if block.free and merged and merged[-1].free:
            merged[-1] = Block(merged[-1].size + block.size)
        else:
            merged.append(block)
        index_map.append(len(merged) - 1)

    return merged, index_map


_LAYOUT_KEYS = {"size", "owner_id", "ownerId"}


def _parse_layout(total_size: int, layout) -> List[Block]:
    blocks: List[Block] = []
    owners = set()

    for position, entry in enumerate(layout):
        if isinstance(entry, Mapping):
            unknown = set(entry) - _LAYOUT_KEYS
            if unknown:
                raise LayoutError(f"Layout entry {position} has unknown keys: {sorted(map(str, unknown))}")
            if "owner_id" in entry and "ownerId" in entry:
                raise LayoutError(f"Layout entry {position} sets both owner_id and ownerId")
            size = entry.get("size")
            owner_id = entry.get("owner_id", entry.get("ownerId"))
        else:
            try:
                size, owner_id = entry
            except (TypeError, ValueError):
                raise LayoutError(f"Layout entry {position} is not a (size, owner_id) pair: {entry!r}") from None

        try:
            _check_size(size, f"Layout entry {position} size")
            if owner_id is not None:
                _check_owner(owner_id)
        except InvalidRequest as exc:
            raise LayoutError(str(exc)) from None

        if owner_id is not None:
            if owner_id in owners:
                raise LayoutError(f"Owner {owner_id!r} appears more than once in the layout")
            owners.add(owner_id)
            blocks.append(Block(size, free=False, owner_id=owner_id))
        else:
            blocks.append(Block(size))

    if not blocks:
        raise LayoutError("Layout must contain at least one block")

    layout_total = sum(b.size for b in blocks)
    if layout_total != total_size:
        raise LayoutError(f"Layout sizes sum to {layout_total}, expected {total_size}")

    merged, _ = _coalesce(blocks)
    return merged


class MemoryEngine:
    """
    One contiguous-allocation simulation session.

    Owns the block list, the next-fit search cursor and the step history.
    Every public mutation either commits fully or raises a SimulationError
    before touching any state. Not thread-safe: callers serialize access.
    """

    def __init__(self, total_size: int = DEFAULT_TOTAL_SIZE, initial_layout=None):
        try:
            _check_size(total_size, "Total size")
        except InvalidRequest as exc:
            raise LayoutError(str(exc)) from None

        self.total_size = total_size
        if initial_layout is None:
            self._initial: Tuple[Block, ...] = (Block(total_size),)
        else:
            self._initial = tuple(_parse_layout(total_size, initial_layout))
        self.history = HistoryRecorder()
        self.reset()
        logger.info("Memory session created: total=%d blocks=%d", total_size, len(self._initial))

    @classmethod
    def with_sample_layout(cls) -> "MemoryEngine":
        return cls(sum(size for size, _ in SAMPLE_LAYOUT), SAMPLE_LAYOUT)

    def reset(self):
        """Restore the initial layout, clear the cursor and the history."""
        self._blocks: List[Block] = list(self._initial)
        self._cursor = 0
        self.history.reset()
        logger.debug("Memory session reset: total=%d", self.total_size)

    # -----------------------------
    # Read-only views
    # -----------------------------
    @property
    def blocks(self) -> Tuple[Block, ...]:
        return tuple(self._blocks)

    def get_blocks(self) -> Tuple[Block, ...]:
        return self.blocks

    @property
    def cursor(self) -> int:
        return self._cursor

    def layout(self) -> Iterator[Tuple[int, Block]]:
        """Yield (start address, block) pairs in address order."""
        start = 0
        for block in self._blocks:
            yield start, block
            start += block.size

    def owners(self) -> Tuple[str, ...]:
        return tuple(b.owner_id for b in self._blocks if not b.free)

    def _index_of(self, owner_id) -> Optional[int]:
        for i, block in enumerate(self._blocks):
            if not block.free and block.owner_id == owner_id:
                return i
        return None

    def block_of(self, owner_id: str) -> Tuple[int, Block]:
        index = self._index_of(owner_id)
        if index is None:
            raise OwnerNotFound(owner_id)
        return index, self._blocks[index]

    def get_stats(self) -> Statistics:
        return compute_stats(self._blocks)

    # -----------------------------
    # Allocation
    # -----------------------------
    def _validate_request(self, owner_id, size, strategy) -> Strategy:
        strategy = Strategy.parse(strategy)
        _check_owner(owner_id)
        _check_size(size)
        if self._index_of(owner_id) is not None:
            raise InvalidRequest(f"Owner {owner_id!r} already holds a block")
        return strategy

    def find(self, size: int, strategy) -> Optional[int]:
        """
        Return the index the strategy would pick for `size`, or None.

        Nothing is mutated, including the next-fit cursor, so this is the
        "decide" half of a staged allocation.
        """
        strategy = Strategy.parse(strategy)
        _check_size(size)
        return search(strategy, self._blocks, size, self._cursor)

    def commit(self, index: int, owner_id: str, size: int, strategy) -> Block:
        """
        Allocate at a candidate previously returned by find().

        Raises:
            InvalidRequest: If the request is invalid or `index` no longer
                names a free block large enough for `size`
        """
        strategy = self._validate_request(owner_id, size, strategy)
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self._blocks):
            raise InvalidRequest(f"Candidate index {index!r} is out of range")
        block = self._blocks[index]
        if not block.free or block.size < size:
            raise InvalidRequest(f"Block {index} can no longer hold {size} units")
        return self._split(index, owner_id, size, strategy)

    def allocate(self, owner_id: str, size: int, strategy=Strategy.FIRST) -> Block:
        """
        Place `size` units for `owner_id` using `strategy`.

        Returns:
            Block: The committed allocated block

        Raises:
            InvalidRequest: Bad size, unknown strategy or owner already present
            InsufficientMemory: No free block satisfies the strategy
        """
        try:
            strategy = self._validate_request(owner_id, size, strategy)
        except InvalidRequest as exc:
            logger.info("Allocation rejected: %s", exc)
            raise

        index = search(strategy, self._blocks, size, self._cursor)
        if index is None:
            logger.info("Allocation failed: owner=%s size=%d strategy=%s", owner_id, size, strategy.value)
            raise InsufficientMemory(size, strategy)
        return self._split(index, owner_id, size, strategy)

    def _split(self, index: int, owner_id: str, size: int, strategy: Strategy) -> Block:
        block = self._blocks[index]
        remainder = block.size - size
        allocated = Block(size, free=False, owner_id=owner_id, allocated_by=strategy)

        if remainder > 0:
            self._blocks[index:index + 1] = [allocated, Block(remainder)]
            if index < self._cursor:
                self._cursor += 1
        else:
            self._blocks[index] = allocated

        if strategy is Strategy.NEXT:
            self._cursor = index + 1 if index + 1 < len(self._blocks) else 0

        logger.debug(
            "Allocated owner=%s size=%d at block %d (%s), remainder=%d",
            owner_id, size, index, strategy.value, remainder,
        )
        return allocated

    # -----------------------------
    # Release and compaction
    # -----------------------------
    def free(self, owner_id: str) -> Block:
        """
        Release the block held by `owner_id` and coalesce free neighbours.

        Returns:
            Block: The block as it was before release

        Raises:
            OwnerNotFound: If no allocated block belongs to `owner_id`
        """
        index = self._index_of(owner_id)
        if index is None:
            logger.info("Free rejected: owner %r not found", owner_id)
            raise OwnerNotFound(owner_id)

        released = self._blocks[index]
        self._blocks[index] = Block(released.size)
        self._blocks, index_map = _coalesce(self._blocks)

        cursor = index_map[self._cursor] if self._cursor < len(index_map) else 0
        self._cursor = cursor if cursor < len(self._blocks) else 0

        logger.debug("Freed owner=%s size=%d, blocks=%d", owner_id, released.size, len(self._blocks))
        return released

    def compact(self):
        """Move every allocated block to the front, leaving one free block at the end."""
        used = [b for b in self._blocks if not b.free]
        free_total = sum(b.size for b in self._blocks if b.free)

        self._blocks = used + ([Block(free_total)] if free_total > 0 else [])
        self._cursor = 0
        logger.debug("Compacted memory: %d allocated blocks, %d units free", len(used), free_total)

    # -----------------------------
    # History
    # -----------------------------
    def record_step(self, label: Optional[str] = None) -> Snapshot:
        return self.history.record(self._blocks, label)

    @property
    def history_length(self) -> int:
        return len(self.history)

    def get_history_length(self) -> int:
        return len(self.history)

    def get_snapshot_at(self, index: int) -> Snapshot:
        return self.history.snapshot_at(index)

    def replay(self, start: int = 0) -> Replay:
        return self.history.replay_from(start)

    def fragmentation_timeline(self) -> List[int]:
        """External fragmentation for every recorded step, for charting."""
        return [compute_stats(snapshot.blocks).external_frag for snapshot in self.history]
