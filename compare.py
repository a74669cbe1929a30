# compare.py

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from engine import MemoryEngine
from errors import InsufficientMemory, InvalidRequest, OwnerNotFound
from history import HistoryRecorder
from strategies import Strategy, search

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """Where one strategy would place a request, without committing it."""
    strategy: Strategy
    index: int
    block_size: int
    leftover: int
    efficiency: float


def compare_strategies(source, size: int, cursor: Optional[int] = None) -> Dict[Strategy, Optional[Candidate]]:
    """
    Dry-run every strategy for a request of `size` units.

    `source` is a MemoryEngine (its cursor is used for next-fit) or any block
    sequence, e.g. a Snapshot's blocks. Nothing is mutated.
    """
    if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
        raise InvalidRequest(f"Size must be a positive integer, got {size!r}")

    if isinstance(source, MemoryEngine):
        blocks = source.blocks
        cursor = source.cursor if cursor is None else cursor
    else:
        blocks = tuple(source)
        cursor = cursor or 0

    results: Dict[Strategy, Optional[Candidate]] = {}
    for strategy in Strategy:
        index = search(strategy, blocks, size, cursor)
        if index is None:
            results[strategy] = None
            continue
        block_size = blocks[index].size
        results[strategy] = Candidate(
            strategy=strategy,
            index=index,
            block_size=block_size,
            leftover=block_size - size,
            efficiency=round(size * 100.0 / block_size, 2),
        )
    return results


def most_efficient(results: Dict[Strategy, Optional[Candidate]]) -> Optional[Strategy]:
    """Strategy with the smallest leftover; ties go to the earlier strategy."""
    best = None
    for strategy in Strategy:
        candidate = results.get(strategy)
        if candidate is not None and (best is None or candidate.leftover < best.leftover):
            best = candidate
    return best.strategy if best else None


def compare_owner(engine: MemoryEngine, owner_id: str) -> Dict[Strategy, Optional[Candidate]]:
    """Compare placements for a request as large as `owner_id`'s current block."""
    _, block = engine.block_of(owner_id)
    return compare_strategies(engine, block.size)


# -----------------------------
# Workloads
# -----------------------------

@dataclass(frozen=True)
class Request:
    """Allocate `size` units for `owner_id`; a missing or zero size frees it."""
    owner_id: str
    size: Optional[int] = None

    @property
    def is_free(self) -> bool:
        return not self.size


@dataclass
class WorkloadResult:
    strategy: Strategy
    external_frag: List[int] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    history: HistoryRecorder = field(default_factory=HistoryRecorder)


def run_workload(
    requests: Iterable[Request],
    strategy,
    total_size: int,
    initial_layout: Optional[Sequence] = None,
) -> WorkloadResult:
    """
    Replay `requests` on a fresh engine, recording a snapshot after each one.

    Failed requests are collected in `failed` and the run continues.
    """
    strategy = Strategy.parse(strategy)
    engine = MemoryEngine(total_size, initial_layout)
    result = WorkloadResult(strategy=strategy, history=engine.history)

    for request in requests:
        try:
            if request.is_free:
                engine.free(request.owner_id)
                label = f"free {request.owner_id}"
            else:
                engine.allocate(request.owner_id, request.size, strategy)
                label = f"allocate {request.owner_id} ({request.size})"
        except (InvalidRequest, InsufficientMemory, OwnerNotFound) as exc:
            result.failed.append(request.owner_id)
            label = f"failed {request.owner_id}: {exc.kind}"
        engine.record_step(label)
        result.external_frag.append(engine.get_stats().external_frag)

    logger.debug(
        "Workload finished: strategy=%s steps=%d failed=%d",
        strategy.value, len(result.external_frag), len(result.failed),
    )
    return result


def sweep(
    requests: Sequence[Request],
    total_size: int,
    initial_layout: Optional[Sequence] = None,
) -> Dict[Strategy, WorkloadResult]:
    """Run the same workload under every strategy."""
    requests = list(requests)
    return {
        strategy: run_workload(requests, strategy, total_size, initial_layout)
        for strategy in Strategy
    }
