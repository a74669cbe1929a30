# stats.py

from dataclasses import asdict, dataclass
from typing import Dict, Sequence


def _percent(part: int, whole: int) -> float:
    return round(part * 100.0 / whole, 2) if whole > 0 else 0.0


@dataclass(frozen=True)
class Statistics:
    """
    Utilization and fragmentation figures derived from one block list.

    Attributes:
        total (int): Sum of all block sizes
        used (int): Sum of allocated block sizes
        free (int): Sum of free block sizes
        active (int): Number of allocated blocks
        free_blocks (int): Number of free blocks
        largest_free (int): Size of the largest free block, 0 if none
        external_frag (int): Free memory outside the largest free block
        internal_frag (int): Always 0, allocations are never rounded up
    """
    total: int
    used: int
    free: int
    active: int
    free_blocks: int
    largest_free: int
    external_frag: int
    internal_frag: int = 0

    @property
    def used_pct(self) -> float:
        return _percent(self.used, self.total)

    @property
    def free_pct(self) -> float:
        return _percent(self.free, self.total)

    @property
    def external_frag_pct(self) -> float:
        """External fragmentation as a percentage of free memory."""
        return _percent(self.external_frag, self.free)

    def as_dict(self) -> Dict[str, float]:
        data = asdict(self)
        data.update(
            used_pct=self.used_pct,
            free_pct=self.free_pct,
            external_frag_pct=self.external_frag_pct,
        )
        return data


def compute_stats(blocks: Sequence) -> Statistics:
    """Single pass over `blocks`; works on the live list or on a snapshot."""
    used = free = active = free_blocks = largest_free = 0

    for block in blocks:
        if block.free:
            free += block.size
            free_blocks += 1
            if block.size > largest_free:
                largest_free = block.size
        else:
            used += block.size
            active += 1

    return Statistics(
        total=used + free,
        used=used,
        free=free,
        active=active,
        free_blocks=free_blocks,
        largest_free=largest_free,
        external_frag=free - largest_free,
    )
