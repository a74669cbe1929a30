# history.py

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class Snapshot:
    """
    Frozen copy of the block list at one step of the simulation.

    Blocks are frozen dataclasses held in a tuple, so a snapshot can never be
    altered by later mutations of the live list.
    """
    step: int
    blocks: Tuple
    label: Optional[str] = None

    def __len__(self) -> int:
        return len(self.blocks)


class Replay:
    """Restartable view over snapshots[start:]; each iteration starts over."""

    def __init__(self, snapshots: Sequence[Snapshot], start: int):
        self._snapshots = snapshots
        self.start = start

    def __iter__(self) -> Iterator[Snapshot]:
        for i in range(self.start, len(self._snapshots)):
            yield self._snapshots[i]

    def __len__(self) -> int:
        return max(0, len(self._snapshots) - self.start)


class HistoryRecorder:
    """Append-only timeline of snapshots used for step-by-step playback."""

    def __init__(self):
        self._snapshots: List[Snapshot] = []

    def record(self, blocks: Sequence, label: Optional[str] = None) -> Snapshot:
        snapshot = Snapshot(step=len(self._snapshots), blocks=tuple(blocks), label=label)
        self._snapshots.append(snapshot)
        return snapshot

    def snapshot_at(self, index: int) -> Snapshot:
        if not 0 <= index < len(self._snapshots):
            raise IndexError(f"No snapshot at step {index} (history has {len(self._snapshots)})")
        return self._snapshots[index]

    def replay_from(self, index: int = 0) -> Replay:
        """
        Lazily yield snapshots from `index` to the end.

        The sequence is finite and can be iterated again from the beginning;
        pacing between steps is left to the caller.

        Raises:
            IndexError: If index is negative or past the end of the history
        """
        if not 0 <= index <= len(self._snapshots):
            raise IndexError(f"Cannot replay from step {index}")
        # tuple() freezes the range; later records are not part of this replay
        return Replay(tuple(self._snapshots), index)

    def reset(self) -> None:
        self._snapshots = []

    def __len__(self) -> int:
        return len(self._snapshots)

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(list(self._snapshots))
