# errors.py

class SimulationError(Exception):
    """Base class for every outcome the engine reports as a failure."""

    kind = "SimulationError"


class InvalidRequest(SimulationError, ValueError):
    """Bad size, unknown strategy, duplicate owner or stale candidate index."""

    kind = "InvalidRequest"


class LayoutError(InvalidRequest):
    """The initial layout handed to the engine is malformed."""


class InsufficientMemory(SimulationError):
    """No free block satisfies the strategy's predicate."""

    kind = "InsufficientMemory"

    def __init__(self, size, strategy):
        self.size = size
        self.strategy = strategy
        super().__init__(f"No free block can hold {size} units ({strategy.label})")


class OwnerNotFound(SimulationError, KeyError):
    kind = "OwnerNotFound"

    def __init__(self, owner_id):
        self.owner_id = owner_id
        super().__init__(owner_id)

    def __str__(self):
        return f"Owner {self.owner_id!r} not found in memory"
