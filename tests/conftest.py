import pytest

from engine import MemoryEngine


@pytest.fixture
def empty_engine():
    return MemoryEngine(1000)


@pytest.fixture
def split_engine():
    # 300 free, 200 owned by X, 500 free
    return MemoryEngine(1000, [(300, None), (200, "X"), (500, None)])
