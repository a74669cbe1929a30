import pytest

from engine import MemoryEngine
from stats import compute_stats


class TestComputeStats:
    def test_split_layout(self, split_engine):
        stats = split_engine.get_stats()
        assert stats.total == 1000
        assert stats.used == 200
        assert stats.free == 800
        assert stats.active == 1
        assert stats.free_blocks == 2
        assert stats.largest_free == 500
        assert stats.external_frag == 300
        assert stats.internal_frag == 0

    def test_percentages(self, split_engine):
        stats = split_engine.get_stats()
        assert stats.used_pct == 20.0
        assert stats.free_pct == 80.0
        assert stats.external_frag_pct == 37.5

    def test_no_free_memory_has_zero_ratios(self):
        engine = MemoryEngine(100)
        engine.allocate("A", 100, "first")
        stats = engine.get_stats()
        assert stats.free == 0
        assert stats.largest_free == 0
        assert stats.external_frag == 0
        assert stats.external_frag_pct == 0.0
        assert stats.used_pct == 100.0

    def test_empty_block_list(self):
        stats = compute_stats([])
        assert stats.total == 0
        assert stats.used_pct == 0.0
        assert stats.free_pct == 0.0

    def test_single_free_block_has_no_external_fragmentation(self, empty_engine):
        stats = empty_engine.get_stats()
        assert stats.external_frag == 0
        assert stats.largest_free == 1000

    def test_sample_layout(self):
        stats = MemoryEngine.with_sample_layout().get_stats()
        assert stats.used == 3600
        assert stats.free == 6640
        assert stats.largest_free == 5440
        assert stats.external_frag == 1200
        assert stats.active == 4

    def test_as_dict(self, split_engine):
        data = split_engine.get_stats().as_dict()
        assert data["external_frag"] == 300
        assert data["used_pct"] == 20.0
        assert set(data) >= {"total", "used", "free", "largest_free", "external_frag_pct"}

    def test_statistics_are_immutable(self, split_engine):
        stats = split_engine.get_stats()
        with pytest.raises(AttributeError):
            stats.used = 0
