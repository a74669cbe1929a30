import pytest

from engine import Block
from errors import InvalidRequest
from strategies import Strategy, best_fit, first_fit, next_fit, search, worst_fit


def make_blocks(*entries):
    return [Block(size) if owner is None else Block(size, free=False, owner_id=owner) for size, owner in entries]


SPLIT = make_blocks((300, None), (200, "X"), (500, None))


class TestStrategyParse:
    @pytest.mark.parametrize("name", ["best", "Best-Fit", "bestFit", "best_fit", "BEST FIT", Strategy.BEST])
    def test_accepts_common_spellings(self, name):
        assert Strategy.parse(name) is Strategy.BEST

    @pytest.mark.parametrize("name", ["", "fit", "buddy", None, 3])
    def test_rejects_unknown_names(self, name):
        with pytest.raises(InvalidRequest):
            Strategy.parse(name)

    def test_label(self):
        assert Strategy.NEXT.label == "Next-Fit"


class TestFirstFit:
    def test_picks_lowest_fitting_index(self):
        assert first_fit(SPLIT, 300) == 0
        assert first_fit(SPLIT, 400) == 2

    def test_not_found(self):
        assert first_fit(SPLIT, 600) is None

    def test_skips_allocated_blocks(self):
        blocks = make_blocks((500, "A"), (100, None))
        assert first_fit(blocks, 100) == 1


class TestNextFit:
    def test_starts_at_cursor(self):
        assert next_fit(SPLIT, 100, cursor=1) == 2

    def test_wraps_around(self):
        blocks = make_blocks((300, None), (200, "X"), (100, None))
        assert next_fit(blocks, 200, cursor=2) == 0

    def test_not_found_after_full_lap(self):
        assert next_fit(SPLIT, 501, cursor=1) is None

    def test_out_of_range_cursor_starts_at_zero(self):
        assert next_fit(SPLIT, 100, cursor=10) == 0

    def test_empty_list(self):
        assert next_fit([], 1) is None


class TestBestFit:
    def test_exact_fit_wins(self):
        assert best_fit(SPLIT, 500) == 2

    def test_smallest_leftover(self):
        assert best_fit(SPLIT, 200) == 0

    def test_ties_keep_lowest_index(self):
        blocks = make_blocks((300, None), (200, "X"), (300, None))
        assert best_fit(blocks, 100) == 0


class TestWorstFit:
    def test_largest_block(self):
        assert worst_fit(SPLIT, 200) == 2

    def test_ties_keep_lowest_index(self):
        blocks = make_blocks((500, None), (200, "X"), (500, None))
        assert worst_fit(blocks, 100) == 0

    def test_not_found(self):
        assert worst_fit(SPLIT, 1000) is None


def test_search_dispatches_every_strategy():
    for strategy in Strategy:
        assert search(strategy, SPLIT, 500) == 2


def test_search_does_not_mutate_blocks():
    blocks = list(SPLIT)
    for strategy in Strategy:
        search(strategy, blocks, 100, cursor=1)
    assert blocks == SPLIT
