import pytest

from history import HistoryRecorder


class TestHistoryRecorder:
    def test_record_assigns_steps(self, empty_engine):
        first = empty_engine.record_step("start")
        empty_engine.allocate("A", 100, "first")
        second = empty_engine.record_step()
        assert (first.step, second.step) == (0, 1)
        assert first.label == "start"
        assert empty_engine.history_length == 2
        assert empty_engine.get_history_length() == 2

    def test_snapshot_not_affected_by_later_mutation(self, empty_engine):
        snapshot = empty_engine.record_step()
        empty_engine.allocate("A", 100, "first")
        empty_engine.compact()
        assert [(b.size, b.free) for b in snapshot.blocks] == [(1000, True)]
        assert empty_engine.get_snapshot_at(0) is snapshot

    def test_snapshot_at_out_of_range(self, empty_engine):
        with pytest.raises(IndexError):
            empty_engine.get_snapshot_at(0)

    def test_replay_from_index(self, empty_engine):
        for owner in ("A", "B", "C"):
            empty_engine.allocate(owner, 100, "first")
            empty_engine.record_step(owner)
        replay = empty_engine.replay(1)
        assert [s.label for s in replay] == ["B", "C"]
        assert len(replay) == 2

    def test_replay_is_restartable(self, empty_engine):
        empty_engine.record_step()
        empty_engine.record_step()
        replay = empty_engine.replay()
        assert list(replay) == list(replay)

    def test_replay_ignores_later_records(self, empty_engine):
        empty_engine.record_step()
        replay = empty_engine.replay()
        empty_engine.record_step()
        assert len(list(replay)) == 1

    def test_replay_from_end_is_empty(self, empty_engine):
        empty_engine.record_step()
        assert list(empty_engine.replay(1)) == []

    @pytest.mark.parametrize("start", [-1, 2])
    def test_replay_bad_start(self, empty_engine, start):
        empty_engine.record_step()
        with pytest.raises(IndexError):
            empty_engine.replay(start)

    def test_reset_discards_snapshots(self):
        recorder = HistoryRecorder()
        recorder.record([])
        recorder.reset()
        assert len(recorder) == 0

    def test_fragmentation_timeline(self, split_engine):
        split_engine.record_step()
        split_engine.allocate("Y", 500, "best")
        split_engine.record_step()
        split_engine.compact()
        split_engine.record_step()
        assert split_engine.fragmentation_timeline() == [300, 0, 0]
