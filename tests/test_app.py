from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

APP = str(Path(__file__).resolve().parents[1] / "app.py")


@pytest.fixture
def app():
    at = AppTest.from_file(APP, default_timeout=30)
    at.run()
    return at


def captions(at):
    return [c.value for c in at.caption]


class TestSampleLayout:
    def test_sample_survives_following_reruns(self, app):
        app.number_input(key="total_size").set_value(2048).run()
        assert app.session_state["engine"].total_size == 2048

        app.button(key="load_sample").click().run()
        assert app.session_state["engine"].total_size == 10240
        assert app.number_input(key="total_size").value == 10240

        app.run()
        engine = app.session_state["engine"]
        assert engine.total_size == 10240
        assert engine.owners() == ("P1", "P2", "P3", "P4")


class TestPlaybackSteps:
    def test_step_back_and_forward(self, app):
        app.button(key="load_sample").click().run()
        assert app.session_state["view_step"] is None

        app.button(key="step_back").click().run()
        assert app.session_state["view_step"] == 0
        assert "Viewing step 0 of 0: sample layout" in captions(app)

        # past the last step returns to live memory
        app.button(key="step_forward").click().run()
        assert app.session_state["view_step"] is None
        assert "Live memory (1 recorded steps)" in captions(app)

    def test_stop_returns_to_live(self, app):
        app.button(key="step_back").click().run()
        assert app.session_state["view_step"] == 0
        app.button(key="stop").click().run()
        assert app.session_state["view_step"] is None

    def test_stale_step_is_dropped_after_reset(self, app):
        app.button(key="load_sample").click().run()
        app.button(key="step_back").click().run()
        app.button(key="reset").click().run()
        assert app.session_state["view_step"] is None
        assert app.session_state["engine"].history_length == 1
