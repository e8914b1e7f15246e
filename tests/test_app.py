"""
tests/test_app.py

Runs the Streamlit script headless and checks what the sidebar shows.
"""

from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

APP = str(Path(__file__).parent.parent / "app.py")

ENV_NAMES = (
    "RTO_WINDOW_WEEKS", "RTO_MIN_COMPLIANT_DAYS", "DEFAULT_COUNTRY",
    "DEFAULT_COMPANY", "RTO_WEEKS_BACK", "RTO_WEEKS_FORWARD", "RTO_LOG_LEVEL", "RTO_VALIDATION_MODE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def run_app():
    at = AppTest.from_file(APP, default_timeout=60)
    return at.run()


class TestPolicyInputs:

    def test_renders_without_errors(self):
        at = run_app()
        assert not at.exception
        assert at.sidebar.number_input[1].value == 36

    def test_impossible_minimum_is_reported_not_clamped(self, monkeypatch):
        monkeypatch.setenv("RTO_WINDOW_WEEKS", "2")
        monkeypatch.setenv("RTO_MIN_COMPLIANT_DAYS", "11")
        at = run_app()
        assert not at.exception
        assert at.sidebar.number_input[1].value == 11
        assert at.session_state["monitor"].settings.min_compliant_days == 11
        assert any("cannot fit" in e.value for e in at.sidebar.error)
