"""
Pytest configuration and shared fixtures.
"""

import sys
from datetime import date
from pathlib import Path

import pytest

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dates import DateRange  # noqa: E402
from store import DateStore  # noqa: E402


@pytest.fixture
def feb_2026():
    """Feb 1 (Sunday) to Feb 28 (Saturday) 2026: four full weeks."""
    return DateRange(date(2026, 2, 1), date(2026, 2, 28))


@pytest.fixture
def store(feb_2026):
    return DateStore(feb_2026)


@pytest.fixture
def recorder():
    """Callable that records every call it receives."""

    class Recorder:
        def __init__(self):
            self.calls = []

        def __call__(self, *args):
            self.calls.append(args)

    return Recorder()
