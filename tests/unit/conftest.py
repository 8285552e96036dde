import os
import random
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from fuzzsmt.config.defaults import default_ranges  # noqa: E402
from fuzzsmt.config.generation_config import resolve  # noqa: E402
from fuzzsmt.core.events import RecordingSink  # noqa: E402
from fuzzsmt.core.session import GenerationSession  # noqa: E402


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def session(rng, sink):
    return GenerationSession(rng, sink)


@pytest.fixture
def formula_session(session):
    """A session that is already inside the main formula."""
    session.header("QF_BV")
    session.begin_formula()
    return session


@pytest.fixture
def make_config(rng):
    """Resolve the defaults of a logic, with ``key=(low, high)`` overrides."""

    def make(logic, **bounds):
        ranges = default_ranges(logic)
        for key, (low, high) in bounds.items():
            ranges.bounds[key] = (low, high)
        return resolve(ranges, logic, rng)

    return make
