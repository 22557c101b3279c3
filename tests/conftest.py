import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dealroom.deals import DealController  # noqa: E402
from dealroom.ledger import InMemoryLedger  # noqa: E402
from dealroom.store import RecordStore  # noqa: E402


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ledger():
    return InMemoryLedger()


@pytest.fixture
def controller(ledger, clock):
    return DealController(RecordStore(ledger), clock=clock)
