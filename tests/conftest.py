from datetime import datetime, timedelta

import pytest

from database import MemoryBlobStore
from schemas import Habit
from store import HabitStore


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, days: int = 0, **kwargs):
        self.now += timedelta(days=days, **kwargs)


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 3, 13, 9, 30))


@pytest.fixture
def blobs():
    return MemoryBlobStore()


@pytest.fixture
def store(clock, blobs):
    return HabitStore(persistence=blobs, clock=clock)


@pytest.fixture
def make_habit():
    def factory(habit_id="1", created_at="2024-03-01", dates=(), **fields):
        fields.setdefault("title", f"Habit {habit_id}")
        fields.setdefault("total_completions", len(dates))
        return Habit(id=habit_id, created_at=created_at, completed_dates=list(dates), **fields)

    return factory
