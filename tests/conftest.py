# tests/conftest.py
import pytest

from repertoire_trainer.config.settings import PracticeSettings
from repertoire_trainer.services.move_oracle import ChessMoveOracle


class ManualHandle:
    def __init__(self, delay_s, callback):
        self.delay_s = delay_s
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """A scheduler whose delayed callbacks only run when a test fires them."""

    def __init__(self):
        self.handles = []

    def schedule(self, delay_s, callback):
        handle = ManualHandle(delay_s, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self.handles if not h.cancelled]

    def fire_next(self):
        handle = self.pending[0]
        self.handles.remove(handle)
        handle.callback()
        return handle

    def run_all(self, max_steps=50):
        steps = 0
        while self.pending and steps < max_steps:
            self.fire_next()
            steps += 1
        return steps


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def oracle():
    return ChessMoveOracle()


@pytest.fixture
def practice_settings():
    return PracticeSettings(default_max_depth=0)
