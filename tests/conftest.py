import pytest

from config import Settings
from queue_service import QueueService
from state import QueueState
from timeouts import TimeoutRegistry


class FakeTimer:
    def __init__(self, scheduler, delay, fn):
        self.scheduler = scheduler
        self.delay = delay
        self.fn = fn
        self.due = None
        self.cancelled = False
        self.fired = False

    def start(self):
        self.due = self.scheduler.now + self.delay
        self.scheduler.timers.append(self)

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """threading.Timer 대체: advance()로 가상 시간을 흘려 타이머를 실행"""

    def __init__(self):
        self.now = 0.0
        self.timers = []

    def __call__(self, delay, fn):
        return FakeTimer(self, delay, fn)

    @property
    def pending(self):
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [t for t in self.pending if t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self.now = timer.due
            timer.fired = True
            timer.fn()
        self.now = target


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def notices():
    return []


@pytest.fixture
def service(scheduler, notices):
    state = QueueState()
    return QueueService(
        state=state,
        timeouts=TimeoutRegistry(lock=state.lock, timer_factory=scheduler),
        timeout_seconds=3600,
        notify=notices.append,
    )


@pytest.fixture
def settings():
    return Settings(secret_key="test-secret", default_queue="5v5", queue_timeout_seconds=3600)
