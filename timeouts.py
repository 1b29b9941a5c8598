# timeouts.py
import logging
import threading
from typing import Callable, Dict, Optional, Protocol

from models import QueueKey

log = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]

# 반환값이 있으면 lock 해제 후 실행되는 후속 작업
ExpireCallback = Callable[[], Optional[Callable[[], None]]]


def _thread_timer(delay: float, fn: Callable[[], None]) -> TimerHandle:
    timer = threading.Timer(delay, fn)
    timer.daemon = True
    return timer


class TimeoutRegistry:
    """
    큐 키마다 대기 중인 만료 타이머를 최대 1개 관리.

    arm()은 항상 기존 타이머를 취소한 뒤 새로 예약하므로 타이머가 쌓이지 않는다.
    만료 콜백이 실행될 때 레지스트리는 이미 해당 타이머를 잊은 상태이며,
    콜백은 생성자에 전달된 lock을 잡은 채로 실행된다.
    콜백이 callable을 반환하면 그것은 lock을 놓은 뒤에 실행된다 (알림 전송 등 느린 작업용).

    delay <= 0 이면 타이머를 만들지 않고 콜백을 즉시(동기적으로) 실행한다.
    """

    def __init__(self, lock=None, timer_factory: Optional[TimerFactory] = None):
        self._lock = lock if lock is not None else threading.RLock()
        self._timer_factory = timer_factory or _thread_timer
        self._timers: Dict[QueueKey, TimerHandle] = {}

    def clear(self, room_id: int, queue_name: str) -> None:
        with self._lock:
            timer = self._timers.pop((room_id, queue_name), None)
            if timer:
                timer.cancel()
                log.debug(f"⏹️ [Timeout] cleared {queue_name} in room {room_id}")

    def arm(self, room_id: int, queue_name: str, delay: float, on_expire: ExpireCallback) -> None:
        key = (room_id, queue_name)
        after = None
        with self._lock:
            self.clear(room_id, queue_name)

            if delay <= 0:
                log.debug(f"⏰ [Timeout] non-positive delay for {queue_name} in room {room_id}, firing now")
                after = on_expire()
            else:
                self._schedule(key, delay, on_expire)

        if after is not None:
            after()

    def _schedule(self, key: QueueKey, delay: float, on_expire: ExpireCallback) -> None:
        timer = None

        def _fire():
            with self._lock:
                # 이미 교체/취소된 타이머라면 무시
                if self._timers.get(key) is not timer:
                    return
                del self._timers[key]
                after = on_expire()

            if after is not None:
                after()

        timer = self._timer_factory(delay, _fire)
        self._timers[key] = timer
        timer.start()
        log.debug(f"⏳ [Timeout] armed {key[1]} in room {key[0]} ({delay}s)")

    def is_pending(self, room_id: int, queue_name: str) -> bool:
        with self._lock:
            return (room_id, queue_name) in self._timers

    def pending_count(self) -> int:
        with self._lock:
            return len(self._timers)

    def cancel_all(self) -> None:
        with self._lock:
            for timer in self._timers.values():
                timer.cancel()
            self._timers.clear()
