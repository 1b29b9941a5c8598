# state.py
import threading
from typing import Callable

from models import Store
from queue_store import EMPTY_STORE


class QueueState:
    """프로세스 단위 큐 상태 (Store 스냅샷 + 공유 락)"""

    def __init__(self, store: Store = EMPTY_STORE):
        self._store = store
        # 🔥 TimeoutRegistry도 같은 락을 사용 (타이머 콜백과 명령 처리 직렬화)
        self.lock = threading.RLock()

    @property
    def store(self) -> Store:
        return self._store

    def swap(self, update: Callable[[Store], Store]) -> Store:
        """update(현재 Store) 결과로 Store를 통째로 교체하고 새 Store를 반환"""
        with self.lock:
            self._store = update(self._store)
            return self._store
