# queue_service.py
import logging
from typing import Any, Callable, Dict, Optional

import queue_store
from models import InboundEvent, Member, Notice
from state import QueueState
from timeouts import TimeoutRegistry
from utils import as_int, expired_text, get_max_players, ready_text, status_text

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60 * 60

Notify = Callable[[Notice], None]


def _drop_notice(notice: Notice) -> None:
    log.debug(f"🔕 [Notice] no transport attached, dropped: {notice.text}")


class QueueService:
    """
    join / leave / status 처리 및 큐 만료.

    Store 교체와 타이머 조작은 모두 state.lock 안에서 실행된다.
    명령 처리 결과는 Notice로 반환하고, 타이머 만료 알림은 notify 콜백으로 전달한다.
    """

    def __init__(
        self,
        state: Optional[QueueState] = None,
        timeouts: Optional[TimeoutRegistry] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        notify: Optional[Notify] = None,
        avoid_highlight: bool = False,
    ):
        self.state = state or QueueState()
        self.timeouts = timeouts or TimeoutRegistry(lock=self.state.lock)
        self.timeout_seconds = timeout_seconds
        self.notify = notify or _drop_notice
        self.avoid_highlight = avoid_highlight

    # --- 조회 ---

    def members(self, room_id: int, queue_name: str):
        return queue_store.get_members(self.state.store, room_id, queue_name)

    def count(self, room_id: int, queue_name: str) -> int:
        return queue_store.member_count(self.state.store, room_id, queue_name)

    def _status_notice(self, room_id: int, queue_name: str) -> Notice:
        members = self.members(room_id, queue_name)
        return Notice(room_id, status_text(queue_name, members, self.avoid_highlight))

    # --- 명령 ---

    def join(self, room_id: int, queue_name: str, user_id: int, display_name: str) -> Notice:
        with self.state.lock:
            store = self.state.swap(
                lambda s: queue_store.upsert_member(s, room_id, queue_name, Member(user_id, display_name))
            )
            members = queue_store.get_members(store, room_id, queue_name)
            max_players = get_max_players(queue_name)
            log.info(f"-> [Join] {display_name} ({user_id}) -> {queue_name} in room {room_id}: {len(members)}/{max_players}")

            if len(members) >= max_players:
                # 정원 도달 -> 알림 후 큐 초기화 (타이머 재설정 없음)
                notice = Notice(room_id, ready_text(members))
                self.timeouts.clear(room_id, queue_name)
                self.state.swap(lambda s: queue_store.reset_queue(s, room_id, queue_name))
                log.info(f"🎉 [Ready] {queue_name} in room {room_id}: {notice.text}")
                return notice

            self.timeouts.arm(
                room_id, queue_name, self.timeout_seconds,
                lambda: self._expire(room_id, queue_name),
            )
            return self._status_notice(room_id, queue_name)

    def leave(self, room_id: int, queue_name: str, user_id: int) -> Notice:
        # 나가기는 비활성 타이머를 건드리지 않음
        with self.state.lock:
            self.state.swap(lambda s: queue_store.remove_member(s, room_id, queue_name, user_id))
            log.info(f"<- [Leave] {user_id} <- {queue_name} in room {room_id}")
            return self._status_notice(room_id, queue_name)

    def status(self, room_id: int, queue_name: str) -> Notice:
        with self.state.lock:
            return self._status_notice(room_id, queue_name)

    def _expire(self, room_id: int, queue_name: str) -> Optional[Callable[[], None]]:
        """
        만료 타이머 콜백. TimeoutRegistry가 lock을 잡은 상태로 호출하며 큐 초기화만 한다.
        알림 전송은 반환된 callable로 넘겨서 lock 해제 후 실행되게 한다.
        """
        with self.state.lock:
            had_members = self.count(room_id, queue_name) > 0
            self.state.swap(lambda s: queue_store.reset_queue(s, room_id, queue_name))

        if not had_members:
            return None

        log.info(f"⌛ [Expired] {queue_name} in room {room_id}")
        notice = Notice(room_id, expired_text(queue_name))
        return lambda: self._deliver(notice)

    def _deliver(self, notice: Notice) -> None:
        try:
            self.notify(notice)
        except Exception:
            log.exception(f"❌ Failed to deliver notice to room {notice.room_id}: {notice.text}")

    # --- 인바운드 이벤트 ---

    def handle(self, event: InboundEvent) -> Notice:
        if event.command == "join":
            return self.join(event.room_id, event.queue_name, event.user_id, event.display_name)
        if event.command == "leave":
            return self.leave(event.room_id, event.queue_name, event.user_id)
        return self.status(event.room_id, event.queue_name)

    def handle_event(self, data: Dict[str, Any]) -> Optional[Notice]:
        """dict 형태의 인바운드 이벤트 처리. 필수 필드가 없으면 조용히 무시(None)."""
        event = parse_event(data)
        if event is None:
            log.debug(f"🙈 [Event] malformed event ignored: {data}")
            return None
        return self.handle(event)

    def shutdown(self) -> None:
        self.timeouts.cancel_all()


def parse_event(data: Dict[str, Any]) -> Optional[InboundEvent]:
    """{command, roomId, queueName, userId, displayName} -> InboundEvent (잘못된 입력이면 None)"""
    if not isinstance(data, dict):
        return None

    command = data.get("command")
    room_id = as_int(data.get("roomId"))
    queue_name = data.get("queueName")
    user_id = as_int(data.get("userId"))
    display_name = data.get("displayName")

    if command not in ("join", "leave", "status"):
        return None
    if room_id is None or not isinstance(queue_name, str) or not queue_name:
        return None
    if command != "status":
        if user_id is None:
            return None
    if command == "join" and (not isinstance(display_name, str) or not display_name):
        return None

    return InboundEvent(
        command=command,
        room_id=room_id,
        queue_name=queue_name,
        user_id=user_id if user_id is not None else 0,
        display_name=display_name or "",
    )
