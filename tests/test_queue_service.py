import threading

import pytest

from models import Member, Notice
from queue_service import QueueService, parse_event
from state import QueueState
from timeouts import TimeoutRegistry
from utils import get_max_players

HOUR = 3600


def test_two_player_queue_scenario(service):
    assert service.join(1, "2v2", 10, "@alice") == Notice(1, "1 / 2 added up to 2v2 (@alice)")
    assert service.join(1, "2v2", 20, "@bob") == Notice(1, "Game ready! @alice, @bob")
    assert service.status(1, "2v2") == Notice(1, "2v2 is empty.")
    assert service.count(1, "2v2") == 0


def test_ready_clears_timer_without_rearm(service, scheduler, notices):
    service.join(1, "2v2", 10, "@alice")
    assert service.timeouts.is_pending(1, "2v2")

    service.join(1, "2v2", 20, "@bob")
    assert not service.timeouts.is_pending(1, "2v2")

    scheduler.advance(2 * HOUR)
    assert notices == []


def test_count_never_exceeds_capacity_at_rest(service):
    for user_id in range(1, 23):
        service.join(1, "3v3", user_id, f"user{user_id}")
        assert 0 <= service.count(1, "3v3") < get_max_players("3v3")
        if user_id % 4 == 0:
            service.leave(1, "3v3", user_id - 1)
            assert 0 <= service.count(1, "3v3") < 3


def test_rejoin_updates_name_without_growing(service):
    service.join(1, "5v5", 10, "@alice")
    notice = service.join(1, "5v5", 10, "Alice Liddell")

    assert service.count(1, "5v5") == 1
    assert service.members(1, "5v5") == (Member(10, "Alice Liddell"),)
    assert notice.text == "1 / 5 added up to 5v5 (Alice Liddell)"


def test_leave_non_member_is_noop(service):
    service.join(1, "5v5", 10, "@alice")
    before = dict(service.state.store)

    notice = service.leave(1, "5v5", 99)

    assert dict(service.state.store) == before
    assert notice == Notice(1, "1 / 5 added up to 5v5 (@alice)")


def test_leave_last_member_reports_empty(service):
    service.join(1, "5v5", 10, "@alice")
    assert service.leave(1, "5v5", 10) == Notice(1, "5v5 is empty.")


def test_status_lists_members_in_join_order(service):
    service.join(3, "4", 1, "@c")
    service.join(3, "4", 2, "Ann Bee")
    service.join(3, "4", 3, "@a")
    assert service.status(3, "4").text == "3 / 4 added up to 4 (@c, Ann Bee, @a)"


def test_avoid_highlight_strips_leading_at_in_status_only(scheduler, notices):
    state = QueueState()
    service = QueueService(
        state=state,
        timeouts=TimeoutRegistry(lock=state.lock, timer_factory=scheduler),
        notify=notices.append,
        avoid_highlight=True,
    )

    assert service.join(1, "2v2", 10, "@alice").text == "1 / 2 added up to 2v2 (alice)"
    assert service.join(1, "2v2", 20, "@bob").text == "Game ready! @alice, @bob"


def test_rooms_are_isolated(service):
    service.join(1, "2v2", 10, "@alice")
    service.join(2, "2v2", 20, "@bob")

    assert service.count(1, "2v2") == 1
    assert service.count(2, "2v2") == 1


def test_inactivity_expiry_fires_once(service, scheduler, notices):
    service.join(1, "5v5", 10, "@alice")

    scheduler.advance(HOUR)

    assert notices == [Notice(1, "5v5 timed out after inactivity.")]
    assert service.count(1, "5v5") == 0

    scheduler.advance(5 * HOUR)
    assert len(notices) == 1


def test_second_join_rearms_timer(service, scheduler, notices):
    service.join(1, "5v5", 10, "@alice")
    scheduler.advance(HOUR / 2)
    service.join(1, "5v5", 20, "@bob")

    assert service.timeouts.pending_count() == 1

    scheduler.advance(HOUR - 1)
    assert notices == []
    assert service.count(1, "5v5") == 2

    scheduler.advance(2)
    assert notices == [Notice(1, "5v5 timed out after inactivity.")]
    assert service.count(1, "5v5") == 0


def test_leave_does_not_reset_inactivity_timer(service, scheduler, notices):
    # 나가기는 타이머를 재설정/취소하지 않음
    service.join(1, "5v5", 10, "@alice")
    service.join(1, "5v5", 20, "@bob")
    scheduler.advance(HOUR - 10)

    service.leave(1, "5v5", 20)
    assert service.timeouts.is_pending(1, "5v5")

    scheduler.advance(10)
    assert notices == [Notice(1, "5v5 timed out after inactivity.")]


def test_expiry_after_everyone_left_is_silent(service, scheduler, notices):
    service.join(1, "5v5", 10, "@alice")
    service.leave(1, "5v5", 10)

    scheduler.advance(HOUR)
    assert notices == []
    assert service.count(1, "5v5") == 0


def test_expiry_notifier_failure_still_resets(scheduler):
    def broken(notice):
        raise RuntimeError("transport down")

    state = QueueState()
    service = QueueService(
        state=state,
        timeouts=TimeoutRegistry(lock=state.lock, timer_factory=scheduler),
        notify=broken,
    )
    service.join(1, "5v5", 10, "@alice")
    scheduler.advance(HOUR)
    assert service.count(1, "5v5") == 0


def test_default_service_drops_expiry_notice_without_transport():
    service = QueueService(timeout_seconds=0)
    # timeout 0 -> 즉시 만료
    notice = service.join(1, "5v5", 10, "@alice")
    assert notice.text == "5v5 is empty."
    assert service.count(1, "5v5") == 0


@pytest.mark.parametrize("name, expected", [("3v3", 3), ("5v5", 5), ("abc", 5), ("9", 9), ("0v0", 5), ("", 5)])
def test_capacity_from_queue_name(name, expected):
    assert get_max_players(name) == expected


def test_handle_event_dispatch(service):
    assert service.handle_event({
        "command": "join", "roomId": 1, "queueName": "2v2", "userId": 10, "displayName": "@alice",
    }) == Notice(1, "1 / 2 added up to 2v2 (@alice)")
    assert service.handle_event({"command": "status", "roomId": 1, "queueName": "2v2"}) == Notice(
        1, "1 / 2 added up to 2v2 (@alice)"
    )
    assert service.handle_event({
        "command": "leave", "roomId": 1, "queueName": "2v2", "userId": 10,
    }) == Notice(1, "2v2 is empty.")


@pytest.mark.parametrize("data", [
    None,
    {},
    {"command": "join", "roomId": 1, "queueName": "5v5", "displayName": "@alice"},
    {"command": "join", "roomId": 1, "queueName": "5v5", "userId": 10},
    {"command": "leave", "queueName": "5v5", "userId": 10},
    {"command": "dance", "roomId": 1, "queueName": "5v5", "userId": 10},
    {"command": "status", "roomId": "abc", "queueName": "5v5"},
    {"command": "status", "roomId": True, "queueName": "5v5"},
])
def test_malformed_events_are_ignored(service, data):
    assert service.handle_event(data) is None
    assert dict(service.state.store) == {}


def test_parse_event_accepts_numeric_strings():
    event = parse_event({"command": "leave", "roomId": "-100", "queueName": "5v5", "userId": "7"})
    assert event.room_id == -100
    assert event.user_id == 7


def test_expiry_notice_is_sent_outside_the_state_lock(scheduler):
    lock_free = []
    state = QueueState()

    def notify(notice):
        # 알림 전송 중 다른 스레드의 명령 처리가 막히지 않아야 함
        result = []

        def try_acquire():
            acquired = state.lock.acquire(blocking=False)
            if acquired:
                state.lock.release()
            result.append(acquired)

        worker = threading.Thread(target=try_acquire)
        worker.start()
        worker.join()
        lock_free.append(result[0])

    service = QueueService(
        state=state,
        timeouts=TimeoutRegistry(lock=state.lock, timer_factory=scheduler),
        notify=notify,
    )
    service.join(1, "5v5", 10, "@alice")
    scheduler.advance(HOUR)

    assert lock_free == [True]
    assert service.count(1, "5v5") == 0
