# queue_store.py
"""
Pure operations over a Store snapshot.

A Store maps (room_id, queue_name) to the queue's members in join order.
No function here mutates its argument; every update returns a new dict.
Missing rooms/queues read as empty.
"""
from typing import Dict, Iterator, Tuple

from models import Member, QueueKey, Store

EMPTY_STORE: Store = {}


def get_members(store: Store, room_id: int, queue_name: str) -> Tuple[Member, ...]:
    return store.get((room_id, queue_name), ())


def member_count(store: Store, room_id: int, queue_name: str) -> int:
    return len(get_members(store, room_id, queue_name))


def _replace(store: Store, key: QueueKey, members: Tuple[Member, ...]) -> Dict[QueueKey, Tuple[Member, ...]]:
    new_store = dict(store)
    if members:
        new_store[key] = members
    else:
        # 빈 큐는 저장하지 않음
        new_store.pop(key, None)
    return new_store


def upsert_member(store: Store, room_id: int, queue_name: str, member: Member) -> Store:
    """Insert member, or rename it in place if the user_id is already queued."""
    members = get_members(store, room_id, queue_name)
    for i, existing in enumerate(members):
        if existing.user_id == member.user_id:
            if existing == member:
                return store
            updated = members[:i] + (member,) + members[i + 1:]
            return _replace(store, (room_id, queue_name), updated)

    return _replace(store, (room_id, queue_name), members + (member,))


def remove_member(store: Store, room_id: int, queue_name: str, user_id: int) -> Store:
    members = get_members(store, room_id, queue_name)
    remaining = tuple(m for m in members if m.user_id != user_id)
    if len(remaining) == len(members):
        return store
    return _replace(store, (room_id, queue_name), remaining)


def reset_queue(store: Store, room_id: int, queue_name: str) -> Store:
    if (room_id, queue_name) not in store:
        return store
    return _replace(store, (room_id, queue_name), ())


def iter_queues(store: Store) -> Iterator[Tuple[int, str, Tuple[Member, ...]]]:
    """Yield (room_id, queue_name, members) for every non-empty queue."""
    for (room_id, queue_name), members in store.items():
        yield room_id, queue_name, members


def room_ids(store: Store) -> set:
    return {room_id for room_id, _ in store}
