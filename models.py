from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Literal, Mapping, Tuple

Command = Literal["join", "leave", "status"]

# (room_id, queue_name)
QueueKey = Tuple[int, str]


@dataclass(frozen=True)
class Member:
    user_id: int
    display_name: str


# Store: 큐 키 -> 가입 순서대로 정렬된 멤버 튜플
# 비어 있는 큐는 키 자체가 없음 (absence == empty)
Store = Mapping[QueueKey, Tuple[Member, ...]]


@dataclass(frozen=True)
class Notice:
    room_id: int
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "roomId": self.room_id,
            "text": self.text,
        }


@dataclass(frozen=True)
class InboundEvent:
    command: Command
    room_id: int
    queue_name: str
    user_id: int
    display_name: str
