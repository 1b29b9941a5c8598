# utils.py
from typing import Any, Dict, Iterable, Optional

from models import Member

DEFAULT_MAX_PLAYERS = 5


def as_int(value: Any) -> Optional[int]:
    """정수 또는 정수 문자열만 허용 (bool, float 등은 None)"""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def get_max_players(queue_name: str) -> int:
    """큐 이름 첫 글자가 1~9 숫자면 정원, 아니면 기본값 5 ("3v3" -> 3, "abc" -> 5)"""
    if queue_name and queue_name[0] in "123456789":
        return int(queue_name[0])
    return DEFAULT_MAX_PLAYERS


def get_display_name(user: Dict[str, Any]) -> Optional[str]:
    """채팅 사용자 정보 -> 표시 이름 (@username 우선, 없으면 "first last")"""
    username = user.get("username")
    if username:
        return f"@{username}"

    parts = [user.get("first_name"), user.get("last_name")]
    name = " ".join(str(p) for p in parts if p)
    return name or None


def strip_highlight(name: str) -> str:
    # 앞의 '@'만 제거 -> 채팅 클라이언트가 멘션 알림을 보내지 않음
    return name[1:] if name.startswith("@") else name


def format_members(members: Iterable[Member], avoid_highlight: bool = False) -> str:
    names = (m.display_name for m in members)
    if avoid_highlight:
        names = (strip_highlight(n) for n in names)
    return ", ".join(names)


# --- 알림 문구 ---

def ready_text(members: Iterable[Member]) -> str:
    return f"Game ready! {format_members(members)}"


def status_text(queue_name: str, members: Iterable[Member], avoid_highlight: bool = False) -> str:
    members = tuple(members)
    if not members:
        return f"{queue_name} is empty."
    return (
        f"{len(members)} / {get_max_players(queue_name)} added up to {queue_name} "
        f"({format_members(members, avoid_highlight)})"
    )


def expired_text(queue_name: str) -> str:
    return f"{queue_name} timed out after inactivity."
