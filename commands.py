# commands.py
import re
from typing import Any, Dict, Optional

from models import InboundEvent
from utils import as_int, get_display_name

# /command[@botname] [queue name]
COMMAND_RE = re.compile(r"^/([^@\s]+)@?(?:(\S+)|)\s?([\s\S]*)$")

COMMAND_ALIASES = {
    "add": "join",
    "join": "join",
    "remove": "leave",
    "leave": "leave",
    "status": "status",
}


def parse_command(text: str, default_queue: str):
    """"/add 3v3" -> ("join", "3v3"). 명령이 아니거나 모르는 명령이면 None"""
    match = COMMAND_RE.match(text or "")
    if not match:
        return None

    command = COMMAND_ALIASES.get(match.group(1).lower())
    if not command:
        return None

    queue_name = match.group(3) or default_queue
    return command, queue_name


def build_event(message: Dict[str, Any], default_queue: str) -> Optional[InboundEvent]:
    """
    채팅 메시지 payload를 InboundEvent로 변환.
    payload: {"chat": {"id"}, "from": {"id", "username", "first_name", "last_name"}, "text"}
    보낸 사람/채팅방/텍스트가 없으면 None (조용히 무시)
    """
    if not isinstance(message, dict):
        return None

    chat = message.get("chat")
    sender = message.get("from")
    text = message.get("text")
    if not isinstance(chat, dict) or not isinstance(sender, dict) or not isinstance(text, str):
        return None

    room_id = as_int(chat.get("id"))
    user_id = as_int(sender.get("id"))
    if room_id is None or user_id is None:
        return None

    parsed = parse_command(text, default_queue)
    if not parsed:
        return None
    command, queue_name = parsed

    display_name = get_display_name(sender)
    if command == "join" and not display_name:
        return None

    return InboundEvent(
        command=command,
        room_id=room_id,
        queue_name=queue_name,
        user_id=user_id,
        display_name=display_name or "",
    )
