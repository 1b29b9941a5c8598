# chat_events.py
import logging

from flask import request
from flask_socketio import SocketIO, join_room

from commands import build_event
from models import Notice
from queue_service import QueueService

log = logging.getLogger(__name__)


def chat_room(room_id: int) -> str:
    """채팅방 id -> Socket.IO room 이름"""
    return str(room_id)


def emit_notice(socketio: SocketIO, notice: Notice) -> None:
    socketio.emit("notice", notice.to_dict(), to=chat_room(notice.room_id))


def register_chat_events(socketio: SocketIO, service: QueueService, default_queue: str) -> None:
    """채팅 명령 핸들러 등록 + 만료 알림을 소켓으로 내보내도록 service.notify 연결"""

    service.notify = lambda notice: emit_notice(socketio, notice)

    def on_connect(auth=None):
        log.info(f"🟢 connect: {request.sid}")

    def on_disconnect(reason=None):
        log.info(f"🔴 disconnect: {request.sid} {f'({reason})' if reason else ''}")

    def on_message(message):
        event = build_event(message, default_queue)
        if event is None:
            log.debug(f"🙈 [Chat] ignored message: {message}")
            return

        # 보낸 소켓을 채팅방에 참여시켜 이후 알림(만료 포함)을 받게 함
        join_room(chat_room(event.room_id))

        notice = service.handle(event)
        emit_notice(socketio, notice)

    socketio.on_event("connect", on_connect)
    socketio.on_event("disconnect", on_disconnect)
    socketio.on_event("message", on_message)
