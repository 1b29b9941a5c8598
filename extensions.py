# extensions.py
import logging

from flask_socketio import SocketIO

from config import Settings

log = logging.getLogger(__name__)


def create_socketio(settings: Settings) -> SocketIO:
    # 🔥 threading 모드 고정 (threading.Timer 기반 큐 만료 타이머와 호환)
    # 🔥 REDIS_URL이 있으면 메시지 큐 사용 (emit 전달만 공유, 큐 상태는 프로세스 메모리)
    if settings.redis_url:
        log.info(f"🚀 Using Redis Message Queue: {settings.redis_url}")
        return SocketIO(async_mode="threading", message_queue=settings.redis_url)

    log.info("⚠️ No REDIS_URL found. Using in-memory mode (Not suitable for multi-instance).")
    return SocketIO(async_mode="threading")
