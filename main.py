# main.py
# 🔥 [CRITICAL] Do NOT import gevent or eventlet.
# We are using 'threading' mode so queue expiry timers run on threading.Timer.

import logging
from typing import Optional

from flask import Flask

from chat_events import register_chat_events
from config import Settings, load_settings
from extensions import create_socketio
from health_check import health_bp
from queue_service import QueueService
from state import QueueState
from timeouts import TimeoutRegistry

log = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        level=level,
    )


def create_app(settings: Optional[Settings] = None, timer_factory=None) -> Flask:
    """앱 팩토리. settings가 없으면 환경변수에서 읽음 (SECRET_KEY 누락 시 ConfigError)"""
    settings = settings or load_settings()

    app = Flask(__name__)
    app.config['SECRET_KEY'] = settings.secret_key

    state = QueueState()
    service = QueueService(
        state=state,
        timeouts=TimeoutRegistry(lock=state.lock, timer_factory=timer_factory),
        timeout_seconds=settings.queue_timeout_seconds,
        avoid_highlight=settings.avoid_highlight,
    )
    app.extensions["queue_service"] = service
    app.extensions["queue_settings"] = settings

    # socketio 객체에 app을 연결 (init_app이 app.extensions["socketio"]도 설정)
    socketio = create_socketio(settings)
    socketio.init_app(app, cors_allowed_origins="*")
    register_chat_events(socketio, service, settings.default_queue)

    # AWS ALB Health Check Endpoint
    app.register_blueprint(health_bp)

    log.info(f"✅ Queue server ready (default queue: {settings.default_queue}, timeout: {settings.queue_timeout_seconds}s)")
    return app


if __name__ == "__main__":
    settings = load_settings()
    configure_logging(settings.log_level)
    app = create_app(settings)
    log.info(f"🚀 서버 실행 (http://localhost:{settings.port})")
    # 🔥 [FIX] allow_unsafe_werkzeug=True to prevent "write() before start_response" error
    # 🔥 [FIX] use_reloader=False so the queue state is not duplicated in a reloader child
    try:
        app.extensions["socketio"].run(
            app, host=settings.host, port=settings.port, debug=False,
            allow_unsafe_werkzeug=True, use_reloader=False,
        )
    finally:
        app.extensions["queue_service"].shutdown()
