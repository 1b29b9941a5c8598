"""WSGI entry point for production deployment"""

from config import load_settings
from main import configure_logging, create_app

settings = load_settings()
configure_logging(settings.log_level)
app = create_app(settings)
socketio = app.extensions["socketio"]

if __name__ == "__main__":
    # This is used only for local testing without gunicorn
    socketio.run(app, host=settings.host, port=settings.port, allow_unsafe_werkzeug=True)
