"""Gunicorn configuration for Flask-SocketIO (threading mode)"""

import logging
import sys

log = logging.getLogger("gunicorn.error")

# Worker class - threaded sync worker matches SocketIO async_mode='threading'
worker_class = 'gthread'
threads = 50

# Number of worker processes
workers = 1  # Queue state lives in process memory: must stay a single worker

# Binding
bind = '0.0.0.0:5000'

# Logging
accesslog = '-'
errorlog = '-'
loglevel = 'info'

# Timeout settings
timeout = 120
graceful_timeout = 30
keepalive = 5

# No max_requests: a worker restart would drop every queue and pending timer

# For debugging
reload = False

# preload_app would build the queue state in the master, not the worker
preload_app = False


# Worker lifecycle hooks
def on_starting(server):
    """Called just before the master process is initialized."""
    log.info("🚀 Gunicorn master process starting...")


def when_ready(server):
    """Called just after the server is started."""
    log.info("✅ Gunicorn server ready to accept connections")


def worker_int(worker):
    """Called when a worker receives the SIGINT or SIGQUIT signal."""
    log.warning(f"⚠️ Worker {worker.pid} received interrupt signal, in-memory queues will be lost")


def worker_abort(worker):
    """Called when a worker receives the SIGABRT signal (timeout)."""
    log.error(f"❌ WORKER TIMEOUT: Worker {worker.pid} aborted!")


def worker_exit(server, worker):
    """Called just after a worker has been exited: stop its pending queue timers."""
    wsgi = sys.modules.get("wsgi")
    if wsgi is None:
        return
    wsgi.app.extensions["queue_service"].shutdown()
    log.info(f"⏹️ Worker {worker.pid} stopped pending queue timers")


def on_exit(server):
    """Called just before the master process exits."""
    log.info("🛑 Gunicorn master process shutting down...")
