"""Health check endpoint for monitoring worker status"""

import os

import psutil
from flask import Blueprint, current_app, jsonify

import queue_store
from utils import get_max_players

health_bp = Blueprint('health', __name__)


def _service():
    return current_app.extensions["queue_service"]


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Health check endpoint that returns server status, memory usage and queue occupancy.
    Useful for monitoring and load balancer health checks.
    """
    try:
        process = psutil.Process(os.getpid())
        memory_mb = process.memory_info().rss / 1024 / 1024

        service = _service()
        store = service.state.store
        queues = list(queue_store.iter_queues(store))

        return jsonify({
            "status": "healthy",
            "pid": os.getpid(),
            "memory_mb": round(memory_mb, 2),
            "active_rooms": len(queue_store.room_ids(store)),
            "active_queues": len(queues),
            "waiting_members": sum(len(members) for _, _, members in queues),
            "pending_timers": service.timeouts.pending_count(),
        }), 200

    except Exception as e:
        return jsonify({
            "status": "unhealthy",
            "error": str(e)
        }), 500


@health_bp.route('/metrics', methods=['GET'])
def metrics():
    """
    Detailed metrics endpoint for debugging
    """
    try:
        process = psutil.Process(os.getpid())
        memory_info = process.memory_info()

        service = _service()
        queue_details = []
        for room_id, queue_name, members in queue_store.iter_queues(service.state.store):
            queue_details.append({
                "room_id": room_id,
                "queue": queue_name,
                "count": len(members),
                "capacity": get_max_players(queue_name),
                "timer_pending": service.timeouts.is_pending(room_id, queue_name),
            })

        return jsonify({
            "process": {
                "pid": os.getpid(),
                "cpu_percent": process.cpu_percent(interval=0.1),
                "num_threads": process.num_threads(),
            },
            "memory": {
                "rss_mb": round(memory_info.rss / 1024 / 1024, 2),
                "vms_mb": round(memory_info.vms / 1024 / 1024, 2),
                "percent": process.memory_percent()
            },
            "queues": {
                "total": len(queue_details),
                "details": queue_details
            }
        }), 200

    except Exception as e:
        return jsonify({
            "error": str(e)
        }), 500
