"""
Process API Routes - Start, stop, clear and observe the enrichment run
"""
import json
import queue

from flask import Blueprint, Response, current_app, jsonify

process_bp = Blueprint('process', __name__)

KEEPALIVE_SECONDS = 15
STREAM_END_EVENTS = ('run_finished', 'reset')


def _processor():
    return current_app.extensions['row_processor']


@process_bp.route('/start', methods=['POST'])
def start_processing():
    """
    Start or resume processing; rows already completed are skipped
    POST /api/process/start

    Response:
        {
            "success": true,
            "started": true,
            "run_state": "running",
            "progress": {"current": 0, "total": 10, "percent": 0},
            ...
        }
    """
    processor = _processor()
    started = processor.start()
    if not started and processor.is_draining:
        return jsonify({
            "success": False,
            "started": False,
            "error": "The previous run is still finishing its current part. Try again shortly",
            **processor.snapshot()
        }), 409
    return jsonify({"success": True, "started": started, **processor.snapshot()})


@process_bp.route('/stop', methods=['POST'])
def stop_processing():
    """
    Stop after the row currently in flight
    POST /api/process/stop
    """
    processor = _processor()
    stopped = processor.stop()
    return jsonify({"success": True, "stopped": stopped, **processor.snapshot()})


@process_bp.route('/reset', methods=['POST'])
def reset_processing():
    """
    Clear all loaded parts and progress
    POST /api/process/reset
    """
    processor = _processor()
    if processor.is_running:
        return jsonify({"success": False, "error": "Stop processing before clearing data"}), 409

    processor.reset()
    return jsonify({"success": True, **processor.snapshot()})


@process_bp.route('/status', methods=['GET'])
def get_status():
    """
    Current run state, progress and records
    GET /api/process/status
    """
    return jsonify({"success": True, **_processor().snapshot()})


@process_bp.route('/events', methods=['GET'])
def stream_events():
    """
    Stream processor events using Server-Sent Events
    GET /api/process/events

    The first event is a snapshot; the stream closes after run_finished or reset.
    """
    processor = _processor()
    events = queue.Queue()
    unsubscribe = processor.subscribe(events.put)
    snapshot = processor.snapshot()

    def generate():
        try:
            yield f"data: {json.dumps({'type': 'snapshot', **snapshot})}\n\n"
            while True:
                try:
                    event = events.get(timeout=KEEPALIVE_SECONDS)
                except queue.Empty:
                    yield ": keep-alive\n\n"
                    continue
                yield f"data: {json.dumps(event)}\n\n"
                if event.get('type') in STREAM_END_EVENTS:
                    break
        finally:
            unsubscribe()

    return Response(
        generate(),
        mimetype='text/event-stream',
        headers={
            'Cache-Control': 'no-cache',
            'Connection': 'keep-alive',
            'X-Accel-Buffering': 'no'
        }
    )
