import os
from datetime import datetime, timezone
from functools import wraps

from flask import Flask, request, jsonify
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from common.logging_config import setup_logging, log_audit_event
from log_normalizer.normalizers import (
    FORMAT_NAMES,
    NormalizerError,
    detect_format,
    event_to_dict,
    process,
    process_batch,
)

# Initialize Flask app
app = Flask(__name__)

# Setup structured logging
logger = setup_logging('log_normalizer')

# Configuration
API_KEY = os.getenv("API_KEY", "")  # Empty means auth disabled (lab mode)
RATE_LIMIT = os.getenv("RATE_LIMIT", "100 per minute")
MAX_BATCH_SIZE = int(os.getenv("MAX_BATCH_SIZE", "10000"))
BATCH_WORKERS = int(os.getenv("BATCH_WORKERS", "1"))

# Initialize rate limiter
limiter = Limiter(
    get_remote_address,
    app=app,
    default_limits=[RATE_LIMIT],
    storage_uri="memory://"
)


def require_api_key(f):
    """Decorator to require API key authentication"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        # Skip auth check if API_KEY not configured (lab mode)
        if not API_KEY:
            return f(*args, **kwargs)

        provided_key = request.headers.get('X-API-Key')
        if not provided_key:
            logger.warning("Missing API key in request", extra={
                'ip': request.remote_addr,
                'path': request.path
            })
            return jsonify({"error": "Missing X-API-Key header"}), 401

        if provided_key != API_KEY:
            logger.warning("Invalid API key attempt", extra={
                'ip': request.remote_addr,
                'path': request.path
            })
            return jsonify({"error": "Invalid API key"}), 403

        return f(*args, **kwargs)
    return decorated_function


def _raw_body() -> str:
    return request.get_data(as_text=True).strip()


@app.route("/health", methods=["GET"])
def health():
    """Health check endpoint"""
    return jsonify({
        "status": "healthy",
        "service": "log_normalizer",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }), 200


@app.route("/process", methods=["POST"])
@require_api_key
@limiter.limit(RATE_LIMIT)
def process_logs():
    """Normalise a JSON batch: {"logs": ["...", ...]}"""
    body = request.get_json(force=True, silent=True)
    if not isinstance(body, dict) or not isinstance(body.get("logs"), list):
        logger.warning("Invalid batch request", extra={'ip': request.remote_addr})
        return jsonify({"error": "Invalid JSON: expected {\"logs\": [...]}"}), 400

    logs = body["logs"]
    if not all(isinstance(line, str) for line in logs):
        return jsonify({"error": "Invalid JSON: logs must be strings"}), 400
    if len(logs) > MAX_BATCH_SIZE:
        return jsonify({"error": f"Batch too large (max {MAX_BATCH_SIZE})"}), 413

    try:
        events, errors = process_batch(logs, max_workers=BATCH_WORKERS)
    except Exception as e:
        logger.error("Batch processing failed", extra={
            'error': str(e),
            'ip': request.remote_addr
        }, exc_info=True)
        return jsonify({"error": "Internal server error"}), 500

    log_audit_event(logger, 'batch_processed',
                    source_ip=request.remote_addr,
                    total=len(logs),
                    success=len(events),
                    errors=len(errors))

    response = {
        "success": len(events),
        "errors": len(errors),
        "events": [event_to_dict(e) for e in events],
    }
    if errors:
        response["error_messages"] = [str(e) for e in errors]
    return jsonify(response), 200


@app.route("/process-single", methods=["POST"])
@require_api_key
@limiter.limit(RATE_LIMIT)
def process_single():
    """Normalise one raw record sent as the request body"""
    raw = _raw_body()
    try:
        event = process(raw)
    except NormalizerError as e:
        logger.info("Record rejected", extra={
            'ip': request.remote_addr,
            'error': str(e)
        })
        return jsonify({"error": f"Failed to process log: {e}"}), 400

    logger.debug("Record normalised", extra={
        'event_id': event.event_id,
        'category': event.category.value,
        'severity': event.severity.value
    })
    return jsonify(event_to_dict(event)), 200


@app.route("/detect", methods=["POST"])
@require_api_key
@limiter.limit(RATE_LIMIT)
def detect():
    """Report the detected format of the request body"""
    tag = detect_format(_raw_body())
    return jsonify({"log_type": FORMAT_NAMES[tag]}), 200


@app.errorhandler(429)
def ratelimit_handler(e):
    """Handle rate limit errors"""
    logger.warning("Rate limit exceeded", extra={
        'ip': request.remote_addr,
        'path': request.path
    })
    return jsonify({"error": "Rate limit exceeded"}), 429


def main():
    port = int(os.getenv("HTTP_PORT", "8080"))
    logger.info("Starting log normalizer service", extra={
        'port': port,
        'auth_enabled': bool(API_KEY),
        'rate_limit': RATE_LIMIT,
        'max_batch_size': MAX_BATCH_SIZE
    })
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
