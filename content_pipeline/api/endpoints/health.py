"""
Health check endpoints for the content pipeline.

This module provides health check endpoints for load balancers and
orchestrators. They do not require authentication.
"""

import logging
import time
from datetime import datetime, timezone
from flask import Blueprint, jsonify, current_app

from ..extensions import pipeline_config
from ...utils.config import validate_config


logger = logging.getLogger(__name__)

STARTED_AT = time.time()

# Create blueprint
health_bp = Blueprint('health', __name__, url_prefix='/api/v1')


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Basic health check endpoint.

    Returns:
        Service health status
    """
    return jsonify({
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": current_app.config['API_VERSION'],
        "service": "content-pipeline"
    }), 200


@health_bp.route('/health/ready', methods=['GET'])
def readiness_check():
    """
    Readiness check endpoint.

    The service is ready when its configuration validates; storage and
    broker connectivity are exercised by the first request instead.

    Returns:
        Readiness status
    """
    issues = validate_config(pipeline_config())

    if issues:
        logger.warning(f"Readiness check failed: {'; '.join(issues)}")
        return jsonify({
            "status": "not_ready",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "issues": issues
        }), 503

    return jsonify({
        "status": "ready",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "storage_backend": current_app.config['STORAGE_BACKEND']
    }), 200


@health_bp.route('/health/live', methods=['GET'])
def liveness_check():
    """Liveness check endpoint."""
    return jsonify({
        "status": "alive",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime_seconds": round(time.time() - STARTED_AT, 1)
    }), 200
