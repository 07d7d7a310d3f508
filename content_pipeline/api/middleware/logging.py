"""
Logging middleware for the content pipeline.

This module provides request/response logging middleware
for monitoring and debugging.
"""

import logging
import time
import uuid
from flask import request, g, current_app

from ...utils.logging import RequestLogger


logger = logging.getLogger(__name__)
request_logger = RequestLogger()

SENSITIVE_FIELDS = frozenset(['api_key', 'llm_key', 'password'])


class LoggingMiddleware:
    """Logging middleware for request/response logging."""

    @staticmethod
    def before_request():
        """Log request details."""
        g.start_time = time.time()
        g.request_id = f"req_{uuid.uuid4().hex[:12]}"

        if not current_app.config.get('LOG_REQUESTS', True):
            return

        request_logger.log_request(
            request.method,
            request.path,
            request.remote_addr,
            request_id=g.request_id
        )

        # Log request body for POST requests (excluding sensitive data)
        if request.method == 'POST' and request.is_json:
            data = request.get_json(silent=True)
            if isinstance(data, dict):
                safe_data = {k: v for k, v in data.items() if k not in SENSITIVE_FIELDS}
                logger.debug(f"Request body: {safe_data}")

    @staticmethod
    def after_request(response):
        """Log response details."""
        if not hasattr(g, 'start_time'):
            return response

        duration = time.time() - g.start_time
        response.headers['X-Request-ID'] = g.request_id

        if current_app.config.get('LOG_REQUESTS', True):
            request_logger.log_response(
                request.method,
                request.path,
                response.status_code,
                duration,
                request_id=g.request_id
            )

            if response.status_code >= 400:
                logger.warning(
                    f"Error response: {g.request_id} - {response.status_code} "
                    f"for {request.method} {request.path}"
                )

        return response
