"""
Authentication middleware for the content pipeline.

This module provides API key authentication and tenant resolution.
Every request outside the health endpoints must carry a valid API key;
article endpoints additionally require the tenant header.
"""

import logging
from functools import wraps
from flask import request, jsonify, g, current_app

from ...core.models.errors import ErrorResponse


logger = logging.getLogger(__name__)

PUBLIC_ENDPOINTS = frozenset([
    'root',
    'static',
    'health.health_check',
    'health.readiness_check',
    'health.liveness_check',
])


class AuthMiddleware:
    """Authentication middleware for API key validation."""

    @staticmethod
    def before_request():
        """Validate the API key and resolve the tenant of the request."""
        if request.endpoint in PUBLIC_ENDPOINTS or request.method == 'OPTIONS':
            return None

        api_key = request.headers.get(current_app.config['API_KEY_HEADER'])

        if not api_key:
            return jsonify(ErrorResponse(
                error="authentication_required",
                message="API key is required",
                error_code="AUTHENTICATION_ERROR",
                status=401
            ).to_json()), 401

        if not AuthMiddleware.validate_api_key(api_key):
            logger.warning(f"Rejected invalid API key for {request.method} {request.path}")
            return jsonify(ErrorResponse(
                error="invalid_api_key",
                message="Invalid API key",
                error_code="AUTHENTICATION_ERROR",
                status=401
            ).to_json()), 401

        g.api_key = api_key
        g.tenant_id = (request.headers.get(current_app.config['TENANT_HEADER']) or '').strip() or None

        return None

    @staticmethod
    def validate_api_key(api_key: str) -> bool:
        """
        Validate API key against the configured keys.

        Args:
            api_key: API key to validate

        Returns:
            True if valid, False otherwise
        """
        valid_keys = current_app.config.get('API_KEYS')

        if not valid_keys:
            logger.warning("No API keys configured")
            return False

        return api_key in valid_keys

    @staticmethod
    def require_tenant(f):
        """
        Decorator requiring a resolved tenant.

        Args:
            f: Function to decorate

        Returns:
            Decorated function
        """
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not getattr(g, 'tenant_id', None):
                header = current_app.config['TENANT_HEADER']
                return jsonify(ErrorResponse(
                    error="tenant_required",
                    message=f"{header} header is required",
                    error_code="TENANT_REQUIRED",
                    status=400,
                    field=header
                ).to_json()), 400

            return f(*args, **kwargs)

        return decorated_function


def require_tenant(f):
    """Module-level alias of ``AuthMiddleware.require_tenant``."""
    return AuthMiddleware.require_tenant(f)
