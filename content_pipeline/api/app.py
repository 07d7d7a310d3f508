"""
Main Flask application for the content pipeline.

This module creates and configures the Flask application
with all necessary middleware, blueprints, and error handlers.
"""

import logging
import os
from datetime import datetime, timezone
from flask import Flask, jsonify
from flask_cors import CORS

from .endpoints import articles_bp, health_bp
from .extensions import limiter
from .middleware.auth import AuthMiddleware
from .middleware.logging import LoggingMiddleware
from .middleware.error_handler import ErrorHandler
from ..core.models.errors import ErrorResponse
from ..utils.config import get_config
from ..utils.logging import setup_logging


def create_app(config_name: str = None) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config_name: Configuration name (development, production, testing)

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)

    # Load configuration
    config = get_config(config_name)
    app.config.from_object(config)
    app.extensions['pipeline_config'] = config

    # Setup logging
    setup_logging(app.config)

    # Initialize extensions
    CORS(app, origins=app.config.get('CORS_ORIGINS', ['*']))
    limiter.init_app(app)

    # Register middleware
    app.before_request(LoggingMiddleware.before_request)
    app.before_request(AuthMiddleware.before_request)
    app.after_request(LoggingMiddleware.after_request)

    # Register blueprints
    app.register_blueprint(articles_bp)
    app.register_blueprint(health_bp)

    # Register error handlers
    ErrorHandler.register_handlers(app)

    @app.errorhandler(404)
    def not_found(error):
        return jsonify(ErrorResponse(
            error="not_found",
            message="The requested resource was not found",
            status=404
        ).to_json()), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify(ErrorResponse(
            error="method_not_allowed",
            message="The method is not allowed for the requested URL",
            status=405
        ).to_json()), 405

    @app.route('/')
    def root():
        return jsonify({
            "service": "content-pipeline",
            "version": app.config['API_VERSION'],
            "status": "running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "endpoints": {
                "health": "/api/v1/health",
                "articles": "/api/v1/articles",
                "tasks": "/api/v1/articles/tasks/{task_id}",
                "rewrite": "/api/v1/articles/{article_id}/rewrite",
                "versions": "/api/v1/articles/{article_id}/versions"
            },
            "authentication": {
                "api_key_header": app.config['API_KEY_HEADER'],
                "tenant_header": app.config['TENANT_HEADER']
            }
        })

    logger = logging.getLogger(__name__)
    logger.info(f"Flask application created with config: {config_name or 'default'}")

    return app


def run_app(host: str = '0.0.0.0', port: int = None, debug: bool = False):
    """
    Run the Flask development server.

    Args:
        host: Host to bind to
        port: Port to bind to; defaults to $PORT or 5001
        debug: Enable debug mode
    """
    port = port or int(os.environ.get('PORT', 5001))
    app = create_app()

    logger = logging.getLogger(__name__)
    logger.info(f"Starting content pipeline API on {host}:{port}")

    app.run(host=host, port=port, debug=debug)


if __name__ == '__main__':
    run_app()
