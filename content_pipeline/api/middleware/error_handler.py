"""
Error handling middleware for the content pipeline.

This module provides centralized error handling and
response formatting for the API.
"""

import logging
from flask import jsonify, g
from pydantic import ValidationError as PydanticValidationError
from werkzeug.exceptions import HTTPException

from ...core.models.errors import (
    ErrorResponse,
    ValidationErrorResponse,
    ContentPipelineError,
    ValidationError,
    ArticleNotFoundError,
    InsufficientFactsError,
    ComplianceError,
    AuthenticationError,
    ConfigurationError,
    GeneratorError,
    RateLimitError,
    MaxRetriesExceededError,
    StorageError
)


logger = logging.getLogger(__name__)


class ErrorHandler:
    """Centralized error handling for the API."""

    @staticmethod
    def register_handlers(app):
        """Register error handlers with Flask app."""

        @app.errorhandler(PydanticValidationError)
        def handle_request_validation_error(error):
            return ErrorHandler.handle_request_validation_error(error)

        @app.errorhandler(ValidationError)
        def handle_validation_error(error):
            return ErrorHandler.handle_validation_error(error)

        @app.errorhandler(ArticleNotFoundError)
        def handle_not_found_error(error):
            return ErrorHandler.handle_not_found_error(error)

        @app.errorhandler(AuthenticationError)
        def handle_authentication_error(error):
            return ErrorHandler.handle_authentication_error(error)

        @app.errorhandler(InsufficientFactsError)
        def handle_insufficient_facts_error(error):
            return ErrorHandler.handle_unprocessable_error(error)

        @app.errorhandler(ComplianceError)
        def handle_compliance_error(error):
            return ErrorHandler.handle_unprocessable_error(error)

        @app.errorhandler(RateLimitError)
        def handle_rate_limit_error(error):
            return ErrorHandler.handle_rate_limit_error(error)

        @app.errorhandler(GeneratorError)
        def handle_generator_error(error):
            return ErrorHandler.handle_unavailable_error(error)

        @app.errorhandler(MaxRetriesExceededError)
        def handle_max_retries_error(error):
            return ErrorHandler.handle_unavailable_error(error)

        @app.errorhandler(StorageError)
        def handle_storage_error(error):
            return ErrorHandler.handle_unavailable_error(error)

        @app.errorhandler(ConfigurationError)
        def handle_configuration_error(error):
            return ErrorHandler.handle_configuration_error(error)

        @app.errorhandler(ContentPipelineError)
        def handle_pipeline_error(error):
            return ErrorHandler.handle_pipeline_error(error)

        @app.errorhandler(Exception)
        def handle_generic_error(error):
            return ErrorHandler.handle_generic_error(error)

    @staticmethod
    def handle_request_validation_error(error: PydanticValidationError):
        """Handle request body validation failures."""
        response = ValidationErrorResponse()
        for item in error.errors():
            field = '.'.join(str(part) for part in item.get('loc', ())) or 'body'
            response.add_validation_error(field, item.get('msg', 'Invalid value'))

        logger.warning(f"Request validation failed: {len(response.validation_errors)} error(s)")
        return jsonify(response.to_json()), 400

    @staticmethod
    def handle_validation_error(error: ValidationError):
        """Handle validation errors."""
        logger.warning(f"Validation error: {error.message}")

        return jsonify(ErrorResponse(
            error="validation_error",
            message=error.message,
            error_code=error.error_code,
            status=400,
            field=error.field
        ).to_json()), 400

    @staticmethod
    def handle_not_found_error(error: ArticleNotFoundError):
        logger.info(f"Article not found: {error.article_id}")

        return jsonify(ErrorResponse(
            error="not_found",
            message=error.message,
            error_code=error.error_code,
            status=404,
            details={"article_id": error.article_id}
        ).to_json()), 404

    @staticmethod
    def handle_authentication_error(error: AuthenticationError):
        """Handle authentication errors."""
        logger.warning(f"Authentication error: {error.message}")

        return jsonify(ErrorResponse.from_exception(error, status=401).to_json()), 401

    @staticmethod
    def handle_unprocessable_error(error: ContentPipelineError):
        """Handle content that failed a quality gate."""
        logger.info(f"Quality gate rejected content: {error.message}")

        return jsonify(ErrorResponse.from_exception(error, status=422).to_json()), 422

    @staticmethod
    def handle_rate_limit_error(error: RateLimitError):
        """Handle rate limit errors."""
        logger.warning(f"Rate limit error: {error.message}")

        response = jsonify(ErrorResponse(
            error="rate_limit_error",
            message=error.message,
            error_code=error.error_code,
            status=429,
            details={"retry_after": error.retry_after}
        ).to_json())
        if error.retry_after:
            response.headers['Retry-After'] = str(int(error.retry_after))
        return response, 429

    @staticmethod
    def handle_unavailable_error(error: ContentPipelineError):
        """Handle failures of the generator or the persistent store."""
        logger.error(f"Upstream service error: {error.message}")

        return jsonify(ErrorResponse(
            error="service_unavailable",
            message=error.message,
            error_code=error.error_code,
            status=503
        ).to_json()), 503

    @staticmethod
    def handle_configuration_error(error: ConfigurationError):
        """Handle configuration errors."""
        logger.error(f"Configuration error: {error.message}")

        return jsonify(ErrorResponse(
            error="configuration_error",
            message="The service is not configured correctly",
            error_code=error.error_code,
            status=500,
            details={"config_key": error.config_key}
        ).to_json()), 500

    @staticmethod
    def handle_pipeline_error(error: ContentPipelineError):
        logger.error(f"Pipeline error: {error.message}")

        return jsonify(ErrorResponse.from_exception(error, status=500).to_json()), 500

    @staticmethod
    def handle_generic_error(error: Exception):
        """Handle generic errors, including HTTP errors without a dedicated handler."""
        if isinstance(error, HTTPException):
            return jsonify(ErrorResponse(
                error=error.name.lower().replace(' ', '_'),
                message=error.description or error.name,
                status=error.code
            ).to_json()), error.code

        request_id = getattr(g, 'request_id', 'unknown')

        logger.error(
            f"Unhandled error in request {request_id}: {str(error)}",
            exc_info=True
        )

        return jsonify(ErrorResponse(
            error="internal_server_error",
            message="An unexpected error occurred",
            error_code="INTERNAL_SERVER_ERROR",
            status=500,
            request_id=request_id,
            details={
                "error_type": type(error).__name__
            }
        ).to_json()), 500
