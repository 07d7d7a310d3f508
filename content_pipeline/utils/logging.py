"""
Logging configuration for the content pipeline.

This module provides centralized logging setup and the structured loggers
used by the pipeline stages, the Celery tasks and the HTTP layer.
"""

import logging
import logging.handlers
import os
from datetime import datetime, timezone
from typing import Dict, Any, Optional


def setup_logging(config: Dict[str, Any]):
    """
    Setup logging configuration.

    Args:
        config: Configuration dictionary
    """
    log_level = getattr(logging, str(config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    log_file = config.get('LOG_FILE', 'logs/app.log')

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler with rotation
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=config.get('LOG_MAX_BYTES', 10485760),  # 10MB
            backupCount=config.get('LOG_BACKUP_COUNT', 5)
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    configure_loggers()


def configure_loggers():
    """Quiet down chatty third-party loggers."""
    logging.getLogger('werkzeug').setLevel(logging.WARNING)
    logging.getLogger('celery').setLevel(logging.INFO)
    logging.getLogger('litellm').setLevel(logging.WARNING)
    logging.getLogger('LiteLLM').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)


class StructuredLogger:
    """Structured logger for better log formatting."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs):
        self._log(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def _log(self, level: int, message: str, exc_info: bool = False, **kwargs):
        extra = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            **kwargs
        }

        self.logger.log(level, message, extra=extra, exc_info=exc_info)


def get_logger(name: str) -> StructuredLogger:
    """
    Get a structured logger.

    Args:
        name: Logger name

    Returns:
        Structured logger instance
    """
    return StructuredLogger(name)


class StageLogger:
    """Logger for pipeline stages of one run."""

    def __init__(self, tenant_id: str, topic: str):
        self.logger = get_logger('pipeline')
        self.tenant_id = tenant_id
        self.topic = topic

    def log_run_start(self):
        self.logger.info(
            f"Pipeline started: '{self.topic}' for tenant {self.tenant_id}",
            tenant_id=self.tenant_id,
            topic=self.topic
        )

    def log_stage_start(self, stage: str):
        self.logger.info(f"Stage started: {stage}", tenant_id=self.tenant_id, stage=stage)

    def log_stage_complete(self, stage: str, duration_ms: Optional[int], **kwargs):
        self.logger.info(
            f"Stage completed: {stage} ({duration_ms}ms)",
            tenant_id=self.tenant_id,
            stage=stage,
            duration_ms=duration_ms,
            **kwargs
        )

    def log_stage_error(self, stage: Optional[str], error: str, exc_info: bool = False):
        self.logger.error(
            f"Stage failed: {stage or 'pipeline'} - {error}",
            exc_info=exc_info,
            tenant_id=self.tenant_id,
            stage=stage,
            error=error
        )

    def log_warning(self, warning: str):
        self.logger.warning(f"Quality warning: {warning}", tenant_id=self.tenant_id)

    def log_run_complete(self, success: bool, duration_ms: int, article_id: Optional[str] = None):
        self.logger.info(
            f"Pipeline {'completed' if success else 'failed'} in {duration_ms}ms",
            tenant_id=self.tenant_id,
            success=success,
            duration_ms=duration_ms,
            article_id=article_id
        )


class RequestLogger:
    """Logger for HTTP requests."""

    def __init__(self):
        self.logger = get_logger('request')

    def log_request(self, method: str, path: str, remote_addr: str, **kwargs):
        self.logger.info(
            f"Request: {method} {path}",
            method=method,
            path=path,
            remote_addr=remote_addr,
            **kwargs
        )

    def log_response(self, method: str, path: str, status_code: int,
                     duration: float, **kwargs):
        self.logger.info(
            f"Response: {status_code} for {method} {path}",
            method=method,
            path=path,
            status_code=status_code,
            duration=duration,
            **kwargs
        )


class TaskLogger:
    """Logger for Celery tasks."""

    def __init__(self):
        self.logger = get_logger('task')

    def log_task_start(self, task_id: str, task_name: str, **kwargs):
        self.logger.info(
            f"Task started: {task_name}",
            task_id=task_id,
            task_name=task_name,
            **kwargs
        )

    def log_task_complete(self, task_id: str, task_name: str, duration: float, **kwargs):
        self.logger.info(
            f"Task completed: {task_name} ({duration:.2f}s)",
            task_id=task_id,
            task_name=task_name,
            duration=duration,
            **kwargs
        )

    def log_task_error(self, task_id: str, task_name: str, error: str, **kwargs):
        self.logger.error(
            f"Task error: {error}",
            task_id=task_id,
            task_name=task_name,
            error=error,
            **kwargs
        )
