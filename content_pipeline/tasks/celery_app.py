"""
Celery application configuration for the content pipeline.

This module configures the Celery application for asynchronous
pipeline and rewrite runs.
"""

from celery import Celery
from kombu import Queue

from ..utils.config import get_config

# Get configuration
config = get_config()

# Create Celery app
celery_app = Celery('content_pipeline', include=['content_pipeline.tasks.pipeline'])

# Configure Celery
celery_app.conf.update(
    broker_url=config.CELERY_BROKER_URL,
    result_backend=config.CELERY_RESULT_BACKEND,
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
    task_track_started=True,
    task_time_limit=config.CELERY_TASK_TIME_LIMIT,
    task_soft_time_limit=config.CELERY_TASK_SOFT_TIME_LIMIT,
    task_always_eager=config.CELERY_TASK_ALWAYS_EAGER,
    worker_prefetch_multiplier=config.CELERY_WORKER_PREFETCH_MULTIPLIER,
    worker_max_tasks_per_child=config.CELERY_WORKER_MAX_TASKS_PER_CHILD,
    worker_hijack_root_logger=False,
    result_extended=True,
    result_expires=86400,
    task_default_queue='pipeline',
    task_queues=(
        Queue('pipeline', routing_key='pipeline'),
    ),
    task_routes={
        'content_pipeline.tasks.pipeline.*': {'queue': 'pipeline'},
    }
)
