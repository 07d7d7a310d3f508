#!/usr/bin/env python3
"""
Celery worker runner for the content pipeline.

This script starts a Celery worker to process pipeline and rewrite tasks.
"""

import os
import sys
import logging

from content_pipeline.tasks.celery_app import celery_app
from content_pipeline.utils.config import get_config, validate_config
from content_pipeline.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def main():
    """Start the Celery worker."""
    config = get_config()
    setup_logging(vars(config))

    errors = validate_config(config)
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        sys.exit(1)

    try:
        logger.info("Starting content pipeline Celery worker...")
        logger.info("Worker will process tasks from the 'pipeline' queue")

        worker = celery_app.Worker(
            queues=['pipeline'],
            concurrency=int(os.environ.get('CELERY_CONCURRENCY', 2)),
            loglevel='info',
            hostname='content-pipeline-worker@%h'
        )

        worker.start()

    except KeyboardInterrupt:
        logger.info("Worker stopped by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Worker failed to start: {str(e)}")
        sys.exit(1)


if __name__ == '__main__':
    main()
