"""
Pipeline tasks for the content pipeline.

This module contains the Celery tasks that run the content pipeline and
article rewrites, plus task status helpers for the HTTP layer.
"""

import asyncio
import logging
import time
from typing import Dict, Any, Optional

from .celery_app import celery_app
from ..core.models.errors import ArticleNotFoundError, RewriteError
from ..core.models.workflow import ContentRequest, RewriteRequest
from ..factory import build_orchestrator, build_version_manager
from ..utils.logging import TaskLogger

logger = logging.getLogger(__name__)
task_logger = TaskLogger()


@celery_app.task(bind=True, name='content_pipeline.tasks.pipeline.run_content_pipeline')
def run_content_pipeline(self, request_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Run the content pipeline for one request.

    Args:
        request_data: ContentRequest fields (tenant resolved by the caller)

    Returns:
        ContentResult envelope as JSON-compatible dict
    """
    task_id = self.request.id
    start_time = time.time()

    try:
        task_logger.log_task_start(task_id, 'run_content_pipeline')

        request = ContentRequest.model_validate(request_data)

        self.update_state(
            state='PROGRESS',
            meta={
                'stage': 'running',
                'message': f"Creating content for '{request.topic}'",
                'tenant_id': request.tenant_id
            }
        )

        result = asyncio.run(build_orchestrator().run(request))

        task_logger.log_task_complete(
            task_id, 'run_content_pipeline', time.time() - start_time,
            success=result.success
        )

        return {**result.model_dump(mode='json'), 'tenant_id': request.tenant_id}

    except Exception as e:
        error_msg = f"Pipeline task failed: {str(e)}"
        logger.error(error_msg, exc_info=True)
        task_logger.log_task_error(task_id, 'run_content_pipeline', error_msg)
        raise


@celery_app.task(bind=True, name='content_pipeline.tasks.pipeline.run_article_rewrite')
def run_article_rewrite(self, rewrite_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create a new version of an existing article.

    Args:
        rewrite_data: RewriteRequest fields

    Returns:
        Dict with ``success`` and either the RewriteResult fields or the
        failure details
    """
    task_id = self.request.id
    start_time = time.time()

    try:
        task_logger.log_task_start(task_id, 'run_article_rewrite')

        rewrite = RewriteRequest.model_validate(rewrite_data)

        self.update_state(
            state='PROGRESS',
            meta={
                'stage': 'rewriting',
                'message': f"Rewriting article {rewrite.article_id}",
                'tenant_id': rewrite.tenant_id
            }
        )

        manager = build_version_manager()

        try:
            outcome = asyncio.run(
                manager.rewrite(rewrite.article_id, rewrite.version_notes, rewrite.tenant_id)
            )
        except ArticleNotFoundError as e:
            return {
                'success': False,
                'error': e.message,
                'error_type': 'not_found',
                'tenant_id': rewrite.tenant_id
            }
        except RewriteError as e:
            result = e.result
            return {
                'success': False,
                'error': e.message,
                'error_type': result.error_type if result else None,
                'result': result.model_dump(mode='json') if result else None,
                'tenant_id': rewrite.tenant_id
            }

        task_logger.log_task_complete(task_id, 'run_article_rewrite', time.time() - start_time)

        return {'success': True, **outcome.model_dump(mode='json'), 'tenant_id': rewrite.tenant_id}

    except Exception as e:
        error_msg = f"Rewrite task failed: {str(e)}"
        logger.error(error_msg, exc_info=True)
        task_logger.log_task_error(task_id, 'run_article_rewrite', error_msg)
        raise


def get_task_status(task_id: str) -> Optional[Dict[str, Any]]:
    """
    Get task status.

    Args:
        task_id: Task ID

    Returns:
        Task status including the owning tenant (None while unknown), or
        None if it cannot be read
    """
    try:
        task = celery_app.AsyncResult(task_id)
        info = task.info if isinstance(task.info, dict) else {}

        return {
            'task_id': task_id,
            'tenant_id': _task_tenant(task, info),
            'status': task.status,
            'ready': task.ready(),
            'successful': task.successful() if task.ready() else False,
            'result': task.result if task.successful() else None,
            'error': str(task.result) if task.failed() else None,
            'stage': info.get('stage', '') if not task.ready() else '',
            'message': info.get('message', '') if not task.ready() else ''
        }

    except Exception as e:
        logger.error(f"Error getting task status: {str(e)}")
        return None


def _task_tenant(task, info: Dict[str, Any]) -> Optional[str]:
    """Tenant from the result or progress meta, else from the stored task arguments."""
    if info.get('tenant_id'):
        return info['tenant_id']

    args = task.args or ()
    payload = args[0] if args else None
    return payload.get('tenant_id') if isinstance(payload, dict) else None
