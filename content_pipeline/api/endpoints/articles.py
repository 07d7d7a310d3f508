"""
Article endpoints for the content pipeline.

Content and rewrite requests are validated here and handed to Celery
workers; clients poll the task endpoint for the result envelope. Every
endpoint is scoped to the tenant resolved by the authentication middleware.
"""

import logging
from datetime import datetime, timezone
from flask import Blueprint, request, jsonify, g, url_for

from ..extensions import limiter, create_limit, pipeline_config
from ..middleware.auth import require_tenant
from ...core.models.errors import ErrorResponse
from ...core.models.workflow import ContentRequest, RewriteRequest
from ...factory import build_repository
from ...tasks.pipeline import run_content_pipeline, run_article_rewrite, get_task_status


logger = logging.getLogger(__name__)

# Create blueprint
articles_bp = Blueprint('articles', __name__, url_prefix='/api/v1')

# Never taken from the request body
SERVER_FIELDS = ('tenant_id', 'tenantId', 'lineage', 'article_id', 'articleId')


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


def _invalid_body():
    return jsonify(ErrorResponse(
        error="invalid_request",
        message="Request body must be a JSON object",
        error_code="VALIDATION_ERROR",
        status=400
    ).to_json()), 400


def _client_fields(data: dict) -> dict:
    return {k: v for k, v in data.items() if k not in SERVER_FIELDS}


@articles_bp.route('/articles', methods=['POST'])
@limiter.limit(create_limit)
@require_tenant
def create_article():
    """
    Queue a content pipeline run.

    Request body: topic (required), targetAudience, keywords,
    desiredWordCount, sources, briefing, createdBy.

    Returns:
        202 with the task ID and its status URL
    """
    data = _json_body()
    if data is None:
        return _invalid_body()

    content_request = ContentRequest.model_validate({**_client_fields(data), 'tenant_id': g.tenant_id})

    task = run_content_pipeline.delay(content_request.model_dump(mode='json', exclude={'lineage'}))

    logger.info(f"Queued pipeline task {task.id} for tenant {g.tenant_id}: {content_request.topic}")

    return jsonify({
        "task_id": task.id,
        "status": "PENDING",
        "status_url": url_for('articles.get_task', task_id=task.id),
        "created_at": datetime.now(timezone.utc).isoformat()
    }), 202


@articles_bp.route('/articles/tasks/<task_id>', methods=['GET'])
@require_tenant
def get_task(task_id):
    """
    Get status and, once finished, the result of a pipeline or rewrite task.

    Args:
        task_id: Celery task ID
    """
    task_status = get_task_status(task_id)

    if task_status is None:
        return jsonify(ErrorResponse(
            error="task_status_unavailable",
            message="Task status could not be retrieved",
            error_code="TASK_STATUS_UNAVAILABLE",
            status=503
        ).to_json()), 503

    owner = task_status.get('tenant_id')
    unknown_id = owner is None and task_status.get('status') == 'PENDING'

    if owner != g.tenant_id and not unknown_id:
        logger.warning(f"Tenant {g.tenant_id} requested task {task_id} it does not own")
        return jsonify(ErrorResponse(
            error="not_found",
            message=f"Task {task_id} not found",
            error_code="TASK_NOT_FOUND",
            status=404
        ).to_json()), 404

    return jsonify(task_status), 200


@articles_bp.route('/articles/<article_id>', methods=['GET'])
@require_tenant
def get_article(article_id):
    """Get one stored article of the tenant."""
    record = build_repository(pipeline_config()).get_article(article_id, g.tenant_id)
    return jsonify(record.model_dump(mode='json')), 200


@articles_bp.route('/articles/<article_id>/rewrite', methods=['POST'])
@limiter.limit(create_limit)
@require_tenant
def rewrite_article(article_id):
    """
    Queue a rewrite producing the next version of an article.

    Request body: versionNotes (required).

    Returns:
        202 with the task ID, or 404 if the article is unknown to the tenant
    """
    data = _json_body()
    if data is None:
        return _invalid_body()

    rewrite = RewriteRequest.model_validate({
        **_client_fields(data),
        'article_id': article_id,
        'tenant_id': g.tenant_id
    })

    # Fail fast on unknown articles instead of inside the worker
    build_repository(pipeline_config()).get_article(article_id, g.tenant_id)

    task = run_article_rewrite.delay(rewrite.model_dump(mode='json'))

    logger.info(f"Queued rewrite task {task.id} for article {article_id}")

    return jsonify({
        "task_id": task.id,
        "article_id": article_id,
        "status": "PENDING",
        "status_url": url_for('articles.get_task', task_id=task.id),
        "created_at": datetime.now(timezone.utc).isoformat()
    }), 202


@articles_bp.route('/articles/<article_id>/versions', methods=['GET'])
@require_tenant
def list_versions(article_id):
    """List every version in the lineage of an article, oldest first."""
    repository = build_repository(pipeline_config())
    record = repository.get_article(article_id, g.tenant_id)
    lineage = repository.get_lineage(record.lineage_root_id, g.tenant_id)

    return jsonify({
        "article_id": article_id,
        "root_id": record.lineage_root_id,
        "versions": [
            {
                "id": version.id,
                "version": version.version,
                "parent_article_id": version.parent_article_id,
                "version_notes": version.version_notes,
                "title": version.title,
                "status": version.status,
                "created_at": version.created_at.isoformat()
            }
            for version in lineage
        ]
    }), 200
