"""
Tests for the HTTP API.

Celery tasks are replaced with recorders; the in-memory store backs the
article endpoints.
"""

import asyncio

import pytest

from content_pipeline import factory
from content_pipeline.api import create_app
from content_pipeline.api.endpoints import articles as articles_module
from content_pipeline.core.models.workflow import ContentRequest
from content_pipeline.core.orchestrator import PipelineOrchestrator
from content_pipeline.integrations.storage import ArticleRepository, InMemoryStore

from conftest import OTHER_TENANT, TENANT, StubClassifier, StubDeepChecker, StubResearcher, StubWriter


class RecordingTask:
    """Stands in for a Celery task's ``delay``."""

    def __init__(self, task_id):
        self.task_id = task_id
        self.payloads = []

    def delay(self, payload):
        self.payloads.append(payload)
        return type('AsyncResult', (), {'id': self.task_id})()


@pytest.fixture
def memory_store(monkeypatch):
    store = InMemoryStore()
    monkeypatch.setattr(factory, '_memory_store', store)
    return store


@pytest.fixture
def pipeline_task(monkeypatch):
    task = RecordingTask('task-123')
    monkeypatch.setattr(articles_module, 'run_content_pipeline', task)
    return task


@pytest.fixture
def rewrite_task(monkeypatch):
    task = RecordingTask('task-456')
    monkeypatch.setattr(articles_module, 'run_article_rewrite', task)
    return task


@pytest.fixture
def client(memory_store):
    app = create_app('testing')
    return app.test_client()


@pytest.fixture
def headers():
    return {'X-API-Key': 'test-api-key', 'X-Tenant-ID': TENANT}


@pytest.fixture
def stored_article(memory_store):
    """ID of a version-1 article stored for TENANT."""
    orchestrator = PipelineOrchestrator(
        researcher=StubResearcher(),
        classifier=StubClassifier(),
        writer=StubWriter(),
        deep_checker=StubDeepChecker(),
        repository=ArticleRepository(memory_store)
    )
    result = asyncio.run(orchestrator.run(ContentRequest(topic="Industrial sensors", tenant_id=TENANT)))
    assert result.success
    return result.article_id


def test_health_needs_no_api_key(client):
    """Test health endpoints are public."""
    assert client.get('/api/v1/health').status_code == 200
    assert client.get('/api/v1/health/live').status_code == 200

    ready = client.get('/api/v1/health/ready')
    assert ready.status_code == 200
    assert ready.get_json()['status'] == 'ready'


def test_missing_api_key(client, pipeline_task):
    """Test requests without an API key are rejected."""
    response = client.post('/api/v1/articles', json={'topic': 'Sensors'})

    assert response.status_code == 401
    assert response.get_json()['error'] == 'authentication_required'
    assert pipeline_task.payloads == []


def test_invalid_api_key(client):
    """Test an unknown API key is rejected."""
    response = client.post(
        '/api/v1/articles',
        json={'topic': 'Sensors'},
        headers={'X-API-Key': 'wrong', 'X-Tenant-ID': TENANT}
    )

    assert response.status_code == 401
    assert response.get_json()['error'] == 'invalid_api_key'


def test_missing_tenant(client, pipeline_task):
    """Test article endpoints require the tenant header."""
    response = client.post('/api/v1/articles', json={'topic': 'Sensors'}, headers={'X-API-Key': 'test-api-key'})

    assert response.status_code == 400
    assert response.get_json()['error'] == 'tenant_required'
    assert pipeline_task.payloads == []


def test_create_article_queues_task(client, headers, pipeline_task):
    """Test a valid request is queued with the tenant from the header."""
    response = client.post('/api/v1/articles', json={
        'topic': 'Industrial sensors',
        'targetAudience': 'engineers',
        'keywords': 'sensors, calibration',
        'tenantId': OTHER_TENANT,
        'lineage': {'version': 5, 'parent_article_id': 'x', 'version_notes': 'y'}
    }, headers=headers)

    assert response.status_code == 202
    body = response.get_json()
    assert body['task_id'] == 'task-123'
    assert body['status_url'] == '/api/v1/articles/tasks/task-123'

    payload = pipeline_task.payloads[0]
    assert payload['tenant_id'] == TENANT
    assert payload['target_audience'] == 'engineers'
    assert payload['keywords'] == ['sensors', 'calibration']
    assert 'lineage' not in payload


def test_create_article_validation_error(client, headers, pipeline_task):
    """Test an invalid body returns the field errors."""
    response = client.post('/api/v1/articles', json={'keywords': ['sensors']}, headers=headers)

    assert response.status_code == 400
    body = response.get_json()
    assert body['error'] == 'validation_error'
    assert any(error['field'] == 'topic' for error in body['validation_errors'])
    assert pipeline_task.payloads == []


def test_create_article_requires_json_object(client, headers):
    """Test a non-object body is rejected."""
    response = client.post('/api/v1/articles', data='not json', headers=headers)

    assert response.status_code == 400
    assert response.get_json()['error'] == 'invalid_request'


def test_task_status(client, headers, monkeypatch):
    """Test the task endpoint returns the task status to the owning tenant."""
    monkeypatch.setattr(articles_module, 'get_task_status', lambda task_id: {
        'task_id': task_id, 'tenant_id': TENANT, 'status': 'SUCCESS', 'ready': True,
        'result': {'success': True}
    })

    response = client.get('/api/v1/articles/tasks/task-123', headers=headers)

    assert response.status_code == 200
    assert response.get_json()['status'] == 'SUCCESS'


def test_task_status_hidden_from_other_tenants(client, monkeypatch):
    """Test a tenant polling another tenant's task gets 404 and no result."""
    monkeypatch.setattr(articles_module, 'get_task_status', lambda task_id: {
        'task_id': task_id, 'tenant_id': TENANT, 'status': 'SUCCESS', 'ready': True,
        'result': {'success': True, 'article': {'content': 'confidential'}}
    })

    response = client.get(
        '/api/v1/articles/tasks/task-123',
        headers={'X-API-Key': 'test-api-key', 'X-Tenant-ID': OTHER_TENANT}
    )

    assert response.status_code == 404
    assert 'result' not in response.get_json()
    assert response.get_json()['error_code'] == 'TASK_NOT_FOUND'


def test_task_status_without_owner_is_hidden_once_started(client, headers, monkeypatch):
    """Test a finished task whose tenant cannot be determined is not disclosed."""
    monkeypatch.setattr(articles_module, 'get_task_status', lambda task_id: {
        'task_id': task_id, 'tenant_id': None, 'status': 'FAILURE', 'ready': True,
        'error': 'boom'
    })

    response = client.get('/api/v1/articles/tasks/task-123', headers=headers)

    assert response.status_code == 404


def test_unknown_task_reports_pending(client, headers, monkeypatch):
    """Test an unknown task id reports PENDING like Celery does."""
    monkeypatch.setattr(articles_module, 'get_task_status', lambda task_id: {
        'task_id': task_id, 'tenant_id': None, 'status': 'PENDING', 'ready': False
    })

    response = client.get('/api/v1/articles/tasks/task-123', headers=headers)

    assert response.status_code == 200
    assert response.get_json()['status'] == 'PENDING'


def test_task_status_unavailable(client, headers, monkeypatch):
    """Test an unreadable task status is reported as unavailable."""
    monkeypatch.setattr(articles_module, 'get_task_status', lambda task_id: None)

    response = client.get('/api/v1/articles/tasks/task-123', headers=headers)

    assert response.status_code == 503


def test_get_article(client, headers, stored_article):
    """Test a stored article is returned to its tenant only."""
    response = client.get(f'/api/v1/articles/{stored_article}', headers=headers)
    other = client.get(
        f'/api/v1/articles/{stored_article}',
        headers={'X-API-Key': 'test-api-key', 'X-Tenant-ID': OTHER_TENANT}
    )

    assert response.status_code == 200
    assert response.get_json()['id'] == stored_article
    assert response.get_json()['version'] == 1
    assert other.status_code == 404


def test_rewrite_queues_task(client, headers, stored_article, rewrite_task):
    """Test a rewrite request is queued for an existing article."""
    response = client.post(
        f'/api/v1/articles/{stored_article}/rewrite',
        json={'versionNotes': 'Shorter introduction'},
        headers=headers
    )

    assert response.status_code == 202
    assert response.get_json()['task_id'] == 'task-456'
    assert rewrite_task.payloads == [{
        'article_id': stored_article,
        'version_notes': 'Shorter introduction',
        'tenant_id': TENANT
    }]


def test_rewrite_unknown_article(client, headers, memory_store, rewrite_task):
    """Test rewriting an unknown article returns 404 without queuing."""
    response = client.post(
        '/api/v1/articles/missing/rewrite',
        json={'versionNotes': 'Shorter introduction'},
        headers=headers
    )

    assert response.status_code == 404
    assert response.get_json()['error'] == 'not_found'
    assert rewrite_task.payloads == []


def test_rewrite_requires_notes(client, headers, stored_article, rewrite_task):
    """Test version notes are required."""
    response = client.post(f'/api/v1/articles/{stored_article}/rewrite', json={}, headers=headers)

    assert response.status_code == 400
    assert rewrite_task.payloads == []


def test_list_versions(client, headers, stored_article, memory_store):
    """Test the lineage of an article is listed oldest first."""
    memory_store.insert('articles', {
        'title': 'Industrial sensors v2', 'content': 'text', 'topic': 'Industrial sensors',
        'version': 2, 'parent_article_id': stored_article, 'version_notes': 'Shorter intro'
    }, TENANT)

    response = client.get(f'/api/v1/articles/{stored_article}/versions', headers=headers)

    assert response.status_code == 200
    body = response.get_json()
    assert body['root_id'] == stored_article
    assert [version['version'] for version in body['versions']] == [1, 2]
    assert body['versions'][1]['version_notes'] == 'Shorter intro'


def test_unknown_route_returns_json_404(client, headers):
    """Test unknown routes return a JSON error body."""
    response = client.get('/api/v1/unknown', headers=headers)

    assert response.status_code == 404
    assert response.get_json()['error'] == 'not_found'


def test_quality_gate_errors_map_to_unprocessable(memory_store, headers):
    """Test quality gate exceptions render as 422 responses"""
    from content_pipeline.core.models.errors import InsufficientFactsError

    app = create_app('testing')

    @app.route('/gate-check')
    def gate_check():
        raise InsufficientFactsError("Only 3 approved facts", approved_count=3)

    response = app.test_client().get('/gate-check', headers=headers)

    assert response.status_code == 422
    body = response.get_json()
    assert body['error_code'] == 'INSUFFICIENT_FACTS'
    assert body['details']['approved_count'] == 3
