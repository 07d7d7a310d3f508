"""
Tests for the persistent store and the article repository.
"""

import asyncio

import pytest

from content_pipeline.core.brand import BrandSettings
from content_pipeline.core.compliance import ComplianceScorer
from content_pipeline.core.models.article import VersionStamp
from content_pipeline.core.models.errors import (
    ArticleNotFoundError,
    ConfigurationError,
    StorageError,
    UniqueViolationError
)
from content_pipeline.core.models.facts import ApprovedFact
from content_pipeline.core.models.workflow import ContentRequest
from content_pipeline.integrations.storage import ArticleRepository, InMemoryStore, SupabaseStore
from content_pipeline.integrations.storage.base import tenant_column

from conftest import OTHER_TENANT, TENANT, FailingStore, StubDeepChecker, make_article, make_fact


def approved_facts(count):
    return [ApprovedFact(**make_fact(i).model_dump(), approval_reason="Official") for i in range(1, count + 1)]


def compliance_result(article):
    return asyncio.run(ComplianceScorer(StubDeepChecker()).score(article, []))


def save(repository, request=None, facts=3):
    article = make_article()
    request = request or ContentRequest(topic="Sensors", tenant_id=TENANT, keywords=["sensors"])
    return repository.save_article(request, article, compliance_result(article), approved_facts(facts))


def test_tenant_columns():
    """Test clients are scoped by id and everything else by tenant_id."""
    assert tenant_column("clients") == "id"
    assert tenant_column("articles") == "tenant_id"
    assert tenant_column("compliance_logs") == "tenant_id"


def test_store_queries_are_tenant_scoped(store):
    """Test rows of one tenant are invisible to another."""
    row_id = store.insert("articles", {"title": "A"}, TENANT)

    assert len(store.query("articles", TENANT)) == 1
    assert store.query("articles", OTHER_TENANT) == []

    store.update("articles", row_id, {"title": "B"}, OTHER_TENANT)
    store.delete("articles", row_id, OTHER_TENANT)

    assert store.query("articles", TENANT)[0]["title"] == "A"


def test_store_filters_order_and_limit(store):
    """Test equality filters, ordering and limits."""
    for version in (3, 1, 2):
        store.insert("articles", {"version": version, "topic": "x"}, TENANT)
    store.insert("articles", {"version": 9, "topic": "y"}, TENANT)

    rows = store.query("articles", TENANT, filters={"topic": "x"}, order_by="version", descending=True, limit=2)

    assert [row["version"] for row in rows] == [3, 2]


def test_store_rejects_duplicate_ids(store):
    """Test inserting an existing id raises StorageError."""
    store.insert("articles", {"id": "fixed"}, TENANT)

    with pytest.raises(StorageError):
        store.insert("articles", {"id": "fixed"}, TENANT)


def test_store_enforces_unique_lineage_versions(store):
    """Test two rows with the same parent and version are rejected."""
    store.insert("articles", {"parent_article_id": "root", "version": 2}, TENANT)
    store.insert("articles", {"parent_article_id": "root", "version": 2}, OTHER_TENANT)
    store.insert("articles", {"parent_article_id": None, "version": 1}, TENANT)
    store.insert("articles", {"parent_article_id": None, "version": 1}, TENANT)

    with pytest.raises(UniqueViolationError):
        store.insert("articles", {"parent_article_id": "root", "version": 2}, TENANT)


def test_store_returns_copies(store):
    """Test callers cannot mutate stored rows through query results."""
    store.insert("articles", {"id": "a1", "metadata": {"keywords": ["x"]}}, TENANT)

    store.query("articles", TENANT)[0]["metadata"]["keywords"].append("y")

    assert store.query("articles", TENANT)[0]["metadata"]["keywords"] == ["x"]


def test_save_article_writes_article_facts_and_log(repository, store):
    """Test one save writes the article, its facts and a compliance log."""
    article_id = save(repository)

    record = repository.get_article(article_id, TENANT)
    assert record.version == 1
    assert record.parent_article_id is None
    assert record.status == "approved"
    assert record.keywords == ["sensors"]
    assert record.metadata["facts_used"] == make_article().facts_used

    facts = store.query("facts", TENANT, filters={"article_id": article_id})
    assert len(facts) == 3
    assert facts[0]["approval_reason"] == "Official"

    logs = store.query("compliance_logs", TENANT, filters={"article_id": article_id})
    assert len(logs) == 1
    assert logs[0]["approved"] is True


def test_save_article_rolls_back_on_failure():
    """Test a failed fact insert leaves nothing behind."""
    store = FailingStore("facts")
    repository = ArticleRepository(store)

    with pytest.raises(StorageError) as exc_info:
        save(repository)

    assert exc_info.value.operation == "save_article"
    assert store.count("articles") == 0


def test_get_article_is_tenant_scoped(repository):
    """Test another tenant's article is reported as not found."""
    article_id = save(repository)

    with pytest.raises(ArticleNotFoundError):
        repository.get_article(article_id, OTHER_TENANT)


def test_get_lineage_orders_by_version(repository, store):
    """Test the lineage contains the root and its children in version order."""
    root_id = save(repository)
    for version in (3, 2):
        store.insert("articles", {
            "title": f"v{version}", "content": "", "topic": "Sensors",
            "version": version, "parent_article_id": root_id
        }, TENANT)

    lineage = repository.get_lineage(root_id, TENANT)

    assert [record.version for record in lineage] == [1, 2, 3]


def test_brand_settings_default_without_client_row(repository):
    """Test a tenant without a clients row gets empty brand settings."""
    assert repository.load_brand_settings(TENANT) == BrandSettings()


def test_supabase_store_requires_credentials():
    """Test missing credentials raise ConfigurationError."""
    with pytest.raises(ConfigurationError):
        SupabaseStore.from_credentials(None, None)


class RacingStore(InMemoryStore):
    """Stores a competing version just before the first rewrite insert lands."""

    def __init__(self):
        super().__init__()
        self.raced = False

    def insert(self, table, row, tenant_id):
        if table == "articles" and row.get("parent_article_id") and not self.raced:
            self.raced = True
            super().insert(table, {**row, "id": "competitor"}, tenant_id)
        return super().insert(table, row, tenant_id)


def rewrite_request(root_id):
    return ContentRequest(
        topic="Sensors",
        tenant_id=TENANT,
        lineage=VersionStamp(parent_article_id=root_id, version_notes="Shorter")
    )


def test_save_article_allocates_next_version(repository):
    """Test rewrites are numbered one past the highest stored version."""
    root_id = save(repository)

    second = save(repository, rewrite_request(root_id))
    third = save(repository, rewrite_request(root_id))

    assert repository.get_article(root_id, TENANT).version == 1
    assert repository.get_article(second, TENANT).version == 2
    assert repository.get_article(third, TENANT).version == 3


def test_save_article_retries_when_a_version_is_taken():
    """Test a version claimed between the lineage read and the insert is skipped."""
    store = RacingStore()
    repository = ArticleRepository(store)
    root_id = save(repository)

    article_id = save(repository, rewrite_request(root_id))

    assert repository.get_article("competitor", TENANT).version == 2
    assert repository.get_article(article_id, TENANT).version == 3
    assert [record.version for record in repository.get_lineage(root_id, TENANT)] == [1, 2, 3]


def test_next_version_of_a_lineage(repository):
    """Test the next version is one past the highest existing version."""
    root_id = save(repository)
    save(repository, rewrite_request(root_id))

    assert ArticleRepository.next_version(repository.get_lineage(root_id, TENANT)) == 3
    assert ArticleRepository.next_version([]) == 1


class ConflictingTable:
    """Supabase table builder whose inserts fail like a Postgres unique index."""

    def insert(self, payload):
        return self

    def execute(self):
        error = Exception("duplicate key value violates unique constraint")
        error.code = "23505"
        raise error


def test_supabase_unique_violation_is_reported():
    """Test a unique index violation surfaces as UniqueViolationError."""
    client = type("Client", (), {"table": lambda self, name: ConflictingTable()})()
    store = SupabaseStore(client)

    with pytest.raises(UniqueViolationError) as exc_info:
        store.insert("articles", {"parent_article_id": "root", "version": 2}, TENANT)

    assert exc_info.value.columns == ("parent_article_id", "version")
