"""
Shared fixtures for the content pipeline tests.

Stage stand-ins are deterministic and record how they were called, so the
orchestrator can be exercised without a language model.
"""

import asyncio
import time

import pytest

from content_pipeline.core.brand import BrandSettings
from content_pipeline.core.models.article import Article
from content_pipeline.core.models.compliance import ComplianceCheck, ComplianceChecks, DeepComplianceVerdict
from content_pipeline.core.models.errors import StorageError
from content_pipeline.core.models.facts import (
    ApprovedFact,
    ClassificationVerdict,
    Fact,
    FactCategory,
    RejectedFact,
    ResearchResult
)
from content_pipeline.core.orchestrator import PipelineOrchestrator
from content_pipeline.integrations.llm.retry_handler import RetryHandler
from content_pipeline.integrations.storage import ArticleRepository, InMemoryStore


TENANT = "tenant-a"
OTHER_TENANT = "tenant-b"

BODY_SENTENCE = "Industrial sensors report temperature data every second. "


def make_fact(index, confidence=0.9, category=FactCategory.TECHNICAL, claim=None):
    return Fact(
        claim=claim or f"Sensor model {index} measures up to {index * 10} degrees",
        source="Vendor documentation",
        source_url=f"https://example.com/specs/{index}",
        confidence=confidence,
        category=category
    )


def make_facts(count, **kwargs):
    return [make_fact(i, **kwargs) for i in range(1, count + 1)]


def make_article(content=None, title="Choosing industrial sensors", meta_description="How to pick sensors."):
    content = content if content is not None else BODY_SENTENCE * 100
    return Article(
        title=title,
        meta_description=meta_description,
        content=content,
        keywords=["sensors"],
        word_count=len(content.split()),
        facts_used=["Sensor model 1 measures up to 10 degrees"]
    )


def approved_verdict(checks_score=95, issues=None, approved=True):
    check = ComplianceCheck(passed=True, score=checks_score)
    return DeepComplianceVerdict(
        approved=approved,
        checks=ComplianceChecks(
            fact_verification=check,
            tone_of_voice=check,
            technical=check,
            completeness=check,
            seo=check
        ),
        issues=issues or [],
        recommendations=["Add a customer quote"]
    )


class StubResearcher:
    """Returns fixed facts; can fail a number of times or stall."""

    def __init__(self, facts=None, errors=None, delay=0.0):
        self.facts = list(facts if facts is not None else make_facts(10))
        self.errors = list(errors or [])
        self.delay = delay
        self.calls = 0

    async def research(self, topic, keywords, sources):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.errors:
            raise self.errors.pop(0)
        return ResearchResult(facts=self.facts, summary="stub research")


class StubClassifier:
    """Approves the first ``approve`` facts and rejects the rest."""

    def __init__(self, approve=None):
        self.approve = approve
        self.received = None

    async def classify(self, facts):
        self.received = list(facts)
        count = len(facts) if self.approve is None else self.approve
        return ClassificationVerdict(
            approved=[
                ApprovedFact(**fact.model_dump(), approval_reason="Official source")
                for fact in facts[:count]
            ],
            rejected=[
                RejectedFact(**fact.model_dump(), rejection_reason="Unverifiable claim")
                for fact in facts[count:]
            ]
        )


class StubWriter:
    """Returns a fixed article and records every call."""

    def __init__(self, article=None):
        self.article = article or make_article()
        self.calls = []

    async def write(self, approved_facts, topic, target_audience, keywords, desired_word_count,
                    brand, briefing=None, version_notes=None):
        self.calls.append({
            "facts": list(approved_facts),
            "topic": topic,
            "target_audience": target_audience,
            "brand": brand,
            "briefing": briefing,
            "version_notes": version_notes,
        })
        return self.article


class StubDeepChecker:
    def __init__(self, verdict=None):
        self.verdict = verdict or approved_verdict()
        self.calls = 0

    async def score_deep(self, article, approved_facts):
        self.calls += 1
        return self.verdict


class FailingStore(InMemoryStore):
    """In-memory store whose inserts into one table fail."""

    def __init__(self, failing_table):
        super().__init__()
        self.failing_table = failing_table

    def insert(self, table, row, tenant_id):
        if table == self.failing_table:
            raise StorageError(f"insert into {table} refused", table=table, operation="insert")
        return super().insert(table, row, tenant_id)



class SlowStore(InMemoryStore):
    """In-memory store whose queries block the calling thread."""

    def __init__(self, delay):
        super().__init__()
        self.delay = delay

    def query(self, table, tenant_id, **kwargs):
        time.sleep(self.delay)
        return super().query(table, tenant_id, **kwargs)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def repository(store):
    return ArticleRepository(store)


@pytest.fixture
def brand_settings():
    return BrandSettings(
        name="Acme Sensors",
        style="Direct and technical",
        avoid_words=["revolutionary"],
        terminology={"thermometer": "Use 'temperature sensor'"},
        audiences={"engineers": {"interests": ["accuracy"], "pain_points": ["calibration drift"]}}
    )


@pytest.fixture
def make_orchestrator(store):
    """Factory building an orchestrator from stubs, overridable per test."""

    def build(researcher=None, classifier=None, writer=None, deep_checker=None,
              repository=None, timeout_seconds=5.0):
        stages = {
            "researcher": researcher or StubResearcher(),
            "classifier": classifier or StubClassifier(),
            "writer": writer or StubWriter(),
            "deep_checker": deep_checker or StubDeepChecker(),
        }
        orchestrator = PipelineOrchestrator(
            repository=repository or ArticleRepository(store),
            retry_handler=RetryHandler(max_attempts=3, backoff_seconds=0),
            timeout_seconds=timeout_seconds,
            **stages
        )
        return orchestrator, stages

    return build
