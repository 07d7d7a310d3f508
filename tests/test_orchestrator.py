"""
Tests for the pipeline orchestrator.

Each run goes through the stub stages defined in conftest; the in-memory
store shows what was persisted.
"""

import asyncio
import time

from content_pipeline.core.models.compliance import CheckName, ComplianceIssue, IssueSeverity
from content_pipeline.core.models.errors import RateLimitError
from content_pipeline.core.models.workflow import ContentRequest
from content_pipeline.core.orchestrator import GENERIC_ERROR_MESSAGE
from content_pipeline.integrations.storage import ArticleRepository

from conftest import (
    TENANT,
    FailingStore,
    SlowStore,
    StubClassifier,
    StubDeepChecker,
    StubResearcher,
    StubWriter,
    approved_verdict,
    make_article,
    make_fact,
    make_facts
)


STAGES = ["research", "validation", "writing", "compliance", "storage"]


def make_request(**kwargs):
    data = {"topic": "Industrial sensors", "tenant_id": TENANT, "keywords": ["sensors"]}
    data.update(kwargs)
    return ContentRequest(**data)


def run(orchestrator, request=None):
    return asyncio.run(orchestrator.run(request or make_request()))


def test_successful_run_stores_article(make_orchestrator, store):
    """Test a run with enough approved facts stores one article."""
    orchestrator, _ = make_orchestrator(classifier=StubClassifier(approve=8))

    result = run(orchestrator)

    assert result.success is True
    assert result.article_id
    assert result.error_type is None
    assert [step.name for step in result.steps] == STAGES
    assert all(step.status == "completed" for step in result.steps)
    assert store.count("articles") == 1
    assert store.count("facts") == 8
    assert store.count("compliance_logs") == 1

    row = store.query("articles", TENANT, filters={"id": result.article_id})[0]
    assert row["version"] == 1
    assert row["parent_article_id"] is None
    assert row["status"] == "approved"


def test_four_approved_facts_abort_with_insufficient_facts(make_orchestrator, store):
    """Test fewer than five approved facts stop the run before writing."""
    orchestrator, stages = make_orchestrator(classifier=StubClassifier(approve=4))

    result = run(orchestrator)

    assert result.success is False
    assert result.error_type == "insufficient_facts"
    assert result.error_details["approved_count"] == 4
    assert len(result.error_details["rejected_facts"]) == 6
    assert result.error_details["rejected_facts"][0]["reason"] == "Unverifiable claim"
    assert stages["writer"].calls == []
    assert store.count("articles") == 0
    assert [step.status for step in result.steps] == ["completed", "failed"]


def test_exactly_five_approved_at_good_rate_has_no_warnings(make_orchestrator):
    """Test five approved facts out of eight pass both fact gates silently."""
    orchestrator, _ = make_orchestrator(
        researcher=StubResearcher(facts=make_facts(8)),
        classifier=StubClassifier(approve=5)
    )

    result = run(orchestrator)

    assert result.success is True
    assert result.quality_warnings == []


def test_low_approval_rate_continues_with_warning(make_orchestrator, store):
    """Test a low approval rate is reported but does not block the run."""
    orchestrator, _ = make_orchestrator(classifier=StubClassifier(approve=5))

    result = run(orchestrator)

    assert result.success is True
    assert len(result.quality_warnings) == 1
    assert "Low fact approval rate: 50%" in result.quality_warnings[0]

    row = store.query("articles", TENANT, filters={"id": result.article_id})[0]
    assert row["metadata"]["quality_warnings"] == result.quality_warnings


def test_research_output_is_deduplicated_and_floored(make_orchestrator):
    """Test duplicate claims and low-confidence facts never reach the classifier."""
    facts = make_facts(6) + [
        make_fact(1, claim="  SENSOR MODEL 1 MEASURES UP TO 10 DEGREES "),
        make_fact(99, confidence=0.5),
    ]
    classifier = StubClassifier()
    orchestrator, _ = make_orchestrator(researcher=StubResearcher(facts=facts), classifier=classifier)

    result = run(orchestrator)

    assert result.success is True
    assert [fact.claim for fact in classifier.received] == [fact.claim for fact in facts[:6]]
    assert result.steps[0].data["raw_facts"] == 8
    assert result.steps[0].data["unique_facts"] == 7
    assert result.steps[0].data["facts"] == 6


def test_no_facts_skips_classifier(make_orchestrator):
    """Test an empty research result fails the fact gate without classifying."""
    classifier = StubClassifier()
    orchestrator, _ = make_orchestrator(researcher=StubResearcher(facts=[]), classifier=classifier)

    result = run(orchestrator)

    assert result.error_type == "insufficient_facts"
    assert result.error_details["approved_count"] == 0
    assert classifier.received is None


def test_placeholder_article_fails_compliance_without_deep_check(make_orchestrator, store):
    """Test a placeholder blocks storage and the model-assisted check never runs."""
    article = make_article(content=make_article().content + " [PLACEHOLDER: price list]")
    deep_checker = StubDeepChecker()
    orchestrator, _ = make_orchestrator(writer=StubWriter(article), deep_checker=deep_checker)

    result = run(orchestrator)

    assert result.success is False
    assert result.error_type == "compliance_failed"
    assert result.error_details["overall_score"] == 0
    assert len(result.error_details["critical_issues"]) == 1
    assert result.error_details["critical_issues"][0]["check"] == "completeness"
    assert result.article.title == article.title
    assert result.compliance.deep_check_ran is False
    assert deep_checker.calls == 0
    assert store.count("articles") == 0


def test_critical_deep_issue_fails_compliance(make_orchestrator, store):
    """Test a critical finding from the deep check rejects the article."""
    issue = ComplianceIssue(
        severity=IssueSeverity.CRITICAL,
        check=CheckName.FACT_VERIFICATION,
        description="Claim not backed by an approved fact"
    )
    orchestrator, _ = make_orchestrator(
        deep_checker=StubDeepChecker(approved_verdict(issues=[issue], approved=False))
    )

    result = run(orchestrator)

    assert result.error_type == "compliance_failed"
    assert result.error_details["critical_issues"][0]["description"] == issue.description
    assert result.compliance.deep_check_ran is True
    assert store.count("articles") == 0


def test_storage_failure_is_reported_and_rolled_back(make_orchestrator):
    """Test a failed follow-up write removes the article and reports storage_failed."""
    failing = FailingStore("compliance_logs")
    orchestrator, _ = make_orchestrator(repository=ArticleRepository(failing))

    result = run(orchestrator)

    assert result.success is False
    assert result.error_type == "storage_failed"
    assert result.article is not None
    assert result.compliance.approved is True
    assert failing.count("articles") == 0
    assert failing.count("facts") == 0
    assert result.steps[-1].name == "storage"
    assert result.steps[-1].status == "failed"


def test_timeout_marks_running_step_failed(make_orchestrator, store):
    """Test the wall-clock budget aborts the run and leaves no running step."""
    orchestrator, _ = make_orchestrator(
        researcher=StubResearcher(delay=1.0),
        timeout_seconds=0.05
    )

    result = run(orchestrator)

    assert result.success is False
    assert result.error_type == "timeout"
    assert result.error_details["stage"] == "research"
    assert all(step.status != "running" for step in result.steps)
    assert result.steps[0].status == "failed"
    assert store.count("articles") == 0


def test_timeout_holds_while_the_store_blocks(make_orchestrator):
    """Test a store that blocks the run still ends in a timeout envelope."""
    orchestrator, _ = make_orchestrator(
        repository=ArticleRepository(SlowStore(delay=0.5)),
        timeout_seconds=0.1
    )

    started = time.monotonic()
    result = run(orchestrator)

    assert result.success is False
    assert result.error_type == "timeout"
    assert result.error_details["stage"] == "writing"
    assert time.monotonic() - started < 2.0


def test_timeout_error_from_a_stage_is_not_a_run_timeout(make_orchestrator):
    """Test a TimeoutError raised by a stage itself is reported as unknown."""
    orchestrator, _ = make_orchestrator(
        researcher=StubResearcher(errors=[TimeoutError("read timed out")])
    )

    result = run(orchestrator)

    assert result.success is False
    assert result.error_type == "unknown"
    assert result.error_details == {"exception": "TimeoutError"}


def test_unexpected_error_returns_generic_message(make_orchestrator):
    """Test internal error text is never exposed in the envelope."""
    orchestrator, _ = make_orchestrator(
        researcher=StubResearcher(errors=[RuntimeError("database password is hunter2")])
    )

    result = run(orchestrator)

    assert result.success is False
    assert result.error_type == "unknown"
    assert result.error == GENERIC_ERROR_MESSAGE
    assert "hunter2" not in str(result.error_details)
    assert result.error_details["exception"] == "RuntimeError"


def test_rate_limited_research_is_retried(make_orchestrator):
    """Test rate-limit errors are retried until the stage succeeds."""
    researcher = StubResearcher(errors=[RateLimitError("429 Too Many Requests")] * 2)
    orchestrator, _ = make_orchestrator(researcher=researcher)

    result = run(orchestrator)

    assert result.success is True
    assert researcher.calls == 3


def test_persistent_rate_limit_fails_after_three_attempts(make_orchestrator):
    """Test a stage that stays rate limited fails after three attempts."""
    researcher = StubResearcher(errors=[RateLimitError("rate limit exceeded")] * 5)
    orchestrator, _ = make_orchestrator(researcher=researcher)

    result = run(orchestrator)

    assert result.success is False
    assert result.error_type == "unknown"
    assert result.error_details["exception"] == "MaxRetriesExceededError"
    assert researcher.calls == 3


def test_writer_receives_brand_settings_and_briefing(make_orchestrator, store):
    """Test the tenant's stored brand settings and the briefing reach the writer."""
    store.insert("clients", {
        "name": "Acme Sensors",
        "brand_settings": {"toneOfVoice": {"style": "Direct", "avoidWords": ["synergy"]}}
    }, TENANT)
    writer = StubWriter()
    orchestrator, _ = make_orchestrator(writer=writer)

    result = run(orchestrator, make_request(briefing="Focus on calibration"))

    assert result.success is True
    call = writer.calls[0]
    assert call["brand"].name == "Acme Sensors"
    assert call["brand"].avoid_words == ["synergy"]
    assert call["briefing"] == "Focus on calibration"
    assert len(call["facts"]) == 10


def test_advisory_compliance_findings_become_warnings(make_orchestrator):
    """Test non-critical compliance findings are stored as quality warnings."""
    short = make_article(content="Industrial sensors report temperature data. " * 100)
    orchestrator, _ = make_orchestrator(writer=StubWriter(short))

    result = run(orchestrator)

    assert result.success is True
    assert result.quality_warnings == ["[completeness] Article too short: 500 words (min 650)"]
