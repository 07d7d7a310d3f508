"""
Dependency wiring.

Builds the orchestrator and version manager from configuration. Celery tasks
and the HTTP layer obtain their collaborators here and nowhere else.
"""

import logging
from typing import Optional

from .agents import ComplianceCheckerAgent, FactValidatorAgent, ResearchAgent, WriterAgent
from .core.fact_gate import FactGate
from .core.orchestrator import PipelineOrchestrator
from .core.versioning import VersionTreeManager
from .integrations.llm.client import LLMClient
from .integrations.llm.retry_handler import RetryHandler
from .integrations.storage import ArticleRepository, DataStore, InMemoryStore, SupabaseStore
from .utils.config import Config, get_config


logger = logging.getLogger(__name__)

_memory_store: Optional[InMemoryStore] = None


def build_store(config: Config) -> DataStore:
    """
    Create the configured persistent store.

    The in-memory backend is a process-wide singleton so that articles
    survive between runs of the same worker.
    """
    global _memory_store

    if config.STORAGE_BACKEND == 'memory':
        if _memory_store is None:
            logger.warning("Using in-memory storage; data is lost when the process exits")
            _memory_store = InMemoryStore()
        return _memory_store

    return SupabaseStore.from_credentials(config.SUPABASE_URL, config.SUPABASE_KEY)


def build_repository(config: Optional[Config] = None, store: Optional[DataStore] = None) -> ArticleRepository:
    config = config or get_config()
    return ArticleRepository(store or build_store(config))


def build_orchestrator(
    config: Optional[Config] = None,
    llm_client: Optional[LLMClient] = None,
    repository: Optional[ArticleRepository] = None
) -> PipelineOrchestrator:
    """
    Wire a pipeline orchestrator.

    Args:
        config: Application configuration; defaults to the environment's
        llm_client: Generator client override
        repository: Repository override

    Returns:
        Ready-to-run orchestrator
    """
    config = config or get_config()
    llm_client = llm_client or LLMClient.from_config(config)

    return PipelineOrchestrator(
        researcher=ResearchAgent(llm_client),
        classifier=FactValidatorAgent(llm_client),
        writer=WriterAgent(llm_client),
        deep_checker=ComplianceCheckerAgent(llm_client),
        repository=repository or build_repository(config),
        retry_handler=RetryHandler(
            max_attempts=config.RETRY_MAX_ATTEMPTS,
            backoff_seconds=config.RATE_LIMIT_BACKOFF_SECONDS
        ),
        fact_gate=FactGate(
            min_approved_facts=config.MIN_APPROVED_FACTS,
            min_approval_rate=config.MIN_APPROVAL_RATE
        ),
        confidence_floor=config.RESEARCH_CONFIDENCE_FLOOR,
        timeout_seconds=config.PIPELINE_TIMEOUT_SECONDS,
        compliance_options={
            "min_word_count": config.MIN_WORD_COUNT,
            "max_title_length": config.MAX_TITLE_LENGTH,
            "max_meta_description_length": config.MAX_META_DESCRIPTION_LENGTH,
        }
    )


def build_version_manager(
    config: Optional[Config] = None,
    orchestrator: Optional[PipelineOrchestrator] = None
) -> VersionTreeManager:
    """Wire a version tree manager sharing the orchestrator's repository."""
    orchestrator = orchestrator or build_orchestrator(config)
    return VersionTreeManager(orchestrator, orchestrator.repository)
