"""
Stage agents.

Generator-backed implementations of the research, fact classification,
writing and deep compliance stages.
"""

from .research import ResearchAgent
from .fact_validator import FactValidatorAgent
from .writer import WriterAgent
from .compliance_checker import ComplianceCheckerAgent

__all__ = [
    'ResearchAgent',
    'FactValidatorAgent',
    'WriterAgent',
    'ComplianceCheckerAgent'
]
