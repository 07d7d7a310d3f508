"""
Content Pipeline - Fact-checked article generation.

Turns a topic request into a fact-checked, versioned article by chaining
research, fact validation, writing and compliance stages.
"""

__version__ = "1.0.0"
__author__ = "Content Pipeline Team"
