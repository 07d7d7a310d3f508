"""
Core pipeline logic: models, gates, scoring, orchestration and versioning.
"""
