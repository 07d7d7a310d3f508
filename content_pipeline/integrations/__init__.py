"""
External service integrations for the content pipeline.

This module contains clients for the generator service (LiteLLM) and the
persistent store (Supabase).
"""
