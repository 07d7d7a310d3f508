"""
Utilities: configuration and logging.
"""
