"""
Asynchronous tasks for the content pipeline.
"""
