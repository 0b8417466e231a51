"""
Backend package for the Snapper gallery API.

This package provides a FastAPI application that lists group, person and
album photos with lazily refreshed signed URLs, on top of storage, database
and queue abstractions that each ship an in-memory test double.
"""
