"""Service layer for persistence."""

from sattawatch.services.result_store import ResultStore

__all__ = ["ResultStore"]
