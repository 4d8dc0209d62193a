"""Custom exception classes for the application."""

import re
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError


class SattaWatchException(Exception):
    """Base exception for all SattaWatch errors."""

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class ScraperError(SattaWatchException):
    """Raised when the page fetcher cannot produce rendered HTML."""


class BrowserLaunchError(ScraperError):
    """Raised when the headless browser process cannot be started.

    This is an environment/configuration failure (missing executable,
    sandbox restrictions), not a transient one.
    """

    def __init__(self, reason: str):
        super().__init__(f"Failed to launch browser: {reason}")
        self.reason = reason


class NavigationError(ScraperError):
    """Raised when the target page cannot be loaded or rendered in time."""

    def __init__(self, url: str, reason: str, status: Optional[int] = None):
        super().__init__(f"Failed to load {url}: {reason}")
        self.url = url
        self.reason = reason
        self.status = status


class PersistenceError(SattaWatchException):
    """Raised when the result store cannot complete a read or write."""

    def __init__(self, message: str, operation: str = "save"):
        super().__init__(message)
        self.operation = operation


class SchemaMissingError(PersistenceError):
    """Raised when the results table does not exist."""


class PermissionDeniedError(PersistenceError):
    """Raised when the database rejects the operation on access grounds."""


# Postgres SQLSTATE codes
_UNDEFINED_TABLE = "42P01"
_INSUFFICIENT_PRIVILEGE = "42501"

# Only a missing relation counts; "column ... of relation ... does not exist"
# and missing databases or roles stay generic
_MISSING_TABLE_PATTERN = re.compile(r'(?<!of )relation "[^"]+" does not exist|no such table|undefinedtableerror')
_PERMISSION_MARKERS = (
    "permission denied",
    "insufficient privilege",
    "row-level security",
    "policy",
    "readonly database",
)


def _sqlstate(exc: SQLAlchemyError) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    if orig is None:
        return None
    # asyncpg exposes .sqlstate, psycopg exposes .pgcode
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if isinstance(code, str):
            return code
    cause = getattr(orig, "__cause__", None)
    code = getattr(cause, "sqlstate", None)
    return code if isinstance(code, str) else None


def classify_persistence_error(exc: SQLAlchemyError, operation: str = "save") -> PersistenceError:
    """Map a SQLAlchemy failure onto the PersistenceError taxonomy.

    A SQLSTATE from the driver decides on its own; message matching is
    only used for drivers that report none (SQLite).

    Args:
        exc: Error raised by SQLAlchemy / the DBAPI driver
        operation: Store operation that failed ("save" or "list_recent")

    Returns:
        SchemaMissingError, PermissionDeniedError, or a plain PersistenceError
    """
    code = _sqlstate(exc)
    detail = str(getattr(exc, "orig", None) or exc)
    lowered = detail.lower()

    if code is not None:
        schema_missing = code == _UNDEFINED_TABLE
        permission_denied = code == _INSUFFICIENT_PRIVILEGE
    else:
        schema_missing = _MISSING_TABLE_PATTERN.search(lowered) is not None
        permission_denied = any(m in lowered for m in _PERMISSION_MARKERS)

    if schema_missing:
        return SchemaMissingError(
            'Table "scrape_results" does not exist. Please create the table first.',
            operation=operation,
        )
    if permission_denied:
        return PermissionDeniedError(
            "Database permission error. Please check the grants and row level security policies.",
            operation=operation,
        )
    return PersistenceError(f"Database error during {operation}: {detail}", operation=operation)
