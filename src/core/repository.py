"""Content repository: the pipeline's view of stored posts and categories.

Wraps the SQLite functions in ``src.core.db`` behind one object so the
pipeline components can be handed a repository (or a test double) instead
of a raw connection.
"""

import logging
import sqlite3
from pathlib import Path

from src.core import db
from src.core.schemas import AutomationStatus, Category, PostDraft

logger = logging.getLogger(__name__)


class RepositoryUnavailableError(RuntimeError):
    """Raised when the backing database cannot be reached."""


class ContentRepository:
    """Posts and categories backed by a SQLite connection.

    Usage::

        repo = ContentRepository(init_db(path), path=path)
        repo.ensure_connection()
        if repo.find_by_slug("upsc-cs-2026") is None:
            repo.insert(draft)
    """

    def __init__(self, conn: sqlite3.Connection, path: str | Path | None = None) -> None:
        self._conn = conn
        self._path = path

    @property
    def conn(self) -> sqlite3.Connection:
        return self._conn

    def ensure_connection(self) -> None:
        """Make sure the connection is live, reopening it from ``path`` if closed."""
        try:
            self._conn.execute("SELECT 1").fetchone()
            return
        except sqlite3.ProgrammingError:
            if self._path is None:
                msg = "Database connection is closed and no path is known to reopen it"
                raise RepositoryUnavailableError(msg) from None
        except sqlite3.Error as e:
            msg = f"Database unavailable: {e}"
            raise RepositoryUnavailableError(msg) from e

        logger.info("Reopening database connection at %s", self._path)
        try:
            self._conn = db.init_db(self._path)
        except (sqlite3.Error, OSError) as e:
            msg = f"Could not reopen database at {self._path}: {e}"
            raise RepositoryUnavailableError(msg) from e

    # --- posts ---

    def find_by_slug(self, slug: str) -> PostDraft | None:
        return db.get_post_by_slug(self._conn, slug)

    def exists_completed(self, idempotency_key: str) -> bool:
        """True if a post with this key already finished automation successfully."""
        return db.is_key_processed(self._conn, idempotency_key, AutomationStatus.COMPLETED)

    def title_matches(self, raw_title: str) -> bool:
        """True if any stored title contains ``raw_title`` (case-insensitive)."""
        return db.title_contains(self._conn, raw_title)

    def insert(self, draft: PostDraft) -> bool:
        """Insert a post. Returns False if the slug is already taken."""
        return db.insert_post(self._conn, draft)

    def unique_slug(self, base: str) -> str:
        """Return ``base`` or the first free ``base-N`` variant."""
        slug = base
        counter = 1
        while db.slug_exists(self._conn, slug):
            slug = f"{base}-{counter}"
            counter += 1
        return slug

    # --- categories ---

    def list_categories(self) -> list[Category]:
        return db.list_categories(self._conn)

    def find_category_by_slug(self, slug: str) -> Category | None:
        return db.get_category_by_slug(self._conn, slug)

    def find_categories_by_name(self, fragment: str) -> list[Category]:
        return db.find_categories_by_name(self._conn, fragment)

    def add_category(self, name: str, slug: str, display_order: int = 0) -> bool:
        return db.insert_category(self._conn, name, slug, display_order)
