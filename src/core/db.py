"""SQLite database layer for posts, categories, and agent run tracking."""

import json
import sqlite3
from datetime import datetime
from pathlib import Path

from src.core.schemas import AutomationStatus, Category, PostDraft, RunSummary

_POSTS_TABLE = """
CREATE TABLE IF NOT EXISTS posts (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    slug              TEXT    NOT NULL UNIQUE,
    title             TEXT    NOT NULL,
    status            TEXT    NOT NULL DEFAULT 'draft',
    category_id       INTEGER,
    idempotency_key   TEXT,
    automation_status TEXT,
    document          TEXT    NOT NULL,
    created_at        TEXT    NOT NULL
);
"""

_POSTS_KEY_INDEX = """
CREATE INDEX IF NOT EXISTS idx_posts_idempotency
    ON posts (idempotency_key, automation_status);
"""

_CATEGORIES_TABLE = """
CREATE TABLE IF NOT EXISTS categories (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    name          TEXT    NOT NULL UNIQUE,
    slug          TEXT    NOT NULL UNIQUE,
    display_order INTEGER NOT NULL DEFAULT 0,
    created_at    TEXT    NOT NULL
);
"""

_AGENT_RUNS_TABLE = """
CREATE TABLE IF NOT EXISTS agent_runs (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    dry_run      INTEGER NOT NULL,
    discovered   INTEGER NOT NULL,
    unverified   INTEGER NOT NULL,
    saved        INTEGER NOT NULL,
    duplicates   INTEGER NOT NULL,
    failed       INTEGER NOT NULL,
    started_at   TEXT    NOT NULL,
    finished_at  TEXT    NOT NULL
);
"""


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(_POSTS_TABLE)
    conn.execute(_POSTS_KEY_INDEX)
    conn.execute(_CATEGORIES_TABLE)
    conn.execute(_AGENT_RUNS_TABLE)
    conn.commit()
    return conn


def insert_post(conn: sqlite3.Connection, draft: PostDraft) -> bool:
    """Insert a post, ignoring it if the slug already exists.

    Returns True if a new row was inserted, False if it was a duplicate.
    """
    details = draft.automation_details
    try:
        conn.execute(
            """
            INSERT INTO posts
                (slug, title, status, category_id, idempotency_key,
                 automation_status, document, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                draft.slug,
                draft.title,
                draft.status.value,
                draft.category_id,
                details.idempotency_key,
                details.automation_status.value if details.automation_status else None,
                json.dumps(draft.to_document()),
                datetime.now().isoformat(),
            ),
        )
        conn.commit()
        return True
    except sqlite3.IntegrityError:
        return False


def get_post_by_slug(conn: sqlite3.Connection, slug: str) -> PostDraft | None:
    """Return the stored post with this slug, or None."""
    row = conn.execute(
        "SELECT document FROM posts WHERE slug = ? LIMIT 1", (slug,),
    ).fetchone()
    if row is None:
        return None
    return PostDraft.model_validate(json.loads(row["document"]))


def slug_exists(conn: sqlite3.Connection, slug: str) -> bool:
    row = conn.execute("SELECT 1 FROM posts WHERE slug = ? LIMIT 1", (slug,)).fetchone()
    return row is not None


def is_key_processed(
    conn: sqlite3.Connection,
    idempotency_key: str,
    automation_status: AutomationStatus = AutomationStatus.COMPLETED,
) -> bool:
    """Check if a post with this idempotency key finished with the given status."""
    row = conn.execute(
        """
        SELECT 1 FROM posts
        WHERE idempotency_key = ? AND automation_status = ?
        LIMIT 1
        """,
        (idempotency_key, automation_status.value),
    ).fetchone()
    return row is not None


def title_contains(conn: sqlite3.Connection, fragment: str) -> bool:
    """Case-insensitive substring match of ``fragment`` against stored titles."""
    if not fragment.strip():
        return False
    row = conn.execute(
        "SELECT 1 FROM posts WHERE instr(lower(title), lower(?)) > 0 LIMIT 1",
        (fragment,),
    ).fetchone()
    return row is not None


def count_posts(conn: sqlite3.Connection) -> int:
    return conn.execute("SELECT COUNT(*) FROM posts").fetchone()[0]  # type: ignore[no-any-return]


def insert_category(
    conn: sqlite3.Connection,
    name: str,
    slug: str,
    display_order: int = 0,
) -> bool:
    """Insert a category, ignoring it if the name or slug already exists."""
    try:
        conn.execute(
            """
            INSERT INTO categories (name, slug, display_order, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (name, slug, display_order, datetime.now().isoformat()),
        )
        conn.commit()
        return True
    except sqlite3.IntegrityError:
        return False


def _row_to_category(row: sqlite3.Row) -> Category:
    return Category(
        id=row["id"],
        name=row["name"],
        slug=row["slug"],
        display_order=row["display_order"],
    )


def get_category_by_slug(conn: sqlite3.Connection, slug: str) -> Category | None:
    row = conn.execute(
        "SELECT * FROM categories WHERE slug = ? LIMIT 1", (slug,),
    ).fetchone()
    return _row_to_category(row) if row is not None else None


def find_categories_by_name(conn: sqlite3.Connection, fragment: str) -> list[Category]:
    """Categories whose name contains ``fragment`` (case-insensitive), catalog order."""
    rows = conn.execute(
        """
        SELECT * FROM categories
        WHERE instr(lower(name), lower(?)) > 0
        ORDER BY display_order, name
        """,
        (fragment,),
    ).fetchall()
    return [_row_to_category(r) for r in rows]


def list_categories(conn: sqlite3.Connection) -> list[Category]:
    """All categories sorted by display order, then name."""
    rows = conn.execute(
        "SELECT * FROM categories ORDER BY display_order, name",
    ).fetchall()
    return [_row_to_category(r) for r in rows]


def insert_agent_run(conn: sqlite3.Connection, summary: RunSummary) -> int:
    """Record a finished agent run. Returns the row ID."""
    finished_at = summary.finished_at or datetime.now()
    cursor = conn.execute(
        """
        INSERT INTO agent_runs
            (dry_run, discovered, unverified, saved, duplicates, failed,
             started_at, finished_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            int(summary.dry_run),
            summary.discovered,
            summary.unverified,
            summary.saved,
            summary.duplicates,
            summary.failed,
            summary.started_at.isoformat(),
            finished_at.isoformat(),
        ),
    )
    conn.commit()
    return cursor.lastrowid or 0
