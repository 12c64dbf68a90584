"""SQLite-backed post store used by the create-post ability."""

from __future__ import annotations

import logging
import sqlite3
import time
from contextlib import closing
from dataclasses import dataclass
from pathlib import Path

_LOG = logging.getLogger(__name__)

POST_STATUSES = frozenset({"draft", "publish"})

_SCHEMA = """
CREATE TABLE IF NOT EXISTS posts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    status TEXT NOT NULL,
    author_id INTEGER NOT NULL,
    created_at REAL NOT NULL
)
"""


@dataclass(frozen=True)
class Post:
    id: int
    title: str
    content: str
    status: str
    author_id: int
    created_at: float


def _connect(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path, timeout=5.0)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    return conn


def _row_to_post(row: sqlite3.Row) -> Post:
    return Post(
        id=int(row["id"]),
        title=str(row["title"]),
        content=str(row["content"]),
        status=str(row["status"]),
        author_id=int(row["author_id"]),
        created_at=float(row["created_at"]),
    )


class PostStore:
    """Insert and fetch posts in a local SQLite database."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        with closing(_connect(db_path)) as conn, conn:
            conn.execute(_SCHEMA)

    @property
    def db_path(self) -> Path:
        return self._db_path

    def insert(self, *, title: str, content: str, status: str, author_id: int) -> Post:
        if status not in POST_STATUSES:
            raise ValueError(f"Invalid post status: {status!r}")
        created_at = time.time()
        with closing(_connect(self._db_path)) as conn, conn:
            cursor = conn.execute(
                """
                INSERT INTO posts (title, content, status, author_id, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (title, content, status, author_id, created_at),
            )
            post_id = cursor.lastrowid
        if post_id is None:
            raise sqlite3.DatabaseError("Insert did not return a post id.")
        _LOG.debug("Inserted post %d (%s)", post_id, status)
        return Post(
            id=int(post_id),
            title=title,
            content=content,
            status=status,
            author_id=author_id,
            created_at=created_at,
        )

    def get(self, post_id: int) -> Post | None:
        with closing(_connect(self._db_path)) as conn:
            row = conn.execute(
                "SELECT id, title, content, status, author_id, created_at FROM posts WHERE id = ?",
                (post_id,),
            ).fetchone()
        return _row_to_post(row) if row is not None else None
