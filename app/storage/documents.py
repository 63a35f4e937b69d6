"""JSON document store on top of sqlite3.

Each owned collection is a table of ``(id, owner_id, created_at, updated_at,
doc_json)`` rows. Documents are plain dicts; ``_id``, ``createdAt`` and
``updatedAt`` are managed here. Reads and writes on owned collections always
filter by ``owner_id``.
"""

from __future__ import annotations

import json
import os
import re
import secrets
import sqlite3
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

OWNED_COLLECTIONS = ("analyses", "chat_sessions", "resumes")

_DOC_ID_RE = re.compile(r"^[0-9a-f]{24}$")


class DuplicateKeyError(Exception):
    pass


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_document_id() -> str:
    return secrets.token_hex(12)


def is_document_id(value: str | None) -> bool:
    return bool(value and _DOC_ID_RE.match(value))


def _next_timestamp(previous: str | None) -> str:
    now = utc_now()
    if previous:
        try:
            prev = datetime.fromisoformat(previous)
        except ValueError:
            prev = None
        if prev is not None and now <= prev:
            now = prev + timedelta(microseconds=1)
    return now.isoformat()


class DocumentStore:
    def __init__(self, db_path: str):
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    def _get_connection(self) -> sqlite3.Connection:
        with self._lock:
            if self._conn is not None:
                return self._conn

            directory = os.path.dirname(self._db_path)
            if directory:
                os.makedirs(directory, exist_ok=True)

            conn = sqlite3.connect(
                self._db_path,
                check_same_thread=False,
                timeout=5,
                isolation_level=None,
            )
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute("PRAGMA synchronous=NORMAL;")
            conn.execute("PRAGMA busy_timeout=5000;")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    email TEXT NOT NULL UNIQUE,
                    created_at TEXT NOT NULL,
                    doc_json TEXT NOT NULL
                );
                """
            )
            for collection in OWNED_COLLECTIONS:
                conn.execute(
                    f"""
                    CREATE TABLE IF NOT EXISTS {collection} (
                        id TEXT PRIMARY KEY,
                        owner_id TEXT NOT NULL,
                        created_at TEXT NOT NULL,
                        updated_at TEXT NOT NULL,
                        doc_json TEXT NOT NULL
                    );
                    """
                )
                conn.execute(
                    f"""
                    CREATE INDEX IF NOT EXISTS idx_{collection}_owner_created
                    ON {collection} (owner_id, created_at);
                    """
                )
            self._conn = conn
            return conn

    def init(self) -> None:
        self._get_connection()

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    @staticmethod
    def _check_collection(collection: str) -> None:
        if collection not in OWNED_COLLECTIONS:
            raise ValueError(f"Unknown collection '{collection}'")

    # users

    def insert_user(self, document: dict[str, Any]) -> dict[str, Any]:
        conn = self._get_connection()
        doc = dict(document)
        doc["_id"] = new_document_id()
        doc["email"] = str(doc.get("email", "")).strip().lower()
        doc.setdefault("createdAt", utc_now().isoformat())
        with self._lock:
            try:
                conn.execute(
                    "INSERT INTO users (id, email, created_at, doc_json) VALUES (?, ?, ?, ?)",
                    (doc["_id"], doc["email"], doc["createdAt"], json.dumps(doc, ensure_ascii=False)),
                )
            except sqlite3.IntegrityError as exc:
                raise DuplicateKeyError(doc["email"]) from exc
        return doc

    def find_user_by_email(self, email: str) -> dict[str, Any] | None:
        conn = self._get_connection()
        with self._lock:
            row = conn.execute(
                "SELECT doc_json FROM users WHERE email = ?",
                ((email or "").strip().lower(),),
            ).fetchone()
        return json.loads(row[0]) if row else None

    def find_user_by_id(self, user_id: str) -> dict[str, Any] | None:
        conn = self._get_connection()
        with self._lock:
            row = conn.execute("SELECT doc_json FROM users WHERE id = ?", (user_id,)).fetchone()
        return json.loads(row[0]) if row else None

    # owned collections

    def insert(self, collection: str, *, owner_id: str, document: dict[str, Any]) -> dict[str, Any]:
        self._check_collection(collection)
        conn = self._get_connection()
        doc = dict(document)
        doc["_id"] = new_document_id()
        now = utc_now().isoformat()
        doc.setdefault("createdAt", now)
        doc.setdefault("updatedAt", doc["createdAt"])
        with self._lock:
            conn.execute(
                f"INSERT INTO {collection} (id, owner_id, created_at, updated_at, doc_json) VALUES (?, ?, ?, ?, ?)",
                (doc["_id"], owner_id, doc["createdAt"], doc["updatedAt"], json.dumps(doc, ensure_ascii=False)),
            )
        return doc

    def find_one(self, collection: str, doc_id: str, *, owner_id: str) -> dict[str, Any] | None:
        self._check_collection(collection)
        if not is_document_id(doc_id):
            return None
        conn = self._get_connection()
        with self._lock:
            row = conn.execute(
                f"SELECT doc_json FROM {collection} WHERE id = ? AND owner_id = ?",
                (doc_id, owner_id),
            ).fetchone()
        return json.loads(row[0]) if row else None

    def find(
        self,
        collection: str,
        *,
        owner_id: str,
        sort_by: str = "created_at",
        skip: int = 0,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        self._check_collection(collection)
        if sort_by not in {"created_at", "updated_at"}:
            raise ValueError(f"Unsupported sort column '{sort_by}'")
        conn = self._get_connection()
        with self._lock:
            rows = conn.execute(
                f"""
                SELECT doc_json FROM {collection}
                WHERE owner_id = ?
                ORDER BY {sort_by} DESC, rowid DESC
                LIMIT ? OFFSET ?
                """,
                (owner_id, -1 if limit is None else int(limit), max(0, int(skip))),
            ).fetchall()
        return [json.loads(row[0]) for row in rows]

    def count(self, collection: str, *, owner_id: str) -> int:
        self._check_collection(collection)
        conn = self._get_connection()
        with self._lock:
            row = conn.execute(f"SELECT COUNT(1) FROM {collection} WHERE owner_id = ?", (owner_id,)).fetchone()
        return int(row[0] or 0)

    def delete_one(self, collection: str, doc_id: str, *, owner_id: str) -> dict[str, Any] | None:
        self._check_collection(collection)
        if not is_document_id(doc_id):
            return None
        conn = self._get_connection()
        with self._lock:
            cursor = conn.cursor()
            cursor.execute("BEGIN IMMEDIATE")
            try:
                row = cursor.execute(
                    f"SELECT doc_json FROM {collection} WHERE id = ? AND owner_id = ?",
                    (doc_id, owner_id),
                ).fetchone()
                if row:
                    cursor.execute(f"DELETE FROM {collection} WHERE id = ?", (doc_id,))
                conn.commit()
            except Exception:
                conn.rollback()
                raise
        return json.loads(row[0]) if row else None

    def update_one(
        self,
        collection: str,
        doc_id: str,
        *,
        owner_id: str,
        mutate: Callable[[dict[str, Any]], dict[str, Any]],
    ) -> dict[str, Any] | None:
        """Apply ``mutate`` to the stored document inside one write transaction.

        Concurrent updates of the same document are serialized; each sees the
        result of the previous one. ``updatedAt`` strictly increases.
        """
        self._check_collection(collection)
        if not is_document_id(doc_id):
            return None
        conn = self._get_connection()
        with self._lock:
            cursor = conn.cursor()
            cursor.execute("BEGIN IMMEDIATE")
            try:
                row = cursor.execute(
                    f"SELECT doc_json FROM {collection} WHERE id = ? AND owner_id = ?",
                    (doc_id, owner_id),
                ).fetchone()
                if not row:
                    conn.rollback()
                    return None
                current = json.loads(row[0])
                updated = mutate(dict(current))
                updated["_id"] = current["_id"]
                updated["createdAt"] = current["createdAt"]
                updated["updatedAt"] = _next_timestamp(current.get("updatedAt"))
                cursor.execute(
                    f"UPDATE {collection} SET updated_at = ?, doc_json = ? WHERE id = ?",
                    (updated["updatedAt"], json.dumps(updated, ensure_ascii=False), doc_id),
                )
                conn.commit()
            except Exception:
                conn.rollback()
                raise
        return updated
