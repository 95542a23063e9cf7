"""
SQLite repositories.

Each public method is a coroutine that runs its blocking sqlite3 work on a
worker thread via asyncio.to_thread, opening one connection per call.
sqlite3 failures are re-raised as RepositoryError.
"""

import asyncio
import json
import sqlite3
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from addonstore.domain.entities import ContentRecord, HistoryEntry, User
from addonstore.domain.errors import RepositoryError


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


class _SQLiteRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn


class SQLiteContentRepo(_SQLiteRepo):
    """
    Content records with content and history stored as JSON text.

    Writes return the record decoded from the stored row, so a caller sees
    exactly what a later read returns (JSON turns tuples into lists and
    dict keys into strings).
    """

    # Columns a modify may rewrite
    _MUTABLE_COLUMNS = ("owner_user_id", "content_json", "history_json", "updated_at")

    def _to_row(self, record: ContentRecord) -> dict[str, Any]:
        try:
            content_json = json.dumps(record.content)
        except (TypeError, ValueError) as e:
            raise RepositoryError(f"Content of {record.id} is not JSON serialisable: {e}") from e
        history_json = json.dumps([h.model_dump(mode="json") for h in record.history])
        return {
            "id": str(record.id),
            "addon_id": str(record.addon_id),
            "type": record.type,
            "owner_user_id": str(record.owner) if record.owner else None,
            "content_json": content_json,
            "history_json": history_json,
            "created_at": record.created_at.isoformat(),
            "updated_at": record.updated_at.isoformat(),
        }

    def _from_row(self, row: dict[str, Any]) -> ContentRecord:
        return ContentRecord(
            id=UUID(row["id"]),
            addon_id=UUID(row["addon_id"]),
            type=row["type"],
            owner=UUID(row["owner_user_id"]) if row["owner_user_id"] else None,
            content=json.loads(row["content_json"]),
            history=[HistoryEntry.model_validate(h) for h in json.loads(row["history_json"])],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    # --- insert ---

    async def insert(self, record: ContentRecord) -> ContentRecord:
        return await asyncio.to_thread(self._insert, record)

    def _insert(self, record: ContentRecord) -> ContentRecord:
        row = self._to_row(record)
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO content_records (
                    id, addon_id, type, owner_user_id,
                    content_json, history_json, created_at, updated_at
                ) VALUES (
                    :id, :addon_id, :type, :owner_user_id,
                    :content_json, :history_json, :created_at, :updated_at
                )
            """,
                row,
            )
            conn.commit()
            return self._from_row(row)
        except sqlite3.Error as e:
            conn.rollback()
            raise RepositoryError(f"Insert of content {record.id} failed: {e}") from e
        finally:
            conn.close()

    # --- reads ---

    async def get(self, record_id: UUID) -> ContentRecord | None:
        return await asyncio.to_thread(self._get, record_id)

    def _get(self, record_id: UUID) -> ContentRecord | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM content_records WHERE id = ?", (str(record_id),)
            ).fetchone()
            return self._from_row(row) if row else None
        except sqlite3.Error as e:
            raise RepositoryError(f"Read of content {record_id} failed: {e}") from e
        finally:
            conn.close()

    async def get_many(self, record_ids: Iterable[UUID]) -> list[ContentRecord]:
        return await asyncio.to_thread(self._get_many, list(record_ids))

    def _get_many(self, record_ids: list[UUID]) -> list[ContentRecord]:
        if not record_ids:
            return []
        conn = self._get_conn()
        try:
            placeholders = ", ".join("?" for _ in record_ids)
            rows = conn.execute(
                f"SELECT * FROM content_records WHERE id IN ({placeholders})",
                [str(rid) for rid in record_ids],
            ).fetchall()
            by_id = {row["id"]: row for row in rows}
            return [self._from_row(by_id[str(rid)]) for rid in record_ids if str(rid) in by_id]
        except sqlite3.Error as e:
            raise RepositoryError(f"Read of {len(record_ids)} content records failed: {e}") from e
        finally:
            conn.close()

    # --- modify ---

    async def modify(
        self,
        record_id: UUID,
        change: Callable[[ContentRecord], ContentRecord],
    ) -> ContentRecord | None:
        return await asyncio.to_thread(self._modify, record_id, change)

    def _modify(
        self,
        record_id: UUID,
        change: Callable[[ContentRecord], ContentRecord],
    ) -> ContentRecord | None:
        conn = self._get_conn()
        try:
            # Take the write lock before reading so concurrent modifies serialise
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(
                "SELECT * FROM content_records WHERE id = ?", (str(record_id),)
            ).fetchone()
            if not row:
                conn.rollback()
                return None

            values = self._to_row(change(self._from_row(row)))
            # id, addon_id, type and created_at are never rewritten
            written = {**row, **{col: values[col] for col in self._MUTABLE_COLUMNS}}
            conn.execute(
                """
                UPDATE content_records SET
                    owner_user_id = :owner_user_id,
                    content_json = :content_json,
                    history_json = :history_json,
                    updated_at = :updated_at
                WHERE id = :id
            """,
                written,
            )
            conn.commit()
            return self._from_row(written)
        except (sqlite3.Error, RepositoryError) as e:
            conn.rollback()
            if isinstance(e, RepositoryError):
                raise
            raise RepositoryError(f"Update of content {record_id} failed: {e}") from e
        finally:
            conn.close()

    # --- delete ---

    async def delete(self, record_id: UUID) -> ContentRecord | None:
        return await asyncio.to_thread(self._delete, record_id)

    def _delete(self, record_id: UUID) -> ContentRecord | None:
        conn = self._get_conn()
        try:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(
                "SELECT * FROM content_records WHERE id = ?", (str(record_id),)
            ).fetchone()
            if not row:
                conn.rollback()
                return None
            conn.execute("DELETE FROM content_records WHERE id = ?", (str(record_id),))
            conn.commit()
            return self._from_row(row)
        except sqlite3.Error as e:
            conn.rollback()
            raise RepositoryError(f"Delete of content {record_id} failed: {e}") from e
        finally:
            conn.close()


class SQLiteUserStore(_SQLiteRepo):
    async def save(self, user: User) -> User:
        return await asyncio.to_thread(self._save, user)

    def _save(self, user: User) -> User:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO users (id, name, created_at) VALUES (?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET name=excluded.name
            """,
                (str(user.id), user.name, user.created_at.isoformat()),
            )
            conn.commit()
            return user
        except sqlite3.Error as e:
            conn.rollback()
            raise RepositoryError(f"Save of user {user.id} failed: {e}") from e
        finally:
            conn.close()

    async def get_by_id(self, user_id: UUID) -> User | None:
        return await asyncio.to_thread(self._get_by_id, user_id)

    def _get_by_id(self, user_id: UUID) -> User | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (str(user_id),)).fetchone()
            if not row:
                return None
            return User(
                id=UUID(row["id"]),
                name=row["name"],
                created_at=datetime.fromisoformat(row["created_at"]),
            )
        except sqlite3.Error as e:
            raise RepositoryError(f"Read of user {user_id} failed: {e}") from e
        finally:
            conn.close()


class SQLiteLedgerRepo(_SQLiteRepo):
    async def add(self, owner: UUID, record_id: UUID) -> None:
        await asyncio.to_thread(self._add, owner, record_id)

    def _add(self, owner: UUID, record_id: UUID) -> None:
        conn = self._get_conn()
        try:
            # One-row insert keyed on (user_id, content_id): an atomic add-to-set
            conn.execute(
                """
                INSERT OR IGNORE INTO ownership_ledger (user_id, content_id, attached_at)
                VALUES (?, ?, ?)
            """,
                (str(owner), str(record_id), datetime.now(UTC).isoformat()),
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise RepositoryError(f"Ledger add {owner} -> {record_id} failed: {e}") from e
        finally:
            conn.close()

    async def remove(self, owner: UUID, record_id: UUID) -> None:
        await asyncio.to_thread(self._remove, owner, record_id)

    def _remove(self, owner: UUID, record_id: UUID) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                "DELETE FROM ownership_ledger WHERE user_id = ? AND content_id = ?",
                (str(owner), str(record_id)),
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise RepositoryError(f"Ledger remove {owner} -> {record_id} failed: {e}") from e
        finally:
            conn.close()

    async def list_for(self, owner: UUID) -> set[UUID]:
        return await asyncio.to_thread(self._list_for, owner)

    def _list_for(self, owner: UUID) -> set[UUID]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT content_id FROM ownership_ledger WHERE user_id = ?", (str(owner),)
            ).fetchall()
            return {UUID(row["content_id"]) for row in rows}
        except sqlite3.Error as e:
            raise RepositoryError(f"Ledger lookup for {owner} failed: {e}") from e
        finally:
            conn.close()
