from __future__ import annotations

import json
import sqlite3
from datetime import datetime
from typing import Any, Dict, List, Optional

from domain.exceptions import DuplicateCreatorId
from domain.models import Creator, CreatorFilter
from domain.repositories import UPDATABLE_FIELDS, CreatorRepository

_COLUMNS = (
    "id",
    "creator_id",
    "creator_id_provider",
    "creator_name",
    "creator_name_slug",
    "minecraft_player_uuid",
    "allow_creator_id_reset",
    "hwids",
    "ips",
    "needs_translation",
    "creator_name_locale",
    "creator_name_latinized",
    "creator_name_translated",
    "created_at",
)
_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM creators"
_JSON_FIELDS = ("hwids", "ips")
_BOOL_FIELDS = ("allow_creator_id_reset", "needs_translation")


class SqliteCreatorRepository(CreatorRepository):
    """
    SQLite-backed implementation of `CreatorRepository`.

    Owns the `creators` table. Hardware ID and IP histories are stored as
    JSON arrays in TEXT columns. The table is created if needed.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._ensure_table()

    def _get_connection(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def _ensure_table(self) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS creators (
                    id TEXT PRIMARY KEY,
                    creator_id TEXT NOT NULL UNIQUE,
                    creator_id_provider TEXT NOT NULL,
                    creator_name TEXT,
                    creator_name_slug TEXT,
                    minecraft_player_uuid TEXT,
                    allow_creator_id_reset INTEGER NOT NULL DEFAULT 0,
                    hwids TEXT NOT NULL DEFAULT '[]',
                    ips TEXT NOT NULL DEFAULT '[]',
                    needs_translation INTEGER NOT NULL DEFAULT 1,
                    creator_name_locale TEXT,
                    creator_name_latinized TEXT,
                    creator_name_translated TEXT,
                    created_at TEXT NOT NULL
                )
                """
            )
            conn.commit()

    @staticmethod
    def _to_domain(row: sqlite3.Row) -> Creator:
        return Creator(
            id=str(row[0]),
            creator_id=row[1],
            creator_id_provider=row[2],
            creator_name=row[3],
            creator_name_slug=row[4],
            minecraft_player_uuid=row[5],
            allow_creator_id_reset=bool(row[6]),
            hwids=json.loads(row[7]),
            ips=json.loads(row[8]),
            needs_translation=bool(row[9]),
            creator_name_locale=row[10],
            creator_name_latinized=row[11],
            creator_name_translated=row[12],
            created_at=datetime.fromisoformat(row[13]),
        )

    @staticmethod
    def _to_column(name: str, value: Any) -> Any:
        if name in _JSON_FIELDS:
            return json.dumps(list(value))
        if name in _BOOL_FIELDS:
            return int(bool(value))
        return value

    def _get_by_id(self, creator_pk: str) -> Optional[Creator]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(f"{_SELECT} WHERE id = ?", (creator_pk,))
            row = cur.fetchone()
            if not row:
                return None
            return self._to_domain(row)

    def get_by_creator_id(self, creator_id: str) -> Optional[Creator]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(f"{_SELECT} WHERE creator_id = ?", (creator_id,))
            row = cur.fetchone()
            if not row:
                return None
            return self._to_domain(row)

    def find_any(self, filters: CreatorFilter) -> List[Creator]:
        terms = filters.terms()
        where = " OR ".join(f"{column} = ?" for column, _ in terms)
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                f"{_SELECT} WHERE {where} ORDER BY created_at",
                tuple(value for _, value in terms),
            )
            rows = cur.fetchall()
            return [self._to_domain(row) for row in rows]

    def create_creator(self, creator: Creator) -> Creator:
        values = [
            self._to_column(name, getattr(creator, name)) for name in _COLUMNS
        ]
        values[_COLUMNS.index("created_at")] = creator.created_at.isoformat()

        try:
            with self._get_connection() as conn:
                cur = conn.cursor()
                cur.execute(
                    f"""
                    INSERT INTO creators ({', '.join(_COLUMNS)})
                    VALUES ({', '.join('?' for _ in _COLUMNS)})
                    """,
                    values,
                )
                conn.commit()
        except sqlite3.IntegrityError as error:
            if "creators.creator_id" in str(error):
                raise DuplicateCreatorId(creator.creator_id) from error
            raise

        stored = self._get_by_id(creator.id)
        return stored or creator

    def update_creator(self, creator_pk: str, changes: Dict[str, Any]) -> Creator:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update creator fields: {sorted(unknown)}")

        if changes:
            assignments = ", ".join(f"{name} = ?" for name in changes)
            values = [self._to_column(name, value) for name, value in changes.items()]
            try:
                with self._get_connection() as conn:
                    cur = conn.cursor()
                    cur.execute(
                        f"UPDATE creators SET {assignments} WHERE id = ?",
                        (*values, creator_pk),
                    )
                    conn.commit()
            except sqlite3.IntegrityError as error:
                if "creators.creator_id" in str(error):
                    raise DuplicateCreatorId(changes.get("creator_id", "")) from error
                raise

        updated = self._get_by_id(creator_pk)
        if updated is None:
            raise LookupError(f"No creator with id {creator_pk}.")
        return updated
