from __future__ import annotations

from typing import Any, Dict, List, Optional

import psycopg2
import psycopg2.errors
import psycopg2.extras

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
CREATOR_ID_CONSTRAINT = "creators_creator_id_key"


class PostgresCreatorRepository(CreatorRepository):
    """
    Postgres-backed implementation of `CreatorRepository`.

    Histories are stored as TEXT[] columns, which psycopg2 maps to and from
    Python lists. The UNIQUE constraint on `creator_id` is what settles
    concurrent creations of the same creator.
    """

    def __init__(self, db_params: dict) -> None:
        self._db_params = db_params
        self._ensure_table()

    def _get_connection(self):
        return psycopg2.connect(**self._db_params)

    def _ensure_table(self) -> None:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    CREATE TABLE IF NOT EXISTS creators (
                        id TEXT PRIMARY KEY,
                        creator_id TEXT NOT NULL,
                        creator_id_provider TEXT NOT NULL,
                        creator_name TEXT,
                        creator_name_slug TEXT,
                        minecraft_player_uuid TEXT,
                        allow_creator_id_reset BOOLEAN NOT NULL DEFAULT FALSE,
                        hwids TEXT[] NOT NULL DEFAULT '{{}}',
                        ips TEXT[] NOT NULL DEFAULT '{{}}',
                        needs_translation BOOLEAN NOT NULL DEFAULT TRUE,
                        creator_name_locale TEXT,
                        creator_name_latinized TEXT,
                        creator_name_translated TEXT,
                        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
                        CONSTRAINT {CREATOR_ID_CONSTRAINT} UNIQUE (creator_id)
                    )
                    """
                )
                conn.commit()

    @staticmethod
    def _to_domain(row: dict) -> Creator:
        return Creator(
            id=str(row["id"]),
            creator_id=row["creator_id"],
            creator_id_provider=row["creator_id_provider"],
            creator_name=row["creator_name"],
            creator_name_slug=row["creator_name_slug"],
            minecraft_player_uuid=row["minecraft_player_uuid"],
            allow_creator_id_reset=bool(row["allow_creator_id_reset"]),
            hwids=list(row["hwids"] or []),
            ips=list(row["ips"] or []),
            needs_translation=bool(row["needs_translation"]),
            creator_name_locale=row["creator_name_locale"],
            creator_name_latinized=row["creator_name_latinized"],
            creator_name_translated=row["creator_name_translated"],
            created_at=row["created_at"],
        )

    def _fetch(self, query: str, params: tuple) -> List[Creator]:
        with self._get_connection() as conn:
            with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
                cur.execute(query, params)
                return [self._to_domain(row) for row in cur.fetchall()]

    def get_by_creator_id(self, creator_id: str) -> Optional[Creator]:
        rows = self._fetch(f"{_SELECT} WHERE creator_id = %s", (creator_id,))
        return rows[0] if rows else None

    def find_any(self, filters: CreatorFilter) -> List[Creator]:
        terms = filters.terms()
        where = " OR ".join(f"{column} = %s" for column, _ in terms)
        return self._fetch(
            f"{_SELECT} WHERE {where} ORDER BY created_at",
            tuple(value for _, value in terms),
        )

    def create_creator(self, creator: Creator) -> Creator:
        values = tuple(
            list(getattr(creator, name)) if name in ("hwids", "ips") else getattr(creator, name)
            for name in _COLUMNS
        )
        try:
            with self._get_connection() as conn:
                with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
                    cur.execute(
                        f"""
                        INSERT INTO creators ({', '.join(_COLUMNS)})
                        VALUES ({', '.join('%s' for _ in _COLUMNS)})
                        RETURNING {', '.join(_COLUMNS)}
                        """,
                        values,
                    )
                    row = cur.fetchone()
                    conn.commit()
        except psycopg2.errors.UniqueViolation as error:
            if error.diag.constraint_name == CREATOR_ID_CONSTRAINT:
                raise DuplicateCreatorId(creator.creator_id) from error
            raise

        return self._to_domain(row)

    def update_creator(self, creator_pk: str, changes: Dict[str, Any]) -> Creator:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update creator fields: {sorted(unknown)}")

        if not changes:
            rows = self._fetch(f"{_SELECT} WHERE id = %s", (creator_pk,))
        else:
            assignments = ", ".join(f"{name} = %s" for name in changes)
            try:
                rows = self._fetch(
                    f"UPDATE creators SET {assignments} WHERE id = %s "
                    f"RETURNING {', '.join(_COLUMNS)}",
                    (*changes.values(), creator_pk),
                )
            except psycopg2.errors.UniqueViolation as error:
                if error.diag.constraint_name == CREATOR_ID_CONSTRAINT:
                    raise DuplicateCreatorId(changes.get("creator_id", "")) from error
                raise

        if not rows:
            raise LookupError(f"No creator with id {creator_pk}.")
        return rows[0]
