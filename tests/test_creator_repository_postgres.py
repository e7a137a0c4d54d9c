import unittest
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest import mock

import psycopg2.errors

from domain.exceptions import DuplicateCreatorId
from domain.models import CreatorFilter
from infrastructure.db.creator_repository_postgres import (
    CREATOR_ID_CONSTRAINT,
    PostgresCreatorRepository,
)


class _CreatorIdViolation(psycopg2.errors.UniqueViolation):
    @property
    def diag(self):
        return SimpleNamespace(constraint_name=CREATOR_ID_CONSTRAINT)


def creator_row(**overrides) -> dict:
    row = dict(
        id="9b2f6f0e-0d55-4a5c-9f0e-0f6f1f7d3c11",
        creator_id="3f1c6a52-8b7e-4d2a-9c4e-0b7f5e2d1a93",
        creator_id_provider="paradox",
        creator_name="Alice",
        creator_name_slug="alice",
        minecraft_player_uuid=None,
        allow_creator_id_reset=False,
        hwids=["hwid-1"],
        ips=["192.0.2.1"],
        needs_translation=True,
        creator_name_locale=None,
        creator_name_latinized=None,
        creator_name_translated=None,
        created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )
    row.update(overrides)
    return row


class PostgresCreatorRepositoryTests(unittest.TestCase):
    def setUp(self) -> None:
        patcher = mock.patch("infrastructure.db.creator_repository_postgres.psycopg2.connect")
        self.connect = patcher.start()
        self.addCleanup(patcher.stop)

        self.conn = mock.MagicMock()
        self.conn.__enter__.return_value = self.conn
        self.cur = mock.MagicMock()
        self.cur.__enter__.return_value = self.cur
        self.conn.cursor.return_value = self.cur
        self.connect.return_value = self.conn

        self.repo = PostgresCreatorRepository({"dsn": "postgresql://localhost/creators"})

    def test_creates_table_on_startup(self):
        self.connect.assert_called_with(dsn="postgresql://localhost/creators")
        ddl = self.cur.execute.call_args_list[0][0][0]
        self.assertIn("CREATE TABLE IF NOT EXISTS creators", ddl)
        self.assertIn("creators_creator_id_key UNIQUE (creator_id)", ddl)

    def test_get_by_creator_id_maps_row(self):
        self.cur.fetchall.return_value = [creator_row()]

        creator = self.repo.get_by_creator_id("3f1c6a52-8b7e-4d2a-9c4e-0b7f5e2d1a93")

        self.assertEqual(creator.creator_name, "Alice")
        self.assertEqual(creator.hwids, ["hwid-1"])
        self.assertFalse(creator.allow_creator_id_reset)

    def test_find_any_ors_every_term(self):
        self.cur.fetchall.return_value = []

        self.repo.find_any(
            CreatorFilter(
                creator_id="3f1c6a52-8b7e-4d2a-9c4e-0b7f5e2d1a93",
                creator_name="Alice",
                creator_name_slug="alice",
            )
        )

        query, params = self.cur.execute.call_args[0]
        self.assertIn("creator_id = %s OR creator_name = %s OR creator_name_slug = %s", query)
        self.assertEqual(params, ("3f1c6a52-8b7e-4d2a-9c4e-0b7f5e2d1a93", "Alice", "alice"))

    def test_update_returns_updated_creator(self):
        self.cur.fetchall.return_value = [creator_row(ips=["192.0.2.2", "192.0.2.1"])]

        creator = self.repo.update_creator("pk", {"ips": ["192.0.2.2", "192.0.2.1"]})

        query, params = self.cur.execute.call_args[0]
        self.assertTrue(query.startswith("UPDATE creators SET ips = %s WHERE id = %s"))
        self.assertEqual(params, (["192.0.2.2", "192.0.2.1"], "pk"))
        self.assertEqual(creator.ips, ["192.0.2.2", "192.0.2.1"])

    def test_update_rejects_unknown_fields(self):
        with self.assertRaises(ValueError):
            self.repo.update_creator("pk", {"created_at": None})

    def test_update_to_taken_creator_id_is_signalled(self):
        self.cur.execute.side_effect = _CreatorIdViolation("duplicate key value")

        with self.assertRaises(DuplicateCreatorId) as ctx:
            self.repo.update_creator("pk", {"creator_id": "3f1c6a52-8b7e-4d2a-9c4e-0b7f5e2d1a93"})

        self.assertEqual(ctx.exception.creator_id, "3f1c6a52-8b7e-4d2a-9c4e-0b7f5e2d1a93")

    def test_update_unknown_creator(self):
        self.cur.fetchall.return_value = []
        with self.assertRaises(LookupError):
            self.repo.update_creator("missing", {"ips": []})


if __name__ == "__main__":
    unittest.main()
