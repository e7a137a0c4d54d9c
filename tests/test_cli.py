import io
import json
import unittest

from interfaces.cli.handlers import run_cli

from fakes import FakeNameTranslator, InMemoryCreatorRepository, RecordingTranslationScheduler

CREATOR_ID = "3f1c6a52-8b7e-4d2a-9c4e-0b7f5e2d1a93"


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self.repo = InMemoryCreatorRepository()
        self.out = io.StringIO()
        self.err = io.StringIO()

    def run_command(self, *argv, **kwargs) -> int:
        self.out.seek(0)
        self.out.truncate()
        self.err.seek(0)
        self.err.truncate()
        return run_cli(list(argv), self.repo, out=self.out, err=self.err, **kwargs)

    def mod_args(self, name="Alice Builds"):
        return [
            "mod",
            "--provider", "paradox",
            "--creator-id", CREATOR_ID,
            "--name", name,
            "--hwid", "hwid-1",
            "--ip", "192.0.2.1",
        ]

    def test_mod_creates_then_simple_authenticates(self):
        scheduler = RecordingTranslationScheduler()

        self.assertEqual(self.run_command(*self.mod_args(), translation_scheduler=scheduler), 0)
        created = json.loads(self.out.getvalue())
        self.assertEqual(created["creatorName"], "Alice Builds")
        self.assertEqual(created["creatorNameSlug"], "alice-builds")
        self.assertEqual(len(scheduler.scheduled), 1)

        self.assertEqual(self.run_command("simple", CREATOR_ID, "--ip", "192.0.2.9"), 0)
        authenticated = json.loads(self.out.getvalue())
        self.assertEqual(authenticated["id"], created["id"])
        self.assertNotIn("creatorId", authenticated)

        stored = self.repo.get_by_creator_id(CREATOR_ID)
        self.assertEqual(stored.ips, ["192.0.2.9", "192.0.2.1"])

    def test_rejections_exit_with_one(self):
        self.assertEqual(self.run_command("simple", CREATOR_ID, "--ip", "192.0.2.1"), 1)
        self.assertIn("No Creator", self.err.getvalue())

        self.assertEqual(self.run_command("simple", "not-a-uuid", "--ip", "192.0.2.1"), 1)
        self.assertEqual(self.out.getvalue(), "")

        self.assertEqual(self.run_command(*self.mod_args(name="x" * 26)), 1)
        self.assertEqual(self.repo.writes, 0)

    def test_unknown_provider_is_a_usage_error(self):
        args = self.mod_args()
        args[2] = "steam"
        with self.assertRaises(SystemExit) as ctx:
            self.run_command(*args)
        self.assertEqual(ctx.exception.code, 2)

    def test_translate_requires_a_translator(self):
        self.repo.add(creator_id=CREATOR_ID, creator_name="山田")

        self.assertEqual(self.run_command("translate", CREATOR_ID), 2)
        self.assertIn("TRANSLATION_API_URL", self.err.getvalue())

    def test_translate_refreshes_now(self):
        self.repo.add(creator_id=CREATOR_ID, creator_name="山田")

        code = self.run_command("translate", CREATOR_ID, translator=FakeNameTranslator())

        self.assertEqual(code, 0)
        payload = json.loads(self.out.getvalue())
        self.assertEqual(payload["creatorNameLocale"], "ja")
        self.assertEqual(payload["creatorNameTranslated"], "山田 (en)")

    def test_translate_unknown_creator(self):
        code = self.run_command("translate", CREATOR_ID, translator=FakeNameTranslator())
        self.assertEqual(code, 1)


if __name__ == "__main__":
    unittest.main()
