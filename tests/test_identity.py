import unittest

from domain.exceptions import CreatorNameTooLong, InvalidCreatorId, InvalidCreatorName, InvalidMinecraftUuid
from domain.history import merge_mru3
from domain.identity import (
    normalize_creator_name,
    normalize_minecraft_uuid,
    slugify,
    validate_creator_id,
)


class ValidateCreatorIdTests(unittest.TestCase):
    def test_accepts_random_uuid(self):
        creator_id = "3f1c6a52-8b7e-4d2a-9c4e-0b7f5e2d1a93"
        self.assertEqual(validate_creator_id(creator_id), creator_id)

    def test_accepts_upper_case(self):
        creator_id = "3F1C6A52-8B7E-4D2A-9C4E-0B7F5E2D1A93"
        self.assertEqual(validate_creator_id(creator_id), creator_id)

    def test_rejects_other_uuid_versions(self):
        with self.assertRaises(InvalidCreatorId):
            validate_creator_id("3f1c6a52-8b7e-1d2a-9c4e-0b7f5e2d1a93")

    def test_rejects_non_canonical_forms(self):
        for value in (
            "3f1c6a528b7e4d2a9c4e0b7f5e2d1a93",
            "{3f1c6a52-8b7e-4d2a-9c4e-0b7f5e2d1a93}",
            "3f1c6a52-8b7e-4d2a-9c4e-0b7f5e2d1a93\n",
            "not a uuid",
            "",
        ):
            with self.subTest(value=value), self.assertRaises(InvalidCreatorId) as ctx:
                validate_creator_id(value)
            self.assertEqual(ctx.exception.creator_id, value)


class NormalizeMinecraftUuidTests(unittest.TestCase):
    CANONICAL = "069a79f4-44e9-4726-a5be-fca90e38aaf5"

    def test_hyphenated_and_bare_forms_give_same_result(self):
        self.assertEqual(normalize_minecraft_uuid(self.CANONICAL), self.CANONICAL)
        self.assertEqual(
            normalize_minecraft_uuid("069a79f444e94726a5befca90e38aaf5"), self.CANONICAL
        )

    def test_output_is_lower_case(self):
        self.assertEqual(
            normalize_minecraft_uuid("069A79F444E94726A5BEFCA90E38AAF5"), self.CANONICAL
        )

    def test_accepts_name_based_offline_uuids(self):
        # Offline-mode servers derive version 3 UUIDs from the player name.
        offline = "b50ad385-829d-3141-a216-7e7d7539ba7f"
        self.assertEqual(normalize_minecraft_uuid(offline), offline)

    def test_rejects_wrong_lengths(self):
        for value in ("069a79f444e94726a5befca90e38aaf", "069a79f444e94726a5befca90e38aaf5a", ""):
            with self.subTest(value=value), self.assertRaises(InvalidMinecraftUuid):
                normalize_minecraft_uuid(value)

    def test_rejects_non_hex_characters(self):
        with self.assertRaises(InvalidMinecraftUuid):
            normalize_minecraft_uuid("069a79f444e94726a5befca90e38aazz")

    def test_rejects_malformed_uuid(self):
        # Version nibble 0 is not a valid UUID.
        with self.assertRaises(InvalidMinecraftUuid) as ctx:
            normalize_minecraft_uuid("069a79f444e90726a5befca90e38aaf5")
        self.assertEqual(ctx.exception.value, "069a79f444e90726a5befca90e38aaf5")


class NormalizeCreatorNameTests(unittest.TestCase):
    def test_collapses_and_trims_whitespace(self):
        self.assertEqual(normalize_creator_name("  John \t  Doe  "), "John Doe")

    def test_blank_names_are_none(self):
        self.assertIsNone(normalize_creator_name(None))
        self.assertIsNone(normalize_creator_name(""))
        self.assertIsNone(normalize_creator_name("   "))

    def test_length_is_checked_after_normalization(self):
        name = "a" * 12 + "     " + "b" * 12
        self.assertEqual(normalize_creator_name(name), "a" * 12 + " " + "b" * 12)
        self.assertEqual(normalize_creator_name("x" * 25), "x" * 25)

    def test_rejects_names_over_25_characters(self):
        with self.assertRaises(CreatorNameTooLong) as ctx:
            normalize_creator_name("x" * 26)
        self.assertIsInstance(ctx.exception, InvalidCreatorName)
        self.assertEqual(ctx.exception.incorrect_name, "x" * 26)

    def test_pluggable_predicate(self):
        def no_digits(name):
            return not any(c.isdigit() for c in name)

        self.assertEqual(normalize_creator_name("Alice", is_acceptable=no_digits), "Alice")
        with self.assertRaises(InvalidCreatorName):
            normalize_creator_name("Alice42", is_acceptable=no_digits)


class SlugifyTests(unittest.TestCase):
    def test_apostrophes_removed_and_whitespace_hyphenated(self):
        self.assertEqual(slugify("O'Brien  Town"), "obrien-town")
        self.assertEqual(slugify("O’Brien Town"), "obrien-town")

    def test_null_and_blank(self):
        self.assertIsNone(slugify(None))
        self.assertIsNone(slugify(""))
        self.assertIsNone(slugify("   "))

    def test_hyphen_runs_collapse_and_edges_are_trimmed(self):
        self.assertEqual(slugify("--Foo - Bar--"), "foo-bar")
        self.assertEqual(slugify(" Foo---Bar "), "foo-bar")

    def test_non_latin_names_are_kept(self):
        self.assertEqual(slugify("Ünïcode Näme"), "ünïcode-näme")


class MergeMru3Tests(unittest.TestCase):
    def test_head_value_leaves_history_unchanged(self):
        self.assertEqual(merge_mru3(["a", "b", "c"], "a"), ["a", "b", "c"])

    def test_new_value_is_prepended_and_truncated(self):
        self.assertEqual(merge_mru3(["a", "b", "c"], "d"), ["d", "a", "b"])

    def test_existing_value_moves_to_front(self):
        self.assertEqual(merge_mru3(["a", "b", "c"], "c"), ["c", "a", "b"])

    def test_empty_history(self):
        self.assertEqual(merge_mru3([], "a"), ["a"])

    def test_invariants_hold_over_many_merges(self):
        history = []
        for value in ["a", "b", "a", "c", "d", "d", "b", "e", "a"]:
            history = merge_mru3(history, value)
            self.assertEqual(history[0], value)
            self.assertLessEqual(len(history), 3)
            self.assertEqual(len(set(history)), len(history))
        self.assertEqual(history, ["a", "e", "b"])

    def test_input_is_not_mutated(self):
        history = ["a", "b"]
        merge_mru3(history, "c")
        self.assertEqual(history, ["a", "b"])


if __name__ == "__main__":
    unittest.main()
