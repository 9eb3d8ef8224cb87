import copy
import unittest

from workout_randomizer.exercise_pool import (
    build_pool,
    build_pool_from_plans,
    exercise_tags,
    get_available_tags,
    pool_summary,
    primary_tag,
)


class ExerciseTagsTests(unittest.TestCase):
    def test_reads_tag_list_and_drops_blanks_and_repeats(self):
        exercise = {"name": "Dips", "tags": ["Chest", " ", "Triceps", "Chest"]}
        self.assertEqual(exercise_tags(exercise), ["Chest", "Triceps"])

    def test_reads_comma_separated_string(self):
        self.assertEqual(exercise_tags({"tags": "Back, Biceps"}), ["Back", "Biceps"])

    def test_falls_back_to_single_tag(self):
        exercise = {"name": "Push-Up", "tag": "Chest"}
        self.assertEqual(exercise_tags(exercise), ["Chest"])
        self.assertEqual(primary_tag(exercise), "Chest")

    def test_untagged_exercise_has_no_primary_tag(self):
        self.assertIsNone(primary_tag({"name": "Mystery"}))
        self.assertEqual(exercise_tags(None), [])


class BuildPoolTests(unittest.TestCase):
    def test_multi_label_exercise_lands_in_each_group(self):
        pool = build_pool([{"name": "Dips", "tags": ["Chest", "Triceps"], "sets": 3}])

        self.assertEqual([ex["name"] for ex in pool["Chest"]], ["Dips"])
        self.assertEqual([ex["name"] for ex in pool["Triceps"]], ["Dips"])
        self.assertEqual(pool["Triceps"][0]["tags"], ["Triceps", "Chest"])
        self.assertEqual(pool["Triceps"][0]["tag"], "Triceps")

    def test_deduplicates_same_name_and_label(self):
        pool = build_pool(
            [
                {"name": "Push-Up", "tag": "Chest", "reps": "15"},
                {"name": "Push-Up", "tag": "Chest", "reps": "20"},
            ]
        )
        self.assertEqual(len(pool["Chest"]), 1)
        self.assertEqual(pool["Chest"][0]["reps"], "15")

    def test_skips_records_without_name_or_label(self):
        pool = build_pool([{"name": "", "tag": "Chest"}, {"name": "Plank"}])
        self.assertEqual(pool, {})

    def test_strips_slot_fields_from_entries(self):
        pool = build_pool([{"id": "slot-1", "round_group": 2, "name": "Plank", "tag": "Core"}])
        entry = pool["Core"][0]
        self.assertNotIn("id", entry)
        self.assertNotIn("round_group", entry)

    def test_build_pool_from_plans_ignores_plans_without_exercise_list(self):
        plans = [
            {"name": "A", "exercises": [{"name": "Squat", "tag": "Legs"}]},
            {"name": "B", "exercises": None},
            None,
            {"name": "C", "exercises": [{"name": "Squat", "tag": "Legs"}, {"name": "Row", "tag": "Back"}]},
        ]
        pool = build_pool_from_plans(plans)
        self.assertEqual(pool_summary(pool), {"Back": 1, "Legs": 1})

    def test_building_twice_from_same_source_is_identical(self):
        source = [
            {"name": "Dips", "tags": ["Chest", "Triceps"], "sets": 3},
            {"name": "Push-Up", "tag": "Chest"},
            {"name": "Dips", "tags": ["Triceps"]},
            {"name": "Squat", "tags": "Legs, Glutes"},
        ]
        snapshot = copy.deepcopy(source)

        first = build_pool(source)
        second = build_pool(source)

        self.assertEqual(first, second)
        for label in first:
            self.assertEqual(
                [ex["name"] for ex in first[label]], [ex["name"] for ex in second[label]]
            )
        self.assertEqual(source, snapshot)

    def test_library_exercises_are_pooled_ahead_of_plan_exercises(self):
        library = [{"name": "Bench Press", "tags": ["Chest"]}]
        plans = [{"name": "A", "exercises": [{"name": "Push-Up", "tag": "Chest"}, {"name": "Bench Press", "tag": "Chest"}]}]

        pool = build_pool_from_plans(plans, library)

        self.assertEqual([ex["name"] for ex in pool["Chest"]], ["Bench Press", "Push-Up"])

    def test_available_tags_are_sorted_and_non_empty(self):
        pool = {"Legs": [{"name": "Squat"}], "Arms": [], "Chest": [{"name": "Dips"}]}
        self.assertEqual(get_available_tags(pool), ["Chest", "Legs"])


if __name__ == "__main__":
    unittest.main()
