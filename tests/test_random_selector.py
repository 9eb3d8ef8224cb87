import random
import unittest
from collections import Counter
from datetime import datetime

from workout_randomizer.exercise_pool import build_pool
from workout_randomizer.random_selector import (
    generate_plan_name,
    generate_workout,
    select_random,
    shuffle_in_place,
)


def _library():
    exercises = []
    for tag, count in (("Chest", 5), ("Back", 4), ("Legs", 2)):
        for i in range(count):
            exercises.append({"name": f"{tag} {i}", "tags": [tag], "sets": 3, "reps": "10"})
    return exercises


class ShuffleTests(unittest.TestCase):
    def test_keeps_every_element(self):
        items = list(range(10))
        shuffle_in_place(items, rng=random.Random(7))
        self.assertEqual(sorted(items), list(range(10)))

    def test_all_permutations_roughly_equally_likely(self):
        rng = random.Random(1234)
        counts = Counter(tuple(shuffle_in_place(["a", "b", "c"], rng=rng)) for _ in range(6000))

        self.assertEqual(len(counts), 6)
        for permutation, seen in counts.items():
            self.assertTrue(850 < seen < 1150, f"{permutation} seen {seen} times")


class SelectRandomTests(unittest.TestCase):
    def test_returns_distinct_copies_with_fresh_ids(self):
        candidates = [{"name": f"E{i}", "tag": "Chest"} for i in range(6)]
        selected = select_random(candidates, 4, rng=random.Random(3))

        self.assertEqual(len(selected), 4)
        self.assertEqual(len({ex["name"] for ex in selected}), 4)
        self.assertEqual(len({ex["id"] for ex in selected}), 4)
        self.assertNotIn("id", candidates[0])

    def test_shortfall_returns_all_available_in_order(self):
        candidates = [{"name": "A"}, {"name": "B"}]
        selected = select_random(candidates, 5)
        self.assertEqual([ex["name"] for ex in selected], ["A", "B"])

    def test_excluded_names_are_never_drawn(self):
        candidates = [{"name": n} for n in "ABCDE"]
        for seed in range(20):
            selected = select_random(candidates, 3, exclude_names=["A", "B"], rng=random.Random(seed))
            self.assertEqual({ex["name"] for ex in selected}, {"C", "D", "E"})

    def test_single_pick_is_uniform(self):
        rng = random.Random(99)
        candidates = [{"name": n} for n in "ABCD"]
        counts = Counter(select_random(candidates, 1, rng=rng)[0]["name"] for _ in range(8000))
        for name in "ABCD":
            self.assertTrue(1800 < counts[name] < 2200, f"{name} drawn {counts[name]} times")


class GenerateWorkoutTests(unittest.TestCase):
    def setUp(self):
        self.pool = build_pool(_library())

    def test_meets_quotas_in_line_order(self):
        result = generate_workout(
            [{"tag": "Chest", "count": 2}, {"tag": "Back", "count": 3}],
            self.pool,
            rng=random.Random(5),
        )

        self.assertEqual(result["errors"], [])
        tags = [ex["tags"][0] for ex in result["exercises"]]
        self.assertEqual(tags, ["Chest", "Chest", "Back", "Back", "Back"])

    def test_shortfall_uses_what_is_available_and_warns(self):
        result = generate_workout([{"tag": "Legs", "count": 4}], self.pool)

        self.assertEqual(len(result["exercises"]), 2)
        self.assertEqual(len(result["warnings"]), 1)

    def test_missing_group_produces_no_exercises(self):
        result = generate_workout(
            [{"tag": "Chest", "count": 1}, {"tag": "Glutes", "count": 1}], self.pool
        )
        self.assertEqual(result["exercises"], [])
        self.assertEqual(len(result["errors"]), 1)

    def test_exclude_names_are_respected(self):
        result = generate_workout(
            [{"tag": "Legs", "count": 2}], self.pool, exclude_names=["Legs 0"]
        )
        self.assertEqual([ex["name"] for ex in result["exercises"]], ["Legs 1"])

    def test_malformed_quota_lines_become_errors(self):
        result = generate_workout(["Chest", {"tag": None, "count": 1}], self.pool)

        self.assertEqual(result["exercises"], [])
        self.assertEqual(len(result["errors"]), 3)

    def test_quota_tags_are_trimmed(self):
        result = generate_workout([{"tag": "  Back ", "count": 1}], self.pool)
        self.assertEqual(len(result["exercises"]), 1)


class PlanNameTests(unittest.TestCase):
    def test_default_name_uses_date(self):
        self.assertEqual(
            generate_plan_name(datetime(2025, 11, 5, 9, 30)),
            "Random Workout - Nov 5, 2025",
        )


if __name__ == "__main__":
    unittest.main()
