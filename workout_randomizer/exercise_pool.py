"""
Exercise pool construction for random workout generation.

A pool maps a muscle-group label to the exercises that carry it. It is a
derived view: rebuild it whenever the source plans or library change.
"""

from loguru import logger


# Keys that belong to a plan slot, not to the exercise definition.
SLOT_KEYS = ("id", "round_group")


def _clean_label(value):
    return " ".join(str(value).split()) if value is not None else ""


def exercise_tags(exercise):
    """
    Return the canonical label list for an exercise record.

    Accepts either a `tags` list (library and pool records), a comma-separated
    `tags` string, or a single `tag` (manually entered plan exercises).
    Order is kept, blanks and repeats are dropped.
    """
    if not exercise:
        return []

    raw = exercise.get("tags")
    if isinstance(raw, str):
        raw = raw.split(",")
    if not raw:
        single = exercise.get("tag")
        raw = [single] if single else []

    labels = []
    for value in raw:
        label = _clean_label(value)
        if label and label not in labels:
            labels.append(label)
    return labels


def primary_tag(exercise):
    """First label of an exercise, or None when it has none."""
    labels = exercise_tags(exercise)
    return labels[0] if labels else None


def _exercise_name(exercise):
    return _clean_label(exercise.get("name")) if exercise else ""


def build_pool(exercises):
    """
    Group exercises by muscle-group label, deduplicating by (name, label).

    The same exercise under two labels yields two entries; seeing it again
    under a label it already has is ignored. Each entry is a copy whose label
    list starts with the pool label, so anything drawn from `pool["Chest"]`
    reports "Chest" as its primary label.
    """
    pool = {}
    seen = set()
    skipped = 0

    for exercise in exercises or []:
        name = _exercise_name(exercise)
        labels = exercise_tags(exercise)
        if not name or not labels:
            skipped += 1
            continue

        for label in labels:
            key = f"{name}|{label}"
            if key in seen:
                continue
            seen.add(key)

            entry = {k: v for k, v in exercise.items() if k not in SLOT_KEYS}
            entry["name"] = name
            entry["tag"] = label
            entry["tags"] = [label] + [other for other in labels if other != label]
            pool.setdefault(label, []).append(entry)

    logger.debug(
        "Built exercise pool: {} groups, {} entries, {} records skipped",
        len(pool),
        len(seen),
        skipped,
    )
    return pool


def build_pool_from_plans(plans, exercises=None):
    """
    Build a pool from the exercises of saved workout plans.

    `exercises` (e.g. library records) are pooled ahead of the plan exercises.
    """
    exercises = list(exercises or [])
    for plan in plans or []:
        plan_exercises = plan.get("exercises") if plan else None
        if not isinstance(plan_exercises, list):
            continue
        exercises.extend(plan_exercises)
    return build_pool(exercises)


def get_available_tags(pool):
    """Sorted list of labels that have at least one exercise."""
    return sorted(label for label, entries in (pool or {}).items() if entries)


def pool_summary(pool):
    """Label -> number of distinct exercises, sorted by label."""
    return {label: len(pool[label]) for label in get_available_tags(pool)}
