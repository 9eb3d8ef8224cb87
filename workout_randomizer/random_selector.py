"""
Random exercise selection and workout generation from muscle-group quotas.
"""

import random
import uuid
from datetime import datetime

from loguru import logger

from workout_randomizer.quota_validator import MAX_QUOTA_COUNT, normalize_quotas, validate_quotas


PLAN_NAME_PREFIX = "Random Workout"


def new_slot_id():
    """Fresh identifier for a plan slot (random, no shared counter)."""
    return uuid.uuid4().hex


def shuffle_in_place(items, rng=None):
    """
    Fisher-Yates shuffle. Every permutation is equally likely.

    Walks from the last index down to 1, swapping each element with a
    uniformly chosen index in [0, i]. Returns the same list.
    """
    rng = rng or random
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]
    return items


def _as_slot(exercise):
    slot = dict(exercise)
    slot["id"] = new_slot_id()
    return slot


def select_random(candidates, count, exclude_names=(), rng=None):
    """
    Draw up to `count` distinct exercises from `candidates`.

    Records whose name is in `exclude_names` are skipped. When fewer than
    `count` remain, all of them are returned; shortfall is reported by the
    quota validator, not here. Each result is a copy with a fresh slot id.
    """
    excluded = set(exclude_names or ())
    available = [ex for ex in candidates or [] if ex.get("name") not in excluded]

    if len(available) < count:
        return [_as_slot(ex) for ex in available]

    shuffled = shuffle_in_place(list(available), rng=rng)
    return [_as_slot(ex) for ex in shuffled[:count]]


def select_for_quotas(quotas, pool, exclude_names=(), rng=None):
    """
    Concatenate per-line selections in quota order.

    No validation happens here; callers validate first (`generate_workout`)
    or deliberately tolerate shortfall (regeneration).
    """
    exercises = []
    for quota in normalize_quotas(quotas):
        candidates = (pool or {}).get(quota["tag"]) or []
        selected = select_random(candidates, quota["count"], exclude_names=exclude_names, rng=rng)
        if len(selected) < quota["count"]:
            logger.debug(
                "Shortfall for {}: requested {}, selected {}",
                quota["tag"],
                quota["count"],
                len(selected),
            )
        exercises.extend(selected)
    return exercises


def generate_workout(quotas, pool, rng=None, exclude_names=(), max_count=MAX_QUOTA_COUNT):
    """
    Generate a random workout from muscle-group quotas.

    Returns:
        dict with keys exercises, errors, warnings. When validation reports
        errors nothing is selected and exercises is empty.
    """
    quotas = normalize_quotas(quotas)
    validation = validate_quotas(quotas, pool, max_count=max_count)
    if not validation["valid"]:
        logger.warning("Generation blocked: {}", "; ".join(validation["errors"]))
        return {
            "exercises": [],
            "errors": validation["errors"],
            "warnings": validation["warnings"],
        }

    exercises = select_for_quotas(quotas, pool, exclude_names=exclude_names, rng=rng)
    logger.debug("Generated {} exercises from {} quota lines", len(exercises), len(quotas))
    return {
        "exercises": exercises,
        "errors": [],
        "warnings": validation["warnings"],
    }


def generate_plan_name(when=None):
    """Default name for a generated plan, e.g. "Random Workout - Nov 5, 2025"."""
    when = when or datetime.now()
    return f"{PLAN_NAME_PREFIX} - {when.strftime('%b')} {when.day}, {when.year}"
