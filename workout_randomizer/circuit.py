"""
Circuit round distribution for generated workouts.

Two modes:
- with an explicit round count, exercises are cut into contiguous chunks;
- without one, muscle groups are interleaved so each round varies them.
"""

import math

from loguru import logger

from workout_randomizer.exercise_pool import primary_tag


def _with_round(exercise, round_group):
    updated = dict(exercise)
    updated["round_group"] = round_group
    return updated


def _chunk_by_position(exercises, round_count):
    size = math.ceil(len(exercises) / round_count)
    return [_with_round(ex, index // size) for index, ex in enumerate(exercises)]


def _interleave_by_group(exercises):
    groups = {}
    for exercise in exercises:
        groups.setdefault(primary_tag(exercise), []).append(exercise)

    queues = list(groups.values())
    ordered = []
    round_group = 0
    while any(queues):
        for queue in queues:
            if queue:
                ordered.append(_with_round(queue.pop(0), round_group))
        round_group += 1
    return ordered, list(groups)


def alternate_by_muscle_group(exercises, round_count=None):
    """
    Assign `round_group` to every exercise for circuit mode.

    Args:
        exercises: flat list of plan exercises
        round_count: positive int for fixed rounds; None (or <= 0) for
            automatic round-robin alternation by primary muscle group

    Returns:
        dict with keys:
            exercises: new list of exercise copies with round_group set
            notices: advisory messages for the caller

    Raises:
        ValueError: round_count is not a whole number.
    """
    if round_count is not None and (isinstance(round_count, bool) or not isinstance(round_count, int)):
        raise ValueError(f"round_count must be a whole number, got {round_count!r}")

    exercises = list(exercises or [])
    if len(exercises) <= 1:
        return {"exercises": [_with_round(ex, 0) for ex in exercises], "notices": []}

    if round_count is not None and round_count > 0:
        return {"exercises": _chunk_by_position(exercises, round_count), "notices": []}

    ordered, group_order = _interleave_by_group(exercises)
    notices = []
    if len(group_order) == 1:
        label = group_order[0] or "one muscle group"
        notices.append(
            f"All exercises target {label}; alternation is not possible, so each exercise is its own round."
        )
        logger.warning(notices[-1])

    logger.debug("Alternated {} exercises across {} muscle groups", len(ordered), len(group_order))
    return {"exercises": ordered, "notices": notices}


def group_by_round(exercises):
    """Return [(round_group, [exercises...]), ...] sorted by round."""
    rounds = {}
    for exercise in exercises or []:
        rounds.setdefault(exercise.get("round_group") or 0, []).append(exercise)
    return sorted(rounds.items(), key=lambda item: item[0])


def count_rounds(exercises):
    """Number of rounds a plan spans (at least 1)."""
    groups = [ex.get("round_group") or 0 for ex in exercises or []]
    return max(groups) + 1 if groups else 1
