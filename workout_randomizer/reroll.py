"""
Single-slot reroll with a short per-position memory of rejected exercises.
"""

from loguru import logger

from workout_randomizer.exercise_pool import primary_tag
from workout_randomizer.random_selector import select_random


# Remember the last 3 rejected exercises per position.
REROLL_HISTORY_SIZE = 3

# Workout parameters belong to the slot and survive a reroll.
SLOT_PARAMETERS = ("sets", "reps", "weight", "rest", "round_group")


def push_history(history, index, name, size=REROLL_HISTORY_SIZE):
    """Return a new history with `name` at the front of `index`'s list."""
    updated = dict(history or {})
    previous = [n for n in updated.get(index, []) if n != name]
    updated[index] = ([name] + previous)[:size]
    return updated


def _refusal(exercises, history, message):
    logger.warning("Reroll refused: {}", message)
    return {
        "ok": False,
        "exercises": exercises,
        "history": history,
        "message": message,
        "replaced": None,
    }


def _alternatives(exercise, pool, recent):
    tag = primary_tag(exercise)
    candidates = ((pool or {}).get(tag) or []) if tag else []
    excluded = {exercise.get("name")} | set(recent)
    return tag, candidates, [ex for ex in candidates if ex.get("name") not in excluded]


def can_reroll(exercises, index, pool, history=None):
    """True when the slot at `index` has at least one unseen alternative."""
    if index < 0 or index >= len(exercises):
        return False
    recent = (history or {}).get(index, [])
    _tag, _candidates, available = _alternatives(exercises[index], pool, recent)
    return bool(available)


def reroll_exercise(exercises, index, pool, history=None, rng=None):
    """
    Replace the exercise at `index` with another from its primary muscle group.

    The current exercise and the slot's recent rejects are excluded. The
    replacement keeps the slot's sets, reps, weight, rest and round, and gets
    a fresh slot id.

    Returns:
        dict with keys:
            ok: False for a refusal (nothing changed)
            exercises: updated list (a new list on success)
            history: updated reroll history (a new dict on success)
            message: refusal reason, or "" on success
            replaced: the exercise that was swapped out, None on refusal

    Raises:
        IndexError: `index` does not point at an exercise.
    """
    history = history if history is not None else {}
    if index < 0 or index >= len(exercises):
        raise IndexError(f"No exercise at position {index}")

    current = exercises[index]
    recent = history.get(index, [])
    tag, candidates, available = _alternatives(current, pool, recent)

    if not tag:
        return _refusal(exercises, history, "Cannot reroll: exercise has no muscle group")
    if not candidates:
        return _refusal(exercises, history, f'No exercises available for muscle group "{tag}"')
    if not available:
        return _refusal(
            exercises,
            history,
            f'No other "{tag}" exercises available. All alternatives have already been shown.',
        )

    replacement = select_random(available, 1, rng=rng)[0]
    for key in SLOT_PARAMETERS:
        if key in current:
            replacement[key] = current[key]
        else:
            replacement.pop(key, None)

    updated = list(exercises)
    updated[index] = replacement
    logger.debug("Rerolled slot {}: {} -> {}", index, current.get("name"), replacement.get("name"))

    return {
        "ok": True,
        "exercises": updated,
        "history": push_history(history, index, current.get("name")),
        "message": "",
        "replaced": current,
    }
