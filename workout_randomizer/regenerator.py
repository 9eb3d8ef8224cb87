"""
Pin-aware regeneration of generated workout plans.

Pinned slots stay exactly where they are; every other slot is refilled from
the residual quota, in the original left-to-right order. A replacement goes
to a slot that held the same muscle group where one is available, so circuit
rounds keep their variety.
"""

import time
from collections import Counter

from loguru import logger

from workout_randomizer.exercise_pool import primary_tag
from workout_randomizer.quota_validator import normalize_quotas
from workout_randomizer.random_selector import select_for_quotas


def is_pinned(pin_status, slot_id):
    return bool((pin_status or {}).get(slot_id))


def toggle_pin(pin_status, slot_id):
    """Return a new pin map with `slot_id` flipped."""
    updated = dict(pin_status or {})
    updated[slot_id] = not updated.get(slot_id, False)
    return updated


def prune_pin_status(pin_status, exercises):
    """Drop pin entries whose slot no longer exists in `exercises`."""
    slot_ids = {ex.get("id") for ex in exercises or []}
    return {slot_id: pinned for slot_id, pinned in (pin_status or {}).items() if slot_id in slot_ids}


def quotas_from_exercises(exercises):
    """Rebuild a quota list from a plan's exercises (primary label counts, first-seen order)."""
    counts = {}
    for exercise in exercises or []:
        tag = primary_tag(exercise)
        if tag:
            counts[tag] = counts.get(tag, 0) + 1
    return [{"tag": tag, "count": count} for tag, count in counts.items()]


def can_regenerate(plan):
    """False when there is nothing to regenerate (empty plan or all slots pinned)."""
    exercises = plan.get("exercises") or []
    pin_status = plan.get("pin_status") or {}
    return any(not is_pinned(pin_status, ex.get("id")) for ex in exercises)


def residual_quotas(quotas, pinned_exercises):
    """
    Subtract pinned exercises from the quota lines they satisfy.

    Each pinned exercise is counted once, against the first line with its
    primary label. Lines that reach zero, or that are malformed, are dropped.
    """
    pinned_counts = Counter(primary_tag(ex) for ex in pinned_exercises)
    residual = []
    for quota in normalize_quotas(quotas):
        tag = quota["tag"]
        if not tag or isinstance(quota["count"], bool) or not isinstance(quota["count"], int):
            continue
        covered = min(pinned_counts.get(tag, 0), quota["count"])
        pinned_counts[tag] = pinned_counts.get(tag, 0) - covered
        remaining = quota["count"] - covered
        if remaining > 0:
            residual.append({"tag": tag, "count": remaining})
    return residual


def _order_for_slots(replacements, slot_tags):
    """
    Line replacements up with the unpinned slots they will fill.

    Slot i gets the first unused replacement sharing its primary label; slots
    with no such match take the leftovers in order. Returns (ordered, surplus)
    where `ordered` has one entry (or None) per slot.
    """
    remaining = list(replacements)
    ordered = [None] * len(slot_tags)
    for index, tag in enumerate(slot_tags):
        for position, candidate in enumerate(remaining):
            if primary_tag(candidate) == tag:
                ordered[index] = remaining.pop(position)
                break
    for index in range(len(ordered)):
        if ordered[index] is None and remaining:
            ordered[index] = remaining.pop(0)
    return ordered, remaining


def _reassemble(exercises, pin_status, replacements):
    unpinned = [ex for ex in exercises if not is_pinned(pin_status, ex.get("id"))]
    ordered, surplus = _order_for_slots(replacements, [primary_tag(ex) for ex in unpinned])

    rebuilt = []
    fresh = iter(ordered)
    for exercise in exercises:
        if is_pinned(pin_status, exercise.get("id")):
            rebuilt.append(exercise)
            continue
        replacement = next(fresh)
        if replacement is None:
            continue
        if "round_group" in exercise:
            # The circuit round belongs to the slot.
            replacement["round_group"] = exercise["round_group"]
        rebuilt.append(replacement)
    # Quota lines larger than the unpinned slot count land at the end.
    rebuilt.extend(surplus)
    return rebuilt


def regenerate_workout(plan, quotas, pool, rng=None):
    """
    Replace all unpinned exercises of `plan` while keeping pinned ones in place.

    Args:
        plan: plan dict with exercises and an optional pin_status map
        quotas: the quota lines the plan was generated from
        pool: exercise pool to draw replacements from

    Returns:
        A new plan dict. Unpinned slots without a replacement are dropped and
        pin_status only keeps ids that survived. When every exercise is pinned
        the plan is returned unchanged.
    """
    exercises = list(plan.get("exercises") or [])
    pin_status = plan.get("pin_status") or {}

    if not can_regenerate(plan):
        logger.warning("Regenerate skipped: no unpinned exercises")
        return plan

    pinned = [ex for ex in exercises if is_pinned(pin_status, ex.get("id"))]
    residual = residual_quotas(quotas, pinned)
    pinned_names = [ex.get("name") for ex in pinned]
    replacements = select_for_quotas(residual, pool, exclude_names=pinned_names, rng=rng)

    rebuilt = _reassemble(exercises, pin_status, replacements)
    unpinned_slots = len(exercises) - len(pinned)
    if len(replacements) < unpinned_slots:
        logger.warning(
            "Regenerate under-filled: {} replacements for {} unpinned slots",
            len(replacements),
            unpinned_slots,
        )

    now = time.time()
    updated = dict(plan)
    updated["exercises"] = rebuilt
    updated["pin_status"] = prune_pin_status(pin_status, rebuilt)
    updated["generation_timestamp"] = now
    updated["updated_at"] = now
    return updated
