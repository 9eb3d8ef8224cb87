"""
Editing session for a generated plan: reroll, pin, regenerate, commit.
"""

from loguru import logger

from workout_randomizer.regenerator import (
    can_regenerate,
    is_pinned,
    prune_pin_status,
    quotas_from_exercises,
    regenerate_workout,
    toggle_pin,
)
from workout_randomizer.reroll import can_reroll, reroll_exercise


class PlanEditor:
    """
    Holds one plan while it is being edited.

    Reroll history lives only as long as the editor: it is cleared on
    regenerate and on commit and is never written to the plan store.

    Usage:
        editor = PlanEditor(plan, pool)
        editor.reroll(2)
        editor.toggle_pin(editor.exercises[0]["id"])
        editor.regenerate()
        store.save_plan(editor.commit())
    """

    def __init__(self, plan, pool, quotas=None, rng=None):
        self.plan = dict(plan)
        self.plan["exercises"] = list(plan.get("exercises") or [])
        self.plan["pin_status"] = dict(plan.get("pin_status") or {})
        self.pool = pool or {}
        self.quotas = quotas
        self.rng = rng
        self.reroll_history = {}

    @property
    def exercises(self):
        return self.plan["exercises"]

    @property
    def pin_status(self):
        return self.plan["pin_status"]

    def is_pinned(self, slot_id):
        return is_pinned(self.pin_status, slot_id)

    def toggle_pin(self, slot_id):
        if slot_id not in {ex.get("id") for ex in self.exercises}:
            raise KeyError(f"No exercise with id {slot_id}")
        self.plan["pin_status"] = toggle_pin(self.pin_status, slot_id)
        return self.is_pinned(slot_id)

    def can_reroll(self, index):
        return can_reroll(self.exercises, index, self.pool, self.reroll_history)

    def reroll(self, index):
        """Reroll one slot. Returns the reroll result dict."""
        result = reroll_exercise(
            self.exercises, index, self.pool, self.reroll_history, rng=self.rng
        )
        if result["ok"]:
            self.plan["exercises"] = result["exercises"]
            self.plan["pin_status"] = prune_pin_status(self.pin_status, self.exercises)
            self.reroll_history = result["history"]
        return result

    def can_regenerate(self):
        return can_regenerate(self.plan)

    def regenerate(self):
        """
        Replace unpinned exercises.

        Returns:
            dict with keys ok and message. Refuses (ok False) when the
            plan is empty or every exercise is pinned.
        """
        if not self.exercises:
            message = "This plan has no exercises to regenerate."
            logger.warning(message)
            return {"ok": False, "message": message}
        if not self.can_regenerate():
            message = "All exercises are pinned. Unpin at least one exercise to regenerate."
            logger.warning(message)
            return {"ok": False, "message": message}

        quotas = self.quotas or quotas_from_exercises(self.exercises)
        regenerated = regenerate_workout(self.plan, quotas, self.pool, rng=self.rng)

        self.plan = regenerated
        self.reroll_history = {}
        return {"ok": True, "message": ""}

    def commit(self):
        """Finish the session: drop reroll history, keep pin status."""
        self.reroll_history = {}
        self.plan["pin_status"] = prune_pin_status(self.pin_status, self.exercises)
        return dict(self.plan)
