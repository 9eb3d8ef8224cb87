"""
SQLite persistence for workout plans.
"""

import json
import os
import sqlite3
import time
import uuid
from contextlib import contextmanager

from loguru import logger

from workout_randomizer.quota_validator import validate_plan_name


def _row_to_plan(row):
    return {
        "id": row["id"],
        "name": row["name"],
        "exercises": json.loads(row["exercises"] or "[]"),
        "is_circuit": bool(row["is_circuit"]),
        "is_generated": bool(row["is_generated"]),
        "generation_timestamp": row["generation_timestamp"],
        "pin_status": json.loads(row["pin_status"] or "{}"),
        "sort_order": int(row["sort_order"]),
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
    }


class PlanStore:
    """Small SQLite wrapper for ordered workout plans."""

    def __init__(self, db_path):
        self.db_path = db_path
        parent = os.path.dirname(db_path)
        if parent:
            os.makedirs(parent, exist_ok=True)

        self.conn = sqlite3.connect(db_path)
        self.conn.row_factory = sqlite3.Row

    def close(self):
        self.conn.close()

    @contextmanager
    def transaction(self):
        """Context manager for atomic write operations."""
        try:
            yield
            self.conn.commit()
        except Exception:
            self.conn.rollback()
            raise

    def init_schema(self):
        """Create the plans table if it does not already exist."""
        self.conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS plans (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                exercises TEXT NOT NULL DEFAULT '[]',
                is_circuit INTEGER NOT NULL DEFAULT 0,
                is_generated INTEGER NOT NULL DEFAULT 0,
                generation_timestamp REAL,
                pin_status TEXT NOT NULL DEFAULT '{}',
                sort_order INTEGER NOT NULL DEFAULT 0,
                created_at REAL NOT NULL,
                updated_at REAL NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_plans_sort_order ON plans(sort_order);
            """
        )
        self.conn.commit()

    def load_plans(self):
        """All plans, first in list first."""
        rows = self.conn.execute(
            "SELECT * FROM plans ORDER BY sort_order, created_at"
        ).fetchall()
        return [_row_to_plan(row) for row in rows]

    def get_plan(self, plan_id):
        row = self.conn.execute("SELECT * FROM plans WHERE id = ?", (plan_id,)).fetchone()
        return _row_to_plan(row) if row else None

    def create_plan(self, name, exercises, is_circuit=False, is_generated=False, pin_status=None):
        """
        Insert a new plan at the top of the list and return it.

        Existing plans shift down one position. Generated plans record their
        generation time and start with the given (usually empty) pin status.
        """
        error = validate_plan_name(name)
        if error:
            raise ValueError(error)

        now = time.time()
        plan = {
            "id": uuid.uuid4().hex,
            "name": name.strip(),
            "exercises": list(exercises or []),
            "is_circuit": bool(is_circuit),
            "is_generated": bool(is_generated),
            "generation_timestamp": now if is_generated else None,
            "pin_status": dict(pin_status or {}) if is_generated else {},
            "sort_order": 0,
            "created_at": now,
            "updated_at": now,
        }

        with self.transaction():
            self.conn.execute("UPDATE plans SET sort_order = sort_order + 1")
            self.conn.execute(
                """
                INSERT INTO plans (
                    id, name, exercises, is_circuit, is_generated,
                    generation_timestamp, pin_status, sort_order, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    plan["id"],
                    plan["name"],
                    json.dumps(plan["exercises"]),
                    int(plan["is_circuit"]),
                    int(plan["is_generated"]),
                    plan["generation_timestamp"],
                    json.dumps(plan["pin_status"]),
                    plan["sort_order"],
                    plan["created_at"],
                    plan["updated_at"],
                ),
            )
        logger.info("Created plan {} ({} exercises)", plan["name"], len(plan["exercises"]))
        return plan

    def save_plan(self, plan):
        """Persist changes to an existing plan and return the stored version."""
        error = validate_plan_name(plan.get("name"))
        if error:
            raise ValueError(error)

        with self.transaction():
            cursor = self.conn.execute(
                """
                UPDATE plans SET
                    name = ?,
                    exercises = ?,
                    is_circuit = ?,
                    is_generated = ?,
                    generation_timestamp = ?,
                    pin_status = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    plan["name"].strip(),
                    json.dumps(plan.get("exercises") or []),
                    int(bool(plan.get("is_circuit"))),
                    int(bool(plan.get("is_generated"))),
                    plan.get("generation_timestamp"),
                    json.dumps(plan.get("pin_status") or {}),
                    time.time(),
                    plan["id"],
                ),
            )
            if cursor.rowcount == 0:
                raise KeyError(f"Plan not found: {plan['id']}")
        logger.info("Saved plan {}", plan["id"])
        return self.get_plan(plan["id"])

    def delete_plan(self, plan_id):
        """Delete a plan and close the gap in sort order. Returns False if missing."""
        with self.transaction():
            row = self.conn.execute(
                "SELECT sort_order FROM plans WHERE id = ?", (plan_id,)
            ).fetchone()
            if row is None:
                return False
            self.conn.execute("DELETE FROM plans WHERE id = ?", (plan_id,))
            self.conn.execute(
                "UPDATE plans SET sort_order = sort_order - 1 WHERE sort_order > ?",
                (row["sort_order"],),
            )
        return True

    def reorder_plans(self, source_id, target_id):
        """
        Move `source_id` to the position of `target_id`.

        Returns False (and changes nothing) when either id is unknown or they
        are the same plan.
        """
        ordered = [plan["id"] for plan in self.load_plans()]
        if source_id == target_id or source_id not in ordered or target_id not in ordered:
            return False

        target_index = ordered.index(target_id)
        ordered.remove(source_id)
        ordered.insert(target_index, source_id)

        with self.transaction():
            for index, plan_id in enumerate(ordered):
                self.conn.execute(
                    "UPDATE plans SET sort_order = ? WHERE id = ?", (index, plan_id)
                )
        return True

    def clear_plans(self):
        with self.transaction():
            self.conn.execute("DELETE FROM plans")

    def count_summary(self):
        """Return high-level row counts for quick sanity checks."""
        total = self.conn.execute("SELECT COUNT(*) AS c FROM plans").fetchone()["c"]
        generated = self.conn.execute(
            "SELECT COUNT(*) AS c FROM plans WHERE is_generated = 1"
        ).fetchone()["c"]
        return {"plans": int(total), "generated_plans": int(generated)}
