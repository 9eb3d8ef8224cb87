"""
SQLite persistence for reusable quota templates.
"""

import json
import os
import sqlite3
import time
import uuid

from loguru import logger

from workout_randomizer.quota_validator import normalize_quotas, validate_quota_template


class QuotaTemplateStore:
    """Saved (name, quotas, circuit flag, round count) records."""

    def __init__(self, db_path):
        self.db_path = db_path
        parent = os.path.dirname(db_path)
        if parent:
            os.makedirs(parent, exist_ok=True)

        self.conn = sqlite3.connect(db_path)
        self.conn.row_factory = sqlite3.Row

    def close(self):
        self.conn.close()

    def init_schema(self):
        self.conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS quota_templates (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                quotas TEXT NOT NULL,
                is_circuit INTEGER NOT NULL DEFAULT 0,
                round_count INTEGER,
                created_at REAL NOT NULL
            );
            """
        )
        self.conn.commit()

    @staticmethod
    def _row_to_template(row):
        return {
            "id": row["id"],
            "name": row["name"],
            "quotas": json.loads(row["quotas"]),
            "is_circuit": bool(row["is_circuit"]),
            "round_count": row["round_count"],
            "created_at": row["created_at"],
        }

    def load_templates(self):
        rows = self.conn.execute(
            "SELECT * FROM quota_templates ORDER BY created_at, rowid"
        ).fetchall()
        return [self._row_to_template(row) for row in rows]

    def get_template(self, template_id):
        row = self.conn.execute(
            "SELECT * FROM quota_templates WHERE id = ?", (template_id,)
        ).fetchone()
        return self._row_to_template(row) if row else None

    def find_by_name(self, name):
        """Most recently created template with this name (case-insensitive)."""
        row = self.conn.execute(
            """
            SELECT * FROM quota_templates
            WHERE lower(name) = lower(?)
            ORDER BY created_at DESC, rowid DESC
            LIMIT 1
            """,
            ((name or "").strip(),),
        ).fetchone()
        return self._row_to_template(row) if row else None

    def add_template(self, name, quotas, is_circuit=False, round_count=None):
        """
        Validate and store a template.

        Returns:
            {"success": True, "template": {...}} or
            {"success": False, "error": "invalid", "message": "..."}
        """
        quotas = normalize_quotas(quotas)
        validation = validate_quota_template(
            {"name": name, "quotas": quotas, "round_count": round_count}
        )
        if not validation["valid"]:
            return {
                "success": False,
                "error": "invalid",
                "message": "; ".join(validation["errors"]),
            }

        template = {
            "id": uuid.uuid4().hex,
            "name": name.strip(),
            "quotas": quotas,
            "is_circuit": bool(is_circuit),
            "round_count": round_count,
            "created_at": time.time(),
        }
        self.conn.execute(
            """
            INSERT INTO quota_templates (id, name, quotas, is_circuit, round_count, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                template["id"],
                template["name"],
                json.dumps(template["quotas"]),
                int(template["is_circuit"]),
                template["round_count"],
                template["created_at"],
            ),
        )
        self.conn.commit()
        logger.info("Saved quota template {}", template["name"])
        return {"success": True, "template": template}

    def delete_template(self, template_id):
        cursor = self.conn.execute(
            "DELETE FROM quota_templates WHERE id = ?", (template_id,)
        )
        self.conn.commit()
        if cursor.rowcount == 0:
            return {"success": False, "error": "not_found", "message": "Template not found"}
        return {"success": True}
