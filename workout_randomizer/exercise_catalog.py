"""
Exercise library loading.

The library is a YAML file with an `exercises` list:

    exercises:
      - name: Bench Press
        muscle_groups: [Chest, Triceps]
        sets: 4
        reps: "8-10"
        equipment: [Barbell, Bench]
"""

import os

import yaml
from loguru import logger

from workout_randomizer.quota_validator import validate_exercise


DEFAULT_SETS = 3
DEFAULT_REPS = "10"


def _as_list(value):
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return [str(part).strip() for part in value if str(part).strip()]


def normalize_library_entry(entry):
    """Turn one library item into an exercise record with default workout parameters."""
    labels = (
        _as_list(entry.get("muscle_groups"))
        or _as_list(entry.get("tags"))
        or _as_list(entry.get("tag"))
    )
    record = {
        "name": str(entry.get("name") or "").strip(),
        "tags": labels,
        "sets": entry.get("sets", DEFAULT_SETS),
        "reps": str(entry.get("reps", DEFAULT_REPS)),
        "weight": entry.get("weight"),
        "rest": entry.get("rest"),
    }
    if entry.get("description"):
        record["description"] = str(entry["description"]).strip()
    equipment = _as_list(entry.get("equipment"))
    if equipment:
        record["equipment"] = equipment
    return record


def load_exercise_library(path):
    """
    Load exercise records from a YAML library file.

    Raises:
        FileNotFoundError: the file does not exist
        ValueError: the file is not valid YAML or has no exercise list

    Items that fail exercise validation are skipped with a warning.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Exercise library not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as err:
        raise ValueError(f"Exercise library is not valid YAML: {err}") from err

    entries = data.get("exercises") if isinstance(data, dict) else None
    if not isinstance(entries, list):
        raise ValueError(f"Exercise library {path} must contain an 'exercises' list")

    exercises = []
    for position, entry in enumerate(entries, start=1):
        if not isinstance(entry, dict):
            logger.warning("Skipping library item {} in {}: not a mapping", position, path)
            continue
        record = normalize_library_entry(entry)
        errors = validate_exercise(record)
        if errors:
            logger.warning(
                "Skipping library item {} ({}) in {}: {}",
                position,
                record["name"] or "unnamed",
                path,
                "; ".join(errors.values()),
            )
            continue
        exercises.append(record)

    logger.debug("Loaded {} exercises from {}", len(exercises), path)
    return exercises
