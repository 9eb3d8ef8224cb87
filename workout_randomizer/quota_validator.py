"""
Validation utilities for generation requests, plans and quota templates.
"""

from loguru import logger


MAX_QUOTA_COUNT = 50
MAX_PLAN_NAME_LENGTH = 100
MAX_EXERCISE_NAME_LENGTH = 100
MAX_TEMPLATE_NAME_LENGTH = 50
MIN_SETS = 1
MAX_SETS = 20


def _is_positive_int(value, upper=None):
    # bool is an int subclass; True must not pass as a count of 1.
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    if value < 1:
        return False
    return upper is None or value <= upper


def _plural(count, word):
    return word if count == 1 else f"{word}s"


def _clean_tag(value):
    return value.strip() if isinstance(value, str) else ""


def normalize_quotas(quotas):
    """
    Strip labels; keep line order and counts as given.

    Lines that are not mappings, or whose tag is not text, come back with an
    empty tag so validation reports them instead of failing.
    """
    normalized = []
    for quota in quotas or []:
        if not isinstance(quota, dict):
            normalized.append({"tag": "", "count": None})
            continue
        normalized.append({"tag": _clean_tag(quota.get("tag")), "count": quota.get("count")})
    return normalized


def _quota_line_errors(quota, position, max_count):
    errors = []
    tag = _clean_tag(quota.get("tag")) if isinstance(quota, dict) else ""
    count = quota.get("count") if isinstance(quota, dict) else None

    if not tag:
        errors.append(f"Quota {position}: muscle group is required")
    if not _is_positive_int(count, upper=max_count):
        errors.append(
            f"Quota {position}: count must be a whole number between 1 and {max_count} (got {count!r})"
        )
    return errors


def validate_quotas(quotas, pool, max_count=MAX_QUOTA_COUNT):
    """
    Check a quota list against an exercise pool.

    Returns:
        dict with keys:
            valid: True when there are no errors (warnings never block)
            errors: problems that prevent generation
            warnings: shortfalls generation will work around
    """
    errors = []
    warnings = []

    if not quotas:
        errors.append("At least one quota is required")
        return {"valid": False, "errors": errors, "warnings": warnings}

    pool = pool or {}
    requested_tags = set()

    for position, quota in enumerate(quotas, start=1):
        line_errors = _quota_line_errors(quota, position, max_count)
        if line_errors:
            errors.extend(line_errors)
            continue

        tag = quota["tag"].strip()
        count = quota["count"]
        available = len(pool.get(tag) or [])

        if tag in requested_tags:
            warnings.append(
                f'"{tag}" is requested more than once; each line is drawn independently and may repeat exercises.'
            )
        requested_tags.add(tag)

        if available == 0:
            errors.append(
                f'No exercises exist for muscle group "{tag}". Add {tag} exercises to the library or a plan first.'
            )
            continue

        if available < count:
            warnings.append(
                f'Only {available} "{tag}" {_plural(available, "exercise")} available '
                f"(requested {count}). Will use what's available."
            )

    for warning in warnings:
        logger.warning("Quota warning: {}", warning)

    return {"valid": not errors, "errors": errors, "warnings": warnings}


def validate_plan_name(name):
    """Return an error message for an invalid plan name, None if valid."""
    if not name or not name.strip():
        return "Plan name is required"
    if len(name) > MAX_PLAN_NAME_LENGTH:
        return f"Plan name must be {MAX_PLAN_NAME_LENGTH} characters or less"
    return None


def _parse_sets(value):
    if isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def validate_exercise(exercise):
    """
    Validate one plan exercise.

    Returns:
        dict of field -> message; empty when valid. Weight and rest are free-form.
    """
    errors = {}
    name = (exercise.get("name") or "").strip()
    if not name:
        errors["name"] = "Exercise name is required"
    elif len(name) > MAX_EXERCISE_NAME_LENGTH:
        errors["name"] = f"Exercise name must be {MAX_EXERCISE_NAME_LENGTH} characters or less"

    sets = _parse_sets(exercise.get("sets"))
    if sets is None:
        errors["sets"] = "Sets must be a number"
    elif sets < MIN_SETS:
        errors["sets"] = f"Sets must be at least {MIN_SETS}"
    elif sets > MAX_SETS:
        errors["sets"] = f"Sets must be {MAX_SETS} or less"

    if not str(exercise.get("reps") or "").strip():
        errors["reps"] = "Reps is required"

    return errors


def validate_quota_template(template, max_count=MAX_QUOTA_COUNT):
    """Validate a quota template's name, quota lines and optional round count."""
    errors = []

    name = (template.get("name") or "").strip()
    if not name:
        errors.append("Template name is required")
    elif len(name) > MAX_TEMPLATE_NAME_LENGTH:
        errors.append(f"Template name must be {MAX_TEMPLATE_NAME_LENGTH} characters or less")

    quotas = template.get("quotas") or []
    if not quotas:
        errors.append("Template must have at least one quota")
    for position, quota in enumerate(quotas, start=1):
        errors.extend(_quota_line_errors(quota, position, max_count))

    round_count = template.get("round_count")
    if round_count is not None and not _is_positive_int(round_count):
        errors.append("Round count must be a positive whole number")

    return {"valid": not errors, "errors": errors}
