"""
Configuration loading: config.yaml plus environment overrides from .env.
"""

import copy
import os

import yaml
from dotenv import load_dotenv

from workout_randomizer.quota_validator import MAX_QUOTA_COUNT


DEFAULT_CONFIG = {
    "storage": {"db_path": "data/workout_plans.db"},
    "library": {"path": "data/exercise_library.yaml"},
    "generation": {"max_quota_count": MAX_QUOTA_COUNT},
}

ENV_OVERRIDES = [
    ("WORKOUT_DB_PATH", ("storage", "db_path"), str),
    ("EXERCISE_LIBRARY_PATH", ("library", "path"), str),
    ("MAX_QUOTA_COUNT", ("generation", "max_quota_count"), int),
]


def _merge(base, override):
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(config_path=None, env_file=None):
    """
    Load configuration from config.yaml, falling back to defaults.

    Environment variables (optionally read from a .env file) override the
    file: WORKOUT_DB_PATH, EXERCISE_LIBRARY_PATH, MAX_QUOTA_COUNT.
    """
    load_dotenv(env_file)
    config_path = config_path or os.path.join(os.getcwd(), "config.yaml")

    config = copy.deepcopy(DEFAULT_CONFIG)
    if os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            _merge(config, yaml.safe_load(f) or {})

    for env_name, (section, key), cast in ENV_OVERRIDES:
        raw = os.getenv(env_name)
        if raw is None or raw.strip() == "":
            continue
        try:
            config[section][key] = cast(raw.strip())
        except ValueError as err:
            raise ValueError(f"{env_name} has an invalid value: {raw!r}") from err

    return config
