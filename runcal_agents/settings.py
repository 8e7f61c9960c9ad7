import logging
from typing import Any, Dict, Mapping

from runcal_agents.normalizer import (
    coalesce_number,
    normalize_activity_level,
    normalize_gender,
    to_number,
)

logger = logging.getLogger(__name__)

# also the storage keys
DEFAULT_SETTINGS = {
    "default_weight_kg": 60,
    "daily_target_kcal": 2000,
    "gender": "male",
    "age": 30,
    "monthly_goal_kg": -1,
    "activity_level": "medium",
}

NUMERIC_FIELDS = ("default_weight_kg", "daily_target_kcal", "age", "monthly_goal_kg")


def resolve_settings(stored: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge the stored key/value map with defaults. Never leaves a field unset."""
    stored = stored or {}
    out: Dict[str, Any] = {}
    for field in NUMERIC_FIELDS:
        out[field] = coalesce_number(stored.get(field), DEFAULT_SETTINGS[field])

    gender = stored.get("gender")
    out["gender"] = normalize_gender(gender) if gender else DEFAULT_SETTINGS["gender"]
    out["activity_level"] = normalize_activity_level(
        stored.get("activity_level") or DEFAULT_SETTINGS["activity_level"]
    )
    return out


def coerce_settings_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Coerce a submitted settings form; blanks become 0, enums are normalized."""
    payload = payload or {}
    out = {field: to_number(payload.get(field)) for field in NUMERIC_FIELDS}
    out["gender"] = normalize_gender(payload.get("gender"))
    out["activity_level"] = normalize_activity_level(payload.get("activity_level"))
    return out


class SettingsAgent:
    """Seeds missing keys, applies submitted updates and reads settings back."""
    name = "settings"

    def __init__(self, store):
        self.store = store

    def run(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        updates = payload.get("updates")
        if updates is None:
            values = resolve_settings(self.store.read_settings())
        else:
            values = coerce_settings_payload(updates)
            logger.info("Saving settings: %s", values)

        for field in DEFAULT_SETTINGS:
            self.store.write_setting(field, values[field])

        return {"status": "ok", "settings": resolve_settings(self.store.read_settings())}
