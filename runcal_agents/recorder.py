import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)


class RecorderAgent:
    """Appends a normalized run with its frozen calorie figure."""
    name = "recorder"

    def __init__(self, store):
        self.store = store

    def run(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        run = payload["normalized_run"]
        calories = payload["calories"]

        # zero readings are stored blank
        record = {
            "date": run["date"],
            "distance_km": run["distance_km"] or None,
            "duration_min": run["duration_min"] or None,
            "weight_kg": run["weight_kg"] or None,
            "calories_kcal": calories or None,
            "memo": run["memo"],
            "recorded_at": payload["recorded_at"],
        }
        self.store.append_record(record)
        logger.info("Recorded run on %s: %s km, %s kcal", run["date"].date(), run["distance_km"], calories)
        return {"status": "ok", "record": record}
