from typing import Any, Dict

from runcal_agents.met import resolve_met
from runcal_agents.normalizer import round_half_away

# kcal per kg per km at an unknown, moderate pace
FLAT_COST_KCAL_PER_KG_KM = 1.036


def estimate_calories(distance_km: float, duration_min: float, weight_kg: float) -> float:
    """Estimated kcal for one run; 0 when distance or weight is missing."""
    if not distance_km or not weight_kg:
        return 0

    if duration_min and duration_min > 0:
        hours = duration_min / 60
        met = resolve_met(distance_km / hours)
        return met * weight_kg * hours

    return FLAT_COST_KCAL_PER_KG_KM * weight_kg * distance_km


class EstimatorAgent:
    name = "estimator"

    def run(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        run = payload["normalized_run"]
        kcal = estimate_calories(run["distance_km"], run["duration_min"], run["weight_kg"])
        return {"status": "ok", "calories": round_half_away(kcal)}
