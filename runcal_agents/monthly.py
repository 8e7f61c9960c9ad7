import calendar
import logging
from datetime import datetime, tzinfo
from typing import Any, Dict, Iterable, Mapping, Optional

from runcal_agents.bmr import estimate_bmr, resolve_activity_factor
from runcal_agents.normalizer import localize, now_in, round_half_away, to_datetime, to_number

logger = logging.getLogger(__name__)

# energy content of one kilogram of body mass
KCAL_PER_KG = 7500


def monthly_running_total(
    records: Iterable[Mapping[str, Any]],
    year: int,
    month: int,
    tz: Optional[tzinfo] = None,
) -> float:
    total = 0.0
    for rec in records or []:
        dt = to_datetime(rec.get("date"))
        if dt is None:
            logger.debug("skipping record without a readable date: %r", rec.get("date"))
            continue
        dt = localize(dt, tz)
        if dt.year == year and dt.month == month:
            total += to_number(rec.get("calories_kcal"))
    return total


def classify_goal(goal_kg: float) -> str:
    if goal_kg < 0:
        return "deficit"
    if goal_kg > 0:
        return "surplus"
    return "maintain"


def compute_monthly_summary(
    records: Iterable[Mapping[str, Any]],
    settings: Mapping[str, Any],
    reference_date: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> Dict[str, Any]:
    """Month-to-date energy balance and goal progress.

    Everything is recomputed from `records` and `settings` on each call.
    """
    ref = localize(reference_date if isinstance(reference_date, datetime) else now_in(tz), tz)
    year, month = ref.year, ref.month
    days_in_month = calendar.monthrange(year, month)[1]
    days_elapsed = min(ref.day, days_in_month)

    bmr_per_day = estimate_bmr(settings.get("gender"), settings.get("age"))
    activity_factor = resolve_activity_factor(settings.get("activity_level"))
    energy_per_day = round_half_away(bmr_per_day * activity_factor)
    energy_total = round_half_away(energy_per_day * days_elapsed)
    bmr_total = round_half_away(bmr_per_day * days_elapsed)

    running_total = round_half_away(monthly_running_total(records, year, month, tz))
    total_burn = energy_total + running_total
    target_intake_total = round_half_away(to_number(settings.get("daily_target_kcal")) * days_elapsed)
    deficit = total_burn - target_intake_total

    goal_kg = to_number(settings.get("monthly_goal_kg"))
    goal_type = classify_goal(goal_kg)
    target_amount = round_half_away(abs(goal_kg) * KCAL_PER_KG)
    progress_amount = min(running_total, target_amount)

    if goal_type == "deficit":
        target_total_burn = target_intake_total + target_amount
    elif goal_type == "surplus":
        target_total_burn = max(target_intake_total - target_amount, 0)
    else:
        target_total_burn = target_intake_total
    remaining = max(target_amount - running_total, 0)

    return {
        "month_key": f"{year:04d}-{month:02d}",
        "days_in_month": days_in_month,
        "days_elapsed": days_elapsed,
        "activity_level": settings.get("activity_level"),
        "activity_factor": activity_factor,
        "bmr_per_day": bmr_per_day,
        "bmr_total": bmr_total,
        "energy_per_day": energy_per_day,
        "energy_total": energy_total,
        "running_total": running_total,
        "total_burn": total_burn,
        "target_total_burn": target_total_burn,
        "target_intake_total": target_intake_total,
        "deficit": deficit,
        "goal_kg": goal_kg,
        "goal_type": goal_type,
        "target_amount": target_amount,
        "progress_amount": progress_amount,
        "remaining": remaining,
    }


class MonthlySummaryAgent:
    name = "monthly"

    def run(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        summary = compute_monthly_summary(
            payload.get("records", []),
            payload["settings"],
            payload.get("reference_date"),
            payload.get("tz"),
        )
        return {"status": "ok", "monthly_summary": summary}
