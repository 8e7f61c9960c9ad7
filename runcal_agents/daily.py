import logging
from datetime import tzinfo
from typing import Any, Dict, Iterable, Mapping, Optional

from runcal_agents.normalizer import date_key, round_half_away, to_number

logger = logging.getLogger(__name__)


def compute_daily_summary(
    records: Iterable[Mapping[str, Any]],
    day: str,
    tz: Optional[tzinfo] = None,
) -> Dict[str, Any]:
    total = 0.0
    count = 0
    for rec in records or []:
        key = date_key(rec.get("date"), tz)
        if key is None:
            logger.debug("skipping record without a readable date: %r", rec.get("date"))
            continue
        if key == day:
            total += to_number(rec.get("calories_kcal"))
            count += 1
    return {"date": day, "total_calories": round_half_away(total), "count": count}


class DailySummaryAgent:
    name = "daily"

    def run(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        summary = compute_daily_summary(payload.get("records", []), payload["date_key"], payload.get("tz"))
        return {"status": "ok", "summary": summary}
