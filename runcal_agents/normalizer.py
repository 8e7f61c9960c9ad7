import logging
import math
import re
from datetime import date, datetime, tzinfo
from typing import Any, Dict, Optional

from dateutil.parser import parse as parse_date

logger = logging.getLogger(__name__)

_ISO_DAY = re.compile(r"^\d{4}-\d{2}-\d{2}$")

GENDER_TOKENS = {
    "male": "male", "m": "male", "男性": "male",
    "female": "female", "f": "female", "女性": "female",
}

ACTIVITY_TOKENS = {
    "low": "low", "medium": "medium", "high": "high",
    "低い": "low", "標準": "medium", "高い": "high",
}


def _parse_number(value: Any) -> float:
    """Loose numeric parse: blank strings and None are 0, garbage is NaN."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    s = str(value).strip()
    if not s:
        return 0.0
    try:
        return float(s)
    except ValueError:
        return math.nan


def to_number(value: Any) -> float:
    num = _parse_number(value)
    return 0.0 if math.isnan(num) else num


def coalesce_number(value: Any, fallback: float) -> float:
    """Like to_number, but unset or unusable values give `fallback`.

    A stored zero is a real setting and is kept as is.
    """
    if value is None or value == "":
        return fallback
    num = _parse_number(value)
    return num if math.isfinite(num) else fallback


def round_half_away(value: float) -> int:
    if not math.isfinite(value):
        logger.debug("non-finite value %r rounded to 0", value)
        return 0
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def normalize_gender(value: Any) -> str:
    s = str(value).strip().lower() if value else ""
    return GENDER_TOKENS.get(s, "")


def normalize_activity_level(value: Any) -> str:
    s = str(value).strip().lower() if value else ""
    return ACTIVITY_TOKENS.get(s, "medium")


def now_in(tz: Optional[tzinfo] = None) -> datetime:
    return datetime.now(tz) if tz is not None else datetime.now()


def normalize_date(value: Any, now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> datetime:
    """Coerce a raw date input to a datetime.

    Missing values and anything that cannot be parsed fall back to `now`.
    A bare YYYY-MM-DD is midnight in `tz` (naive when no zone is given);
    other strings go through dateutil and are read as wall-clock time in `tz`
    unless they carry their own offset.
    """
    fallback = now if now is not None else now_in(tz)
    if not value:
        return fallback
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=tz)
    s = str(value).strip()
    try:
        if _ISO_DAY.match(s):
            d = date.fromisoformat(s)
            return datetime(d.year, d.month, d.day, tzinfo=tz)
        parsed = parse_date(s)
    except (ValueError, OverflowError):
        logger.warning("Unparseable date %r, using %s instead", value, fallback.isoformat())
        return fallback
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=tz)


def to_datetime(value: Any) -> Optional[datetime]:
    """Read a stored date cell; None when it is empty or unreadable."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        return parse_date(str(value).strip())
    except (ValueError, OverflowError):
        return None


def localize(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    # naive datetimes are already wall-clock time in the configured zone
    if value.tzinfo is None:
        return value
    return value.astimezone(tz)


def date_key(value: Any, tz: Optional[tzinfo] = None) -> Optional[str]:
    dt = to_datetime(value)
    if dt is None:
        return None
    return localize(dt, tz).strftime("%Y-%m-%d")


class NormalizerAgent:
    name = "normalizer"

    def run(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        run = payload.get("run", {}) or {}
        now = payload.get("now")
        tz = payload.get("tz")

        memo = run.get("memo")
        normalized = {
            "date": normalize_date(run.get("date"), now=now, tz=tz),
            "distance_km": to_number(run.get("distance_km")),
            "duration_min": to_number(run.get("duration_min")),
            "weight_kg": to_number(run.get("weight_kg")),
            "memo": str(memo) if memo else "",
        }
        return {"status": "ok", "normalized_run": normalized}
