# api.py: HTTP surface for the running calorie tracker

import re
from datetime import datetime
from typing import Optional, Union

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from runcal_agents.estimator import estimate_calories
from runcal_agents.normalizer import date_key, now_in, round_half_away, to_number
from runcal_engine.config import DB_PATH, configure_logging, get_timezone
from runcal_engine.runner import CalorieRunner
from runcal_engine.store import open_store

configure_logging()

_ISO_DAY = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Dev-friendly docs ON; safe to disable in prod by setting openapi_url=None
app = FastAPI(
    title="Running Calorie Tracker API",
    docs_url="/docs",
    redoc_url=None,
    openapi_url="/openapi.json",
)

runner = CalorieRunner(open_store(DB_PATH), tz=get_timezone())

# form fields arrive as numbers or as the raw text typed in
Number = Optional[Union[float, str]]


class SettingsPayload(BaseModel):
    default_weight_kg: Number = Field(None, examples=[62])
    daily_target_kcal: Number = Field(None, examples=[2100])
    gender: Optional[str] = Field(None, examples=["female"])
    age: Number = Field(None, examples=[34])
    monthly_goal_kg: Number = Field(None, examples=[-1.5])
    activity_level: Optional[str] = Field(None, examples=["medium"])


class RunPayload(BaseModel):
    date: Optional[str] = Field(None, examples=["2025-09-08"])
    distance_km: Number = Field(None, examples=[8.2])
    duration_min: Number = Field(None, examples=[46])
    weight_kg: Number = Field(None, examples=[62])
    memo: Optional[str] = Field(None, examples=["river loop"])


class EstimatePayload(BaseModel):
    distance_km: Number = None
    duration_min: Number = None
    weight_kg: Number = None


def _parse_day(value: str) -> datetime:
    if not _ISO_DAY.match(value):
        raise HTTPException(status_code=400, detail=f"date must be YYYY-MM-DD, got {value!r}")
    try:
        day = datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise HTTPException(status_code=400, detail=f"not a calendar date: {value!r}")
    return day.replace(tzinfo=runner.tz)


@app.get("/")
def home():
    return {
        "name": "Running Calorie Tracker",
        "docs": "/docs",
        "app_data_endpoint": "/app-data",
        "example_endpoint": "/example",
        "healthcheck": "/health",
    }


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/example")
def example():
    # Ready-to-use payloads for /settings, /runs and /estimate
    return {
        "settings": {
            "default_weight_kg": 62,
            "daily_target_kcal": 2100,
            "gender": "female",
            "age": 34,
            "monthly_goal_kg": -1.5,
            "activity_level": "medium",
        },
        "run": {
            "date": "2025-09-08",
            "distance_km": 8.2,
            "duration_min": 46,
            "weight_kg": 62,
            "memo": "river loop",
        },
        "estimate": {"distance_km": 10, "duration_min": 60, "weight_kg": 70},
    }


@app.get("/app-data")
def app_data():
    return runner.get_app_data()


@app.post("/settings")
def save_settings(payload: SettingsPayload):
    return runner.save_settings(payload.model_dump())


@app.post("/runs")
def save_run(payload: RunPayload):
    return runner.save_run_record(payload.model_dump())


@app.get("/runs")
def list_runs():
    return {"records": runner.list_records()}


@app.get("/summary/daily")
def daily_summary(date: Optional[str] = None):
    day = _parse_day(date).strftime("%Y-%m-%d") if date else date_key(now_in(runner.tz), runner.tz)
    return runner.daily_summary(day)


@app.get("/summary/monthly")
def monthly_summary(date: Optional[str] = None):
    return runner.monthly_summary(_parse_day(date) if date else None)


@app.post("/estimate")
def estimate(payload: EstimatePayload):
    kcal = estimate_calories(
        to_number(payload.distance_km),
        to_number(payload.duration_min),
        to_number(payload.weight_kg),
    )
    return {"calories": kcal, "calories_rounded": round_half_away(kcal)}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
