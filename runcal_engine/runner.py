from datetime import datetime, tzinfo
from typing import Any, Dict, Optional

from runcal_agents.daily import DailySummaryAgent
from runcal_agents.estimator import EstimatorAgent
from runcal_agents.monthly import MonthlySummaryAgent
from runcal_agents.normalizer import NormalizerAgent, date_key, now_in
from runcal_agents.recorder import RecorderAgent
from runcal_agents.settings import SettingsAgent
from runcal_engine.store import CalorieStore


class CaloriePlanner:
    """Break an application flow into dependent subtasks."""
    def plan(self, flow: str, root_payload: Dict[str, Any]) -> Dict[str, Any]:
        if flow == "app_data":
            return {
                "settings": {"depends_on": [], "payload": {"updates": None}},
                "daily": {"depends_on": [], "payload": root_payload},
                "monthly": {"depends_on": ["settings"], "payload": root_payload},
            }
        if flow == "save_settings":
            return {
                "settings": {"depends_on": [], "payload": {"updates": root_payload.get("updates") or {}}},
                "monthly": {"depends_on": ["settings"], "payload": root_payload},
            }
        if flow == "save_run_record":
            return {
                "settings": {"depends_on": [], "payload": {"updates": None}},
                "normalize": {"depends_on": [], "payload": root_payload},
                "estimate": {"depends_on": ["normalize"]},
                "record": {"depends_on": ["normalize", "estimate"], "payload": root_payload},
                "daily": {"depends_on": ["record"], "payload": root_payload},
                "monthly": {"depends_on": ["settings", "record"], "payload": root_payload},
            }
        raise ValueError(f"Unknown flow: {flow}")


class CalorieRunner:
    """Runs the settings / run-record / summary flows against one store."""
    def __init__(self, store: CalorieStore, tz: Optional[tzinfo] = None):
        self.store = store
        self.tz = tz
        self.agents = {
            "settings": SettingsAgent(store),
            "normalize": NormalizerAgent(),
            "estimate": EstimatorAgent(),
            "record": RecorderAgent(store),
            "daily": DailySummaryAgent(),
            "monthly": MonthlySummaryAgent(),
        }
        self.planner = CaloriePlanner()

    def _execute(self, flow: str, root_payload: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
        plan = self.planner.plan(flow, root_payload)
        results: Dict[str, Dict[str, Any]] = {}
        pending = set(plan.keys())

        # dependency-aware execution; a sorted scan keeps the order stable
        while pending:
            progressed = False
            for name in sorted(pending):
                deps = plan[name]["depends_on"]
                if all(d in results for d in deps):
                    payload = dict(plan[name].get("payload", {}))
                    if name == "estimate":
                        payload = {"normalized_run": results["normalize"]["normalized_run"]}
                    elif name == "record":
                        payload = {
                            "normalized_run": results["normalize"]["normalized_run"],
                            "calories": results["estimate"]["calories"],
                            "recorded_at": root_payload["now"],
                        }
                    elif name == "daily":
                        payload["records"] = self.store.list_records()
                        if "record" in results:
                            # keyed by the saved run's own date
                            payload["date_key"] = date_key(results["record"]["record"]["date"], self.tz)
                    elif name == "monthly":
                        payload = {
                            "records": self.store.list_records(),
                            "settings": results["settings"]["settings"],
                            "reference_date": root_payload["now"],
                            "tz": self.tz,
                        }
                    out = self.agents[name].run(payload)
                    results[name] = out
                    pending.remove(name)
                    progressed = True
            if not progressed:
                raise RuntimeError("Dependency deadlock in plan")
        return results

    def _now(self, now: Optional[datetime]) -> datetime:
        return now if now is not None else now_in(self.tz)

    def get_app_data(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = self._now(now)
        today = date_key(now, self.tz)
        results = self._execute("app_data", {"now": now, "date_key": today, "tz": self.tz})
        return {
            "settings": results["settings"]["settings"],
            "today": today,
            "today_summary": results["daily"]["summary"],
            "monthly_summary": results["monthly"]["monthly_summary"],
        }

    def save_settings(self, updates: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
        now = self._now(now)
        results = self._execute("save_settings", {"now": now, "updates": updates, "tz": self.tz})
        return {
            "settings": results["settings"]["settings"],
            "monthly_summary": results["monthly"]["monthly_summary"],
        }

    def save_run_record(self, run: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
        now = self._now(now)
        results = self._execute("save_run_record", {"run": run, "now": now, "tz": self.tz})
        return {
            "calories": results["estimate"]["calories"],
            "summary": results["daily"]["summary"],
            "monthly_summary": results["monthly"]["monthly_summary"],
        }

    def daily_summary(self, day: str) -> Dict[str, Any]:
        return self.agents["daily"].run({"records": self.store.list_records(), "date_key": day, "tz": self.tz})["summary"]

    def monthly_summary(self, reference_date: Optional[datetime] = None) -> Dict[str, Any]:
        settings = self.agents["settings"].run({"updates": None})["settings"]
        return self.agents["monthly"].run({
            "records": self.store.list_records(),
            "settings": settings,
            "reference_date": self._now(reference_date),
            "tz": self.tz,
        })["monthly_summary"]

    def list_records(self):
        return self.store.list_records()
