"""
agroscore/weather_analyzer.py
-----------------------------
Weather Risk Analyzer — classifies historical, current and forecast weather
into a rainfall/drought risk bucket and a 0–100 weather quality score.

Forecast days are classified by substring match of their lower-cased
condition text:
    heavy-rain keywords  rain, heavy rain, storm, thunderstorm, torrential
    drought keywords     clear, sunny, hot, dry

Bucket decision (first match wins):
    heavy-rain days > 3                    →  Heavy rainfall
    drought days    > 5                    →  Drought
    heavy-rain > 0 and drought > 0         →  Mixed conditions
    otherwise                              →  Favorable

Weather quality score (deductions stack, result clamped to 0–100):
    rainfall status   Heavy rainfall −30 | Drought −35 | Mixed conditions −15
    financial risk    High −25 | Moderate −15
    crop impact       Severe −30 | Moderate −15

Usage:
    from agroscore.weather_analyzer import analyze_weather, weather_quality_score
    analysis = analyze_weather(historical, current, daily_forecast)
    score    = weather_quality_score(analysis)
"""

from __future__ import annotations

import math
from collections import Counter
from datetime import date, datetime, timezone

import numpy as np


HEAVY_RAIN_KEYWORDS: tuple[str, ...] = (
    "rain", "heavy rain", "storm", "thunderstorm", "torrential",
)
DROUGHT_KEYWORDS: tuple[str, ...] = ("clear", "sunny", "hot", "dry")

HEAT_STRESS_C = 35.0
COLD_STRESS_C = 10.0

# ── Risk buckets ─────────────────────────────────────────────────────────────
_BUCKETS: dict[str, dict] = {
    "heavy_rain": {
        "rainfall_status": "Heavy rainfall expected - Risk of crop damage",
        "drought_risk":    "",
        "crop_impact":     "Severe - Potential for crop damage and yield loss",
        "financial_risk":  "High - Risk of loan default due to crop damage",
        "preventive_measures": [
            "Install proper drainage systems",
            "Consider rain-resistant crop varieties",
            "Purchase crop insurance if available",
            "Prepare emergency funds for recovery",
        ],
    },
    "drought": {
        "rainfall_status": "Drought conditions expected - Insufficient rainfall",
        "drought_risk":    "High - Consider irrigation systems",
        "crop_impact":     "Severe - Risk of crop failure",
        "financial_risk":  "High - Risk of loan default due to crop failure",
        "preventive_measures": [
            "Implement efficient irrigation systems",
            "Consider drought-resistant crop varieties",
            "Store water in reservoirs if possible",
            "Plan for alternative income sources",
        ],
    },
    "mixed": {
        "rainfall_status": "Mixed conditions - Moderate risk",
        "drought_risk":    "Moderate - Monitor water availability",
        "crop_impact":     "Moderate - Some risk of yield reduction",
        "financial_risk":  "Moderate - Plan for potential yield variations",
        "preventive_measures": [
            "Monitor weather forecasts daily",
            "Prepare for both wet and dry conditions",
            "Maintain flexible irrigation systems",
            "Consider crop diversification",
        ],
    },
    "favorable": {
        "rainfall_status": "Favorable conditions expected",
        "drought_risk":    "Low",
        "crop_impact":     "Minimal - Expected good yields",
        "financial_risk":  "Low - Expected normal loan repayment",
        "preventive_measures": [
            "Regular crop monitoring",
            "Maintain standard farming practices",
            "Keep emergency funds for unexpected issues",
        ],
    },
}


# ─────────────────────────────────────────────────────────────────────────────
# Forecast preprocessing
# ─────────────────────────────────────────────────────────────────────────────

def most_frequent_condition(conditions: list[str]) -> str | None:
    """
    Return the most frequent condition text.

    Ties go to the tied value whose occurrence appears last in the input:
    arbitrary but deterministic.
    """
    if not conditions:
        return None
    counts = Counter(conditions)
    best, best_count = None, 0
    for condition in conditions:
        if counts[condition] >= best_count:
            best, best_count = condition, counts[condition]
    return best


def _day_key(sample: dict) -> str:
    """Calendar day (ISO, UTC for epoch timestamps) a sample belongs to."""
    if sample.get("timestamp") is not None:
        moment = datetime.fromtimestamp(float(sample["timestamp"]), tz=timezone.utc)
        return moment.date().isoformat()

    raw = sample.get("date")
    if isinstance(raw, datetime):
        return raw.date().isoformat()
    if isinstance(raw, date):
        return raw.isoformat()
    if isinstance(raw, str) and raw:
        return raw[:10]
    raise ValueError("forecast sample needs a 'timestamp' or 'date'")


def group_forecast_by_day(samples: list[dict]) -> list[dict]:
    """
    Collapse sub-daily forecast samples (e.g. 3-hourly) into daily samples.

    Per day: mean temperature, mean humidity rounded to an int, mean wind
    speed to one decimal, and the most frequent condition. Days keep the
    order in which they first appear.

    Args:
        samples (list[dict]): each with 'timestamp' (epoch s) or 'date',
                              plus temperature, humidity, wind_speed,
                              conditions.

    Returns:
        list[dict]: WeatherSample dicts, one per day.
    """
    days: dict[str, dict[str, list]] = {}
    for sample in samples:
        bucket = days.setdefault(_day_key(sample), {
            "temperature": [], "humidity": [], "wind_speed": [], "conditions": [],
        })
        bucket["temperature"].append(float(sample["temperature"]))
        bucket["humidity"].append(float(sample.get("humidity") or 0))
        bucket["wind_speed"].append(float(sample.get("wind_speed") or 0))
        bucket["conditions"].append(str(sample.get("conditions") or ""))

    daily = []
    for day, data in days.items():
        daily.append({
            "date":        day,
            "temperature": float(np.mean(data["temperature"])),
            "humidity":    int(math.floor(np.mean(data["humidity"]) + 0.5)),
            "wind_speed":  round(float(np.mean(data["wind_speed"])), 1),
            "conditions":  most_frequent_condition(data["conditions"]),
        })
    return daily


# ─────────────────────────────────────────────────────────────────────────────
# Risk analysis
# ─────────────────────────────────────────────────────────────────────────────

def _all_temperatures(historical: list[dict], current: dict | None,
                      forecast: list[dict]) -> list[float]:
    temps = [float(s["temperature"]) for s in historical]
    if current is not None:
        temps.append(float(current["temperature"]))
    temps.extend(float(s["temperature"]) for s in forecast)
    return temps


def temperature_summary(historical: list[dict], current: dict | None,
                        forecast: list[dict]) -> dict:
    """
    Average / minimum / maximum temperature over every sample.

    The average is reported for display only; no risk rule depends on it.
    """
    temps = np.array(_all_temperatures(historical, current, forecast), dtype=float)
    if temps.size == 0:
        return {"avg": None, "min": None, "max": None}
    return {
        "avg": float(temps.mean()),
        "min": float(temps.min()),
        "max": float(temps.max()),
    }


def count_condition_days(forecast: list[dict]) -> tuple[int, int]:
    """Return (heavy_rain_days, drought_days) for the daily forecast."""
    conditions = [str(day.get("conditions") or "").lower() for day in forecast]
    heavy_rain_days = sum(
        1 for c in conditions if any(k in c for k in HEAVY_RAIN_KEYWORDS)
    )
    drought_days = sum(
        1 for c in conditions if any(k in c for k in DROUGHT_KEYWORDS)
    )
    return heavy_rain_days, drought_days


def analyze_weather(historical: list[dict], current: dict | None,
                    forecast: list[dict]) -> dict:
    """
    Classify the weather outlook into a risk bucket.

    Args:
        historical (list[dict]): past daily WeatherSamples (~5 days).
        current    (dict|None):  the current WeatherSample.
        forecast   (list[dict]): daily forecast WeatherSamples
                                 (see group_forecast_by_day).

    Returns:
        dict with keys:
            rainfall_status, drought_risk, crop_impact, financial_risk (str)
            preventive_measures (list[str])
    """
    heavy_rain_days, drought_days = count_condition_days(forecast)

    if heavy_rain_days > 3:
        bucket = _BUCKETS["heavy_rain"]
    elif drought_days > 5:
        bucket = _BUCKETS["drought"]
    elif heavy_rain_days > 0 and drought_days > 0:
        bucket = _BUCKETS["mixed"]
    else:
        bucket = _BUCKETS["favorable"]

    analysis = {
        "rainfall_status":     bucket["rainfall_status"],
        "drought_risk":        bucket["drought_risk"],
        "crop_impact":         bucket["crop_impact"],
        "financial_risk":      bucket["financial_risk"],
        "preventive_measures": list(bucket["preventive_measures"]),
    }

    temps = temperature_summary(historical, current, forecast)
    if temps["max"] is not None and temps["max"] > HEAT_STRESS_C:
        analysis["preventive_measures"].append("Consider heat-tolerant crop varieties")
    if temps["min"] is not None and temps["min"] < COLD_STRESS_C:
        analysis["preventive_measures"].append("Protect crops from cold damage")

    return analysis


def risk_level(label: str) -> str:
    """Leading level of a risk text, e.g. 'High - Risk of …' → 'High'."""
    return label.split(" - ", 1)[0].strip()


def weather_quality_score(analysis: dict) -> int:
    """
    Convert a weather analysis into a 0–100 score.

    The three deduction groups are independent and stack, so a drought
    outlook (−35) that is also High financial risk (−25) and Severe crop
    impact (−30) scores 10.
    """
    score = 100

    rainfall = analysis.get("rainfall_status", "")
    if "Heavy rainfall" in rainfall:
        score -= 30
    elif "Drought" in rainfall:
        score -= 35
    elif "Mixed conditions" in rainfall:
        score -= 15

    financial = risk_level(analysis.get("financial_risk", ""))
    if financial == "High":
        score -= 25
    elif financial == "Moderate":
        score -= 15

    impact = analysis.get("crop_impact", "")
    if "Severe" in impact:
        score -= 30
    elif "Moderate" in impact:
        score -= 15

    return max(0, min(100, score))
