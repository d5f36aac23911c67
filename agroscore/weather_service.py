"""
agroscore/weather_service.py
----------------------------
Weather Service — returns simulated weather samples (historical, current
and 3-hourly forecast) based on GPS coordinates.

In production this would call:
  - OpenWeatherMap current + 5 day / 3 hour forecast API
  - India Meteorological Department (IMD) API

For this implementation, deterministic dummy logic based on Maharashtra
coordinate ranges is used. The forecast is returned as raw sub-daily
samples; run it through weather_analyzer.group_forecast_by_day() before
analysis.

Usage:
    from agroscore.weather_service import get_weather_samples
    weather = get_weather_samples(19.99, 73.78)
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone


FORECAST_DAYS      = 5
HISTORY_DAYS       = 5
SAMPLES_PER_DAY    = 8      # 3-hourly
_DIURNAL_SWING_C   = (-4.0, -5.0, -2.0, 2.0, 4.0, 5.0, 2.0, -2.0)


def _climate_zone(lat: float, lng: float) -> dict:
    """Climate zone classification for Maharashtra coordinates."""
    if lat >= 20.0 and lng <= 74.5:
        # Nashik / Western Ghats foothills – moderate rainfall
        return {
            "zone":        "Western Ghats",
            "temperature": 25.5,
            "humidity":    65,
            "wind_speed":  3.2,
            "history":     ["scattered clouds", "light rain", "broken clouds",
                            "scattered clouds", "few clouds"],
            "forecast":    ["light rain", "scattered clouds", "clear sky",
                            "broken clouds", "overcast clouds"],
        }
    if lat >= 18.5 and lng >= 73.5:
        # Pune / Deccan plateau – semi-arid
        return {
            "zone":        "Deccan Plateau",
            "temperature": 27.0,
            "humidity":    55,
            "wind_speed":  4.1,
            "history":     ["clear sky", "few clouds", "clear sky",
                            "haze", "few clouds"],
            "forecast":    ["few clouds", "clear sky", "scattered clouds",
                            "haze", "broken clouds"],
        }
    if lat >= 17.5:
        # Solapur / Satara southern Deccan – arid, hot
        return {
            "zone":        "Southern Deccan",
            "temperature": 31.0,
            "humidity":    40,
            "wind_speed":  5.0,
            "history":     ["clear sky", "clear sky", "sunny",
                            "clear sky", "haze"],
            "forecast":    ["clear sky", "sunny", "clear sky",
                            "hot and dry", "clear sky"],
        }
    # Konkan coastal / default – high rainfall
    return {
        "zone":        "Konkan Coast",
        "temperature": 27.0,
        "humidity":    82,
        "wind_speed":  6.3,
        "history":     ["moderate rain", "light rain", "overcast clouds",
                        "moderate rain", "light rain"],
        "forecast":    ["moderate rain", "heavy intensity rain", "thunderstorm",
                        "light rain", "moderate rain"],
    }


def get_weather_samples(latitude: float, longitude: float,
                        today: date | None = None) -> dict:
    """
    Return simulated weather samples for the given GPS coordinate.

    Args:
        latitude  (float):     Decimal-degree latitude.
        longitude (float):     Decimal-degree longitude.
        today     (date|None): Reference day (defaults to today, UTC).

    Returns:
        dict with keys:
            zone       (str)        – climate zone name
            historical (list[dict]) – one WeatherSample per past day, oldest first
            current    (dict)       – WeatherSample for today
            forecast   (list[dict]) – 3-hourly samples with 'timestamp'
    """
    lat = float(latitude)
    lng = float(longitude)
    if today is None:
        today = datetime.now(timezone.utc).date()

    zone = _climate_zone(lat, lng)

    # Small deterministic variation from the longitude fraction (±1 °C)
    tweak = (lng % 1.0) * 2.0 - 1.0
    base  = zone["temperature"] + tweak

    historical = []
    for i in range(HISTORY_DAYS, 0, -1):
        historical.append({
            "date":        (today - timedelta(days=i)).isoformat(),
            "temperature": round(base - 1.0 + (i % 3) * 0.5, 1),
            "humidity":    min(100, zone["humidity"] + (i % 2) * 4),
            "wind_speed":  zone["wind_speed"],
            "conditions":  zone["history"][HISTORY_DAYS - i],
        })

    current = {
        "date":        today.isoformat(),
        "temperature": round(base, 1),
        "humidity":    zone["humidity"],
        "wind_speed":  zone["wind_speed"],
        "conditions":  zone["history"][-1],
    }

    forecast = []
    for day in range(1, FORECAST_DAYS + 1):
        midnight = datetime.combine(today + timedelta(days=day), time(0, 0),
                                    tzinfo=timezone.utc)
        for slot in range(SAMPLES_PER_DAY):
            moment = midnight + timedelta(hours=3 * slot)
            forecast.append({
                "timestamp":   int(moment.timestamp()),
                "temperature": round(base + _DIURNAL_SWING_C[slot] + day * 0.2, 1),
                "humidity":    max(0, min(100, zone["humidity"] - _DIURNAL_SWING_C[slot] * 2)),
                "wind_speed":  round(zone["wind_speed"] + slot * 0.1, 1),
                "conditions":  zone["forecast"][day - 1],
            })

    return {
        "zone":       zone["zone"],
        "historical": historical,
        "current":    current,
        "forecast":   forecast,
    }
