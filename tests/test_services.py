from datetime import date

import pytest

from agroscore.catalogs import DEPTHS
from agroscore.soil_service import (
    get_default_soil_data,
    get_soil_data_by_depth,
    get_soil_type,
)
from agroscore.weather_analyzer import (
    analyze_weather,
    group_forecast_by_day,
    weather_quality_score,
)
from agroscore.weather_service import get_weather_samples


TODAY = date(2026, 10, 19)


# ── Soil service ─────────────────────────────────────────────────────────────

@pytest.mark.parametrize("lat, soil_type", [
    (21.1, "Black Cotton"),
    (19.99, "Red Laterite"),
    (18.0, "Alluvial"),
    (16.0, "Sandy Loam"),
])
def test_soil_type_by_latitude(lat, soil_type):
    assert get_soil_type(lat) == soil_type


def test_soil_profile_covers_every_depth():
    soil = get_soil_data_by_depth(19.99, 73.78)

    assert list(soil) == list(DEPTHS)
    for values in soil.values():
        assert len(values) == 11
        assert values["sand"] + values["silt"] + values["clay"] == pytest.approx(100, abs=0.2)
        assert 4.5 <= values["ph"] <= 9.0


def test_organic_carbon_decreases_with_depth():
    soil = get_soil_data_by_depth(21.1, 79.0)
    carbon = [soil[depth]["organic_carbon"] for depth in DEPTHS]
    assert carbon == sorted(carbon, reverse=True)


def test_soil_profile_is_deterministic():
    assert get_soil_data_by_depth(18.2, 74.4) == get_soil_data_by_depth(18.2, 74.4)


def test_default_soil_data_is_uniform():
    soil = get_default_soil_data()
    assert set(soil) == set(DEPTHS)
    assert soil["0-5cm"] == soil["100-200cm"]
    soil["0-5cm"]["ph"] = 1.0
    assert soil["5-15cm"]["ph"] == 7.0


# ── Weather service ──────────────────────────────────────────────────────────

def test_weather_sample_shape():
    weather = get_weather_samples(19.99, 73.78, today=TODAY)

    assert len(weather["historical"]) == 5
    assert weather["historical"][0]["date"] == "2026-10-14"
    assert weather["historical"][-1]["date"] == "2026-10-18"
    assert weather["current"]["date"] == "2026-10-19"
    assert len(weather["forecast"]) == 40
    assert all("timestamp" in s for s in weather["forecast"])


def test_forecast_groups_into_five_following_days():
    weather = get_weather_samples(18.52, 73.85, today=TODAY)
    daily = group_forecast_by_day(weather["forecast"])

    assert [d["date"] for d in daily] == [
        "2026-10-20", "2026-10-21", "2026-10-22", "2026-10-23", "2026-10-24",
    ]


def _outlook(lat, lng):
    weather = get_weather_samples(lat, lng, today=TODAY)
    analysis = analyze_weather(weather["historical"], weather["current"],
                               group_forecast_by_day(weather["forecast"]))
    return weather["zone"], analysis


@pytest.mark.parametrize("lat, lng, zone, status", [
    (20.0, 73.78, "Western Ghats", "Mixed conditions - Moderate risk"),
    (18.52, 73.85, "Deccan Plateau", "Favorable conditions expected"),
    (17.8, 75.9, "Southern Deccan", "Favorable conditions expected"),
    (16.0, 73.3, "Konkan Coast", "Heavy rainfall expected - Risk of crop damage"),
])
def test_climate_zones(lat, lng, zone, status):
    got_zone, analysis = _outlook(lat, lng)
    assert got_zone == zone
    assert analysis["rainfall_status"] == status


def test_southern_deccan_heat_note():
    _, analysis = _outlook(17.8, 75.9)
    assert "Consider heat-tolerant crop varieties" in analysis["preventive_measures"]


def test_konkan_weather_score():
    _, analysis = _outlook(16.0, 73.3)
    assert weather_quality_score(analysis) == 15
