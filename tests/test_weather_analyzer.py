from datetime import datetime, timezone

import pytest

from agroscore.weather_analyzer import (
    analyze_weather,
    count_condition_days,
    group_forecast_by_day,
    most_frequent_condition,
    risk_level,
    temperature_summary,
    weather_quality_score,
)


def _epoch(day, hour):
    return int(datetime(2026, 10, day, hour, tzinfo=timezone.utc).timestamp())


def test_heavy_rain_needs_more_than_three_days(make_day):
    forecast = [make_day("light rain") for _ in range(4)]
    analysis = analyze_weather([], None, forecast)

    assert analysis["rainfall_status"].startswith("Heavy rainfall")
    assert analysis["drought_risk"] == ""
    assert weather_quality_score(analysis) == 15


def test_three_rain_days_and_a_clear_day_are_mixed(make_day):
    forecast = [make_day("rain")] * 3 + [make_day("clear sky")]
    analysis = analyze_weather([], None, forecast)
    assert analysis["rainfall_status"] == "Mixed conditions - Moderate risk"


def test_drought_needs_more_than_five_days(make_day):
    forecast = [make_day("clear sky") for _ in range(6)]
    analysis = analyze_weather([], None, forecast)

    assert analysis["drought_risk"] == "High - Consider irrigation systems"
    assert weather_quality_score(analysis) == 10


def test_five_dry_days_are_favorable(make_day):
    forecast = [make_day("sunny") for _ in range(5)]
    analysis = analyze_weather([], None, forecast)
    assert analysis["rainfall_status"] == "Favorable conditions expected"


def test_heavy_rain_wins_over_drought(make_day):
    forecast = [make_day("rain")] * 4 + [make_day("clear")] * 6
    analysis = analyze_weather([], None, forecast)
    assert analysis["rainfall_status"].startswith("Heavy rainfall")


def test_mixed_conditions_score(make_day):
    analysis = analyze_weather([], None, [make_day("light rain"), make_day("sunny")])

    assert analysis["crop_impact"].startswith("Moderate")
    assert weather_quality_score(analysis) == 55


def test_favorable_conditions_score_100(make_day):
    analysis = analyze_weather([], None, [make_day("overcast clouds")])

    assert analysis["financial_risk"] == "Low - Expected normal loan repayment"
    assert weather_quality_score(analysis) == 100


def test_keywords_are_case_insensitive(make_day):
    assert count_condition_days([make_day("THUNDERSTORM"), make_day("Hot")]) == (1, 1)


def test_empty_forecast_is_favorable():
    assert analyze_weather([], None, [])["rainfall_status"] == "Favorable conditions expected"


def test_temperature_extremes_add_measures(make_day):
    historical = [make_day("clear", temperature=36.5)]
    current    = make_day("clear", temperature=8.0)
    analysis   = analyze_weather(historical, current, [make_day("haze")])
    measures   = analysis["preventive_measures"]

    assert "Consider heat-tolerant crop varieties" in measures
    assert "Protect crops from cold damage" in measures


def test_measures_are_not_shared_between_calls(make_day):
    first = analyze_weather([make_day("x", temperature=40)], None, [])
    second = analyze_weather([], None, [])
    assert len(first["preventive_measures"]) == len(second["preventive_measures"]) + 1


def test_temperature_summary(make_day):
    summary = temperature_summary(
        [make_day("a", temperature=20.0)],
        make_day("b", temperature=30.0),
        [make_day("c", temperature=25.0)],
    )
    assert summary == {"avg": pytest.approx(25.0), "min": 20.0, "max": 30.0}
    assert temperature_summary([], None, []) == {"avg": None, "min": None, "max": None}


def test_risk_level_takes_leading_word():
    assert risk_level("High - Risk of loan default due to crop failure") == "High"
    assert risk_level("Low") == "Low"
    assert risk_level("") == ""


def test_weather_score_is_clamped():
    analysis = {
        "rainfall_status": "Drought conditions expected",
        "financial_risk": "High - x",
        "crop_impact": "Severe - y",
    }
    assert 0 <= weather_quality_score(analysis) <= 100


def test_most_frequent_condition_tie_goes_to_last_seen():
    assert most_frequent_condition(["a", "b"]) == "b"
    assert most_frequent_condition(["b", "a", "a", "b"]) == "b"
    assert most_frequent_condition(["a", "a", "b"]) == "a"
    assert most_frequent_condition([]) is None


def test_group_forecast_by_day():
    samples = [
        {"timestamp": _epoch(20, 0), "temperature": 20.0, "humidity": 60,
         "wind_speed": 3.0, "conditions": "clear sky"},
        {"timestamp": _epoch(20, 12), "temperature": 30.0, "humidity": 61,
         "wind_speed": 3.2, "conditions": "light rain"},
        {"timestamp": _epoch(20, 21), "temperature": 25.0, "humidity": 60.5,
         "wind_speed": 3.1, "conditions": "light rain"},
        {"timestamp": _epoch(21, 3), "temperature": 18.0, "humidity": 70,
         "wind_speed": 2.0, "conditions": "haze"},
    ]
    daily = group_forecast_by_day(samples)

    assert [d["date"] for d in daily] == ["2026-10-20", "2026-10-21"]
    first = daily[0]
    assert first["temperature"] == pytest.approx(25.0)
    assert first["humidity"] == 61
    assert first["wind_speed"] == pytest.approx(3.1)
    assert first["conditions"] == "light rain"
    assert daily[1]["conditions"] == "haze"


def test_group_forecast_accepts_date_strings():
    samples = [
        {"date": "2026-10-22T03:00:00", "temperature": 22, "conditions": "rain"},
        {"date": "2026-10-22T06:00:00", "temperature": 24, "conditions": "rain"},
    ]
    daily = group_forecast_by_day(samples)
    assert len(daily) == 1
    assert daily[0]["date"] == "2026-10-22"
    assert daily[0]["humidity"] == 0


def test_group_forecast_without_day_raises():
    with pytest.raises(ValueError):
        group_forecast_by_day([{"temperature": 20}])
