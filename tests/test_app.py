import pytest

import app as api
from agroscore.soil_service import get_default_soil_data


def _rain_samples(days=4):
    return [
        {"date": f"2026-10-2{i}T{hour:02d}:00:00", "temperature": 24.0,
         "humidity": 80, "wind_speed": 5.0, "conditions": "moderate rain"}
        for i in range(days) for hour in (0, 12)
    ]


# ── Health / routing ─────────────────────────────────────────────────────────

def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "running"


def test_unknown_route_is_json_404(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "Route not found"


def test_wrong_method_is_405(client):
    assert client.get("/credit/aggregate").status_code == 405


def test_non_json_body_is_415(client):
    resp = client.post("/soil/score", data="ph=5", content_type="text/plain")
    assert resp.status_code == 415


# ── Soil ─────────────────────────────────────────────────────────────────────

def test_soil_score_with_custom_catalog(client, ph_only_ideals):
    resp = client.post("/soil/score", json={"measured": {"ph": 5.0},
                                            "ideals": ph_only_ideals})
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["overall_score"] == pytest.approx(80)
    assert body["property_scores"]["ph"]["interpretation"].startswith("Moderately acidic")


def test_soil_score_with_climate_catalog(client):
    resp = client.post("/soil/score", json={"measured": {"ph": 5.6}, "avgTemp": 30})
    assert resp.get_json()["overall_score"] == 100


def test_soil_score_nothing_scorable_is_422(client):
    resp = client.post("/soil/score", json={"measured": {"colour": "brown"}})
    assert resp.status_code == 422
    assert "Insufficient data" in resp.get_json()["error"]


def test_soil_score_invalid_catalog_is_422(client):
    resp = client.post("/soil/score", json={
        "measured": {"ph": 6.5},
        "ideals": {"ph": {"min": 8, "max": 6, "ideal": 7}},
    })
    assert resp.status_code == 422
    assert resp.get_json()["error"].startswith("Invalid ideal-range catalog")


def test_soil_score_requires_measured_object(client):
    assert client.post("/soil/score", json={"measured": [1, 2]}).status_code == 422


def test_agricultural_score(client):
    resp = client.post("/soil/agricultural", json={"measured": {"ph": 5.0}})
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["quality_category"] == "Poor Agricultural Soil"
    assert body["recommendations"] == ["Increase ph levels (Current: 5.00, Ideal: 6.80)"]


def test_soil_report(client, neutral_soil_by_depth):
    resp = client.post("/soil/report", json={"soilByDepth": neutral_soil_by_depth,
                                             "avgTemp": 20})
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["overall_quality"] == "Excellent"
    assert set(body["property_analysis"]) == set(neutral_soil_by_depth)


def test_soil_report_rejects_bad_shape(client):
    resp = client.post("/soil/report", json={"soilByDepth": {"0-5cm": 7.0}})
    assert resp.status_code == 422


# ── Crops ────────────────────────────────────────────────────────────────────

def test_crop_suitability(client, neutral_soil_by_depth):
    resp = client.post("/crops/suitability", json={"soilByDepth": neutral_soil_by_depth})
    body = resp.get_json()

    assert resp.status_code == 200
    assert set(body["suitability"]) == {"wheat", "rice", "cotton", "sugarcane"}
    assert 0 <= body["deviation_score"] <= 100


def test_crop_suitability_without_data_is_422(client):
    resp = client.post("/crops/suitability", json={"soilByDepth": {"0-5cm": {}}})
    assert resp.status_code == 422


# ── Weather ──────────────────────────────────────────────────────────────────

def test_weather_analyze_groups_raw_forecast(client, make_day):
    resp = client.post("/weather/analyze", json={
        "historical": [make_day("light rain", date="2026-10-18")],
        "current":    make_day("drizzle", date="2026-10-19"),
        "forecast":   _rain_samples(),
    })
    body = resp.get_json()

    assert resp.status_code == 200
    assert len(body["daily_forecast"]) == 4
    assert body["analysis"]["rainfall_status"].startswith("Heavy rainfall")
    assert body["weather_score"] == 15
    assert body["temperature_summary"]["max"] == 25.0


def test_weather_analyze_requires_current(client):
    resp = client.post("/weather/analyze", json={"historical": [], "forecast": []})
    assert resp.status_code == 422


def test_weather_analyze_malformed_sample(client, make_day):
    resp = client.post("/weather/analyze", json={
        "historical": [],
        "current":    make_day("clear"),
        "forecast":   [{"date": "2026-10-20", "conditions": "rain"}],
    })
    assert resp.status_code == 422


# ── Credit ───────────────────────────────────────────────────────────────────

def test_credit_aggregate(client):
    resp = client.post("/credit/aggregate",
                       json={"weatherScore": 70, "soilDeviationScore": 90})
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["final_score"] == 82
    assert body["eligibility"]["status"] == "Excellent"


def test_credit_aggregate_accepts_zero(client):
    resp = client.post("/credit/aggregate",
                       json={"weatherScore": 0, "soilDeviationScore": 0})
    assert resp.status_code == 200
    assert resp.get_json()["eligibility"]["status"] == "Not Eligible"


@pytest.mark.parametrize("payload", [
    {"weatherScore": 70},
    {"weatherScore": 70, "soilDeviationScore": None},
    {"weatherScore": 170, "soilDeviationScore": 90},
    {"weatherScore": "high", "soilDeviationScore": 90},
])
def test_credit_aggregate_bad_input(client, payload):
    assert client.post("/credit/aggregate", json=payload).status_code == 422


def test_simple_credit_score_with_gis(client):
    resp = client.post("/credit/score", json={
        "name": "Test Farmer",
        "landQuality": 80,
        "farmSize": 60,
        "cropType": "Wheat",
        "loanHistory": 70,
        "income": 600000,
        "marketValue": 2000000,
        "gisData": {
            "soil_type": "alluvial", "organic_matter": 2.5, "ph": 6.3,
            "nitrogen": 80, "phosphorus": 75, "potassium": 85,
            "drainage": "good", "erosion": "low", "slope": 2,
        },
    })
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["soil_analysis"]["score"] == 83
    assert body["credit_score"] == 87
    assert body["report"]["risk_level"] == "Low"


def test_simple_credit_score_missing_fields(client):
    resp = client.post("/credit/score", json={"landQuality": 80})
    assert resp.status_code == 422
    assert "farmSize" in resp.get_json()["error"]


# ── Full assessment ──────────────────────────────────────────────────────────

def test_assessment_for_coastal_farm(client):
    resp = client.post("/assessment", json={"latitude": 16.0, "longitude": 73.3})
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["location"]["soil_type"] == "Sandy Loam"
    assert body["location"]["climate_zone"] == "Konkan Coast"
    assert body["credit_assessment"]["weather_score"] == 15
    assert 0 <= body["credit_assessment"]["final_score"] <= 100
    assert "status" in body["credit_assessment"]["loan_eligibility"]


def test_assessment_quality_source(client):
    resp = client.post("/assessment", json={"latitude": 18.52, "longitude": 73.85,
                                            "soilSource": "quality"})
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["soil_source"] == "quality"
    assert body["credit_assessment"]["soil_deviation_score"] == \
        pytest.approx(body["soil_report"]["average_score"])


@pytest.mark.parametrize("payload", [
    {"latitude": 16.0, "longitude": 73.3, "soilSource": "gis"},
    {"latitude": "north", "longitude": 73.3},
    {"latitude": 95.0, "longitude": 73.3},
    {"longitude": 73.3},
])
def test_assessment_bad_input(client, payload):
    assert client.post("/assessment", json=payload).status_code == 422


def test_assessment_falls_back_to_default_soil(client, monkeypatch):
    def unavailable(lat, lng):
        raise ConnectionError("soil provider down")

    monkeypatch.setattr(api, "get_soil_data_by_depth", unavailable)
    resp = client.post("/assessment", json={"latitude": 16.0, "longitude": 73.3})
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["location"]["soil_fallback"] is True
    assert set(body["soil_report"]["property_analysis"]) == set(get_default_soil_data())
    assert body["credit_assessment"]["weather_score"] == 15


def test_assessment_reports_measured_soil(client):
    resp = client.post("/assessment", json={"latitude": 16.0, "longitude": 73.3})
    assert resp.get_json()["location"]["soil_fallback"] is False
