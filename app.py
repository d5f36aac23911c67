"""
app.py
------
AgroScore Credit Engine — Flask REST API

Endpoints:
    GET  /health               Liveness / readiness probe
    POST /soil/score           Curve-based soil quality score
    POST /soil/agricultural    Linear agricultural soil score
    POST /soil/report          Soil quality report across depth bands
    POST /crops/suitability    Crop suitability + deviation score
    POST /weather/analyze      Weather risk analysis + weather score
    POST /credit/aggregate     Final credit score + loan eligibility
    POST /credit/score         Simple four-input credit score
    POST /assessment           Full assessment on simulated soil/weather data

CORS:
    All origins allowed via flask-cors.
    In production, replace "*" with your frontend domain.

Startup:
    Development :  python app.py
    Production  :  gunicorn -w 4 -b 0.0.0.0:5000 "app:create_app()"

Environment variables (optional):
    AGROSCORE_PORT              – listening port (default: 5000)
    AGROSCORE_DEBUG             – set to "1" to enable Flask debug mode
    AGROSCORE_SECRET            – Flask secret key (auto-generated if not set)
    AGROSCORE_DEFAULT_AVG_TEMP  – °C used for the climate-adjusted catalog
                                  when a request gives none (default: 25.0)
"""

from __future__ import annotations

import os
import traceback
from datetime import datetime, timezone
from functools import wraps

from flask import Flask, request, jsonify
from flask_cors import CORS

from dotenv import load_dotenv
load_dotenv()

from agroscore.catalogs import validate_catalog, get_ideal_soil_values
from agroscore.errors import CatalogError, InsufficientDataError
from agroscore.soil_scorer import (score_soil, score_agricultural_soil,
                                   soil_quality_report)
from agroscore.crop_matcher import match_crops, classify_crop_suitability
from agroscore.weather_analyzer import (analyze_weather, group_forecast_by_day,
                                        temperature_summary,
                                        weather_quality_score)
from agroscore.credit_aggregator import aggregate, assess_credit, SOIL_SOURCES
from agroscore.land_scoring import (calculate_credit_score,
                                    credit_report_summary, gis_soil_score)
from agroscore.soil_service import (get_default_soil_data,
                                    get_soil_data_by_depth, get_soil_type)
from agroscore.weather_service import get_weather_samples


# ─────────────────────────────────────────────────────────────────────────────
# App factory
# ─────────────────────────────────────────────────────────────────────────────

def create_app(config: dict | None = None) -> Flask:
    """Application factory. Called by gunicorn and tests."""
    app = Flask(__name__)
    app.config["JSON_SORT_KEYS"]   = False
    app.config["SECRET_KEY"]       = os.getenv("AGROSCORE_SECRET", os.urandom(24).hex())
    app.config["DEFAULT_AVG_TEMP"] = float(os.getenv("AGROSCORE_DEFAULT_AVG_TEMP", "25.0"))
    if config:
        app.config.update(config)

    CORS(app, origins="*")

    _register_routes(app)
    _register_error_handlers(app)

    return app


# ─────────────────────────────────────────────────────────────────────────────
# Decorators / helpers
# ─────────────────────────────────────────────────────────────────────────────

def _require_json(f):
    """Decorator: reject requests whose Content-Type is not application/json."""
    @wraps(f)
    def _wrapper(*args, **kwargs):
        if not request.is_json:
            return _err("Request Content-Type must be application/json", 415)
        return f(*args, **kwargs)
    return _wrapper


def _err(message: str, code: int = 400):
    """Return a standardised JSON error response."""
    return jsonify({
        "error":     message,
        "status":    code,
        "timestamp": _utcnow(),
    }), code


def _utcnow() -> str:
    """Return current UTC time as ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _body() -> dict:
    """Parsed JSON object body, or {} when it is missing or not an object."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _missing(data: dict, fields: list[str]) -> list[str]:
    return [f for f in fields if data.get(f) in (None, "")]


def _optional_float(data: dict, field: str) -> float | None:
    """Read an optional numeric field; ValueError if present but invalid."""
    val = data.get(field)
    if val in (None, ""):
        return None
    try:
        return float(val)
    except (TypeError, ValueError):
        raise ValueError(f"'{field}' must be a valid number") from None


def _coordinates(data: dict) -> tuple[float, float]:
    try:
        lat = float(data["latitude"])
        lng = float(data["longitude"])
    except (KeyError, ValueError, TypeError):
        raise ValueError("'latitude' and 'longitude' must be valid numbers") from None
    if not (-90 <= lat <= 90) or not (-180 <= lng <= 180):
        raise ValueError("Coordinates out of valid range")
    return lat, lng


def _ideals_for(data: dict, default_temp: float) -> dict:
    """Caller-supplied catalog (validated) or the climate-adjusted default."""
    if data.get("ideals") is not None:
        return validate_catalog(data["ideals"], "ideals")
    avg_temp = _optional_float(data, "avgTemp")
    return get_ideal_soil_values(default_temp if avg_temp is None else avg_temp)


def _depth_mapping(data: dict) -> dict:
    soil_by_depth = data.get("soilByDepth")
    if not isinstance(soil_by_depth, dict) or not soil_by_depth:
        raise ValueError("'soilByDepth' must be a non-empty object of depth → properties")
    for depth, values in soil_by_depth.items():
        if not isinstance(values, dict):
            raise ValueError(f"'soilByDepth.{depth}' must be an object of property → value")
    return soil_by_depth


# ─────────────────────────────────────────────────────────────────────────────
# Route registration
# ─────────────────────────────────────────────────────────────────────────────

def _register_routes(app: Flask) -> None:

    # =========================================================================
    # GET /health
    # =========================================================================
    @app.route("/health", methods=["GET"])
    def health():
        """Liveness probe; the engine has no external dependencies."""
        return jsonify({
            "status":    "running",
            "timestamp": _utcnow(),
        }), 200

    # =========================================================================
    # POST /soil/score
    # =========================================================================
    @app.route("/soil/score", methods=["POST"])
    @_require_json
    def soil_score():
        """
        Score one set of measured soil properties.

        Expected JSON body fields:
            measured  – {property: value}
            ideals    – optional {property: {min, max, ideal, weight?}}
            avgTemp   – optional °C selecting the climate-adjusted catalog

        Returns 200 with overall/property/category scores.
        Returns 422 for malformed input or when nothing could be scored.
        """
        data     = _body()
        measured = data.get("measured")
        if not isinstance(measured, dict):
            return _err("'measured' must be an object of property → value", 422)

        ideals = _ideals_for(data, app.config["DEFAULT_AVG_TEMP"])
        result = score_soil(measured, ideals)
        if result["overall_score"] is None:
            raise InsufficientDataError()
        return jsonify(result), 200

    # =========================================================================
    # POST /soil/agricultural
    # =========================================================================
    @app.route("/soil/agricultural", methods=["POST"])
    @_require_json
    def soil_agricultural():
        """Score measured soil against the fixed agricultural standards."""
        data     = _body()
        measured = data.get("measured")
        if not isinstance(measured, dict):
            return _err("'measured' must be an object of property → value", 422)

        result = score_agricultural_soil(measured)
        if result["overall_score"] is None:
            raise InsufficientDataError()
        return jsonify(result), 200

    # =========================================================================
    # POST /soil/report
    # =========================================================================
    @app.route("/soil/report", methods=["POST"])
    @_require_json
    def soil_report():
        """
        Soil quality report over every depth band.

        Expected JSON body fields:
            soilByDepth – {depth: {property: value}}
            avgTemp     – optional °C
        """
        data   = _body()
        ideals = _ideals_for(data, app.config["DEFAULT_AVG_TEMP"])
        report = soil_quality_report(_depth_mapping(data), ideals)
        if report["average_score"] is None:
            raise InsufficientDataError()
        return jsonify(report), 200

    # =========================================================================
    # POST /crops/suitability
    # =========================================================================
    @app.route("/crops/suitability", methods=["POST"])
    @_require_json
    def crop_suitability():
        """Match the soil profile against wheat/rice/cotton/sugarcane."""
        matched = match_crops(_depth_mapping(_body()))
        return jsonify({
            "scores":          matched["scores"],
            "recommendations": matched["recommendations"],
            "deviation_score": matched["deviation_score"],
            "suitability":     classify_crop_suitability(matched),
        }), 200

    # =========================================================================
    # POST /weather/analyze
    # =========================================================================
    @app.route("/weather/analyze", methods=["POST"])
    @_require_json
    def weather_analyze():
        """
        Analyse weather risk.

        Expected JSON body fields:
            historical – [WeatherSample]  (daily)
            current    – WeatherSample
            forecast   – [sample]         (sub-daily; grouped per day here)

        Returns 200 with analysis, weather_score and temperature summary.
        """
        data       = _body()
        historical = data.get("historical") or []
        current    = data.get("current")
        raw        = data.get("forecast") or []
        if not isinstance(historical, list) or not isinstance(raw, list):
            return _err("'historical' and 'forecast' must be arrays", 422)
        if not isinstance(current, dict):
            return _err("'current' must be a weather sample object", 422)

        try:
            forecast = group_forecast_by_day(raw)
            analysis = analyze_weather(historical, current, forecast)
            temps    = temperature_summary(historical, current, forecast)
        except (KeyError, TypeError) as exc:
            return _err(f"Malformed weather sample: {exc}", 422)

        return jsonify({
            "analysis":            analysis,
            "weather_score":       weather_quality_score(analysis),
            "daily_forecast":      forecast,
            "temperature_summary": temps,
        }), 200

    # =========================================================================
    # POST /credit/aggregate
    # =========================================================================
    @app.route("/credit/aggregate", methods=["POST"])
    @_require_json
    def credit_aggregate():
        """Blend weatherScore and soilDeviationScore into a loan decision."""
        data    = _body()
        missing = _missing(data, ["weatherScore", "soilDeviationScore"])
        if missing:
            return _err(f"Missing or empty required fields: {', '.join(missing)}", 422)

        result = aggregate(_optional_float(data, "weatherScore"),
                           _optional_float(data, "soilDeviationScore"))
        return jsonify(result), 200

    # =========================================================================
    # POST /credit/score
    # =========================================================================
    @app.route("/credit/score", methods=["POST"])
    @_require_json
    def credit_score():
        """
        Simple credit score from the registration form.

        Expected JSON body fields:
            landQuality, farmSize, cropType, loanHistory,
            income, marketValue           (optional)
            gisData                       (optional GIS land record)
        """
        data     = _body()
        required = ["landQuality", "farmSize", "cropType", "loanHistory"]
        missing  = _missing(data, required)
        if missing:
            return _err(f"Missing or empty required fields: {', '.join(missing)}", 422)

        soil = None
        if isinstance(data.get("gisData"), dict):
            soil = gis_soil_score(data["gisData"])

        result = calculate_credit_score(
            land_quality = data["landQuality"],
            farm_size    = data["farmSize"],
            crop_type    = data["cropType"],
            loan_history = data["loanHistory"],
            income       = data.get("income"),
            market_value = data.get("marketValue"),
            soil_score   = soil["score"] if soil else None,
        )
        summary = credit_report_summary(result["credit_score"],
                                        data["landQuality"],
                                        data["loanHistory"],
                                        data["cropType"])

        app.logger.info("Simple credit score for %s: %d",
                        data.get("name") or "anonymous", result["credit_score"])

        return jsonify({
            "credit_score":  result["credit_score"],
            "score_detail":  result,
            "soil_analysis": soil,
            "report":        summary,
            "evaluated_at":  _utcnow(),
        }), 200

    # =========================================================================
    # POST /assessment
    # =========================================================================
    @app.route("/assessment", methods=["POST"])
    @_require_json
    def assessment():
        """
        Full credit assessment for a GPS location using simulated soil and
        weather providers.

        Expected JSON body fields:
            latitude, longitude
            soilSource – optional 'deviation' (default) | 'quality'

        Returns 200 with the CreditAssessment and every intermediate report.
        If the soil provider fails the default soil profile is used and
        location.soil_fallback is true.
        Returns 422 for invalid input or insufficient data.
        """
        data = _body()
        lat, lng    = _coordinates(data)
        soil_source = data.get("soilSource") or "deviation"
        if soil_source not in SOIL_SOURCES:
            return _err(f"'soilSource' must be one of: {', '.join(SOIL_SOURCES)}", 422)

        soil_fallback = False
        try:
            soil_by_depth = get_soil_data_by_depth(lat, lng)
        except Exception:
            app.logger.warning("Soil provider failed, using default profile:\n%s",
                               traceback.format_exc())
            soil_by_depth = get_default_soil_data()
            soil_fallback = True

        try:
            weather = get_weather_samples(lat, lng)
        except Exception:
            app.logger.error("Weather provider error:\n%s", traceback.format_exc())
            return _err("Failed to fetch weather data", 500)

        result = assess_credit(
            soil_by_depth,
            weather["historical"],
            weather["current"],
            group_forecast_by_day(weather["forecast"]),
            soil_source=soil_source,
        )

        decision = result["credit_assessment"]
        app.logger.info(
            "Assessment at (%.4f, %.4f): final=%d status=%s",
            lat, lng,
            decision["final_score"],
            decision["loan_eligibility"]["status"],
        )

        result["location"] = {
            "latitude":     lat,
            "longitude":    lng,
            "soil_type":    get_soil_type(lat),
            "climate_zone": weather["zone"],
            "soil_fallback": soil_fallback,
        }
        result["evaluated_at"] = _utcnow()
        return jsonify(result), 200


# ─────────────────────────────────────────────────────────────────────────────
# Error handlers
# ─────────────────────────────────────────────────────────────────────────────

def _register_error_handlers(app: Flask) -> None:

    @app.errorhandler(InsufficientDataError)
    def insufficient_data(e):
        return _err(str(e), 422)

    @app.errorhandler(CatalogError)
    def bad_catalog(e):
        return _err(f"Invalid ideal-range catalog: {e}", 422)

    @app.errorhandler(ValueError)
    def bad_value(e):
        return _err(str(e), 422)

    @app.errorhandler(404)
    def not_found(e):
        return _err("Route not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return _err("Method not allowed", 405)

    @app.errorhandler(500)
    def internal_error(e):
        app.logger.error("Unhandled error:\n%s", traceback.format_exc())
        return _err("Internal server error", 500)


# ─────────────────────────────────────────────────────────────────────────────
# Entry point (development server)
# ─────────────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    port  = int(os.getenv("AGROSCORE_PORT",  5000))
    debug = os.getenv("AGROSCORE_DEBUG", "0") == "1"

    print(f"\n{'='*60}")
    print("  AgroScore Credit Engine API")
    print(f"  Running on http://0.0.0.0:{port}")
    print(f"  Debug mode : {debug}")
    print(f"{'='*60}\n")

    create_app().run(host="0.0.0.0", port=port, debug=debug)
