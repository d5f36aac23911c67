"""
agroscore/land_scoring.py
-------------------------
Land Scoring — the simple credit-score path used by the registration and
report screens, plus the GIS land soil score that can feed it.

Simple credit score:
    score = land_quality × 0.20 + farm_size × 0.15 + crop_score × 0.15
          + loan_history × 0.20 [+ soil_score × 0.30 when a soil score exists]
    +5 if annual income > ₹5,00,000
    +5 if farm market value > ₹10,00,000
    clamped to 0–100

This path is deliberately independent from credit_aggregator.aggregate():
the two formulas do not agree and must not be merged.

Usage:
    from agroscore.land_scoring import calculate_credit_score, gis_soil_score
    soil   = gis_soil_score(gis_data)
    result = calculate_credit_score(80, 70, "wheat", 75,
                                    income=600000, soil_score=soil["score"])
"""

from __future__ import annotations

import math


# ── Categorical → numeric encodings ───────────────────────────────────────────

CROP_TYPE_SCORES: dict[str, int] = {
    "wheat":     85,
    "rice":      80,
    "cotton":    75,
    "sugarcane": 70,
    "other":     65,   # Any crop not listed above
}

SOIL_TYPE_SCORES: dict[str, int] = {
    "alluvial": 100,   # Most fertile
    "black":     90,
    "red":       80,
    "laterite":  70,
    "sandy":     60,
    "other":     50,
}

DRAINAGE_SCORES: dict[str, int] = {"good": 100, "moderate": 70}
EROSION_SCORES:  dict[str, int] = {"low": 100, "moderate": 60}
_POOR_DRAINAGE_SCORE = 40
_HIGH_EROSION_SCORE  = 30

GIS_SOIL_WEIGHTS: dict[str, float] = {
    "soil_type":      0.20,
    "organic_matter": 0.15,
    "ph":             0.15,
    "nutrients":      0.20,
    "drainage":       0.10,
    "erosion":        0.10,
    "slope":          0.10,
}

CREDIT_WEIGHTS: dict[str, float] = {
    "land_quality": 0.20,
    "farm_size":    0.15,
    "crop":         0.15,
    "loan_history": 0.20,
    "soil":         0.30,
}

INCOME_BONUS_THRESHOLD       = 500000    # ₹5 lakh
MARKET_VALUE_BONUS_THRESHOLD = 1000000   # ₹10 lakh
BONUS_POINTS                 = 5


def crop_type_score(crop_type: str | None) -> int:
    """Look up the crop score; unknown crops score as 'other'."""
    key = str(crop_type or "").strip().lower()
    return CROP_TYPE_SCORES.get(key, CROP_TYPE_SCORES["other"])


def _required_number(name: str, value) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"'{name}' must be a number") from None
    if not math.isfinite(number):
        raise ValueError(f"'{name}' must be a finite number")
    return number


def _optional_number(name: str, value) -> float | None:
    if value in (None, ""):
        return None
    return _required_number(name, value)


def gis_soil_score(gis_data: dict) -> dict:
    """
    Score a GIS land record (soil type, organic matter, pH, N/P/K, drainage,
    erosion, slope) on a 0–100 scale.

    Args:
        gis_data (dict): keys soil_type, organic_matter (%), ph, nitrogen,
                         phosphorus, potassium (0–100 indices), drainage
                         ('good'|'moderate'|…), erosion ('low'|'moderate'|…),
                         slope (degrees).

    Returns:
        dict with keys:
            score   (int)  – rounded weighted score
            details (dict) – the seven component scores
    """
    soil_type = str(gis_data.get("soil_type") or "other").lower()
    organic   = _required_number("organic_matter", gis_data.get("organic_matter"))
    ph        = _required_number("ph", gis_data.get("ph"))
    nitrogen  = _required_number("nitrogen", gis_data.get("nitrogen"))
    phosphor  = _required_number("phosphorus", gis_data.get("phosphorus"))
    potassium = _required_number("potassium", gis_data.get("potassium"))
    slope     = _required_number("slope", gis_data.get("slope"))

    details = {
        "soil_type_score":      SOIL_TYPE_SCORES.get(soil_type, SOIL_TYPE_SCORES["other"]),
        "organic_matter_score": min(organic * 10, 100),
        "ph_score":             100 - abs(ph - 6.5) * 20,   # optimum around 6.5
        "nutrient_score":       (nitrogen / 100 * 33
                                 + phosphor / 100 * 33
                                 + potassium / 100 * 34),
        "drainage_score":       DRAINAGE_SCORES.get(
                                    str(gis_data.get("drainage") or "").lower(),
                                    _POOR_DRAINAGE_SCORE),
        "erosion_score":        EROSION_SCORES.get(
                                    str(gis_data.get("erosion") or "").lower(),
                                    _HIGH_EROSION_SCORE),
        "slope_score":          max(100 - slope * 5, 0),
    }

    w = GIS_SOIL_WEIGHTS
    weighted = (
        details["soil_type_score"]      * w["soil_type"]
        + details["organic_matter_score"] * w["organic_matter"]
        + details["ph_score"]             * w["ph"]
        + details["nutrient_score"]       * w["nutrients"]
        + details["drainage_score"]       * w["drainage"]
        + details["erosion_score"]        * w["erosion"]
        + details["slope_score"]          * w["slope"]
    )
    return {"score": int(math.floor(weighted + 0.5)), "details": details}


def calculate_credit_score(land_quality, farm_size, crop_type, loan_history,
                           income=None, market_value=None,
                           soil_score=None) -> dict:
    """
    Simple four-input credit score with optional soil score and bonuses.

    Args:
        land_quality (float): 0–100 land quality score.
        farm_size    (float): farm-size score.
        crop_type    (str):   wheat | rice | cotton | sugarcane | other.
        loan_history (float): 0–100 repayment-history score.
        income       (float|None): annual income in INR.
        market_value (float|None): farm market value in INR.
        soil_score   (float|None): soil score (weight 0.3) when available.

    Returns:
        dict with keys:
            score        (float) – clamped, unrounded
            credit_score (int)   – rounded for display
            crop_score   (int)
            components   (dict)  – weighted contribution per input
            bonuses      (dict)  – income / market_value bonus points

    Raises:
        ValueError: a required input is not numeric.
    """
    land    = _required_number("land_quality", land_quality)
    size    = _required_number("farm_size", farm_size)
    history = _required_number("loan_history", loan_history)
    annual  = _optional_number("income", income)
    value   = _optional_number("market_value", market_value)
    soil    = _optional_number("soil_score", soil_score)
    crop    = crop_type_score(crop_type)

    w = CREDIT_WEIGHTS
    components = {
        "land_quality": land * w["land_quality"],
        "farm_size":    size * w["farm_size"],
        "crop":         crop * w["crop"],
        "loan_history": history * w["loan_history"],
    }
    if soil is not None:
        components["soil"] = soil * w["soil"]

    bonuses = {
        "income":       BONUS_POINTS if annual is not None and annual > INCOME_BONUS_THRESHOLD else 0,
        "market_value": BONUS_POINTS if value is not None and value > MARKET_VALUE_BONUS_THRESHOLD else 0,
    }

    score = sum(components.values()) + sum(bonuses.values())
    score = max(0.0, min(100.0, score))

    return {
        "score":        score,
        "credit_score": int(math.floor(score + 0.5)),
        "crop_score":   crop,
        "components":   components,
        "bonuses":      bonuses,
    }


def credit_report_summary(credit_score: float, land_quality, loan_history,
                          crop_type) -> dict:
    """
    Risk band, eligibility label and advice printed on the credit report.

    Returns:
        dict with keys:
            risk_level       (str) – 'Low' | 'Medium' | 'High'
            loan_eligibility (str) – e.g. 'High - Up to ₹50L'
            recommendations  (list[str])
    """
    if credit_score >= 80:
        risk_level, eligibility = "Low", "High - Up to ₹50L"
    elif credit_score >= 60:
        risk_level, eligibility = "Medium", "Medium - Up to ₹25L"
    else:
        risk_level, eligibility = "High", "Low - Up to ₹10L"

    recommendations = []
    if _required_number("land_quality", land_quality) < 70:
        recommendations.append("Consider soil improvement measures to increase land quality")
    if _required_number("loan_history", loan_history) < 70:
        recommendations.append("Focus on improving loan repayment history")
    if crop_type_score(crop_type) < 80:
        recommendations.append("Consider diversifying crop selection for better returns")

    return {
        "risk_level":       risk_level,
        "loan_eligibility": eligibility,
        "recommendations":  recommendations,
    }
