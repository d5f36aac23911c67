"""
agroscore/soil_scorer.py
------------------------
Soil Scorer — scores measured soil properties against ideal ranges.

Scoring rules:
    value inside [min, max]   →  100
    otherwise                 →  property-specific penalty curve
        ph                    –  banded by absolute distance (0.5 pH steps)
        organic_carbon        –  banded, steeper decay below the range
        nitrogen/P/K          –  banded relative to the violated bound
        everything else       –  linear distance over the range width

Overall score:
    overall = Σ weighted_score / Σ weight × 100
    where weighted_score = score × weight / 100
    and   weight         = catalog weight, else SOIL_PROPERTY_WEIGHTS, else 5

Two independent scorers live here and are expected to disagree:
    score_soil()              – curve-based, generic climate catalog
    score_agricultural_soil() – linear only, fixed agricultural standards

Usage:
    from agroscore.soil_scorer import score_soil
    result = score_soil({"ph": 5.0}, get_ideal_soil_values())
"""

from __future__ import annotations

import logging
import math
from typing import Callable

from agroscore.catalogs import (
    AGRICULTURAL_SOIL_STANDARDS,
    DEFAULT_PROPERTY_WEIGHT,
    SOIL_CATEGORIES,
    SOIL_PROPERTY_WEIGHTS,
    validate_catalog,
)

log = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Penalty curves  (value, ideal range) → score 0–100
# ─────────────────────────────────────────────────────────────────────────────

def _score_linear(value: float, ideal: dict) -> float:
    """Linear decay: lose 100 points per full range-width outside the range."""
    if ideal["min"] <= value <= ideal["max"]:
        return 100.0
    distance = min(abs(value - ideal["min"]), abs(value - ideal["max"]))
    span     = ideal["max"] - ideal["min"]
    return max(0.0, 100.0 - (distance / span) * 100.0)


def _score_ph(value: float, ideal: dict) -> float:
    """Acidic and alkaline soils share the same 0.5-pH bands."""
    if ideal["min"] <= value <= ideal["max"]:
        return 100.0
    if value < ideal["min"]:
        distance = ideal["min"] - value
    else:
        distance = value - ideal["max"]

    if distance <= 0.5:
        return 90.0
    if distance <= 1.0:
        return 80.0
    if distance <= 1.5:
        return 70.0
    if distance <= 2.0:
        return 60.0
    return max(0.0, 50.0 - (distance - 2.0) * 10.0)


def _score_organic_carbon(value: float, ideal: dict) -> float:
    """Below the range decays faster than above it."""
    if ideal["min"] <= value <= ideal["max"]:
        return 100.0

    if value < ideal["min"]:
        distance = ideal["min"] - value
        if distance <= 0.5:
            return 90.0
        if distance <= 1.0:
            return 80.0
        if distance <= 1.5:
            return 70.0
        return max(0.0, 60.0 - (distance - 1.5) * 20.0)

    distance = value - ideal["max"]
    if distance <= 0.5:
        return 90.0
    if distance <= 1.0:
        return 80.0
    return max(0.0, 70.0 - (distance - 1.0) * 15.0)


def _score_macronutrient(value: float, ideal: dict) -> float:
    """Bands are fractions (20/40/60 %) of the violated bound, not absolute."""
    if ideal["min"] <= value <= ideal["max"]:
        return 100.0

    if value < ideal["min"]:
        lo       = ideal["min"]
        distance = lo - value
        if distance <= lo * 0.2:
            return 90.0
        if distance <= lo * 0.4:
            return 80.0
        if distance <= lo * 0.6:
            return 70.0
        return max(0.0, 60.0 - (distance - lo * 0.6) * 10.0)

    hi       = ideal["max"]
    distance = value - hi
    if distance <= hi * 0.2:
        return 90.0
    if distance <= hi * 0.4:
        return 80.0
    return max(0.0, 70.0 - (distance - hi * 0.4) * 15.0)


# ─────────────────────────────────────────────────────────────────────────────
# Interpretation texts
# ─────────────────────────────────────────────────────────────────────────────

def interpret_ph(ph: float) -> str:
    """Acidity / alkalinity reading for a pH value."""
    if ph < 4.5:
        return "Extremely acidic - May need significant liming"
    if ph < 5.0:
        return "Very acidic - Consider liming"
    if ph < 5.5:
        return "Moderately acidic - May need some liming"
    if ph < 6.0:
        return "Slightly acidic - Generally acceptable"
    if ph < 6.5:
        return "Slightly acidic to neutral - Good range"
    if ph < 7.0:
        return "Neutral - Ideal for most plants"
    if ph < 7.5:
        return "Slightly alkaline - Good range"
    if ph < 8.0:
        return "Moderately alkaline - May need acidification"
    if ph < 8.5:
        return "Very alkaline - Consider acidification"
    return "Extremely alkaline - May need significant acidification"


def interpret_organic_carbon(oc: float) -> str:
    """Organic-matter reading for an organic carbon percentage."""
    if oc < 1.0:
        return "Very low - Consider adding organic matter"
    if oc < 2.0:
        return "Low - Could benefit from organic amendments"
    if oc < 3.0:
        return "Moderate - Good for most crops"
    if oc < 4.0:
        return "Good - Excellent for most crops"
    return "Very good - Ideal for most crops"


# nutrient → (symbol, low threshold, high threshold)
_NUTRIENT_THRESHOLDS: dict[str, tuple[str, float, float]] = {
    "nitrogen":   ("N", 0.1, 0.3),
    "phosphorus": ("P", 10,  30),
    "potassium":  ("K", 150, 300),
}


def interpret_nutrient(nutrient: str, value: float) -> str:
    """Low / Moderate / High reading for a macronutrient."""
    symbol, low, high = _NUTRIENT_THRESHOLDS[nutrient]
    if value < low:
        return f"Low {symbol} - Consider {nutrient} fertilization"
    if value > high:
        return f"High {symbol} - May need to reduce {nutrient} inputs"
    return f"Moderate {symbol} - Monitor levels"


# ── Strategy table: property → (curve, interpreter) ──────────────────────────
_Curve       = Callable[[float, dict], float]
_Interpreter = Callable[[float], str]

_STRATEGIES: dict[str, tuple[_Curve, _Interpreter | None]] = {
    "ph":             (_score_ph,             interpret_ph),
    "organic_carbon": (_score_organic_carbon, interpret_organic_carbon),
    "nitrogen":       (_score_macronutrient,  lambda v: interpret_nutrient("nitrogen", v)),
    "phosphorus":     (_score_macronutrient,  lambda v: interpret_nutrient("phosphorus", v)),
    "potassium":      (_score_macronutrient,  lambda v: interpret_nutrient("potassium", v)),
}
_DEFAULT_STRATEGY: tuple[_Curve, _Interpreter | None] = (_score_linear, None)


def measured_value(measured: dict, prop: str) -> float | None:
    """Return a usable float for prop, or None when it is absent/non-finite."""
    raw = measured.get(prop)
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        log.debug("Skipping %s: non-numeric value %r", prop, raw)
        return None
    return value if math.isfinite(value) else None


def _quality_label(score: float | None) -> str | None:
    if score is None:
        return None
    if score >= 80:
        return "Excellent"
    if score >= 60:
        return "Good"
    if score >= 40:
        return "Fair"
    if score >= 20:
        return "Poor"
    return "Very Poor"


# ─────────────────────────────────────────────────────────────────────────────
# Curve-based soil quality score
# ─────────────────────────────────────────────────────────────────────────────

def score_soil(measured: dict, ideals: dict) -> dict:
    """
    Score measured soil properties against an ideal-range catalog.

    Only properties present in both `measured` and `ideals` are scored;
    anything else is left out of the weighted sum (never counted as 0).

    Args:
        measured (dict): property → measured value.
        ideals   (dict): property → IdealRange catalog.

    Returns:
        dict with keys:
            overall_score   (float|None) – 0–100, None if nothing matched
            property_scores (dict)       – property → PropertyScore
            category_scores (dict)       – chemical/physical/nutrient/structure

    Raises:
        CatalogError: an ideal range is malformed (e.g. min >= max).
    """
    validate_catalog(ideals, "ideals")

    property_scores: dict[str, dict] = {}
    total_weighted = 0.0
    total_weight   = 0.0

    for prop, ideal in ideals.items():
        value = measured_value(measured, prop)
        if value is None:
            continue

        curve, interpreter = _STRATEGIES.get(prop, _DEFAULT_STRATEGY)
        score    = curve(value, ideal)
        weight   = ideal.get("weight",
                             SOIL_PROPERTY_WEIGHTS.get(prop, DEFAULT_PROPERTY_WEIGHT))
        weighted = score * weight / 100.0

        entry = {
            "score":          score,
            "weight":         weight,
            "weighted_score": weighted,
        }
        if interpreter is not None:
            entry["interpretation"] = interpreter(value)
        property_scores[prop] = entry

        total_weighted += weighted
        total_weight   += weight

    if total_weight > 0:
        overall_score = total_weighted / total_weight * 100.0
    else:
        log.debug("No scorable soil properties among %s", sorted(measured))
        overall_score = None

    category_scores = {category: 0.0 for category in SOIL_CATEGORIES}
    for prop, entry in property_scores.items():
        for category, members in SOIL_CATEGORIES.items():
            if prop in members:
                category_scores[category] += entry["weighted_score"]

    return {
        "overall_score":   overall_score,
        "property_scores": property_scores,
        "category_scores": category_scores,
    }


def soil_quality_report(soil_by_depth: dict, ideals: dict) -> dict:
    """
    Score every depth band and summarise the soil profile.

    A property that scores below 60 at some depth yields an
    "Increase/Reduce <property> levels" recommendation; the combined list
    keeps the first occurrence of each text.

    Returns:
        dict with keys:
            overall_quality   (str|None)   – Excellent … Very Poor
            average_score     (float|None) – mean of scorable depth scores
            recommendations   (list[str])
            property_analysis (dict)       – depth → score/recommendations/
                                             category_scores/property_scores
    """
    property_analysis: dict[str, dict] = {}
    merged: dict[str, None] = {}
    depth_scores: list[float] = []

    for depth, values in soil_by_depth.items():
        result = score_soil(values, ideals)

        recommendations = []
        for prop, entry in result["property_scores"].items():
            if entry["score"] >= 60:
                continue
            value = measured_value(values, prop)
            ideal = ideals[prop]
            if value < ideal["min"]:
                verb = "Increase"
            elif value > ideal["max"]:
                verb = "Reduce"
            else:
                continue
            recommendations.append(
                f"{verb} {prop} levels "
                f"(current: {value:.2f}, ideal: {ideal['ideal']:.2f})"
            )

        property_analysis[depth] = {
            "score":           result["overall_score"],
            "recommendations": recommendations,
            "category_scores": result["category_scores"],
            "property_scores": result["property_scores"],
        }
        if result["overall_score"] is not None:
            depth_scores.append(result["overall_score"])
        for rec in recommendations:
            merged.setdefault(rec, None)

    average = sum(depth_scores) / len(depth_scores) if depth_scores else None

    return {
        "overall_quality":   _quality_label(average),
        "average_score":     average,
        "recommendations":   list(merged),
        "property_analysis": property_analysis,
    }


# ─────────────────────────────────────────────────────────────────────────────
# Agricultural soil score (linear only, fixed standards)
# ─────────────────────────────────────────────────────────────────────────────

def _agricultural_category(score: float | None) -> str | None:
    if score is None:
        return None
    if score >= 80:
        return "Excellent Agricultural Soil"
    if score >= 60:
        return "Good Agricultural Soil"
    if score >= 40:
        return "Fair Agricultural Soil"
    if score >= 20:
        return "Poor Agricultural Soil"
    return "Unsuitable for Agriculture"


def score_agricultural_soil(measured: dict, standards: dict | None = None) -> dict:
    """
    Score soil against the agricultural standards using linear decay only.

    Args:
        measured  (dict):      property → measured value.
        standards (dict|None): catalog to use; defaults to
                               AGRICULTURAL_SOIL_STANDARDS.

    Returns:
        dict with keys:
            overall_score    (float|None)
            quality_category (str|None)  – e.g. 'Good Agricultural Soil'
            property_scores  (dict)      – incl. measured value and standard
            recommendations  (list[str])
    """
    if standards is None:
        standards = AGRICULTURAL_SOIL_STANDARDS
    else:
        validate_catalog(standards, "agricultural standards")

    property_scores: dict[str, dict] = {}
    recommendations: list[str] = []
    total_weighted = 0.0
    total_weight   = 0.0

    for prop, standard in standards.items():
        value = measured_value(measured, prop)
        if value is None:
            continue

        score  = _score_linear(value, standard)
        weight = standard.get("weight", DEFAULT_PROPERTY_WEIGHT)
        if value < standard["min"]:
            recommendations.append(
                f"Increase {prop} levels "
                f"(Current: {value:.2f}, Ideal: {standard['ideal']:.2f})"
            )
        elif value > standard["max"]:
            recommendations.append(
                f"Reduce {prop} levels "
                f"(Current: {value:.2f}, Ideal: {standard['ideal']:.2f})"
            )

        weighted = score * weight / 100.0
        property_scores[prop] = {
            "score":          score,
            "weight":         weight,
            "weighted_score": weighted,
            "value":          value,
            "standard":       dict(standard),
        }
        total_weighted += weighted
        total_weight   += weight

    overall_score = total_weighted / total_weight * 100.0 if total_weight > 0 else None

    return {
        "overall_score":    overall_score,
        "quality_category": _agricultural_category(overall_score),
        "property_scores":  property_scores,
        "recommendations":  recommendations,
    }


def agricultural_scores_by_depth(soil_by_depth: dict,
                                 standards: dict | None = None) -> dict:
    """Run score_agricultural_soil() per depth and average the results."""
    by_depth = {
        depth: score_agricultural_soil(values, standards)
        for depth, values in soil_by_depth.items()
    }
    scored = [r["overall_score"] for r in by_depth.values()
              if r["overall_score"] is not None]
    return {
        "by_depth":      by_depth,
        "average_score": sum(scored) / len(scored) if scored else None,
    }
