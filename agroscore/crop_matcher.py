"""
agroscore/crop_matcher.py
-------------------------
Crop Suitability Matcher — matches a soil profile against crop-specific
ideal ranges.

Per (depth, crop) pair every required property is scored with the plain
linear rule at a fixed weight of 10, then averaged into `overall_score`.

The root-zone bands (5-15cm and 15-30cm) additionally feed:
    deviation %      = |value − ideal| / (max − min) × 100
    deviation_score  = max(0, 100 − mean deviation %)
    recommendations  – when value < 0.8 × min or value > 1.2 × max

Suitability categories (average overall_score across depths):
    >= 80  →  Highly Suitable
    >= 60  →  Moderately Suitable
    >= 40  →  Marginally Suitable
    else   →  Not Suitable

Usage:
    from agroscore.crop_matcher import match_crops, classify_crop_suitability
    matched  = match_crops(soil_by_depth)
    verdicts = classify_crop_suitability(matched)
"""

from __future__ import annotations

import numpy as np

from agroscore.catalogs import (
    CROP_SOIL_REQUIREMENTS,
    ROOT_ZONE_DEPTHS,
    validate_crop_catalog,
)
from agroscore.errors import InsufficientDataError
from agroscore.soil_scorer import measured_value


CROP_PROPERTY_WEIGHT = 10

# Recommendation guard band around the crop range
_LOW_GUARD  = 0.8
_HIGH_GUARD = 1.2

# ── Remediation bullets keyed by property and direction ──────────────────────
_REMEDIATION: dict[str, dict[str, str]] = {
    "ph": {
        "low":  "• Add agricultural lime to increase pH\n"
                "• Consider using calcium carbonate\n"
                "• Monitor pH changes over time",
        "high": "• Add sulfur or aluminum sulfate to lower pH\n"
                "• Use acid-forming fertilizers\n"
                "• Consider organic matter amendments",
    },
    "organic_carbon": {
        "low":  "• Add compost or manure\n"
                "• Implement crop rotation with legumes\n"
                "• Use cover crops\n"
                "• Reduce tillage practices",
        "high": "• Reduce organic matter inputs\n"
                "• Increase tillage frequency\n"
                "• Consider crop rotation without legumes",
    },
    "nitrogen": {
        "low":  "• Apply nitrogen-rich fertilizers\n"
                "• Plant nitrogen-fixing crops\n"
                "• Use organic nitrogen sources\n"
                "• Consider split applications",
        "high": "• Reduce nitrogen fertilizer application\n"
                "• Implement nitrogen-leaching crops\n"
                "• Use slow-release fertilizers",
    },
    "phosphorus": {
        "low":  "• Apply phosphorus fertilizers\n"
                "• Use phosphorus-rich organic matter\n"
                "• Consider mycorrhizal inoculation\n"
                "• Implement phosphorus-efficient crop rotation",
        "high": "• Reduce phosphorus fertilizer application\n"
                "• Use phosphorus-efficient crops\n"
                "• Implement erosion control measures",
    },
    "potassium": {
        "low":  "• Apply potassium fertilizers\n"
                "• Use potassium-rich organic matter\n"
                "• Consider potassium-efficient crops\n"
                "• Implement balanced fertilization",
        "high": "• Reduce potassium fertilizer application\n"
                "• Use potassium-leaching crops\n"
                "• Implement balanced fertilization",
    },
    "sand": {
        "low":  "• Add coarse organic matter\n"
                "• Implement deep tillage\n"
                "• Consider raised beds\n"
                "• Use sand-rich amendments",
        "high": "• Add clay or silt\n"
                "• Implement conservation tillage\n"
                "• Use organic matter amendments\n"
                "• Consider contour plowing",
    },
    "silt": {
        "low":  "• Add fine-textured materials\n"
                "• Implement conservation tillage\n"
                "• Use organic matter amendments\n"
                "• Consider contour plowing",
        "high": "• Add coarse materials\n"
                "• Implement deep tillage\n"
                "• Use raised beds\n"
                "• Consider erosion control measures",
    },
    "clay": {
        "low":  "• Add clay-rich materials\n"
                "• Implement conservation tillage\n"
                "• Use organic matter amendments\n"
                "• Consider contour plowing",
        "high": "• Add coarse materials\n"
                "• Implement deep tillage\n"
                "• Use raised beds\n"
                "• Consider gypsum application",
    },
}


def detailed_recommendation(prop: str, level: str) -> str:
    """Bullet-point remediation for a property that is 'low' or 'high'."""
    return _REMEDIATION.get(prop, {}).get(level, "")


def _linear_crop_score(value: float, req: dict) -> float:
    if req["min"] <= value <= req["max"]:
        return 100.0
    span = req["max"] - req["min"]
    if value < req["min"]:
        deviation = req["min"] - value
    else:
        deviation = value - req["max"]
    return max(0.0, 100.0 - (deviation / span) * 100.0)


def match_crops(soil_by_depth: dict, crop_catalog: dict | None = None) -> dict:
    """
    Score every crop at every depth and derive the deviation score.

    Args:
        soil_by_depth (dict):      depth → {property → value}.
        crop_catalog  (dict|None): crop → {"requirements": {...}}; defaults
                                   to CROP_SOIL_REQUIREMENTS.

    Returns:
        dict with keys:
            scores          (dict)       – depth → crop → {overall_score,
                                           property_scores}; overall_score is
                                           None when no property matched
            recommendations (list[str])  – insertion-ordered, de-duplicated
            deviation_score (float|None) – None when the root zone had no
                                           matching property at all

    Raises:
        CatalogError: a caller-supplied crop catalog is malformed.
    """
    if crop_catalog is None:
        crop_catalog = CROP_SOIL_REQUIREMENTS
    else:
        validate_crop_catalog(crop_catalog)

    scores: dict[str, dict] = {}
    recommendations: dict[str, None] = {}
    deviations: list[float] = []

    for depth, values in soil_by_depth.items():
        scores[depth] = {}

        # ── Root-zone deviation + recommendations ─────────────────────────
        if depth in ROOT_ZONE_DEPTHS:
            for crop in crop_catalog.values():
                for prop, req in crop["requirements"].items():
                    value = measured_value(values, prop)
                    if value is None:
                        continue

                    span = req["max"] - req["min"]
                    deviations.append(abs(value - req["ideal"]) / span * 100.0)

                    if value < req["min"] * _LOW_GUARD or value > req["max"] * _HIGH_GUARD:
                        if value < req["min"]:
                            verb, level = "Increase", "low"
                        else:
                            verb, level = "Reduce", "high"
                        terse = (f"{verb} {prop} (Current: {value:.2f}, "
                                 f"Ideal: {req['ideal']:.2f})")
                        recommendations.setdefault(terse, None)
                        detail = detailed_recommendation(prop, level)
                        if detail:
                            recommendations.setdefault(detail, None)

        # ── Per-crop suitability at this depth ────────────────────────────
        for crop_key, crop in crop_catalog.items():
            property_scores: dict[str, dict] = {}
            total_weighted = 0.0
            total_weight   = 0

            for prop, req in crop["requirements"].items():
                value = measured_value(values, prop)
                if value is None:
                    continue
                score    = _linear_crop_score(value, req)
                weighted = score * CROP_PROPERTY_WEIGHT / 100.0
                property_scores[prop] = {
                    "score":          score,
                    "weight":         CROP_PROPERTY_WEIGHT,
                    "weighted_score": weighted,
                }
                total_weighted += weighted
                total_weight   += CROP_PROPERTY_WEIGHT

            scores[depth][crop_key] = {
                "overall_score":   (total_weighted / total_weight * 100.0
                                    if total_weight else None),
                "property_scores": property_scores,
            }

    deviation_score = (max(0.0, 100.0 - float(np.mean(deviations)))
                       if deviations else None)

    return {
        "scores":          scores,
        "recommendations": list(recommendations),
        "deviation_score": deviation_score,
    }


def suitability_category(score: float) -> str:
    if score >= 80:
        return "Highly Suitable"
    if score >= 60:
        return "Moderately Suitable"
    if score >= 40:
        return "Marginally Suitable"
    return "Not Suitable"


def classify_crop_suitability(matched: dict) -> dict:
    """
    Average each crop's overall_score across depths and bucket it.

    Depths where a crop could not be scored (overall_score None) are left
    out of that crop's average. A crop with no scorable depth at all gets
    score and category None.

    Args:
        matched (dict): Output of match_crops().

    Returns:
        dict: crop → {"score": float|None, "category": str|None}

    Raises:
        InsufficientDataError: no crop could be scored at any depth.
    """
    per_crop: dict[str, list[float]] = {}
    for crops in matched["scores"].values():
        for crop, result in crops.items():
            bucket = per_crop.setdefault(crop, [])
            if result["overall_score"] is not None:
                bucket.append(result["overall_score"])

    if not any(per_crop.values()):
        raise InsufficientDataError("Insufficient soil data to assess crop suitability")

    suitability = {}
    for crop, crop_scores in per_crop.items():
        if not crop_scores:
            suitability[crop] = {"score": None, "category": None}
            continue
        avg = float(np.mean(crop_scores))
        suitability[crop] = {"score": avg, "category": suitability_category(avg)}
    return suitability
