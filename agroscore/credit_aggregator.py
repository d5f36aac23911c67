"""
agroscore/credit_aggregator.py
------------------------------
Credit Score Aggregator — blends the weather score and a soil score into a
final 0–100 credit score and a loan-eligibility tier.

Formula:
    final_score = round(weather_score × 0.4 + soil_score × 0.6)
    (half-up rounding: 82.5 → 83)

Eligibility ladder:
    final_score >= 80  →  Excellent     ₹10,00,000 @  7.5% p.a.
    final_score >= 70  →  Good          ₹ 7,50,000 @  8.5% p.a.
    final_score >= 60  →  Fair          ₹ 5,00,000 @ 10.0% p.a.
    final_score >= 50  →  Limited       ₹ 2,50,000 @ 12.0% p.a.
    otherwise          →  Not Eligible  no loan, reapply after 6 months

assess_credit() runs the whole pipeline (soil, crops, weather, aggregation)
over already-materialised soil and weather records.

Usage:
    from agroscore.credit_aggregator import aggregate
    result = aggregate(weather_score=70, soil_deviation_score=90)
"""

from __future__ import annotations

import logging
import math

from agroscore.catalogs import get_ideal_soil_values
from agroscore.crop_matcher import classify_crop_suitability, match_crops
from agroscore.errors import InsufficientDataError
from agroscore.soil_scorer import agricultural_scores_by_depth, soil_quality_report
from agroscore.weather_analyzer import (
    analyze_weather,
    temperature_summary,
    weather_quality_score,
)

log = logging.getLogger(__name__)

WEATHER_WEIGHT = 0.4
SOIL_WEIGHT    = 0.6

SOIL_SOURCES = ("deviation", "quality")


# ── Eligibility tiers, highest threshold first ────────────────────────────────
_ELIGIBILITY_TIERS: list[tuple[int, dict]] = [
    (80, {
        "status":          "Excellent",
        "max_loan_amount": 1000000,
        "interest_rate":   7.5,
        "tenure_years":    3,
        "terms":           "Flexible terms with 3-year repayment period",
        "requirements": [
            "Standard documentation",
            "Basic insurance coverage",
            "Regular progress reports",
        ],
    }),
    (70, {
        "status":          "Good",
        "max_loan_amount": 750000,
        "interest_rate":   8.5,
        "tenure_years":    2.5,
        "terms":           "Standard terms with 2.5-year repayment period",
        "requirements": [
            "Standard documentation",
            "Basic insurance coverage",
            "Monthly progress reports",
            "Collateral security",
        ],
    }),
    (60, {
        "status":          "Fair",
        "max_loan_amount": 500000,
        "interest_rate":   10.0,
        "tenure_years":    2,
        "terms":           "Structured terms with 2-year repayment period",
        "requirements": [
            "Detailed documentation",
            "Comprehensive insurance coverage",
            "Bi-weekly progress reports",
            "Collateral security",
            "Guarantor required",
        ],
    }),
    (50, {
        "status":          "Limited",
        "max_loan_amount": 250000,
        "interest_rate":   12.0,
        "tenure_years":    1.5,
        "terms":           "Restricted terms with 1.5-year repayment period",
        "requirements": [
            "Extensive documentation",
            "Full insurance coverage",
            "Weekly progress reports",
            "Multiple collateral securities",
            "Multiple guarantors required",
        ],
    }),
]

_NOT_ELIGIBLE: dict = {
    "status":          "Not Eligible",
    "max_loan_amount": 0,
    "interest_rate":   0,
    "tenure_years":    None,
    "terms":           "Not eligible for loan at this time",
    "requirements": [
        "Improve soil quality",
        "Implement better weather protection measures",
        "Consider alternative farming methods",
        "Reapply after 6 months with improvements",
    ],
}


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (82.5 → 83), unlike round()."""
    return int(math.floor(value + 0.5))


def _check_score(name: str, value) -> float:
    if value is None:
        raise InsufficientDataError(f"Insufficient data to compute score: {name} is missing")
    if isinstance(value, bool) or not isinstance(value, (int, float)) \
            or not math.isfinite(value):
        raise ValueError(f"'{name}' must be a finite number")
    if not 0 <= value <= 100:
        raise ValueError(f"'{name}' must be between 0 and 100, got {value}")
    return float(value)


def calculate_final_score(weather_score: float, soil_deviation_score: float) -> int:
    """Weighted blend: weather 40 %, soil 60 %."""
    weather = _check_score("weather_score", weather_score)
    soil    = _check_score("soil_deviation_score", soil_deviation_score)
    return round_half_up(weather * WEATHER_WEIGHT + soil * SOIL_WEIGHT)


def determine_loan_eligibility(final_score: float) -> dict:
    """
    Map a final score to its loan tier.

    Returns:
        dict with keys:
            status          (str)         – Excellent … Not Eligible
            max_loan_amount (int)         – INR
            interest_rate   (float)       – % p.a.
            tenure_years    (float|None)
            terms           (str)
            requirements    (list[str])
            emi_monthly     (float|None)  – EMI at the tier's cap and rate
    """
    tier = _NOT_ELIGIBLE
    for threshold, candidate in _ELIGIBILITY_TIERS:
        if final_score >= threshold:
            tier = candidate
            break

    eligibility = dict(tier)
    eligibility["requirements"] = list(tier["requirements"])
    eligibility["emi_monthly"]  = _calculate_emi(
        principal    = tier["max_loan_amount"],
        annual_rate  = tier["interest_rate"],
        tenure_years = tier["tenure_years"],
    )
    return eligibility


def _calculate_emi(principal: float,
                   annual_rate: float | None,
                   tenure_years: float | None) -> float | None:
    """
    Calculate monthly EMI using the standard reducing-balance formula:
        EMI = P × r × (1+r)^n / ((1+r)^n - 1)

    where:
        P = principal amount
        r = monthly interest rate (annual_rate / 12 / 100)
        n = total number of months (tenure_years × 12)

    Returns None when no loan is offered.
    """
    if not principal or not annual_rate or not tenure_years:
        return None

    r = annual_rate / (12.0 * 100.0)
    n = int(round(tenure_years * 12))

    emi = principal * r * math.pow(1 + r, n) / (math.pow(1 + r, n) - 1)
    return round(emi, 2)


def aggregate(weather_score: float, soil_deviation_score: float) -> dict:
    """
    Combine the weather and soil scores into a credit decision.

    Args:
        weather_score        (float): 0–100, from weather_quality_score().
        soil_deviation_score (float): 0–100, whichever soil score the caller
                                      chose to feed aggregation.

    Returns:
        dict with keys:
            final_score (int)  – 0 to 100
            eligibility (dict) – see determine_loan_eligibility()

    Raises:
        InsufficientDataError: an input score is None.
        ValueError:            an input score is outside [0, 100].
    """
    final_score = calculate_final_score(weather_score, soil_deviation_score)
    return {
        "final_score": final_score,
        "eligibility": determine_loan_eligibility(final_score),
    }


# ─────────────────────────────────────────────────────────────────────────────
# Full assessment pipeline
# ─────────────────────────────────────────────────────────────────────────────

def assess_credit(soil_by_depth: dict,
                  historical: list[dict],
                  current: dict | None,
                  forecast: list[dict],
                  *,
                  soil_source: str = "deviation",
                  avg_temp: float | None = None) -> dict:
    """
    Run every scorer and aggregate into a CreditAssessment.

    Args:
        soil_by_depth (dict):       depth → {property → value}.
        historical    (list[dict]): past daily WeatherSamples.
        current       (dict|None):  current WeatherSample.
        forecast      (list[dict]): daily forecast WeatherSamples.
        soil_source   (str):        which soil score feeds aggregation:
                                    'deviation' – crop matcher deviation score
                                    'quality'   – average soil quality score
        avg_temp      (float|None): temperature selecting the climate-adjusted
                                    ideal catalog; defaults to the current
                                    sample's temperature.

    Returns:
        dict with keys:
            credit_assessment    – weather_score, soil_deviation_score,
                                   final_score, loan_eligibility
            soil_source, soil_report, agricultural_soil, crop_suitability,
            crop_matching, weather_analysis, temperature_summary

    Raises:
        ValueError:            unknown soil_source.
        InsufficientDataError: the selected soil score could not be computed.
    """
    if soil_source not in SOIL_SOURCES:
        raise ValueError(f"soil_source must be one of {SOIL_SOURCES}, got {soil_source!r}")

    if avg_temp is None and current is not None:
        avg_temp = float(current["temperature"])
    ideals = get_ideal_soil_values(avg_temp)

    soil_report   = soil_quality_report(soil_by_depth, ideals)
    agricultural  = agricultural_scores_by_depth(soil_by_depth)
    crop_matching = match_crops(soil_by_depth)

    weather_analysis = analyze_weather(historical, current, forecast)
    weather_score    = weather_quality_score(weather_analysis)

    if soil_source == "deviation":
        soil_score = crop_matching["deviation_score"]
    else:
        soil_score = soil_report["average_score"]

    decision = aggregate(weather_score, soil_score)
    log.debug("Assessment: weather=%s soil(%s)=%s final=%s",
              weather_score, soil_source, soil_score, decision["final_score"])

    return {
        "credit_assessment": {
            "weather_score":        weather_score,
            "soil_deviation_score": soil_score,
            "final_score":          decision["final_score"],
            "loan_eligibility":     decision["eligibility"],
        },
        "soil_source":         soil_source,
        "soil_report":         soil_report,
        "agricultural_soil":   agricultural,
        "crop_matching":       crop_matching,
        "crop_suitability":    classify_crop_suitability(crop_matching),
        "weather_analysis":    weather_analysis,
        "temperature_summary": temperature_summary(historical, current, forecast),
    }
