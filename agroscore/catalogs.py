"""
agroscore/catalogs.py
---------------------
Scoring catalogs — ideal soil property ranges used by every scorer.

Each catalog maps a property name to an IdealRange dict:
    {"min": float, "max": float, "ideal": float,
     "weight": float (optional), "description": str (optional)}

Three independent families exist and are NOT guaranteed to agree:
    generic ideal values   – climate-adjusted (see get_ideal_soil_values)
    agricultural standards – fixed, weighted, with descriptions
    crop requirements      – one requirement table per crop

Every catalog is validated when it is loaded (min < max and
min <= ideal <= max); a malformed entry raises CatalogError immediately
instead of producing undefined scores later.

Usage:
    from agroscore.catalogs import get_ideal_soil_values, DEPTHS
    ideals = get_ideal_soil_values(avg_temp=27.4)
"""

from __future__ import annotations

import copy
import math

from agroscore.errors import CatalogError


# ── Depth bands (SoilGrids standard layers, shallow → deep) ──────────────────
DEPTHS: tuple[str, ...] = (
    "0-5cm",
    "5-15cm",
    "15-30cm",
    "30-50cm",
    "50-70cm",
    "70-100cm",
    "100-200cm",
)

# Only the root-zone bands feed the crop deviation score and recommendations
ROOT_ZONE_DEPTHS: tuple[str, ...] = ("5-15cm", "15-30cm")

DEFAULT_PROPERTY_WEIGHT = 5

# ── Weights of the generic catalog ────────────────────────────────────────────
SOIL_PROPERTY_WEIGHTS: dict[str, float] = {
    # Critical properties
    "ph":             20,
    "organic_carbon": 15,
    "nitrogen":       10,
    "phosphorus":     10,
    "potassium":      10,
    # Physical properties
    "sand":            5,
    "silt":            5,
    "clay":            5,
    "bulk_density":    5,
    # Secondary nutrients
    "calcium":         5,
    "magnesium":       5,
    "sulfur":          3,
    # Micronutrients
    "zinc":            3,
    "copper":          3,
    "manganese":       3,
    "iron":            3,
    "aluminum":        2,
    # Exchange capacity
    "cec":             5,
    "ecec":            5,
}

# ── Category membership for the soil-quality rollup ──────────────────────────
SOIL_CATEGORIES: dict[str, tuple[str, ...]] = {
    "chemical":  ("ph", "organic_carbon", "cec", "ecec"),
    "physical":  ("sand", "silt", "clay", "bulk_density"),
    "nutrient":  ("nitrogen", "phosphorus", "potassium",
                  "calcium", "magnesium", "sulfur"),
    "structure": ("zinc", "copper", "manganese", "iron", "aluminum"),
}

# Above this average air temperature (°C) the warm-climate ranges apply
WARM_CLIMATE_THRESHOLD_C = 25.0


# ─────────────────────────────────────────────────────────────────────────────
# Validation
# ─────────────────────────────────────────────────────────────────────────────

def validate_ideal_range(prop: str, entry: dict, catalog: str = "catalog") -> dict:
    """
    Check a single IdealRange entry and return it unchanged.

    Raises:
        CatalogError: missing/non-numeric bound, min >= max, ideal outside
                      [min, max], or a negative weight.
    """
    where = f"{catalog}[{prop!r}]"
    if not isinstance(entry, dict):
        raise CatalogError(f"{where}: expected a mapping, got {type(entry).__name__}")

    for key in ("min", "max", "ideal"):
        val = entry.get(key)
        if isinstance(val, bool) or not isinstance(val, (int, float)) \
                or not math.isfinite(val):
            raise CatalogError(f"{where}: '{key}' must be a finite number")

    lo, hi, ideal = entry["min"], entry["max"], entry["ideal"]
    if lo >= hi:
        raise CatalogError(f"{where}: min ({lo}) must be below max ({hi})")
    if not lo <= ideal <= hi:
        raise CatalogError(f"{where}: ideal ({ideal}) outside [{lo}, {hi}]")

    weight = entry.get("weight")
    if weight is not None and (not isinstance(weight, (int, float)) or weight < 0):
        raise CatalogError(f"{where}: weight must be a non-negative number")
    return entry


def validate_catalog(catalog: dict, name: str = "catalog") -> dict:
    """Validate every IdealRange of a property → range catalog."""
    if not isinstance(catalog, dict):
        raise CatalogError(f"{name}: expected a mapping of property → range")
    for prop, entry in catalog.items():
        validate_ideal_range(prop, entry, name)
    return catalog


def validate_crop_catalog(crops: dict, name: str = "crop catalog") -> dict:
    """Validate a crop → {"requirements": {...}} catalog."""
    if not isinstance(crops, dict):
        raise CatalogError(f"{name}: expected a mapping of crop → requirements")
    for crop, entry in crops.items():
        if not isinstance(entry, dict) or not isinstance(entry.get("requirements"), dict):
            raise CatalogError(f"{name}[{crop!r}]: missing 'requirements' mapping")
        validate_catalog(entry["requirements"], f"{name}[{crop!r}]")
    return crops


# ─────────────────────────────────────────────────────────────────────────────
# Generic ideal values (climate-adjusted)
# ─────────────────────────────────────────────────────────────────────────────

def get_ideal_soil_values(avg_temp: float | None = None) -> dict:
    """
    Return the generic ideal soil catalog for a climate.

    Warm climates (average temperature above 25 °C) get a slightly more
    acidic pH window and a lower organic-carbon window, since organic
    matter decomposes faster in the heat.

    Args:
        avg_temp (float|None): Average air temperature in °C. None selects
                               the temperate ranges.

    Returns:
        dict: property → IdealRange, freshly built and validated.
    """
    warm = avg_temp is not None and avg_temp > WARM_CLIMATE_THRESHOLD_C

    ranges = {
        "ph":             {"min": 5.5 if warm else 6.0,
                           "max": 7.0 if warm else 7.5,
                           "ideal": 6.2 if warm else 6.8},
        "organic_carbon": {"min": 1.5 if warm else 2.0,
                           "max": 3.0 if warm else 4.0,
                           "ideal": 2.0 if warm else 3.0},
        "nitrogen":       {"min": 0.1, "max": 0.5, "ideal": 0.3},
        "phosphorus":     {"min": 10,  "max": 30,  "ideal": 20},
        "potassium":      {"min": 150, "max": 300, "ideal": 200},
        "sand":           {"min": 30,  "max": 50,  "ideal": 40},
        "silt":           {"min": 30,  "max": 40,  "ideal": 35},
        "clay":           {"min": 20,  "max": 30,  "ideal": 25},
        "cec":            {"min": 10,  "max": 20,  "ideal": 15},
    }
    for prop, entry in ranges.items():
        entry["weight"] = SOIL_PROPERTY_WEIGHTS.get(prop, DEFAULT_PROPERTY_WEIGHT)

    return validate_catalog(ranges, "ideal soil values")


# ─────────────────────────────────────────────────────────────────────────────
# Agricultural soil standards (fixed)
# ─────────────────────────────────────────────────────────────────────────────

AGRICULTURAL_SOIL_STANDARDS: dict[str, dict] = validate_catalog({
    "ph": {
        "min": 6.0, "max": 7.5, "ideal": 6.8, "weight": 20,
        "description": "Optimal for nutrient availability and microbial activity",
    },
    "organic_carbon": {
        "min": 1.5, "max": 3.5, "ideal": 2.5, "weight": 15,
        "description": "Essential for soil structure and nutrient cycling",
    },
    "nitrogen": {
        "min": 0.2, "max": 0.4, "ideal": 0.3, "weight": 10,
        "description": "Primary nutrient for plant growth",
    },
    "cec": {
        "min": 12, "max": 25, "ideal": 18, "weight": 5,
        "description": "Indicates soil nutrient holding capacity",
    },
    "sand": {
        "min": 35, "max": 45, "ideal": 40, "weight": 5,
        "description": "Affects soil drainage and aeration",
    },
    "silt": {
        "min": 30, "max": 40, "ideal": 35, "weight": 5,
        "description": "Contributes to soil fertility",
    },
    "clay": {
        "min": 20, "max": 30, "ideal": 25, "weight": 5,
        "description": "Improves water and nutrient retention",
    },
}, "agricultural soil standards")


# ─────────────────────────────────────────────────────────────────────────────
# Crop-specific soil requirements
# ─────────────────────────────────────────────────────────────────────────────

CROP_SOIL_REQUIREMENTS: dict[str, dict] = validate_crop_catalog({
    "wheat": {
        "name": "Wheat",
        "requirements": {
            "ph":             {"min": 6.0,  "max": 7.5,  "ideal": 6.8},
            "organic_carbon": {"min": 0.8,  "max": 1.5,  "ideal": 1.2},
            "nitrogen":       {"min": 0.15, "max": 0.25, "ideal": 0.2},
            "phosphorus":     {"min": 10,   "max": 20,   "ideal": 15},
            "potassium":      {"min": 150,  "max": 250,  "ideal": 200},
            "sand":           {"min": 35,   "max": 45,   "ideal": 40},
            "silt":           {"min": 30,   "max": 40,   "ideal": 35},
            "clay":           {"min": 20,   "max": 30,   "ideal": 25},
        },
        "weight": 1.0,
    },
    "rice": {
        "name": "Rice",
        "requirements": {
            "ph":             {"min": 5.5,  "max": 6.5,  "ideal": 6.0},
            "organic_carbon": {"min": 1.0,  "max": 2.0,  "ideal": 1.5},
            "nitrogen":       {"min": 0.2,  "max": 0.3,  "ideal": 0.25},
            "phosphorus":     {"min": 15,   "max": 25,   "ideal": 20},
            "potassium":      {"min": 180,  "max": 280,  "ideal": 230},
            "sand":           {"min": 20,   "max": 30,   "ideal": 25},
            "silt":           {"min": 40,   "max": 50,   "ideal": 45},
            "clay":           {"min": 25,   "max": 35,   "ideal": 30},
        },
        "weight": 1.0,
    },
    "cotton": {
        "name": "Cotton",
        "requirements": {
            "ph":             {"min": 6.5,  "max": 8.0,  "ideal": 7.2},
            "organic_carbon": {"min": 0.6,  "max": 1.2,  "ideal": 0.9},
            "nitrogen":       {"min": 0.1,  "max": 0.2,  "ideal": 0.15},
            "phosphorus":     {"min": 8,    "max": 15,   "ideal": 12},
            "potassium":      {"min": 120,  "max": 200,  "ideal": 160},
            "sand":           {"min": 40,   "max": 50,   "ideal": 45},
            "silt":           {"min": 25,   "max": 35,   "ideal": 30},
            "clay":           {"min": 15,   "max": 25,   "ideal": 20},
        },
        "weight": 1.0,
    },
    "sugarcane": {
        "name": "Sugarcane",
        "requirements": {
            "ph":             {"min": 6.0,  "max": 7.5,  "ideal": 6.8},
            "organic_carbon": {"min": 1.2,  "max": 2.0,  "ideal": 1.6},
            "nitrogen":       {"min": 0.25, "max": 0.35, "ideal": 0.3},
            "phosphorus":     {"min": 20,   "max": 30,   "ideal": 25},
            "potassium":      {"min": 200,  "max": 300,  "ideal": 250},
            "sand":           {"min": 30,   "max": 40,   "ideal": 35},
            "silt":           {"min": 35,   "max": 45,   "ideal": 40},
            "clay":           {"min": 20,   "max": 30,   "ideal": 25},
        },
        "weight": 1.0,
    },
})


def get_crop_soil_requirements() -> dict:
    """Return a private copy of the crop requirements catalog."""
    return copy.deepcopy(CROP_SOIL_REQUIREMENTS)
