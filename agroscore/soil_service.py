"""
agroscore/soil_service.py
-------------------------
Soil Service — returns simulated soil properties for all seven depth bands
based on GPS coordinates.

In production this would call an external API such as:
  - SoilGrids (https://soilgrids.org/) by ISRIC
  - ICAR National Bureau of Soil Survey API

For this implementation, deterministic dummy logic based on Maharashtra
latitude bands is used so the scorers always get consistent values.

Usage:
    from agroscore.soil_service import get_soil_data_by_depth
    soil_by_depth = get_soil_data_by_depth(19.99, 73.78)
"""

from agroscore.catalogs import DEPTHS


# ── Topsoil profile per Maharashtra latitude band ─────────────────────────────
_SOIL_PROFILES: list[tuple[float, str, dict]] = [
    # (minimum latitude, soil type, 0-5cm values)
    (20.5, "Black Cotton", {
        "ph": 7.8, "organic_carbon": 0.62, "nitrogen": 0.18,
        "phosphorus": 14.0, "potassium": 280.0,
        "cec": 38.0, "ecec": 34.0,
        "sand": 18.0, "silt": 27.0, "clay": 55.0, "bulk_density": 1.35,
    }),
    (19.0, "Red Laterite", {
        "ph": 6.5, "organic_carbon": 0.38, "nitrogen": 0.09,
        "phosphorus": 8.0, "potassium": 160.0,
        "cec": 9.0, "ecec": 7.5,
        "sand": 48.0, "silt": 22.0, "clay": 30.0, "bulk_density": 1.45,
    }),
    (17.5, "Alluvial", {
        "ph": 7.2, "organic_carbon": 0.91, "nitrogen": 0.24,
        "phosphorus": 22.0, "potassium": 240.0,
        "cec": 18.0, "ecec": 15.0,
        "sand": 38.0, "silt": 37.0, "clay": 25.0, "bulk_density": 1.30,
    }),
    (float("-inf"), "Sandy Loam", {
        "ph": 6.8, "organic_carbon": 0.28, "nitrogen": 0.07,
        "phosphorus": 12.0, "potassium": 120.0,
        "cec": 7.0, "ecec": 6.0,
        "sand": 62.0, "silt": 23.0, "clay": 15.0, "bulk_density": 1.55,
    }),
]

# Per-band adjustments relative to the topsoil (index = position in DEPTHS)
_ORGANIC_DECAY    = (1.00, 0.85, 0.70, 0.55, 0.45, 0.35, 0.25)
_NUTRIENT_DECAY   = (1.00, 0.90, 0.80, 0.65, 0.55, 0.45, 0.35)
_PH_SHIFT         = (0.00, 0.05, 0.10, 0.15, 0.20, 0.25, 0.30)
_DENSITY_SHIFT    = (0.00, 0.03, 0.06, 0.09, 0.12, 0.15, 0.18)
_CLAY_SHIFT       = (0.0,  1.0,  2.0,  3.0,  4.0,  5.0,  6.0)


def get_default_soil_data() -> dict:
    """Fallback profile: the same neutral values at every depth."""
    defaults = {
        "ph":             7.0,
        "organic_carbon": 2.0,
        "nitrogen":       0.2,
        "cec":            15.0,
        "ecec":           12.0,
        "sand":           40.0,
        "silt":           35.0,
        "clay":           25.0,
        "bulk_density":   1.3,
    }
    return {depth: dict(defaults) for depth in DEPTHS}


def get_soil_type(latitude: float) -> str:
    """Soil classification for a latitude band."""
    lat = float(latitude)
    for min_lat, soil_type, _ in _SOIL_PROFILES:
        if lat >= min_lat:
            return soil_type
    return _SOIL_PROFILES[-1][1]


def get_soil_data_by_depth(latitude: float, longitude: float) -> dict:
    """
    Return simulated soil properties for each of the seven depth bands.

    Latitude bands (Maharashtra, India):
        >= 20.5  → Vidarbha / northern MH  → Black Cotton soil
        >= 19.0  → Nashik / Pune belt      → Red Laterite soil
        >= 17.5  → Konkan / river valleys  → Alluvial soil
        < 17.5   → Southern MH             → Sandy Loam soil

    Args:
        latitude  (float): Decimal-degree latitude.
        longitude (float): Decimal-degree longitude.

    Returns:
        dict: depth label → {property → value} for every band in DEPTHS.
    """
    lat = float(latitude)
    lng = float(longitude)

    topsoil = next(values for min_lat, _, values in _SOIL_PROFILES if lat >= min_lat)

    # Fine-tune pH using the fractional part of longitude (±0.1 variance)
    ph_tweak = (lng % 1.0) * 0.2 - 0.1

    soil_by_depth = {}
    for i, depth in enumerate(DEPTHS):
        clay = min(80.0, topsoil["clay"] + _CLAY_SHIFT[i])
        sand = max(5.0, topsoil["sand"] - _CLAY_SHIFT[i])
        soil_by_depth[depth] = {
            "ph":             round(max(4.5, min(9.0, topsoil["ph"] + ph_tweak + _PH_SHIFT[i])), 2),
            "organic_carbon": round(topsoil["organic_carbon"] * _ORGANIC_DECAY[i], 3),
            "nitrogen":       round(topsoil["nitrogen"] * _NUTRIENT_DECAY[i], 3),
            "phosphorus":     round(topsoil["phosphorus"] * _NUTRIENT_DECAY[i], 2),
            "potassium":      round(topsoil["potassium"] * _NUTRIENT_DECAY[i], 1),
            "cec":            round(topsoil["cec"], 2),
            "ecec":           round(topsoil["ecec"], 2),
            "sand":           round(sand, 1),
            "silt":           round(100.0 - sand - clay, 1),
            "clay":           round(clay, 1),
            "bulk_density":   round(topsoil["bulk_density"] + _DENSITY_SHIFT[i], 2),
        }

    return soil_by_depth
