"""
AgroScore scoring engine — soil, crop suitability and weather risk scoring
feeding a farmer credit score and loan-eligibility tier.
"""

__version__ = "0.1.0"
