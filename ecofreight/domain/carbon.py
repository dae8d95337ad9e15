"""
Carbon footprint and sustainability rules.

The recommendation table is a fixed stub keyed on transport mode; it does not
model routes or emissions beyond the per-mode factors below.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

# g CO2 per ton-km
EMISSION_FACTORS: dict[str, float] = {
    "truck": 62.0,
    "rail": 22.0,
    "ship": 8.0,
    "air": 602.0,
    "multi-modal": 40.0,
}

# 0-100, higher is greener
MODE_SUSTAINABILITY_WEIGHTS: dict[str, int] = {
    "rail": 90,
    "ship": 70,
    "multi-modal": 60,
    "truck": 40,
    "air": 20,
}
UNKNOWN_MODE_WEIGHT = 50

# share of the footprint assumed saved against the industry average
ESTIMATED_SAVINGS_RATIO = 0.3


def carbon_footprint_kg(transport_type: str, weight_kg: Optional[float], distance_km: float) -> float:
    factor = EMISSION_FACTORS[transport_type]
    tons = (weight_kg or 0.0) / 1000
    return round(factor * tons * distance_km / 1000, 2)


def sustainability_score(transport_types: Iterable[str]) -> int:
    weights = [MODE_SUSTAINABILITY_WEIGHTS.get(t, UNKNOWN_MODE_WEIGHT) for t in transport_types]
    if not weights:
        return 0
    return round(sum(weights) / len(weights))


@dataclass(frozen=True)
class RecommendationRule:
    title: str
    description: str
    carbon_ratio: float
    cost_per_km: Optional[float]

    def carbon_savings(self, footprint: float) -> float:
        return round(footprint * self.carbon_ratio, 2)

    def cost_savings(self, distance_km: float) -> Optional[float]:
        if self.cost_per_km is None:
            return None
        return float(round(distance_km * self.cost_per_km))


MODE_RULES: dict[str, tuple[RecommendationRule, ...]] = {
    "air": (
        RecommendationRule(
            "Switch to rail transport",
            "Switching from air freight to rail can reduce carbon emissions by up to 70% for your route.",
            0.7, 2.5,
        ),
    ),
    "truck": (
        RecommendationRule(
            "Optimize truck routes",
            "Optimizing truck routes can save up to 25% in fuel consumption and emissions.",
            0.25, 0.8,
        ),
        RecommendationRule(
            "Consolidate shipments",
            "Combining multiple shipments into fewer trucks can reduce emissions and costs.",
            0.3, 1.2,
        ),
    ),
}

GENERAL_RULES: tuple[RecommendationRule, ...] = (
    RecommendationRule(
        "Use eco-friendly packaging",
        "Switching to biodegradable packaging can reduce your environmental impact.",
        0.1, None,
    ),
)


def recommendation_rules(transport_type: str) -> tuple[RecommendationRule, ...]:
    return MODE_RULES.get(transport_type, ()) + GENERAL_RULES
