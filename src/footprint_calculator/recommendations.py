import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence, Tuple

from .constants import (
    MONTHS_PER_YEAR, WEEKS_PER_YEAR, DAYS_PER_YEAR, MAX_RECOMMENDATIONS,
    RENEWABLE_THRESHOLD_PCT, RENEWABLE_ELECTRICITY_CUT, PUBLIC_TRANSPORT_THRESHOLD_DAYS,
    DRIVING_CUT, RECYCLING_THRESHOLD_PCT, RECYCLING_INCREASE, SHOPPING_THRESHOLD, SHOPPING_CUT,
    Category, Difficulty, DietType, FuelType
)
from .models import CategoryInput, EmissionFactors, Recommendation

logger = logging.getLogger(__name__)

# Predicates and estimators see the questionnaire, the category subtotals and the factor table.
Predicate = Callable[[CategoryInput, Dict[Category, float], EmissionFactors], bool]
Estimator = Callable[[CategoryInput, Dict[Category, float], EmissionFactors], float]


@dataclass(frozen=True)
class RecommendationRule:
    """
    One piece of advice: fires when `applies` is true, with `savings` as the
    estimated annual reduction (kg CO2e).
    """
    key: str
    category: Category
    title: str
    description: str
    difficulty: Difficulty
    applies: Predicate
    savings: Estimator

    def evaluate(
        self, data: CategoryInput, totals: Dict[Category, float], factors: EmissionFactors
    ) -> Recommendation:
        return Recommendation(
            category=self.category,
            title=self.title,
            description=self.description,
            potential_savings=self.savings(data, totals, factors),
            difficulty=self.difficulty,
        )


# ============================================================================
# RULES
# ============================================================================

def _low_renewable_share(data, totals, factors) -> bool:
    return data.energy.renewable_percentage < RENEWABLE_THRESHOLD_PCT


def _renewable_savings(data, totals, factors) -> float:
    # Halving the grid electricity term
    return (
        data.energy.electricity_usage * factors.electricity_kgco2_per_kwh * MONTHS_PER_YEAR
        * RENEWABLE_ELECTRICITY_CUT
    )


def _drives_combustion_vehicle(data, totals, factors) -> bool:
    t = data.transportation
    return t.has_vehicle and t.fuel_type is not FuelType.ELECTRIC


def _electric_vehicle_savings(data, totals, factors) -> float:
    t = data.transportation
    delta = factors.per_mile(t.fuel_type) - factors.per_mile(FuelType.ELECTRIC)
    return t.miles_driven * delta * WEEKS_PER_YEAR


def _rarely_uses_transit(data, totals, factors) -> bool:
    t = data.transportation
    return t.public_transport_frequency < PUBLIC_TRANSPORT_THRESHOLD_DAYS and t.has_vehicle


def _transit_savings(data, totals, factors) -> float:
    t = data.transportation
    return t.miles_driven * DRIVING_CUT * factors.per_mile(t.fuel_type) * WEEKS_PER_YEAR


def _low_recycling(data, totals, factors) -> bool:
    return data.waste.recycling_percentage < RECYCLING_THRESHOLD_PCT


def _recycling_savings(data, totals, factors) -> float:
    return data.waste.waste_produced * factors.waste_kgco2_per_lb * RECYCLING_INCREASE * WEEKS_PER_YEAR


def _eats_meat(data, totals, factors) -> bool:
    return data.food.diet_type is DietType.OMNIVORE


def _meat_savings(data, totals, factors) -> float:
    # Fixed omnivore -> flexitarian step, independent of the other food answers
    delta = factors.per_day(DietType.OMNIVORE) - factors.per_day(DietType.FLEXITARIAN)
    return delta * DAYS_PER_YEAR


def _shops_often(data, totals, factors) -> bool:
    return data.lifestyle.shopping_frequency > SHOPPING_THRESHOLD


def _shopping_savings(data, totals, factors) -> float:
    excess = data.lifestyle.shopping_frequency - SHOPPING_THRESHOLD
    return excess * factors.shopping_kgco2_per_point_day * DAYS_PER_YEAR * SHOPPING_CUT


# Declaration order is the tie-break for equal savings.
DEFAULT_RULES: Tuple[RecommendationRule, ...] = (
    RecommendationRule(
        key="renewable_energy",
        category=Category.ENERGY,
        title="Switch to Renewable Energy",
        description="Consider switching to a renewable energy provider or installing solar panels.",
        difficulty=Difficulty.MEDIUM,
        applies=_low_renewable_share,
        savings=_renewable_savings,
    ),
    RecommendationRule(
        key="electric_vehicle",
        category=Category.TRANSPORTATION,
        title="Consider an Electric Vehicle",
        description="Your next vehicle purchase could be electric to significantly reduce emissions.",
        difficulty=Difficulty.HARD,
        applies=_drives_combustion_vehicle,
        savings=_electric_vehicle_savings,
    ),
    RecommendationRule(
        key="public_transport",
        category=Category.TRANSPORTATION,
        title="Use Public Transportation",
        description="Try using public transportation more frequently to reduce driving emissions.",
        difficulty=Difficulty.EASY,
        applies=_rarely_uses_transit,
        savings=_transit_savings,
    ),
    RecommendationRule(
        key="recycling",
        category=Category.WASTE,
        title="Increase Recycling",
        description="Try to recycle more of your waste to reduce landfill emissions.",
        difficulty=Difficulty.EASY,
        applies=_low_recycling,
        savings=_recycling_savings,
    ),
    RecommendationRule(
        key="reduce_meat",
        category=Category.FOOD,
        title="Reduce Meat Consumption",
        description="Try having meat-free days to reduce your dietary carbon footprint.",
        difficulty=Difficulty.MEDIUM,
        applies=_eats_meat,
        savings=_meat_savings,
    ),
    RecommendationRule(
        key="sustainable_shopping",
        category=Category.LIFESTYLE,
        title="Shop More Sustainably",
        description="Try buying less and choosing sustainable, long-lasting products.",
        difficulty=Difficulty.MEDIUM,
        applies=_shops_often,
        savings=_shopping_savings,
    ),
)


def generate_recommendations(
    data: CategoryInput,
    totals: Dict[Category, float],
    factors: EmissionFactors,
    rules: Sequence[RecommendationRule] = DEFAULT_RULES,
    limit: int = MAX_RECOMMENDATIONS,
) -> Tuple[Recommendation, ...]:
    """
    Evaluate every rule, rank the ones that fire by potential savings (highest first)
    and keep the first `limit`. Python's sort is stable, so equal savings keep rule order.
    """
    fired: List[Recommendation] = []
    for rule in rules:
        if rule.applies(data, totals, factors):
            fired.append(rule.evaluate(data, totals, factors))

    ranked = sorted(fired, key=lambda r: r.potential_savings, reverse=True)
    if len(ranked) > limit:
        logger.debug(f"{len(ranked)} recommendations fired; keeping top {limit}.")
    return tuple(ranked[:limit])
