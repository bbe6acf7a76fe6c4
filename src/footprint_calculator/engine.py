import logging
from typing import Iterable, List, Optional, Sequence

from .constants import MAX_RECOMMENDATIONS, Category
from .models import CategoryInput, EmissionFactors, EmissionsResult, ReferenceValues
from .recommendations import DEFAULT_RULES, RecommendationRule, generate_recommendations
from .utils.calculations import (
    calculate_energy_emissions,
    calculate_transportation_emissions,
    calculate_waste_emissions,
    calculate_food_emissions,
    calculate_lifestyle_emissions,
)
from .audit import audit_logger

logger = logging.getLogger(__name__)


class EmissionsCalculator:
    """
    Maps one questionnaire to an annual footprint and ranked advice.

    Factor table, reference values and rule list are fixed at construction;
    `compute` holds no state between calls and is safe to share across threads.
    """

    def __init__(
        self,
        factors: Optional[EmissionFactors] = None,
        references: Optional[ReferenceValues] = None,
        rules: Optional[Sequence[RecommendationRule]] = None,
        max_recommendations: int = MAX_RECOMMENDATIONS,
        validate: bool = True,
    ):
        if max_recommendations < 0:
            raise ValueError("max_recommendations must be >= 0")
        self.factors = factors or EmissionFactors()
        self.references = references or ReferenceValues()
        self.rules = tuple(DEFAULT_RULES if rules is None else rules)
        self.max_recommendations = max_recommendations
        self.validate = validate

    def compute(self, data: CategoryInput) -> EmissionsResult:
        if self.validate:
            data.validate()

        energy = calculate_energy_emissions(data.energy, self.factors)
        transportation = calculate_transportation_emissions(data.transportation, self.factors)
        waste = calculate_waste_emissions(data.waste, self.factors)
        food = calculate_food_emissions(data.food, self.factors)
        lifestyle = calculate_lifestyle_emissions(data.lifestyle, self.factors)

        total = energy + transportation + waste + food + lifestyle

        totals = {
            Category.ENERGY: energy,
            Category.TRANSPORTATION: transportation,
            Category.WASTE: waste,
            Category.FOOD: food,
            Category.LIFESTYLE: lifestyle,
        }
        recommendations = generate_recommendations(
            data, totals, self.factors, self.rules, self.max_recommendations
        )

        audit_logger.log_calculation(
            context="Total",
            formula="Energy + Transportation + Waste + Food + Lifestyle",
            variables={k.value: round(v, 4) for k, v in totals.items()},
            result=total,
        )
        logger.debug(f"Computed footprint {total:.1f} kgCO2e with {len(recommendations)} recommendations")

        return EmissionsResult(
            total_emissions=total,
            energy_emissions=energy,
            transportation_emissions=transportation,
            waste_emissions=waste,
            food_emissions=food,
            lifestyle_emissions=lifestyle,
            national_average=self.references.national_average,
            global_average=self.references.global_average,
            paris_targets=self.references.paris_targets,
            recommendations=recommendations,
        )

    def compute_many(self, records: Iterable[CategoryInput]) -> List[EmissionsResult]:
        return [self.compute(r) for r in records]


_default_calculator = EmissionsCalculator()


def compute(data: CategoryInput) -> EmissionsResult:
    """Calculate with the built-in factor table and reference values."""
    return _default_calculator.compute(data)
