import sys
import os
import math
from dataclasses import replace

sys.path.append(os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "src"))

import pytest

from footprint_calculator.models import (
    CategoryInput, EnergyInput, TransportationInput, WasteInput, FoodInput, LifestyleInput, EmissionFactors
)
from footprint_calculator.constants import Category, Difficulty, VehicleType, FuelType, DietType
from footprint_calculator.recommendations import (
    DEFAULT_RULES, RecommendationRule, generate_recommendations
)

FACTORS = EmissionFactors()
RULES = {rule.key: rule for rule in DEFAULT_RULES}


def quiet_input(**overrides) -> CategoryInput:
    """Answers that trigger no rule at all."""
    data = CategoryInput(
        energy=EnergyInput(300, 0, 0, 80),
        transportation=TransportationInput(VehicleType.NONE, FuelType.GASOLINE, 0, 5, 0),
        waste=WasteInput(10, 80, 10),
        food=FoodInput(DietType.VEGETARIAN, 0, 0, 0),
        lifestyle=LifestyleInput(3, 3, 800, 2),
    )
    return replace(data, **overrides)


def fired(data, rules=DEFAULT_RULES, limit=5):
    return generate_recommendations(data, {}, FACTORS, rules, limit)


def test_rules_declared_in_fixed_order():
    assert [r.key for r in DEFAULT_RULES] == [
        "renewable_energy", "electric_vehicle", "public_transport",
        "recycling", "reduce_meat", "sustainable_shopping",
    ]


def test_quiet_answers_fire_nothing():
    assert fired(quiet_input()) == ()


def test_renewable_rule():
    rule = RULES["renewable_energy"]
    data = quiet_input(energy=EnergyInput(400, 0, 0, 49.9))
    assert rule.applies(data, {}, FACTORS)
    assert math.isclose(rule.savings(data, {}, FACTORS), 400 * 0.5 * 12 * 0.5)
    assert not rule.applies(quiet_input(energy=EnergyInput(400, 0, 0, 50)), {}, FACTORS)


@pytest.mark.parametrize("fuel, expected", [
    (FuelType.GASOLINE, 100 * (0.404 - 0.1) * 52),
    (FuelType.DIESEL, 100 * (0.429 - 0.1) * 52),
    (FuelType.HYBRID, 100 * (0.202 - 0.1) * 52),
])
def test_electric_vehicle_rule(fuel, expected):
    rule = RULES["electric_vehicle"]
    data = quiet_input(transportation=TransportationInput(VehicleType.CAR, fuel, 100, 5, 0))
    assert rule.applies(data, {}, FACTORS)
    assert math.isclose(rule.savings(data, {}, FACTORS), expected)


def test_electric_vehicle_rule_skips_electric_and_no_vehicle():
    rule = RULES["electric_vehicle"]
    ev = quiet_input(transportation=TransportationInput(VehicleType.CAR, FuelType.ELECTRIC, 100, 5, 0))
    assert not rule.applies(ev, {}, FACTORS)
    assert not rule.applies(quiet_input(), {}, FACTORS)


def test_public_transport_rule():
    rule = RULES["public_transport"]
    data = quiet_input(transportation=TransportationInput(VehicleType.MOTORCYCLE, FuelType.GASOLINE, 50, 2, 0))
    assert rule.applies(data, {}, FACTORS)
    assert math.isclose(rule.savings(data, {}, FACTORS), 50 * 0.2 * 0.404 * 52)
    # Three transit days or more, or no vehicle: nothing to suggest
    three_days = quiet_input(transportation=TransportationInput(VehicleType.CAR, FuelType.GASOLINE, 50, 3, 0))
    assert not rule.applies(three_days, {}, FACTORS)
    no_car = quiet_input(transportation=TransportationInput(VehicleType.NONE, FuelType.GASOLINE, 50, 0, 0))
    assert not rule.applies(no_car, {}, FACTORS)


def test_public_transport_rule_fires_for_electric_cars():
    data = quiet_input(transportation=TransportationInput(VehicleType.CAR, FuelType.ELECTRIC, 100, 0, 0))
    recs = fired(data)
    assert [r.title for r in recs] == ["Use Public Transportation"]
    assert math.isclose(recs[0].potential_savings, 100 * 0.2 * 0.1 * 52)


def test_recycling_rule():
    rule = RULES["recycling"]
    data = quiet_input(waste=WasteInput(25, 69, 0))
    assert rule.applies(data, {}, FACTORS)
    assert math.isclose(rule.savings(data, {}, FACTORS), 25 * 0.5 * 0.2 * 52)
    assert not rule.applies(quiet_input(waste=WasteInput(25, 70, 0)), {}, FACTORS)


def test_meat_rule_ignores_other_food_answers():
    rule = RULES["reduce_meat"]
    a = quiet_input(food=FoodInput(DietType.OMNIVORE, 0, 0, 0))
    b = quiet_input(food=FoodInput(DietType.OMNIVORE, 90, 90, 50))
    assert rule.applies(a, {}, FACTORS)
    assert math.isclose(rule.savings(a, {}, FACTORS), 766.5)
    assert rule.savings(a, {}, FACTORS) == rule.savings(b, {}, FACTORS)
    assert not rule.applies(quiet_input(food=FoodInput(DietType.FLEXITARIAN, 0, 0, 0)), {}, FACTORS)


def test_shopping_rule():
    rule = RULES["sustainable_shopping"]
    data = quiet_input(lifestyle=LifestyleInput(8, 3, 800, 2))
    assert rule.applies(data, {}, FACTORS)
    assert math.isclose(rule.savings(data, {}, FACTORS), 3 * 0.5 * 365 * 0.5)
    assert not rule.applies(quiet_input(lifestyle=LifestyleInput(5, 3, 800, 2)), {}, FACTORS)


def test_equal_savings_keep_declaration_order():
    # No electricity and no waste: both rules fire with zero savings
    data = quiet_input(energy=EnergyInput(0, 0, 0, 0), waste=WasteInput(0, 0, 0))
    recs = fired(data)
    assert [r.category for r in recs] == [Category.ENERGY, Category.WASTE]
    assert all(r.potential_savings == 0 for r in recs)


def test_custom_rules_tie_break():
    def always(data, totals, factors):
        return True

    def flat(data, totals, factors):
        return 10.0

    rules = [
        RecommendationRule(f"r{i}", Category.LIFESTYLE, f"Rule {i}", "", Difficulty.EASY, always, flat)
        for i in range(7)
    ]
    recs = fired(quiet_input(), rules)
    assert [r.title for r in recs] == ["Rule 0", "Rule 1", "Rule 2", "Rule 3", "Rule 4"]


def test_estimators_follow_factor_table():
    factors = replace(FACTORS, diet_omnivore_kgco2_per_day=8.0, diet_flexitarian_kgco2_per_day=5.0)
    data = quiet_input(food=FoodInput(DietType.OMNIVORE, 0, 0, 0))
    recs = generate_recommendations(data, {}, factors)
    assert math.isclose(recs[0].potential_savings, 3.0 * 365)


def test_rule_output_metadata():
    data = quiet_input(transportation=TransportationInput(VehicleType.TRUCK, FuelType.DIESEL, 300, 0, 0))
    recs = fired(data)
    assert [(r.title, r.difficulty) for r in recs] == [
        ("Consider an Electric Vehicle", Difficulty.HARD),
        ("Use Public Transportation", Difficulty.EASY),
    ]
    assert recs[0].description.startswith("Your next vehicle purchase could be electric")


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
