import sys
import os
import math
from dataclasses import replace

sys.path.append(os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "src"))

import numpy as np
import pytest

from footprint_calculator import (
    CategoryInput, EnergyInput, TransportationInput, WasteInput, FoodInput, LifestyleInput,
    EmissionFactors, ReferenceValues, EmissionsCalculator, compute,
    InvalidInputError, InvalidEnumValue, InvalidRange, Category, VehicleType, FuelType, DietType
)

TOL = 1e-9


def minimal_input(**overrides) -> CategoryInput:
    """All-zero answers: no vehicle, vegan, lowest lifestyle scores."""
    data = CategoryInput(
        energy=EnergyInput(0, 0, 0, 0),
        transportation=TransportationInput(VehicleType.NONE, FuelType.GASOLINE, 0, 0, 0),
        waste=WasteInput(0, 0, 0),
        food=FoodInput(DietType.VEGAN, 0, 0, 0),
        lifestyle=LifestyleInput(1, 1, 0, 1),
    )
    return replace(data, **overrides)


def test_minimal_answers():
    r = compute(minimal_input())
    assert math.isclose(r.food_emissions, 1058.5, abs_tol=TOL)
    assert math.isclose(r.lifestyle_emissions, 292.0, abs_tol=TOL)
    assert r.energy_emissions == 0.0
    assert r.transportation_emissions == 0.0
    assert r.waste_emissions == 0.0
    assert math.isclose(r.total_emissions, 1350.5, abs_tol=TOL)


def test_default_answers():
    r = compute(CategoryInput.default())
    assert math.isclose(r.energy_emissions, 6180.0, abs_tol=TOL)
    assert math.isclose(r.transportation_emissions, 200 * 0.404 * 52 + 1200, abs_tol=TOL)
    assert math.isclose(r.waste_emissions, 364.0, abs_tol=TOL)
    assert math.isclose(r.food_emissions, 7.4 * 1.13 * 365, abs_tol=TOL)
    assert math.isclose(r.lifestyle_emissions, 1463.75, abs_tol=TOL)
    assert math.isclose(r.total_emissions, 16461.48, abs_tol=1e-6)


@pytest.mark.parametrize("data", [
    CategoryInput.default(),
    minimal_input(),
    minimal_input(transportation=TransportationInput(VehicleType.TRUCK, FuelType.DIESEL, 450, 2, 7)),
    minimal_input(waste=WasteInput(35, 70, 50)),
])
def test_total_is_exact_sum_of_categories(data):
    r = compute(data)
    assert r.total_emissions == (
        r.energy_emissions + r.transportation_emissions + r.waste_emissions
        + r.food_emissions + r.lifestyle_emissions
    )


def test_reference_values_are_fixed():
    for data in (CategoryInput.default(), minimal_input()):
        r = compute(data)
        assert (r.national_average, r.global_average, r.paris_targets) == (16000, 5000, 3000)


def test_compute_is_idempotent():
    data = CategoryInput.default()
    assert compute(data) == compute(data)


def test_omnivore_without_adjustments():
    r = compute(minimal_input(food=FoodInput(DietType.OMNIVORE, 0, 0, 0)))
    assert math.isclose(r.food_emissions, 2701.0, abs_tol=TOL)
    meat = [rec for rec in r.recommendations if rec.category is Category.FOOD]
    assert len(meat) == 1
    assert meat[0].title == "Reduce Meat Consumption"
    assert math.isclose(meat[0].potential_savings, 766.5, abs_tol=TOL)


def test_zero_household_members_does_not_divide_by_zero():
    r = compute(minimal_input(lifestyle=LifestyleInput(1, 1, 1500, 0)))
    assert math.isfinite(r.lifestyle_emissions)
    assert math.isclose(r.lifestyle_emissions, 292.0 + 7.5, abs_tol=TOL)


def test_no_vehicle_ignores_miles_and_fuel():
    a = compute(minimal_input(transportation=TransportationInput("none", "diesel", 900, 0, 0)))
    b = compute(minimal_input(transportation=TransportationInput("none", "electric", 0, 0, 0)))
    assert a.transportation_emissions == 0.0
    assert a.transportation_emissions == b.transportation_emissions


def test_recommendations_sorted_and_capped():
    data = replace(CategoryInput.default(), lifestyle=LifestyleInput(10, 5, 1500, 2))
    r = compute(data)
    assert len(r.recommendations) == 5
    savings = [rec.potential_savings for rec in r.recommendations]
    assert savings == sorted(savings, reverse=True)
    # All six rules fire; the smallest (recycling, 104 kg) is dropped
    assert "Increase Recycling" not in [rec.title for rec in r.recommendations]


def test_alternative_factors_and_references():
    calc = EmissionsCalculator(
        factors=EmissionFactors(electricity_kgco2_per_kwh=0.25),
        references=ReferenceValues(national_average=14000, global_average=4700, paris_targets=2300),
    )
    r = calc.compute(CategoryInput.default())
    assert math.isclose(r.energy_emissions, 1500 + 3180, abs_tol=TOL)
    assert r.national_average == 14000
    renew = [rec for rec in r.recommendations if rec.category is Category.ENERGY][0]
    assert math.isclose(renew.potential_savings, 750.0, abs_tol=TOL)


def test_recommendation_cap_is_configurable():
    calc = EmissionsCalculator(max_recommendations=2)
    assert len(calc.compute(CategoryInput.default()).recommendations) == 2


def test_compute_many():
    calc = EmissionsCalculator()
    results = calc.compute_many([CategoryInput.default(), minimal_input()])
    assert [round(r.total_emissions, 2) for r in results] == [16461.48, 1350.5]


def test_result_serialisation():
    d = compute(CategoryInput.default()).to_dict()
    assert d["recommendations"][0]["title"] == "Consider an Electric Vehicle"
    assert d["recommendations"][0]["difficulty"] == "hard"
    assert d["recommendations"][0]["category"] == "transportation"
    assert d["paris_targets"] == 3000


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def test_unknown_fuel_rejected_at_construction():
    with pytest.raises(InvalidEnumValue) as exc:
        TransportationInput("car", "kerosene", 100, 0, 0)
    assert exc.value.field == "transportation.fuel_type"


def test_unknown_diet_rejected_at_construction():
    with pytest.raises(InvalidEnumValue) as exc:
        FoodInput("pescatarian", 0, 0, 0)
    assert exc.value.field == "food.diet_type"


def test_enum_values_are_case_insensitive():
    t = TransportationInput("suv", "Hybrid", 10, 0, 0)
    assert t.vehicle_type is VehicleType.SUV
    assert t.fuel_type is FuelType.HYBRID


@pytest.mark.parametrize("overrides, field", [
    ({"energy": EnergyInput(500, 0, 0, 150)}, "energy.renewable_percentage"),
    ({"energy": EnergyInput(-1, 0, 0, 0)}, "energy.electricity_usage"),
    ({"transportation": TransportationInput("car", "gasoline", 10, 8, 0)}, "transportation.public_transport_frequency"),
    ({"waste": WasteInput(10, 0, 101)}, "waste.compost_percentage"),
    ({"food": FoodInput("vegan", float("nan"), 0, 0)}, "food.local_food_percentage"),
    ({"lifestyle": LifestyleInput(11, 1, 0, 1)}, "lifestyle.shopping_frequency"),
    ({"lifestyle": LifestyleInput(1, 1, 0, -1)}, "lifestyle.household_members"),
    ({"lifestyle": LifestyleInput(1, 1, float("inf"), 1)}, "lifestyle.home_size"),
])
def test_out_of_range_values_are_rejected(overrides, field):
    with pytest.raises(InvalidRange) as exc:
        compute(minimal_input(**overrides))
    assert exc.value.field == field
    assert isinstance(exc.value, InvalidInputError)
    assert isinstance(exc.value, ValueError)


def test_recycling_plus_compost_over_100_is_accepted():
    r = compute(minimal_input(waste=WasteInput(20, 70, 50)))
    assert r.waste_emissions < 0


def test_numpy_numbers_are_accepted():
    data = minimal_input(energy=EnergyInput(np.int64(500), np.float64(0), 0, np.int64(0)))
    r = compute(data)
    assert math.isclose(r.energy_emissions, 3000.0, abs_tol=TOL)


def test_numpy_bool_is_not_a_number():
    with pytest.raises(InvalidRange):
        compute(minimal_input(lifestyle=LifestyleInput(1, 1, 0, np.bool_(True))))


def test_bare_record_is_the_lowest_impact_household():
    bare = CategoryInput()
    assert bare.food.diet_type is DietType.VEGAN
    assert bare == minimal_input()
    r = compute(bare)
    assert math.isclose(r.total_emissions, 1350.5, abs_tol=TOL)
    assert Category.FOOD not in [rec.category for rec in r.recommendations]


def test_validation_can_be_turned_off():
    calc = EmissionsCalculator(validate=False)
    r = calc.compute(minimal_input(energy=EnergyInput(100, 0, 0, 200)))
    # 100 kWh * 0.5 * 12 * (1 - 2)
    assert math.isclose(r.energy_emissions, -600.0, abs_tol=TOL)


def test_negative_recommendation_cap_rejected():
    with pytest.raises(ValueError):
        EmissionsCalculator(max_recommendations=-1)


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
