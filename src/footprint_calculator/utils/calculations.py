from typing import Dict

from ..constants import MONTHS_PER_YEAR, WEEKS_PER_YEAR, DAYS_PER_YEAR
from ..models import (
    EmissionFactors, EnergyInput, TransportationInput, WasteInput, FoodInput, LifestyleInput
)
from ..audit import audit_logger
import logging

logger = logging.getLogger(__name__)

DEFAULT_FACTORS = EmissionFactors()


def energy_terms(data: EnergyInput, factors: EmissionFactors = DEFAULT_FACTORS) -> Dict[str, float]:
    """
    Annual household energy emissions split into electricity, natural gas and heating oil.
    The renewable share discounts the electricity term only.
    """
    electricity = (
        data.electricity_usage * factors.electricity_kgco2_per_kwh * MONTHS_PER_YEAR
        * (1 - data.renewable_percentage / 100)
    )
    natural_gas = data.natural_gas_usage * factors.natural_gas_kgco2_per_therm * MONTHS_PER_YEAR
    heating_oil = data.heating_oil_usage * factors.heating_oil_kgco2_per_gallon * MONTHS_PER_YEAR
    return {
        "electricity": electricity,
        "natural_gas": natural_gas,
        "heating_oil": heating_oil,
    }


def calculate_energy_emissions(data: EnergyInput, factors: EmissionFactors = DEFAULT_FACTORS) -> float:
    terms = energy_terms(data, factors)
    total = terms["electricity"] + terms["natural_gas"] + terms["heating_oil"]

    audit_logger.log_calculation(
        context="Energy",
        formula="kWh*EF_elec*12*(1-Renewable/100) + Therms*EF_gas*12 + Gallons*EF_oil*12",
        variables={
            "kWh_month": data.electricity_usage,
            "Renewable_pct": data.renewable_percentage,
            "Therms_month": data.natural_gas_usage,
            "Gallons_month": data.heating_oil_usage,
            "EF_elec": factors.electricity_kgco2_per_kwh,
            "EF_gas": factors.natural_gas_kgco2_per_therm,
            "EF_oil": factors.heating_oil_kgco2_per_gallon,
        },
        result=total,
    )
    return total


def transportation_terms(
    data: TransportationInput, factors: EmissionFactors = DEFAULT_FACTORS
) -> Dict[str, float]:
    """
    Annual travel emissions: private vehicle, public transport and flights.
    Terms are independent; transit days do not reduce vehicle miles.
    """
    vehicle = 0.0
    if data.has_vehicle:
        vehicle = data.miles_driven * factors.per_mile(data.fuel_type) * WEEKS_PER_YEAR

    public_transport = (
        data.public_transport_frequency * factors.public_transport_miles_per_day
        * factors.public_transport_kgco2_per_mile * WEEKS_PER_YEAR
    )
    flights = data.flights_per_year * factors.flight_hours_per_flight * factors.flight_kgco2_per_hour
    return {
        "vehicle": vehicle,
        "public_transport": public_transport,
        "flights": flights,
    }


def calculate_transportation_emissions(
    data: TransportationInput, factors: EmissionFactors = DEFAULT_FACTORS
) -> float:
    terms = transportation_terms(data, factors)
    total = terms["vehicle"] + terms["public_transport"] + terms["flights"]

    audit_logger.log_calculation(
        context="Transportation",
        formula="Miles*EF_fuel*52 + Days*MilesPerDay*EF_transit*52 + Flights*Hours*EF_flight",
        variables={
            "Vehicle": data.vehicle_type.value,
            "Fuel": data.fuel_type.value,
            "Miles_week": data.miles_driven,
            "Transit_days": data.public_transport_frequency,
            "Flights_year": data.flights_per_year,
            "Vehicle_kg": round(terms["vehicle"], 4),
            "Transit_kg": round(terms["public_transport"], 4),
            "Flights_kg": round(terms["flights"], 4),
        },
        result=total,
    )
    return total


def net_waste_fraction(data: WasteInput) -> float:
    """Share of waste going to landfill. Not clamped: recycling + compost > 100 gives a negative share."""
    return 1 - data.recycling_percentage / 100 - data.compost_percentage / 100


def calculate_waste_emissions(data: WasteInput, factors: EmissionFactors = DEFAULT_FACTORS) -> float:
    fraction = net_waste_fraction(data)
    if fraction < 0:
        logger.debug(f"Recycling + compost exceed 100% (net fraction {fraction:.3f}); waste term is negative.")
    total = data.waste_produced * factors.waste_kgco2_per_lb * fraction * WEEKS_PER_YEAR

    audit_logger.log_calculation(
        context="Waste",
        formula="Lbs_week*EF_waste*(1-Recycling/100-Compost/100)*52",
        variables={
            "Lbs_week": data.waste_produced,
            "Recycling_pct": data.recycling_percentage,
            "Compost_pct": data.compost_percentage,
            "EF_waste": factors.waste_kgco2_per_lb,
        },
        result=total,
    )
    return total


def food_multiplier(data: FoodInput, factors: EmissionFactors = DEFAULT_FACTORS) -> float:
    return (
        1
        - data.local_food_percentage * factors.local_food_reduction_per_pct
        - data.organic_food_percentage * factors.organic_food_reduction_per_pct
        + data.food_waste_percentage * factors.food_waste_addition_per_pct
    )


def calculate_food_emissions(data: FoodInput, factors: EmissionFactors = DEFAULT_FACTORS) -> float:
    base = factors.per_day(data.diet_type)
    multiplier = food_multiplier(data, factors)
    total = base * multiplier * DAYS_PER_YEAR

    audit_logger.log_calculation(
        context="Food",
        formula="Diet_kg_day*(1-Local*r_local-Organic*r_organic+Waste*a_waste)*365",
        variables={
            "Diet": data.diet_type.value,
            "Diet_kg_day": base,
            "Local_pct": data.local_food_percentage,
            "Organic_pct": data.organic_food_percentage,
            "FoodWaste_pct": data.food_waste_percentage,
            "Multiplier": round(multiplier, 4),
        },
        result=total,
    )
    return total


def lifestyle_terms(data: LifestyleInput, factors: EmissionFactors = DEFAULT_FACTORS) -> Dict[str, float]:
    # Home emissions are shared across the household; never divide by less than one person.
    members = max(1, data.household_members)
    return {
        "shopping": data.shopping_frequency * factors.shopping_kgco2_per_point_day * DAYS_PER_YEAR,
        "electronics": data.electronics_usage * factors.electronics_kgco2_per_point_day * DAYS_PER_YEAR,
        "home": data.home_size * factors.home_kgco2_per_sqft / members,
    }


def calculate_lifestyle_emissions(data: LifestyleInput, factors: EmissionFactors = DEFAULT_FACTORS) -> float:
    terms = lifestyle_terms(data, factors)
    total = terms["shopping"] + terms["electronics"] + terms["home"]

    audit_logger.log_calculation(
        context="Lifestyle",
        formula="Shopping*EF_shop*365 + Electronics*EF_elec*365 + SqFt*EF_home/max(1,Members)",
        variables={
            "Shopping": data.shopping_frequency,
            "Electronics": data.electronics_usage,
            "SqFt": data.home_size,
            "Members": data.household_members,
        },
        result=total,
    )
    return total
