from .models import (
    CategoryInput,
    EnergyInput,
    TransportationInput,
    WasteInput,
    FoodInput,
    LifestyleInput,
    EmissionFactors,
    ReferenceValues,
    EmissionsResult,
    Recommendation
)
from .constants import (
    Category,
    VehicleType,
    FuelType,
    DietType,
    Difficulty
)
from .exceptions import InvalidInputError, InvalidEnumValue, InvalidRange, ConfigurationError
from .engine import EmissionsCalculator, compute

__version__ = "0.1.0"

__all__ = [
    "CategoryInput",
    "EnergyInput",
    "TransportationInput",
    "WasteInput",
    "FoodInput",
    "LifestyleInput",
    "EmissionFactors",
    "ReferenceValues",
    "EmissionsResult",
    "Recommendation",
    "Category",
    "VehicleType",
    "FuelType",
    "DietType",
    "Difficulty",
    "InvalidInputError",
    "InvalidEnumValue",
    "InvalidRange",
    "ConfigurationError",
    "EmissionsCalculator",
    "compute"
]
