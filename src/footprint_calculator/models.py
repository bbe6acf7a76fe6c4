import math
import numbers
import re
from dataclasses import dataclass, field, fields, asdict
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Tuple, Type

from .constants import (
    EF_ELECTRICITY_KGCO2_PER_KWH, EF_NATURAL_GAS_KGCO2_PER_THERM, EF_HEATING_OIL_KGCO2_PER_GALLON,
    EF_CAR_GASOLINE_KGCO2_PER_MILE, EF_CAR_DIESEL_KGCO2_PER_MILE, EF_CAR_HYBRID_KGCO2_PER_MILE,
    EF_CAR_ELECTRIC_KGCO2_PER_MILE, EF_PUBLIC_TRANSPORT_KGCO2_PER_MILE, PUBLIC_TRANSPORT_MILES_PER_DAY,
    EF_FLIGHT_KGCO2_PER_HOUR, FLIGHT_HOURS_PER_FLIGHT, EF_WASTE_KGCO2_PER_LB,
    DIET_OMNIVORE_KGCO2_PER_DAY, DIET_FLEXITARIAN_KGCO2_PER_DAY, DIET_VEGETARIAN_KGCO2_PER_DAY,
    DIET_VEGAN_KGCO2_PER_DAY, LOCAL_FOOD_REDUCTION_PER_PCT, ORGANIC_FOOD_REDUCTION_PER_PCT,
    FOOD_WASTE_ADDITION_PER_PCT, EF_SHOPPING_KGCO2_PER_POINT_DAY, EF_ELECTRONICS_KGCO2_PER_POINT_DAY,
    EF_HOME_KGCO2_PER_SQFT, NATIONAL_AVERAGE_KGCO2, GLOBAL_AVERAGE_KGCO2, PARIS_TARGET_KGCO2,
    Category, VehicleType, FuelType, DietType, Difficulty
)
from .exceptions import InvalidEnumValue, InvalidRange

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")

PERCENT = (0.0, 100.0)
NON_NEGATIVE = (0.0, math.inf)
SCALE_1_10 = (1.0, 10.0)


def to_snake_case(name: str) -> str:
    """electricityUsage -> electricity_usage. Names already in snake_case pass through."""
    return _CAMEL_RE.sub("_", name).lower()


def coerce_enum(enum_cls: Type[Enum], value: Any, field_path: str) -> Enum:
    """
    Resolve `value` to a member of `enum_cls`.
    Accepts members, their values, or a case-insensitive match on the value.
    """
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        text = value.strip()
        for member in enum_cls:
            if text == member.value or text.lower() == member.value.lower():
                return member
    allowed = ", ".join(m.value for m in enum_cls)
    raise InvalidEnumValue(field_path, value, f"expected one of [{allowed}]")


def check_range(value: Any, bounds: Tuple[float, float], field_path: str) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidRange(field_path, value, "expected a number")
    if not math.isfinite(value):
        raise InvalidRange(field_path, value, "expected a finite number")
    lo, hi = bounds
    if value < lo or value > hi:
        if hi == math.inf:
            raise InvalidRange(field_path, value, f"must be >= {lo:g}")
        raise InvalidRange(field_path, value, f"must be between {lo:g} and {hi:g}")


class _CategoryRecord:
    """
    Shared behaviour for the per-category input records:
    enum coercion at construction, range checks on demand.
    """
    CATEGORY: ClassVar[Category]
    ENUM_FIELDS: ClassVar[Dict[str, Type[Enum]]] = {}
    RANGES: ClassVar[Dict[str, Tuple[float, float]]] = {}

    def __post_init__(self):
        for name, enum_cls in self.ENUM_FIELDS.items():
            member = coerce_enum(enum_cls, getattr(self, name), self._path(name))
            object.__setattr__(self, name, member)

    def _path(self, name: str) -> str:
        return f"{self.CATEGORY.value}.{name}"

    def validate(self) -> None:
        for name, bounds in self.RANGES.items():
            check_range(getattr(self, name), bounds, self._path(name))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]):
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = to_snake_case(str(key))
            if name in known:
                kwargs[name] = value
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            out[f.name] = value.value if isinstance(value, Enum) else value
        return out


@dataclass(frozen=True)
class EnergyInput(_CategoryRecord):
    electricity_usage: float = 0.0       # kWh per month
    natural_gas_usage: float = 0.0       # therms per month
    heating_oil_usage: float = 0.0       # gallons per month
    renewable_percentage: float = 0.0    # % of electricity from renewables

    CATEGORY: ClassVar[Category] = Category.ENERGY
    RANGES: ClassVar[Dict[str, Tuple[float, float]]] = {
        "electricity_usage": NON_NEGATIVE,
        "natural_gas_usage": NON_NEGATIVE,
        "heating_oil_usage": NON_NEGATIVE,
        "renewable_percentage": PERCENT,
    }


@dataclass(frozen=True)
class TransportationInput(_CategoryRecord):
    vehicle_type: VehicleType = VehicleType.NONE
    fuel_type: FuelType = FuelType.GASOLINE
    miles_driven: float = 0.0                # miles per week
    public_transport_frequency: float = 0.0  # days per week
    flights_per_year: float = 0.0

    CATEGORY: ClassVar[Category] = Category.TRANSPORTATION
    ENUM_FIELDS: ClassVar[Dict[str, Type[Enum]]] = {
        "vehicle_type": VehicleType,
        "fuel_type": FuelType,
    }
    RANGES: ClassVar[Dict[str, Tuple[float, float]]] = {
        "miles_driven": NON_NEGATIVE,
        "public_transport_frequency": (0.0, 7.0),
        "flights_per_year": NON_NEGATIVE,
    }

    @property
    def has_vehicle(self) -> bool:
        return self.vehicle_type is not VehicleType.NONE


@dataclass(frozen=True)
class WasteInput(_CategoryRecord):
    """
    recycling_percentage + compost_percentage is not required to stay <= 100;
    each share is checked on its own.
    """
    waste_produced: float = 0.0        # lbs per week
    recycling_percentage: float = 0.0
    compost_percentage: float = 0.0

    CATEGORY: ClassVar[Category] = Category.WASTE
    RANGES: ClassVar[Dict[str, Tuple[float, float]]] = {
        "waste_produced": NON_NEGATIVE,
        "recycling_percentage": PERCENT,
        "compost_percentage": PERCENT,
    }


@dataclass(frozen=True)
class FoodInput(_CategoryRecord):
    diet_type: DietType = DietType.VEGAN
    local_food_percentage: float = 0.0
    organic_food_percentage: float = 0.0
    food_waste_percentage: float = 0.0

    CATEGORY: ClassVar[Category] = Category.FOOD
    ENUM_FIELDS: ClassVar[Dict[str, Type[Enum]]] = {"diet_type": DietType}
    RANGES: ClassVar[Dict[str, Tuple[float, float]]] = {
        "local_food_percentage": PERCENT,
        "organic_food_percentage": PERCENT,
        "food_waste_percentage": PERCENT,
    }


@dataclass(frozen=True)
class LifestyleInput(_CategoryRecord):
    """
    household_members is only checked for >= 0: the home-size term floors
    the divisor at one person.
    """
    shopping_frequency: float = 1.0    # 1-10 scale
    electronics_usage: float = 1.0     # 1-10 scale
    home_size: float = 0.0             # square feet
    household_members: float = 1.0

    CATEGORY: ClassVar[Category] = Category.LIFESTYLE
    RANGES: ClassVar[Dict[str, Tuple[float, float]]] = {
        "shopping_frequency": SCALE_1_10,
        "electronics_usage": SCALE_1_10,
        "home_size": NON_NEGATIVE,
        "household_members": NON_NEGATIVE,
    }


@dataclass(frozen=True)
class CategoryInput:
    """
    Complete questionnaire record: one sub-record per category.
    Bare sub-records describe the lowest-impact household (no vehicle, vegan,
    nothing used); `default()` holds the questionnaire's starting answers.
    """
    energy: EnergyInput = field(default_factory=EnergyInput)
    transportation: TransportationInput = field(default_factory=TransportationInput)
    waste: WasteInput = field(default_factory=WasteInput)
    food: FoodInput = field(default_factory=FoodInput)
    lifestyle: LifestyleInput = field(default_factory=LifestyleInput)

    SECTIONS: ClassVar[Dict[str, type]] = {
        "energy": EnergyInput,
        "transportation": TransportationInput,
        "waste": WasteInput,
        "food": FoodInput,
        "lifestyle": LifestyleInput,
    }

    def validate(self) -> None:
        """Raise InvalidRange for the first field outside its allowed interval."""
        for name in self.SECTIONS:
            getattr(self, name).validate()

    @classmethod
    def default(cls) -> "CategoryInput":
        """Starting values shown to a respondent before they answer anything."""
        return cls(
            energy=EnergyInput(
                electricity_usage=500.0,
                natural_gas_usage=50.0,
                heating_oil_usage=0.0,
                renewable_percentage=0.0,
            ),
            transportation=TransportationInput(
                vehicle_type=VehicleType.CAR,
                fuel_type=FuelType.GASOLINE,
                miles_driven=200.0,
                public_transport_frequency=0.0,
                flights_per_year=2.0,
            ),
            waste=WasteInput(waste_produced=20.0, recycling_percentage=30.0, compost_percentage=0.0),
            food=FoodInput(
                diet_type=DietType.OMNIVORE,
                local_food_percentage=10.0,
                organic_food_percentage=10.0,
                food_waste_percentage=20.0,
            ),
            lifestyle=LifestyleInput(
                shopping_frequency=5.0,
                electronics_usage=5.0,
                home_size=1500.0,
                household_members=2.0,
            ),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, Any]]) -> "CategoryInput":
        """
        Build from the nested {category: {field: value}} shape.
        Missing categories take the record defaults; camelCase field names are accepted.
        """
        kwargs = {}
        for name, section_cls in cls.SECTIONS.items():
            section = data.get(name)
            if section is not None:
                kwargs[name] = section_cls.from_dict(section)
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {name: getattr(self, name).to_dict() for name in self.SECTIONS}


@dataclass(frozen=True)
class EmissionFactors:
    """
    Every constant the category calculators and recommendation estimators read.
    Substitute an instance to recalculate with an alternative factor set.
    """
    electricity_kgco2_per_kwh: float = EF_ELECTRICITY_KGCO2_PER_KWH
    natural_gas_kgco2_per_therm: float = EF_NATURAL_GAS_KGCO2_PER_THERM
    heating_oil_kgco2_per_gallon: float = EF_HEATING_OIL_KGCO2_PER_GALLON
    car_gasoline_kgco2_per_mile: float = EF_CAR_GASOLINE_KGCO2_PER_MILE
    car_diesel_kgco2_per_mile: float = EF_CAR_DIESEL_KGCO2_PER_MILE
    car_hybrid_kgco2_per_mile: float = EF_CAR_HYBRID_KGCO2_PER_MILE
    car_electric_kgco2_per_mile: float = EF_CAR_ELECTRIC_KGCO2_PER_MILE
    public_transport_kgco2_per_mile: float = EF_PUBLIC_TRANSPORT_KGCO2_PER_MILE
    public_transport_miles_per_day: float = PUBLIC_TRANSPORT_MILES_PER_DAY
    flight_kgco2_per_hour: float = EF_FLIGHT_KGCO2_PER_HOUR
    flight_hours_per_flight: float = FLIGHT_HOURS_PER_FLIGHT
    waste_kgco2_per_lb: float = EF_WASTE_KGCO2_PER_LB
    diet_omnivore_kgco2_per_day: float = DIET_OMNIVORE_KGCO2_PER_DAY
    diet_flexitarian_kgco2_per_day: float = DIET_FLEXITARIAN_KGCO2_PER_DAY
    diet_vegetarian_kgco2_per_day: float = DIET_VEGETARIAN_KGCO2_PER_DAY
    diet_vegan_kgco2_per_day: float = DIET_VEGAN_KGCO2_PER_DAY
    local_food_reduction_per_pct: float = LOCAL_FOOD_REDUCTION_PER_PCT
    organic_food_reduction_per_pct: float = ORGANIC_FOOD_REDUCTION_PER_PCT
    food_waste_addition_per_pct: float = FOOD_WASTE_ADDITION_PER_PCT
    shopping_kgco2_per_point_day: float = EF_SHOPPING_KGCO2_PER_POINT_DAY
    electronics_kgco2_per_point_day: float = EF_ELECTRONICS_KGCO2_PER_POINT_DAY
    home_kgco2_per_sqft: float = EF_HOME_KGCO2_PER_SQFT

    def per_mile(self, fuel_type: FuelType) -> float:
        """Vehicle emission factor (kg CO2e/mile) for a fuel type."""
        if fuel_type is FuelType.GASOLINE:
            return self.car_gasoline_kgco2_per_mile
        if fuel_type is FuelType.DIESEL:
            return self.car_diesel_kgco2_per_mile
        if fuel_type is FuelType.HYBRID:
            return self.car_hybrid_kgco2_per_mile
        if fuel_type is FuelType.ELECTRIC:
            return self.car_electric_kgco2_per_mile
        raise InvalidEnumValue("transportation.fuel_type", fuel_type, "unsupported fuel type")

    def per_day(self, diet_type: DietType) -> float:
        """Base dietary emissions (kg CO2e/day) for a diet type."""
        if diet_type is DietType.OMNIVORE:
            return self.diet_omnivore_kgco2_per_day
        if diet_type is DietType.FLEXITARIAN:
            return self.diet_flexitarian_kgco2_per_day
        if diet_type is DietType.VEGETARIAN:
            return self.diet_vegetarian_kgco2_per_day
        if diet_type is DietType.VEGAN:
            return self.diet_vegan_kgco2_per_day
        raise InvalidEnumValue("food.diet_type", diet_type, "unsupported diet type")


@dataclass(frozen=True)
class ReferenceValues:
    """Comparison figures attached to every result (kg CO2e per year)."""
    national_average: float = NATIONAL_AVERAGE_KGCO2
    global_average: float = GLOBAL_AVERAGE_KGCO2
    paris_targets: float = PARIS_TARGET_KGCO2


@dataclass(frozen=True)
class Recommendation:
    category: Category
    title: str
    description: str
    potential_savings: float    # kg CO2e per year
    difficulty: Difficulty

    def __post_init__(self):
        object.__setattr__(self, "category", coerce_enum(Category, self.category, "recommendation.category"))
        object.__setattr__(self, "difficulty", coerce_enum(Difficulty, self.difficulty, "recommendation.difficulty"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.value,
            "title": self.title,
            "description": self.description,
            "potential_savings": self.potential_savings,
            "difficulty": self.difficulty.value,
        }


@dataclass(frozen=True)
class EmissionsResult:
    """
    Annual footprint for one questionnaire (kg CO2e per year).
    Values are unrounded; formatting belongs to the reporting layer.
    """
    total_emissions: float
    energy_emissions: float
    transportation_emissions: float
    waste_emissions: float
    food_emissions: float
    lifestyle_emissions: float
    national_average: float = NATIONAL_AVERAGE_KGCO2
    global_average: float = GLOBAL_AVERAGE_KGCO2
    paris_targets: float = PARIS_TARGET_KGCO2
    recommendations: Tuple[Recommendation, ...] = ()

    def by_category(self) -> Dict[Category, float]:
        return {
            Category.ENERGY: self.energy_emissions,
            Category.TRANSPORTATION: self.transportation_emissions,
            Category.WASTE: self.waste_emissions,
            Category.FOOD: self.food_emissions,
            Category.LIFESTYLE: self.lifestyle_emissions,
        }

    def references(self) -> ReferenceValues:
        return ReferenceValues(
            national_average=self.national_average,
            global_average=self.global_average,
            paris_targets=self.paris_targets,
        )

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["recommendations"] = [r.to_dict() for r in self.recommendations]
        return out

