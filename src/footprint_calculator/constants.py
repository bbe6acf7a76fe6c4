from enum import Enum
from typing import Dict

# ============================================================================
# SETTINGS & CONSTANTS
# ============================================================================

# Energy (kg CO2e per unit)
EF_ELECTRICITY_KGCO2_PER_KWH = 0.5
EF_NATURAL_GAS_KGCO2_PER_THERM = 5.3
EF_HEATING_OIL_KGCO2_PER_GALLON = 10.15

# Transportation (kg CO2e per mile)
EF_CAR_GASOLINE_KGCO2_PER_MILE = 0.404
EF_CAR_DIESEL_KGCO2_PER_MILE = 0.429
EF_CAR_HYBRID_KGCO2_PER_MILE = 0.202
EF_CAR_ELECTRIC_KGCO2_PER_MILE = 0.1
EF_PUBLIC_TRANSPORT_KGCO2_PER_MILE = 0.16
PUBLIC_TRANSPORT_MILES_PER_DAY = 15.0
EF_FLIGHT_KGCO2_PER_HOUR = 200.0
FLIGHT_HOURS_PER_FLIGHT = 3.0

# Waste (kg CO2e per pound)
EF_WASTE_KGCO2_PER_LB = 0.5

# Food (kg CO2e per day)
DIET_OMNIVORE_KGCO2_PER_DAY = 7.4
DIET_FLEXITARIAN_KGCO2_PER_DAY = 5.3
DIET_VEGETARIAN_KGCO2_PER_DAY = 3.8
DIET_VEGAN_KGCO2_PER_DAY = 2.9
LOCAL_FOOD_REDUCTION_PER_PCT = 0.005
ORGANIC_FOOD_REDUCTION_PER_PCT = 0.002
FOOD_WASTE_ADDITION_PER_PCT = 0.01

# Lifestyle
EF_SHOPPING_KGCO2_PER_POINT_DAY = 0.5
EF_ELECTRONICS_KGCO2_PER_POINT_DAY = 0.3
EF_HOME_KGCO2_PER_SQFT = 0.005

# Time conversions
MONTHS_PER_YEAR = 12
WEEKS_PER_YEAR = 52
DAYS_PER_YEAR = 365

# Reference values (kg CO2e per year)
NATIONAL_AVERAGE_KGCO2 = 16000.0
GLOBAL_AVERAGE_KGCO2 = 5000.0
PARIS_TARGET_KGCO2 = 3000.0

# Recommendation assumptions
RENEWABLE_THRESHOLD_PCT = 50.0
RENEWABLE_ELECTRICITY_CUT = 0.5
PUBLIC_TRANSPORT_THRESHOLD_DAYS = 3.0
DRIVING_CUT = 0.2
RECYCLING_THRESHOLD_PCT = 70.0
RECYCLING_INCREASE = 0.2
SHOPPING_THRESHOLD = 5.0
SHOPPING_CUT = 0.5
MAX_RECOMMENDATIONS = 5

# Reporting
DECIMALS = 1
TONNES_THRESHOLD_KG = 1000.0
KGCO2_PER_TREE_YEAR = 22.0
CAR_MILES_PER_KGCO2 = 2.5
PHONE_CHARGES_PER_KGCO2 = 3000.0
LED_TV_HOURS_PER_KGCO2 = 330.0

# ============================================================================
# TYPES (closed value sets)
# ============================================================================

class Category(str, Enum):
    ENERGY = "energy"
    TRANSPORTATION = "transportation"
    WASTE = "waste"
    FOOD = "food"
    LIFESTYLE = "lifestyle"


class VehicleType(str, Enum):
    CAR = "car"
    SUV = "SUV"
    TRUCK = "truck"
    MOTORCYCLE = "motorcycle"
    NONE = "none"


class FuelType(str, Enum):
    GASOLINE = "gasoline"
    DIESEL = "diesel"
    ELECTRIC = "electric"
    HYBRID = "hybrid"


class DietType(str, Enum):
    OMNIVORE = "omnivore"
    FLEXITARIAN = "flexitarian"
    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# ============================================================================
# DISPLAY METADATA
# ============================================================================

DISPLAY_UNITS: Dict[str, str] = {
    "electricity_usage": "kWh/month",
    "natural_gas_usage": "therms/month",
    "heating_oil_usage": "gallons/month",
    "renewable_percentage": "%",
    "miles_driven": "miles/week",
    "public_transport_frequency": "days/week",
    "flights_per_year": "flights/year",
    "waste_produced": "lbs/week",
    "recycling_percentage": "%",
    "compost_percentage": "%",
    "local_food_percentage": "%",
    "organic_food_percentage": "%",
    "food_waste_percentage": "%",
    "shopping_frequency": "1-10",
    "electronics_usage": "1-10",
    "home_size": "sq ft",
    "household_members": "people",
}

CATEGORY_INFO: Dict[Category, Dict[str, str]] = {
    Category.ENERGY: {
        "title": "Energy Use",
        "description": "Your home energy consumption including electricity, gas, and heating oil.",
    },
    Category.TRANSPORTATION: {
        "title": "Transportation",
        "description": "Your travel patterns by car, public transit, and air.",
    },
    Category.WASTE: {
        "title": "Waste",
        "description": "Your household waste generation and recycling habits.",
    },
    Category.FOOD: {
        "title": "Food Choices",
        "description": "Your diet type and food consumption patterns.",
    },
    Category.LIFESTYLE: {
        "title": "Lifestyle",
        "description": "Your shopping habits, electronics usage, and housing situation.",
    },
}
