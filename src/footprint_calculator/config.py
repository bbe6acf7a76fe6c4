import os
import math
import zipfile
import logging
from dataclasses import replace
from typing import Dict, Any, List, Optional

import pandas as pd

from . import constants as C
from .exceptions import ConfigurationError
from .models import EmissionFactors, ReferenceValues

logger = logging.getLogger(__name__)

# Parameter workbook: <project root>/data/parameters_config/project_parameters.xlsx
# The project root is three levels up from this file (src/footprint_calculator/config.py).
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
DEFAULT_CONFIG_PATH = os.environ.get(
    "FOOTPRINT_PARAMETERS",
    os.path.join(PROJECT_ROOT, "data", "parameters_config", "project_parameters.xlsx"),
)

# KEY -> (target, attribute, unit, section, description)
# KEY is the constant name in constants.py, so workbook rows line up with the code.
PARAMETERS: List[Dict[str, Any]] = [
    # --- SECTION: ENERGY ---
    {"Key": "EF_ELECTRICITY_KGCO2_PER_KWH", "Target": "factors", "Attr": "electricity_kgco2_per_kwh",
     "Unit": "kgCO2e/kWh", "Section": "1. Energy", "Description": "Grid electricity emission factor."},
    {"Key": "EF_NATURAL_GAS_KGCO2_PER_THERM", "Target": "factors", "Attr": "natural_gas_kgco2_per_therm",
     "Unit": "kgCO2e/therm", "Section": "1. Energy", "Description": "Natural gas combustion emission factor."},
    {"Key": "EF_HEATING_OIL_KGCO2_PER_GALLON", "Target": "factors", "Attr": "heating_oil_kgco2_per_gallon",
     "Unit": "kgCO2e/gallon", "Section": "1. Energy", "Description": "Heating oil combustion emission factor."},

    # --- SECTION: TRANSPORTATION ---
    {"Key": "EF_CAR_GASOLINE_KGCO2_PER_MILE", "Target": "factors", "Attr": "car_gasoline_kgco2_per_mile",
     "Unit": "kgCO2e/mile", "Section": "2. Transportation", "Description": "Gasoline vehicle, per mile driven."},
    {"Key": "EF_CAR_DIESEL_KGCO2_PER_MILE", "Target": "factors", "Attr": "car_diesel_kgco2_per_mile",
     "Unit": "kgCO2e/mile", "Section": "2. Transportation", "Description": "Diesel vehicle, per mile driven."},
    {"Key": "EF_CAR_HYBRID_KGCO2_PER_MILE", "Target": "factors", "Attr": "car_hybrid_kgco2_per_mile",
     "Unit": "kgCO2e/mile", "Section": "2. Transportation", "Description": "Hybrid vehicle, per mile driven."},
    {"Key": "EF_CAR_ELECTRIC_KGCO2_PER_MILE", "Target": "factors", "Attr": "car_electric_kgco2_per_mile",
     "Unit": "kgCO2e/mile", "Section": "2. Transportation",
     "Description": "Electric vehicle, per mile driven (depends on grid)."},
    {"Key": "EF_PUBLIC_TRANSPORT_KGCO2_PER_MILE", "Target": "factors", "Attr": "public_transport_kgco2_per_mile",
     "Unit": "kgCO2e/mile", "Section": "2. Transportation", "Description": "Public transport, per passenger mile."},
    {"Key": "PUBLIC_TRANSPORT_MILES_PER_DAY", "Target": "factors", "Attr": "public_transport_miles_per_day",
     "Unit": "miles/day", "Section": "2. Transportation", "Description": "Distance assumed per transit day."},
    {"Key": "EF_FLIGHT_KGCO2_PER_HOUR", "Target": "factors", "Attr": "flight_kgco2_per_hour",
     "Unit": "kgCO2e/hour", "Section": "2. Transportation", "Description": "Average flight, per flight hour."},
    {"Key": "FLIGHT_HOURS_PER_FLIGHT", "Target": "factors", "Attr": "flight_hours_per_flight",
     "Unit": "hours", "Section": "2. Transportation", "Description": "Average flight duration."},

    # --- SECTION: WASTE ---
    {"Key": "EF_WASTE_KGCO2_PER_LB", "Target": "factors", "Attr": "waste_kgco2_per_lb",
     "Unit": "kgCO2e/lb", "Section": "3. Waste", "Description": "Landfilled household waste, per pound."},

    # --- SECTION: FOOD ---
    {"Key": "DIET_OMNIVORE_KGCO2_PER_DAY", "Target": "factors", "Attr": "diet_omnivore_kgco2_per_day",
     "Unit": "kgCO2e/day", "Section": "4. Food", "Description": "Omnivore diet baseline."},
    {"Key": "DIET_FLEXITARIAN_KGCO2_PER_DAY", "Target": "factors", "Attr": "diet_flexitarian_kgco2_per_day",
     "Unit": "kgCO2e/day", "Section": "4. Food", "Description": "Flexitarian diet baseline."},
    {"Key": "DIET_VEGETARIAN_KGCO2_PER_DAY", "Target": "factors", "Attr": "diet_vegetarian_kgco2_per_day",
     "Unit": "kgCO2e/day", "Section": "4. Food", "Description": "Vegetarian diet baseline."},
    {"Key": "DIET_VEGAN_KGCO2_PER_DAY", "Target": "factors", "Attr": "diet_vegan_kgco2_per_day",
     "Unit": "kgCO2e/day", "Section": "4. Food", "Description": "Vegan diet baseline."},
    {"Key": "LOCAL_FOOD_REDUCTION_PER_PCT", "Target": "factors", "Attr": "local_food_reduction_per_pct",
     "Unit": "-/%", "Section": "4. Food", "Description": "Diet reduction per percentage point of local food."},
    {"Key": "ORGANIC_FOOD_REDUCTION_PER_PCT", "Target": "factors", "Attr": "organic_food_reduction_per_pct",
     "Unit": "-/%", "Section": "4. Food", "Description": "Diet reduction per percentage point of organic food."},
    {"Key": "FOOD_WASTE_ADDITION_PER_PCT", "Target": "factors", "Attr": "food_waste_addition_per_pct",
     "Unit": "-/%", "Section": "4. Food", "Description": "Diet increase per percentage point of food wasted."},

    # --- SECTION: LIFESTYLE ---
    {"Key": "EF_SHOPPING_KGCO2_PER_POINT_DAY", "Target": "factors", "Attr": "shopping_kgco2_per_point_day",
     "Unit": "kgCO2e/point/day", "Section": "5. Lifestyle", "Description": "Shopping, per point on the 1-10 scale."},
    {"Key": "EF_ELECTRONICS_KGCO2_PER_POINT_DAY", "Target": "factors", "Attr": "electronics_kgco2_per_point_day",
     "Unit": "kgCO2e/point/day", "Section": "5. Lifestyle",
     "Description": "Electronics use, per point on the 1-10 scale."},
    {"Key": "EF_HOME_KGCO2_PER_SQFT", "Target": "factors", "Attr": "home_kgco2_per_sqft",
     "Unit": "kgCO2e/sqft/year", "Section": "5. Lifestyle", "Description": "Home size, per square foot."},

    # --- SECTION: REFERENCE VALUES ---
    {"Key": "NATIONAL_AVERAGE_KGCO2", "Target": "references", "Attr": "national_average",
     "Unit": "kgCO2e/year", "Section": "6. Reference Values", "Description": "National (US) per-capita average."},
    {"Key": "GLOBAL_AVERAGE_KGCO2", "Target": "references", "Attr": "global_average",
     "Unit": "kgCO2e/year", "Section": "6. Reference Values", "Description": "Global per-capita average."},
    {"Key": "PARIS_TARGET_KGCO2", "Target": "references", "Attr": "paris_targets",
     "Unit": "kgCO2e/year", "Section": "6. Reference Values",
     "Description": "Per-capita level consistent with the Paris Agreement."},
]

_BY_KEY = {p["Key"]: p for p in PARAMETERS}


def load_excel_config(path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """
    Load configuration from Excel file.
    Expected columns: Key, Value (Unit, Section, Description are informational)
    Returns a dictionary of Key -> Value
    """
    config: Dict[str, Any] = {}
    if not os.path.exists(path):
        logger.warning(f"Config file not found at {path}. Using defaults.")
        return config

    try:
        df = pd.read_excel(path)
    except (OSError, ValueError, zipfile.BadZipFile) as e:
        raise ConfigurationError(f"Failed to load config from {path}: {e}") from e

    if "Key" not in df.columns or "Value" not in df.columns:
        raise ConfigurationError(f"Excel file {path} missing 'Key' or 'Value' columns.")

    for _, row in df.iterrows():
        key = str(row["Key"]).strip()
        if not key or key.lower() == "nan":
            continue
        config[key] = row["Value"]
    logger.info(f"Loaded {len(config)} parameters from {path}")
    return config


def _as_float(key: str, value: Any) -> Optional[float]:
    if isinstance(value, bool):
        raise ConfigurationError(f"Parameter '{key}' must be numeric, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Parameter '{key}' must be numeric, got {value!r}") from None
    if math.isnan(number):
        return None
    if math.isinf(number):
        raise ConfigurationError(f"Parameter '{key}' must be finite, got {value!r}")
    return number


def _overrides(config: Dict[str, Any], target: str) -> Dict[str, float]:
    out: Dict[str, float] = {}
    for key, value in config.items():
        param = _BY_KEY.get(key)
        if param is None:
            raise ConfigurationError(f"Unknown parameter '{key}'")
        if param["Target"] != target:
            continue
        number = _as_float(key, value)
        if number is None:
            logger.warning(f"Parameter '{key}' is empty. Keeping default.")
            continue
        out[param["Attr"]] = number
    return out


def emission_factors_from_config(config: Dict[str, Any], base: Optional[EmissionFactors] = None) -> EmissionFactors:
    return replace(base or EmissionFactors(), **_overrides(config, "factors"))


def reference_values_from_config(config: Dict[str, Any], base: Optional[ReferenceValues] = None) -> ReferenceValues:
    return replace(base or ReferenceValues(), **_overrides(config, "references"))


def load_emission_factors(path: str = DEFAULT_CONFIG_PATH) -> EmissionFactors:
    return emission_factors_from_config(load_excel_config(path))


def load_reference_values(path: str = DEFAULT_CONFIG_PATH) -> ReferenceValues:
    return reference_values_from_config(load_excel_config(path))


def parameter_table() -> pd.DataFrame:
    """Current default parameters with units and descriptions, one row per key."""
    rows = []
    for p in PARAMETERS:
        rows.append({
            "Key": p["Key"],
            "Value": getattr(C, p["Key"]),
            "Unit": p["Unit"],
            "Section": p["Section"],
            "Description": p["Description"],
        })
    return pd.DataFrame(rows, columns=["Key", "Value", "Unit", "Section", "Description"])


def write_parameter_template(path: str) -> str:
    """Write the default parameter workbook to `path` (xlsx) and return the path."""
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)
    parameter_table().to_excel(path, index=False)
    logger.info(f"Parameter template written to {path}")
    return path
