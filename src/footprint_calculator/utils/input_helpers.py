import json
import logging
import math
import os
import zipfile
from typing import Any, Dict, Mapping, Optional

import pandas as pd
from colorama import Fore, Style

from ..constants import DISPLAY_UNITS, CATEGORY_INFO, Category
from ..exceptions import InvalidInputError, InvalidRange
from ..models import CategoryInput, to_snake_case

logger = logging.getLogger(__name__)

# Style Constants
C_HEADER = Fore.CYAN + Style.BRIGHT
C_SUCCESS = Fore.GREEN
C_RESET = Style.RESET_ALL

RESPONDENT_COLUMN = "Respondent"


def print_header(text: str):
    """Print a styled header."""
    # Printed directly for visual flair, bypassing the logger formatter
    print(f"\n{C_HEADER}{'='*60}")
    print(f"{text.center(60)}")
    print(f"{'='*60}{C_RESET}")


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return math.isnan(value)
    except TypeError:
        return False


def _clean_value(section: str, name: str, value: Any) -> Any:
    """
    Normalise one answer: enum fields stay text, everything else becomes float.
    numpy scalars from pandas are converted to plain Python numbers.
    """
    record_cls = CategoryInput.SECTIONS[section]
    if name in record_cls.ENUM_FIELDS:
        return str(value).strip()
    if isinstance(value, bool):
        raise InvalidRange(f"{section}.{name}", value, "expected a number")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidRange(f"{section}.{name}", value, "expected a number") from None


def category_input_from_flat(flat: Mapping[str, Any], base: Optional[CategoryInput] = None) -> CategoryInput:
    """
    Build a record from dotted keys ("energy.electricity_usage" or "energy.electricityUsage").
    Unanswered questions (missing or blank) keep the value from `base`
    (the questionnaire's starting values by default).
    """
    nested = (base or CategoryInput.default()).to_dict()
    for raw_key, value in flat.items():
        key = str(raw_key).strip()
        if key == RESPONDENT_COLUMN:
            continue
        if "." not in key:
            raise InvalidInputError(key, value, "expected a 'category.field' key")
        section, name = key.split(".", 1)
        section = section.strip().lower()
        name = to_snake_case(name.strip())
        if section not in nested:
            raise InvalidInputError(key, value, "unknown category")
        if name not in nested[section]:
            raise InvalidInputError(key, value, "unknown field")
        if _is_missing(value):
            continue
        nested[section][name] = _clean_value(section, name, value)
    return CategoryInput.from_dict(nested)


def category_input_from_nested(data: Mapping[str, Any], base: Optional[CategoryInput] = None) -> CategoryInput:
    """Same as `category_input_from_flat` for the nested {category: {field: value}} shape."""
    flat: Dict[str, Any] = {}
    for section, answers in data.items():
        if not isinstance(answers, Mapping):
            raise InvalidInputError(str(section), answers, "expected a mapping of answers")
        for name, value in answers.items():
            flat[f"{section}.{name}"] = value
    return category_input_from_flat(flat, base)


def _read_table(path: str, ext: str) -> pd.DataFrame:
    """Read a .csv or .xlsx file; unreadable content becomes InvalidInputError."""
    try:
        if ext == ".csv":
            return pd.read_csv(path)
        return pd.read_excel(path)
    except (OSError, ValueError, zipfile.BadZipFile) as e:
        raise InvalidInputError(path, type(e).__name__, f"unreadable {ext} file ({e})") from e


def load_category_input(path: str) -> CategoryInput:
    """
    Load one completed questionnaire.
    - .json : {"energy": {"electricity_usage": 500, ...}, ...}
    - .xlsx : Key/Value columns, Key = "category.field"
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Input file not found at {path}")

    ext = os.path.splitext(path)[1].lower()
    if ext == ".json":
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise InvalidInputError(path, e.msg, f"invalid JSON at line {e.lineno}") from e
            except UnicodeDecodeError as e:
                raise InvalidInputError(path, e.reason, "file is not UTF-8 text") from e
        if not isinstance(data, dict):
            raise InvalidInputError(path, type(data).__name__, "expected a JSON object")
        record = category_input_from_nested(data)
    elif ext == ".xlsx":
        df = _read_table(path, ext)
        if "Key" not in df.columns or "Value" not in df.columns:
            raise InvalidInputError(path, list(df.columns), "missing 'Key' or 'Value' columns")
        flat = {str(row["Key"]).strip(): row["Value"] for _, row in df.iterrows() if not _is_missing(row["Key"])}
        record = category_input_from_flat(flat)
    else:
        raise InvalidInputError(path, ext, "unsupported input format (use .json or .xlsx)")

    logger.info(f"Loaded questionnaire from {path}")
    return record


def load_category_inputs_table(path: str) -> pd.DataFrame:
    """
    Load many respondents: one row each, one "category.field" column per question.
    Rows are parsed later with `parse_row_to_input` so one bad row does not stop a batch.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Batch file not found at {path}")

    ext = os.path.splitext(path)[1].lower()
    if ext not in (".csv", ".xlsx"):
        raise InvalidInputError(path, ext, "unsupported batch format (use .csv or .xlsx)")
    df = _read_table(path, ext)

    if RESPONDENT_COLUMN not in df.columns:
        df.insert(0, RESPONDENT_COLUMN, [f"R{i + 1}" for i in range(len(df))])
    else:
        # Forward fill handles merged cells in Excel
        df[RESPONDENT_COLUMN] = df[RESPONDENT_COLUMN].ffill()

    logger.info(f"Loaded {len(df)} respondents from {path}")
    return df


def parse_row_to_input(row: Mapping[str, Any]) -> CategoryInput:
    # Non-question columns (notes, timestamps...) are carried but not parsed
    return category_input_from_flat({k: v for k, v in dict(row).items() if "." in str(k)})


def input_template_table() -> pd.DataFrame:
    """Starting values as Key/Value/Unit/Category rows, ready to be filled in."""
    rows = []
    for section, answers in CategoryInput.default().to_dict().items():
        title = CATEGORY_INFO[Category(section)]["title"]
        for name, value in answers.items():
            rows.append({
                "Key": f"{section}.{name}",
                "Value": value,
                "Unit": DISPLAY_UNITS.get(name, "-"),
                "Category": title,
            })
    return pd.DataFrame(rows, columns=["Key", "Value", "Unit", "Category"])


def write_input_template(path: str) -> str:
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)
    if path.lower().endswith(".json"):
        with open(path, "w", encoding="utf-8") as f:
            json.dump(CategoryInput.default().to_dict(), f, indent=2)
    else:
        input_template_table().to_excel(path, index=False)
    logger.info(f"Input template written to {path}")
    return path
