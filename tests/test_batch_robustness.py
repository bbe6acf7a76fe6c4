import sys
import os
import json

sys.path.append(os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "src"))

import pandas as pd
import pytest

from footprint_calculator import CategoryInput, VehicleType, FuelType, DietType
from footprint_calculator.exceptions import InvalidInputError, InvalidEnumValue, InvalidRange
from footprint_calculator.utils.input_helpers import (
    category_input_from_flat, category_input_from_nested, load_category_input,
    load_category_inputs_table, parse_row_to_input, input_template_table, write_input_template
)


def test_flat_keys_accept_camel_case():
    data = category_input_from_flat({
        "energy.electricityUsage": 320,
        "transportation.vehicleType": "SUV",
        "transportation.fuel_type": "diesel",
        "food.dietType": "Vegan",
    })
    assert data.energy.electricity_usage == 320.0
    assert data.transportation.vehicle_type is VehicleType.SUV
    assert data.transportation.fuel_type is FuelType.DIESEL
    assert data.food.diet_type is DietType.VEGAN


def test_unanswered_questions_keep_starting_values():
    data = category_input_from_flat({"waste.recycling_percentage": 55, "lifestyle.home_size": float("nan")})
    default = CategoryInput.default()
    assert data.waste.recycling_percentage == 55.0
    assert data.lifestyle.home_size == default.lifestyle.home_size
    assert data.energy == default.energy


@pytest.mark.parametrize("key", ["electricity_usage", "energy.kwh", "garden.trees"])
def test_unknown_keys_rejected(key):
    with pytest.raises(InvalidInputError):
        category_input_from_flat({key: 1})


def test_non_numeric_answer_rejected():
    with pytest.raises(InvalidRange) as exc:
        category_input_from_flat({"transportation.miles_driven": "a lot"})
    assert exc.value.field == "transportation.miles_driven"


def test_boolean_answer_rejected():
    with pytest.raises(InvalidRange):
        category_input_from_flat({"transportation.flights_per_year": True})


def test_unknown_enum_rejected():
    with pytest.raises(InvalidEnumValue):
        category_input_from_nested({"transportation": {"vehicleType": "spaceship"}})


def test_nested_shape_requires_mappings():
    with pytest.raises(InvalidInputError):
        category_input_from_nested({"energy": 500})


def test_load_json(tmp_path):
    path = tmp_path / "answers.json"
    path.write_text(json.dumps({
        "energy": {"electricityUsage": 250, "renewablePercentage": 100},
        "food": {"dietType": "vegetarian"},
    }), encoding="utf-8")
    data = load_category_input(str(path))
    assert data.energy.electricity_usage == 250.0
    assert data.energy.renewable_percentage == 100.0
    assert data.food.diet_type is DietType.VEGETARIAN
    # Unanswered categories keep the starting values
    assert data.transportation == CategoryInput.default().transportation


def test_load_json_invalid(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{ not json", encoding="utf-8")
    with pytest.raises(InvalidInputError):
        load_category_input(str(path))


def test_load_json_array_rejected(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(InvalidInputError):
        load_category_input(str(path))


def test_load_excel_key_value(tmp_path):
    path = str(tmp_path / "answers.xlsx")
    pd.DataFrame([
        {"Key": "energy.electricity_usage", "Value": 420},
        {"Key": "transportation.vehicle_type", "Value": "motorcycle"},
        {"Key": "lifestyle.household_members", "Value": 4},
    ]).to_excel(path, index=False)
    data = load_category_input(path)
    assert data.energy.electricity_usage == 420.0
    assert data.transportation.vehicle_type is VehicleType.MOTORCYCLE
    assert data.lifestyle.household_members == 4.0
    assert isinstance(data.lifestyle.household_members, float)


def test_load_missing_and_unsupported(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_category_input(str(tmp_path / "missing.json"))
    txt = tmp_path / "answers.txt"
    txt.write_text("energy.electricity_usage=1", encoding="utf-8")
    with pytest.raises(InvalidInputError):
        load_category_input(str(txt))


def test_unreadable_workbook_rejected(tmp_path):
    path = tmp_path / "answers.xlsx"
    path.write_text("this is not a workbook", encoding="utf-8")
    with pytest.raises(InvalidInputError):
        load_category_input(str(path))
    with pytest.raises(InvalidInputError):
        load_category_inputs_table(str(path))


def test_legacy_xls_not_accepted(tmp_path):
    path = tmp_path / "answers.xls"
    path.write_bytes(b"\xd0\xcf\x11\xe0garbage")
    with pytest.raises(InvalidInputError, match="unsupported"):
        load_category_input(str(path))
    with pytest.raises(InvalidInputError, match="unsupported"):
        load_category_inputs_table(str(path))


def test_undecodable_csv_rejected(tmp_path):
    path = tmp_path / "survey.csv"
    path.write_bytes(b"energy.electricity_usage\n\xff\xfe\xfa\n")
    with pytest.raises(InvalidInputError):
        load_category_inputs_table(str(path))


def test_table_adds_respondent_ids(tmp_path):
    path = str(tmp_path / "survey.csv")
    pd.DataFrame([
        {"energy.electricity_usage": 100, "food.diet_type": "vegan"},
        {"energy.electricity_usage": 900, "food.diet_type": "omnivore"},
    ]).to_csv(path, index=False)
    df = load_category_inputs_table(path)
    assert list(df["Respondent"]) == ["R1", "R2"]
    second = parse_row_to_input(df.iloc[1])
    assert second.energy.electricity_usage == 900.0
    assert second.food.diet_type is DietType.OMNIVORE


def test_table_row_ignores_non_question_columns():
    row = pd.Series({"Respondent": "X", "Submitted": "2024-05-01", "waste.waste_produced": 12})
    data = parse_row_to_input(row)
    assert data.waste.waste_produced == 12.0


def test_input_template(tmp_path):
    table = input_template_table()
    assert "energy.electricity_usage" in set(table["Key"])
    assert table.loc[table["Key"] == "energy.electricity_usage", "Unit"].iloc[0] == "kWh/month"

    json_path = write_input_template(str(tmp_path / "answers.json"))
    assert load_category_input(json_path) == CategoryInput.default()

    xlsx_path = write_input_template(str(tmp_path / "answers.xlsx"))
    assert load_category_input(xlsx_path) == CategoryInput.default()


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
