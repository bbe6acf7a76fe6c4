"""
Results presentation: formatting, comparisons and report files.

The engine returns unrounded kg CO2e figures; everything here is display only.
"""
import os
import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd
from colorama import Back, Style

from .constants import (
    DECIMALS, TONNES_THRESHOLD_KG, KGCO2_PER_TREE_YEAR, CAR_MILES_PER_KGCO2,
    PHONE_CHARGES_PER_KGCO2, LED_TV_HOURS_PER_KGCO2, CATEGORY_INFO, Category
)
from .models import EmissionsResult
from .utils.input_helpers import C_HEADER, C_SUCCESS, C_RESET, RESPONDENT_COLUMN

logger = logging.getLogger(__name__)

EMISSION_LEVELS: Tuple[Tuple[float, str, str], ...] = (
    (3000.0, "low", "Your carbon footprint is relatively low and meets Paris Agreement targets."),
    (5000.0, "moderate", "Your carbon footprint is below the global average but still above Paris targets."),
    (10000.0, "high", "Your carbon footprint is above global average but below national average."),
)
VERY_HIGH = ("very-high", "Your carbon footprint is high, exceeding both national and global averages.")

# Batch report column order; anything else is appended after these.
REPORT_COLUMNS = [
    RESPONDENT_COLUMN,
    "Total Emissions (kgCO2e)",
    "Level",
    "[Category] Energy",
    "[Category] Transportation",
    "[Category] Waste",
    "[Category] Food",
    "[Category] Lifestyle",
    "vs National Average (%)",
    "vs Global Average (%)",
    "vs Paris Target (%)",
    "Top Recommendation",
    "Top Potential Savings (kgCO2e)",
]


def format_emission(value: float, decimals: int = DECIMALS) -> str:
    """'850 kg CO2e' below one tonne, '1.2 tonnes CO2e' from one tonne up."""
    if value >= TONNES_THRESHOLD_KG:
        return f"{value / 1000.0:.{decimals}f} tonnes CO2e"
    return f"{round(value):.0f} kg CO2e"


def format_savings(value: float) -> str:
    """Savings stay in kilograms whatever their size."""
    return f"{round(value):.0f} kg CO2e"


def get_emission_level(total_emissions: float) -> Dict[str, str]:
    for upper, level, description in EMISSION_LEVELS:
        if total_emissions <= upper:
            return {"level": level, "description": description}
    return {"level": VERY_HIGH[0], "description": VERY_HIGH[1]}


def get_equivalencies(total_emissions: float) -> List[Dict[str, str]]:
    """Everyday comparisons for an annual footprint."""
    return [
        {"description": "Trees needed to offset",
         "value": f"{round(total_emissions / KGCO2_PER_TREE_YEAR)} trees"},
        {"description": "Miles driven by an average car",
         "value": f"{round(total_emissions * CAR_MILES_PER_KGCO2)} miles"},
        {"description": "Smartphone charges",
         "value": f"{round(total_emissions * PHONE_CHARGES_PER_KGCO2)} charges"},
        {"description": "Hours of LED TV watching",
         "value": f"{round(total_emissions * LED_TV_HOURS_PER_KGCO2)} hours"},
    ]


def category_shares(result: EmissionsResult) -> Dict[Category, int]:
    """Whole-number percentage of the total per category (0 everywhere for a non-positive total)."""
    total = result.total_emissions
    if total <= 0:
        return {c: 0 for c in Category}
    return {c: round(v / total * 100) for c, v in result.by_category().items()}


def compare_to_references(result: EmissionsResult) -> Dict[str, float]:
    """Footprint as a percentage of each reference value."""
    refs = {
        "National Average": result.national_average,
        "Global Average": result.global_average,
        "Paris Target": result.paris_targets,
    }
    return {name: (result.total_emissions / ref * 100.0 if ref else 0.0) for name, ref in refs.items()}


def print_result_overview(result: EmissionsResult, title: str = "Your Carbon Footprint"):
    """
    Console summary of one result.
    """
    level = get_emission_level(result.total_emissions)
    shares = category_shares(result)

    print(f"\n{Back.BLACK}{C_HEADER}{'='*60}")
    print(f"   {title.upper()}")
    print(f"{'='*60}{Style.RESET_ALL}")

    print(f"\n{C_HEADER}Emissions by Category (per year):{C_RESET}")
    for cat, val in result.by_category().items():
        name = CATEGORY_INFO[cat]["title"]
        print(f"  {name:<20} : {format_emission(val):>20}  ({shares[cat]}%)")

    print(f"{'-'*60}")
    print(f"  {Style.BRIGHT}TOTAL                : {C_SUCCESS}{format_emission(result.total_emissions)}{C_RESET}")
    print(f"  Level                : {level['level']}")
    print(f"  {level['description']}")

    print(f"\n{C_HEADER}Comparison:{C_RESET}")
    for name, pct in compare_to_references(result).items():
        print(f"  {name:<20} : {pct:.0f}% of reference")

    print(f"\n{C_HEADER}Equivalent to:{C_RESET}")
    for eq in get_equivalencies(result.total_emissions):
        print(f"  {eq['description']:<32} : {eq['value']}")

    if result.recommendations:
        print(f"\n{C_HEADER}Recommendations:{C_RESET}")
        for i, rec in enumerate(result.recommendations, 1):
            print(f"  {i}. {rec.title} [{rec.difficulty.value}] - save ~{format_savings(rec.potential_savings)}/year")
            print(f"     {rec.description}")
    print(f"{'='*60}\n")


def render_result_md(result: EmissionsResult, title: str = "Carbon Footprint Report") -> str:
    level = get_emission_level(result.total_emissions)
    shares = category_shares(result)

    lines = [
        f"# {title}",
        "",
        f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        "",
        f"**Total:** {format_emission(result.total_emissions)} per year ({level['level']})",
        "",
        level["description"],
        "",
        "## Emissions by Category",
        "",
        "| Category | Emissions | Share |",
        "|---|---|---|",
    ]
    for cat, val in result.by_category().items():
        lines.append(f"| {CATEGORY_INFO[cat]['title']} | {format_emission(val)} | {shares[cat]}% |")

    lines += [
        "",
        "## Comparison",
        "",
        "| Reference | Value | Your footprint |",
        "|---|---|---|",
    ]
    ref_values = {
        "National Average": result.national_average,
        "Global Average": result.global_average,
        "Paris Target": result.paris_targets,
    }
    for name, pct in compare_to_references(result).items():
        lines.append(f"| {name} | {format_emission(ref_values[name])} | {pct:.0f}% |")

    lines += ["", "## Equivalencies", ""]
    for eq in get_equivalencies(result.total_emissions):
        lines.append(f"- {eq['description']}: {eq['value']}")

    lines += ["", "## Recommendations", ""]
    if not result.recommendations:
        lines.append("No recommendations: every habit checked is already low-impact.")
    for i, rec in enumerate(result.recommendations, 1):
        lines.append(
            f"{i}. **{rec.title}** ({CATEGORY_INFO[rec.category]['title']}, {rec.difficulty.value}): "
            f"{rec.description} Potential savings: {format_savings(rec.potential_savings)} per year."
        )
    return "\n".join(lines) + "\n"


def save_result_md(result: EmissionsResult, reports_dir: str, basename: Optional[str] = None) -> str:
    """Write the Markdown report and return its path."""
    os.makedirs(reports_dir, exist_ok=True)
    if basename is None:
        basename = f"footprint_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
    out_file = os.path.join(reports_dir, f"{basename}.md")
    with open(out_file, "w", encoding="utf-8") as f:
        f.write(render_result_md(result))
    logger.info(f"Report saved to: {out_file}")
    return out_file


def result_to_row(result: EmissionsResult, respondent: str) -> Dict[str, object]:
    row: Dict[str, object] = {
        RESPONDENT_COLUMN: respondent,
        "Total Emissions (kgCO2e)": result.total_emissions,
        "Level": get_emission_level(result.total_emissions)["level"],
    }
    for cat, val in result.by_category().items():
        row[f"Emissions_{cat.value}"] = val
    for name, pct in compare_to_references(result).items():
        row[f"vs {name} (%)"] = pct
    if result.recommendations:
        top = result.recommendations[0]
        row["Top Recommendation"] = top.title
        row["Top Potential Savings (kgCO2e)"] = top.potential_savings
    return row


def build_batch_dataframe(rows: Sequence[Tuple[str, EmissionsResult]]) -> pd.DataFrame:
    return format_and_clean_report_dataframe(pd.DataFrame([result_to_row(r, name) for name, r in rows]))


def format_and_clean_report_dataframe(df: pd.DataFrame) -> pd.DataFrame:
    """
    Rename category columns, fill missing ones, order columns and round numbers.
    Columns not in REPORT_COLUMNS are kept after the defined ones.
    """
    df = df.copy()

    rename_map = {f"Emissions_{c.value}": f"[Category] {CATEGORY_INFO[c]['title'].split()[0]}" for c in Category}
    df = df.rename(columns=rename_map)

    for col in REPORT_COLUMNS:
        if col not in df.columns:
            if col in (RESPONDENT_COLUMN, "Level", "Top Recommendation"):
                df[col] = ""
            else:
                df[col] = 0.0

    extra = [c for c in df.columns if c not in REPORT_COLUMNS]
    df = df[REPORT_COLUMNS + extra]

    numeric = df.select_dtypes(include="number").columns
    df[numeric] = df[numeric].fillna(0.0).round(DECIMALS)
    df = df.fillna("")
    return df
