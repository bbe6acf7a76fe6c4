import argparse
import logging
import os
import sys
from datetime import datetime
from typing import List, Optional, Tuple

import pandas as pd

from .audit import audit_logger, report_directory
from .config import DEFAULT_CONFIG_PATH, load_excel_config, emission_factors_from_config, \
    reference_values_from_config, write_parameter_template
from .engine import EmissionsCalculator
from .exceptions import ConfigurationError, InvalidInputError
from .logging_conf import setup_logging
from .models import CategoryInput, EmissionsResult
from .reporting import print_result_overview, save_result_md, build_batch_dataframe, format_emission
from .utils.input_helpers import (
    load_category_input, load_category_inputs_table, parse_row_to_input, write_input_template,
    print_header, C_SUCCESS, C_RESET, RESPONDENT_COLUMN
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 2


def build_calculator(parameters_path: str = DEFAULT_CONFIG_PATH) -> EmissionsCalculator:
    """Calculator using the parameter workbook (defaults where the workbook is absent or silent)."""
    config = load_excel_config(parameters_path)
    return EmissionsCalculator(
        factors=emission_factors_from_config(config),
        references=reference_values_from_config(config),
    )


def execute_batch(
    df: pd.DataFrame,
    calculator: EmissionsCalculator,
    reports_dir: str = report_directory,
) -> Tuple[pd.DataFrame, Optional[str]]:
    """
    Calculate every respondent row; rows that fail to parse or validate are logged and skipped.
    Returns the formatted report and the CSV path it was saved to (None if nothing to save).
    """
    os.makedirs(reports_dir, exist_ok=True)

    results: List[Tuple[str, EmissionsResult]] = []
    skipped = 0

    print_header(f"Starting Analysis of {len(df)} respondents...")

    for idx, row in df.iterrows():
        respondent = str(row.get(RESPONDENT_COLUMN, f"R{idx + 1}"))
        try:
            record = parse_row_to_input(row)
            results.append((respondent, calculator.compute(record)))
        except InvalidInputError as e:
            skipped += 1
            logger.error(f"Skipping respondent {respondent}: {e}")

    if skipped:
        logger.warning(f"{skipped} of {len(df)} respondents skipped due to invalid answers.")

    if not results:
        logger.warning("No results to save.")
        return build_batch_dataframe([]), None

    report_df = build_batch_dataframe(results)

    basename = "batch_footprint_report"
    out_file = os.path.join(reports_dir, f"{basename}.csv")
    try:
        report_df.to_csv(out_file, index=False)
    except PermissionError:
        # Fallback if file is locked
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        fallback_file = os.path.join(reports_dir, f"{basename}_{ts}.csv")
        logger.warning(f"Could not save to {out_file} (File Locked?). Saving to {fallback_file} instead.")
        report_df.to_csv(fallback_file, index=False)
        out_file = fallback_file
    logger.info(f"Report saved to: {out_file}")

    summary = report_df.groupby("Level")["Total Emissions (kgCO2e)"].agg(["count", "mean"])
    logger.info("Respondents by emission level:")
    for level, stats in summary.iterrows():
        logger.info(f"  {level:<10} : {int(stats['count'])} respondents, mean {format_emission(stats['mean'])}")
    return report_df, out_file


def run_single(path: str, calculator: EmissionsCalculator, reports_dir: str) -> EmissionsResult:
    record = load_category_input(path)
    result = calculator.compute(record)
    print_result_overview(result)
    save_result_md(result, reports_dir, basename=os.path.splitext(os.path.basename(path))[0] + "_report")
    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="carbon-footprint",
        description="Estimate an annual household carbon footprint from questionnaire answers.",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--input", help="One questionnaire (.json, or .xlsx with Key/Value columns).")
    source.add_argument("--batch", help="Many respondents (.csv/.xlsx, one 'category.field' column per question).")
    parser.add_argument("--parameters", default=DEFAULT_CONFIG_PATH, help="Parameter workbook overriding emission factors.")
    parser.add_argument("--reports-dir", default=report_directory, help="Where reports and audit logs are written.")
    parser.add_argument("--audit", action="store_true", help="Write a calculation audit log to the reports directory.")
    parser.add_argument("--log-file", help="Also write a detailed log to this file.")
    parser.add_argument("--no-color", action="store_true", help="Disable coloured console output.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug messages on the console.")
    parser.add_argument("--export-parameters", metavar="PATH", help="Write the default parameter workbook and exit.")
    parser.add_argument("--export-input-template", metavar="PATH",
                        help="Write a questionnaire template (.json or .xlsx) and exit.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # 1. LOGGING SETUP
    setup_logging(
        console_level=logging.DEBUG if args.verbose else logging.INFO,
        file_path=args.log_file,
        no_color=args.no_color,
    )

    # 2. TEMPLATE EXPORTS
    if args.export_parameters or args.export_input_template:
        if args.export_parameters:
            write_parameter_template(args.export_parameters)
        if args.export_input_template:
            write_input_template(args.export_input_template)
        return EXIT_OK

    print_header("Carbon footprint calculator - Start")

    # 3. CONFIGURATION
    try:
        calculator = build_calculator(args.parameters)
    except ConfigurationError as e:
        logger.error(f"Invalid parameter workbook: {e}")
        return EXIT_INVALID

    if args.audit:
        path = audit_logger.enable(args.reports_dir)
        logger.info(f"Audit log: {path}")

    # 4. CALCULATION
    try:
        if args.batch:
            df = load_category_inputs_table(args.batch)
            execute_batch(df, calculator, args.reports_dir)
        else:
            if args.input:
                run_single(args.input, calculator, args.reports_dir)
            else:
                logger.warning("No --input given. Showing the footprint for the default answers.")
                result = calculator.compute(CategoryInput.default())
                print_result_overview(result, title="Default Answers")
    except FileNotFoundError as e:
        logger.error(str(e))
        return EXIT_INVALID
    except InvalidInputError as e:
        logger.error(f"Invalid questionnaire: {e}")
        return EXIT_INVALID
    finally:
        audit_logger.disable()

    print(f"\n{C_SUCCESS}Done.{C_RESET}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
