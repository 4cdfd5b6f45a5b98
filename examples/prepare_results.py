#!/usr/bin/env python
"""
Example script preparing a DREADD activity results export for analysis.

Demonstrates:
- Loading a pipeline configuration from YAML, or building one from arguments
- Running load -> normalize -> completeness check in one call
- Printing the missing recordings per subject and Compound_Dose
- Optionally writing the baseline-relative table to CSV
"""
import argparse
import sys

from loguru import logger

from dreaddloader import initialize_production_logging
from dreaddloader.api import (
    DreaddLoaderError,
    create_config,
    load_config,
    normalize_to_baseline,
    run_pipeline,
)


def main():
    """Prepare one results file and report missing recordings."""
    parser = argparse.ArgumentParser(description="Prepare DREADD activity results")
    parser.add_argument('results', nargs='?', help='Results file (overrides data_path in the config)')
    parser.add_argument('--config', type=str, help='Path to a YAML pipeline configuration')
    parser.add_argument(
        '--exception',
        action='append',
        default=[],
        metavar='COMPOUND_DOSE:SUBJECT',
        help='Known exception, e.g. 21_1:742 (repeatable)'
    )
    parser.add_argument('--baseline', choices=['delta', 'percent'], help='Add baseline-relative metrics')
    parser.add_argument('--output', type=str, help='Write the prepared table to this CSV file')
    parser.add_argument('--log-level', type=str, default='INFO', help='Console log level')
    parser.add_argument('--log-dir', type=str, help='Also write a log file to this directory')
    args = parser.parse_args()

    initialize_production_logging(console_level=args.log_level, log_dir=args.log_dir)

    try:
        if args.config:
            config = load_config(args.config)
        else:
            config = create_config(
                known_exceptions=[tuple(item.split(':', 1)) for item in args.exception]
            )
        result = run_pipeline(config, data_path=args.results)
    except DreaddLoaderError as e:
        logger.error("Preparation failed: {}", e)
        return 1
    except ValueError as e:
        logger.error("Invalid arguments: {}", e)
        return 2

    report = result.report
    if report.is_complete:
        print(f"All {report.expected_count} expected recordings are present.")
    else:
        print(f"{len(report)} of {report.expected_count} expected recordings are missing:")
        print(report.summary().to_string(index=False))

    table = result.table
    if args.baseline:
        table = normalize_to_baseline(table, method=args.baseline)

    if args.output:
        table.to_csv(args.output, index=False)
        logger.info("Prepared table written to {}", args.output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
