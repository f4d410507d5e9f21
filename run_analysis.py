#!/usr/bin/env python3
"""
BodyCompTracker - Main CLI Script

This is the main entry point for body-composition trend analysis. It provides
a command-line interface with helpful error messages and delegates the core
analysis logic to the core module.
"""

import argparse
import logging
import os

from core import run_analysis
from trends import METRIC_ACCESSORS


def main(argv=None):
    """Main CLI function with comprehensive argument parsing."""
    parser = argparse.ArgumentParser(
        description="BodyCompTracker body-composition trend analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_analysis.py                            # Use example_history.json
  python run_analysis.py my_history.json            # Use custom history
  python run_analysis.py --plot-dir plots           # Also save a trend chart
  python run_analysis.py --metrics weight waist     # Compare selected metrics

Run with --help-history to see the expected JSON format.
        """,
    )

    parser.add_argument(
        "history_file",
        nargs="?",
        default="example_history.json",
        help="Path to JSON history file (default: example_history.json)",
    )

    parser.add_argument(
        "--metrics",
        "-m",
        nargs="+",
        choices=sorted(METRIC_ACCESSORS),
        metavar="METRIC",
        help="Metrics to compare (default: weight, BMI, body fat, muscle, "
        "visceral fat, metabolic age, waist, abdomen)",
    )

    parser.add_argument(
        "--plot-dir",
        "-p",
        help="Directory to save trend_plot.png in",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show debug logging from the calculators",
    )

    parser.add_argument(
        "--help-history",
        action="store_true",
        help="Show detailed help about the JSON history format",
    )

    args = parser.parse_args(argv)

    if args.help_history:
        show_history_help()
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not os.path.exists(args.history_file):
        print(f"Error: History file not found: {args.history_file}")
        print()
        print("Run with --help-history to see the expected JSON format.")
        return 1

    try:
        exit_code = run_analysis(
            history_path=args.history_file,
            metrics=args.metrics,
            plot_dir=args.plot_dir,
        )
        if exit_code == 0:
            print()
            print("Analysis completed successfully!")
        return exit_code

    except KeyboardInterrupt:
        print("\nAnalysis interrupted by user.")
        return 1


def show_history_help():
    """Show detailed help about the JSON history format."""
    help_text = """
JSON History Format
===================

{
  "subject_id": "<subject identifier>",
  "name": "<optional display name>",
  "assessments": [
    {
      "id": "<optional record id>",
      "timestamp": "YYYY-MM-DDTHH:MM:SSZ",
      "inputs": { <field>: "<value as typed>" | <number> | null }
    }
  ]
}

Input fields (all optional, blank or unparsable values count as unknown):
  age, height (cm), weight (kg), bodyFatManual (%), muscleMass (%),
  visceralFat, metabolicAge, gender (male|female),
  fatCalculationMethod (Bioimpedance|Skinfolds|Tape),
  tmbMethod (Mifflin-St Jeor|Harris-Benedict|Ten Haaf|Cunningham),
  sf_chest, sf_axillary, sf_triceps, sf_subscapular, sf_abdominal,
  sf_suprailiac, sf_thigh (skinfolds, mm),
  chest, waist, abdomen, hips (cm),
  armRight, armLeft, thighRight, thighLeft, calfRight, calfLeft (cm)

Example:
--------
{
  "subject_id": "student-42",
  "assessments": [
    {
      "timestamp": "2024-01-10T09:00:00Z",
      "inputs": {"age": "34", "height": "178", "weight": "84.2",
                 "gender": "male", "fatCalculationMethod": "Bioimpedance",
                 "bodyFatManual": "22.5", "waist": "92"}
    },
    {
      "timestamp": "2024-03-01T09:00:00Z",
      "inputs": {"age": "34", "height": "178", "weight": "81.0",
                 "gender": "male", "fatCalculationMethod": "Bioimpedance",
                 "bodyFatManual": "20.1", "waist": "89"}
    }
  ]
}
    """
    print(help_text)


if __name__ == "__main__":
    exit(main())
