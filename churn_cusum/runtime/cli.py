from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Sequence

from churn_cusum.config import *
from churn_cusum.components.signal_cleaner import SignalCleaningType
from churn_cusum.service.schema import SimulationParams, RunSummary
from churn_cusum.service.simulator import SimulationService
from churn_cusum.service.utils import sanitize_for_json


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Simulate customer churn and score CUSUM detection")
    parser.add_argument("--customers", type=int, default=DEFAULT_NUMBER_OF_CUSTOMERS)
    parser.add_argument("--left-censored", type=float, default=DEFAULT_PERCENT_LEFT_CENSORED)
    parser.add_argument("--right-censored", type=float, default=DEFAULT_PERCENT_RIGHT_CENSORED)
    parser.add_argument("--years", type=int, default=DEFAULT_OBSERVATION_PERIOD_YEARS)
    parser.add_argument("--churn-probability", type=float, default=DEFAULT_CHURN_PROBABILITY)
    parser.add_argument("--full-lifetime", action="store_true")
    parser.add_argument("--random-channels", action="store_true",
                        help="Random popularity-weighted channel subset per customer")
    parser.add_argument("--cleaning", choices=[m.value for m in SignalCleaningType],
                        default=DEFAULT_SIGNAL_CLEANING)
    parser.add_argument("--smoothing", type=float, default=DEFAULT_CUSUM_SMOOTHING)
    parser.add_argument("--reference", type=float, default=DEFAULT_CUSUM_REFERENCE)
    parser.add_argument("--std-dev", type=float, default=DEFAULT_CUSUM_STD_DEV)
    parser.add_argument("--k", type=float, default=DEFAULT_CUSUM_THRESHOLD_K, help="Threshold = reference + k * std-dev")
    parser.add_argument("--keep-zeros", action="store_true", help="Do not ignore zero weeks in CUSUM")
    parser.add_argument("--seed", type=int, default=DEFAULT_RANDOM_STATE)
    parser.add_argument("--json", action="store_true", help="Print the full summary as JSON")
    parser.add_argument("--log-level", default="WARNING")
    return parser


def params_from_args(args: argparse.Namespace) -> SimulationParams:
    overrides = {}
    if args.random_channels:
        overrides["channels"] = None
    return SimulationParams(
        number_of_customers=args.customers,
        percent_left_censored=args.left_censored,
        percent_right_censored=args.right_censored,
        observation_period_years=args.years,
        churn_probability=args.churn_probability,
        full_lifetime=args.full_lifetime,
        signal_cleaning=args.cleaning,
        cusum_smoothing=args.smoothing,
        cusum_reference=args.reference,
        cusum_std_dev=args.std_dev,
        cusum_threshold_k=args.k,
        cusum_ignore_zero_values=not args.keep_zeros,
        random_state=args.seed,
        **overrides,
    )


def format_summary(summary: RunSummary) -> str:
    lines = [f"{'Status':<16}{'Count':>8}{'Rate':>10}"]
    counts = [summary.true_positives, summary.false_positives, summary.true_negatives, summary.false_negatives]
    for (label, rate), count in zip(summary.rates().items(), counts):
        lines.append(f"{label:<16}{count:>8}{100 * rate:>9.2f}%")
    errors = summary.detection_errors()
    if errors:
        lines.append(f"Mean detection error: {sum(errors) / len(errors):.2f} weeks")
    if summary.failures:
        lines.append(f"Failed customers: {len(summary.failures)}")
    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING))

    try:
        params = params_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    summary = SimulationService().run_simulation(params)
    if args.json:
        print(json.dumps(sanitize_for_json(summary.model_dump(mode="json")), indent=2))
    else:
        print(format_summary(summary))
    return 0


if __name__ == "__main__":
    sys.exit(main())
