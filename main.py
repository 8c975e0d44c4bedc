#!/usr/bin/env python3
"""
Command-line entry point for the scoop statistics engines.
"""

# Sub-commands (README-style):
#   clusters                DBSCAN on two numeric columns with Euclidean distance.
#   mahalanobis             Distance (and similarity) of every row to an origin.
#   paired-ttest            Paired t-test on two columns of the same rows.
#   ttest                   Welch's t-test between two groups of one column.
#   chi2                    Chi-squared independence test on a table of counts.
#   sample-size-mean        Sample size to estimate a mean.
#   sample-size-proportion  Sample size to estimate a proportion.
#
# Input is a CSV read with pandas; enriched rows and test results are written
# back as CSV when --output is given. Exit code 2 signals invalid input.

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from typing import Dict, List

import matplotlib

matplotlib.use("Agg")

import pandas as pd

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from scoop.errors import InvalidParameterError, StatisticsError
from scoop.output import save_records_to_csv, save_test_result_to_csv
from scoop.plotting import plot_clusters, plot_distance_ranking
from scoop.records import as_records, extract_numeric
from scoop.schema import DEFAULT_FIELDS
from scoop.stats import (
    TAILS,
    add_clusters,
    add_mahalanobis_distance,
    chi_squared_independence_test,
    euclidean_distance,
    paired_t_test,
    sample_size_mean,
    sample_size_proportion,
    two_sample_t_test,
)

logger = logging.getLogger("scoop")


def _load(path: str) -> List[Dict]:
    logger.info("Reading %s", path)
    return as_records(pd.read_csv(path))


def _parse_origin(pairs: List[str]) -> Dict[str, float]:
    origin: Dict[str, float] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise InvalidParameterError(
                f'Invalid origin "{pair}". Use KEY=VALUE, e.g. --origin income=52000.'
            )
        try:
            origin[key] = float(value)
        except ValueError:
            raise InvalidParameterError(
                f'Invalid origin value for "{key}": {value!r}.'
            ) from None
    return origin


def _report(result) -> None:
    for field, value in result.to_dict().items():
        print(f"{field}: {value}")


def cmd_clusters(args: argparse.Namespace) -> None:
    records = _load(args.input)
    # Validate both coordinates up front so the metric only sees numbers.
    extract_numeric(records, args.x)
    extract_numeric(records, args.y)

    def distance(a, b):
        return euclidean_distance(a[args.x], a[args.y], b[args.x], b[args.y])

    add_clusters(records, args.min_distance, args.min_neighbours, distance, reset=True)
    counts = pd.Series([r[DEFAULT_FIELDS.cluster_type] for r in records]).value_counts()
    for cluster_type, n in counts.items():
        print(f"{cluster_type}: {n}")

    if args.output:
        save_records_to_csv(records, args.output)
    if args.plot_dir:
        plot_clusters(records, args.x, args.y, args.plot_dir)


def cmd_mahalanobis(args: argparse.Namespace) -> None:
    records = _load(args.input)
    origin = _parse_origin(args.origin)
    add_mahalanobis_distance(origin, records, similarity=args.similarity)

    ranked = sorted(records, key=lambda r: r[DEFAULT_FIELDS.distance], reverse=True)
    for record in ranked[: args.top]:
        label = record.get(args.label_key) if args.label_key else ""
        print(f"{label}\t{record[DEFAULT_FIELDS.distance]:.4f}".lstrip())

    if args.output:
        save_records_to_csv(records, args.output)
    if args.plot_dir:
        plot_distance_ranking(
            records, args.plot_dir, label_key=args.label_key, top=args.top
        )


def cmd_paired_ttest(args: argparse.Namespace) -> None:
    records = _load(args.input)
    result = paired_t_test(
        records,
        args.first,
        args.second,
        tail=args.tail,
        hypothesized_difference=args.hypothesized_difference,
    )
    _report(result)
    if args.output:
        save_test_result_to_csv(result, args.output)


def cmd_ttest(args: argparse.Namespace) -> None:
    records = _load(args.input)
    groups = [str(r.get(args.group_key)) for r in records]
    group1 = [r for r, g in zip(records, groups) if g == args.group1]
    group2 = [r for r, g in zip(records, groups) if g == args.group2]
    result = two_sample_t_test(group1, group2, args.key, tail=args.tail)
    _report(result)
    if args.output:
        save_test_result_to_csv(result, args.output)


def cmd_chi2(args: argparse.Namespace) -> None:
    records = _load(args.input)
    result = chi_squared_independence_test(records, args.row, args.col, args.count)
    print(f"chi_squared: {result.chi_squared}")
    print(f"degrees_of_freedom: {result.degrees_of_freedom}")
    print(f"p_value: {result.p_value}")
    for message in result.warnings:
        print(message)
    if args.output:
        save_test_result_to_csv(result, args.output)


def cmd_sample_size_mean(args: argparse.Namespace) -> None:
    records = _load(args.input)
    size = sample_size_mean(
        records,
        args.key,
        args.confidence,
        args.margin,
        population_size=args.population_size,
    )
    print(size)


def cmd_sample_size_proportion(args: argparse.Namespace) -> None:
    print(sample_size_proportion(args.population_size, args.confidence, args.margin))


def _build_arg_parser() -> argparse.ArgumentParser:
    """Build command-line parser for module execution."""
    parser = argparse.ArgumentParser(
        description="Statistics for newsroom datasets: outliers, clusters and tests."
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("clusters", help="DBSCAN clustering on two columns.")
    p.add_argument("--input", required=True, help="Path to input CSV file.")
    p.add_argument("--x", required=True, help="First coordinate column.")
    p.add_argument("--y", required=True, help="Second coordinate column.")
    p.add_argument("--min-distance", type=float, required=True)
    p.add_argument("--min-neighbours", type=int, required=True)
    p.add_argument("--output", help="CSV path for labelled rows.")
    p.add_argument("--plot-dir", help="Directory for the cluster figure.")
    p.set_defaults(func=cmd_clusters)

    p = sub.add_parser("mahalanobis", help="Mahalanobis distance to an origin.")
    p.add_argument("--input", required=True, help="Path to input CSV file.")
    p.add_argument(
        "--origin",
        action="append",
        required=True,
        metavar="KEY=VALUE",
        help="Origin coordinate; repeat once per variable.",
    )
    p.add_argument("--similarity", action="store_true", help="Also write similarity.")
    p.add_argument("--label-key", help="Column used to label rows in the report.")
    p.add_argument("--top", type=int, default=10, help="Rows to print.")
    p.add_argument("--output", help="CSV path for annotated rows.")
    p.add_argument("--plot-dir", help="Directory for the ranking figure.")
    p.set_defaults(func=cmd_mahalanobis)

    p = sub.add_parser("paired-ttest", help="Paired t-test on two columns.")
    p.add_argument("--input", required=True, help="Path to input CSV file.")
    p.add_argument("--first", required=True)
    p.add_argument("--second", required=True)
    p.add_argument("--tail", choices=TAILS, default="two-tailed")
    p.add_argument("--hypothesized-difference", type=float, default=0.0)
    p.add_argument("--output", help="CSV path for the result.")
    p.set_defaults(func=cmd_paired_ttest)

    p = sub.add_parser("ttest", help="Welch's two-sample t-test.")
    p.add_argument("--input", required=True, help="Path to input CSV file.")
    p.add_argument("--key", required=True, help="Numeric column to compare.")
    p.add_argument("--group-key", required=True, help="Column holding the group.")
    p.add_argument("--group1", required=True)
    p.add_argument("--group2", required=True)
    p.add_argument("--tail", choices=TAILS, default="two-tailed")
    p.add_argument("--output", help="CSV path for the result.")
    p.set_defaults(func=cmd_ttest)

    p = sub.add_parser("chi2", help="Chi-squared test of independence.")
    p.add_argument("--input", required=True, help="Path to input CSV file.")
    p.add_argument("--row", required=True)
    p.add_argument("--col", required=True)
    p.add_argument("--count", required=True)
    p.add_argument("--output", help="CSV path for the result.")
    p.set_defaults(func=cmd_chi2)

    p = sub.add_parser("sample-size-mean", help="Sample size to estimate a mean.")
    p.add_argument("--input", required=True, help="Path to pilot CSV file.")
    p.add_argument("--key", required=True)
    p.add_argument("--confidence", type=int, default=95)
    p.add_argument("--margin", type=float, required=True)
    p.add_argument("--population-size", type=int)
    p.set_defaults(func=cmd_sample_size_mean)

    p = sub.add_parser(
        "sample-size-proportion", help="Sample size to estimate a proportion."
    )
    p.add_argument("--population-size", type=int, required=True)
    p.add_argument("--confidence", type=int, default=95)
    p.add_argument("--margin", type=float, required=True, help="Percent, 1-100.")
    p.set_defaults(func=cmd_sample_size_proportion)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint; returns the process exit code."""
    parser = _build_arg_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    start_time = time.time()
    try:
        args.func(args)
    except StatisticsError as exc:
        logging.error("%s failed: %s", args.command, exc)
        return 2

    logging.info("%s completed in %.2f seconds", args.command, time.time() - start_time)
    return 0


if __name__ == "__main__":
    sys.exit(main())
