"""
Trend-Path command line.

Usage:
    trendpath run input.json                      # Report for an input file
    trendpath run input.json --settings my.json   # Custom settings file
    trendpath run input.json --source-mode per_product --json
    trendpath demo --seed 7                       # Synthetic fast-food network

Exit codes: 0 ok, 1 input/settings error, 2 usage error (argparse).
"""

from dataclasses import replace
from typing import List, Optional
import argparse
import json
import logging
import sys

from .domain.exceptions import InputFormatError
from .domain.models import RunResult, SourceMode
from .persistence.input_loader import load_input
from .sample_data import demo_network
from .settings import load_settings
from .utils.logging_config import setup_logging
from .workflows.trend_path import TrendPathWorkflow

logger = logging.getLogger(__name__)


def format_report(result: RunResult, include_issues: bool = True) -> str:
    """Plain-text report of one run."""
    lines = [
        "Trend-Path Results",
        "-" * 40,
        f"Source mode: {result.source_mode.value}"
        + (f" (main supplier: {result.main_supplier})" if result.main_supplier else ""),
        f"Depletion warning: {'YES - RESTOCK SOON!' if result.depletion_warning else 'No'}",
        f"Earliest depletion: {result.min_depletion if result.min_depletion is not None else 'never'}",
    ]

    for name, outcome in result.outcomes.items():
        path = " -> ".join(outcome.path) if outcome.path is not None else "No path found"
        depletion = outcome.depletion_periods if outcome.depletion_periods is not None else "never"
        flags = []
        if outcome.is_spike:
            flags.append("SPIKE")
        if outcome.viral:
            flags.append("VIRAL")
        lines.append("")
        lines.append(f"Product: {name}" + (f" [{', '.join(flags)}]" if flags else ""))
        lines.append(f"  Baseline forecast: {outcome.baseline_forecast:.2f} units/period")
        lines.append(f"  Adjusted forecast: {outcome.adjusted_forecast:.2f} units/period"
                     f" ({outcome.spike_count} spiking node(s) on path)")
        lines.append(f"  Periods to depletion: {depletion}")
        lines.append(f"  Optimal supply path: {path}"
                     + (f" (cost {outcome.path_cost:.2f})" if outcome.path_cost is not None else ""))

    if include_issues and result.issues:
        lines.append("")
        lines.append("Issues:")
        for issue in result.issues:
            lines.append(issue.format_for_display())

    return "\n".join(lines)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trendpath",
        description="Spike-aware demand forecasting and supply routing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--settings", type=str, help="settings.json path (default: data/settings.json)")
    parser.add_argument("--source-mode", choices=[m.value for m in SourceMode],
                        help="Override source_mode setting")
    parser.add_argument("--workers", type=int, help="Override max_workers setting")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("--log-dir", type=str, help="Log directory (default: logs/)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log info messages to the console")

    sub = parser.add_subparsers(dest="command", required=True)

    run_parser = sub.add_parser("run", help="Run on a JSON input file")
    run_parser.add_argument("input", type=str, help="Input JSON (products + edges)")

    demo_parser = sub.add_parser("demo", help="Run on synthetic demo data")
    demo_parser.add_argument("--seed", type=int, default=7, help="Random seed (default: 7)")
    demo_parser.add_argument("--hours", type=int, default=72, help="Hours of history (default: 72)")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    setup_logging(
        log_dir=args.log_dir,
        console_level=logging.INFO if args.verbose else logging.WARNING,
    )

    settings = load_settings(args.settings)
    if args.source_mode:
        settings = replace(settings, source_mode=SourceMode(args.source_mode))
    if args.workers is not None:
        try:
            settings = replace(settings, max_workers=args.workers)
        except ValueError as e:
            print(f"❌ Invalid --workers: {e}")
            return 1

    issues = []
    if args.command == "run":
        try:
            run_input = load_input(args.input)
        except (OSError, InputFormatError) as e:
            logger.error("Cannot load input %s: %s", args.input, e)
            print(f"❌ Cannot load input: {e}")
            return 1
        products, edges, issues = run_input.products, run_input.edges, run_input.issues
    else:
        products, edges = demo_network(seed=args.seed, hours=args.hours)

    result = TrendPathWorkflow(settings).run(products, edges)
    result.issues[:0] = issues

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_report(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
