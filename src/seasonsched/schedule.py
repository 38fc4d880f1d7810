#!/usr/bin/env python3
"""Season Schedule Builder.

Generate mode (default):
    seasonsched [config.yaml] [--seed N] [-o DIR]

    Builds fixtures for every competition in the config, dates them in one
    calendar pass and writes:
      {DIR}/schedule.txt  - Human-readable week-by-week + per-team schedule
      {DIR}/schedule.csv  - One row per match (re-importable)
      {DIR}/stats.txt     - Validation report + statistics

Verify mode:
    seasonsched --verify <schedule.csv> [config.yaml]

    Re-imports a schedule CSV and checks all constraints against config.
    Exit code 0 if valid, 1 if violations found.

Examples:
    seasonsched                             # default config, random seed
    seasonsched --seed 42 -o season2026     # reproducible, custom output dir
    seasonsched --verify output/schedule.csv
"""

import argparse
import logging
import random
import sys
from pathlib import Path

from seasonsched.config import ConfigError, load_config
from seasonsched.constraints import validate_schedule, format_validation_report
from seasonsched.output import read_schedule_csv, write_schedule
from seasonsched.scheduler import build_windows
from seasonsched.season import SeasonOrchestrator
from seasonsched.stats import compute_stats, format_stats_report
from seasonsched.store import InMemoryStore


def main():
    parser = argparse.ArgumentParser(
        description="Season Schedule Builder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Output files (generate mode):
  {dir}/schedule.txt   Human-readable schedule (week view + per-team)
  {dir}/schedule.csv   One row per match, re-importable with --verify
  {dir}/stats.txt      Validation report + statistics
""",
    )
    parser.add_argument(
        "config", nargs="?", default="config.yaml",
        help="Path to config YAML file (default: config.yaml)"
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Random seed for the knockout and group draws "
             "(default: season.seed from config)"
    )
    parser.add_argument(
        "--output-prefix", "-o", default="output",
        help="Output directory for generated files (default: output/)"
    )
    parser.add_argument(
        "--verify", metavar="CSV",
        help="Verify an existing schedule CSV instead of generating"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Log scheduling progress"
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config_path = args.config
    if not Path(config_path).exists():
        print(f"Error: config file {config_path} not found")
        sys.exit(1)

    print(f"Loading config from {config_path}...")
    try:
        config = load_config(config_path)
    except ConfigError as e:
        print("Config validation errors:")
        for err in e.errors:
            print(f"  {err}")
        sys.exit(1)

    year = config["season"]["year"]
    competitions = {c.id: c for c in config["competitions"]}
    windows = build_windows(year, config["windows"])

    if args.verify:
        # Verification mode
        print(f"Verifying schedule from {args.verify}...")
        matches = read_schedule_csv(args.verify)
        print(f"Loaded {len(matches)} matches")

        result = validate_schedule(matches, competitions, windows)
        print(format_validation_report(result))

        stats = compute_stats(matches, competitions)
        print("\n" + format_stats_report(stats))
        sys.exit(0 if result["valid"] else 1)

    # Generation mode
    seed = args.seed if args.seed is not None else config["season"]["seed"]
    print(f"Generating {year} schedule (seed={seed})...")

    store = InMemoryStore(config["teams"], config["competitions"])
    orchestrator = SeasonOrchestrator(
        store, store, store,
        windows=config["windows"],
        rng=random.Random(seed),
    )
    season = orchestrator.start_new_season(year)
    matches = store.find_matches_by_season(season.id)
    dropped = orchestrator.last_result.dropped_rounds

    if not matches:
        print("Error: no matches were scheduled!")
        sys.exit(1)

    # Validate
    print("\nValidating...")
    result = validate_schedule(matches, competitions, windows)
    report = format_validation_report(result)
    print(report)

    # Stats
    stats = compute_stats(matches, competitions, dropped)
    stats_text = format_stats_report(stats)
    print("\n" + stats_text)

    # Write outputs
    print("\nWriting output files...")
    write_schedule(matches, competitions, config["teams"],
                   output_prefix=args.output_prefix, dropped_rounds=dropped)

    stats_path = Path(args.output_prefix) / "stats.txt"
    stats_path.write_text(report + "\n\n" + stats_text)
    print(f"Written: {stats_path}")

    if result["valid"] and not dropped:
        print("\nSchedule generated successfully!")
    elif result["valid"]:
        print(f"\nSchedule generated, but {len(dropped)} rounds did not fit "
              f"their windows.")
        print("Review the dropped rounds above and widen the windows.")
    else:
        print(f"\nSchedule has {len(result['errors'])} constraint violations.")


if __name__ == "__main__":
    main()
