#!/usr/bin/env python3
"""CLI entry point for hidden-bijection deduction trials."""

import argparse
import json
import logging
import sys
from dataclasses import asdict

from matchem.config import Config, apply_env_overrides, load_config, STRATEGY_NAMES
from matchem.errors import ConfigError, InvariantViolationError, MatchemError
from matchem.harness import TrialRunner
from matchem.models import MatchState
from matchem.storage import save_run_summary


def build_config(args) -> Config:
    """Layer configuration: JSON file, then MATCHEM_* environment, then flags."""
    config = load_config(args.config)
    apply_env_overrides(config)

    run = config.run
    if args.size is not None:
        run.trial.size = args.size
    if args.strategy is not None:
        run.trial.strategy = args.strategy
    if args.seed is not None:
        run.seed = args.seed
    if args.validate:
        run.trial.validate = True
    if args.verbose:
        run.trial.verbose = True
    if getattr(args, "num_runs", None) is not None:
        run.num_runs = args.num_runs
    if getattr(args, "workers", None) is not None:
        run.workers = args.workers
    if getattr(args, "output_dir", None):
        config.output.output_dir = args.output_dir

    run.check()
    return config


def cmd_single(args):
    """Play one trial and print every round."""
    config = build_config(args)
    config.run.num_runs = 1
    runner = TrialRunner(config.run)
    result = runner.run_one(0)

    print(f"Strategy: {result.strategy}")
    print(f"Size: {result.size}")
    print(f"Seed: {result.seed}")
    print()
    for record in result.records:
        answer = "MATCH" if record.outcome is MatchState.MATCH else "no match"
        forced = ", ".join(f"{d.left}->{d.right}" for d in record.forced)
        forced_str = f" | forced: {forced}" if forced else ""
        print(
            f"  R{record.round}: ask {record.query[0]}->{record.query[1]} = {answer}"
            f"{forced_str} | guess {record.guess} scored {record.matches}/{result.size}"
        )
    print()
    print(f"Solved in {result.rounds} rounds ({result.num_forced} forced deductions)")


def cmd_batch(args):
    """Run many trials and report the average rounds per game."""
    config = build_config(args)
    run = config.run

    print("Running simulation with config:")
    print(f"  size={run.trial.size} strategy={run.trial.strategy} "
          f"num_runs={run.num_runs} seed={run.seed} workers={run.workers or 'auto'}")

    summary = TrialRunner(run).run()

    print(f"Running with {summary.workers} concurrent workspace slots")
    print(f"{summary.avg_rounds:.4f} avg rounds per game")
    print(f"Rounds range: {summary.min_rounds}-{summary.max_rounds}")
    print(f"Simulation took {summary.elapsed_seconds:.3f} seconds")

    if config.output.output_dir:
        filepath = save_run_summary(summary, config.output.output_dir, config.output)
        print(f"Saved summary to {filepath}")


def cmd_show_config(args):
    """Print the effective configuration as JSON."""
    config = build_config(args)
    print(json.dumps(asdict(config), indent=2))


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="JSON configuration file"
    )
    parser.add_argument(
        "--size", "-n",
        type=int,
        default=None,
        help="Number of items on each side (2-16, default 10)"
    )
    parser.add_argument(
        "--strategy", "-s",
        choices=list(STRATEGY_NAMES),
        default=None,
        help="Query/guess strategy (default belief)"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed (default: fresh entropy)"
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Check invariants after every round and stop on a violation"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log the full trial state after every round"
    )


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Deduce a hidden bijection with truth queries and scored guesses"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Single trial
    single_parser = subparsers.add_parser("single", help="Play a single trial")
    add_common_arguments(single_parser)
    single_parser.set_defaults(func=cmd_single)

    # Batch of trials
    batch_parser = subparsers.add_parser("batch", help="Run many trials and report averages")
    add_common_arguments(batch_parser)
    batch_parser.add_argument(
        "--num-runs",
        type=int,
        default=None,
        help="How many trials to run (default 1000)"
    )
    batch_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Concurrent workspace slots (default: CPU count)"
    )
    batch_parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save a JSON summary"
    )
    batch_parser.set_defaults(func=cmd_batch)

    # Effective configuration
    show_parser = subparsers.add_parser("show-config", help="Print the effective configuration")
    add_common_arguments(show_parser)
    show_parser.set_defaults(func=cmd_show_config)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        args.func(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except InvariantViolationError as e:
        print(f"Invariant violation: {e}", file=sys.stderr)
        if e.state_dump:
            print(e.state_dump, file=sys.stderr)
        sys.exit(3)
    except MatchemError as e:
        print(f"Internal error: {e}", file=sys.stderr)
        sys.exit(3)


if __name__ == "__main__":
    main()
