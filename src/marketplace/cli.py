"""Marketplace CLI — command-line interface for the transaction engine.

Usage:
    python -m marketplace.cli status
    python -m marketplace.cli demo
    python -m marketplace.cli simulate scenarios/ada_lin.json
    python -m marketplace.cli simulate scenario.json --keep-going

Every command runs against a fresh in-process engine; nothing is kept
between invocations.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from marketplace.policy.resolver import PolicyResolver
from marketplace.service import TransactionEngine
from marketplace.simulation import DEMO_SCENARIO, OperationResult, ScenarioRunner


DEFAULT_CONFIG = Path(__file__).resolve().parents[2] / "config"
CONFIG_ENV_VAR = "MARKETPLACE_CONFIG_DIR"


def _config_dir(args: argparse.Namespace) -> Path:
    if args.config is not None:
        return args.config
    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env)
    return DEFAULT_CONFIG


def _make_engine(config_dir: Path) -> TransactionEngine:
    """Create a TransactionEngine from the policy in config_dir."""
    resolver = PolicyResolver.from_config_dir(config_dir)
    return TransactionEngine(resolver)


def _print_results(results: list[OperationResult]) -> int:
    failed = 0
    for result in results:
        print(json.dumps(result.to_dict(), sort_keys=True, default=str))
        if not result.success:
            failed += 1
            print(f"Failed: step {result.step} ({result.op}): {'; '.join(result.errors)}", file=sys.stderr)
    return 0 if failed == 0 else 1


def cmd_status(args: argparse.Namespace) -> int:
    engine = _make_engine(_config_dir(args))
    print(json.dumps(engine.status(), indent=2))
    return 0


def cmd_demo(args: argparse.Namespace) -> int:
    """Run the built-in client/freelancer walkthrough."""
    engine = _make_engine(_config_dir(args))
    results = ScenarioRunner(engine).run(DEMO_SCENARIO)
    return _print_results(results)


def cmd_simulate(args: argparse.Namespace) -> int:
    """Run a JSON scenario file against a fresh engine."""
    path: Path = args.scenario
    try:
        with path.open("r", encoding="utf-8") as handle:
            steps: Any = json.load(handle)
    except OSError as e:
        print(f"Failed: cannot read scenario: {e}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"Failed: invalid JSON in {path}: {e}", file=sys.stderr)
        return 1
    if not isinstance(steps, list):
        print(f"Failed: {path} must contain a JSON list of steps", file=sys.stderr)
        return 1

    engine = _make_engine(_config_dir(args))
    results = ScenarioRunner(engine).run(steps, keep_going=args.keep_going)
    return _print_results(results)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="marketplace",
        description="Freelance marketplace — transaction engine CLI",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Path to config directory (default: ${CONFIG_ENV_VAR} or config/)",
    )
    sub = parser.add_subparsers(dest="command")

    # status
    sub.add_parser("status", help="Show marketplace status")

    # demo
    sub.add_parser("demo", help="Run the built-in post → bid → hire → review walkthrough")

    # simulate
    p_sim = sub.add_parser("simulate", help="Run a JSON scenario file")
    p_sim.add_argument("scenario", type=Path, help="Path to scenario JSON")
    p_sim.add_argument(
        "--keep-going", action="store_true",
        help="Continue after a failed step",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "status": cmd_status,
        "demo": cmd_demo,
        "simulate": cmd_simulate,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    try:
        return handler(args)
    except ValueError as e:
        print(f"Failed: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
