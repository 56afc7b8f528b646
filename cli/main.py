"""Command-line entry points for running, batching, and plotting GA experiments."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

# Allow `python cli/main.py ...` execution from IDEs by adding repo root to sys.path.
if __package__ in {None, ""}:
    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))

from configs.loader import ConfigLoader, ExperimentConfig
from data.logger import RunLogger
from main import STATUS_CONVERGED, STATUS_INVALID_FITNESS, RunOutcome, run_experiment


EXIT_NOT_CONVERGED = 2
EXIT_INVALID_FITNESS = 3


def _run_single(config: ExperimentConfig, db_path: Path) -> RunOutcome:
    logger = RunLogger(db_path)
    try:
        return run_experiment(config, logger=logger)
    finally:
        logger.close()


def _exit_code(outcome: RunOutcome) -> int:
    if outcome.status == STATUS_CONVERGED:
        return 0
    if outcome.status == STATUS_INVALID_FITNESS:
        return EXIT_INVALID_FITNESS
    return EXIT_NOT_CONVERGED


def _describe(outcome: RunOutcome) -> str:
    if outcome.converged:
        return (
            f"{outcome.run_id} converged generation={outcome.generations} "
            f"genome={outcome.best_genome:g} objective={outcome.best_objective:g} seed={outcome.seed}"
        )
    return f"{outcome.run_id} {outcome.status} generations={outcome.generations} seed={outcome.seed}"


def run_cli(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="ga")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = parser.add_subparsers(dest="command", required=True)

    run_cmd = sub.add_parser("run")
    run_cmd.add_argument("--config", default="configs/reference.yaml")
    run_cmd.add_argument("--db", default="ga_metrics.db")

    batch_cmd = sub.add_parser("batch")
    batch_cmd.add_argument("--config", default="configs/batch.yaml")
    batch_cmd.add_argument("--db", default="ga_metrics.db")

    plot_cmd = sub.add_parser("plot")
    plot_cmd.add_argument("--run", required=True)
    plot_cmd.add_argument("--db", default="ga_metrics.db")
    plot_cmd.add_argument("--out", default="artifacts/metrics.png")

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))

    if args.command == "run":
        config = ConfigLoader.load(args.config)
        outcome = _run_single(config, Path(args.db))
        print(_describe(outcome))
        return _exit_code(outcome)

    if args.command == "batch":
        configs = ConfigLoader.load_many(args.config)
        exit_code = 0
        for config in configs:
            outcome = _run_single(config, Path(args.db))
            print(_describe(outcome))
            exit_code = max(exit_code, _exit_code(outcome))
        return exit_code

    if args.command == "plot":
        from visualization.plotting import plot_run

        path = plot_run(args.db, args.run, args.out)
        print(path)
        return 0

    return 1


if __name__ == "__main__":
    raise SystemExit(run_cli())
