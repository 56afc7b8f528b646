"""Experiment driver: seed a population, evolve it, report progress."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from pathlib import Path

from configs.loader import ConfigLoader, ExperimentConfig
from core.analytics import build_summary, compute_generation_metrics
from core.deterministic_rng import DeterministicRNG
from data.logger import RunLogger
from engine.component_registry import Objective, create_objective
from evolution.convergence import precision_predicate, tolerance_from_digits
from evolution.engine import EvolutionEngine, GenerationReport, NotConverged
from evolution.population import sample_initial_population
from evolution.selection import InvalidFitnessDistribution


LOGGER = logging.getLogger(__name__)

STATUS_CONVERGED = "converged"
STATUS_NOT_CONVERGED = "not_converged"
STATUS_INVALID_FITNESS = "invalid_fitness"
STATUS_FAILED = "failed"


@dataclass(frozen=True)
class RunOutcome:
    """What a finished experiment reports back to its caller."""

    run_id: str | None
    seed: int
    status: str
    generations: int
    target: float
    tolerance: float
    best_genome: float | None = None
    best_objective: float | None = None

    @property
    def converged(self) -> bool:
        return self.status == STATUS_CONVERGED


def resolve_tolerance(config: ExperimentConfig) -> float:
    if config.tolerance is not None:
        return float(config.tolerance)
    return tolerance_from_digits(config.precision_digits)


def resolve_target(config: ExperimentConfig, objective: Objective) -> float:
    """Explicit target, or the objective at the upper sampling bound."""
    if config.target is not None:
        return float(config.target)
    return float(objective(config.initial_high))


def build_engine(config: ExperimentConfig, rng: random.Random) -> EvolutionEngine:
    """Sample the initial population and wire an engine from configuration."""
    objective = create_objective(config.objective)
    population = sample_initial_population(
        rng,
        population_size=config.population_size,
        low=config.initial_low,
        high=config.initial_high,
    )
    return EvolutionEngine(
        population=population,
        rng=rng,
        crossing_chance=config.crossing_chance,
        mutation_chance=config.mutation_chance,
        non_finite_policy=config.non_finite_policy,
        fitness=objective if config.fitness_source == "objective" else None,
    )


def run_experiment(config: ExperimentConfig, logger: RunLogger | None = None) -> RunOutcome:
    """Run one experiment to convergence or to its generation cap."""
    rng = DeterministicRNG(config.seed)
    objective = create_objective(config.objective)
    engine = build_engine(config, rng.python_rng)
    target = resolve_target(config, objective)
    tolerance = resolve_tolerance(config)
    predicate = precision_predicate(objective, target, tolerance)

    run_id: str | None = None
    if logger is not None:
        run_id = logger.start_run(
            config=config.to_dict(),
            seed=int(rng.seed),
            metadata={"target": target, "tolerance": tolerance},
        )

    history: list[dict[str, float]] = []

    def report(generation: GenerationReport) -> None:
        metrics = compute_generation_metrics(generation.population, objective)
        history.append(metrics)
        LOGGER.info(
            "Generation %d: max=%g mean=%g best_objective=%g non_finite=%d",
            generation.generation_index,
            metrics["max_value"],
            metrics["mean_value"],
            metrics["best_objective"],
            int(metrics["non_finite_count"]),
        )
        LOGGER.debug(
            "Generation %d population: %s",
            generation.generation_index,
            " ".join(f"{float(value):g}" for value in generation.population),
        )
        if logger is not None and run_id is not None:
            logger.log_metrics(run_id=run_id, generation_index=generation.generation_index, metrics=metrics)

    def finish(status: str, generations: int, best_genome: float | None = None) -> RunOutcome:
        summary = build_summary(history)
        LOGGER.info(
            "Run %s: %s after %d generation(s); peak max=%g at generation %d, best_objective=%g, "
            "mean_diversity=%g, non_finite_total=%d.",
            run_id or "-",
            status,
            generations,
            summary["max_value"],
            int(summary["peak_generation"]),
            summary["best_objective"],
            summary["mean_diversity"],
            int(summary["non_finite_total"]),
        )
        if logger is not None and run_id is not None:
            logger.finish_run(run_id, status, generations, best_genome)
        return RunOutcome(
            run_id=run_id,
            seed=int(rng.seed),
            status=status,
            generations=generations,
            target=target,
            tolerance=tolerance,
            best_genome=best_genome,
            best_objective=None if best_genome is None else float(objective(best_genome)),
        )

    try:
        report(GenerationReport(engine.generation_index, engine.population))
        result = engine.run(predicate, config.max_generations, on_generation=report)
    except NotConverged as exc:
        LOGGER.warning("%s Target was %g +/- %g.", exc, target, tolerance)
        return finish(STATUS_NOT_CONVERGED, exc.generations)
    except InvalidFitnessDistribution as exc:
        LOGGER.warning("Selection failed in generation %d: %s", engine.generation_index + 1, exc)
        return finish(STATUS_INVALID_FITNESS, engine.generation_index)
    except Exception:
        if logger is not None and run_id is not None:
            logger.finish_run(run_id, STATUS_FAILED, engine.generation_index)
        raise

    best_genome = float(result.best_genome)
    LOGGER.info(
        "Found a precise enough value %g in generation %d; target is %g.",
        best_genome,
        result.generations,
        target,
    )
    return finish(STATUS_CONVERGED, result.generations, best_genome)


def main(config_path: str = "configs/reference.yaml") -> None:
    """Load config and run one experiment, logging metrics to SQLite."""
    logging.basicConfig(level=logging.INFO)
    config = ConfigLoader.load(config_path)
    logger = RunLogger(Path("ga_metrics.db"))
    try:
        run_experiment(config, logger=logger)
    finally:
        logger.close()


if __name__ == "__main__":
    main()
