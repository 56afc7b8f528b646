"""Configuration loading and validation utilities for GA experiments."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from evolution.operators import CROSSING_CHANCE, MUTATION_CHANCE
from evolution.population import (
    DEFAULT_HIGH,
    DEFAULT_LOW,
    DEFAULT_POPULATION_SIZE,
    NonFinitePolicy,
    parse_non_finite_policy,
)


_REQUIRED_KEYS: tuple[str, ...] = ("objective",)
_FITNESS_SOURCES: tuple[str, ...] = ("genome", "objective")


@dataclass(frozen=True)
class ExperimentConfig:
    """Validated experiment configuration container.

    Keys the GA does not know are kept in ``extras`` and persisted with the
    run configuration.
    """

    objective: str = "reference"
    population_size: int = DEFAULT_POPULATION_SIZE
    initial_low: float = DEFAULT_LOW
    initial_high: float = DEFAULT_HIGH
    target: float | None = None
    precision_digits: int = 1
    tolerance: float | None = None
    crossing_chance: float = CROSSING_CHANCE
    mutation_chance: float = MUTATION_CHANCE
    max_generations: int = 10000
    seed: int | None = None
    non_finite_policy: NonFinitePolicy = NonFinitePolicy.ALLOW
    fitness_source: str = "genome"
    extras: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return a full, JSON-compatible dictionary view of the configuration."""
        payload = {item.name: getattr(self, item.name) for item in fields(self) if item.name != "extras"}
        payload["non_finite_policy"] = self.non_finite_policy.value
        payload.update(self.extras)
        return payload


class ConfigLoader:
    """Load and validate experiment configuration files (YAML or JSON)."""

    @staticmethod
    def load(path: str | Path) -> ExperimentConfig:
        """Load a single experiment config from ``path``.

        Args:
            path: Path to a YAML or JSON config file.

        Returns:
            A validated ``ExperimentConfig`` instance.
        """
        payload = _read_config_payload(path)
        if not isinstance(payload, Mapping):
            raise ValueError("Single config file must contain a mapping object.")
        return build_config(payload)

    @staticmethod
    def load_many(path: str | Path) -> list[ExperimentConfig]:
        """Load one or many experiment configs from ``path``.

        Supports:
            - top-level mapping for single experiment
            - top-level list of mappings
            - top-level mapping with an ``experiments`` list
        """
        payload = _read_config_payload(path)

        if isinstance(payload, list):
            return [build_config(item) for item in payload]

        if isinstance(payload, Mapping) and "experiments" in payload:
            experiments = payload["experiments"]
            if not isinstance(experiments, list):
                raise ValueError("'experiments' must be a list of mappings.")
            return [build_config(item) for item in experiments]

        if isinstance(payload, Mapping):
            return [build_config(payload)]

        raise ValueError("Unsupported config file structure.")


def _read_config_payload(path: str | Path) -> Any:
    """Read raw config payload from JSON or YAML file."""
    config_path = Path(path)
    suffix = config_path.suffix.lower()
    content = config_path.read_text(encoding="utf-8")

    if suffix == ".json":
        return json.loads(content)

    if suffix in {".yaml", ".yml"}:
        return yaml.safe_load(content)

    raise ValueError(f"Unsupported config extension: {suffix}")


def _optional_float(payload: Mapping[str, Any], key: str) -> float | None:
    value = payload.get(key)
    return None if value is None else float(value)


def build_config(payload: Mapping[str, Any]) -> ExperimentConfig:
    """Validate raw mapping and build ``ExperimentConfig``."""
    if not isinstance(payload, Mapping):
        raise ValueError("Experiment config must be a mapping.")
    missing = [key for key in _REQUIRED_KEYS if key not in payload]
    if missing:
        raise ValueError(f"Missing required config keys: {', '.join(missing)}")

    objective = str(payload["objective"])
    population_size = int(payload.get("population_size", DEFAULT_POPULATION_SIZE))
    initial_low = float(payload.get("initial_low", DEFAULT_LOW))
    initial_high = float(payload.get("initial_high", DEFAULT_HIGH))
    target = _optional_float(payload, "target")
    precision_digits = int(payload.get("precision_digits", 1))
    tolerance = _optional_float(payload, "tolerance")
    crossing_chance = float(payload.get("crossing_chance", CROSSING_CHANCE))
    mutation_chance = float(payload.get("mutation_chance", MUTATION_CHANCE))
    max_generations = int(payload.get("max_generations", 10000))
    raw_seed = payload.get("seed")
    seed = None if raw_seed is None else int(raw_seed)
    non_finite_policy = parse_non_finite_policy(payload.get("non_finite_policy", NonFinitePolicy.ALLOW.value))
    fitness_source = str(payload.get("fitness_source", "genome"))

    if not objective:
        raise ValueError("objective must be non-empty")
    if population_size <= 0:
        raise ValueError("population_size must be > 0")
    if initial_low > initial_high:
        raise ValueError("initial_low must be <= initial_high")
    if precision_digits < 0:
        raise ValueError("precision_digits must be >= 0")
    if tolerance is not None and tolerance < 0.0:
        raise ValueError("tolerance must be >= 0.0")
    if not 0.0 <= crossing_chance <= 1.0:
        raise ValueError("crossing_chance must be in [0.0, 1.0]")
    if not 0.0 <= mutation_chance <= 1.0:
        raise ValueError("mutation_chance must be in [0.0, 1.0]")
    if max_generations < 0:
        raise ValueError("max_generations must be >= 0")
    if fitness_source not in _FITNESS_SOURCES:
        raise ValueError(f"fitness_source must be one of: {', '.join(_FITNESS_SOURCES)}")

    known = {item.name for item in fields(ExperimentConfig)}
    extras = {k: v for k, v in payload.items() if k not in known}

    return ExperimentConfig(
        objective=objective,
        population_size=population_size,
        initial_low=initial_low,
        initial_high=initial_high,
        target=target,
        precision_digits=precision_digits,
        tolerance=tolerance,
        crossing_chance=crossing_chance,
        mutation_chance=mutation_chance,
        max_generations=max_generations,
        seed=seed,
        non_finite_policy=non_finite_policy,
        fitness_source=fitness_source,
        extras=extras,
    )
