"""Generation statistics and run summaries."""

from __future__ import annotations

from typing import Callable

import numpy as np


def compute_generation_metrics(
    population: np.ndarray,
    objective: Callable[[float], float] | None = None,
) -> dict[str, float]:
    """Summarize one population.

    Value statistics ignore NaN and infinite genomes, which are counted in
    ``non_finite_count`` instead. ``diversity`` is the standard deviation of
    the finite values.
    """
    values = np.asarray(population, dtype=np.float64)
    finite = values[np.isfinite(values)]

    metrics: dict[str, float] = {
        "mean_value": 0.0,
        "max_value": 0.0,
        "min_value": 0.0,
        "best_objective": float("nan"),
        "diversity": 0.0,
        "non_finite_count": float(values.size - finite.size),
    }
    if finite.size:
        metrics["mean_value"] = float(finite.mean())
        metrics["max_value"] = float(finite.max())
        metrics["min_value"] = float(finite.min())
        metrics["diversity"] = float(finite.std())

    if objective is not None and finite.size:
        with np.errstate(all="ignore"):
            scores = np.array([objective(float(value)) for value in finite], dtype=np.float64)
        scores = scores[~np.isnan(scores)]
        if scores.size:
            metrics["best_objective"] = float(scores.max())
    return metrics


def build_summary(metrics_history: list[dict[str, float]]) -> dict[str, float]:
    """Build aggregate metrics from generation-level history."""
    if not metrics_history:
        return {
            "generations": 0.0,
            "max_value": 0.0,
            "best_objective": float("nan"),
            "peak_generation": 0.0,
            "mean_diversity": 0.0,
            "non_finite_total": 0.0,
        }

    maxes = np.array([float(m.get("max_value", 0.0)) for m in metrics_history], dtype=np.float64)
    objectives = np.array([float(m.get("best_objective", float("nan"))) for m in metrics_history], dtype=np.float64)
    diversities = np.array([float(m.get("diversity", 0.0)) for m in metrics_history], dtype=np.float64)
    non_finite = np.array([float(m.get("non_finite_count", 0.0)) for m in metrics_history], dtype=np.float64)

    has_objective = bool(np.any(~np.isnan(objectives)))
    return {
        "generations": float(len(metrics_history)),
        "max_value": float(maxes.max()),
        "best_objective": float(np.nanmax(objectives)) if has_objective else float("nan"),
        "peak_generation": float(np.argmax(maxes)),
        "mean_diversity": float(diversities.mean()),
        "non_finite_total": float(non_finite.sum()),
    }
