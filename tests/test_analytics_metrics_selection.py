"""Tests for generation metrics and run summaries."""

from __future__ import annotations

import math

import numpy as np
import pytest

from core.analytics import build_summary, compute_generation_metrics


def test_metrics_ignore_non_finite_genomes() -> None:
    population = np.array([1.0, 2.0, np.inf, np.nan], dtype=np.float32)

    metrics = compute_generation_metrics(population, objective=lambda x: x * 2.0)

    assert metrics["non_finite_count"] == 2.0
    assert metrics["mean_value"] == 1.5
    assert metrics["max_value"] == 2.0
    assert metrics["min_value"] == 1.0
    assert metrics["diversity"] == pytest.approx(0.5)
    assert metrics["best_objective"] == 4.0


def test_metrics_without_objective() -> None:
    metrics = compute_generation_metrics(np.array([3.0, 3.0], dtype=np.float32))

    assert metrics["diversity"] == 0.0
    assert math.isnan(metrics["best_objective"])


def test_metrics_for_all_nan_population() -> None:
    metrics = compute_generation_metrics(np.array([np.nan], dtype=np.float32), objective=lambda x: x)

    assert metrics["non_finite_count"] == 1.0
    assert metrics["max_value"] == 0.0
    assert math.isnan(metrics["best_objective"])


def test_build_summary() -> None:
    history = [
        {"max_value": 10.0, "best_objective": 10.0, "diversity": 2.0, "non_finite_count": 0.0},
        {"max_value": 19.0, "best_objective": float("nan"), "diversity": 1.0, "non_finite_count": 1.0},
        {"max_value": 15.0, "best_objective": 15.0, "diversity": 0.0, "non_finite_count": 0.0},
    ]

    summary = build_summary(history)

    assert summary["generations"] == 3.0
    assert summary["max_value"] == 19.0
    assert summary["best_objective"] == 15.0
    assert summary["peak_generation"] == 1.0
    assert summary["mean_diversity"] == 1.0
    assert summary["non_finite_total"] == 1.0


def test_build_summary_empty() -> None:
    summary = build_summary([])

    assert summary["generations"] == 0.0
    assert math.isnan(summary["best_objective"])
