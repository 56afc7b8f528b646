"""Plot utilities for persisted run metrics."""

from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402

from data.logger import RunLogger  # noqa: E402


def plot_run(db_path: str | Path, run_id: str, output_path: str | Path) -> Path:
    """Render genome value and diversity curves for a run from SQLite logs."""
    logger = RunLogger(db_path)
    rows = logger.fetch_metrics(run_id)
    logger.close()
    if not rows:
        raise ValueError(f"No metrics recorded for run '{run_id}'.")

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    generations = [int(row["generation_index"]) for row in rows]
    mean_value = [float(row["mean_value"]) for row in rows]
    max_value = [float(row["max_value"]) for row in rows]
    diversity = [float(row["diversity"]) for row in rows]
    non_finite = [int(row["non_finite_count"]) for row in rows]

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(8, 6), sharex=True)
    ax1.plot(generations, mean_value, label="mean_value")
    ax1.plot(generations, max_value, label="max_value")
    ax1.set_ylabel("genome value")
    ax1.legend()

    ax2.plot(generations, diversity, label="diversity", color="tab:green")
    ax2.plot(generations, non_finite, label="non_finite_count", color="tab:red")
    ax2.set_xlabel("generation")
    ax2.legend()

    fig.tight_layout()
    fig.savefig(output)
    plt.close(fig)
    return output
