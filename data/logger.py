"""SQLite-backed run metadata and per-generation metrics logging."""

from __future__ import annotations

import hashlib
import json
import math
import platform
import sqlite3
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping


@dataclass(frozen=True)
class GenerationMetrics:
    """Structured per-generation metrics payload."""

    generation_index: int
    mean_value: float = 0.0
    max_value: float = 0.0
    min_value: float = 0.0
    best_objective: float | None = None
    diversity: float = 0.0
    non_finite_count: int = 0


def _nullable(value: Any) -> float | None:
    if value is None:
        return None
    number = float(value)
    return None if math.isnan(number) else number


class RunLogger:
    """Persist run metadata and per-generation metrics in SQLite."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self.connection = sqlite3.connect(self.db_path)
        self.connection.row_factory = sqlite3.Row
        self._ensure_schema()

    def close(self) -> None:
        self.connection.close()

    def _ensure_schema(self) -> None:
        self.connection.executescript(
            """
            CREATE TABLE IF NOT EXISTS run_metadata (
                run_id TEXT PRIMARY KEY,
                config_hash TEXT NOT NULL,
                seed INTEGER NOT NULL,
                config_json TEXT NOT NULL,
                runtime_metadata TEXT NOT NULL,
                status TEXT NOT NULL DEFAULT 'running',
                generations INTEGER,
                best_genome REAL,
                created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
            );

            CREATE TABLE IF NOT EXISTS generation_metrics (
                run_id TEXT NOT NULL,
                generation_index INTEGER NOT NULL,
                mean_value REAL NOT NULL,
                max_value REAL NOT NULL,
                min_value REAL NOT NULL,
                best_objective REAL,
                diversity REAL NOT NULL,
                non_finite_count INTEGER NOT NULL,
                PRIMARY KEY (run_id, generation_index),
                FOREIGN KEY (run_id)
                    REFERENCES run_metadata (run_id)
                    ON DELETE CASCADE
            );
            """
        )
        self.connection.commit()

    def start_run(self, config: Mapping[str, Any], seed: int, metadata: Mapping[str, Any] | None = None) -> str:
        config_json = json.dumps(dict(config), sort_keys=True)
        runtime_metadata = {"python_version": platform.python_version(), "platform": platform.platform()}
        if metadata:
            runtime_metadata.update(dict(metadata))
        config_hash = hashlib.sha256(config_json.encode("utf-8")).hexdigest()
        deterministic_key = hashlib.sha256(f"{config_hash}:{seed}".encode("utf-8")).hexdigest()
        run_nonce = str(time.time_ns())
        run_id = hashlib.sha256(f"{deterministic_key}:{run_nonce}".encode("utf-8")).hexdigest()[:16]
        runtime_metadata["deterministic_key"] = deterministic_key
        metadata_json = json.dumps(runtime_metadata, sort_keys=True)

        self.connection.execute(
            """
            INSERT OR IGNORE INTO run_metadata (
                run_id, config_hash, seed, config_json, runtime_metadata
            ) VALUES (?, ?, ?, ?, ?)
            """,
            (run_id, config_hash, seed, config_json, metadata_json),
        )
        self.connection.commit()
        return run_id

    def log_metrics(self, run_id: str, generation_index: int, metrics: Mapping[str, float]) -> None:
        row = GenerationMetrics(
            generation_index=generation_index,
            mean_value=float(metrics.get("mean_value", 0.0)),
            max_value=float(metrics.get("max_value", 0.0)),
            min_value=float(metrics.get("min_value", 0.0)),
            best_objective=_nullable(metrics.get("best_objective")),
            diversity=float(metrics.get("diversity", 0.0)),
            non_finite_count=int(metrics.get("non_finite_count", 0)),
        )
        self.connection.execute(
            """
            INSERT OR REPLACE INTO generation_metrics (
                run_id,
                generation_index,
                mean_value,
                max_value,
                min_value,
                best_objective,
                diversity,
                non_finite_count
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                run_id,
                row.generation_index,
                row.mean_value,
                row.max_value,
                row.min_value,
                row.best_objective,
                row.diversity,
                row.non_finite_count,
            ),
        )
        self.connection.commit()

    def finish_run(self, run_id: str, status: str, generations: int, best_genome: float | None = None) -> None:
        """Record the final status of a run (``converged``, ``not_converged``, ``invalid_fitness`` or ``failed``)."""
        self.connection.execute(
            """
            UPDATE run_metadata
            SET status = ?, generations = ?, best_genome = ?
            WHERE run_id = ?
            """,
            (status, int(generations), _nullable(best_genome), run_id),
        )
        self.connection.commit()

    def fetch_run(self, run_id: str) -> dict[str, Any] | None:
        row = self.connection.execute(
            """
            SELECT run_id, seed, status, generations, best_genome, config_json
            FROM run_metadata
            WHERE run_id = ?
            """,
            (run_id,),
        ).fetchone()
        return dict(row) if row is not None else None

    def fetch_metrics(self, run_id: str) -> list[dict[str, Any]]:
        """Return ordered generation metrics for plotting/analysis."""
        rows = self.connection.execute(
            """
            SELECT generation_index, mean_value, max_value, min_value,
                   best_objective, diversity, non_finite_count
            FROM generation_metrics
            WHERE run_id = ?
            ORDER BY generation_index ASC
            """,
            (run_id,),
        ).fetchall()
        return [dict(row) for row in rows]

    def latest_run_id(self) -> str | None:
        """Return most recently created run id, if any."""
        row = self.connection.execute(
            """
            SELECT run_id
            FROM run_metadata
            ORDER BY created_at DESC, rowid DESC
            LIMIT 1
            """
        ).fetchone()
        return str(row[0]) if row is not None else None
