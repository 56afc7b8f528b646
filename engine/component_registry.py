"""Registry of named objective functions available to experiment configs."""

from __future__ import annotations

from typing import Callable

from objectives.library import identity, parabola, reference_polynomial


Objective = Callable[[float], float]


_OBJECTIVES: dict[str, Objective] = {}


def register_objective(name: str, objective: Objective) -> None:
    _OBJECTIVES[str(name)] = objective


def available_objectives() -> list[str]:
    return sorted(_OBJECTIVES)


def create_objective(name: str) -> Objective:
    objective = _OBJECTIVES.get(str(name))
    if objective is None:
        available = ", ".join(available_objectives()) or "<none>"
        raise ValueError(f"Unknown objective '{name}'. Available: {available}")
    return objective


def _register_defaults() -> None:
    if _OBJECTIVES:
        return
    register_objective("reference", reference_polynomial)
    register_objective("identity", identity)
    register_objective("parabola", parabola)


_register_defaults()
