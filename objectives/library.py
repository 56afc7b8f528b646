"""Built-in objective functions to maximize."""

from __future__ import annotations

import numpy as np


def reference_polynomial(y: float) -> float:
    """``y**7 + y**5 + 5*sqrt(y)``; NaN for negative ``y``."""
    with np.errstate(all="ignore"):
        x = np.float64(y)
        return float(np.power(x, 7) + np.power(x, 5) + 5.0 * np.sqrt(x))


def identity(y: float) -> float:
    return float(y)


def parabola(y: float) -> float:
    """Concave parabola peaking at ``100`` for ``y == 10``."""
    with np.errstate(all="ignore"):
        x = np.float64(y)
        return float(100.0 - np.square(x - 10.0))
