import math

import numpy as np

EPS = 1e-9


def wrap_angle(a: float) -> float:
    """Wrap an angle in radians to (-pi, pi]."""
    w = math.atan2(math.sin(a), math.cos(a))
    return math.pi if w == -math.pi else w


def clamp(x, lo, hi):
    return lo if x < lo else hi if x > hi else x


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def as_std_devs(values, name: str = "std_devs", n: int = 3) -> np.ndarray:
    """Validate a per-dimension standard deviation vector (all > 0, finite)."""
    arr = np.asarray(values, dtype=float).reshape(-1)
    if arr.shape != (n,):
        raise ValueError(f"{name} must have {n} entries, got {arr.size}")
    if not np.all(np.isfinite(arr)) or np.any(arr <= 0.0):
        raise ValueError(f"{name} must be positive and finite, got {arr.tolist()}")
    return arr
