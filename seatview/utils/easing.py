# seatview/utils/easing.py

import math
from typing import Callable, Dict


def linear(t: float) -> float:
    return t


def ease_in(t: float) -> float:
    return t * t


def ease_out(t: float) -> float:
    return t * (2 - t)


def ease_in_out(t: float) -> float:
    # Hermite curve with flat tangents at both ends
    return t * t * (3 - 2 * t)


def elastic(t: float) -> float:
    return math.sin(-13 * (t + 1) * math.pi / 2) * math.pow(2, -10 * t) + 1


CURVES: Dict[str, Callable[[float], float]] = {
    "linear": linear,
    "ease_in": ease_in,
    "ease_out": ease_out,
    "ease_in_out": ease_in_out,
    "elastic": elastic,
}


def get_curve(name: str) -> Callable[[float], float]:
    """Look up an easing curve by name, clamping its input to [0, 1]."""
    try:
        curve = CURVES[name]
    except KeyError:
        raise ValueError(f"Unknown easing curve '{name}'. Known: {sorted(CURVES)}") from None

    def evaluate(t: float) -> float:
        return curve(min(1.0, max(0.0, t)))

    evaluate.__name__ = name
    return evaluate
