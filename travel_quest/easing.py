"""Small numeric primitives shared by the camera and reveal schedules."""
from __future__ import annotations

import math
from typing import Optional, Sequence


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def lerp(start: float, end: float, t: float) -> float:
    return start + (end - start) * t


def interpolate(
    value: float,
    input_range: Sequence[float],
    output_range: Sequence[float],
    *,
    clamp_left: bool = True,
    clamp_right: bool = True,
) -> float:
    """Map ``value`` from a two-point input range onto a two-point output range.

    Values outside the input range extrapolate linearly unless the matching
    side is clamped. A zero-width input range snaps to the output end.
    """
    in_start, in_end = input_range
    out_start, out_end = output_range
    if in_end == in_start:
        return out_end if value >= in_end else out_start
    t = (value - in_start) / (in_end - in_start)
    if clamp_left:
        t = max(0.0, t)
    if clamp_right:
        t = min(1.0, t)
    return lerp(out_start, out_end, t)


def damped_spring_value(
    frame: float,
    fps: float,
    *,
    stiffness: float = 100.0,
    mass: float = 1.0,
    damping: Optional[float] = None,
) -> float:
    """Closed-form position of a unit spring released from 0 toward 1.

    ``damping`` defaults to the critical value ``2 * sqrt(stiffness * mass)``.
    The result is a pure function of ``frame`` so any frame can be evaluated
    without stepping through the previous ones.
    """
    if frame <= 0:
        return 0.0
    t = frame / fps
    omega = math.sqrt(stiffness / mass)
    critical = 2.0 * math.sqrt(stiffness * mass)
    zeta = (critical if damping is None else damping) / critical

    if math.isclose(zeta, 1.0):
        return 1.0 - math.exp(-omega * t) * (1.0 + omega * t)
    if zeta < 1.0:
        omega_d = omega * math.sqrt(1.0 - zeta * zeta)
        decay = math.exp(-zeta * omega * t)
        return 1.0 - decay * (math.cos(omega_d * t) + (zeta * omega / omega_d) * math.sin(omega_d * t))
    root = math.sqrt(zeta * zeta - 1.0)
    r1 = -omega * (zeta - root)
    r2 = -omega * (zeta + root)
    return 1.0 - (r2 * math.exp(r1 * t) - r1 * math.exp(r2 * t)) / (r2 - r1)
