from __future__ import annotations

import math

from ptg_nav.core.errors import ConfigurationError, ContractViolation, PathIndexError


def wrap_to_pi(angle: float) -> float:
    """Wrap an angle into [-pi, pi)."""
    if not math.isfinite(angle):
        raise ContractViolation(f"Angle must be finite, got {angle!r}")
    a = math.fmod(angle + math.pi, 2.0 * math.pi)
    if a < 0.0:
        a += 2.0 * math.pi
    return a - math.pi


def round_half_away(x: float) -> int:
    """
    Round to nearest integer, ties away from zero.

    Python's built-in round() uses banker's rounding, which would shift the
    selected path at exact half-slot boundaries.
    """
    return int(math.floor(abs(x) + 0.5)) * (1 if x >= 0 else -1)


def alpha_to_index(alpha: float, path_count: int) -> int:
    """
    Map a steering parameter alpha (radians) to a discrete path index.

      k = round(0.5 * (N * (1 + alpha/pi) - 1)), clamped to [0, N-1]
    """
    if path_count < 1:
        raise ConfigurationError("path_count must be >= 1")
    a = wrap_to_pi(alpha)
    k = round_half_away(0.5 * (path_count * (1.0 + a / math.pi) - 1.0))
    if k < 0:
        k = 0
    if k >= path_count:
        k = path_count - 1
    return k


def index_to_alpha(k: int, path_count: int) -> float:
    """Center steering parameter of path slot k; inverse of alpha_to_index."""
    if path_count < 1:
        raise ConfigurationError("path_count must be >= 1")
    if not 0 <= k < path_count:
        raise PathIndexError(f"Path index {k} outside [0, {path_count})")
    return math.pi * (-1.0 + 2.0 * (k + 0.5) / path_count)
