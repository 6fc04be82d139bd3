from __future__ import annotations

# International nautical mile
METERS_PER_NAUTICAL_MILE = 1852.0


def knots_to_mps(knots: float) -> float:
    return float(knots) * METERS_PER_NAUTICAL_MILE / 3600.0


def mps_to_knots(mps: float) -> float:
    return float(mps) * 3600.0 / METERS_PER_NAUTICAL_MILE
