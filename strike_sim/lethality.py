"""Logistic lethality transform.

    P(stress) = 1 / (1 + exp(-(log10(stress) - center) / width))

with center and width taken from the parameter set's logistic fit (log10 Pa).
Zero stress maps to P = 0 and P rises monotonically towards 1.
"""

from __future__ import annotations

import numpy as np

from strike_sim.errors import InvalidArgument
from strike_sim.parameters import ParameterSet


def lethality_from_stress(stress_pa, params: ParameterSet):
    """
    Lethality probability for a stress value or series (Pa).

    Scalars give a float; sequences give an ndarray of the same shape.
    Taking the maximum over an encounter is left to the caller.
    """
    scalar = np.ndim(stress_pa) == 0
    try:
        stress = np.asarray(stress_pa, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidArgument('stress_pa', 'must be numeric.') from e
    if not np.all(np.isfinite(stress)):
        raise InvalidArgument('stress_pa', 'must be finite.')
    if np.any(stress < 0.0):
        raise InvalidArgument('stress_pa', f'must be >= 0, got min {float(np.min(stress))!r}.')

    fit = params.logistic
    with np.errstate(divide='ignore', over='ignore'):
        z = (np.log10(stress) - fit.center) / fit.width
        p = 1.0 / (1.0 + np.exp(-z))

    if scalar:
        return float(p)
    return p


def stress_for_probability(p: float, params: ParameterSet) -> float:
    """
    Stress (Pa) at which the logistic fit reaches probability p, p in [0, 1).

    A threshold beyond the float range (very wide fits) comes back as inf.
    """
    try:
        p = float(p)
    except (TypeError, ValueError) as e:
        raise InvalidArgument('p', f'must be a number, got {p!r}.') from e
    if not (0.0 <= p < 1.0):
        raise InvalidArgument('p', f'must lie in [0, 1), got {p!r}.')
    if p == 0.0:
        return 0.0
    return params.logistic.stress_for(p)


def lethality_thresholds(params: ParameterSet) -> dict:
    """Stresses (Pa) for 25, 50 and 75 % lethality."""
    fit = params.logistic
    return {
        0.25: fit.tau25_pa,
        0.50: fit.tau50_pa,
        0.75: fit.tau75_pa,
    }

