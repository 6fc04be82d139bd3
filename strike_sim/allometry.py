"""Empirical size relations used to fill in omitted parameters.

All three relations are power laws y = coefficient * x**exponent. The
coefficients are carried by the parameter set so a scenario can swap in its own
fits instead of the defaults below.
"""

from __future__ import annotations

from dataclasses import dataclass

# Seawater density (kg/m^3)
RHO_SEAWATER = 1024.0


@dataclass(frozen=True)
class PowerLawFit:
    coefficient: float
    exponent: float

    def __call__(self, x: float) -> float:
        return float(self.coefficient) * float(x) ** float(self.exponent)


# Hull wetted area ~ 6 * V^(2/3), with V = displaced volume = ms / rho.
SHIP_AREA_FIT = PowerLawFit(coefficient=6.0 / RHO_SEAWATER ** (2.0 / 3.0), exponent=2.0 / 3.0)

# Right whale length-mass fit: m = exp(-10.095) * (100 * L)^2.825, L in m.
# Folded into SI form: m = 18.43 * L^2.825 (kg).
WHALE_MASS_FIT = PowerLawFit(coefficient=18.43, exponent=2.825)

# Whale wetted surface area (m^2) from body length (m).
WHALE_AREA_FIT = PowerLawFit(coefficient=0.4, exponent=2.0)


def ship_area_from_mass(ms: float, fit: PowerLawFit = SHIP_AREA_FIT) -> float:
    """Ship wetted area (m^2) from ship mass (kg)."""
    return fit(ms)


def whale_mass_from_length(lw: float, fit: PowerLawFit = WHALE_MASS_FIT) -> float:
    """Whale mass (kg) from body length (m)."""
    return fit(lw)


def whale_area_from_length(lw: float, fit: PowerLawFit = WHALE_AREA_FIT) -> float:
    return fit(lw)
