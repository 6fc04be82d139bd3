"""Layered tissue contact model.

Skin, blubber, sublayer and bone sit in series between the rigid bow and the
rigid skeleton. One compressive stress passes through all four layers while
their compressions add up to the penetration depth d:

    sum_i l_i * strain_i(stress) = d

Layer strain is the inverse of stress = a * (exp(b * strain) - 1), capped at 1
(layer fully closed). Once the stress reaches a layer's ultimate strength the
layer has failed: its reported stress stays at the strength and it keeps
crushing up to closure against a residual stiffness of
RESIDUAL_STIFFNESS_FRACTION * strength. A failed layer never springs back
below the largest strain it reached (its permanent set).
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from scipy.optimize import brentq

from strike_sim.errors import SimulationDivergence
from strike_sim.parameters import ParameterSet, TissueLayer, TissueStack


RESIDUAL_STIFFNESS_FRACTION = 1e-3

# Root-find on stress (Pa)
ROOT_XTOL_PA = 1e-6
ROOT_RTOL = 1e-10
ROOT_MAX_ITER = 200

# Depth within this fraction of the stack thickness counts as full closure.
CLOSURE_MARGIN = 1e-9

# Bracket expansion gives up past this stress (Pa).
MAX_BRACKET_STRESS_PA = 1e15


@dataclass(frozen=True)
class ContactResponse:
    depth_m: float
    stress_pa: float  # shared stress transmitted through the stack
    force_n: float  # stress * contact area
    compression_m: float  # sum of layer compressions
    layer_stress_pa: tuple[float, ...]
    layer_strain: tuple[float, ...]


def layer_strain(layer: TissueLayer, stress_pa: float, set_strain: float = 0.0) -> float:
    if stress_pa <= 0.0:
        strain = 0.0
    elif stress_pa < layer.strength_pa:
        strain = math.log1p(stress_pa / layer.a_pa) / layer.b
    else:
        residual = RESIDUAL_STIFFNESS_FRACTION * layer.strength_pa
        strain = layer.failure_strain + (stress_pa - layer.strength_pa) / residual
    return max(min(strain, 1.0), set_strain)


def compression_from_stress(
    stack: TissueStack,
    stress_pa: float,
    set_strain: np.ndarray | None = None,
) -> float:
    """Total compression (m) of the stack under a shared stress."""
    total = 0.0
    for i, layer in enumerate(stack):
        s0 = float(set_strain[i]) if set_strain is not None else 0.0
        total += layer.thickness_m * layer_strain(layer, stress_pa, s0)
    return total


def _zero_response(depth_m: float, stack: TissueStack, set_strain: np.ndarray) -> ContactResponse:
    strains = tuple(float(x) for x in set_strain)
    compression = float(sum(layer.thickness_m * e for layer, e in zip(stack, strains)))
    return ContactResponse(
        depth_m=float(depth_m),
        stress_pa=0.0,
        force_n=0.0,
        compression_m=compression,
        layer_stress_pa=(0.0,) * len(stack),
        layer_strain=strains,
    )


def contact_response(
    depth_m: float,
    params: ParameterSet,
    set_strain: np.ndarray | None = None,
) -> ContactResponse:
    """
    Stress, force and per-layer state for a penetration depth.

    set_strain carries the permanent set of previously failed layers (zeros
    for an intact stack). Raises SimulationDivergence when the depth reaches
    the full stack thickness or the root-find does not converge.
    """
    stack = params.tissue
    n = len(stack)
    set_strain = np.zeros(n, dtype=float) if set_strain is None else np.asarray(set_strain, dtype=float)

    d = float(depth_m)
    if not math.isfinite(d):
        raise SimulationDivergence(f'Non-finite penetration depth {depth_m!r}.')

    crushed = compression_from_stress(stack, 0.0, set_strain)
    if d <= crushed:
        return _zero_response(d, stack, set_strain)

    total = stack.total_thickness_m
    if d >= total * (1.0 - CLOSURE_MARGIN):
        raise SimulationDivergence(
            f'Penetration {d:.4f} m closes the whole tissue stack ({total:.4f} m); '
            'contact never stopped the ship.'
        )

    def residual(stress: float) -> float:
        return compression_from_stress(stack, stress, set_strain) - d

    hi = max(layer.strength_pa for layer in stack)
    while residual(hi) < 0.0:
        hi *= 2.0
        if hi > MAX_BRACKET_STRESS_PA:
            raise SimulationDivergence(f'Could not bracket contact stress for depth {d:.6f} m.')

    try:
        stress = float(
            brentq(residual, 0.0, hi, xtol=ROOT_XTOL_PA, rtol=ROOT_RTOL, maxiter=ROOT_MAX_ITER)
        )
    except RuntimeError as e:
        raise SimulationDivergence(f'Contact stress root-find failed at depth {d:.6f} m: {e}') from e

    strains = tuple(layer_strain(layer, stress, float(set_strain[i])) for i, layer in enumerate(stack))
    stresses = tuple(min(stress, layer.strength_pa) for layer in stack)
    compression = float(sum(layer.thickness_m * e for layer, e in zip(stack, strains)))

    return ContactResponse(
        depth_m=d,
        stress_pa=stress,
        force_n=stress * params.contact_area_m2,
        compression_m=compression,
        layer_stress_pa=stresses,
        layer_strain=strains,
    )


def failed_layers(stack: TissueStack, layer_strains) -> np.ndarray:
    """Mask of layers strained to (or past) their failure strain."""
    out = np.zeros(len(stack), dtype=bool)
    for i, layer in enumerate(stack):
        eps_f = layer.failure_strain
        # A layer that closes before reaching its strength cannot fail.
        out[i] = eps_f < 1.0 and float(layer_strains[i]) >= eps_f * (1.0 - 1e-12)
    return out


def advance_permanent_set(
    stack: TissueStack,
    response: ContactResponse,
    set_strain: np.ndarray,
) -> np.ndarray:
    """Update the permanent set after an accepted step (failure is irreversible)."""
    strains = np.asarray(response.layer_strain, dtype=float)
    failed = failed_layers(stack, strains) | (set_strain > 0.0)
    return np.where(failed, np.maximum(set_strain, strains), set_strain)


def skin_force(depth_m: float, params: ParameterSet) -> float:
    """
    Membrane force of the skin stretched around the bow (N).

    The skin leaves the bow edges at the deformation angle theta, so each
    lateral direction is strained by d * cot(theta) / L. Skin tension
    resultants act along the inclined skin; their normal component resists
    the bow:
      F = (l_skin * Lz * sigma(eps_y) + l_skin * Ly * sigma(eps_z)) * sin(theta)
    """
    if depth_m <= 0.0:
        return 0.0

    skin = params.tissue.skin
    theta = math.radians(params.skin_angle_deg)
    cot = 1.0 / math.tan(theta)

    ly = params.impact_width_m
    lz = params.impact_height_m
    eps_y = depth_m * cot / ly
    eps_z = depth_m * cot / lz

    sigma_y = min(skin.stress_from_strain(eps_y), skin.strength_pa)
    sigma_z = min(skin.stress_from_strain(eps_z), skin.strength_pa)

    f_y = skin.thickness_m * lz * sigma_y
    f_z = skin.thickness_m * ly * sigma_z
    return (f_y + f_z) * math.sin(theta)
