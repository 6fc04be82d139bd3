"""Ship-whale collision dynamics and lethality estimation.

Re-exports the engine's public operations.
"""

from __future__ import annotations

from strike_sim.contact import ContactResponse, contact_response, skin_force
from strike_sim.errors import (
    InvalidArgument,
    InvalidParameter,
    SimulationDivergence,
    StrikeSimError,
)
from strike_sim.lethality import (
    lethality_from_stress,
    lethality_thresholds,
    stress_for_probability,
)
from strike_sim.metrics import strike_metrics
from strike_sim.model import SimulationState, Trajectory, simulate
from strike_sim.parameters import (
    LAYER_NAMES,
    LogisticFit,
    ParameterSet,
    TissueLayer,
    TissueStack,
    build_parameters,
)
from strike_sim.units import knots_to_mps, mps_to_knots


__all__ = [
    # Errors
    'StrikeSimError',
    'InvalidParameter',
    'InvalidArgument',
    'SimulationDivergence',
    # Parameters
    'LAYER_NAMES',
    'TissueLayer',
    'TissueStack',
    'LogisticFit',
    'ParameterSet',
    'build_parameters',
    # Contact
    'ContactResponse',
    'contact_response',
    'skin_force',
    # Integrator
    'SimulationState',
    'Trajectory',
    'simulate',
    # Lethality
    'lethality_from_stress',
    'stress_for_probability',
    'lethality_thresholds',
    'strike_metrics',
    # Units
    'knots_to_mps',
    'mps_to_knots',
]
