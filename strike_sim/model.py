from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from strike_sim.allometry import RHO_SEAWATER
from strike_sim.contact import (
    ContactResponse,
    advance_permanent_set,
    contact_response,
    skin_force,
)
from strike_sim.errors import InvalidArgument, SimulationDivergence
from strike_sim.parameters import LAYER_NAMES, ParameterSet


DEFAULT_MAX_STEP_S = 2e-3


@dataclass
class SimulationState:
    """
    Ship bow at xs moving with vs; whale reference (inner face of the tissue
    stack) at xw moving with vw. The ship approaches from negative x.
    """

    xs: float
    vs: float
    xw: float
    vw: float
    # Permanent set of failed layers (zeros while the stack is intact)
    layer_set_strain: np.ndarray = field(default_factory=lambda: np.zeros(len(LAYER_NAMES)))

    def as_vector(self) -> np.ndarray:
        return np.array([self.xs, self.vs, self.xw, self.vw], dtype=float)

    def penetration_m(self, params: ParameterSet) -> float:
        return penetration_depth(self.xs, self.xw, params)

    @property
    def layer_failed(self) -> np.ndarray:
        return np.asarray(self.layer_set_strain) > 0.0


@dataclass
class Trajectory:
    time_s: np.ndarray  # shape (T,)
    xs_m: np.ndarray
    vs_mps: np.ndarray
    xw_m: np.ndarray
    vw_mps: np.ndarray
    ship_accel_mps2: np.ndarray
    whale_accel_mps2: np.ndarray
    penetration_m: np.ndarray
    compression_m: np.ndarray  # total tissue compression
    stress_pa: np.ndarray  # stress transmitted through the stack
    layer_names: tuple[str, ...]
    layer_stress_pa: np.ndarray  # shape (T, 4)
    layer_strain: np.ndarray  # shape (T, 4)
    layer_failed: np.ndarray  # shape (T, 4) bool
    compression_force_n: np.ndarray
    skin_force_n: np.ndarray
    contact_force_n: np.ndarray  # compression + skin, pushes ship back and whale forward
    ship_drag_n: np.ndarray
    whale_drag_n: np.ndarray

    def __len__(self) -> int:
        return int(self.time_s.size)


def penetration_depth(xs: float, xw: float, params: ParameterSet) -> float:
    """Overlap of the bow with the whale; the skin surface sits a stack thickness ahead of xw."""
    return float(xs - (xw - params.stack_thickness_m))


def water_drag(v: float, drag_coefficient: float, area_m2: float) -> float:
    """Quadratic drag opposing the velocity (N)."""
    return -0.5 * RHO_SEAWATER * drag_coefficient * area_m2 * v * abs(v)


@dataclass(frozen=True)
class _Forces:
    contact: ContactResponse
    skin_n: float
    ship_drag_n: float
    whale_drag_n: float

    @property
    def contact_n(self) -> float:
        return self.contact.force_n + self.skin_n


def _forces(y: np.ndarray, params: ParameterSet, set_strain: np.ndarray) -> _Forces:
    xs, vs, xw, vw = y
    d = penetration_depth(xs, xw, params)
    return _Forces(
        contact=contact_response(d, params, set_strain),
        skin_n=skin_force(d, params),
        ship_drag_n=water_drag(vs, params.ship_drag_coefficient, params.ship_area_m2),
        whale_drag_n=water_drag(vw, params.whale_drag_coefficient, params.whale_area_m2),
    )


def _accelerations(f: _Forces, params: ParameterSet) -> tuple[float, float]:
    a_ship = (f.ship_drag_n - f.contact_n) / params.ship_mass_kg
    a_whale = (f.whale_drag_n + f.contact_n) / params.whale_mass_kg
    return a_ship, a_whale


def dynamics(y: np.ndarray, params: ParameterSet, set_strain: np.ndarray) -> np.ndarray:
    """dy/dt for y = [xs, vs, xw, vw]."""
    f = _forces(y, params, set_strain)
    a_ship, a_whale = _accelerations(f, params)
    return np.array([y[1], a_ship, y[3], a_whale], dtype=float)


def _rk4_step(y: np.ndarray, h: float, params: ParameterSet, set_strain: np.ndarray) -> np.ndarray:
    k1 = dynamics(y, params, set_strain)
    k2 = dynamics(y + 0.5 * h * k1, params, set_strain)
    k3 = dynamics(y + 0.5 * h * k2, params, set_strain)
    k4 = dynamics(y + h * k3, params, set_strain)
    return y + (h / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)


def _check_time_grid(time_s) -> np.ndarray:
    try:
        t = np.asarray(time_s, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidArgument('time_s', 'must be a sequence of numbers.') from e
    if t.ndim != 1:
        raise InvalidArgument('time_s', f'must be one-dimensional, got shape {t.shape}.')
    if t.size == 0:
        raise InvalidArgument('time_s', 'must not be empty.')
    if not np.all(np.isfinite(t)):
        raise InvalidArgument('time_s', 'must contain only finite values.')
    if t[0] < 0.0:
        raise InvalidArgument('time_s', f'must be non-negative, starts at {t[0]!r}.')
    if t.size > 1 and not np.all(np.diff(t) > 0.0):
        bad = int(np.argmin(np.diff(t) > 0.0)) + 1
        raise InvalidArgument('time_s', f'must be strictly increasing (index {bad}: {t[bad - 1]!r} -> {t[bad]!r}).')
    return t


def _check_state(state: SimulationState) -> tuple[np.ndarray, np.ndarray]:
    try:
        y = state.as_vector()
    except (AttributeError, TypeError, ValueError) as e:
        raise InvalidArgument('initial_state', 'must define numeric xs, vs, xw and vw.') from e
    for name, v in zip(('xs', 'vs', 'xw', 'vw'), y):
        if not math.isfinite(float(v)):
            raise InvalidArgument(f'initial_state.{name}', f'must be finite, got {v!r}.')

    set_strain = np.array(state.layer_set_strain, dtype=float)
    if set_strain.shape != (len(LAYER_NAMES),) or np.any(set_strain < 0.0) or np.any(set_strain > 1.0):
        raise InvalidArgument('initial_state.layer_set_strain', 'must hold four strains in [0, 1].')
    return y, set_strain


def simulate(
    time_s,
    initial_state: SimulationState,
    params: ParameterSet,
    *,
    max_step_s: float = DEFAULT_MAX_STEP_S,
) -> Trajectory:
    """
    Integrate ship and whale motion over the requested time grid.

    Classical RK4. Each grid interval is split into ceil(dt / max_step_s)
    equal sub-steps so output lands exactly on the caller's times; the
    failure state of the tissue stack advances after every sub-step.

    The initial state is copied, never mutated. Any divergence aborts the
    run without a partial trajectory.
    """
    t = _check_time_grid(time_s)
    y, set_strain = _check_state(initial_state)
    max_step_s = float(max_step_s)
    if not (math.isfinite(max_step_s) and max_step_s > 0.0):
        raise InvalidArgument('max_step_s', f'must be > 0, got {max_step_s!r}.')

    n_t = t.size
    n_l = len(LAYER_NAMES)

    state_hist = np.zeros((n_t, 4), dtype=float)
    accel = np.zeros((n_t, 2), dtype=float)
    penetration = np.zeros(n_t, dtype=float)
    compression = np.zeros(n_t, dtype=float)
    stress = np.zeros(n_t, dtype=float)
    layer_stress = np.zeros((n_t, n_l), dtype=float)
    layer_strain = np.zeros((n_t, n_l), dtype=float)
    layer_failed = np.zeros((n_t, n_l), dtype=bool)
    compression_force = np.zeros(n_t, dtype=float)
    skin = np.zeros(n_t, dtype=float)
    contact = np.zeros(n_t, dtype=float)
    ship_drag = np.zeros(n_t, dtype=float)
    whale_drag = np.zeros(n_t, dtype=float)

    def record(k: int, y_k: np.ndarray, f: _Forces, set_k: np.ndarray) -> None:
        a_ship, a_whale = _accelerations(f, params)
        state_hist[k] = y_k
        accel[k] = (a_ship, a_whale)
        penetration[k] = f.contact.depth_m
        compression[k] = f.contact.compression_m
        stress[k] = f.contact.stress_pa
        layer_stress[k] = f.contact.layer_stress_pa
        layer_strain[k] = f.contact.layer_strain
        layer_failed[k] = set_k > 0.0
        compression_force[k] = f.contact.force_n
        skin[k] = f.skin_n
        contact[k] = f.contact_n
        ship_drag[k] = f.ship_drag_n
        whale_drag[k] = f.whale_drag_n

    f0 = _forces(y, params, set_strain)
    set_strain = advance_permanent_set(params.tissue, f0.contact, set_strain)
    record(0, y, f0, set_strain)

    for k in range(n_t - 1):
        span = float(t[k + 1] - t[k])
        n_sub = max(1, int(math.ceil(span / max_step_s - 1e-9)))
        h = span / n_sub

        f = f0
        for j in range(n_sub):
            t_j = float(t[k]) + (j + 1) * h
            try:
                y = _rk4_step(y, h, params, set_strain)
            except SimulationDivergence as e:
                raise SimulationDivergence(str(e), time_s=t_j) from e
            if not np.all(np.isfinite(y)):
                raise SimulationDivergence('Integrator produced a non-finite state.', time_s=t_j)
            try:
                f = _forces(y, params, set_strain)
            except SimulationDivergence as e:
                raise SimulationDivergence(str(e), time_s=t_j) from e
            set_strain = advance_permanent_set(params.tissue, f.contact, set_strain)

        record(k + 1, y, f, set_strain)

    return Trajectory(
        time_s=t.copy(),
        xs_m=state_hist[:, 0],
        vs_mps=state_hist[:, 1],
        xw_m=state_hist[:, 2],
        vw_mps=state_hist[:, 3],
        ship_accel_mps2=accel[:, 0],
        whale_accel_mps2=accel[:, 1],
        penetration_m=penetration,
        compression_m=compression,
        stress_pa=stress,
        layer_names=LAYER_NAMES,
        layer_stress_pa=layer_stress,
        layer_strain=layer_strain,
        layer_failed=layer_failed,
        compression_force_n=compression_force,
        skin_force_n=skin,
        contact_force_n=contact,
        ship_drag_n=ship_drag,
        whale_drag_n=whale_drag,
    )
