"""Scenario command used by the CLI."""

from __future__ import annotations

from pathlib import Path

from strike_sim.lethality import lethality_thresholds
from strike_sim.metrics import strike_metrics
from strike_sim.model import simulate
from strike_sim.parameters import ParameterSet
from strike_sim.settings import (
    initial_state_from_config,
    parameters_from_config,
    read_config,
    req_float,
    time_grid_from_config,
)
from strike_sim.units import mps_to_knots


def _echo_parameters(params: ParameterSet, echo=print) -> None:
    echo('Parameters:')
    echo(f'  ship: mass={params.ship_mass_kg:.0f} kg, area={params.ship_area_m2:.1f} m^2, '
         f'impact={params.impact_width_m:.2f} x {params.impact_height_m:.2f} m, Cs={params.ship_drag_coefficient:g}')
    echo(f'  whale: {params.species}, length={params.whale_length_m:.2f} m, mass={params.whale_mass_kg:.0f} kg, '
         f'area={params.whale_area_m2:.1f} m^2, Cw={params.whale_drag_coefficient:g}, '
         f'theta={params.skin_angle_deg:g} deg')
    echo('  layer      l_m     a_Pa        b      s_Pa')
    for layer in params.tissue:
        echo(f'  {layer.name:9s} {layer.thickness_m:6.3f}  {layer.a_pa:10.4g}  {layer.b:5.2f}  {layer.strength_pa:10.4g}')
    thresholds = lethality_thresholds(params)
    echo('  lethality thresholds: ' + ', '.join(f'{p:.0%}={s / 1e6:.3f} MPa' for p, s in thresholds.items()))


def run_strike(
    config: dict | None = None,
    *,
    config_path: Path | None = None,
    ship_speed_knots: float | None = None,
    ship_mass_kg: float | None = None,
    echo=print,
) -> dict:
    """Simulate one ship/whale encounter from config and report its metrics."""
    if config is None:
        config = read_config(config_path)

    params = parameters_from_config(config, ship_mass_kg=ship_mass_kg)
    state = initial_state_from_config(config, ship_speed_knots=ship_speed_knots)
    t = time_grid_from_config(config)
    max_step_s = req_float(config, ['solver', 'max_step_s'])

    _echo_parameters(params, echo=echo)
    echo(f'Scenario: vs={mps_to_knots(state.vs):.2f} kn ({state.vs:.3f} m/s), xs={state.xs:g} m, '
         f'xw={state.xw:g} m, {t.size} samples over {t[-1]:g} s')

    traj = simulate(t, state, params, max_step_s=max_step_s)
    metrics = strike_metrics(traj, params)

    echo('Result:')
    echo(f'  peak stress      = {metrics["peak_stress_pa"] / 1e6:.4f} MPa at t={metrics["peak_stress_time_s"]:.3f} s')
    echo(f'  max lethality    = {metrics["max_lethality"]:.3f}')
    echo(f'  max penetration  = {metrics["max_penetration_m"] * 1000.0:.1f} mm')
    echo(f'  max contact force= {metrics["max_contact_force_n"] / 1000.0:.1f} kN '
         f'(skin {metrics["max_skin_force_n"] / 1000.0:.1f} kN)')
    echo(f'  failed layers    = {", ".join(metrics["failed_layers"]) or "none"}')
    echo(f'  ship dv          = {metrics["ship_speed_change_mps"]:.3f} m/s, '
         f'whale final v = {metrics["whale_final_speed_mps"]:.3f} m/s')

    metrics['ship_speed_knots'] = mps_to_knots(state.vs)
    return metrics
