import json
import sys

import numpy as np
import pytest

import simulate_strike
from strike_sim.commands import run_strike
from strike_sim.metrics import strike_metrics
from strike_sim.model import SimulationState, simulate
from strike_sim.parameters import build_parameters
from strike_sim.units import knots_to_mps


def _config(**scenario):
    cfg = {
        'parameters': {'ship_mass_kg': 45_000.0},
        'scenario': {
            'ship_speed_knots': 4.0,
            'ship_position_m': -2.5,
            'whale_position_m': 0.0,
            'whale_speed_mps': 0.0,
            'duration_s': 1.5,
            'samples': 151,
        },
        'solver': {'max_step_s': 0.002},
    }
    cfg['scenario'].update(scenario)
    return cfg


def test_strike_metrics_summary():
    params = build_parameters()
    t = np.linspace(0.0, 1.5, 151)
    traj = simulate(t, SimulationState(xs=-2.5, vs=knots_to_mps(4.0), xw=0.0, vw=0.0), params)
    m = strike_metrics(traj, params)

    i = int(np.argmax(traj.stress_pa))
    assert m['peak_stress_pa'] == traj.stress_pa[i]
    assert m['peak_stress_time_s'] == traj.time_s[i]
    assert 0.0 < m['max_lethality'] < 1.0
    assert m['max_contact_force_n'] >= m['max_compression_force_n']
    assert m['max_contact_force_n'] >= m['max_skin_force_n'] > 0.0
    assert m['failed_layers'] == []
    assert m['ship_speed_change_mps'] < 0.0
    assert m['whale_final_speed_mps'] > 0.0
    assert m['duration_s'] == pytest.approx(1.5)


def test_run_strike_echoes_report():
    lines = []
    m = run_strike(_config(), echo=lines.append)
    text = '\n'.join(lines)

    assert 'Parameters:' in text
    assert 'blubber' in text
    assert 'lethality thresholds' in text
    assert any(line.strip().startswith('max lethality') for line in lines)
    assert 'failed layers    = none' in text
    assert m['ship_speed_knots'] == pytest.approx(4.0)
    assert 0.25 <= m['max_lethality'] <= 0.35


def test_run_strike_overrides():
    lines = []
    m = run_strike(_config(), ship_speed_knots=15.0, ship_mass_kg=45_000.0, echo=lines.append)
    assert m['ship_speed_knots'] == pytest.approx(15.0)
    assert m['failed_layers'] == ['blubber', 'sublayer']


def test_cli_main(tmp_path, monkeypatch, capsys):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps(_config()), encoding='utf-8')
    monkeypatch.setattr(sys, 'argv', ['simulate_strike.py', '--config', str(path), '--speed-knots', '8'])
    simulate_strike.main()
    out = capsys.readouterr().out
    assert 'Scenario: vs=8.00 kn' in out
    assert 'max lethality' in out


def test_cli_reports_divergence(tmp_path, monkeypatch):
    path = tmp_path / 'config.json'
    cfg = _config(ship_position_m=-2.0, duration_s=0.5, samples=51)
    cfg['parameters'] = {'ship_mass_kg': 1e7}
    path.write_text(json.dumps(cfg), encoding='utf-8')
    monkeypatch.setattr(sys, 'argv', ['simulate_strike.py', '--config', str(path), '--speed-knots', '60'])
    with pytest.raises(SystemExit) as exc:
        simulate_strike.main()
    assert 'Error:' in str(exc.value.code)
