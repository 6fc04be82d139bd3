"""Single source of truth for config + repo paths (no env overrides).

Policy:
- Scenario and solver keys have no fallback values in code.
- If required config keys are missing, terminate with a clear error.
- The optional "parameters" object holds build_parameters() overrides; anything
  it omits takes the model defaults.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import numpy as np

from strike_sim.model import SimulationState
from strike_sim.parameters import ParameterSet, build_parameters
from strike_sim.units import knots_to_mps


REPO_ROOT = Path(__file__).parent.parent
DEFAULT_CONFIG_PATH = REPO_ROOT / 'config.json'


def load_json(path: Path) -> dict:
    return json.loads(path.read_text(encoding='utf-8'))


def _require_path(cfg: dict, keys: list[str]) -> Any:
    cur: Any = cfg
    prefix: list[str] = []
    for k in keys:
        prefix.append(k)
        if not isinstance(cur, dict) or k not in cur:
            raise KeyError(f'Missing required config key: {".".join(prefix)}')
        cur = cur[k]
    return cur


def req_float(cfg: dict, keys: list[str]) -> float:
    v = _require_path(cfg, keys)
    try:
        return float(v)
    except Exception as e:
        raise ValueError(f'Config key {".".join(keys)} must be a float-like value.') from e


def req_int(cfg: dict, keys: list[str]) -> int:
    v = _require_path(cfg, keys)
    try:
        return int(v)
    except Exception as e:
        raise ValueError(f'Config key {".".join(keys)} must be an int-like value.') from e


def read_config(path: Path | None = None) -> dict:
    cfg = load_json(path or DEFAULT_CONFIG_PATH)
    validate_config(cfg)
    return cfg


def validate_config(cfg: dict) -> None:
    # Existence/type checks (no defaults).
    req_float(cfg, ['scenario', 'ship_speed_knots'])
    req_float(cfg, ['scenario', 'ship_position_m'])
    req_float(cfg, ['scenario', 'whale_position_m'])
    req_float(cfg, ['scenario', 'whale_speed_mps'])

    if req_float(cfg, ['scenario', 'duration_s']) <= 0.0:
        raise ValueError('scenario.duration_s must be > 0.')
    if req_int(cfg, ['scenario', 'samples']) < 2:
        raise ValueError('scenario.samples must be >= 2.')

    if req_float(cfg, ['solver', 'max_step_s']) <= 0.0:
        raise ValueError('solver.max_step_s must be > 0.')

    overrides = cfg.get('parameters', {})
    if not isinstance(overrides, dict):
        raise ValueError('parameters must be an object/dict of overrides.')


def parameters_from_config(cfg: dict, **overrides: Any) -> ParameterSet:
    opts = dict(cfg.get('parameters', {}))
    opts.update({k: v for k, v in overrides.items() if v is not None})
    return build_parameters(opts)


def initial_state_from_config(cfg: dict, *, ship_speed_knots: float | None = None) -> SimulationState:
    knots = req_float(cfg, ['scenario', 'ship_speed_knots']) if ship_speed_knots is None else float(ship_speed_knots)
    return SimulationState(
        xs=req_float(cfg, ['scenario', 'ship_position_m']),
        vs=knots_to_mps(knots),
        xw=req_float(cfg, ['scenario', 'whale_position_m']),
        vw=req_float(cfg, ['scenario', 'whale_speed_mps']),
    )


def time_grid_from_config(cfg: dict) -> np.ndarray:
    duration_s = req_float(cfg, ['scenario', 'duration_s'])
    samples = req_int(cfg, ['scenario', 'samples'])
    return np.linspace(0.0, duration_s, samples)
