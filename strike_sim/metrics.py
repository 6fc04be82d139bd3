from __future__ import annotations

import numpy as np

from strike_sim.lethality import lethality_from_stress
from strike_sim.model import Trajectory
from strike_sim.parameters import ParameterSet


def strike_metrics(traj: Trajectory, params: ParameterSet) -> dict:
    """Summary of one encounter; peak lethality is the maximum over the stress series."""
    if len(traj) == 0:
        raise ValueError('Empty trajectory.')

    lethality = lethality_from_stress(traj.stress_pa, params)
    i_peak = int(np.argmax(traj.stress_pa))

    failed = np.any(traj.layer_failed, axis=0)
    failed_names = [name for name, f in zip(traj.layer_names, failed) if f]

    return {
        'peak_stress_pa': float(traj.stress_pa[i_peak]),
        'peak_stress_time_s': float(traj.time_s[i_peak]),
        'max_lethality': float(np.max(lethality)),
        'max_penetration_m': float(np.max(traj.penetration_m)),
        'max_compression_m': float(np.max(traj.compression_m)),
        'max_compression_force_n': float(np.max(traj.compression_force_n)),
        'max_skin_force_n': float(np.max(traj.skin_force_n)),
        'max_contact_force_n': float(np.max(traj.contact_force_n)),
        'failed_layers': failed_names,
        'ship_speed_change_mps': float(traj.vs_mps[-1] - traj.vs_mps[0]),
        'whale_final_speed_mps': float(traj.vw_mps[-1]),
        'duration_s': float(traj.time_s[-1] - traj.time_s[0]),
    }
