#!/usr/bin/env -S uv run

from __future__ import annotations

import argparse
from pathlib import Path

from strike_sim.commands import run_strike
from strike_sim.errors import StrikeSimError


def main() -> None:
    parser = argparse.ArgumentParser(description='Simulate a vessel striking a whale and estimate lethality.')
    parser.add_argument('--config', type=Path, default=None, help='Config JSON (default: config.json at the repo root).')
    parser.add_argument('--speed-knots', type=float, default=None, help='Override scenario.ship_speed_knots.')
    parser.add_argument('--ship-mass-kg', type=float, default=None, help='Override the ship mass.')
    args = parser.parse_args()

    try:
        run_strike(
            config_path=args.config,
            ship_speed_knots=args.speed_knots,
            ship_mass_kg=args.ship_mass_kg,
        )
    except StrikeSimError as e:
        raise SystemExit(f'Error: {e}') from e


if __name__ == '__main__':
    main()
