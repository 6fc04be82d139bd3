"""Error kinds raised by the collision engine."""

from __future__ import annotations


class StrikeSimError(Exception):
    pass


class InvalidParameter(StrikeSimError, ValueError):
    """A parameter set violates a construction-time invariant."""

    def __init__(self, name: str, message: str):
        super().__init__(f'Invalid parameter {name!r}: {message}')
        self.name = name


class InvalidArgument(StrikeSimError, ValueError):
    """A call argument is malformed (time grid, probability, stress)."""

    def __init__(self, name: str, message: str):
        super().__init__(f'Invalid argument {name!r}: {message}')
        self.name = name


class SimulationDivergence(StrikeSimError, RuntimeError):
    """Integration produced a non-finite or physically impossible state."""

    def __init__(self, message: str, time_s: float | None = None):
        if time_s is not None:
            message = f'{message} (t={time_s:.6f} s)'
        super().__init__(message)
        self.time_s = time_s
