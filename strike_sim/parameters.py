from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, NamedTuple

import numpy as np

from strike_sim.allometry import (
    SHIP_AREA_FIT,
    WHALE_AREA_FIT,
    WHALE_MASS_FIT,
    PowerLawFit,
    ship_area_from_mass,
    whale_area_from_length,
    whale_mass_from_length,
)
from strike_sim.errors import InvalidParameter


LAYER_NAMES = ('skin', 'blubber', 'sublayer', 'bone')

# Reference scenario: a 45 t vessel striking a 13.7 m North Atlantic right whale.
DEFAULT_SHIP_MASS_KG = 45_000.0
DEFAULT_IMPACT_WIDTH_M = 1.15
DEFAULT_IMPACT_HEIGHT_M = 1.15
DEFAULT_SHIP_DRAG_COEFFICIENT = 0.01

DEFAULT_SPECIES = 'N. Atl. Right Whale'
DEFAULT_WHALE_LENGTH_M = 13.7
DEFAULT_WHALE_DRAG_COEFFICIENT = 0.0025
DEFAULT_SKIN_ANGLE_DEG = 55.0

# Per-layer tissue properties, ordered skin, blubber, sublayer, bone.
# Skin and bone are nearly linear (b=0.1), so a = E / b with E the modulus.
DEFAULT_LAYER_THICKNESS_M = (0.025, 0.16, 1.12, 0.10)
DEFAULT_LAYER_A_PA = (17.8e6 / 0.1, 1.58e5, 1.58e5, 8.54e8 / 0.1)
DEFAULT_LAYER_B = (0.1, 2.54, 2.54, 0.1)
DEFAULT_LAYER_STRENGTH_PA = (19.6e6, 0.437e6, 0.437e6, 22.9e6)

# Logistic fit of lethality against log10(stress / Pa).
DEFAULT_LOGISTIC_CENTER = 5.38
DEFAULT_LOGISTIC_WIDTH = 0.349


def _num(name: str, value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise InvalidParameter(name, f'must be a number, got {value!r}.') from e


def _require_positive(name: str, value: Any) -> float:
    v = _num(name, value)
    if not math.isfinite(v) or v <= 0.0:
        raise InvalidParameter(name, f'must be a finite value > 0, got {value!r}.')
    return v


def _require_non_negative(name: str, value: Any) -> float:
    v = _num(name, value)
    if not math.isfinite(v) or v < 0.0:
        raise InvalidParameter(name, f'must be a finite value >= 0, got {value!r}.')
    return v


@dataclass(frozen=True)
class TissueLayer:
    """One tissue layer; stress = a * (exp(b * strain) - 1) up to its strength."""

    name: str
    thickness_m: float
    a_pa: float
    b: float
    strength_pa: float

    def __post_init__(self) -> None:
        _require_positive(f'{self.name}.thickness_m', self.thickness_m)
        _require_positive(f'{self.name}.a_pa', self.a_pa)
        _require_positive(f'{self.name}.b', self.b)
        _require_positive(f'{self.name}.strength_pa', self.strength_pa)

    def stress_from_strain(self, strain: float) -> float:
        return self.a_pa * math.expm1(self.b * strain)

    @property
    def failure_strain(self) -> float:
        """Strain at which the layer reaches its strength (1.0 if it closes first)."""
        return min(1.0, math.log1p(self.strength_pa / self.a_pa) / self.b)


class TissueStack(NamedTuple):
    skin: TissueLayer
    blubber: TissueLayer
    sublayer: TissueLayer
    bone: TissueLayer

    @property
    def total_thickness_m(self) -> float:
        return float(sum(layer.thickness_m for layer in self))

    def column(self, attr: str) -> np.ndarray:
        return np.array([getattr(layer, attr) for layer in self], dtype=float)


@dataclass(frozen=True)
class LogisticFit:
    """Lethality P = 1 / (1 + exp(-(log10(stress) - center) / width))."""

    center: float = DEFAULT_LOGISTIC_CENTER
    width: float = DEFAULT_LOGISTIC_WIDTH

    def __post_init__(self) -> None:
        if not math.isfinite(float(self.center)):
            raise InvalidParameter('logistic_center', f'must be finite, got {self.center!r}.')
        _require_positive('logistic_width', self.width)

    def log10_stress_for(self, p: float) -> float:
        return self.center + self.width * math.log(p / (1.0 - p))

    def stress_for(self, p: float) -> float:
        """Stress (Pa) reaching probability p; inf past the float range."""
        try:
            return 10.0 ** self.log10_stress_for(p)
        except OverflowError:
            return math.inf

    @property
    def tau25_pa(self) -> float:
        return self.stress_for(0.25)

    @property
    def tau50_pa(self) -> float:
        return self.stress_for(0.5)

    @property
    def tau75_pa(self) -> float:
        return self.stress_for(0.75)


@dataclass(frozen=True)
class ParameterSet:
    # Ship
    ship_mass_kg: float
    ship_area_m2: float
    impact_width_m: float  # Ly
    impact_height_m: float  # Lz
    ship_drag_coefficient: float

    # Whale
    species: str
    whale_length_m: float
    whale_mass_kg: float
    whale_area_m2: float
    whale_drag_coefficient: float
    skin_angle_deg: float  # theta

    tissue: TissueStack
    logistic: LogisticFit = field(default_factory=LogisticFit)

    # Fits used (or available) for derived values
    ship_area_fit: PowerLawFit = SHIP_AREA_FIT
    whale_mass_fit: PowerLawFit = WHALE_MASS_FIT
    whale_area_fit: PowerLawFit = WHALE_AREA_FIT

    def __post_init__(self) -> None:
        _require_positive('ship_mass_kg', self.ship_mass_kg)
        _require_positive('ship_area_m2', self.ship_area_m2)
        _require_positive('impact_width_m', self.impact_width_m)
        _require_positive('impact_height_m', self.impact_height_m)
        _require_non_negative('ship_drag_coefficient', self.ship_drag_coefficient)

        if not isinstance(self.species, str) or not self.species.strip():
            raise InvalidParameter('species', 'must be a non-empty string.')
        _require_positive('whale_length_m', self.whale_length_m)
        _require_positive('whale_mass_kg', self.whale_mass_kg)
        _require_positive('whale_area_m2', self.whale_area_m2)
        _require_non_negative('whale_drag_coefficient', self.whale_drag_coefficient)

        theta = float(self.skin_angle_deg)
        if not (0.0 < theta < 90.0):
            raise InvalidParameter('skin_angle_deg', f'must lie in (0, 90) degrees, got {theta!r}.')

        if not isinstance(self.tissue, TissueStack):
            raise InvalidParameter('tissue', 'must be a TissueStack of four layers.')

    @property
    def contact_area_m2(self) -> float:
        return self.impact_width_m * self.impact_height_m

    @property
    def stack_thickness_m(self) -> float:
        return self.tissue.total_thickness_m


RECOGNIZED_OPTIONS = frozenset(
    {
        'ship_mass_kg',
        'ship_area_m2',
        'impact_width_m',
        'impact_height_m',
        'ship_drag_coefficient',
        'species',
        'whale_length_m',
        'whale_mass_kg',
        'whale_area_m2',
        'whale_drag_coefficient',
        'skin_angle_deg',
        'layer_thickness_m',
        'layer_a_pa',
        'layer_b',
        'layer_strength_pa',
        'logistic_center',
        'logistic_width',
        'ship_area_fit',
        'whale_mass_fit',
        'whale_area_fit',
    }
)


def _layer_vector(name: str, value: Any) -> np.ndarray:
    try:
        arr = np.asarray(value, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidParameter(name, 'must be a sequence of four numbers.') from e
    if arr.shape != (len(LAYER_NAMES),):
        raise InvalidParameter(
            name, f'must have exactly {len(LAYER_NAMES)} entries {LAYER_NAMES}, got shape {arr.shape}.'
        )
    return arr


def _power_law(name: str, value: Any) -> PowerLawFit:
    if isinstance(value, PowerLawFit):
        fit = value
    elif isinstance(value, dict):
        try:
            fit = PowerLawFit(float(value['coefficient']), float(value['exponent']))
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidParameter(name, 'needs numeric "coefficient" and "exponent".') from e
    else:
        try:
            coefficient, exponent = value
            fit = PowerLawFit(float(coefficient), float(exponent))
        except (TypeError, ValueError) as e:
            raise InvalidParameter(name, 'must be a PowerLawFit, a dict or a (coefficient, exponent) pair.') from e
    _require_positive(f'{name}.coefficient', fit.coefficient)
    if not math.isfinite(float(fit.exponent)):
        raise InvalidParameter(f'{name}.exponent', 'must be finite.')
    return fit


def _derive(fit_name: str, relation, x: float, fit: PowerLawFit) -> float:
    try:
        v = relation(x, fit)
    except OverflowError as e:
        raise InvalidParameter(fit_name, f'overflows at {x!r}.') from e
    if not math.isfinite(v) or v <= 0.0:
        raise InvalidParameter(fit_name, f'gives {v!r} at {x!r}; need a finite value > 0.')
    return v


def build_tissue_stack(
    thickness_m=DEFAULT_LAYER_THICKNESS_M,
    a_pa=DEFAULT_LAYER_A_PA,
    b=DEFAULT_LAYER_B,
    strength_pa=DEFAULT_LAYER_STRENGTH_PA,
) -> TissueStack:
    l_arr = _layer_vector('layer_thickness_m', thickness_m)
    a_arr = _layer_vector('layer_a_pa', a_pa)
    b_arr = _layer_vector('layer_b', b)
    s_arr = _layer_vector('layer_strength_pa', strength_pa)

    layers = [
        TissueLayer(
            name=name,
            thickness_m=float(l_arr[i]),
            a_pa=float(a_arr[i]),
            b=float(b_arr[i]),
            strength_pa=float(s_arr[i]),
        )
        for i, name in enumerate(LAYER_NAMES)
    ]
    return TissueStack(*layers)


def build_parameters(overrides: dict | None = None) -> ParameterSet:
    """
    Build an immutable parameter set from defaults plus overrides.

    Omitted derived values are filled in once, here:
      - ship_area_m2 from ship_mass_kg (ship_area_fit),
      - whale_mass_kg and whale_area_m2 from whale_length_m (whale_*_fit).
    Unknown keys and invariant violations raise InvalidParameter.
    """
    opts = dict(overrides or {})
    unknown = sorted(set(opts) - RECOGNIZED_OPTIONS)
    if unknown:
        raise InvalidParameter(unknown[0], f'unrecognized option. Known: {sorted(RECOGNIZED_OPTIONS)}')

    def get(key: str, default: Any) -> Any:
        v = opts.get(key)
        return default if v is None else v

    ship_area_fit = _power_law('ship_area_fit', get('ship_area_fit', SHIP_AREA_FIT))
    whale_mass_fit = _power_law('whale_mass_fit', get('whale_mass_fit', WHALE_MASS_FIT))
    whale_area_fit = _power_law('whale_area_fit', get('whale_area_fit', WHALE_AREA_FIT))

    ms = _require_positive('ship_mass_kg', get('ship_mass_kg', DEFAULT_SHIP_MASS_KG))
    lw = _require_positive('whale_length_m', get('whale_length_m', DEFAULT_WHALE_LENGTH_M))

    ship_area = opts.get('ship_area_m2')
    if ship_area is None:
        ship_area = _derive('ship_area_fit', ship_area_from_mass, ms, ship_area_fit)
    whale_mass = opts.get('whale_mass_kg')
    if whale_mass is None:
        whale_mass = _derive('whale_mass_fit', whale_mass_from_length, lw, whale_mass_fit)
    whale_area = opts.get('whale_area_m2')
    if whale_area is None:
        whale_area = _derive('whale_area_fit', whale_area_from_length, lw, whale_area_fit)

    tissue = build_tissue_stack(
        thickness_m=get('layer_thickness_m', DEFAULT_LAYER_THICKNESS_M),
        a_pa=get('layer_a_pa', DEFAULT_LAYER_A_PA),
        b=get('layer_b', DEFAULT_LAYER_B),
        strength_pa=get('layer_strength_pa', DEFAULT_LAYER_STRENGTH_PA),
    )

    logistic = LogisticFit(
        center=_num('logistic_center', get('logistic_center', DEFAULT_LOGISTIC_CENTER)),
        width=_num('logistic_width', get('logistic_width', DEFAULT_LOGISTIC_WIDTH)),
    )

    return ParameterSet(
        ship_mass_kg=ms,
        ship_area_m2=_num('ship_area_m2', ship_area),
        impact_width_m=_num('impact_width_m', get('impact_width_m', DEFAULT_IMPACT_WIDTH_M)),
        impact_height_m=_num('impact_height_m', get('impact_height_m', DEFAULT_IMPACT_HEIGHT_M)),
        ship_drag_coefficient=_num('ship_drag_coefficient', get('ship_drag_coefficient', DEFAULT_SHIP_DRAG_COEFFICIENT)),
        species=get('species', DEFAULT_SPECIES),
        whale_length_m=lw,
        whale_mass_kg=_num('whale_mass_kg', whale_mass),
        whale_area_m2=_num('whale_area_m2', whale_area),
        whale_drag_coefficient=_num('whale_drag_coefficient', get('whale_drag_coefficient', DEFAULT_WHALE_DRAG_COEFFICIENT)),
        skin_angle_deg=_num('skin_angle_deg', get('skin_angle_deg', DEFAULT_SKIN_ANGLE_DEG)),
        tissue=tissue,
        logistic=logistic,
        ship_area_fit=ship_area_fit,
        whale_mass_fit=whale_mass_fit,
        whale_area_fit=whale_area_fit,
    )
