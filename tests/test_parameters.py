import dataclasses

import pytest

from strike_sim.allometry import PowerLawFit, ship_area_from_mass, whale_mass_from_length
from strike_sim.errors import InvalidParameter
from strike_sim.parameters import LAYER_NAMES, TissueStack, build_parameters


def test_defaults_derive_missing_values():
    p = build_parameters()
    assert p.ship_mass_kg == 45_000.0
    assert p.ship_area_m2 == pytest.approx(ship_area_from_mass(45_000.0))
    assert p.whale_mass_kg == pytest.approx(whale_mass_from_length(13.7))
    # 13.7 m right whale is roughly 30 t
    assert 25_000.0 < p.whale_mass_kg < 35_000.0
    assert p.contact_area_m2 == pytest.approx(1.15 * 1.15)


def test_explicit_values_win_over_derivations():
    p = build_parameters({'ship_area_m2': 123.0, 'whale_mass_kg': 40_000.0, 'whale_area_m2': 90.0})
    assert p.ship_area_m2 == 123.0
    assert p.whale_mass_kg == 40_000.0
    assert p.whale_area_m2 == 90.0


def test_fit_coefficients_are_configurable():
    p = build_parameters({'whale_mass_fit': (100.0, 2.0), 'ship_area_fit': {'coefficient': 2.0, 'exponent': 0.5}})
    assert p.whale_mass_kg == pytest.approx(100.0 * 13.7**2)
    assert p.ship_area_m2 == pytest.approx(2.0 * 45_000.0**0.5)
    assert p.whale_mass_fit == PowerLawFit(100.0, 2.0)


def test_tissue_stack_is_fixed_four_layers():
    p = build_parameters()
    assert isinstance(p.tissue, TissueStack)
    assert tuple(layer.name for layer in p.tissue) == LAYER_NAMES
    assert p.stack_thickness_m == pytest.approx(0.025 + 0.16 + 1.12 + 0.10)
    # Blubber fails before it closes; skin closes before it fails.
    assert p.tissue.blubber.failure_strain < 1.0
    assert p.tissue.skin.failure_strain == 1.0


def test_parameter_set_is_immutable():
    p = build_parameters()
    with pytest.raises(dataclasses.FrozenInstanceError):
        p.ship_mass_kg = 1.0
    with pytest.raises(dataclasses.FrozenInstanceError):
        p.tissue.skin.thickness_m = 1.0


@pytest.mark.parametrize(
    'overrides, name',
    [
        ({'ship_mass_kg': 0.0}, 'ship_mass_kg'),
        ({'ship_mass_kg': -5.0}, 'ship_mass_kg'),
        ({'whale_length_m': 0.0}, 'whale_length_m'),
        ({'impact_width_m': 0.0}, 'impact_width_m'),
        ({'impact_height_m': float('nan')}, 'impact_height_m'),
        ({'layer_thickness_m': [0.1, 0.2, 0.3]}, 'layer_thickness_m'),
        ({'layer_strength_pa': [1.0, 2.0, 3.0, 4.0, 5.0]}, 'layer_strength_pa'),
        ({'layer_a_pa': [1e8, -1.0, 1e5, 1e9]}, 'blubber.a_pa'),
        ({'layer_b': [0.1, 2.5, 0.0, 0.1]}, 'sublayer.b'),
        ({'layer_thickness_m': [0.025, 0.16, 1.12, 0.0]}, 'bone.thickness_m'),
        ({'skin_angle_deg': 90.0}, 'skin_angle_deg'),
        ({'ship_drag_coefficient': -0.1}, 'ship_drag_coefficient'),
        ({'logistic_width': 0.0}, 'logistic_width'),
        ({'ship_mass_kg': 'heavy'}, 'ship_mass_kg'),
        ({'whale_mass_fit': (-1.0, 2.0)}, 'whale_mass_fit.coefficient'),
        ({'hull_colour': 'red'}, 'hull_colour'),
    ],
)
def test_invalid_parameters_name_the_option(overrides, name):
    with pytest.raises(InvalidParameter) as exc:
        build_parameters(overrides)
    assert exc.value.name == name
    assert isinstance(exc.value, ValueError)


def test_logistic_thresholds_are_ordered():
    fit = build_parameters().logistic
    assert fit.tau25_pa < fit.tau50_pa < fit.tau75_pa
    assert fit.tau50_pa == pytest.approx(10.0**5.38)


@pytest.mark.parametrize(
    'overrides, name',
    [
        ({'ship_area_fit': (1.0, 1000.0)}, 'ship_area_fit'),
        ({'whale_mass_fit': (1.0, 1000.0)}, 'whale_mass_fit'),
        ({'whale_area_fit': (1.0, -1000.0)}, 'whale_area_fit'),
    ],
)
def test_unusable_fit_is_named(overrides, name):
    with pytest.raises(InvalidParameter) as exc:
        build_parameters(overrides)
    assert exc.value.name == name
