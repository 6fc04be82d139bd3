import numpy as np
import pytest

from strike_sim.errors import InvalidArgument
from strike_sim.lethality import lethality_from_stress, lethality_thresholds, stress_for_probability
from strike_sim.parameters import build_parameters


@pytest.fixture(scope='module')
def params():
    return build_parameters()


def test_monotonic_in_stress(params):
    stress = np.concatenate([[0.0], np.logspace(2, 8, 400)])
    p = lethality_from_stress(stress, params)
    assert p.shape == stress.shape
    assert np.all(np.diff(p) >= 0.0)
    assert p[0] == 0.0
    assert np.all((p >= 0.0) & (p <= 1.0))


def test_round_trip(params):
    for p in np.linspace(0.01, 0.99, 99):
        assert lethality_from_stress(stress_for_probability(p, params), params) == pytest.approx(p, abs=1e-6)


def test_round_trip_with_other_fit():
    params = build_parameters({'logistic_center': 6.0, 'logistic_width': 0.2})
    for p in (0.01, 0.25, 0.5, 0.75, 0.99):
        assert lethality_from_stress(stress_for_probability(p, params), params) == pytest.approx(p, abs=1e-6)


def test_center_is_fifty_percent(params):
    assert stress_for_probability(0.5, params) == pytest.approx(10.0**5.38)
    assert lethality_from_stress(10.0**5.38, params) == pytest.approx(0.5)


def test_scalar_in_scalar_out(params):
    assert isinstance(lethality_from_stress(2.0e5, params), float)
    assert stress_for_probability(0.0, params) == 0.0


def test_thresholds_match_inverse(params):
    thresholds = lethality_thresholds(params)
    for p, stress in thresholds.items():
        assert stress == pytest.approx(stress_for_probability(p, params))
    assert thresholds[0.25] < thresholds[0.5] < thresholds[0.75]


@pytest.mark.parametrize('p', [1.0, -0.01, 1.5, float('nan')])
def test_probability_outside_domain(params, p):
    with pytest.raises(InvalidArgument) as exc:
        stress_for_probability(p, params)
    assert exc.value.name == 'p'


@pytest.mark.parametrize('stress', [-1.0, [1e5, -2.0], float('inf')])
def test_bad_stress(params, stress):
    with pytest.raises(InvalidArgument):
        lethality_from_stress(stress, params)


def test_wide_fit_threshold_saturates():
    params = build_parameters({'logistic_width': 100.0})
    assert stress_for_probability(0.99, params) == np.inf
    assert stress_for_probability(0.01, params) == 0.0
    thresholds = lethality_thresholds(params)
    assert thresholds[0.75] == np.inf
    assert thresholds[0.50] == pytest.approx(10.0**5.38)
