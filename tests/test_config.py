import pytest

import gradmesh.config as config

from gradmesh.config import Parameters


def test_defaults():
    params = Parameters()

    assert params.delta == config.DELTA
    assert params.rad_coef == config.RAD_COEF
    assert params.smooth_passes == config.SMOOTH_PASSES
    assert params.recovery == 'midpoint'
    assert params.relax is False


def test_overrides():
    params = Parameters(delta=0.75, recovery='swap')

    assert params.delta == 0.75
    assert params.recovery == 'swap'
    assert params.space_coef == config.SPACE_COEF
    assert params != Parameters()
    assert 'delta=0.75' in repr(params)

    with pytest.raises(TypeError):
        Parameters(spacing=0.1)


def test_module_defaults(monkeypatch):
    monkeypatch.setattr(config, 'DELTA', 0.7)

    assert Parameters().delta == 0.7


def test_copy():
    params = Parameters(smooth_passes=2)
    other = params.copy()

    assert other == params
    assert other is not params

    other = params.copy(relax=True)

    assert other.relax is True
    assert other.smooth_passes == 2
    assert params.relax is False

    with pytest.raises(ValueError):
        params.copy(smooth_weight=1.5)


@pytest.mark.parametrize('name, value', [
    ('delta', 0.0),
    ('delta', 1.5),
    ('rad_coef', 0.0),
    ('epsilon', -1e-7),
    ('smooth_weight', -0.1),
    ('smooth_passes', -1),
    ('recovery', 'flip'),
    ('max_recover_steps', 0),
    ('max_refine_steps', 0),
])
def test_out_of_range(name, value):
    with pytest.raises(ValueError):
        Parameters(**{name: value})
