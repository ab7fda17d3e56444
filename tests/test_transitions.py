"""
Tests for the transition model.
"""
import math

import numpy as np
import pytest

from repeat_hmm.algorithms.transitions import TransitionModel, DEFAULT_PRIORS
from repeat_hmm.core.track import S, M, D, I, Z, E
from repeat_hmm.errors import ConfigError


def test_formulas():
    """Log odds follow the model / null factor formulas."""
    tm = TransitionModel(delta=0.001, epsilon=0.05, tau=0.01, eta=0.01)
    d, e, t, n = 0.001, 0.05, 0.01, 0.01

    assert tm.log10(S, M) == pytest.approx(math.log10((1 - 2 * d - t) / (n * (1 - n) ** 2)))
    assert tm.log10(M, M) == pytest.approx(math.log10((1 - 2 * d - t) / (1 - n) ** 2))
    assert tm.log10(D, M) == pytest.approx(math.log10((1 - e - t) / (1 - n) ** 2))
    assert tm.log10(S, D) == pytest.approx(math.log10(d / (n * (1 - n))))
    assert tm.log10(S, I) == pytest.approx(math.log10(d / (n * (1 - n))))
    for a, b in ((M, D), (D, D), (M, I), (I, I)):
        assert tm.log10(a, b) == pytest.approx(math.log10(d / (1 - n)))
    for a in (M, D, I):
        assert tm.log10(a, Z) == pytest.approx(math.log10(t / (n * (1 - n))))
    assert tm.log10(Z, Z) == 0.0


def test_disallowed_transitions():
    """Edges outside the model are -inf, including I->M by default."""
    tm = TransitionModel()
    assert tm.log10(I, M) == -np.inf
    assert tm.log10(S, Z) == -np.inf
    assert tm.log10(D, I) == -np.inf
    assert tm.log10(I, D) == -np.inf
    assert tm.log10(Z, M) == -np.inf
    assert np.all(tm.T[E] == -np.inf)


def test_close_insertions():
    """close_insertions gives I->M the D->M log odds."""
    tm = TransitionModel(close_insertions=True)
    assert tm.log10(I, M) == pytest.approx(tm.log10(D, M))
    assert tm.P[I][M] == pytest.approx(1 - tm.epsilon - tm.tau)


@pytest.mark.parametrize("priors", [
    {},
    {'delta': 0.05, 'epsilon': 0.05, 'tau': 0.1, 'eta': 0.2},
    {'delta': 0.2, 'epsilon': 0.5, 'tau': 0.3, 'eta': 0.5},
    {'delta': 0.0001, 'epsilon': 0.9, 'tau': 0.05, 'eta': 0.001},
])
@pytest.mark.parametrize("close_insertions", [False, True])
def test_rows_are_probability_distributions(priors, close_insertions):
    """Model probabilities recovered from T leave each state with at most unit mass."""
    tm = TransitionModel(close_insertions=close_insertions, **priors)
    recovered = np.where(np.isfinite(tm.T), 10.0 ** tm.T * tm.null, 0.0)
    assert np.allclose(recovered, tm.P)
    for state in (S, M, D, I, Z):
        assert recovered[state].sum() <= 1.0 + 1e-12
    assert tm.outgoing_mass(M) == pytest.approx(1.0)


def test_matrix_is_read_only():
    """The built matrix cannot be modified."""
    tm = TransitionModel()
    with pytest.raises(ValueError):
        tm.T[M][M] = 0.0


@pytest.mark.parametrize("params", [
    {'delta': 0.0},
    {'epsilon': 1.0},
    {'tau': -0.1},
    {'eta': 1.5},
    {'delta': 0.45, 'tau': 0.2},
    {'epsilon': 0.95, 'tau': 0.1},
    {'delta': 0.1, 'epsilon': 0.05},
])
def test_invalid_priors(params):
    """Priors outside (0, 1), leaving no match mass or letting a gap state exceed unit mass are rejected."""
    with pytest.raises(ConfigError):
        TransitionModel(**params)


def test_from_config_round_trip():
    """A model rebuilt from its own dict has the same matrix."""
    tm = TransitionModel(delta=0.002, epsilon=0.1, tau=0.02, eta=0.05, close_insertions=True)
    rebuilt = TransitionModel.from_config(tm.to_dict())
    assert np.array_equal(rebuilt.T, tm.T)

    defaults = TransitionModel.from_config({})
    assert defaults.to_dict() == dict(DEFAULT_PRIORS, close_insertions=False)


def test_format_table():
    """The text table has a header row and one row per scoring state."""
    lines = TransitionModel().format_table().splitlines()
    assert len(lines) == 6
    assert lines[1].startswith('S')
    assert '-inf' in lines[3]
