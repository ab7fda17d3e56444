"""
Transition model of the repeat HMM.

Every entry of ``T`` is the log10 ratio between a transition probability of
the repeat model and the matching factor of a null model that starts a read
with probability eta and extends it with probability 1 - eta per base.
Disallowed transitions are -inf.
"""

from typing import Dict, Any

import numpy as np

from ..core.track import S, M, D, I, Z, NSTATES, state2string
from ..errors import ConfigError

DEFAULT_PRIORS = {
    'delta': 0.001,
    'epsilon': 0.05,
    'tau': 0.01,
    'eta': 0.01,
}


class TransitionModel:
    """
    Log10 transition matrix built from four priors.

    Args:
        delta: Deletion/insertion opening rate
        epsilon: Per-base error rate, the mass a deletion keeps for itself
        tau: Termination rate into the trailing flank
        eta: Read boundary rate of the null model
        close_insertions: Allow I->M with the D->M formula; the default
            leaves I->M disallowed
    """

    def __init__(
        self,
        delta: float = DEFAULT_PRIORS['delta'],
        epsilon: float = DEFAULT_PRIORS['epsilon'],
        tau: float = DEFAULT_PRIORS['tau'],
        eta: float = DEFAULT_PRIORS['eta'],
        close_insertions: bool = False
    ):
        for name, value in (('delta', delta), ('epsilon', epsilon), ('tau', tau), ('eta', eta)):
            if not 0.0 < value < 1.0:
                raise ConfigError(name, value, "a probability strictly between 0 and 1")
        if 1 - 2 * delta - tau <= 0:
            raise ConfigError('delta', delta, "1 - 2*delta - tau > 0")
        if 1 - epsilon - tau <= 0:
            raise ConfigError('epsilon', epsilon, "1 - epsilon - tau > 0")
        # D and I keep epsilon - delta of their mass for themselves
        if delta > epsilon:
            raise ConfigError('delta', delta, "delta <= epsilon")

        self.delta = delta
        self.epsilon = epsilon
        self.tau = tau
        self.eta = eta
        self.close_insertions = close_insertions

        self.P, self.null = self._build()
        with np.errstate(divide='ignore'):
            self.T = np.where(self.P > 0, np.log10(self.P / self.null), -np.inf)

        for array in (self.P, self.null, self.T):
            array.flags.writeable = False

    def _build(self):
        delta, epsilon, tau, eta = self.delta, self.epsilon, self.tau, self.eta

        P = np.zeros((NSTATES, NSTATES), dtype=np.float64)
        null = np.ones((NSTATES, NSTATES), dtype=np.float64)

        # read start
        start = eta * (1 - eta)
        # one more read base
        extend = 1 - eta

        P[S][M] = 1 - 2 * delta - tau
        null[S][M] = start * extend
        P[M][M] = 1 - 2 * delta - tau
        null[M][M] = extend * extend
        P[D][M] = 1 - epsilon - tau
        null[D][M] = extend * extend
        if self.close_insertions:
            P[I][M] = P[D][M]
            null[I][M] = null[D][M]

        P[S][D] = delta
        null[S][D] = start
        P[M][D] = delta
        null[M][D] = extend
        P[D][D] = delta
        null[D][D] = extend

        P[S][I] = delta
        null[S][I] = start
        P[M][I] = delta
        null[M][I] = extend
        P[I][I] = delta
        null[I][I] = extend

        P[M][Z] = tau
        null[M][Z] = start
        P[D][Z] = tau
        null[D][Z] = start
        P[I][Z] = tau
        null[I][Z] = start
        P[Z][Z] = 1.0

        return P, null

    def __getitem__(self, key):
        return self.T[key]

    def log10(self, a: int, b: int) -> float:
        return float(self.T[a][b])

    def outgoing_mass(self, state: int) -> float:
        """Linear probability mass leaving ``state`` under the repeat model."""
        return float(self.P[state].sum())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'delta': self.delta,
            'epsilon': self.epsilon,
            'tau': self.tau,
            'eta': self.eta,
            'close_insertions': self.close_insertions,
        }

    @classmethod
    def from_config(cls, params: Dict[str, Any]) -> 'TransitionModel':
        """Build from the ``model`` section of the pipeline config."""
        params = params or {}
        return cls(
            delta=float(params.get('delta', DEFAULT_PRIORS['delta'])),
            epsilon=float(params.get('epsilon', DEFAULT_PRIORS['epsilon'])),
            tau=float(params.get('tau', DEFAULT_PRIORS['tau'])),
            eta=float(params.get('eta', DEFAULT_PRIORS['eta'])),
            close_insertions=bool(params.get('close_insertions', False)),
        )

    def format_table(self) -> str:
        """Transition table as text, one row per source state."""
        states = range(S, Z + 1)
        lines = [' ' + ''.join(f"{state2string(b):>8}" for b in states)]
        for a in states:
            row = ''.join(f"{self.T[a][b]:8.2f}" for b in states)
            lines.append(f"{state2string(a)}{row}")
        return '\n'.join(lines)

    def __repr__(self) -> str:
        return (f"TransitionModel(delta={self.delta}, epsilon={self.epsilon}, "
                f"tau={self.tau}, eta={self.eta}, close_insertions={self.close_insertions})")


__all__ = ['TransitionModel', 'DEFAULT_PRIORS']
