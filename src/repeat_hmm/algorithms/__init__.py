from .transitions import TransitionModel, DEFAULT_PRIORS
from .moves import MoveTable
from .lfhmm import LFHMM, MAXLEN, MAX_MOTIF_LEN

__all__ = [
    # Model
    'TransitionModel',
    'DEFAULT_PRIORS',
    'MoveTable',

    # Aligner
    'LFHMM',
    'MAXLEN',
    'MAX_MOTIF_LEN',
]
