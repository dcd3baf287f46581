"""
watc IR optimizer: constant folding and dead-code elimination.
"""

from .constant_folding import fold_constants, evaluate
from .dead_code import eliminate_dead_code
from .pipeline import Optimizer, OptimizationStats, optimize

__all__ = [
    'fold_constants', 'evaluate', 'eliminate_dead_code',
    'Optimizer', 'OptimizationStats', 'optimize',
]
