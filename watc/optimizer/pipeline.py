"""
Optimization pipeline.

Runs constant folding then dead-code elimination over every function of a
module and returns a new module. The input module is left untouched.

Author: watc developers
"""

import logging
from dataclasses import dataclass, replace

from ..ir.ir_nodes import IRModule, IRFunction
from .constant_folding import fold_constants
from .dead_code import eliminate_dead_code

logger = logging.getLogger(__name__)


@dataclass
class OptimizationStats:
    """Counters collected by the last optimize() call."""
    functions: int = 0
    instructions_before: int = 0
    instructions_after: int = 0

    @property
    def instructions_removed(self) -> int:
        return self.instructions_before - self.instructions_after


class Optimizer:
    """
    Module-level optimizer.

    ``optimize`` is idempotent: optimizing an already optimized module
    returns an equal module.
    """

    def __init__(self, fold: bool = True, dead_code: bool = True):
        self.fold = fold
        self.dead_code = dead_code
        self.stats = OptimizationStats()

    def optimize(self, module: IRModule) -> IRModule:
        """
        Optimize every function of the module.

        Raises:
            FoldError: If a constant expression divides by zero
        """
        self.stats = OptimizationStats()
        optimized = IRModule(module.name)

        for function in module:
            optimized.add_function(self.optimize_function(function))

        logger.debug("optimized %d functions, removed %d instructions",
                     self.stats.functions, self.stats.instructions_removed)
        return optimized

    def optimize_function(self, function: IRFunction) -> IRFunction:
        instructions = list(function.instructions)

        if self.fold:
            instructions = fold_constants(instructions, function.name)
        if self.dead_code:
            instructions = eliminate_dead_code(instructions)

        self.stats.functions += 1
        self.stats.instructions_before += len(function.instructions)
        self.stats.instructions_after += len(instructions)

        return replace(function, instructions=tuple(instructions))


def optimize(module: IRModule) -> IRModule:
    """Convenience function running the default pipeline."""
    return Optimizer().optimize(module)
