"""
Dead-code elimination pass.

Author: watc developers
"""

import logging
from typing import List, Sequence

from ..ir.ir_nodes import IRInstruction, Return, Jump

logger = logging.getLogger(__name__)

# Unconditional terminators: nothing after them in a straight-line body runs
TERMINATORS = (Return, Jump)


def eliminate_dead_code(instructions: Sequence[IRInstruction]) -> List[IRInstruction]:
    """Keep instructions up to and including the first terminator."""
    for index, instr in enumerate(instructions):
        if isinstance(instr, TERMINATORS):
            removed = len(instructions) - index - 1
            if removed:
                logger.debug("removed %d unreachable instructions after %s", removed, instr)
            return list(instructions[:index + 1])
    return list(instructions)
