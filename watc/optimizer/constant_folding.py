"""
Constant folding pass.

Replaces ``LoadConstInt a, LoadConstInt b, <op>`` windows with the
precomputed ``LoadConstInt``, repeating until nothing changes. Arithmetic
follows the WebAssembly ``i32`` instructions the backend emits: operands and
results wrap to signed 32 bits, division truncates toward zero and the
remainder takes the sign of the dividend. ``I32_MIN / -1`` traps at run time,
so that window is left for the runtime.

Author: watc developers
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence, Type

from ..diagnostics.errors import FoldError
from ..ir.ir_nodes import (
    IRInstruction, LoadConstInt, Add, Sub, Mul, Div, Mod, Compare,
    I32_MIN, wrap_i32,
)

logger = logging.getLogger(__name__)

# Error codes for optimizer failures
OPTIMIZER_ERROR_CODES = {
    "O001": "Division by zero in constant expression",
    "O002": "Remainder by zero in constant expression",
}


def _truncating_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def _truncating_mod(a: int, b: int) -> int:
    return a - b * _truncating_div(a, b)


ARITHMETIC: Dict[Type[IRInstruction], Callable[[int, int], int]] = {
    Add: lambda a, b: a + b,
    Sub: lambda a, b: a - b,
    Mul: lambda a, b: a * b,
    Div: _truncating_div,
    Mod: _truncating_mod,
}

COMPARISONS: Dict[str, Callable[[int, int], bool]] = {
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    "<": lambda a, b: a < b,
    ">": lambda a, b: a > b,
    "<=": lambda a, b: a <= b,
    ">=": lambda a, b: a >= b,
}


def evaluate(instr: IRInstruction, a: int, b: int,
             function_name: Optional[str] = None) -> Optional[int]:
    """
    Compute ``a <op> b`` for a foldable instruction, as i32 arithmetic.

    Returns:
        The folded value, or None if the instruction is not foldable

    Raises:
        FoldError: If the instruction divides by zero
    """
    a, b = wrap_i32(a), wrap_i32(b)

    if isinstance(instr, Compare):
        return 1 if COMPARISONS[instr.op](a, b) else 0

    operation = ARITHMETIC.get(type(instr))
    if operation is None:
        return None

    if b == 0 and isinstance(instr, (Div, Mod)):
        if isinstance(instr, Div):
            raise FoldError(
                "Division by zero in constant expression",
                code="O001",
                help_text="The divisor evaluates to 0 at compile time.",
                function=function_name,
            )
        raise FoldError(
            "Remainder by zero in constant expression",
            code="O002",
            help_text="The divisor evaluates to 0 at compile time.",
            function=function_name,
        )

    if isinstance(instr, Div) and a == I32_MIN and b == -1:
        logger.debug("left overflowing division unfolded in %s", function_name or "<anonymous>")
        return None

    return wrap_i32(operation(a, b))


def _fold_once(instructions: List[IRInstruction],
               function_name: Optional[str]) -> List[IRInstruction]:
    """One left-to-right sweep folding every constant window it meets."""
    result: List[IRInstruction] = []

    for instr in instructions:
        if (len(result) >= 2
                and isinstance(result[-1], LoadConstInt)
                and isinstance(result[-2], LoadConstInt)):
            value = evaluate(instr, result[-2].value, result[-1].value, function_name)
            if value is not None:
                del result[-2:]
                result.append(LoadConstInt(value))
                continue
        result.append(instr)

    return result


def fold_constants(instructions: Sequence[IRInstruction],
                   function_name: Optional[str] = None) -> List[IRInstruction]:
    """
    Fold constant arithmetic and comparisons to a fixed point.

    Args:
        instructions: Instruction sequence of one function
        function_name: Owning function, reported by FoldError

    Returns:
        New instruction list; the input is not modified

    Raises:
        FoldError: On division or remainder by a constant zero
    """
    current = list(instructions)
    # Every productive sweep removes at least two instructions.
    max_iterations = len(current) // 2 + 1

    for _ in range(max_iterations):
        folded = _fold_once(current, function_name)
        if len(folded) == len(current):
            return folded
        logger.debug("folded %d instructions in %s",
                     len(current) - len(folded), function_name or "<anonymous>")
        current = folded

    logger.warning("constant folding did not converge in %s", function_name or "<anonymous>")
    return current
