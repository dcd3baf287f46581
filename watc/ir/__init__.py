"""
watc Intermediate Representation.

Stack-machine instructions, functions and modules, plus the AST lowering pass.
"""

from .ir_nodes import (
    IROpcode, IRInstruction, LoadConstInt, LoadConstString, LoadLocal,
    StoreLocal, BinaryInstruction, Add, Sub, Mul, Div, Mod, Compare, Jump,
    JumpIfFalse, Call, Return, Pop, IRFunction, IRModule, check_stack_balance,
    COMPARISON_OPERATORS, ARITHMETIC_INSTRUCTIONS, I32_MIN, I32_MAX, wrap_i32,
)
from .ir_generator import IRGenerator, generate_ir

__all__ = [
    'IROpcode', 'IRInstruction', 'LoadConstInt', 'LoadConstString', 'LoadLocal',
    'StoreLocal', 'BinaryInstruction', 'Add', 'Sub', 'Mul', 'Div', 'Mod',
    'Compare', 'Jump', 'JumpIfFalse', 'Call', 'Return', 'Pop', 'IRFunction',
    'IRModule', 'check_stack_balance', 'COMPARISON_OPERATORS',
    'ARITHMETIC_INSTRUCTIONS', 'I32_MIN', 'I32_MAX', 'wrap_i32',
    'IRGenerator', 'generate_ir',
]
