"""
watc Intermediate Representation (IR) Nodes

The IR is a flat, per-function instruction sequence for a stack machine.
Expression evaluation pushes values, binary operators pop two operands and
push one result, stores pop one value.

Instructions are frozen dataclasses, so two instruction sequences compare
equal exactly when they are structurally identical.

Author: watc developers
"""

from abc import ABC
from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple


class IROpcode(Enum):
    """Enumeration of IR instruction kinds."""

    # Constants
    LOAD_CONST_INT = "load_const_int"
    LOAD_CONST_STRING = "load_const_string"

    # Locals
    LOAD_LOCAL = "load_local"
    STORE_LOCAL = "store_local"

    # Arithmetic
    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"
    MOD = "mod"

    # Comparison
    COMPARE = "compare"

    # Control flow
    JUMP = "jump"
    JUMP_IF_FALSE = "jump_if_false"
    CALL = "call"
    RETURN = "return"

    # Stack manipulation
    POP = "pop"


COMPARISON_OPERATORS = ("==", "!=", "<", ">", "<=", ">=")

# Integer values are signed 32-bit at run time; wider literals wrap.
I32_MIN = -(1 << 31)
I32_MAX = (1 << 31) - 1


def wrap_i32(value: int) -> int:
    """Reduce an integer to the signed 32-bit range."""
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


@dataclass(frozen=True)
class IRInstruction(ABC):
    """Base class for IR instructions."""

    opcode = None  # type: Optional[IROpcode]

    def stack_effect(self) -> Tuple[int, int]:
        """Return (values popped, values pushed)."""
        return (0, 0)

    def __str__(self) -> str:
        return self.opcode.value


@dataclass(frozen=True)
class LoadConstInt(IRInstruction):
    value: int
    opcode = IROpcode.LOAD_CONST_INT

    def stack_effect(self) -> Tuple[int, int]:
        return (0, 1)

    def __str__(self) -> str:
        return f"load_const_int {self.value}"


@dataclass(frozen=True)
class LoadConstString(IRInstruction):
    value: str
    opcode = IROpcode.LOAD_CONST_STRING

    def stack_effect(self) -> Tuple[int, int]:
        return (0, 1)

    def __str__(self) -> str:
        return f"load_const_string {self.value!r}"


@dataclass(frozen=True)
class LoadLocal(IRInstruction):
    name: str
    opcode = IROpcode.LOAD_LOCAL

    def stack_effect(self) -> Tuple[int, int]:
        return (0, 1)

    def __str__(self) -> str:
        return f"load_local {self.name}"


@dataclass(frozen=True)
class StoreLocal(IRInstruction):
    name: str
    opcode = IROpcode.STORE_LOCAL

    def stack_effect(self) -> Tuple[int, int]:
        return (1, 0)

    def __str__(self) -> str:
        return f"store_local {self.name}"


class BinaryInstruction(IRInstruction):
    """Pops two operands, pushes one result."""

    def stack_effect(self) -> Tuple[int, int]:
        return (2, 1)


@dataclass(frozen=True)
class Add(BinaryInstruction):
    opcode = IROpcode.ADD


@dataclass(frozen=True)
class Sub(BinaryInstruction):
    opcode = IROpcode.SUB


@dataclass(frozen=True)
class Mul(BinaryInstruction):
    opcode = IROpcode.MUL


@dataclass(frozen=True)
class Div(BinaryInstruction):
    opcode = IROpcode.DIV


@dataclass(frozen=True)
class Mod(BinaryInstruction):
    opcode = IROpcode.MOD


@dataclass(frozen=True)
class Compare(BinaryInstruction):
    """Comparison; pushes 1 when the relation holds, otherwise 0."""
    op: str
    opcode = IROpcode.COMPARE

    def __post_init__(self):
        if self.op not in COMPARISON_OPERATORS:
            raise ValueError(f"unknown comparison operator {self.op!r}")

    def __str__(self) -> str:
        return f"compare {self.op}"


@dataclass(frozen=True)
class Jump(IRInstruction):
    label: str
    opcode = IROpcode.JUMP

    def __str__(self) -> str:
        return f"jump {self.label}"


@dataclass(frozen=True)
class JumpIfFalse(IRInstruction):
    label: str
    opcode = IROpcode.JUMP_IF_FALSE

    def stack_effect(self) -> Tuple[int, int]:
        return (1, 0)

    def __str__(self) -> str:
        return f"jump_if_false {self.label}"


@dataclass(frozen=True)
class Call(IRInstruction):
    name: str
    argc: int
    opcode = IROpcode.CALL

    def stack_effect(self) -> Tuple[int, int]:
        return (self.argc, 1)

    def __str__(self) -> str:
        return f"call {self.name}/{self.argc}"


@dataclass(frozen=True)
class Return(IRInstruction):
    opcode = IROpcode.RETURN


@dataclass(frozen=True)
class Pop(IRInstruction):
    opcode = IROpcode.POP

    def stack_effect(self) -> Tuple[int, int]:
        return (1, 0)


# Instructions folded by the optimizer, keyed by their class
ARITHMETIC_INSTRUCTIONS = (Add, Sub, Mul, Div, Mod)


@dataclass(frozen=True)
class IRFunction:
    """A function's parameters, declared locals and instruction sequence."""
    name: str
    params: Tuple[str, ...] = ()
    locals: Tuple[str, ...] = ()
    returns_value: bool = False
    instructions: Tuple[IRInstruction, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        result = " -> i32" if self.returns_value else ""
        lines = [f"function {self.name}({', '.join(self.params)}){result} {{"]
        if self.locals:
            lines.append(f"  locals {', '.join(self.locals)}")
        for instr in self.instructions:
            lines.append(f"  {instr}")
        lines.append("}")
        return "\n".join(lines)


class IRModule:
    """Top-level IR module: function name -> IRFunction, in definition order."""

    def __init__(self, name: str = "main", functions: Optional[List[IRFunction]] = None):
        self.name = name
        self.functions: Dict[str, IRFunction] = OrderedDict()
        for function in functions or []:
            self.add_function(function)

    def add_function(self, function: IRFunction):
        """Add a function to this module. Names must be unique."""
        if function.name in self.functions:
            raise ValueError(f"function {function.name!r} already defined")
        self.functions[function.name] = function

    def get_function(self, name: str) -> Optional[IRFunction]:
        """Get a function by name."""
        return self.functions.get(name)

    def instructions(self, name: str) -> Tuple[IRInstruction, ...]:
        return self.functions[name].instructions

    def __getitem__(self, name: str) -> IRFunction:
        return self.functions[name]

    def __contains__(self, name: str) -> bool:
        return name in self.functions

    def __iter__(self) -> Iterator[IRFunction]:
        return iter(self.functions.values())

    def __len__(self) -> int:
        return len(self.functions)

    def __eq__(self, other) -> bool:
        if not isinstance(other, IRModule):
            return NotImplemented
        return list(self.functions.items()) == list(other.functions.items())

    def __repr__(self) -> str:
        return f"IRModule({self.name!r}, functions={list(self.functions)!r})"

    def __str__(self) -> str:
        lines = [f"; Module: {self.name}"]
        for func in self.functions.values():
            lines.append(str(func))
            lines.append("")
        return "\n".join(lines)


def check_stack_balance(function: IRFunction) -> None:
    """
    Verify the stack discipline of a straight-line function body.

    The stack may never underflow, and at every Return it must hold exactly
    the returned value (one value, or none for a bare return).

    Raises:
        ValueError: If the discipline is violated
    """
    depth = 0
    for index, instr in enumerate(function.instructions):
        if isinstance(instr, Return):
            if depth > 1:
                raise ValueError(
                    f"{function.name}: {depth} values on the stack at return (index {index})"
                )
            depth = 0
            continue

        pops, pushes = instr.stack_effect()
        if depth < pops:
            raise ValueError(f"{function.name}: stack underflow at index {index} ({instr})")
        depth = depth - pops + pushes
