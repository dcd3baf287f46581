"""
IR Generator for watc.

Lowers the AST into the flat stack-machine IR. Emission is depth-first and
left-to-right: operands are pushed before the operator that consumes them,
call arguments in source order before the call.

Author: watc developers
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Set

from ..diagnostics.errors import LoweringError
from ..parser.ast_nodes import (
    Program, FunctionDef, Statement, LetStatement, ReturnStatement,
    ExpressionStatement, Expression, NumberLiteral, StringLiteral, Identifier,
    BinaryOp, FunctionCall,
)
from .ir_nodes import (
    IRModule, IRFunction, IRInstruction, LoadConstInt, LoadConstString,
    LoadLocal, StoreLocal, Add, Sub, Mul, Div, Mod, Compare, Call, Return, Pop,
    COMPARISON_OPERATORS,
)

logger = logging.getLogger(__name__)

ARITHMETIC_OPS = {
    "+": Add,
    "-": Sub,
    "*": Mul,
    "/": Div,
    "%": Mod,
}

# Error codes for lowering failures
LOWERING_ERROR_CODES = {
    "G001": "Duplicate function definition",
    "G002": "Undefined variable",
}


@dataclass
class IRGenContext:
    """Per-function state while lowering."""
    function_name: str
    returns_value: bool
    instructions: List[IRInstruction] = field(default_factory=list)
    locals: List[str] = field(default_factory=list)
    scope: Set[str] = field(default_factory=set)

    def emit(self, instr: IRInstruction):
        self.instructions.append(instr)


class IRGenerator:
    """
    Generates watc IR from a parsed program.

    The generator is stateless between calls to ``generate``; the AST is
    never modified.
    """

    def __init__(self):
        self.module: Optional[IRModule] = None
        self.context: Optional[IRGenContext] = None

    def generate(self, program: Program, module_name: str = "main") -> IRModule:
        """
        Lower every function of the program.

        Args:
            program: Parsed compilation unit
            module_name: Name recorded on the resulting module

        Returns:
            IRModule with one IRFunction per definition, in source order

        Raises:
            LoweringError: On duplicate function names or undefined variables
        """
        self.module = IRModule(module_name)

        for func_def in program.functions:
            if func_def.name in self.module:
                raise LoweringError(
                    f"Function '{func_def.name}' is already defined",
                    func_def.span.start,
                    code="G001",
                    help_text="Each function name may be defined only once.",
                )
            self.module.add_function(self._generate_function(func_def))

        logger.debug("lowered %d functions", len(self.module))
        return self.module

    def _generate_function(self, func_def: FunctionDef) -> IRFunction:
        params = tuple(p.name for p in func_def.params)
        returns_value = func_def.return_type is not None or any(
            isinstance(stmt, ReturnStatement) and stmt.value is not None
            for stmt in func_def.body
        )

        self.context = IRGenContext(func_def.name, returns_value, scope=set(params))

        for stmt in func_def.body:
            self._generate_statement(stmt)

        instructions = self.context.instructions
        if not instructions or not isinstance(instructions[-1], Return):
            if returns_value:
                self.context.emit(LoadConstInt(0))
            self.context.emit(Return())

        function = IRFunction(
            name=func_def.name,
            params=params,
            locals=tuple(self.context.locals),
            returns_value=returns_value,
            instructions=tuple(instructions),
        )
        self.context = None
        return function

    def _generate_statement(self, stmt: Statement):
        ctx = self.context

        if isinstance(stmt, LetStatement):
            self._generate_expression(stmt.initializer)
            ctx.emit(StoreLocal(stmt.name))
            if stmt.name not in ctx.scope:
                ctx.scope.add(stmt.name)
                ctx.locals.append(stmt.name)

        elif isinstance(stmt, ReturnStatement):
            if stmt.value is not None:
                self._generate_expression(stmt.value)
            elif ctx.returns_value:
                ctx.emit(LoadConstInt(0))
            ctx.emit(Return())

        elif isinstance(stmt, ExpressionStatement):
            self._generate_expression(stmt.expression)
            ctx.emit(Pop())

        else:
            raise TypeError(f"cannot lower statement {stmt!r}")

    def _generate_expression(self, expr: Expression):
        """
        Emit the instructions for an expression.

        Walks the tree with an explicit work stack (post-order), so long
        operator chains do not depend on interpreter recursion depth.
        """
        ctx = self.context
        work = [(expr, False)]

        while work:
            node, expanded = work.pop()

            if isinstance(node, NumberLiteral):
                ctx.emit(LoadConstInt(node.value))

            elif isinstance(node, StringLiteral):
                ctx.emit(LoadConstString(node.value))

            elif isinstance(node, Identifier):
                if node.name not in ctx.scope:
                    raise LoweringError(
                        f"Undefined variable '{node.name}'",
                        node.span.start,
                        code="G002",
                        help_text="Variables must be parameters or bound with 'let' before use.",
                        function=ctx.function_name,
                    )
                ctx.emit(LoadLocal(node.name))

            elif isinstance(node, BinaryOp):
                if expanded:
                    ctx.emit(self._binary_instruction(node.operator))
                else:
                    work.append((node, True))
                    work.append((node.right, False))
                    work.append((node.left, False))

            elif isinstance(node, FunctionCall):
                if expanded:
                    ctx.emit(Call(node.name, len(node.args)))
                else:
                    work.append((node, True))
                    for arg in reversed(node.args):
                        work.append((arg, False))

            else:
                raise TypeError(f"cannot lower expression {node!r}")

    def _binary_instruction(self, operator: str) -> IRInstruction:
        if operator in ARITHMETIC_OPS:
            return ARITHMETIC_OPS[operator]()
        if operator in COMPARISON_OPERATORS:
            return Compare(operator)
        raise ValueError(f"unknown binary operator {operator!r}")


def generate_ir(program: Program, module_name: str = "main") -> IRModule:
    """Convenience function to lower a program."""
    return IRGenerator().generate(program, module_name)
