"""
WebAssembly Text backend for watc.

Translates IR one instruction at a time into WAT, keeping the IR's
evaluation order. Every value is an ``i32``. Calls to functions the module
does not define become ``env`` imports declared ahead of the functions. The
whole module is generated before any text is returned, so a CodegenError
never leaves partial output.

Author: watc developers
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from ..diagnostics.errors import CodegenError
from ..ir.ir_nodes import (
    IRModule, IRFunction, IRInstruction, LoadConstInt, LoadLocal, StoreLocal,
    Add, Sub, Mul, Div, Mod, Compare, Call, Return, Pop, wrap_i32,
)

logger = logging.getLogger(__name__)

INDENT = "  "
IMPORT_NAMESPACE = "env"

SIMPLE_INSTRUCTIONS = {
    Add: "i32.add",
    Sub: "i32.sub",
    Mul: "i32.mul",
    Div: "i32.div_s",
    Mod: "i32.rem_s",
    Return: "return",
    Pop: "drop",
}

COMPARE_INSTRUCTIONS = {
    "==": "i32.eq",
    "!=": "i32.ne",
    "<": "i32.lt_s",
    ">": "i32.gt_s",
    "<=": "i32.le_s",
    ">=": "i32.ge_s",
}

# Error codes for code generation failures
CODEGEN_ERROR_CODES = {
    "W001": "Unsupported IR instruction",
    "W002": "Undeclared local",
    "W003": "Conflicting host function arity",
}


@dataclass
class WATGenContext:
    """Per-function state while emitting WAT."""
    function: IRFunction
    declared: Set[str] = field(default_factory=set)
    lines: List[str] = field(default_factory=list)


def collect_imports(module: IRModule) -> Dict[str, int]:
    """
    Find calls to functions the module does not define.

    Returns:
        Ordered mapping of host function name to argument count, in order of
        first call

    Raises:
        CodegenError: If one host function is called with different arities
    """
    imports: Dict[str, int] = OrderedDict()
    for function in module:
        for instr in function.instructions:
            if not isinstance(instr, Call) or instr.name in module:
                continue
            argc = imports.setdefault(instr.name, instr.argc)
            if argc != instr.argc:
                raise CodegenError(
                    f"Host function '{instr.name}' is called with {instr.argc} "
                    f"arguments in function '{function.name}', but with {argc} elsewhere",
                    code="W003",
                    help_text="Call an imported function with the same number of arguments everywhere.",
                    function=function.name,
                )
    return imports


class WATBackend:
    """
    Generates a WebAssembly text module from a watc IRModule.

    Each function is exported under its source name.
    """

    def __init__(self, export_functions: bool = True):
        self.export_functions = export_functions
        self.context: Optional[WATGenContext] = None

    def generate(self, module: IRModule) -> str:
        """
        Generate WAT for the whole module.

        Returns:
            Module text ending in a newline

        Raises:
            CodegenError: On the first instruction without a WAT mapping, or on
                a host function called with inconsistent arities
        """
        if len(module) == 0:
            return "(module)\n"

        lines = ["(module"]
        imports = collect_imports(module)
        for name, argc in imports.items():
            lines.append(INDENT + self._generate_import(name, argc))
        for function in module:
            lines.extend(self._generate_function(function))
        lines.append(")")

        logger.debug("generated WAT for %d functions, %d imports", len(module), len(imports))
        return "\n".join(lines) + "\n"

    def _generate_import(self, name: str, argc: int) -> str:
        signature = [f"(func ${name}"]
        signature.extend("(param i32)" for _ in range(argc))
        # Every call pushes one value in the IR, so host functions return i32.
        signature.append("(result i32))")
        return f'(import "{IMPORT_NAMESPACE}" "{name}" {" ".join(signature)})'

    def _generate_function(self, function: IRFunction) -> List[str]:
        self.context = WATGenContext(function, declared=set(function.params) | set(function.locals))

        header = [f"(func ${function.name}"]
        if self.export_functions:
            header.append(f'(export "{function.name}")')
        header.extend(f"(param ${name} i32)" for name in function.params)
        if function.returns_value:
            header.append("(result i32)")

        lines = [INDENT + " ".join(header)]
        for name in function.locals:
            if name not in function.params:
                lines.append(f"{INDENT * 2}(local ${name} i32)")

        for instr in function.instructions:
            lines.append(INDENT * 2 + self._generate_instruction(instr))

        lines.append(INDENT + ")")
        self.context = None
        return lines

    def _generate_instruction(self, instr: IRInstruction) -> str:
        mnemonic = SIMPLE_INSTRUCTIONS.get(type(instr))
        if mnemonic is not None:
            return mnemonic

        if isinstance(instr, LoadConstInt):
            return f"i32.const {wrap_i32(instr.value)}"

        if isinstance(instr, Compare):
            return COMPARE_INSTRUCTIONS[instr.op]

        if isinstance(instr, LoadLocal):
            return f"local.get ${self._local(instr.name)}"

        if isinstance(instr, StoreLocal):
            return f"local.set ${self._local(instr.name)}"

        if isinstance(instr, Call):
            return f"call ${instr.name}"

        name = self.context.function.name
        raise CodegenError(
            f"Cannot generate WebAssembly for IR instruction '{instr}' in function '{name}'",
            code="W001",
            help_text="Only straight-line integer code is supported by the WebAssembly backend.",
            function=name,
        )

    def _local(self, name: str) -> str:
        if name not in self.context.declared:
            function = self.context.function.name
            raise CodegenError(
                f"Local '{name}' is not declared in function '{function}'",
                code="W002",
                function=function,
            )
        return name


def generate_wat(module: IRModule) -> str:
    """Convenience function to generate WAT text."""
    return WATBackend().generate(module)
