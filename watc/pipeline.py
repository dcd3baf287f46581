"""
Compilation driver.

Runs source text through every stage: lexer, parser, lowering, optimizer and
WAT backend. User-input errors never escape as exceptions; they come back in
the CompilationResult, together with whatever artifacts were produced before
the failing stage.

Author: watc developers
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .config import CompilerOptions
from .diagnostics import CompileError, ParseError, format_errors
from .lexer import Lexer, Token
from .parser import Parser, Program
from .ir import IRGenerator, IRModule
from .optimizer import Optimizer
from .backend import WATBackend

logger = logging.getLogger(__name__)


@dataclass
class CompilationResult:
    """Outcome of compiling one source unit."""
    source: str
    options: CompilerOptions
    tokens: Optional[List[Token]] = None
    ast: Optional[Program] = None
    ir: Optional[IRModule] = None
    wat: Optional[str] = None
    errors: List[CompileError] = field(default_factory=list)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def success(self) -> bool:
        return not self.errors and self.wat is not None

    def format_diagnostics(self) -> str:
        """The diagnostic block for every error, in encounter order."""
        return format_errors(self.errors)


def compile_source(source: str, options: Optional[CompilerOptions] = None) -> CompilationResult:
    """
    Compile source text to a WebAssembly text module.

    In the default mode compilation stops at the first error. With
    ``options.recover`` every lexical error is reported, or, when lexing
    succeeds, every syntax error.
    """
    options = options or CompilerOptions()
    result = CompilationResult(source=source, options=options)

    # Lexical analysis
    lexer = Lexer(source, options.filename)
    result.tokens = lexer.tokenize()
    if lexer.has_errors():
        result.errors = list(lexer.errors) if options.recover else lexer.errors[:1]
        logger.debug("lexing failed with %d errors", len(lexer.errors))
        return result

    # Syntax analysis
    parser = Parser(result.tokens)
    if options.recover:
        program, parse_errors = parser.parse_with_recovery()
        if parse_errors:
            result.errors = parse_errors
            return result
        result.ast = program
    else:
        try:
            result.ast = parser.parse()
        except ParseError as e:
            result.errors = [e]
            return result

    # Lowering, optimization and code generation
    try:
        result.ir = IRGenerator().generate(result.ast)
        if options.optimize:
            result.ir = Optimizer().optimize(result.ir)
        result.wat = WATBackend().generate(result.ir)
    except CompileError as e:
        logger.debug("%s stage failed: %s", e.kind, e.message)
        result.errors = [e]
        return result

    logger.info("compiled %s: %d functions", options.filename, len(result.ir))
    return result


def compile_file(path: str, options: Optional[CompilerOptions] = None) -> CompilationResult:
    """
    Read a UTF-8 source file and compile it.

    Raises:
        OSError: If the file cannot be read
    """
    with open(path, 'r', encoding='utf-8') as f:
        source = f.read()

    options = options or CompilerOptions()
    return compile_source(source, options.with_overrides(filename=path))


def compile_to_wat(source: str, filename: str = "<string>") -> str:
    """
    Compile source text, raising the first error instead of collecting it.

    Raises:
        CompileError: On any lexical, syntax, lowering, folding or codegen error
    """
    result = compile_source(source, CompilerOptions(filename=filename))
    if result.has_errors():
        raise result.errors[0]
    return result.wat
