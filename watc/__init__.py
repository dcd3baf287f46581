"""
watc Compiler Package

A small compiler from a C-like toy language to the WebAssembly text format.

Architecture:
    watc/
    ├── lexer/           # Tokenization and lexical analysis
    ├── parser/          # Syntax analysis and AST generation
    ├── diagnostics/     # Compile errors and their rendering
    ├── ir/              # Stack-machine IR and AST lowering
    ├── optimizer/       # Constant folding and dead-code elimination
    ├── backend/         # WebAssembly text generation
    ├── pipeline.py      # Compilation driver
    └── cli.py           # Command line interface

Author: watc developers
License: MIT
"""

__version__ = "0.1.0"
__author__ = "watc developers"
__license__ = "MIT"

from .lexer import Lexer
from .parser import Parser
from .diagnostics import CompileError
from .ir import IRGenerator
from .optimizer import Optimizer
from .backend import WATBackend
from .config import CompilerOptions
from .pipeline import CompilationResult, compile_source, compile_file, compile_to_wat

__all__ = [
    # Core classes
    "Lexer",
    "Parser",
    "IRGenerator",
    "Optimizer",
    "WATBackend",
    "CompileError",

    # Driver
    "CompilerOptions",
    "CompilationResult",
    "compile_source",
    "compile_file",
    "compile_to_wat",

    # Version info
    "__version__",
]
