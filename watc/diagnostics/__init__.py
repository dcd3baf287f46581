"""
watc Diagnostics Package

Structured compile errors and their rendering. Every stage of the pipeline
reports failures through these types so callers see one consistent format:

    Error[P001]: Expected function name, found number '123'
     → line 1, column 4
     Help: Function names must be valid identifiers

Author: watc developers
"""

from .errors import (
    Diagnostic, CompileError, LexError, ParseError, LoweringError,
    FoldError, CodegenError,
)
from .render import format_error, format_errors, report_errors

__all__ = [
    "Diagnostic",
    "CompileError",
    "LexError",
    "ParseError",
    "LoweringError",
    "FoldError",
    "CodegenError",
    "format_error",
    "format_errors",
    "report_errors",
]
