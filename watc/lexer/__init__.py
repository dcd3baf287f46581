"""
watc Lexer Package

Hand-written lexical analyzer for the watc language.

Key Features:
- Keywords fn, let, return
- Decimal integer and double-quoted string literals
- Line (//) and block (/* */) comments
- 1-based line/column tracking for diagnostics

Author: watc developers
"""

from .tokens import Token, TokenType, SourceLocation
from .lexer import Lexer, tokenize_string, tokenize_file

__all__ = [
    "Lexer",
    "Token",
    "TokenType",
    "SourceLocation",
    "tokenize_string",
    "tokenize_file",
]
