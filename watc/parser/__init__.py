"""
watc Parser Package

Recursive descent parser producing an AST with source spans.

Key Features:
- Single-token lookahead, precedence by grammar level
- Fail-fast parsing, or error recovery at statement boundaries
- Diagnostics naming the expected construct at the offending token

Author: watc developers
"""

from .ast_nodes import *
from .parser import Parser, parse_string, parse_file

__all__ = [
    # Core parser
    "Parser", "parse_string", "parse_file",

    # AST nodes
    "ASTNode", "SourceSpan", "Program", "FunctionDef", "Parameter", "TypeRef",
    "Statement", "LetStatement", "ReturnStatement", "ExpressionStatement",
    "Expression", "NumberLiteral", "StringLiteral", "Identifier",
    "BinaryOp", "FunctionCall", "dump_ast",
]
