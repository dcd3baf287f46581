"""
Error helpers for the watc parser.

Factory functions for syntax errors plus the resynchronization utilities used
when the parser runs in recovery mode and collects several errors per pass.

Author: watc developers
"""

from typing import List, Optional

from ..lexer.tokens import Token, TokenType
from ..lexer.errors import ErrorRecovery
from ..diagnostics.errors import ParseError


class SyntaxErrorRecovery:
    """
    Utilities for error recovery in the parser.

    Provides strategies to continue parsing after a syntax error so that
    multiple errors can be reported from a single pass.
    """

    # Tokens that typically begin a new statement or item
    STATEMENT_STARTS = {
        TokenType.LET,
        TokenType.RETURN,
        TokenType.FN,
        TokenType.RIGHT_BRACE,
        TokenType.EOF,
    }

    @staticmethod
    def suggest_missing_token(expected: TokenType) -> Optional[str]:
        """Suggest what token might be missing."""
        token_suggestions = {
            TokenType.RIGHT_PAREN: "Add a closing parenthesis ')'",
            TokenType.RIGHT_BRACE: "Add a closing brace '}'",
            TokenType.LEFT_BRACE: "Add an opening brace '{' to start the function body",
            TokenType.LEFT_PAREN: "Function names are followed by a parameter list '(...)'",
            TokenType.ASSIGN: "A let binding needs an initializer: let x = ...",
            TokenType.IDENTIFIER: "Names must start with a letter or '_'",
        }

        return token_suggestions.get(expected)

    @staticmethod
    def suggest_keyword(found: Token) -> Optional[str]:
        """Suggest a keyword when an identifier looks like a misspelling of one."""
        if found.type != TokenType.IDENTIFIER:
            return None
        corrections = ErrorRecovery.suggest_keyword_corrections(found.lexeme)
        if corrections:
            return f"Did you mean '{corrections[0]}'?"
        return None

    @staticmethod
    def synchronize_to_statement_boundary(tokens: List[Token], current_pos: int) -> int:
        """
        Synchronize parser to the next likely statement boundary.

        A ';' is consumed; a token that starts a statement (or closes the
        block) is left in place. Never moves past the EOF token.

        Returns the position to resume parsing from.
        """
        last = len(tokens) - 1
        while current_pos < last:
            token = tokens[current_pos]

            if token.type == TokenType.SEMICOLON:
                return current_pos + 1

            if token.type in SyntaxErrorRecovery.STATEMENT_STARTS:
                return current_pos

            current_pos += 1

        return last

    @staticmethod
    def synchronize_to_item_boundary(tokens: List[Token], current_pos: int) -> int:
        """Skip ahead to the next 'fn' keyword (or EOF)."""
        last = len(tokens) - 1
        while current_pos < last and tokens[current_pos].type != TokenType.FN:
            current_pos += 1
        return current_pos


# Common parser error codes for categorization
PARSER_ERROR_CODES = {
    "P001": "Unexpected token",
    "P005": "Invalid expression",
    "P010": "Unexpected end of input",
}


def create_unexpected_token_error(expected: str, found: Token,
                                  help_text: Optional[str] = None) -> ParseError:
    """Create an error for an unexpected token at the current position."""
    if found.type == TokenType.EOF:
        return create_unexpected_eof_error(expected, found, help_text)

    return ParseError(
        message=f"Expected {expected}, found {found.describe()}",
        location=found.location,
        token=found,
        code="P001",
        help_text=help_text,
    )


def create_invalid_expression_error(found: Token) -> ParseError:
    """Create an error for a token that cannot start an expression."""
    if found.type == TokenType.EOF:
        return create_unexpected_eof_error("expression", found)

    return ParseError(
        message=f"Expected expression, found {found.describe()}",
        location=found.location,
        token=found,
        code="P005",
        help_text="Expressions are numbers, strings, names, calls or parenthesized expressions.",
    )


def create_unexpected_eof_error(expected: str, found: Token,
                                help_text: Optional[str] = None) -> ParseError:
    """Create an error for unexpected end of input."""
    return ParseError(
        message=f"Unexpected end of input, expected {expected}",
        location=found.location,
        token=found,
        code="P010",
        help_text=help_text or f"The source ended while the parser was still expecting {expected}.",
    )
