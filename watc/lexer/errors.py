"""
Error helpers for the watc lexer.

Provides error codes, factory functions for the common lexical errors, and
edit-distance based suggestions used by the diagnostics.

Author: watc developers
"""

from typing import List

from .tokens import SourceLocation, KEYWORDS
from ..diagnostics.errors import LexError


class ErrorRecovery:
    """Suggestion helpers for misspelled words and characters."""

    @staticmethod
    def suggest_keyword_corrections(invalid_word: str) -> List[str]:
        """Suggest corrections for misspelled keywords using edit distance."""
        suggestions = []
        for keyword in KEYWORDS.keys():
            distance = ErrorRecovery._edit_distance(invalid_word.lower(), keyword)
            if distance <= 2:  # Allow up to 2 character differences
                suggestions.append(keyword)

        return sorted(suggestions, key=lambda k: ErrorRecovery._edit_distance(invalid_word.lower(), k))[:3]

    @staticmethod
    def suggest_character_alternatives(char: str) -> List[str]:
        """Suggest supported operators for characters the language lacks."""
        alternatives = {
            '!': ['!='],
            '&': ['*'],
            '|': ['+'],
            '[': ['('],
            ']': [')'],
            "'": ['"'],
        }

        return alternatives.get(char, [])

    @staticmethod
    def _edit_distance(s1: str, s2: str) -> int:
        """Calculate Levenshtein distance between two strings."""
        if len(s1) < len(s2):
            return ErrorRecovery._edit_distance(s2, s1)

        if len(s2) == 0:
            return len(s1)

        previous_row = list(range(len(s2) + 1))
        for i, c1 in enumerate(s1):
            current_row = [i + 1]
            for j, c2 in enumerate(s2):
                insertions = previous_row[j + 1] + 1
                deletions = current_row[j] + 1
                substitutions = previous_row[j] + (c1 != c2)
                current_row.append(min(insertions, deletions, substitutions))
            previous_row = current_row

        return previous_row[-1]


# Common error codes for categorization
ERROR_CODES = {
    "L001": "Invalid character",
    "L002": "Unterminated string literal",
    "L003": "Integer literal out of range",
    "L004": "Unterminated block comment",
    "L005": "Invalid escape sequence",
}


def create_invalid_character_error(char: str, location: SourceLocation) -> LexError:
    """Create an error for an invalid character."""
    suggestions = ErrorRecovery.suggest_character_alternatives(char)

    if suggestions:
        help_text = f"Did you mean {' or '.join(repr(s) for s in suggestions)}?"
    elif char.isprintable():
        help_text = f"The character '{char}' is not valid in source code."
    else:
        help_text = f"Non-printable character (Unicode: U+{ord(char):04X}) is not allowed."

    display = char if char.isprintable() else f"U+{ord(char):04X}"
    return LexError(
        message=f"Invalid character '{display}'",
        location=location,
        code="L001",
        help_text=help_text,
    )


def create_unterminated_string_error(location: SourceLocation) -> LexError:
    """Create an error for an unterminated string literal."""
    return LexError(
        message="Unterminated string literal",
        location=location,
        code="L002",
        help_text='String literals must be closed with a matching " on the same line.',
    )


def create_integer_overflow_error(lexeme: str, location: SourceLocation) -> LexError:
    """Create an error for an integer literal that does not fit in 64 bits."""
    return LexError(
        message=f"Integer literal '{lexeme}' is out of range",
        location=location,
        code="L003",
        help_text="Integer literals must fit in a signed 64-bit value.",
    )


def create_unterminated_comment_error(location: SourceLocation) -> LexError:
    """Create an error for a block comment that never closes."""
    return LexError(
        message="Unterminated block comment",
        location=location,
        code="L004",
        help_text="Close the comment with '*/'.",
    )


def create_invalid_escape_error(sequence: str, location: SourceLocation) -> LexError:
    """Create an error for an unknown escape sequence inside a string."""
    return LexError(
        message=f"Invalid escape sequence '{sequence}'",
        location=location,
        code="L005",
        help_text='Supported escapes are \\n, \\t, \\\\ and \\".',
    )
