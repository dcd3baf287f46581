"""
watc Lexer - turns source text into tokens

Hand-written scanner. Position state (pos/line/column) lives on the Lexer
instance and is reset by every call to tokenize(), so re-lexing always
starts from scratch.
"""

import logging
from typing import List

from .tokens import (
    Token, TokenType, SourceLocation, KEYWORDS, OPERATORS, MAX_OPERATOR_LENGTH,
    INT64_MAX,
)
from .errors import (
    create_invalid_character_error, create_unterminated_string_error,
    create_integer_overflow_error, create_unterminated_comment_error,
    create_invalid_escape_error,
)
from ..diagnostics.errors import LexError

logger = logging.getLogger(__name__)

ESCAPES = {
    'n': '\n',
    't': '\t',
    '\\': '\\',
    '"': '"',
}


class Lexer:
    """
    Lexical analyzer.

    Converts source code text into a finite, EOF-terminated list of tokens.
    Errors are collected with their positions; the scanner skips past the
    offending input and keeps going so every lexical error can be reported.
    """

    def __init__(self, source: str, filename: str = "<unknown>"):
        """
        Initialize the lexer with source code.

        Args:
            source: Source code string
            filename: Name of source file for error reporting
        """
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []
        self.errors: List[LexError] = []

    def tokenize(self) -> List[Token]:
        """
        Tokenize the entire source code.

        Returns:
            List of tokens including EOF token
        """
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens = []
        self.errors = []

        while self.pos < len(self.source):
            try:
                self._skip_whitespace_and_comments()

                if self.pos >= len(self.source):
                    break

                self.tokens.append(self._next_token())

            except LexError as e:
                self.errors.append(e)

        self.tokens.append(Token(TokenType.EOF, "", None, self._location()))

        logger.debug("lexed %d tokens from %s (%d errors)",
                     len(self.tokens), self.filename, len(self.errors))
        return self.tokens

    def _next_token(self) -> Token:
        """Scan one token starting at the current position."""
        location = self._location()
        current_char = self.source[self.pos]

        if self._is_digit(current_char):
            return self._tokenize_integer(location)

        if self._is_identifier_start(current_char):
            return self._tokenize_identifier_or_keyword(location)

        if current_char == '"':
            return self._tokenize_string(location)

        # Operators and punctuation (longest match first)
        for op_len in range(MAX_OPERATOR_LENGTH, 0, -1):
            potential_op = self.source[self.pos:self.pos + op_len]
            if len(potential_op) == op_len and potential_op in OPERATORS:
                self._advance_by(op_len)
                return Token(OPERATORS[potential_op], potential_op, None, location)

        # Skip the bad character so scanning can resume after it
        self._advance()
        raise create_invalid_character_error(current_char, location)

    def _tokenize_integer(self, location: SourceLocation) -> Token:
        """Tokenize a decimal integer literal."""
        start = self.pos
        while self.pos < len(self.source) and self._is_digit(self.source[self.pos]):
            self._advance()

        lexeme = self.source[start:self.pos]
        value = int(lexeme)
        if value > INT64_MAX:
            raise create_integer_overflow_error(lexeme, location)

        return Token(TokenType.INTEGER, lexeme, value, location)

    def _tokenize_identifier_or_keyword(self, location: SourceLocation) -> Token:
        """Tokenize an identifier, or a keyword if the word is reserved."""
        start = self.pos
        while self.pos < len(self.source) and self._is_identifier_continue(self.source[self.pos]):
            self._advance()

        lexeme = self.source[start:self.pos]
        token_type = KEYWORDS.get(lexeme, TokenType.IDENTIFIER)
        return Token(token_type, lexeme, None, location)

    def _tokenize_string(self, location: SourceLocation) -> Token:
        """Tokenize a double-quoted string literal."""
        start = self.pos
        self._advance()  # opening quote
        chars = []

        while self.pos < len(self.source):
            char = self.source[self.pos]

            if char == '"':
                self._advance()
                return Token(TokenType.STRING, self.source[start:self.pos], "".join(chars), location)

            if char == '\n':
                break

            if char == '\\':
                escape_location = self._location()
                self._advance()
                if self.pos >= len(self.source) or self.source[self.pos] == '\n':
                    break
                escaped = self.source[self.pos]
                if escaped not in ESCAPES:
                    # Record and keep scanning the literal after the bad escape
                    self.errors.append(create_invalid_escape_error('\\' + escaped, escape_location))
                    self._advance()
                    continue
                chars.append(ESCAPES[escaped])
                self._advance()
                continue

            chars.append(char)
            self._advance()

        raise create_unterminated_string_error(location)

    def _is_digit(self, char: str) -> bool:
        return char.isascii() and char.isdigit()

    def _is_identifier_start(self, char: str) -> bool:
        return char == '_' or (char.isascii() and char.isalpha())

    def _is_identifier_continue(self, char: str) -> bool:
        return char == '_' or (char.isascii() and char.isalnum())

    def _skip_whitespace_and_comments(self):
        """Skip whitespace and comments."""
        while self.pos < len(self.source):
            if self.source[self.pos].isspace():
                self._advance()
                continue

            # Line comments //
            if self.source.startswith('//', self.pos):
                self._skip_to_end_of_line()
                continue

            # Block comments /* */
            if self.source.startswith('/*', self.pos):
                location = self._location()
                self._advance_by(2)
                while self.pos < len(self.source) and not self.source.startswith('*/', self.pos):
                    self._advance()
                if self.pos >= len(self.source):
                    raise create_unterminated_comment_error(location)
                self._advance_by(2)
                continue

            break

    def _skip_to_end_of_line(self):
        while self.pos < len(self.source) and self.source[self.pos] != '\n':
            self._advance()

    def _location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line, self.column, self.pos)

    def _advance(self):
        """Advance position by one character, updating line/column."""
        if self.pos < len(self.source):
            if self.source[self.pos] == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def _advance_by(self, count: int):
        """Advance position by multiple characters."""
        for _ in range(count):
            self._advance()

    def has_errors(self) -> bool:
        """Check if lexer encountered any errors."""
        return len(self.errors) > 0


def tokenize_string(source: str, filename: str = "<string>") -> List[Token]:
    """
    Convenience function to tokenize a source string.

    Raises:
        LexError: The first lexical error, if any
    """
    lexer = Lexer(source, filename)
    tokens = lexer.tokenize()

    if lexer.has_errors():
        raise lexer.errors[0]

    return tokens


def tokenize_file(filepath: str) -> List[Token]:
    """
    Convenience function to tokenize a source file.

    Raises:
        LexError: If lexing fails
        OSError: If file cannot be read
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read()

    return tokenize_string(source, filepath)
