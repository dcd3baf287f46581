"""
watc Recursive Descent Parser

Single-token lookahead over the lexer's token list. Tokens are consumed only
when they match; a mismatch raises ParseError located at the current
(unconsumed) token and naming what was expected.

By default the first error aborts the parse. ``parse_with_recovery`` instead
collects errors in encounter order and resynchronizes at statement
boundaries.

Author: watc developers
"""

import logging
from typing import List, Optional, Tuple

from ..lexer.tokens import Token, TokenType
from ..lexer.lexer import tokenize_string
from ..diagnostics.errors import ParseError
from .ast_nodes import (
    SourceSpan, Program, FunctionDef, Parameter, TypeRef, Statement,
    LetStatement, ReturnStatement, ExpressionStatement, Expression,
    NumberLiteral, StringLiteral, Identifier, BinaryOp, FunctionCall,
)
from .errors import (
    SyntaxErrorRecovery, create_unexpected_token_error,
    create_invalid_expression_error,
)

logger = logging.getLogger(__name__)

COMPARISON_OPERATORS = {
    TokenType.EQUAL, TokenType.NOT_EQUAL, TokenType.LESS_THAN,
    TokenType.GREATER_THAN, TokenType.LESS_EQUAL, TokenType.GREATER_EQUAL,
}
ADDITIVE_OPERATORS = {TokenType.PLUS, TokenType.MINUS}
MULTIPLICATIVE_OPERATORS = {TokenType.MULTIPLY, TokenType.DIVIDE, TokenType.MODULO}
EXPRESSION_STARTS = {
    TokenType.INTEGER, TokenType.STRING, TokenType.IDENTIFIER, TokenType.LEFT_PAREN,
}

# Parenthesis/call nesting limit; keeps deeply nested input a ParseError
# instead of exhausting the interpreter stack.
MAX_NESTING_DEPTH = 100


class Parser:
    """
    Recursive descent parser.

    Grammar:
        program    := { function }
        function   := 'fn' IDENT '(' [params] ')' ['->' type] block
        block      := '{' { statement [';'] } '}'
        statement  := let-stmt | return-stmt | expr-stmt
        let-stmt   := 'let' IDENT [':' type] '=' expr
        return-stmt:= 'return' [expr]
        expr       := additive [ compare-op additive ]
        additive   := term { ('+'|'-') term }
        term       := factor { ('*'|'/'|'%') factor }
        factor     := NUMBER | STRING | IDENT | '(' expr ')' | IDENT '(' [args] ')'
    """

    def __init__(self, tokens: List[Token]):
        """
        Initialize parser with a list of tokens.

        Args:
            tokens: EOF-terminated list of tokens from the lexer
        """
        if not tokens or tokens[-1].type != TokenType.EOF:
            raise ValueError("token stream must end with an EOF token")

        self.tokens = tokens
        self.current = 0
        self.errors: List[ParseError] = []
        self.recover = False
        self._depth = 0

    def parse(self) -> Program:
        """
        Parse the token stream into an AST.

        Returns:
            Program AST node representing the entire compilation unit

        Raises:
            ParseError: On the first syntax error
        """
        self.current = 0
        self.errors = []
        self._depth = 0
        functions = []

        while not self._is_at_end():
            try:
                functions.append(self._parse_function())
            except ParseError as e:
                if not self.recover:
                    raise
                self._record(e)
                self.current = SyntaxErrorRecovery.synchronize_to_item_boundary(
                    self.tokens, self.current
                )

        span = SourceSpan(self.tokens[0].location, self.tokens[-1].location)
        logger.debug("parsed %d functions", len(functions))
        return Program(functions, span)

    def parse_with_recovery(self) -> Tuple[Program, List[ParseError]]:
        """
        Parse the whole stream, collecting every syntax error.

        Returns:
            (program, errors) with errors in encounter order. The program
            holds whatever could be parsed and is only meaningful when
            errors is empty.
        """
        self.recover = True
        try:
            program = self.parse()
        finally:
            self.recover = False
        return program, list(self.errors)

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def _parse_function(self) -> FunctionDef:
        """Parse a function definition."""
        start_token = self._peek()
        if not self._match(TokenType.FN):
            raise create_unexpected_token_error(
                "function definition ('fn')", start_token,
                SyntaxErrorRecovery.suggest_keyword(start_token)
                or "Only function definitions may appear at the top level.",
            )

        name_token = self._consume(
            TokenType.IDENTIFIER, "function name",
            "Function names must be valid identifiers",
        )

        self._consume(TokenType.LEFT_PAREN, "'(' after function name")
        params = self._parse_parameter_list()
        self._consume(TokenType.RIGHT_PAREN, "')' after parameters")

        return_type = None
        if self._match(TokenType.ARROW):
            return_type = self._parse_type_reference()

        body = self._parse_block()

        span = SourceSpan(start_token.location, self._previous().location)
        return FunctionDef(name_token.lexeme, params, return_type, body, span)

    def _parse_parameter_list(self) -> List[Parameter]:
        params = []
        if self._check(TokenType.RIGHT_PAREN):
            return params

        while True:
            name_token = self._consume(TokenType.IDENTIFIER, "parameter name")
            type_annotation = None
            if self._match(TokenType.COLON):
                type_annotation = self._parse_type_reference()
            params.append(Parameter(name_token.lexeme, type_annotation))

            if not self._match(TokenType.COMMA):
                break

        return params

    def _parse_type_reference(self) -> TypeRef:
        token = self._consume(TokenType.IDENTIFIER, "type name", "Types are written as names, e.g. 'int'")
        return TypeRef(token.lexeme, SourceSpan(token.location, token.location))

    def _parse_block(self) -> List[Statement]:
        """Parse '{' statements '}' into an ordered statement list."""
        self._consume(
            TokenType.LEFT_BRACE, "'{' to start the function body",
            SyntaxErrorRecovery.suggest_missing_token(TokenType.LEFT_BRACE),
        )

        statements = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            start = self.current
            try:
                statements.append(self._parse_statement())
                self._match(TokenType.SEMICOLON)
            except ParseError as e:
                if not self.recover:
                    raise
                self._record(e)
                self.current = SyntaxErrorRecovery.synchronize_to_statement_boundary(
                    self.tokens, self.current
                )
                if self._check(TokenType.FN):
                    break
                if self.current == start:
                    self._advance()

        self._consume(
            TokenType.RIGHT_BRACE, "'}' to close the function body",
            SyntaxErrorRecovery.suggest_missing_token(TokenType.RIGHT_BRACE),
        )
        return statements

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _parse_statement(self) -> Statement:
        if self._check(TokenType.LET):
            return self._parse_let_statement()
        if self._check(TokenType.RETURN):
            return self._parse_return_statement()

        start_token = self._peek()
        expr = self._parse_expression()
        return ExpressionStatement(expr, SourceSpan(start_token.location, self._previous().location))

    def _parse_let_statement(self) -> LetStatement:
        start_token = self._advance()

        name_token = self._consume(TokenType.IDENTIFIER, "variable name after 'let'")

        type_annotation = None
        if self._match(TokenType.COLON):
            type_annotation = self._parse_type_reference()

        self._consume(
            TokenType.ASSIGN, "'=' after variable name",
            SyntaxErrorRecovery.suggest_missing_token(TokenType.ASSIGN),
        )
        initializer = self._parse_expression()

        span = SourceSpan(start_token.location, self._previous().location)
        return LetStatement(name_token.lexeme, type_annotation, initializer, span)

    def _parse_return_statement(self) -> ReturnStatement:
        start_token = self._advance()

        value = None
        if self._peek().type in EXPRESSION_STARTS:
            value = self._parse_expression()

        return ReturnStatement(value, SourceSpan(start_token.location, self._previous().location))

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _parse_expression(self) -> Expression:
        self._depth += 1
        try:
            if self._depth > MAX_NESTING_DEPTH:
                raise ParseError(
                    f"Expression nested more than {MAX_NESTING_DEPTH} levels deep",
                    self._peek().location,
                    token=self._peek(),
                    code="P011",
                    help_text="Split the expression using let bindings.",
                )

            left = self._parse_additive()
            if self._peek().type in COMPARISON_OPERATORS:
                operator = self._advance().lexeme
                right = self._parse_additive()
                left = BinaryOp(operator, left, right, SourceSpan(left.span.start, right.span.end))
            return left
        finally:
            self._depth -= 1

    def _parse_additive(self) -> Expression:
        left = self._parse_term()
        while self._peek().type in ADDITIVE_OPERATORS:
            operator = self._advance().lexeme
            right = self._parse_term()
            left = BinaryOp(operator, left, right, SourceSpan(left.span.start, right.span.end))
        return left

    def _parse_term(self) -> Expression:
        left = self._parse_factor()
        while self._peek().type in MULTIPLICATIVE_OPERATORS:
            operator = self._advance().lexeme
            right = self._parse_factor()
            left = BinaryOp(operator, left, right, SourceSpan(left.span.start, right.span.end))
        return left

    def _parse_factor(self) -> Expression:
        token = self._peek()
        span = SourceSpan(token.location, token.location)

        if self._match(TokenType.INTEGER):
            return NumberLiteral(token.value, span)

        if self._match(TokenType.STRING):
            return StringLiteral(token.value, span)

        if self._match(TokenType.IDENTIFIER):
            if self._check(TokenType.LEFT_PAREN):
                return self._parse_function_call(token)
            return Identifier(token.lexeme, span)

        if self._match(TokenType.LEFT_PAREN):
            expr = self._parse_expression()
            self._consume(
                TokenType.RIGHT_PAREN, "')' to close the parenthesized expression",
                SyntaxErrorRecovery.suggest_missing_token(TokenType.RIGHT_PAREN),
            )
            return expr

        raise create_invalid_expression_error(token)

    def _parse_function_call(self, name_token: Token) -> FunctionCall:
        self._advance()  # '('
        args = []
        if not self._check(TokenType.RIGHT_PAREN):
            while True:
                args.append(self._parse_expression())
                if not self._match(TokenType.COMMA):
                    break

        self._consume(
            TokenType.RIGHT_PAREN, "')' after call arguments",
            SyntaxErrorRecovery.suggest_missing_token(TokenType.RIGHT_PAREN),
        )
        span = SourceSpan(name_token.location, self._previous().location)
        return FunctionCall(name_token.lexeme, args, span)

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    def _match(self, token_type: TokenType) -> bool:
        """Consume the current token if it has the given type."""
        if self._check(token_type):
            self._advance()
            return True
        return False

    def _check(self, token_type: TokenType) -> bool:
        return self._peek().type == token_type

    def _advance(self) -> Token:
        """Consume the current token. Never moves past EOF."""
        token = self._peek()
        if not self._is_at_end():
            self.current += 1
        return token

    def _is_at_end(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _peek(self) -> Token:
        return self.tokens[self.current]

    def _previous(self) -> Token:
        return self.tokens[self.current - 1] if self.current > 0 else self.tokens[0]

    def _consume(self, token_type: TokenType, expected: str,
                 help_text: Optional[str] = None) -> Token:
        """Consume token of expected type or raise error."""
        if self._check(token_type):
            return self._advance()
        raise create_unexpected_token_error(expected, self._peek(), help_text)

    def _record(self, error: ParseError):
        logger.debug("recovering from syntax error: %s", error.message)
        self.errors.append(error)


def parse_string(source: str, filename: str = "<string>") -> Program:
    """
    Convenience function to lex and parse a source string.

    Raises:
        LexError: On the first lexical error
        ParseError: On the first syntax error
    """
    tokens = tokenize_string(source, filename)
    return Parser(tokens).parse()


def parse_file(filepath: str) -> Program:
    """Convenience function to parse a source file."""
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read()

    return parse_string(source, filepath)
