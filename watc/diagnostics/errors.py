"""
Compile error types shared by every compiler stage.

Each error wraps an immutable Diagnostic record. The only change allowed
after construction is attaching help text through ``with_help``.

Author: watc developers
"""

from dataclasses import dataclass, replace
from typing import Optional

from ..lexer.tokens import SourceLocation


@dataclass(frozen=True)
class Diagnostic:
    """A single diagnostic (error or warning) with its location."""
    message: str
    location: Optional[SourceLocation]
    severity: str = "error"  # "error", "warning"
    code: Optional[str] = None
    help_text: Optional[str] = None
    function: Optional[str] = None  # owning function when no source position exists

    def render(self) -> str:
        """Render the diagnostic block shown to users."""
        header = self.severity.capitalize()
        if self.code:
            header += f"[{self.code}]"
        lines = [f"{header}: {self.message}"]

        if self.location is not None:
            lines.append(f" → line {self.location.line}, column {self.location.column}")
        elif self.function is not None:
            lines.append(f" → in function '{self.function}'")

        if self.help_text:
            lines.append(f" Help: {self.help_text}")

        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()


class CompileError(Exception):
    """
    Base class for every error the pipeline reports to users.

    Contains detailed diagnostic information for error reporting.
    """

    kind = "compile"

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        function: Optional[str] = None,
    ):
        super().__init__(message)
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="error",
            code=code,
            help_text=help_text,
            function=function,
        )

    def with_help(self, text: str) -> "CompileError":
        """Attach help text and return the same error (builder style)."""
        self.diagnostic = replace(self.diagnostic, help_text=text)
        return self

    @property
    def message(self) -> str:
        return self.diagnostic.message

    @property
    def location(self) -> Optional[SourceLocation]:
        return self.diagnostic.location

    @property
    def line(self) -> Optional[int]:
        return self.location.line if self.location else None

    @property
    def column(self) -> Optional[int]:
        return self.location.column if self.location else None

    @property
    def help_text(self) -> Optional[str]:
        return self.diagnostic.help_text

    @property
    def code(self) -> Optional[str]:
        return self.diagnostic.code

    @property
    def function(self) -> Optional[str]:
        return self.diagnostic.function

    def __str__(self) -> str:
        return str(self.diagnostic)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, {self.location!r})"


class LexError(CompileError):
    """Invalid character or unterminated literal."""
    kind = "lexical"


class ParseError(CompileError):
    """Unexpected or missing token construct."""
    kind = "syntax"

    def __init__(self, message: str, location: Optional[SourceLocation] = None,
                 token=None, **kwargs):
        super().__init__(message, location, **kwargs)
        self.token = token


class LoweringError(CompileError):
    """AST could not be lowered (duplicate function or undefined variable)."""
    kind = "lowering"


class FoldError(CompileError):
    """Division by zero found while folding constants."""
    kind = "optimization"


class CodegenError(CompileError):
    """IR instruction with no WebAssembly text mapping."""
    kind = "codegen"
