"""
Abstract Syntax Tree node definitions for watc.

Each node records its source span so later stages can point diagnostics back
at the source. Type annotations are stored verbatim; nothing checks them.

Author: watc developers
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ..lexer.tokens import SourceLocation


class ASTNodeType(Enum):
    """Enumeration of all AST node types."""

    # Top-level
    PROGRAM = "Program"
    FUNCTION_DEF = "FunctionDef"

    # Statements
    LET_STATEMENT = "LetStatement"
    RETURN_STATEMENT = "ReturnStatement"
    EXPRESSION_STMT = "ExpressionStatement"

    # Expressions
    NUMBER_LITERAL = "NumberLiteral"
    STRING_LITERAL = "StringLiteral"
    IDENTIFIER = "Identifier"
    BINARY_OP = "BinaryOp"
    FUNCTION_CALL = "FunctionCall"

    # Types
    TYPE_REF = "TypeRef"


@dataclass
class SourceSpan:
    """Represents a span of source code (start and end locations)."""
    start: SourceLocation
    end: SourceLocation

    def __str__(self) -> str:
        if self.start.filename == self.end.filename:
            return f"{self.start.filename}:{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"
        return f"{self.start}-{self.end}"


class ASTNode(ABC):
    """Base class for all AST nodes."""

    def __init__(self, node_type: ASTNodeType, span: SourceSpan):
        self.node_type = node_type
        self.span = span

    @abstractmethod
    def children(self) -> List['ASTNode']:
        """Get all child nodes."""
        pass

    def walk(self):
        """Yield this node and every descendant, depth-first, left to right."""
        yield self
        for child in self.children():
            yield from child.walk()

    def __str__(self) -> str:
        return f"{self.node_type.value}@{self.span}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(span={self.span})"


# ============================================================================
# Types
# ============================================================================

class TypeRef(ASTNode):
    """A named type annotation such as ``int``."""

    def __init__(self, name: str, span: SourceSpan):
        super().__init__(ASTNodeType.TYPE_REF, span)
        self.name = name

    def children(self) -> List[ASTNode]:
        return []

    def __repr__(self) -> str:
        return f"TypeRef({self.name!r})"


# ============================================================================
# Expressions
# ============================================================================

class Expression(ASTNode):
    """Base class for expressions."""
    pass


class NumberLiteral(Expression):
    """Integer literal."""

    def __init__(self, value: int, span: SourceSpan):
        super().__init__(ASTNodeType.NUMBER_LITERAL, span)
        self.value = value

    def children(self) -> List[ASTNode]:
        return []

    def __repr__(self) -> str:
        return f"NumberLiteral({self.value})"


class StringLiteral(Expression):
    """String literal."""

    def __init__(self, value: str, span: SourceSpan):
        super().__init__(ASTNodeType.STRING_LITERAL, span)
        self.value = value

    def children(self) -> List[ASTNode]:
        return []

    def __repr__(self) -> str:
        return f"StringLiteral({self.value!r})"


class Identifier(Expression):
    """Reference to a parameter or let-bound name."""

    def __init__(self, name: str, span: SourceSpan):
        super().__init__(ASTNodeType.IDENTIFIER, span)
        self.name = name

    def children(self) -> List[ASTNode]:
        return []

    def __repr__(self) -> str:
        return f"Identifier({self.name!r})"


class BinaryOp(Expression):
    """Binary operation: arithmetic (+ - * / %) or comparison."""

    def __init__(self, operator: str, left: Expression, right: Expression, span: SourceSpan):
        super().__init__(ASTNodeType.BINARY_OP, span)
        self.operator = operator
        self.left = left
        self.right = right

    def children(self) -> List[ASTNode]:
        return [self.left, self.right]

    def __repr__(self) -> str:
        return f"BinaryOp({self.operator!r}, {self.left!r}, {self.right!r})"


class FunctionCall(Expression):
    """Call of a named function."""

    def __init__(self, name: str, args: List[Expression], span: SourceSpan):
        super().__init__(ASTNodeType.FUNCTION_CALL, span)
        self.name = name
        self.args = args

    def children(self) -> List[ASTNode]:
        return list(self.args)

    def __repr__(self) -> str:
        return f"FunctionCall({self.name!r}, {self.args!r})"


# ============================================================================
# Statements
# ============================================================================

class Statement(ASTNode):
    """Base class for statements."""
    pass


class LetStatement(Statement):
    """``let name[: type] = initializer``"""

    def __init__(self, name: str, type_annotation: Optional[TypeRef],
                 initializer: Expression, span: SourceSpan):
        super().__init__(ASTNodeType.LET_STATEMENT, span)
        self.name = name
        self.type_annotation = type_annotation
        self.initializer = initializer

    def children(self) -> List[ASTNode]:
        children: List[ASTNode] = []
        if self.type_annotation:
            children.append(self.type_annotation)
        children.append(self.initializer)
        return children

    def __repr__(self) -> str:
        return f"LetStatement({self.name!r}, {self.type_annotation!r}, {self.initializer!r})"


class ReturnStatement(Statement):
    """``return [value]``"""

    def __init__(self, value: Optional[Expression], span: SourceSpan):
        super().__init__(ASTNodeType.RETURN_STATEMENT, span)
        self.value = value

    def children(self) -> List[ASTNode]:
        return [self.value] if self.value else []

    def __repr__(self) -> str:
        return f"ReturnStatement({self.value!r})"


class ExpressionStatement(Statement):
    """An expression evaluated for its side effects."""

    def __init__(self, expression: Expression, span: SourceSpan):
        super().__init__(ASTNodeType.EXPRESSION_STMT, span)
        self.expression = expression

    def children(self) -> List[ASTNode]:
        return [self.expression]

    def __repr__(self) -> str:
        return f"ExpressionStatement({self.expression!r})"


# ============================================================================
# Top-level nodes
# ============================================================================

@dataclass
class Parameter:
    """Function parameter."""
    name: str
    type_annotation: Optional[TypeRef]


class FunctionDef(Statement):
    """Function definition."""

    def __init__(self, name: str, params: List[Parameter], return_type: Optional[TypeRef],
                 body: List[Statement], span: SourceSpan):
        super().__init__(ASTNodeType.FUNCTION_DEF, span)
        self.name = name
        self.params = params
        self.return_type = return_type
        self.body = body

    def children(self) -> List[ASTNode]:
        children: List[ASTNode] = [p.type_annotation for p in self.params if p.type_annotation]
        if self.return_type:
            children.append(self.return_type)
        children.extend(self.body)
        return children

    def __repr__(self) -> str:
        return f"FunctionDef({self.name!r}, params={[p.name for p in self.params]!r}, body={self.body!r})"


class Program(ASTNode):
    """Root AST node representing a complete compilation unit."""

    def __init__(self, functions: List[FunctionDef], span: SourceSpan):
        super().__init__(ASTNodeType.PROGRAM, span)
        self.functions = functions

    def children(self) -> List[ASTNode]:
        return list(self.functions)

    def __repr__(self) -> str:
        return f"Program({self.functions!r})"


def dump_ast(node: ASTNode, indent: int = 0) -> str:
    """Render an indented outline of the tree (used by ``watc --emit ast``)."""
    pad = "  " * indent
    if isinstance(node, Program):
        head = "Program"
    elif isinstance(node, FunctionDef):
        params = ", ".join(
            f"{p.name}: {p.type_annotation.name}" if p.type_annotation else p.name
            for p in node.params
        )
        ret = f" -> {node.return_type.name}" if node.return_type else ""
        head = f"FunctionDef {node.name}({params}){ret}"
    elif isinstance(node, LetStatement):
        ann = f": {node.type_annotation.name}" if node.type_annotation else ""
        head = f"Let {node.name}{ann}"
    elif isinstance(node, ReturnStatement):
        head = "Return"
    elif isinstance(node, ExpressionStatement):
        head = "ExprStmt"
    elif isinstance(node, BinaryOp):
        head = f"BinaryOp {node.operator}"
    elif isinstance(node, FunctionCall):
        head = f"Call {node.name}"
    elif isinstance(node, NumberLiteral):
        head = f"Number {node.value}"
    elif isinstance(node, StringLiteral):
        head = f"String {node.value!r}"
    elif isinstance(node, Identifier):
        head = f"Identifier {node.name}"
    else:
        # Type annotations are folded into their owners above
        return ""

    lines = [pad + head]
    for child in node.children():
        rendered = dump_ast(child, indent + 1)
        if rendered:
            lines.append(rendered)
    return "\n".join(lines)
