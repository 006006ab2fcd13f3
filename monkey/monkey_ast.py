"""
Defines the abstract syntax tree produced by the parser.

Nodes are frozen dataclasses: once parsed, a tree is never mutated. Each
node remembers the token that started it so diagnostics can point back into
the source, but tokens are excluded from equality, so two parses of
equivalent text compare equal.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from monkey.monkey_lexer import Token


class Node:
    """Base class for all AST nodes."""

    @property
    def loc(self) -> Optional[dict]:
        tok = getattr(self, "token", None)
        if tok is None:
            return None
        return {"line": tok.line, "col": tok.col}

    def __str__(self) -> str:
        from monkey.monkey_printer import Printer
        return Printer().pformat(self)


class Expression(Node):
    pass


class Statement(Node):
    pass


def _tok():
    return field(default=None, compare=False, repr=False)


# =================================================================
# Expressions
# =================================================================

@dataclass(frozen=True)
class Identifier(Expression):
    value: str
    token: Optional[Token] = _tok()


@dataclass(frozen=True)
class IntegerLiteral(Expression):
    value: int
    token: Optional[Token] = _tok()


@dataclass(frozen=True)
class BooleanLiteral(Expression):
    value: bool
    token: Optional[Token] = _tok()


@dataclass(frozen=True)
class StringLiteral(Expression):
    value: str
    token: Optional[Token] = _tok()


@dataclass(frozen=True)
class PrefixExpression(Expression):
    operator: str
    right: Expression
    token: Optional[Token] = _tok()


@dataclass(frozen=True)
class InfixExpression(Expression):
    left: Expression
    operator: str
    right: Expression
    token: Optional[Token] = _tok()


@dataclass(frozen=True)
class IfExpression(Expression):
    condition: Expression
    consequence: "BlockStatement"
    alternative: Optional["BlockStatement"] = None
    token: Optional[Token] = _tok()


@dataclass(frozen=True)
class FunctionLiteral(Expression):
    parameters: Tuple[Identifier, ...]
    body: "BlockStatement"
    token: Optional[Token] = _tok()


@dataclass(frozen=True)
class CallExpression(Expression):
    function: Expression
    arguments: Tuple[Expression, ...]
    token: Optional[Token] = _tok()


@dataclass(frozen=True)
class ArrayLiteral(Expression):
    elements: Tuple[Expression, ...]
    token: Optional[Token] = _tok()


@dataclass(frozen=True)
class IndexExpression(Expression):
    left: Expression
    index: Expression
    token: Optional[Token] = _tok()


@dataclass(frozen=True)
class HashLiteral(Expression):
    # Source order is kept so the literal renders the way it was written.
    pairs: Tuple[Tuple[Expression, Expression], ...]
    token: Optional[Token] = _tok()


# =================================================================
# Statements
# =================================================================

@dataclass(frozen=True)
class LetStatement(Statement):
    name: Identifier
    value: Expression
    token: Optional[Token] = _tok()


@dataclass(frozen=True)
class ReturnStatement(Statement):
    return_value: Expression
    token: Optional[Token] = _tok()


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    expression: Expression
    token: Optional[Token] = _tok()


@dataclass(frozen=True)
class BlockStatement(Statement):
    statements: Tuple[Statement, ...]
    token: Optional[Token] = _tok()


@dataclass(frozen=True)
class Program(Node):
    statements: Tuple[Statement, ...]
