"""
Pratt (operator-precedence) parser for Monkey.

Every token type that can begin an expression registers a prefix rule, and
every binary or postfix-like operator registers an infix rule together with
an entry in the static OPERATORS table. Errors are collected on the parser
instead of being raised, so a single pass can report several of them.
"""

from enum import Enum, IntEnum
from typing import Callable, Dict, List, Optional, Tuple

from monkey.monkey_lexer import Lexer, Token, TokenType
from monkey.monkey_ast import (
    Program, Statement, Expression,
    LetStatement, ReturnStatement, ExpressionStatement, BlockStatement,
    Identifier, IntegerLiteral, BooleanLiteral, StringLiteral,
    PrefixExpression, InfixExpression, IfExpression, FunctionLiteral,
    CallExpression, ArrayLiteral, IndexExpression, HashLiteral,
)


class Precedence(IntEnum):
    LOWEST = 1
    EQUALS = 2       # == !=
    LESSGREATER = 3  # < >
    SUM = 4          # + -
    PRODUCT = 5      # * /
    PREFIX = 6       # -x !x +x
    CALL = 7         # f(x)
    INDEX = 8        # a[i]


class Assoc(Enum):
    LEFT = "left"
    RIGHT = "right"


# Binding precedence and associativity of every infix-capable token.
OPERATORS: Dict[TokenType, Tuple[Precedence, Assoc]] = {
    TokenType.EQ: (Precedence.EQUALS, Assoc.LEFT),
    TokenType.NOT_EQ: (Precedence.EQUALS, Assoc.LEFT),
    TokenType.LT: (Precedence.LESSGREATER, Assoc.LEFT),
    TokenType.GT: (Precedence.LESSGREATER, Assoc.LEFT),
    TokenType.PLUS: (Precedence.SUM, Assoc.LEFT),
    TokenType.MINUS: (Precedence.SUM, Assoc.LEFT),
    TokenType.ASTERISK: (Precedence.PRODUCT, Assoc.LEFT),
    TokenType.SLASH: (Precedence.PRODUCT, Assoc.LEFT),
    TokenType.LPAREN: (Precedence.CALL, Assoc.LEFT),
    TokenType.LBRACKET: (Precedence.INDEX, Assoc.LEFT),
}


def precedence_of(token_type: TokenType) -> int:
    entry = OPERATORS.get(token_type)
    return entry[0] if entry else Precedence.LOWEST


def _describe(token: Token) -> str:
    if token.type is TokenType.EOF:
        return "EOF"
    return token.literal


class ParseError:
    """A syntax error tied to the token where it was detected."""

    def __init__(self, message: str, token: Token):
        self.message = message
        self.token = token

    @property
    def line(self) -> int:
        return self.token.line

    @property
    def col(self) -> int:
        return self.token.col

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"ParseError({self.message!r}, line={self.line}, col={self.col})"


class Parser:
    """Builds a Program from a Lexer's token stream."""

    def __init__(self, lexer: Lexer):
        self.lexer = lexer
        self.errors: List[ParseError] = []
        self.cur_token: Token = Token(TokenType.EOF, "")
        self.peek_token: Token = Token(TokenType.EOF, "")

        self.prefix_parse_fns: Dict[TokenType, Callable[[], Optional[Expression]]] = {
            TokenType.IDENT: self._parse_identifier,
            TokenType.INT: self._parse_integer_literal,
            TokenType.STRING: self._parse_string_literal,
            TokenType.TRUE: self._parse_boolean,
            TokenType.FALSE: self._parse_boolean,
            TokenType.BANG: self._parse_prefix_expression,
            TokenType.MINUS: self._parse_prefix_expression,
            TokenType.PLUS: self._parse_prefix_expression,
            TokenType.LPAREN: self._parse_grouped_expression,
            TokenType.IF: self._parse_if_expression,
            TokenType.FUNCTION: self._parse_function_literal,
            TokenType.LBRACKET: self._parse_array_literal,
            TokenType.LBRACE: self._parse_hash_literal,
            TokenType.ILLEGAL: self._parse_illegal,
        }
        self.infix_parse_fns: Dict[TokenType, Callable[[Expression], Optional[Expression]]] = {
            TokenType.PLUS: self._parse_infix_expression,
            TokenType.MINUS: self._parse_infix_expression,
            TokenType.ASTERISK: self._parse_infix_expression,
            TokenType.SLASH: self._parse_infix_expression,
            TokenType.EQ: self._parse_infix_expression,
            TokenType.NOT_EQ: self._parse_infix_expression,
            TokenType.LT: self._parse_infix_expression,
            TokenType.GT: self._parse_infix_expression,
            TokenType.LPAREN: self._parse_call_expression,
            TokenType.LBRACKET: self._parse_index_expression,
        }

        # Fill cur_token and peek_token
        self._next_token()
        self._next_token()

    # --- Token window ---

    def _next_token(self):
        self.cur_token = self.peek_token
        self.peek_token = self.lexer.next_token()

    def _cur_token_is(self, t: TokenType) -> bool:
        return self.cur_token.type is t

    def _peek_token_is(self, t: TokenType) -> bool:
        return self.peek_token.type is t

    def _expect_peek(self, t: TokenType) -> bool:
        if self._peek_token_is(t):
            self._next_token()
            return True
        self._peek_error(t)
        return False

    def _peek_precedence(self) -> int:
        return precedence_of(self.peek_token.type)

    # --- Errors ---

    def _error(self, message: str, token: Token):
        self.errors.append(ParseError(message, token))

    def _peek_error(self, t: TokenType):
        expected = _EXPECT_NAMES.get(t, t.name)
        self._error(
            f"expected next token to be {expected}, got {_describe(self.peek_token)} instead",
            self.peek_token,
        )

    def _synchronize(self):
        """Skips to the end of the current statement after an error."""
        while not self._cur_token_is(TokenType.SEMICOLON) and not self._cur_token_is(TokenType.EOF):
            self._next_token()

    # --- Program and statements ---

    def parse_program(self) -> Program:
        statements: List[Statement] = []
        while not self._cur_token_is(TokenType.EOF):
            stmt = self._parse_statement()
            if stmt is not None:
                statements.append(stmt)
            else:
                self._synchronize()
            self._next_token()
        return Program(tuple(statements))

    def _parse_statement(self) -> Optional[Statement]:
        match self.cur_token.type:
            case TokenType.LET:
                return self._parse_let_statement()
            case TokenType.RETURN:
                return self._parse_return_statement()
            case _:
                return self._parse_expression_statement()

    def _parse_let_statement(self) -> Optional[LetStatement]:
        token = self.cur_token
        if not self._expect_peek(TokenType.IDENT):
            return None
        name = Identifier(self.cur_token.literal, self.cur_token)
        if not self._expect_peek(TokenType.ASSIGN):
            return None
        self._next_token()
        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None
        if self._peek_token_is(TokenType.SEMICOLON):
            self._next_token()
        return LetStatement(name, value, token)

    def _parse_return_statement(self) -> Optional[ReturnStatement]:
        token = self.cur_token
        self._next_token()
        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None
        if self._peek_token_is(TokenType.SEMICOLON):
            self._next_token()
        return ReturnStatement(value, token)

    def _parse_expression_statement(self) -> Optional[ExpressionStatement]:
        token = self.cur_token
        expr = self.parse_expression(Precedence.LOWEST)
        if expr is None:
            return None
        # The terminator is optional
        if self._peek_token_is(TokenType.SEMICOLON):
            self._next_token()
        return ExpressionStatement(expr, token)

    def _parse_block_statement(self) -> Optional[BlockStatement]:
        token = self.cur_token
        statements: List[Statement] = []
        self._next_token()
        while not self._cur_token_is(TokenType.RBRACE):
            if self._cur_token_is(TokenType.EOF):
                self._error("expected next token to be }, got EOF instead", self.cur_token)
                return None
            stmt = self._parse_statement()
            if stmt is None:
                return None
            statements.append(stmt)
            self._next_token()
        return BlockStatement(tuple(statements), token)

    # --- Expressions ---

    def parse_expression(self, precedence: int) -> Optional[Expression]:
        prefix = self.prefix_parse_fns.get(self.cur_token.type)
        if prefix is None:
            self._error(
                f"no prefix parse function for {_describe(self.cur_token)} found",
                self.cur_token,
            )
            return None
        left = prefix()
        if left is None:
            return None

        while not self._peek_token_is(TokenType.SEMICOLON) and precedence < self._peek_precedence():
            infix = self.infix_parse_fns.get(self.peek_token.type)
            if infix is None:
                return left
            self._next_token()
            left = infix(left)
            if left is None:
                return None
        return left

    def _parse_illegal(self) -> None:
        self._error(f"illegal token {self.cur_token.literal}", self.cur_token)
        return None

    def _parse_identifier(self) -> Expression:
        return Identifier(self.cur_token.literal, self.cur_token)

    def _parse_integer_literal(self) -> Expression:
        return IntegerLiteral(int(self.cur_token.literal), self.cur_token)

    def _parse_string_literal(self) -> Expression:
        return StringLiteral(self.cur_token.literal, self.cur_token)

    def _parse_boolean(self) -> Expression:
        return BooleanLiteral(self._cur_token_is(TokenType.TRUE), self.cur_token)

    def _parse_prefix_expression(self) -> Optional[Expression]:
        token = self.cur_token
        self._next_token()
        right = self.parse_expression(Precedence.PREFIX)
        if right is None:
            return None
        return PrefixExpression(token.literal, right, token)

    def _parse_infix_expression(self, left: Expression) -> Optional[Expression]:
        token = self.cur_token
        precedence, assoc = OPERATORS[token.type]
        self._next_token()
        right = self.parse_expression(precedence - 1 if assoc is Assoc.RIGHT else precedence)
        if right is None:
            return None
        return InfixExpression(left, token.literal, right, token)

    def _parse_grouped_expression(self) -> Optional[Expression]:
        self._next_token()
        expr = self.parse_expression(Precedence.LOWEST)
        if expr is None or not self._expect_peek(TokenType.RPAREN):
            return None
        return expr

    def _parse_if_expression(self) -> Optional[Expression]:
        token = self.cur_token
        if not self._expect_peek(TokenType.LPAREN):
            return None
        self._next_token()
        condition = self.parse_expression(Precedence.LOWEST)
        if condition is None:
            return None
        if not self._expect_peek(TokenType.RPAREN):
            return None
        if not self._expect_peek(TokenType.LBRACE):
            return None
        consequence = self._parse_block_statement()
        if consequence is None:
            return None

        alternative = None
        if self._peek_token_is(TokenType.ELSE):
            self._next_token()
            if not self._expect_peek(TokenType.LBRACE):
                return None
            alternative = self._parse_block_statement()
            if alternative is None:
                return None
        return IfExpression(condition, consequence, alternative, token)

    def _parse_function_literal(self) -> Optional[Expression]:
        token = self.cur_token
        if not self._expect_peek(TokenType.LPAREN):
            return None
        parameters = self._parse_function_parameters()
        if parameters is None:
            return None
        if not self._expect_peek(TokenType.LBRACE):
            return None
        body = self._parse_block_statement()
        if body is None:
            return None
        return FunctionLiteral(tuple(parameters), body, token)

    def _parse_function_parameters(self) -> Optional[List[Identifier]]:
        params: List[Identifier] = []
        if self._peek_token_is(TokenType.RPAREN):
            self._next_token()
            return params

        if not self._expect_peek(TokenType.IDENT):
            return None
        params.append(Identifier(self.cur_token.literal, self.cur_token))
        while self._peek_token_is(TokenType.COMMA):
            self._next_token()
            if not self._expect_peek(TokenType.IDENT):
                return None
            params.append(Identifier(self.cur_token.literal, self.cur_token))

        if not self._expect_peek(TokenType.RPAREN):
            return None
        return params

    def _parse_call_expression(self, function: Expression) -> Optional[Expression]:
        token = self.cur_token
        arguments = self._parse_expression_list(TokenType.RPAREN)
        if arguments is None:
            return None
        return CallExpression(function, tuple(arguments), token)

    def _parse_array_literal(self) -> Optional[Expression]:
        token = self.cur_token
        elements = self._parse_expression_list(TokenType.RBRACKET)
        if elements is None:
            return None
        return ArrayLiteral(tuple(elements), token)

    def _parse_expression_list(self, end: TokenType) -> Optional[List[Expression]]:
        items: List[Expression] = []
        if self._peek_token_is(end):
            self._next_token()
            return items

        self._next_token()
        item = self.parse_expression(Precedence.LOWEST)
        if item is None:
            return None
        items.append(item)
        while self._peek_token_is(TokenType.COMMA):
            self._next_token()
            self._next_token()
            item = self.parse_expression(Precedence.LOWEST)
            if item is None:
                return None
            items.append(item)

        if not self._expect_peek(end):
            return None
        return items

    def _parse_index_expression(self, left: Expression) -> Optional[Expression]:
        token = self.cur_token
        self._next_token()
        index = self.parse_expression(Precedence.LOWEST)
        if index is None or not self._expect_peek(TokenType.RBRACKET):
            return None
        return IndexExpression(left, index, token)

    def _parse_hash_literal(self) -> Optional[Expression]:
        token = self.cur_token
        pairs = []
        while not self._peek_token_is(TokenType.RBRACE):
            self._next_token()
            key = self.parse_expression(Precedence.LOWEST)
            if key is None or not self._expect_peek(TokenType.COLON):
                return None
            self._next_token()
            value = self.parse_expression(Precedence.LOWEST)
            if value is None:
                return None
            pairs.append((key, value))
            if not self._peek_token_is(TokenType.RBRACE) and not self._expect_peek(TokenType.COMMA):
                return None

        if not self._expect_peek(TokenType.RBRACE):
            return None
        return HashLiteral(tuple(pairs), token)


# How expected token types are spelled in error messages.
_EXPECT_NAMES = {
    TokenType.IDENT: "IDENT",
    TokenType.ASSIGN: "=",
    TokenType.COMMA: ",",
    TokenType.COLON: ":",
    TokenType.LPAREN: "(",
    TokenType.RPAREN: ")",
    TokenType.LBRACE: "{",
    TokenType.RBRACE: "}",
    TokenType.LBRACKET: "[",
    TokenType.RBRACKET: "]",
}


def parse(source: str) -> Tuple[Program, List[ParseError]]:
    """Parses `source`, returning the program and any errors found."""
    parser = Parser(Lexer(source))
    program = parser.parse_program()
    return program, parser.errors
