"""
A printer for Monkey values and syntax trees.
"""
from monkey import monkey_ast as ast
from monkey.monkey_datatypes import (
    Environment, MonkeyHash, MonkeyFunction, Builtin, ReturnValue, ErrorValue,
)


class Printer:
    """Formats runtime values and AST nodes into their canonical text.

    AST output is fully parenthesized, so it shows exactly how the parser
    grouped operators and parses back to an equivalent tree.
    """

    def __init__(self):
        self._handlers = self._create_handlers()

    def pformat(self, obj) -> str:
        """Public entry point to format an object."""
        handler = self._handlers.get(type(obj))
        if handler is None:
            # Default to Python's repr for unknown types
            return repr(obj)
        return handler(obj)

    def display(self, value) -> str:
        """Like pformat, but strings come out raw. Used for program output."""
        if isinstance(value, str):
            return value
        return self.pformat(value)

    def _create_handlers(self):
        return {
            # Values
            int: self._pformat_primitive,
            bool: self._pformat_bool,
            str: self._pformat_str,
            type(None): self._pformat_none,
            list: self._pformat_array,
            MonkeyHash: self._pformat_hash,
            MonkeyFunction: self._pformat_function,
            Builtin: self._pformat_builtin,
            ReturnValue: self._pformat_return_value,
            ErrorValue: self._pformat_error,
            Environment: repr,
            # Syntax
            ast.Program: self._pformat_program,
            ast.LetStatement: self._pformat_let,
            ast.ReturnStatement: self._pformat_return,
            ast.ExpressionStatement: self._pformat_expression_statement,
            ast.BlockStatement: self._pformat_block,
            ast.Identifier: self._pformat_identifier,
            ast.IntegerLiteral: self._pformat_literal,
            ast.BooleanLiteral: self._pformat_literal,
            ast.StringLiteral: self._pformat_literal,
            ast.PrefixExpression: self._pformat_prefix,
            ast.InfixExpression: self._pformat_infix,
            ast.IfExpression: self._pformat_if,
            ast.FunctionLiteral: self._pformat_function_literal,
            ast.CallExpression: self._pformat_call,
            ast.ArrayLiteral: self._pformat_array_literal,
            ast.IndexExpression: self._pformat_index,
            ast.HashLiteral: self._pformat_hash_literal,
        }

    def _join(self, items) -> str:
        return ", ".join(self.pformat(item) for item in items)

    # --- Values ---

    def _pformat_primitive(self, obj):
        return str(obj)

    def _pformat_bool(self, obj):
        return 'true' if obj else 'false'

    def _pformat_str(self, obj):
        # No escapes: the lexer cannot produce a string holding a quote
        return f'"{obj}"'

    def _pformat_none(self, obj):
        return 'null'

    def _pformat_array(self, obj):
        return f"[{self._join(obj)}]"

    def _pformat_hash(self, obj):
        pairs = ", ".join(f"{self.pformat(k)}: {self.pformat(v)}" for k, v in obj.items())
        return f"{{{pairs}}}"

    def _pformat_function(self, obj):
        params = ", ".join(p.value for p in obj.parameters)
        return f"fn({params}) {{...}}"

    def _pformat_builtin(self, obj):
        return f"builtin({obj.name})"

    def _pformat_return_value(self, obj):
        return self.pformat(obj.value)

    def _pformat_error(self, obj):
        return f"ERROR: {obj.message}"

    # --- Statements ---

    def _pformat_program(self, node):
        return "\n".join(self.pformat(s) for s in node.statements)

    def _pformat_let(self, node):
        return f"let {self.pformat(node.name)} = {self.pformat(node.value)};"

    def _pformat_return(self, node):
        return f"return {self.pformat(node.return_value)};"

    def _pformat_expression_statement(self, node):
        return f"{self.pformat(node.expression)};"

    def _pformat_block(self, node):
        if not node.statements:
            return "{ }"
        inner = " ".join(self.pformat(s) for s in node.statements)
        return f"{{ {inner} }}"

    # --- Expressions ---

    def _pformat_identifier(self, node):
        return node.value

    def _pformat_literal(self, node):
        return self.pformat(node.value)

    def _pformat_prefix(self, node):
        return f"({node.operator}{self.pformat(node.right)})"

    def _pformat_infix(self, node):
        return f"({self.pformat(node.left)} {node.operator} {self.pformat(node.right)})"

    def _pformat_if(self, node):
        out = f"if ({self.pformat(node.condition)}) {self.pformat(node.consequence)}"
        if node.alternative is not None:
            out += f" else {self.pformat(node.alternative)}"
        return out

    def _pformat_function_literal(self, node):
        return f"fn({self._join(node.parameters)}) {self.pformat(node.body)}"

    def _pformat_call(self, node):
        return f"{self.pformat(node.function)}({self._join(node.arguments)})"

    def _pformat_array_literal(self, node):
        return f"[{self._join(node.elements)}]"

    def _pformat_index(self, node):
        return f"({self.pformat(node.left)}[{self.pformat(node.index)}])"

    def _pformat_hash_literal(self, node):
        pairs = ", ".join(f"{self.pformat(k)}: {self.pformat(v)}" for k, v in node.pairs)
        return f"{{{pairs}}}"
