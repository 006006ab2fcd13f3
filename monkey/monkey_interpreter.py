"""
The core Monkey interpreter: a tree-walking Evaluator.
"""
import os
import sys
from typing import Any, Dict, List, Optional

from monkey import monkey_ast as ast
from monkey.monkey_datatypes import (
    Environment, MonkeyHash, MonkeyFunction, Builtin, ReturnValue, ErrorValue,
    type_name, is_hashable, is_truthy, is_error, is_return, unwrap_return,
)


def is_abrupt(value: Any) -> bool:
    """True for results that must unwind the enclosing evaluation."""
    return isinstance(value, (ErrorValue, ReturnValue))


def _truncating_div(left: int, right: int) -> int:
    # Integer division rounds toward zero, not toward negative infinity
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


class Evaluator:
    """The Monkey execution engine.

    Runtime errors are ErrorValues, not exceptions: every composite rule
    checks its sub-results and hands an ErrorValue (or a ReturnValue signal)
    straight back up. Python exceptions escaping `eval` mean the interpreter
    itself is broken, or that the host ran out of stack.
    """
    def __init__(self):
        self.side_effects: List[Dict[str, Any]] = []
        # Natives consulted after the environment chain; populated by StdLib
        self.builtins: Dict[str, Builtin] = {}
        self.call_stack: List[Dict[str, Any]] = []

    def _push_frame(self, name, call_site_node):
        self.call_stack.append({
            'name': name,
            'call_site': getattr(call_site_node, 'loc', None),
        })

    def _pop_frame(self):
        if self.call_stack:
            self.call_stack.pop()

    def _dbg(self, *parts):
        if os.environ.get("MONKEY_DEBUG"):
            print("[DBG]", *parts, file=sys.stderr)

    def eval(self, node: Any, env: Environment) -> Any:
        """Public entry point for evaluation. Unwraps return signals."""
        return unwrap_return(self._eval(node, env))

    def _eval(self, node: Any, env: Environment) -> Any:
        """Recursive dispatcher for evaluating any AST node."""
        match node:
            # Statements
            case ast.Program():
                return self._eval_program(node.statements, env)

            case ast.ExpressionStatement():
                return self._eval(node.expression, env)

            case ast.BlockStatement():
                return self._eval_block(node.statements, env)

            case ast.LetStatement():
                value = self._eval(node.value, env)
                if is_abrupt(value):
                    return value
                env[node.name.value] = value
                return None

            case ast.ReturnStatement():
                value = self._eval(node.return_value, env)
                if is_abrupt(value):
                    return value
                return ReturnValue(value)

            # Literals evaluate to themselves
            case ast.IntegerLiteral() | ast.BooleanLiteral() | ast.StringLiteral():
                return node.value

            case ast.Identifier():
                return self._eval_identifier(node.value, env)

            case ast.PrefixExpression():
                right = self._eval(node.right, env)
                if is_abrupt(right):
                    return right
                return self._eval_prefix(node.operator, right)

            case ast.InfixExpression():
                left = self._eval(node.left, env)
                if is_abrupt(left):
                    return left
                right = self._eval(node.right, env)
                if is_abrupt(right):
                    return right
                return self._eval_infix(node.operator, left, right)

            case ast.IfExpression():
                condition = self._eval(node.condition, env)
                if is_abrupt(condition):
                    return condition
                if is_truthy(condition):
                    return self._eval(node.consequence, env)
                if node.alternative is not None:
                    return self._eval(node.alternative, env)
                return None

            case ast.FunctionLiteral():
                # Captures the live environment, not a snapshot
                return MonkeyFunction(node.parameters, node.body, env)

            case ast.CallExpression():
                function = self._eval(node.function, env)
                if is_abrupt(function):
                    return function
                args = self._eval_expressions(node.arguments, env)
                if is_abrupt(args):
                    return args
                return self.apply_function(function, args, node)

            case ast.ArrayLiteral():
                return self._eval_expressions(node.elements, env)

            case ast.IndexExpression():
                left = self._eval(node.left, env)
                if is_abrupt(left):
                    return left
                index = self._eval(node.index, env)
                if is_abrupt(index):
                    return index
                return self._eval_index(left, index)

            case ast.HashLiteral():
                return self._eval_hash_literal(node, env)

        raise TypeError(f"Unsupported AST node: {type(node).__name__}")

    # --- Statements ---

    def _eval_program(self, statements, env: Environment) -> Any:
        result = None
        for stmt in statements:
            result = self._eval(stmt, env)
            # The first error ends the whole unit; later statements never run
            if is_return(result):
                return result.value
            if is_error(result):
                return result
        return result

    def _eval_block(self, statements, env: Environment) -> Any:
        result = None
        for stmt in statements:
            result = self._eval(stmt, env)
            if is_abrupt(result):
                return result
        return result

    def _eval_expressions(self, nodes, env: Environment) -> Any:
        """Evaluates nodes left to right; returns a list or the first abrupt result."""
        values = []
        for node in nodes:
            value = self._eval(node, env)
            if is_abrupt(value):
                return value
            values.append(value)
        return values

    # --- Expressions ---

    def _eval_identifier(self, name: str, env: Environment) -> Any:
        owner = env.find_owner(name)
        if owner is not None:
            return owner.bindings[name]
        builtin = self.builtins.get(name)
        if builtin is not None:
            return builtin
        return ErrorValue(f"Identifier {name} not found!")

    def _eval_prefix(self, operator: str, right: Any) -> Any:
        match operator:
            case "!":
                return not is_truthy(right)
            case "-" if type_name(right) == "int":
                return -right
            case "+" if type_name(right) == "int":
                return right
        return ErrorValue(f"Operator prefix {operator} is not defined for {type_name(right)}!")

    def _eval_infix(self, operator: str, left: Any, right: Any) -> Any:
        left_type, right_type = type_name(left), type_name(right)

        if left_type == "int" and right_type == "int":
            return self._eval_integer_infix(operator, left, right)
        if left_type == "string" and right_type == "string":
            return self._eval_string_infix(operator, left, right)

        if left_type != right_type:
            return self._infix_error(operator, left_type, right_type)

        # Remaining types compare by identity; bools and null are singletons
        if operator == "==":
            return left is right
        if operator == "!=":
            return left is not right
        return self._infix_error(operator, left_type, right_type)

    def _eval_integer_infix(self, operator: str, left: int, right: int) -> Any:
        match operator:
            case "+":
                return left + right
            case "-":
                return left - right
            case "*":
                return left * right
            case "/":
                if right == 0:
                    return ErrorValue("Division by zero!")
                return _truncating_div(left, right)
            case "<":
                return left < right
            case ">":
                return left > right
            case "==":
                return left == right
            case "!=":
                return left != right
        return self._infix_error(operator, "int", "int")

    def _eval_string_infix(self, operator: str, left: str, right: str) -> Any:
        match operator:
            case "+":
                return left + right
            case "==":
                return left == right
            case "!=":
                return left != right
        return self._infix_error(operator, "string", "string")

    def _infix_error(self, operator: str, left_type: str, right_type: str) -> ErrorValue:
        return ErrorValue(
            f"Infix operator {operator} not found for the operands: {left_type} & {right_type}!"
        )

    def _eval_index(self, left: Any, index: Any) -> Any:
        left_type, index_type = type_name(left), type_name(index)
        if left_type == "array" and index_type == "int":
            # Out of range is null, not an error
            if index < 0 or index >= len(left):
                return None
            return left[index]
        if left_type == "hash":
            if not is_hashable(index):
                return ErrorValue(f"Unusable as hash key: {index_type}!")
            return left.get(index)
        return ErrorValue(f"Index operator not supported: {left_type}[{index_type}]!")

    def _eval_hash_literal(self, node: ast.HashLiteral, env: Environment) -> Any:
        pairs = []
        for key_node, value_node in node.pairs:
            key = self._eval(key_node, env)
            if is_abrupt(key):
                return key
            if not is_hashable(key):
                return ErrorValue(f"Unusable as hash key: {type_name(key)}!")
            value = self._eval(value_node, env)
            if is_abrupt(value):
                return value
            pairs.append((key, value))
        return MonkeyHash(pairs)

    # --- Calls ---

    def apply_function(self, function: Any, args: List[Any], call_site: Optional[ast.Node] = None) -> Any:
        """Calls a Monkey function or builtin with already-evaluated arguments."""
        name = '<call>'
        if call_site is not None and isinstance(getattr(call_site, 'function', None), ast.Identifier):
            name = call_site.function.value

        match function:
            case MonkeyFunction():
                if len(args) != function.arity:
                    return ErrorValue(
                        f"Wrong number of arguments: expected {function.arity}, got {len(args)}!"
                    )
                self._dbg("MonkeyFunction call", name, "argc", len(args))
                call_env = Environment(parent=function.env)
                for param, arg in zip(function.parameters, args):
                    call_env[param.value] = arg
                # Frames are left in place if an exception escapes, for the runner's trace
                self._push_frame(name, call_site)
                result = self._eval(function.body, call_env)
                self._pop_frame()
                return unwrap_return(result)

            case Builtin():
                self._dbg("Builtin call", function.name, "argc", len(args))
                return function(*args)

        return ErrorValue(f"Can not call non-function value of type {type_name(function)}!")
