# monkey_runtime.py

import inspect
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from monkey.monkey_parser import ParseError, parse
from monkey.monkey_interpreter import Evaluator
from monkey.monkey_printer import Printer
from monkey.monkey_datatypes import Environment, Builtin, ErrorValue, type_name, is_error


# ===================================================================
# 1. The Standard Library
# ===================================================================

def _not_an_array(name: str, value: Any) -> ErrorValue:
    return ErrorValue(f"Argument to `{name}` must be array, got {type_name(value)}!")


class StdLib:
    """Contains Python implementations for all Monkey built-ins.

    Every `_name` method becomes the builtin `name` on the evaluator. The
    argument count is checked by Builtin against the method signature, so the
    methods only validate types.
    """
    def __init__(self, evaluator: Evaluator):
        self.evaluator = evaluator
        self.printer = Printer()
        for name, member in inspect.getmembers(self):
            if name.startswith('_') and not name.startswith('__') and callable(member):
                monkey_name = name[1:]
                evaluator.builtins[monkey_name] = Builtin(monkey_name, member)

    def _len(self, value):
        if isinstance(value, (str, list)):
            return len(value)
        return ErrorValue(f"Argument to `len` not supported, got {type_name(value)}!")

    def _first(self, array):
        if not isinstance(array, list):
            return _not_an_array("first", array)
        return array[0] if array else None

    def _last(self, array):
        if not isinstance(array, list):
            return _not_an_array("last", array)
        return array[-1] if array else None

    def _rest(self, array):
        if not isinstance(array, list):
            return _not_an_array("rest", array)
        return array[1:] if array else None

    def _push(self, array, value):
        # Arrays behave as values: the caller's array is left untouched
        if not isinstance(array, list):
            return _not_an_array("push", array)
        return array + [value]

    # --- Side Effects and I/O ---
    def _puts(self, *values):
        """Records each value as a stdout side effect for the host to print."""
        for value in values:
            event = {"topics": ["stdout"], "message": self.printer.display(value)}
            self.evaluator.side_effects.append(event)
        return None


# ===================================================================
# 2. Script Execution
# ===================================================================

Token = Dict[str, Any]

@dataclass
class ExecutionResult:
    """The structured result of a script execution."""
    status: Literal['success', 'error']
    value: Any = None
    error_message: Optional[str] = None
    errors: List[str] = field(default_factory=list)
    error_token: Optional[Token] = None
    side_effects: List[Dict] = field(default_factory=list)

    def format_error(self) -> str:
        """Formats an error message with line and column if available."""
        if self.status != 'error':
            return ""
        msg = str(self.error_message or "Unknown error")

        # Add a location prefix when we have a token; avoid duplicating the same prefix
        if self.error_token and 'line' in self.error_token:
            line = self.error_token.get('line')
            col = self.error_token.get('col')
            if not msg.startswith("Error on line "):
                col_info = f", col {col}" if col is not None else ""
                return f"Error on line {line}{col_info}: {msg}"
        return msg


# Each Monkey call nests roughly ten evaluator frames on the host stack.
DEFAULT_RECURSION_LIMIT = 30000


def _raise_recursion_limit():
    """Lifts the host recursion limit so ordinary recursive programs fit.

    `MONKEY_RECURSION_LIMIT` overrides the default. The limit is only ever
    raised, never lowered.
    """
    limit = int(os.environ.get("MONKEY_RECURSION_LIMIT", DEFAULT_RECURSION_LIMIT))
    if sys.getrecursionlimit() < limit:
        sys.setrecursionlimit(limit)


class ScriptRunner:
    """Parses and evaluates Monkey code against one long-lived environment.

    Bindings made by one `handle_script` call are visible to the next, which
    is what makes a REPL session work. Separate runners never share state
    unless an environment is passed in explicitly.
    """

    def __init__(self, env: Optional[Environment] = None):
        self.root_env = env if env is not None else Environment()
        self.evaluator = Evaluator()
        self.stdlib = StdLib(self.evaluator)
        _raise_recursion_limit()

    def _dbg(self, *parts):
        self.evaluator._dbg(*parts)

    def _format_parse_errors(self, errors: List[ParseError], source: str) -> str:
        out = []
        for err in errors:
            out.append(f"ParseError: {err.message} (line {err.line}, col {err.col})")
            context = self._source_context(source, err.line, err.col)
            if context:
                out.append(context)
        return "\n".join(out)

    def _source_context(self, source: str, line: int, col: Optional[int], radius: int = 2) -> str:
        lines = source.splitlines()
        if not line or line < 1 or line > len(lines):
            return ""
        start = max(1, line - radius)
        end = min(len(lines), line + radius)
        width = len(str(end))
        out = []
        for i in range(start, end + 1):
            prefix = ">" if i == line else " "
            ln = str(i).rjust(width)
            content = lines[i - 1]
            out.append(f"{prefix} {ln} | {content}")
            if i == line and col is not None:
                caret = " " * max(col - 1, 0)
                out.append(f"  {' ' * width} | {caret}^")
        return "\n".join(out)

    def _format_frame(self, frame: Dict[str, Any]) -> str:
        name = frame.get('name') or '<call>'
        site = frame.get('call_site')
        if site:
            return f"{name}@{site['line']}:{site['col']}"
        return name

    def _format_stacktrace(self) -> str:
        stack = self.evaluator.call_stack
        if not stack:
            return ""
        frames = [self._format_frame(frame) for frame in stack[-5:]]
        more = f" (+{len(stack) - 5} more)" if len(stack) > 5 else ""
        return "Monkey stacktrace: " + " <- ".join(reversed(frames)) + more

    def _error_result(self, msg: str, errors: List[str], token: Optional[Token] = None) -> ExecutionResult:
        # Emit consolidated stderr side-effect
        self.evaluator.side_effects.append({'topics': ['stderr'], 'message': msg})
        return ExecutionResult(
            status='error',
            error_message=msg,
            errors=errors,
            error_token=token,
            side_effects=list(self.evaluator.side_effects),
        )

    def handle_script(self, source_code: str) -> ExecutionResult:
        """The main entry point to execute a unit of source."""
        # Clear side effects for each run
        self.evaluator.side_effects.clear()
        self.evaluator.call_stack.clear()

        try:
            # 1. Parse; nothing is evaluated when there are syntax errors
            program, parse_errors = parse(source_code)
            if parse_errors:
                self._dbg("parse failed", len(parse_errors), "error(s)")
                first = parse_errors[0]
                return self._error_result(
                    self._format_parse_errors(parse_errors, source_code),
                    [str(e) for e in parse_errors],
                    {'line': first.line, 'col': first.col},
                )

            # 2. Evaluate
            result = self.evaluator.eval(program, self.root_env)
        except RecursionError:
            msg = "RecursionError: maximum recursion depth exceeded"
            st = self._format_stacktrace()
            if st:
                msg += "\n" + st
            return self._error_result(msg, [msg.splitlines()[0]])
        except Exception as e:
            msg = f"InternalError: {e}"
            return self._error_result(msg, [msg])

        if is_error(result):
            self._dbg("evaluation error", result.message)
            return self._error_result(f"ERROR: {result.message}", [result.message])

        self._dbg("result", type_name(result))
        return ExecutionResult(
            status='success',
            value=result,
            side_effects=list(self.evaluator.side_effects),
        )
