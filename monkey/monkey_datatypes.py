"""
Defines the runtime data types for the Monkey interpreter.

Integers, booleans, strings, arrays and null are represented by the host's
int, bool, str, list and None. The classes below cover everything that has
no faithful host equivalent: hashes with typed keys, closures, natively
implemented functions, the return signal and first-class errors.
"""

import collections.abc
import inspect
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Tuple


# =================================================================
# Environments
# =================================================================

class Environment:
    """A lexical scope: local bindings plus an optional enclosing scope.

    Lookups walk outward through `parent`; assignment always binds in this
    scope, shadowing any outer binding of the same name. Environments are
    shared by reference: every closure created while a scope was active keeps
    that scope alive, and later bindings are visible to all of them.
    """
    def __init__(self, parent: Optional['Environment'] = None):
        self.bindings: Dict[str, Any] = {}
        self.parent = parent

    def __setitem__(self, key: str, value: Any):
        if not isinstance(key, str):
            raise TypeError(f"Environment key must be a str, not {type(key)}")
        self.bindings[key] = value

    def __getitem__(self, key: str) -> Any:
        owner = self.find_owner(key)
        if owner is None:
            raise KeyError(f"'{key}'")
        return owner.bindings[key]

    def __contains__(self, key: Any) -> bool:
        return isinstance(key, str) and self.find_owner(key) is not None

    def find_owner(self, key: str) -> Optional['Environment']:
        """Finds the nearest environment in the chain that binds `key`."""
        env = self
        while env is not None:
            if key in env.bindings:
                return env
            env = env.parent
        return None

    def get(self, key: str, default: Any = None) -> Any:
        owner = self.find_owner(key)
        if owner is None:
            return default
        return owner.bindings[key]

    def keys(self) -> collections.abc.KeysView:
        """Returns a view of keys in this environment only."""
        return self.bindings.keys()

    def __repr__(self) -> str:
        keys = ', '.join(self.bindings.keys())
        parent_id = f", parent=#{id(self.parent)}" if self.parent else ""
        return f"<Environment bindings=[{keys}]{parent_id}>"


# =================================================================
# Values
# =================================================================

class MonkeyHash(collections.abc.Mapping):
    """An immutable Monkey hash.

    Keys are stored under their type as well as their value, so `1` and
    `true` (equal in Python) stay distinct keys. Only ints, bools and strings
    may be keys.
    """
    def __init__(self, pairs: Iterable[Tuple[Any, Any]] = ()):
        self._pairs: Dict[Tuple[str, Any], Tuple[Any, Any]] = {}
        for key, value in pairs:
            self._pairs[hash_key(key)] = (key, value)

    def __getitem__(self, key: Any) -> Any:
        if not is_hashable(key):
            raise KeyError(key)
        return self._pairs[hash_key(key)][1]

    def __contains__(self, key: Any) -> bool:
        return is_hashable(key) and hash_key(key) in self._pairs

    def __iter__(self) -> Iterator[Any]:
        for key, _ in self._pairs.values():
            yield key

    def __len__(self) -> int:
        return len(self._pairs)

    def __eq__(self, other):
        if not isinstance(other, MonkeyHash):
            return NotImplemented
        return self._pairs == other._pairs

    __hash__ = None

    def __repr__(self) -> str:
        from monkey.monkey_printer import Printer
        return Printer().pformat(self)


class MonkeyFunction:
    """A user-defined function.

    This is a closure, bundling the parameter names and body with the
    environment the `fn` literal was evaluated in. The environment is held by
    reference, never copied.
    """
    def __init__(self, parameters, body, env: Environment):
        self.parameters = tuple(parameters)
        self.body = body
        self.env = env

    @property
    def arity(self) -> int:
        return len(self.parameters)

    def __repr__(self) -> str:
        from monkey.monkey_printer import Printer
        return Printer().pformat(self)


class Builtin:
    """A natively implemented function, identified by its Monkey name.

    Calling a Builtin checks the argument count against the wrapped
    function's signature and reports a mismatch as an ErrorValue.
    """
    def __init__(self, name: str, fn: Callable[..., Any]):
        self.name = name
        self.fn = fn
        self._signature = inspect.signature(fn)

    @property
    def arity(self) -> Optional[int]:
        """Number of positional parameters, or None when variadic."""
        count = 0
        for param in self._signature.parameters.values():
            if param.kind is inspect.Parameter.VAR_POSITIONAL:
                return None
            count += 1
        return count

    def __call__(self, *args: Any) -> Any:
        try:
            self._signature.bind(*args)
        except TypeError:
            return ErrorValue(
                f"Wrong number of arguments to `{self.name}`: expected {self.arity}, got {len(args)}!"
            )
        return self.fn(*args)

    def __repr__(self) -> str:
        return f"<Builtin {self.name}>"


class ReturnValue:
    """The signal produced by a `return` statement.

    Blocks stop at it and pass it up unchanged; the nearest function call
    (or the program) unwraps it.
    """
    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value

    def __eq__(self, other):
        if not isinstance(other, ReturnValue):
            return NotImplemented
        return type_name(self.value) == type_name(other.value) and self.value == other.value

    def __repr__(self) -> str:
        return f"ReturnValue({self.value!r})"


class ErrorValue:
    """A first-class runtime error. Evaluation stops wherever one appears."""
    __slots__ = ("message",)

    def __init__(self, message: str):
        self.message = message

    def __eq__(self, other):
        if not isinstance(other, ErrorValue):
            return NotImplemented
        return self.message == other.message

    def __repr__(self) -> str:
        return f"ErrorValue({self.message!r})"


# =================================================================
# Helpers
# =================================================================

def type_name(value: Any) -> str:
    """The Monkey name of a value's type, used in error messages."""
    match value:
        case None:
            return "null"
        case bool():
            return "bool"
        case int():
            return "int"
        case str():
            return "string"
        case list():
            return "array"
        case MonkeyHash():
            return "hash"
        case MonkeyFunction():
            return "fn"
        case Builtin():
            return "builtin"
        case ErrorValue():
            return "error"
        case ReturnValue():
            return type_name(value.value)
    raise TypeError(f"Not a Monkey value: {type(value).__name__}")


def is_hashable(value: Any) -> bool:
    return isinstance(value, (int, str))


def hash_key(value: Any) -> Tuple[str, Any]:
    if not is_hashable(value):
        raise TypeError(f"Unusable as hash key: {type_name(value)}")
    return (type_name(value), value)


def is_truthy(value: Any) -> bool:
    return value is not None and value is not False


def is_error(value: Any) -> bool:
    return isinstance(value, ErrorValue)


def is_return(value: Any) -> bool:
    return isinstance(value, ReturnValue)


def unwrap_return(value: Any) -> Any:
    return value.value if is_return(value) else value
