import pytest
from monkey.monkey_printer import Printer
from monkey.monkey_parser import parse
from monkey.monkey_ast import Identifier, BlockStatement
from monkey.monkey_datatypes import (
    Environment, MonkeyHash, MonkeyFunction, Builtin, ReturnValue, ErrorValue,
)

@pytest.fixture
def printer():
    return Printer()

# Test cases: (id, object, expected_string)
FORMAT_TEST_CASES = [
    ("int", 123, "123"),
    ("negative_int", -7, "-7"),
    ("bool_true", True, "true"),
    ("bool_false", False, "false"),
    ("null", None, "null"),
    ("str", "hello", '"hello"'),
    ("empty_array", [], "[]"),
    ("array", [1, "a", [True, None]], '[1, "a", [true, null]]'),
    ("empty_hash", MonkeyHash(), "{}"),
    ("hash", MonkeyHash([("a", 1), (2, [3]), (False, "x")]), '{"a": 1, 2: [3], false: "x"}'),
    (
        "function",
        MonkeyFunction((Identifier("x"), Identifier("y")), BlockStatement(()), Environment()),
        "fn(x, y) {...}",
    ),
    ("builtin", Builtin("len", len), "builtin(len)"),
    ("error", ErrorValue("Identifier x not found!"), "ERROR: Identifier x not found!"),
    ("return_value", ReturnValue(5), "5"),
]

@pytest.mark.parametrize("test_id, obj, expected", FORMAT_TEST_CASES, ids=[c[0] for c in FORMAT_TEST_CASES])
def test_pformat(printer, test_id, obj, expected):
    assert printer.pformat(obj) == expected


def test_display_leaves_strings_raw(printer):
    assert printer.display("hello") == "hello"
    assert printer.display(["hello"]) == '["hello"]'
    assert printer.display(None) == "null"


def test_unknown_objects_fall_back_to_repr(printer):
    assert printer.pformat(1.5) == "1.5"


def test_value_reprs_use_printer():
    assert repr(MonkeyHash([("k", 1)])) == '{"k": 1}'
    fn = MonkeyFunction((Identifier("n"),), BlockStatement(()), Environment())
    assert repr(fn) == "fn(n) {...}"


# --- Syntax ---

AST_TEST_CASES = [
    ("let", "let myVar = anotherVar;", "let myVar = anotherVar;"),
    ("return", "return x", "return x;"),
    ("expression", "x", "x;"),
    ("prefix", "!-x", "(!(-x));"),
    ("string", 'let s = "hi"', 'let s = "hi";'),
    ("if", "if (a) { b }", "if (a) { b; };"),
    ("if_else", "if (a) { b } else { c; d }", "if (a) { b; } else { c; d; };"),
    ("empty_block", "if (a) { }", "if (a) { };"),
    ("fn", "fn(a, b) { a + b }", "fn(a, b) { (a + b); };"),
    ("call", "f(1, g(2))", "f(1, g(2));"),
    ("array_index", "[1, 2][0]", "([1, 2][0]);"),
    ("hash", '{"k": v}', '{"k": v};'),
    ("program", "let a = 1; a + 1", "let a = 1;\n(a + 1);"),
]

@pytest.mark.parametrize("test_id, source, expected", AST_TEST_CASES, ids=[c[0] for c in AST_TEST_CASES])
def test_pformat_ast(printer, test_id, source, expected):
    program, errors = parse(source)
    assert not errors
    assert printer.pformat(program) == expected
