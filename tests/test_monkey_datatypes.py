import pytest
from monkey.monkey_datatypes import (
    Environment, MonkeyHash, MonkeyFunction, Builtin, ReturnValue, ErrorValue,
    type_name, is_hashable, hash_key, is_truthy, is_error, is_return, unwrap_return,
)

# --- Environment Tests ---

def test_environment_init():
    parent = Environment()
    child = Environment(parent=parent)
    assert child.parent is parent
    assert not child.bindings
    assert Environment().parent is None


def test_environment_setitem_getitem():
    env = Environment()
    env["a"] = 1
    assert env["a"] == 1
    with pytest.raises(KeyError):
        _ = env["b"]


def test_environment_chain_lookup_and_shadowing():
    parent = Environment()
    parent["a"] = 100
    parent["b"] = 200

    child = Environment(parent=parent)
    child["b"] = 20  # shadow parent

    assert child["a"] == 100
    assert child["b"] == 20
    assert parent["b"] == 200
    assert child.find_owner("a") is parent
    assert child.find_owner("b") is child
    assert child.find_owner("zzz") is None


def test_environment_contains_and_get():
    parent = Environment()
    parent["x"] = None  # null is a legitimate binding
    child = Environment(parent)
    assert "x" in child
    assert "y" not in child
    assert 5 not in child
    assert child.get("x", "missing") is None
    assert child.get("y", "missing") == "missing"


def test_environment_rejects_non_string_keys():
    with pytest.raises(TypeError):
        Environment()[1] = 2


def test_environment_mutation_is_visible_to_all_holders():
    env = Environment()
    a = Environment(env)
    b = Environment(env)
    env["shared"] = 1
    assert a["shared"] == 1 and b["shared"] == 1


def test_environment_keys_are_local():
    parent = Environment()
    parent["a"] = 1
    child = Environment(parent)
    child["b"] = 2
    assert list(child.keys()) == ["b"]
    assert "bindings=[b]" in repr(child)


# --- MonkeyHash Tests ---

def test_hash_keys_are_typed():
    h = MonkeyHash([(1, "int"), (True, "bool"), ("1", "string")])
    assert len(h) == 3
    assert h[1] == "int"
    assert h[True] == "bool"
    assert h["1"] == "string"


def test_hash_keeps_insertion_order_and_last_write_wins():
    h = MonkeyHash([("b", 1), ("a", 2), ("b", 3)])
    assert list(h) == ["b", "a"]
    assert h["b"] == 3


def test_hash_missing_and_unhashable_lookups():
    h = MonkeyHash([("a", 1)])
    assert h.get("z") is None
    assert [1] not in h
    with pytest.raises(KeyError):
        _ = h[[1]]


def test_hash_equality():
    assert MonkeyHash([("a", 1)]) == MonkeyHash([("a", 1)])
    assert MonkeyHash([(1, 1)]) != MonkeyHash([(True, 1)])


def test_hash_key_rejects_unhashable_values():
    assert hash_key(5) == ("int", 5)
    assert hash_key(False) == ("bool", False)
    with pytest.raises(TypeError):
        hash_key([])


# --- Callables ---

def test_monkey_function_keeps_environment_by_reference():
    env = Environment()
    fn = MonkeyFunction((), None, env)
    env["later"] = 1
    assert fn.env is env
    assert fn.env["later"] == 1
    assert fn.arity == 0


def test_builtin_checks_arity():
    def one(x):
        return x * 2
    b = Builtin("double", one)
    assert b.arity == 1
    assert b(4) == 8
    err = b(1, 2)
    assert err == ErrorValue("Wrong number of arguments to `double`: expected 1, got 2!")


def test_variadic_builtin_has_no_arity():
    b = Builtin("count", lambda *xs: len(xs))
    assert b.arity is None
    assert b() == 0
    assert b(1, 2, 3) == 3


# --- Helpers ---

TYPE_NAME_CASES = [
    (None, "null"),
    (True, "bool"),
    (0, "int"),
    ("", "string"),
    ([], "array"),
    (MonkeyHash(), "hash"),
    (MonkeyFunction((), None, Environment()), "fn"),
    (Builtin("len", len), "builtin"),
    (ErrorValue("x"), "error"),
    (ReturnValue(3), "int"),
]

@pytest.mark.parametrize("value, expected", TYPE_NAME_CASES)
def test_type_name(value, expected):
    assert type_name(value) == expected


def test_type_name_rejects_host_objects():
    with pytest.raises(TypeError):
        type_name(1.5)


@pytest.mark.parametrize("value, expected", [
    (None, False), (False, False), (True, True), (0, True), ("", True), ([], True),
])
def test_truthiness(value, expected):
    assert is_truthy(value) is expected


def test_signal_helpers():
    assert is_hashable(1) and is_hashable(True) and is_hashable("s")
    assert not is_hashable(None) and not is_hashable([])
    assert is_error(ErrorValue("boom"))
    assert not is_error("boom")
    assert is_return(ReturnValue(1))
    assert unwrap_return(ReturnValue(7)) == 7
    assert unwrap_return(7) == 7
    assert ReturnValue(1) != ReturnValue(True)
