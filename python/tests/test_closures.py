"""
Closures: code, captured cells, environments and function attributes
"""

import functools
import re

import pytest
from graphdump import Dumper, dump
from graphdump.introspection import NoCaptureIdentity

# str and bytes literals, so code bytes never look like slot references
LITERAL = re.compile(r"b?'(?:[^'\\]|\\.)*'" r'|b?"(?:[^"\\]|\\.)*"')


def body(script):
    return script.split("def _build():", 1)[1]


def cell_definitions(script):
    return body(script).count("= _cell()")


def triple(x):
    return x * 3


def calls_module_helper(x):
    return triple(x) + 1


def make_counter(start=0):
    count = start

    def increment():
        nonlocal count
        count += 1
        return count

    def current():
        return count

    return increment, current


def test_plain_function(rebuild):
    def double(x):
        return x * 2

    result = rebuild(dump({"fn": double}))

    assert result["fn"](21) == 42
    assert result["fn"] is not double
    assert result["fn"].__name__ == "double"
    assert result["fn"].__qualname__ == double.__qualname__


def test_lambda_with_captured_value(rebuild):
    offset = 10
    shift = lambda x: x + offset  # noqa: E731

    result = rebuild(dump({"shift": shift}))

    assert result["shift"](5) == 15


def test_shared_capture_cell(rebuild):
    increment, current = make_counter()
    increment()

    script = dump({"increment": increment, "current": current})
    result = rebuild(script)

    assert cell_definitions(script) == 1
    assert result["increment"].__closure__[0] is result["current"].__closure__[0]
    assert result["current"]() == 1
    assert result["increment"]() == 2
    assert result["current"]() == 2
    # the original is untouched
    assert current() == 1


def test_shared_capture_across_containers(rebuild):
    increment, current = make_counter(5)
    root = {"left": {"fn": increment}, "right": [current]}

    result = rebuild(dump(root))

    result["left"]["fn"]()
    assert result["right"][0]() == 6


def test_separate_counters_stay_separate(rebuild):
    inc_a, get_a = make_counter()
    inc_b, get_b = make_counter(100)

    result = rebuild(dump({"a": [inc_a, get_a], "b": [inc_b, get_b]}))

    result["a"][0]()
    assert result["a"][1]() == 1
    assert result["b"][1]() == 100


def test_without_capture_identity_cells_are_duplicated(rebuild):
    increment, current = make_counter(3)

    script = Dumper(introspection=NoCaptureIdentity()).dump(
        {"increment": increment, "current": current}
    )
    result = rebuild(script)

    assert cell_definitions(script) == 2
    assert result["increment"]() == 4
    assert result["current"]() == 3


def test_closure_sharing_a_cell_with_a_captured_sibling(rebuild):
    def outer():
        z = 1

        def getter():
            return z

        def first():
            nonlocal z
            z += 1
            return getter()

        return first, getter

    first, getter = outer()

    result = rebuild(dump({"f": first}))

    assert result["f"]() == 2
    assert result["f"]() == 3
    assert getter() == 1

    both = rebuild(dump({"f": first, "g": getter}))
    both["f"]()
    assert both["g"]() == 2


def test_cells_are_defined_before_their_closures():
    def outer():
        z = 0

        def getter():
            return z

        def first():
            return getter(), z

        return first

    script = dump({"f": outer()})

    defined = set()
    for line in body(script).splitlines():
        target = line.strip().split(" = ", 1)[0]
        code = LITERAL.sub("", line)
        used = set(re.findall(r"t\[\d+\]", code)) - {target}
        assert used <= defined, line
        if " = " in line:
            defined.add(target)


def test_module_level_function_keeps_its_globals(rebuild):
    script = dump({"fn": calls_module_helper})
    result = rebuild(script)

    assert result["fn"](2) == 7
    assert result["fn"] is not calls_module_helper
    assert result["fn"].__globals__ is globals()
    assert f"_module('{__name__}').__dict__" in body(script)


def test_module_namespace_is_not_copied(rebuild):
    import graphdump.table

    script = dump({"ns": vars(graphdump.table)})
    result = rebuild(script)

    assert result["ns"] is vars(graphdump.table)
    # only the root dict is built
    assert body(script).count("= {}") == 1


def test_recursive_closure(rebuild):
    def outer():
        def factorial(n):
            return 1 if n <= 1 else n * factorial(n - 1)

        return factorial

    result = rebuild(dump({"fact": outer()}))

    assert result["fact"](5) == 120


def test_closure_capturing_its_container(rebuild):
    registry = {}

    def lookup(name):
        return registry[name]

    registry["lookup"] = lookup
    registry["answer"] = 42

    result = rebuild(dump(registry))

    assert result["lookup"]("answer") == 42
    assert result["lookup"]("lookup") is result["lookup"]


def test_unbound_cell_stays_empty(rebuild):
    def outer():
        def reader():
            return later

        script = dump({"reader": reader})
        later = "bound too late"
        return script, reader

    script, reader = outer()
    result = rebuild(script)

    assert "_setcell(" not in body(script)
    assert reader() == "bound too late"
    with pytest.raises(NameError):
        result["reader"]()


def test_defaults_and_attributes(rebuild):
    shared = [1, 2]

    def configured(a, b=shared, *, c="kw"):
        return a, b, c

    configured.tag = "marked"
    result = rebuild(dump({"fn": configured, "shared": shared}))

    assert result["fn"](0) == (0, [1, 2], "kw")
    assert result["fn"].__defaults__[0] is result["shared"]
    assert result["fn"].__kwdefaults__ == {"c": "kw"}
    assert result["fn"].tag == "marked"


def test_distinct_environment(rebuild):
    namespace = {"scale": 3}
    exec("def scaled(x):\n    return x * scale\n", namespace)
    scaled = namespace["scaled"]

    result = rebuild(dump({"fn": scaled, "ns": namespace}))

    assert result["fn"](2) == 6
    assert result["fn"].__globals__ is result["ns"]
    result["ns"]["scale"] = 10
    assert result["fn"](2) == 20


def test_builtin_callable_without_code_is_placeholder(rebuild):
    partial = functools.partial(int, base=2)

    result = rebuild(dump({"p": partial}))

    assert result["p"] == repr(partial)


def test_serializer_does_not_serialize_itself(rebuild):
    import graphdump

    script = dump({"dump": dump, "dumper": Dumper})
    result = rebuild(script, graphdump=graphdump)

    assert "graphdump.dump" in script
    assert result["dump"] is dump
    assert result["dumper"] is Dumper
