"""
Shared references and cycles
"""

import re

import pytest
from graphdump import SerializationError, dump

EMPTY_DICT_DEFINITION = re.compile(r"^\s+t\[\d+\] = \{\}$", re.MULTILINE)


def test_shared_container_defined_once(rebuild):
    shared = {"payload": 1}
    root = {"a": shared, "b": shared, "c": [shared]}

    script = dump(root)
    result = rebuild(script)

    # root and shared, nothing else
    assert len(EMPTY_DICT_DEFINITION.findall(script)) == 2
    assert result["a"] is result["b"]
    assert result["c"][0] is result["a"]
    assert result["a"] == {"payload": 1}


def test_shared_text_defined_once():
    text = "a fairly long string used in many places"
    script = dump({"x": text, "y": text, "z": [text, text]})

    assert script.count(repr(text)) == 1


def test_self_reference(rebuild):
    root = {}
    root["self"] = root

    result = rebuild(dump(root))

    assert result["self"] is result


def test_mutual_cycle(rebuild):
    a = {"name": "a"}
    b = {"name": "b", "peer": a}
    a["peer"] = b
    root = {"start": a}

    result = rebuild(dump(root))

    assert result["start"]["peer"]["peer"] is result["start"]
    assert result["start"]["peer"]["name"] == "b"


def test_list_cycle(rebuild):
    items = [1, 2]
    items.append(items)

    result = rebuild(dump({"items": items}))

    assert result["items"][2] is result["items"]
    assert result["items"][:2] == [1, 2]


def test_container_as_its_own_key_value(rebuild):
    key = (1, 2)
    root = {key: "first", "again": key}

    result = rebuild(dump(root))

    assert result["again"] in result
    assert result[result["again"]] == "first"


def test_tuple_cycle_through_list(rebuild):
    holder = []
    pair = (holder, "tag")
    holder.append(pair)

    result = rebuild(dump({"pair": pair}))

    assert result["pair"][0][0] is result["pair"]
    assert result["pair"][1] == "tag"


def test_definitions_precede_uses():
    a = {}
    b = {"a": a}
    a["b"] = b
    script = dump({"a": a, "b": b})

    defined = set()
    for line in script.split("def _build():", 1)[1].splitlines():
        match = re.match(r"\s+(t\[\d+\]) = ", line)
        used = set(re.findall(r"t\[\d+\]", line))
        if match:
            used.discard(match.group(1))
        assert used <= defined, line
        if match:
            defined.add(match.group(1))


def test_deep_nesting_reports_serialization_error():
    root = []
    node = root
    for _ in range(5000):
        child = []
        node.append(child)
        node = child

    with pytest.raises(SerializationError, match="nested too deeply"):
        dump(root, 100_000)
