"""Tests for cursor-word extraction and call splitting."""

import pytest

from jspnav.lexical import (
    offset_at,
    segment_index_at,
    split_class_and_method,
    word_at,
    word_bounds,
)


def _at(marked: str):
    """Split a ``|``-marked string into text and cursor offset."""
    offset = marked.index("|")
    return marked.replace("|", "", 1), offset


def test_word_includes_dots():
    text, offset = _at("x = com.acme.Fo|o.bar;")
    assert word_at(text, offset) == "com.acme.Foo.bar"


def test_word_never_extends_right_over_parens():
    text, offset = _at("service.find|Orders(customer, 10);")
    assert word_at(text, offset) == "service.findOrders"


def test_word_with_call_parens_expands_left_only():
    text, offset = _at("builder.create().bu|ild(x)")
    assert word_at(text, offset, include_call_parens=True) == "builder.create().build"
    assert word_at(text, offset) == ".build"


def test_empty_word_on_whitespace():
    text, offset = _at("a  |  b")
    assert word_at(text, offset) == ""


def test_word_bounds_clamps_offset():
    assert word_bounds("abc", 99) == (0, 3)
    assert word_bounds("abc", -5) == (0, 3)


def test_java_import_prefix_is_prepended():
    text, offset = _at("<%\nimport com.acme.|Foo;\n%>")
    assert word_at(text, offset) == "com.acme.Foo"


def test_directive_import_prefix_is_prepended():
    text = '<%@ page import="java.util.List, com.acme.'
    word_text = text + "Foo"
    assert word_at(word_text, len(word_text) - 1).endswith("com.acme.Foo")


@pytest.mark.parametrize(
    "full_path, expected",
    [
        ("com.example.MyClass.myMethod", ("com.example.MyClass", "myMethod")),
        ("obj.method(arg)", ("obj", "method")),
        ("a.b().c", ("a.b", "c")),
        ("standalone(x)", ("", "standalone")),
        ("plain", ("", "plain")),
    ],
)
def test_split_class_and_method(full_path, expected):
    result = split_class_and_method(full_path)
    assert (result.class_name, result.method_name) == expected


def test_segment_index():
    word = "Foo.bar.baz"
    assert segment_index_at(word, 10, 11) == 0
    assert segment_index_at(word, 10, 15) == 1
    assert segment_index_at(word, 10, 19) == 2


def test_offset_at_clamps():
    text = "one\ntwo\nthree"
    assert offset_at(text, 2, 3) == 11
    assert offset_at(text, 1, 99) == 7
    assert offset_at(text, 9, 0) == len(text)
