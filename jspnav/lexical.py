"""Cursor-word extraction and call-expression splitting."""

from __future__ import annotations

import logging
from typing import List, NamedTuple, Tuple

from . import patterns

logger = logging.getLogger(__name__)

LOOKBEHIND_WINDOW = 50


def source_lines(text: str) -> List[str]:
    """Lines as editors number them: split on ``\\n`` only, trailing ``\\r`` dropped."""
    return [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]


class ClassAndMethod(NamedTuple):
    class_name: str
    method_name: str


def word_bounds(text: str, offset: int, include_call_parens: bool = False) -> Tuple[int, int]:
    """Start and end offsets of the word around *offset*.

    Expands left over identifier characters and dots (and parentheses when
    *include_call_parens* is set), and right over identifier characters and
    dots only: a call's parentheses never extend the word to the right.
    """
    offset = max(0, min(offset, len(text)))
    start = offset
    while start > 0 and patterns.is_word_char(text[start - 1], include_call_parens):
        start -= 1
    end = offset
    while end < len(text) and patterns.is_word_char(text[end]):
        end += 1
    return start, end


def word_at(text: str, offset: int, include_call_parens: bool = False) -> str:
    """The dotted word under the cursor.

    If the fifty characters before the word end inside an unfinished
    ``import a.b.`` statement or ``<%@ page import="a.b.`` directive value,
    the captured partial path is prepended so the whole import is returned.
    """
    start, end = word_bounds(text, offset, include_call_parens)
    word = text[start:end]

    window = text[max(0, start - LOOKBEHIND_WINDOW):start]
    partial = patterns.trailing_import_path(window)
    if partial is None:
        partial = patterns.trailing_directive_import(window)
    if partial is not None:
        logger.debug("Word %r continues import path %r", word, partial)
        return partial + word
    return word


def split_class_and_method(full_path: str) -> ClassAndMethod:
    """Split ``receiver.method(args)`` into receiver and method name.

    The method is the text after the last dot, cut at its first ``(``. The
    receiver is the text before that dot, cut at its own first ``(`` (so
    ``a.b().c`` gives ``a.b`` and ``c``). Without a dot the whole pre-paren
    text is the method and the receiver is empty.
    """
    last_dot = full_path.rfind(".")
    if last_dot == -1:
        return ClassAndMethod("", full_path.split("(", 1)[0])

    method_name = full_path[last_dot + 1:].split("(", 1)[0]
    class_name = full_path[:last_dot]
    if "(" in class_name:
        class_name = class_name[:class_name.index("(")]
    return ClassAndMethod(class_name, method_name)


def segment_index_at(word: str, word_start: int, offset: int) -> int:
    """Index of the dot-separated segment of *word* that *offset* falls in."""
    relative = max(0, offset - word_start)
    return word[:relative].count(".")


def offset_at(text: str, line: int, column: int) -> int:
    """Offset of 0-based ``(line, column)``; clamps to the text."""
    current = 0
    for _ in range(line):
        newline = text.find("\n", current)
        if newline == -1:
            return len(text)
        current = newline + 1
    line_end = text.find("\n", current)
    if line_end == -1:
        line_end = len(text)
    return min(current + max(0, column), line_end)
