"""Type and method declaration lookup inside one Java source text.

Shared by every search tier: the workspace, extracted dependency sources and
the platform archive all go through :func:`find_declaration`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from . import patterns
from .lexical import source_lines

_OPEN = "([{<"
_CLOSE = ")]}>"


@dataclass(frozen=True)
class DeclarationSpan:
    line: int
    start: int
    end: int


def code_lines(source: str) -> Iterator[Tuple[int, str]]:
    """``(index, code)`` per line, with comments and literals blanked.

    Blanking keeps column positions, so spans found in the code text are
    valid for the original line.
    """
    in_block_comment = False
    for index, line in enumerate(source_lines(source)):
        chars: List[str] = []
        position = 0
        while position < len(line):
            if in_block_comment:
                close = line.find("*/", position)
                if close == -1:
                    chars.append(" " * (len(line) - position))
                    position = len(line)
                else:
                    chars.append(" " * (close + 2 - position))
                    position = close + 2
                    in_block_comment = False
                continue
            opening = line.find("/*", position)
            if opening == -1:
                chars.append(line[position:])
                position = len(line)
            else:
                chars.append(line[position:opening] + "  ")
                position = opening + 2
                in_block_comment = True
        yield index, patterns.code_only("".join(chars))


def package_matches(source: str, expected_package: str) -> bool:
    """A declared package must equal *expected_package*; no declaration passes."""
    if not expected_package:
        return True
    declared = patterns.declared_package(source)
    return declared is None or declared == expected_package


def count_declared_params(parameter_text: str) -> int:
    """Parameters in a declaration's parameter list (without the parentheses).

    Generic arguments count as nesting, so ``Map<K, V> m`` is one parameter.
    """
    if not parameter_text.strip():
        return 0
    depth = 0
    count = 1
    for ch in parameter_text:
        if ch in _OPEN:
            depth += 1
        elif ch in _CLOSE:
            depth = max(0, depth - 1)
        elif ch == "," and depth == 0:
            count += 1
    return count


def find_type_declaration(source: str, simple_name: str) -> Optional[DeclarationSpan]:
    pattern = patterns.type_declaration_pattern(simple_name)
    for index, code in code_lines(source):
        match = pattern.search(code)
        if match:
            return DeclarationSpan(index, match.start(1), match.end(1))
    return None


def _parameter_text(lines: List[str], line_index: int, paren: int) -> str:
    """Text between the ``(`` at *paren* and its matching ``)``, across lines."""
    collected: List[str] = []
    depth = 0
    for index in range(line_index, len(lines)):
        segment = lines[index][paren + 1:] if index == line_index else lines[index]
        for ch in segment:
            if ch == "(":
                depth += 1
            elif ch == ")":
                if depth == 0:
                    return "".join(collected)
                depth -= 1
            collected.append(ch)
        collected.append(" ")
    return "".join(collected)


def find_method_declaration(
    source: str,
    type_name: str,
    method_name: str,
    param_count: int = 0,
) -> Optional[DeclarationSpan]:
    """Declaration of *method_name* among the direct members of *type_name*.

    The first declaration with exactly *param_count* parameters wins;
    otherwise the one with the smallest count difference, earliest first.
    """
    header = find_type_declaration(source, type_name)
    if header is None:
        return None

    lines = [code for _, code in code_lines(source)]
    method_pattern = patterns.method_name_pattern(method_name)
    best: Optional[DeclarationSpan] = None
    best_difference: Optional[int] = None
    depth = 0
    opened = False

    for index in range(header.line, len(lines)):
        code = lines[index]
        if index == header.line:
            code = " " * header.end + code[header.end:]

        # Brace depth before each column; members sit at depth 1.
        depths: List[int] = []
        for ch in code:
            depths.append(depth)
            if ch == "{":
                depth += 1
                opened = True
            elif ch == "}":
                depth -= 1
                if opened and depth <= 0:
                    break

        for match in method_pattern.finditer(code):
            start = match.start(1)
            if start >= len(depths) or depths[start] != 1:
                continue
            if not patterns.is_declaration_site(code, start):
                continue
            declared = count_declared_params(_parameter_text(lines, index, match.end() - 1))
            span = DeclarationSpan(index, match.start(1), match.end(1))
            if declared == param_count:
                return span
            difference = abs(declared - param_count)
            if best_difference is None or difference < best_difference:
                best, best_difference = span, difference

        if opened and depth <= 0:
            break

    return best


def find_declaration(
    source: str,
    simple_name: str,
    method_name: Optional[str] = None,
    param_count: Optional[int] = None,
) -> Optional[DeclarationSpan]:
    """Method declaration when *method_name* is given, else (or failing that) the type."""
    if method_name:
        span = find_method_declaration(source, simple_name, method_name, param_count or 0)
        if span is not None:
            return span
    return find_type_declaration(source, simple_name)
