"""Pick the call site nearest the cursor and count its arguments."""

from __future__ import annotations

import logging
from typing import Optional

from . import patterns

logger = logging.getLogger(__name__)

_OPENING = "([{"
_CLOSING = ")]}"


def nearest_call_site(text: str, receiver: str, method_name: str, offset: int) -> Optional[int]:
    """Offset of the ``(`` of the ``receiver.method(`` call closest to *offset*.

    Distance is measured from the start of each match; ties keep the first.
    """
    if not receiver or not method_name:
        return None
    best_paren: Optional[int] = None
    best_distance: Optional[int] = None
    for match in patterns.call_site_pattern(receiver, method_name).finditer(text):
        distance = abs(match.start() - offset)
        if best_distance is None or distance < best_distance:
            best_distance = distance
            best_paren = match.end() - 1
    return best_paren


def count_args(text: str, start: int = 0) -> int:
    """Number of arguments in the call whose ``(`` is at or after *start*.

    Commas split arguments only at bracket depth zero and outside string or
    character literals. ``()`` and ``(  )`` have zero arguments. An argument
    list left open at the end of *text* is counted up to the end.
    """
    index = start
    while index < len(text) and text[index].isspace():
        index += 1
    if index >= len(text) or text[index] != "(":
        return 0

    depth = 0
    commas = 0
    has_content = False
    quote: Optional[str] = None
    escaped = False

    for ch in text[index + 1:]:
        if quote is not None:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in "\"'":
            quote = ch
            has_content = True
        elif ch in _OPENING:
            depth += 1
            has_content = True
        elif ch in _CLOSING:
            if depth == 0:
                break
            depth -= 1
        elif ch == "," and depth == 0:
            commas += 1
        elif not ch.isspace():
            has_content = True

    return commas + 1 if has_content or commas else 0


def observed_argument_count(text: str, receiver: str, method_name: str, offset: int) -> int:
    """Argument count at the nearest ``receiver.method(`` call, or 0 without one."""
    paren = nearest_call_site(text, receiver, method_name, offset)
    if paren is None:
        logger.debug("No call site for %s.%s; assuming 0 arguments", receiver, method_name)
        return 0
    count = count_args(text, paren)
    logger.debug("Call site %s.%s at %d has %d arguments", receiver, method_name, paren, count)
    return count
