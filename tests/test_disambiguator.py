"""Tests for call-site selection and argument counting."""

import pytest

from jspnav.disambiguator import count_args, nearest_call_site, observed_argument_count


@pytest.mark.parametrize(
    "call, expected",
    [
        ("()", 0),
        ("(  )", 0),
        ("(a)", 1),
        ("(a, b)", 2),
        ('(a, "x,y", foo(b, c))', 3),
        ("(map.get(k), new int[]{1, 2}, 'c')", 3),
        ('("say \\"hi, there\\"", x)', 2),
        ("(a, b", 2),
    ],
)
def test_count_args(call, expected):
    assert count_args(call) == expected


def test_count_args_skips_leading_whitespace_and_requires_paren():
    assert count_args("   (a, b)") == 2
    assert count_args("x(a)") == 0


def test_nearest_call_site_prefers_closest_match():
    text = "svc.run(a);\nsvc.run(a, b);\nsvc.run(a, b, c);"
    near_last = text.rindex("svc.run")
    paren = nearest_call_site(text, "svc", "run", near_last + 2)
    assert count_args(text, paren) == 3

    paren = nearest_call_site(text, "svc", "run", 0)
    assert count_args(text, paren) == 1


def test_nearest_call_site_tie_keeps_first():
    text = "s.f(a)s.f(a,b)"
    # Both matches start 3 characters from the cursor.
    paren = nearest_call_site(text, "s", "f", 3)
    assert paren == 3


def test_receiver_must_match_whole_identifier():
    text = "mylist.add(x, y); list.add(z);"
    paren = nearest_call_site(text, "list", "add", 0)
    assert paren == text.index(" list.add(") + len(" list.add")


def test_observed_count_without_call_site_is_zero():
    assert observed_argument_count("nothing here", "svc", "run", 0) == 0
    assert observed_argument_count("svc.run(1, 2)", "svc", "run", 5) == 2
