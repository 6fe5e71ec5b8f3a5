"""
tests/test_sanitize.py -- Input sanitizer behaviour.

The sanitizer is a denylist, so these tests pin down exactly what it removes
and, just as importantly, what it leaves alone.
"""

import pytest

from core.sanitize import sanitize, sanitize_string


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("<script>alert(1)</script>", "scriptalert(1)/script"),
        ("javascript:alert(1)", "alert(1)"),
        ("JaVaScRiPt:alert(1)", "alert(1)"),
        ("see javascript:void(0) here", "see void(0) here"),
        ("onClick=x()", "x()"),
        ("img ONLOAD = steal()", "img  steal()"),
        ("  padded  ", "padded"),
        ("plain text", "plain text"),
        ("", ""),
    ],
)
def test_sanitize_string(raw, expected) -> None:
    assert sanitize_string(raw) == expected


def test_script_tag_loses_all_angle_brackets() -> None:
    out = sanitize("<script>alert(1)</script>")
    assert "<" not in out and ">" not in out


def test_key_without_assignment_is_untouched() -> None:
    assert sanitize({"onClick": "x()"}) == {"onClick": "x()"}


def test_handler_assignment_in_value_is_stripped() -> None:
    assert sanitize({"attr": "onClick=x()"}) == {"attr": "x()"}


def test_nested_containers_keep_shape() -> None:
    raw = {
        "name": " <b>admin</b> ",
        "tags": ["javascript:x", "ok", 3],
        "meta": {"depth": [{"note": "onerror=boom"}]},
        "pair": ("<a>", None),
    }
    assert sanitize(raw) == {
        "name": "badmin/b",
        "tags": ["x", "ok", 3],
        "meta": {"depth": [{"note": "boom"}]},
        "pair": ("a", None),
    }


def test_list_order_is_preserved() -> None:
    assert sanitize(["<c>", "<b>", "<a>"]) == ["c", "b", "a"]


def test_keys_are_sanitized_and_later_collision_wins() -> None:
    assert sanitize({"<k>": "first", "k": "second"}) == {"k": "second"}


@pytest.mark.parametrize("value", [None, 0, 42, 3.5, True, False])
def test_non_strings_pass_through(value) -> None:
    assert sanitize(value) is value


def test_input_is_not_mutated() -> None:
    raw = {"q": "<x>"}
    sanitize(raw)
    assert raw == {"q": "<x>"}
