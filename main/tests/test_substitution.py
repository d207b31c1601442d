from __future__ import annotations

import random
import re

from brand_copy.substitution import escape_literal, literal_pattern, replace_all_literal


SPECIAL = ".*+?^${}()|[]\\"


def test_escape_literal_escapes_every_special_character():
    escaped = escape_literal(SPECIAL)
    assert escaped == "".join("\\" + ch for ch in SPECIAL)
    assert re.fullmatch(escaped, SPECIAL)


def test_escape_literal_leaves_plain_text_alone():
    assert escape_literal("MLB KIDS 12월") == "MLB KIDS 12월"


def test_escaped_pattern_matches_only_itself():
    rng = random.Random(20251201)
    alphabet = SPECIAL + "abcXYZ 01-_"
    for _ in range(100):
        text = "".join(rng.choice(alphabet) for _ in range(rng.randint(1, 24)))
        pattern = literal_pattern(text)
        assert pattern.fullmatch(text)
        assert pattern.findall(text) == [text]
        assert not pattern.fullmatch(text + "x")
        assert not pattern.fullmatch(text[:-1] + "q") or text[-1] == "q"


def test_replace_all_literal_is_left_to_right_and_non_recursive():
    assert replace_all_literal("aaa", "aa", "b") == "ba"
    assert replace_all_literal("M and M", "M", "MM") == "MM and MM"


def test_replace_all_literal_ignores_empty_search():
    assert replace_all_literal("abc", "", "x") == "abc"
    assert replace_all_literal("", "a", "x") == ""
