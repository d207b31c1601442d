from __future__ import annotations

import re


REGEX_SPECIAL_RE = re.compile(r"[.*+?^${}()|\[\]\\]")


def escape_literal(text: str) -> str:
    """Backslash-escape regex metacharacters so ``text`` matches only itself."""
    return REGEX_SPECIAL_RE.sub(lambda match: "\\" + match.group(0), text)


def literal_pattern(text: str, flags: int = 0) -> re.Pattern[str]:
    return re.compile(escape_literal(text), flags)


def replace_all_literal(haystack: str, old: str, new: str) -> str:
    # Left to right, non-overlapping; inserted text is never rescanned.
    if not haystack or not old:
        return haystack
    return haystack.replace(old, new)
