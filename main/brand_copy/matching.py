from __future__ import annotations

import re
from typing import Any, Iterable, Mapping, Optional


WHITESPACE_RE = re.compile(r"\s+")


def normalize_title(title: Optional[str]) -> str:
    return WHITESPACE_RE.sub(" ", (title or "").strip()).lower()


def build_title_lookup(insights: Iterable[Mapping[str, Any]]) -> dict[str, str]:
    """Map normalized insight titles to their analysis request.

    Collections are stored newest first, so the first title seen wins.
    Trashed insights and insights without a request are ignored.
    """
    lookup: dict[str, str] = {}
    for insight in insights:
        if insight.get("deletedAt") or not insight.get("analysisRequest"):
            continue
        key = normalize_title(insight.get("title"))
        if key:
            lookup.setdefault(key, insight["analysisRequest"])
    return lookup


def match_analysis_request(name: Optional[str], lookup: Mapping[str, str]) -> Optional[str]:
    key = normalize_title(name)
    if not key:
        return None
    return lookup.get(key)
