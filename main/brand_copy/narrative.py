from __future__ import annotations

import re
from typing import Optional

from .substitution import literal_pattern


def rewrite_text(text: Optional[str], source_name: str, target_name: str) -> Optional[str]:
    """Swap every case-insensitive ``source_name`` for ``target_name`` verbatim.

    The matched casing is not kept, so ``mlb`` becomes ``DISCOVERY`` rather
    than ``discovery``.
    """
    if not text or not source_name:
        return text
    pattern = literal_pattern(source_name, re.I)
    return pattern.sub(lambda _match: target_name, text)
