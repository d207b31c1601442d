from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Mapping, Union

from .models import DateReplacementRule
from .substitution import escape_literal, replace_all_literal


logger = logging.getLogger(__name__)

BRAND_COLUMN_RE = re.compile(r"\bbrd_cd\b", re.I)

DateRuleLike = Union[DateReplacementRule, Mapping[str, Any]]


def coerce_date_rules(rules: Iterable[DateRuleLike] | None) -> list[DateReplacementRule]:
    coerced: list[DateReplacementRule] = []
    for rule in rules or []:
        if isinstance(rule, DateReplacementRule):
            coerced.append(rule)
        else:
            coerced.append(DateReplacementRule.from_dict(rule))
    return coerced


def apply_date_rules(text: str, rules: Iterable[DateRuleLike] | None) -> str:
    # Order matters: a later rule sees the output of the earlier ones.
    for rule in coerce_date_rules(rules):
        if rule.is_active:
            text = replace_all_literal(text, rule.from_text, rule.to_text)
    return text


def _predicate_pattern(source_code: str) -> re.Pattern[str]:
    return re.compile(r"((?i:brd_cd)\s*=\s*')" + escape_literal(source_code) + r"(')")


def has_brand_predicate(sql: str) -> bool:
    return bool(sql) and BRAND_COLUMN_RE.search(sql) is not None


def rewrite_sql(
    sql: str,
    source_code: str,
    target_code: str,
    date_rules: Iterable[DateRuleLike] | None = None,
) -> str:
    """Retarget a query from one brand code to another.

    Three passes, in order:

    1. ``brd_cd = '<source>'`` gets its quoted value replaced. The column
       name matches in any casing and spacing, both kept as written; the
       quoted value must equal the source code exactly.
    2. Every single-quoted literal exactly equal to ``'<source>'`` is
       replaced, which covers ``brd_cd IN ('M', 'X')`` lists. This also
       rewrites an unrelated column compared against the same literal.
    3. Active date rules are applied as plain substring replacements.

    Queries that select the brand through a join, a view or another column
    name are left alone apart from the date rules.
    """
    if not sql:
        return sql

    rewritten = sql
    if source_code and target_code and source_code != target_code:
        if not has_brand_predicate(rewritten):
            logger.warning("No brd_cd predicate found; brand %s left as-is in query.", source_code)
        rewritten = _predicate_pattern(source_code).sub(
            lambda match: f"{match.group(1)}{target_code}{match.group(2)}",
            rewritten,
        )
        rewritten = replace_all_literal(rewritten, f"'{source_code}'", f"'{target_code}'")

    return apply_date_rules(rewritten, date_rules)
