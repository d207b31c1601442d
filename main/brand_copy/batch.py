from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping, Optional

from .brands import DEFAULT_REGISTRY, BrandRegistry
from .errors import NoSourceRecords
from .models import BatchCopyResult, DateReplacementRule, RecordKind, RewriteResult
from .narrative import rewrite_text
from .sql_rewriter import DateRuleLike, coerce_date_rules, rewrite_sql


logger = logging.getLogger(__name__)

ID_PREFIXES: dict[str, str] = {"query": "shared", "insight": "insight"}
TITLE_FIELDS: dict[str, str] = {"query": "name", "insight": "title"}
DEFAULT_REGION = "domestic"


def record_kind(record: Mapping[str, Any]) -> RecordKind:
    return "insight" if "title" in record or "insight" in record else "query"


def record_title(record: Mapping[str, Any]) -> str:
    return str(record.get(TITLE_FIELDS[record_kind(record)]) or "")


def copy_label(source_name: str, target_name: str) -> str:
    return f"자동복사 ({source_name}→{target_name})"


def new_record_id(kind: str) -> str:
    return f"{ID_PREFIXES[kind]}-{uuid.uuid4().hex}"


def existing_titles(
    existing_records: Iterable[Mapping[str, Any]],
    target_code: str,
    registry: BrandRegistry,
) -> set[str]:
    titles: set[str] = set()
    for record in existing_records:
        if record.get("deletedAt"):
            continue
        if registry.effective_code(record) == target_code:
            titles.add(record_title(record))
    return titles


def _rewrite_sql_field(
    sql: Optional[str],
    source_code: str,
    target_code: str,
    source_name: str,
    target_name: str,
    rules: list[DateReplacementRule],
) -> Optional[str]:
    if not sql:
        return sql
    # Brand display names also show up in SQL comments.
    rewritten = rewrite_sql(sql, source_code, target_code, rules)
    return rewrite_text(rewritten, source_name, target_name)


def _copy_query(source: Mapping[str, Any], ctx: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": ctx["id_factory"]("query"),
        "name": rewrite_text(source.get("name"), ctx["source_name"], ctx["target_name"]) or "",
        "query": _rewrite_sql_field(
            source.get("query"),
            ctx["source_code"],
            ctx["target_code"],
            ctx["source_name"],
            ctx["target_name"],
            ctx["rules"],
        ) or "",
        "category": source.get("category") or "custom",
        "region": source.get("region") or DEFAULT_REGION,
        "brand": ctx["target_code"],
        "createdAt": ctx["created_at"],
        "createdBy": ctx["label"],
    }


def _copy_insight(source: Mapping[str, Any], ctx: dict[str, Any]) -> dict[str, Any]:
    source_name, target_name = ctx["source_name"], ctx["target_name"]
    record: dict[str, Any] = {
        "id": ctx["id_factory"]("insight"),
        "title": rewrite_text(source.get("title"), source_name, target_name) or "",
        "brandName": target_name,
        "insight": rewrite_text(source.get("insight"), source_name, target_name) or "",
        "tokensUsed": 0,
        "model": source.get("model") or "unknown",
        "region": source.get("region") or DEFAULT_REGION,
        "createdAt": ctx["created_at"],
        "createdBy": ctx["label"],
    }
    if source.get("query"):
        record["query"] = _rewrite_sql_field(
            source["query"],
            ctx["source_code"],
            ctx["target_code"],
            source_name,
            target_name,
            ctx["rules"],
        )
    if source.get("analysisRequest"):
        record["analysisRequest"] = rewrite_text(source["analysisRequest"], source_name, target_name)
    if source.get("yearMonth"):
        record["yearMonth"] = source["yearMonth"]
    return record


def batch_copy(
    source_records: Iterable[Mapping[str, Any]],
    source_code: str,
    target_codes: Iterable[str],
    date_rules: Iterable[DateRuleLike] | None = None,
    existing_records: Iterable[Mapping[str, Any]] | None = None,
    registry: BrandRegistry = DEFAULT_REGISTRY,
    now: Optional[datetime] = None,
    id_factory: Optional[Callable[[str], str]] = None,
) -> BatchCopyResult:
    """Copy every source record to every target brand.

    Codes are validated before anything is rewritten. Output order follows
    ``target_codes`` first, then the source order. A pairing whose
    rewritten title already exists among ``existing_records`` for the
    target brand is reported as skipped.
    """
    targets = registry.validate(source_code, target_codes)
    sources = list(source_records or [])
    if not sources:
        raise NoSourceRecords()

    existing = list(existing_records or [])
    rules = coerce_date_rules(date_rules)
    source_name = registry.resolve(source_code)
    created_at = (now or datetime.now(timezone.utc)).isoformat()
    result = BatchCopyResult()

    for target_code in targets:
        target_name = registry.resolve(target_code)
        taken = existing_titles(existing, target_code, registry)
        ctx = {
            "source_code": source_code,
            "target_code": target_code,
            "source_name": source_name,
            "target_name": target_name,
            "rules": rules,
            "label": copy_label(source_name, target_name),
            "created_at": created_at,
            "id_factory": id_factory or new_record_id,
        }
        for source in sources:
            source_id = str(source.get("id") or "")
            if record_kind(source) == "insight":
                copied = _copy_insight(source, ctx)
            else:
                copied = _copy_query(source, ctx)

            title = record_title(copied)
            if title in taken:
                logger.debug("Skipping %s -> %s: %r already exists.", source_id, target_code, title)
                result.results.append(RewriteResult(source_id=source_id, target_code=target_code, skipped=True))
                continue

            logger.debug("Copied %s -> %s as %s.", source_id, target_code, copied["id"])
            result.results.append(RewriteResult(source_id=source_id, target_code=target_code, record=copied))

    logger.info(
        "Batch copy %s -> %s: %d created, %d skipped.",
        source_code,
        ",".join(targets),
        result.created_count,
        result.skipped_count,
    )
    return result
