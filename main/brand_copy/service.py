from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional

from .batch import batch_copy
from .brands import DEFAULT_REGISTRY, BrandRegistry
from .config import CopyEngineConfig
from .errors import BatchCopyError
from .matching import build_title_lookup, match_analysis_request
from .models import BatchCopyRequest, BatchCopyResponse, DateReplacementRule
from .monitoring import MetricsCollector
from .sql_rewriter import rewrite_sql
from .storage import SqliteRecordStore, cap_records


logger = logging.getLogger(__name__)


def copy_summary(created: int, skipped: int) -> str:
    message = f"{created}개 복사 완료"
    if skipped:
        message += f" (중복 {skipped}개 건너뜀)"
    return message


def select_sources(
    records: Iterable[Mapping[str, Any]],
    source_code: str,
    registry: BrandRegistry,
    source_ids: Optional[Iterable[str]] = None,
    region: Optional[str] = None,
    default_region: str = "domestic",
) -> list[dict[str, Any]]:
    """Pick the records belonging to ``source_code`` that a batch should copy."""
    wanted = set(source_ids) if source_ids else None
    selected: list[dict[str, Any]] = []
    for record in records:
        if record.get("deletedAt"):
            continue
        if registry.effective_code(record) != source_code:
            continue
        if wanted is not None and record.get("id") not in wanted:
            continue
        if region and (record.get("region") or default_region) != region:
            continue
        selected.append(dict(record))
    return selected


class BrandCopyService:
    def __init__(
        self,
        config: CopyEngineConfig,
        store: Optional[SqliteRecordStore] = None,
        registry: BrandRegistry = DEFAULT_REGISTRY,
    ):
        self.config = config
        self.store = store or SqliteRecordStore(config.db_path)
        self.registry = registry

    def copy_queries(self, request: BatchCopyRequest) -> BatchCopyResponse:
        return self._copy(request, self.config.queries_key, self.config.max_saved_queries)

    def copy_insights(self, request: BatchCopyRequest) -> BatchCopyResponse:
        return self._copy(request, self.config.insights_key, self.config.max_saved_insights)

    def preview_sql(
        self,
        query: str,
        source_code: str,
        target_code: str,
        date_rules: Optional[list[dict[str, str]]] = None,
    ) -> str:
        self.registry.resolve(source_code)
        self.registry.resolve(target_code)
        return rewrite_sql(query, source_code, target_code, date_rules)

    def suggest_analysis_request(self, query_name: str) -> Optional[str]:
        lookup = build_title_lookup(self.store.records(self.config.insights_key))
        return match_analysis_request(query_name, lookup)

    def list_records(self, kind: str, include_deleted: bool = False) -> list[dict[str, Any]]:
        key = self.config.insights_key if kind == "insights" else self.config.queries_key
        records = self.store.records(key)
        if include_deleted:
            return records
        return [record for record in records if not record.get("deletedAt")]

    def _copy(self, request: BatchCopyRequest, key: str, cap: int) -> BatchCopyResponse:
        metrics = MetricsCollector()
        source_code = request.get("sourceBrandCode") or ""
        target_codes = list(request.get("targetBrandCodes") or [])
        rules = [DateReplacementRule.from_dict(rule) for rule in request.get("dateReplacements") or []]

        try:
            with metrics.timer("load_seconds"):
                records, revision = self.store.load(key)
            sources = select_sources(
                records,
                source_code,
                self.registry,
                source_ids=request.get("sourceIds"),
                region=request.get("region"),
                default_region=self.config.default_region,
            )
            with metrics.timer("rewrite_seconds"):
                result = batch_copy(
                    sources,
                    source_code,
                    target_codes,
                    date_rules=rules,
                    existing_records=records,
                    registry=self.registry,
                )
        except BatchCopyError as exc:
            logger.info("Batch copy rejected for %s: %s", key, exc.message)
            return {"success": False, "error": exc.message}

        created = result.created_records
        stored = created
        if created:
            merged = cap_records(created + records, cap)
            with metrics.timer("save_seconds"):
                self.store.save(key, merged, expected_revision=revision)
            # Copies past the cap are evicted too; only report what was kept.
            stored = created[: len(merged)]
            evicted = len(created) + len(records) - len(merged)
            if evicted:
                logger.info("Evicted %d oldest records from %s (cap %d).", evicted, key, cap)
        metrics.set_value("created", float(len(stored)))
        metrics.set_value("skipped", float(result.skipped_count))

        logger.info("Stored %d of %d copied records in %s.", len(stored), len(created), key)
        return {
            "success": True,
            "createdCount": len(stored),
            "skippedCount": result.skipped_count,
            "message": copy_summary(len(stored), result.skipped_count),
            "createdIds": [record["id"] for record in stored],
            "metrics": metrics.values,
        }
