from __future__ import annotations

from datetime import datetime, timezone

import pytest

from brand_copy.batch import batch_copy, copy_label, existing_titles, new_record_id, record_kind
from brand_copy.brands import DEFAULT_REGISTRY
from brand_copy.errors import NoSourceRecords, NoTargetBrands, UnknownBrandCode


NOW = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


def test_query_copy_rewrites_fields_and_tags_provenance(mlb_query, id_factory):
    result = batch_copy([mlb_query], "M", ["X"], [{"from": "202512", "to": "202601"}], [], now=NOW, id_factory=id_factory)

    assert result.skipped_count == 0
    assert result.created_count == 1
    copied = result.created_records[0]
    assert copied == {
        "id": "query-1",
        "name": "DISCOVERY 월별 매출",
        "query": "SELECT * FROM sales WHERE brd_cd = 'X' AND sale_dt = '202601'",
        "category": "sales",
        "region": "domestic",
        "brand": "X",
        "createdAt": NOW.isoformat(),
        "createdBy": "자동복사 (MLB→DISCOVERY)",
    }


def test_source_records_are_not_mutated(mlb_query, mlb_insight):
    before_query, before_insight = dict(mlb_query), dict(mlb_insight)
    batch_copy([mlb_query, mlb_insight], "M", ["X", "I"], [{"from": "202512", "to": "202601"}])
    assert mlb_query == before_query
    assert mlb_insight == before_insight


def test_insight_copy_resets_usage_and_rewrites_every_text_field(mlb_insight, id_factory):
    result = batch_copy([mlb_insight], "M", ["V"], [{"from": "202512", "to": "202601"}], now=NOW, id_factory=id_factory)

    copied = result.created_records[0]
    assert copied["id"] == "insight-1"
    assert copied["title"] == "DUVETICA 12월 실적 요약"
    assert copied["brandName"] == "DUVETICA"
    assert copied["insight"] == "## DUVETICA 요약\n- DUVETICA 매출(v+) 1,234백만원"
    assert copied["query"] == "-- DUVETICA monthly\nSELECT * FROM sales WHERE brd_cd='V' AND sale_dt = '202601'"
    assert copied["analysisRequest"] == "DUVETICA 브랜드의 할인율 추이를 분석해주세요."
    assert copied["tokensUsed"] == 0
    assert copied["model"] == "claude-sonnet"
    assert copied["region"] == "china"
    assert copied["yearMonth"] == "202512"
    assert copied["createdBy"] == copy_label("MLB", "DUVETICA")


def test_insight_without_optional_fields(id_factory):
    source = {"id": "insight-9", "title": "MLB 요약", "insight": "MLB", "tokensUsed": 10, "model": "m"}
    copied = batch_copy([source], "M", ["X"], id_factory=id_factory).created_records[0]
    assert "query" not in copied
    assert "analysisRequest" not in copied
    assert "yearMonth" not in copied
    assert copied["region"] == "domestic"


def test_duplicate_suppression_per_target(mlb_query, id_factory):
    existing = [
        mlb_query,
        {"id": "shared-2", "name": "DISCOVERY 월별 매출", "query": "...", "brand": "X"},
    ]
    result = batch_copy([mlb_query], "M", ["X", "I"], [], existing, id_factory=id_factory)

    assert result.created_count == 1
    assert result.skipped_count == 1
    assert result.created[0].target_code == "I"
    assert result.created_records[0]["name"] == "MLB KIDS 월별 매출"
    skipped = [r for r in result.results if r.skipped]
    assert skipped[0].target_code == "X" and skipped[0].record is None


def test_duplicate_suppression_matches_insight_brand_name(mlb_insight):
    existing = [{"id": "insight-2", "title": "DISCOVERY 12월 실적 요약", "brandName": "Discovery"}]
    result = batch_copy([mlb_insight], "M", ["X"], [], existing)
    assert result.created_count == 0
    assert result.skipped_count == 1


def test_trashed_records_do_not_block_copies(mlb_insight):
    existing = [
        {"id": "insight-2", "title": "DISCOVERY 12월 실적 요약", "brandName": "DISCOVERY", "deletedAt": "2026-01-01"}
    ]
    assert batch_copy([mlb_insight], "M", ["X"], [], existing).created_count == 1


def test_same_title_within_one_batch_copies_both(mlb_query):
    twin = dict(mlb_query, id="shared-9", name="mlb 월별 매출")
    result = batch_copy([mlb_query, twin], "M", ["X"], [], [])
    assert result.created_count == 2
    assert result.skipped_count == 0
    assert [r["name"] for r in result.created_records] == ["DISCOVERY 월별 매출", "DISCOVERY 월별 매출"]


def test_output_order_follows_targets_then_sources(mlb_query):
    second = dict(mlb_query, id="shared-2", name="MLB 재고")
    result = batch_copy([mlb_query, second], "M", ["V", "X"])
    assert [(r.target_code, r.source_id) for r in result.created] == [
        ("V", "shared-1"),
        ("V", "shared-2"),
        ("X", "shared-1"),
        ("X", "shared-2"),
    ]


def test_legacy_existing_query_counts_as_default_brand(mlb_query):
    legacy = {"id": "shared-0", "name": "MLB 월별 매출", "query": "..."}
    assert existing_titles([legacy], "M", DEFAULT_REGISTRY) == {"MLB 월별 매출"}
    result = batch_copy([mlb_query], "X", ["M"], [], [legacy])
    assert result.skipped_count == 1


def test_invalid_target_fails_before_any_copy(mlb_query):
    with pytest.raises(UnknownBrandCode) as excinfo:
        batch_copy([mlb_query], "M", ["X", "I", "ZZ", "V"])
    assert excinfo.value.code == "ZZ"


def test_invalid_source_code(mlb_query):
    with pytest.raises(UnknownBrandCode):
        batch_copy([mlb_query], "Q", ["X"])


def test_no_targets(mlb_query):
    with pytest.raises(NoTargetBrands) as excinfo:
        batch_copy([mlb_query], "M", [])
    assert excinfo.value.message == "대상 브랜드를 하나 이상 선택해주세요."


def test_no_sources_is_fatal():
    with pytest.raises(NoSourceRecords):
        batch_copy([], "M", ["X"])


def test_code_validation_runs_before_source_check():
    with pytest.raises(UnknownBrandCode):
        batch_copy([], "M", ["nope"])


def test_fresh_ids_are_unique(mlb_query):
    result = batch_copy([mlb_query], "M", ["X", "I", "V", "ST"])
    ids = [record["id"] for record in result.created_records]
    assert len(set(ids)) == 4
    assert all(record_id.startswith("shared-") for record_id in ids)
    assert new_record_id("insight").startswith("insight-")


def test_record_kind():
    assert record_kind({"title": "t"}) == "insight"
    assert record_kind({"name": "n", "query": "q"}) == "query"
