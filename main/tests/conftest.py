from __future__ import annotations

import itertools

import pytest

from brand_copy.config import CopyEngineConfig
from brand_copy.service import BrandCopyService
from brand_copy.storage import SqliteRecordStore


@pytest.fixture
def config(tmp_path) -> CopyEngineConfig:
    return CopyEngineConfig(db_path=str(tmp_path / "brand_copy.db"), max_saved_queries=5, max_saved_insights=3)


@pytest.fixture
def store(config) -> SqliteRecordStore:
    return SqliteRecordStore(config.db_path)


@pytest.fixture
def service(config, store) -> BrandCopyService:
    return BrandCopyService(config, store=store)


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda kind: f"{kind}-{next(counter)}"


@pytest.fixture
def mlb_query() -> dict:
    return {
        "id": "shared-1",
        "name": "MLB 월별 매출",
        "query": "SELECT * FROM sales WHERE brd_cd = 'M' AND sale_dt = '202512'",
        "category": "sales",
        "region": "domestic",
        "brand": "M",
        "createdAt": "2025-12-01T00:00:00+00:00",
        "createdBy": "analyst",
    }


@pytest.fixture
def mlb_insight() -> dict:
    return {
        "id": "insight-1",
        "title": "MLB 12월 실적 요약",
        "brandName": "MLB",
        "insight": "## MLB 요약\n- mlb 매출(v+) 1,234백만원",
        "query": "-- MLB monthly\nSELECT * FROM sales WHERE brd_cd='M' AND sale_dt = '202512'",
        "analysisRequest": "MLB 브랜드의 할인율 추이를 분석해주세요.",
        "tokensUsed": 1520,
        "model": "claude-sonnet",
        "region": "china",
        "yearMonth": "202512",
        "createdAt": "2025-12-02T00:00:00+00:00",
        "createdBy": "analyst",
    }
