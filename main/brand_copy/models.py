from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional, TypedDict, Union


CategoryType = Literal["sales", "profit", "discount", "brand", "inventory", "hr", "custom"]
RegionType = Literal["domestic", "china", "hmt", "usa"]
RecordKind = Literal["query", "insight"]


class SavedQuery(TypedDict, total=False):
    id: str
    name: str
    query: str
    category: CategoryType
    region: RegionType
    brand: str
    createdAt: str
    createdBy: str


class SavedInsight(TypedDict, total=False):
    id: str
    title: str
    brandName: str
    insight: str
    query: str
    analysisRequest: str
    tokensUsed: int
    model: str
    region: RegionType
    yearMonth: str
    createdAt: str
    createdBy: str
    deletedAt: str


RewritableRecord = Union[SavedQuery, SavedInsight]


class BatchCopyRequest(TypedDict, total=False):
    sourceBrandCode: str
    targetBrandCodes: list[str]
    dateReplacements: list[dict[str, str]]
    sourceIds: list[str]
    region: RegionType


class BatchCopyResponse(TypedDict, total=False):
    success: bool
    createdCount: int
    skippedCount: int
    message: str
    createdIds: list[str]
    error: str
    metrics: dict[str, float]


@dataclass(frozen=True)
class DateReplacementRule:
    """Literal find/replace pair applied to SQL text, in list order."""

    from_text: str
    to_text: str

    @property
    def is_active(self) -> bool:
        return bool(self.from_text) and bool(self.to_text)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "DateReplacementRule":
        return cls(from_text=str(payload.get("from") or ""), to_text=str(payload.get("to") or ""))

    def to_dict(self) -> dict[str, str]:
        return {"from": self.from_text, "to": self.to_text}


@dataclass
class RewriteResult:
    source_id: str
    target_code: str
    record: Optional[dict[str, Any]] = None
    skipped: bool = False


@dataclass
class BatchCopyResult:
    results: list[RewriteResult] = field(default_factory=list)

    @property
    def created(self) -> list[RewriteResult]:
        return [result for result in self.results if not result.skipped]

    @property
    def created_records(self) -> list[dict[str, Any]]:
        return [result.record for result in self.created if result.record is not None]

    @property
    def created_count(self) -> int:
        return len(self.created)

    @property
    def skipped_count(self) -> int:
        return sum(1 for result in self.results if result.skipped)
