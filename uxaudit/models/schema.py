import math
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Frozen(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


# ---------- AI audit payload (LLM-friendly) ----------
class AuditScoreSet(_Frozen):
    elegance: int = Field(ge=0, le=100)
    clarity: int = Field(ge=0, le=100)
    modernity: int = Field(ge=0, le=100)

    @field_validator("elegance", "clarity", "modernity", mode="before")
    @classmethod
    def _round_half_up(cls, v):
        # the model sometimes answers 72.5 for an integer score
        if isinstance(v, float) and math.isfinite(v):
            return math.floor(v + 0.5)
        return v


class AuditSummary(_Frozen):
    product: str
    target_audience: str = Field(alias="targetAudience")


class Problem(_Frozen):
    problem: str
    why_it_matters: str = Field(alias="whyItMatters")


class AuditResult(_Frozen):
    summary: AuditSummary
    scores: AuditScoreSet
    problems: List[Problem]
    improvements: List[str]
    ai_opportunity: str = Field(alias="aiOpportunity")


# ---------- history ----------
class HistoryEntry(_Frozen):
    id: str
    url: str
    timestamp: int  # epoch milliseconds
    result: AuditResult


class HistoryListItem(HistoryEntry):
    site_name: str = Field(alias="siteName")
    overall_score: int = Field(alias="overallScore")
    score_band: str = Field(alias="scoreBand")


# ---------- analytics ----------
class ViolationCount(_Frozen):
    label: str
    full_label: str = Field(alias="fullLabel")
    count: int


class ChartPoint(_Frozen):
    display_name: str = Field(alias="displayName")
    elegance: int
    clarity: int
    modernity: int


class AnalyticsReport(_Frozen):
    total: int
    averages: Optional[AuditScoreSet] = None
    top_violations: List[ViolationCount] = Field(alias="topViolations")
    chart: List[ChartPoint]


# ---------- API ----------
class AuditRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    url: str = Field(min_length=1)


class AuditResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    result: AuditResult
    entry: HistoryEntry
    cached: bool
