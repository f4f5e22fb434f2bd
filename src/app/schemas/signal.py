from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel, Field

from app.schemas.company import CompanyBrief


class SignalRead(BaseModel):
    id: str
    company_id: str | None
    signal_type: str
    signal_summary: str | None
    signal_detail: dict = Field(default_factory=dict)
    source_url: str | None
    source_name: str | None
    first_detected_at: datetime | None
    status: str
    claimed_by: str | None
    priority_score: float | None
    score_breakdown: dict = Field(default_factory=dict)
    days_in_queue: int | None
    is_carried_forward: bool | None
    created_at: datetime | None

    model_config = {"from_attributes": True}


class FeedItem(SignalRead):
    rank: int
    company: CompanyBrief | None = None
    company_name: str
    relationship_warmth: str
    has_contacts: bool


class FeedStats(BaseModel):
    totalActive: int
    newToday: int
    claimed: int


class FeedResponse(BaseModel):
    signals: list[FeedItem]
    stats: FeedStats
    lastUpdated: datetime


class SignalUpdate(BaseModel):
    id: str | None = None
    status: str | None = None
    claimed_by: str | None = None
    notes: str | None = None


class SignalUpdateResponse(BaseModel):
    signal: SignalRead
