from __future__ import annotations

from pydantic import BaseModel, Field


class SignalCleanupResponse(BaseModel):
    deleted: int
    total_matched: int
    breakdown: dict[str, int] = Field(default_factory=dict)
    message: str


class MaDedupResponse(BaseModel):
    checked: int
    deleted: int
    message: str


class SkippedFirm(BaseModel):
    name: str
    reason: str


class CompetitorCleanupResponse(BaseModel):
    success: bool
    deactivated: int
    deactivatedFirms: list[str]
    seeded: int
    skipped: int
    skippedFirms: list[SkippedFirm]
    message: str
