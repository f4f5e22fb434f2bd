from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from agents.registry.agent import RegistryReconciler
from agents.signal_cleanup.agent import SignalCleanupAgent
from app.schemas.cleanup import (
    CompetitorCleanupResponse,
    MaDedupResponse,
    SignalCleanupResponse,
    SkippedFirm,
)
from data.storage.db import get_session

router = APIRouter()


@router.api_route(
    "/cleanup-academic-signals", methods=["GET", "POST"], response_model=SignalCleanupResponse
)
def cleanup_signals(session: Session = Depends(get_session)):
    report = SignalCleanupAgent(session).run()
    if report.total_matched == 0:
        message = "No invalid or duplicate signals found to clean up"
    else:
        message = (
            f"Deleted {report.deleted} of {report.total_matched} "
            "academic/government/bad-phase/untrusted/duplicate signals"
        )
    return SignalCleanupResponse(
        deleted=report.deleted,
        total_matched=report.total_matched,
        breakdown=report.breakdown,
        message=message,
    )


@router.api_route("/dedup-ma-signals", methods=["GET", "POST"], response_model=MaDedupResponse)
def dedup_ma_signals(session: Session = Depends(get_session)):
    report = SignalCleanupAgent(session).dedupe_ma()
    return MaDedupResponse(
        checked=report.checked,
        deleted=report.deleted,
        message=f"Checked {report.checked} MA signals, deleted {report.deleted} duplicates",
    )


@router.post("/cleanup-competitor-firms", response_model=CompetitorCleanupResponse)
def cleanup_competitor_firms(session: Session = Depends(get_session)):
    report = RegistryReconciler(session).reconcile()
    return CompetitorCleanupResponse(
        success=True,
        deactivated=report.deactivated,
        deactivatedFirms=report.deactivated_firms,
        seeded=report.seeded,
        skipped=report.skipped,
        skippedFirms=[SkippedFirm(**item) for item in report.skipped_firms],
        message="Competitor firms cleaned up and re-seeded",
    )
