from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from agents.orchestrator import Orchestrator
from core.config import get_settings
from data.storage.db import get_session

router = APIRouter()


@router.post("/pipeline/run")
def run_pipeline(session: Session = Depends(get_session)):
    result = Orchestrator(session).run()
    return {
        "cleanup": {
            "deleted": result.cleanup.deleted,
            "total_matched": result.cleanup.total_matched,
            "breakdown": result.cleanup.breakdown,
        },
        "ma_dedup": {"checked": result.ma_dedup.checked, "deleted": result.ma_dedup.deleted},
        "predictions": {
            signal_id: [prediction.model_dump() for prediction in predictions]
            for signal_id, predictions in result.predictions.items()
        },
    }


@router.get("/pipeline/scheduler")
def scheduler_status():
    settings = get_settings()
    return {
        "enabled": settings.enable_scheduler,
        "interval_hours": settings.scheduler_interval_hours,
    }
