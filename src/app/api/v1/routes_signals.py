from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.schemas.signal import FeedResponse, SignalRead, SignalUpdate, SignalUpdateResponse
from app.services import feed_service, signal_service
from data.storage.db import get_session

router = APIRouter()


@router.get("/signals", response_model=FeedResponse)
def list_signals(session: Session = Depends(get_session)):
    return feed_service.assemble_feed(session)


@router.patch("/signals", response_model=SignalUpdateResponse)
def update_signal(
    payload: SignalUpdate | None = None,
    session: Session = Depends(get_session),
):
    signal = signal_service.update_signal(session, payload or SignalUpdate())
    return SignalUpdateResponse(signal=SignalRead.model_validate(signal))
