from __future__ import annotations

from typing import Any

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.schemas.signal import SignalUpdate
from core.utils.text import is_blank
from data.storage.db import Signal
from data.storage.repositories import signals_repo

_UPDATABLE_FIELDS = ("status", "claimed_by")


def collect_updates(session: Session, payload: SignalUpdate) -> dict[str, Any]:
    if not payload.id:
        raise HTTPException(status_code=400, detail="Missing id")
    provided = payload.model_fields_set
    if "status" in provided and is_blank(payload.status):
        raise HTTPException(status_code=400, detail="status cannot be empty")
    updates: dict[str, Any] = {
        field: getattr(payload, field) for field in _UPDATABLE_FIELDS if field in provided
    }
    if "notes" in provided:
        signal = signals_repo.get_signal(session, payload.id)
        if signal is None:
            raise signals_repo.SignalNotFoundError(payload.id)
        updates["signal_detail"] = {**(signal.signal_detail or {}), "rep_notes": payload.notes}
    if not updates:
        raise HTTPException(status_code=400, detail="No valid fields to update")
    return updates


def update_signal(session: Session, payload: SignalUpdate) -> Signal:
    updates = collect_updates(session, payload)
    return signals_repo.update_signal(session, payload.id, updates)
