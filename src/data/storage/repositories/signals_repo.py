from __future__ import annotations

from typing import Any, Iterable

from sqlalchemy import delete, desc, select
from sqlalchemy.orm import Session

from data.storage.db import ACTIVE_STATUSES, Company, Signal


class SignalNotFoundError(LookupError):
    def __init__(self, signal_id: str) -> None:
        super().__init__(f"Signal {signal_id} not found")
        self.signal_id = signal_id


def insert_signal(session: Session, signal: Signal) -> Signal:
    session.add(signal)
    session.commit()
    session.refresh(signal)
    return signal


def get_signal(session: Session, signal_id: str) -> Signal | None:
    return session.execute(select(Signal).where(Signal.id == signal_id)).scalars().first()


def list_signals_by_types(
    session: Session, signal_types: Iterable[str], newest_first: bool = False, limit: int | None = None
) -> list[Signal]:
    query = select(Signal).where(Signal.signal_type.in_(list(signal_types)))
    if newest_first:
        query = query.order_by(desc(Signal.created_at))
    if limit is not None:
        query = query.limit(limit)
    return list(session.execute(query).scalars())


def list_signals_with_status(
    session: Session, signal_types: Iterable[str], status: str
) -> list[Signal]:
    return list(
        session.execute(
            select(Signal)
            .where(Signal.signal_type.in_(list(signal_types)))
            .where(Signal.status == status)
            .order_by(desc(Signal.created_at))
        ).scalars()
    )


def list_active_signals(session: Session) -> list[tuple[Signal, Company | None]]:
    rows = session.execute(
        select(Signal, Company)
        .outerjoin(Company, Signal.company_id == Company.id)
        .where(Signal.status.in_(ACTIVE_STATUSES))
        .order_by(desc(Signal.priority_score))
    ).all()
    return [(row[0], row[1]) for row in rows]


def update_signal(session: Session, signal_id: str, updates: dict[str, Any]) -> Signal:
    signal = get_signal(session, signal_id)
    if signal is None:
        raise SignalNotFoundError(signal_id)
    for field, value in updates.items():
        setattr(signal, field, value)
    session.commit()
    session.refresh(signal)
    return signal


def delete_signals(session: Session, signal_ids: Iterable[str]) -> int:
    ids = list(signal_ids)
    if not ids:
        return 0
    try:
        result = session.execute(delete(Signal).where(Signal.id.in_(ids)))
        session.commit()
    except Exception:
        session.rollback()
        raise
    return result.rowcount or 0
