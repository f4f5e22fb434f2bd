from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from data.storage.db import CompetitorFirm


def find_firm_by_name(session: Session, name: str) -> CompetitorFirm | None:
    return session.execute(
        select(CompetitorFirm).where(func.lower(CompetitorFirm.name) == name.strip().lower())
    ).scalars().first()


def set_firm_active(session: Session, firm: CompetitorFirm, is_active: bool) -> CompetitorFirm:
    firm.is_active = is_active
    session.commit()
    return firm


def create_firm(session: Session, name: str, is_active: bool = True) -> CompetitorFirm:
    firm = CompetitorFirm(name=name, is_active=is_active)
    session.add(firm)
    try:
        session.commit()
    except Exception:
        session.rollback()
        raise
    session.refresh(firm)
    return firm
