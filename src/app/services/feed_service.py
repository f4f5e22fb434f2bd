from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable

from sqlalchemy.orm import Session

from app.schemas.company import CompanyBrief
from app.schemas.signal import FeedItem, FeedResponse, FeedStats, SignalRead
from core.utils.text import is_blank
from core.utils.time import is_same_local_day, local_now
from data.storage.repositories import contacts_repo, signals_repo

UNKNOWN_COMPANY = "Unknown Company"
DEFAULT_WARMTH = "new_prospect"


def compute_stats(signals: Iterable[Any], now: datetime) -> FeedStats:
    items = list(signals)
    return FeedStats(
        totalActive=len(items),
        newToday=sum(1 for signal in items if is_same_local_day(signal.first_detected_at, now)),
        claimed=sum(1 for signal in items if not is_blank(signal.claimed_by)),
    )


def has_contacts(
    signal: Any, linked_signal_ids: set[str], company_ids_with_contacts: set[str]
) -> bool:
    if signal.id in linked_signal_ids:
        return True
    return signal.company_id is not None and signal.company_id in company_ids_with_contacts


def build_feed_items(
    rows: Iterable[tuple[Any, Any]],
    linked_signal_ids: set[str],
    company_ids_with_contacts: set[str],
) -> list[FeedItem]:
    """Rows must already be in priority order; rank follows that order."""
    items: list[FeedItem] = []
    for rank, (signal, company) in enumerate(rows, start=1):
        base = SignalRead.model_validate(signal).model_dump()
        items.append(
            FeedItem(
                **base,
                rank=rank,
                company=CompanyBrief.model_validate(company) if company is not None else None,
                company_name=(company.name if company is not None else None) or UNKNOWN_COMPANY,
                relationship_warmth=(
                    company.relationship_warmth if company is not None else None
                )
                or DEFAULT_WARMTH,
                has_contacts=has_contacts(signal, linked_signal_ids, company_ids_with_contacts),
            )
        )
    return items


def assemble_feed(session: Session, now: datetime | None = None) -> FeedResponse:
    now = now or local_now()
    rows = signals_repo.list_active_signals(session)
    company_ids_with_contacts = contacts_repo.list_company_ids_with_contacts(session)
    linked_signal_ids = {
        link.signal_id for link in contacts_repo.list_signal_contact_links(session)
    }
    items = build_feed_items(rows, linked_signal_ids, company_ids_with_contacts)
    return FeedResponse(
        signals=items,
        stats=compute_stats((signal for signal, _ in rows), now),
        lastUpdated=now,
    )
