from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable

from core.utils.text import names_similar, normalize_company_name
from core.utils.time import days_between, parse_datetime
from data.quality.candidates import DeletionCandidates
from data.quality.detail import SignalDetail

logger = logging.getLogger(__name__)

DUPLICATE_JOB_URL = "duplicate_job_url"
DUPLICATE_MA_TRANSACTION = "duplicate_ma_transaction"

_SEMANTIC_WINDOW_DAYS = 30
_EXACT_WINDOW_DAYS = 7


def compute_dedup_key(signal: Any) -> str | None:
    return SignalDetail.from_signal(signal).dedup_key


def dedupe_job_signals(
    signals: Iterable, candidates: DeletionCandidates | None = None
) -> DeletionCandidates:
    """Keep the first signal seen per dedup key, mark the rest.

    ``signals`` must be ordered newest first so the survivor of every key is
    the most recently created one. Signals without a key are left alone.
    """
    candidates = candidates if candidates is not None else DeletionCandidates()
    seen: dict[str, str] = {}
    for signal in signals:
        key = compute_dedup_key(signal)
        if not key:
            continue
        kept = seen.get(key)
        if kept is None:
            seen[key] = signal.id
            continue
        if candidates.add(signal.id, DUPLICATE_JOB_URL):
            logger.info("Duplicate job signal %s (keeping %s): %s", signal.id, kept, key)
    return candidates


@dataclass
class _DealRecord:
    id: str
    signal_type: str
    detected_at: datetime | str | None
    company_name: str
    acquirer_name: str
    acquired_name: str
    richness: int
    label: str


def _richness(detail: dict | None) -> int:
    if not isinstance(detail, dict):
        return 0
    return sum(1 for value in detail.values() if value is not None and value != "")


def _to_record(signal: Any) -> _DealRecord:
    detail = signal.signal_detail or {}
    return _DealRecord(
        id=signal.id,
        signal_type=signal.signal_type,
        detected_at=signal.first_detected_at or getattr(signal, "created_at", None),
        company_name=normalize_company_name(detail.get("company_name")),
        acquirer_name=normalize_company_name(detail.get("acquirer_name")),
        acquired_name=normalize_company_name(detail.get("acquired_name")),
        richness=_richness(detail),
        label=str(detail.get("company_name") or ""),
    )


def _same_deal(a: _DealRecord, b: _DealRecord) -> bool:
    symmetric = bool(
        a.acquired_name
        and b.acquired_name
        and names_similar(a.company_name, b.acquired_name)
        and names_similar(b.company_name, a.acquired_name)
    )
    acquirer = bool(
        a.acquirer_name
        and b.acquirer_name
        and (
            names_similar(a.company_name, b.acquirer_name)
            or names_similar(b.company_name, a.acquirer_name)
        )
        and days_between(a.detected_at, b.detected_at) <= _SEMANTIC_WINDOW_DAYS
    )
    same_parties = bool(
        a.acquired_name
        and b.acquired_name
        and names_similar(a.acquired_name, b.acquired_name)
        and a.acquirer_name
        and b.acquirer_name
        and names_similar(a.acquirer_name, b.acquirer_name)
    )
    return symmetric or acquirer or same_parties


def dedupe_ma_signals(
    signals: Iterable, candidates: DeletionCandidates | None = None
) -> DeletionCandidates:
    """Collapse M&A signals describing the same deal.

    Pass one pairs filings from both sides of a deal (or the same parties
    twice) and drops the less detailed one. Pass two groups what is left by
    company and type and drops anything within a week of the keeper.
    """
    candidates = candidates if candidates is not None else DeletionCandidates()
    records = [_to_record(signal) for signal in signals]
    marked: set[str] = set()

    for i, a in enumerate(records):
        for b in records[i + 1 :]:
            if a.id in marked or b.id in marked:
                continue
            if not _same_deal(a, b):
                continue
            loser = b if a.richness >= b.richness else a
            marked.add(loser.id)
            candidates.add(loser.id, DUPLICATE_MA_TRANSACTION)
            logger.info(
                "Semantic M&A duplicate: %s (%s) vs %s (%s), dropping %s",
                a.id,
                a.label,
                b.id,
                b.label,
                loser.id,
            )

    groups: dict[tuple[str, str], list[_DealRecord]] = {}
    for record in records:
        if record.id in marked:
            continue
        groups.setdefault((record.company_name, record.signal_type), []).append(record)

    for group in groups.values():
        if len(group) < 2:
            continue
        # richest first, then newest first
        group.sort(key=lambda item: _detected_ts(item.detected_at), reverse=True)
        group.sort(key=lambda item: item.richness, reverse=True)
        keep = group[0]
        for other in group[1:]:
            if days_between(keep.detected_at, other.detected_at) <= _EXACT_WINDOW_DAYS:
                marked.add(other.id)
                candidates.add(other.id, DUPLICATE_MA_TRANSACTION)
                logger.info(
                    "Exact M&A duplicate: %s (%s) within %d days of %s",
                    other.id,
                    other.label,
                    _EXACT_WINDOW_DAYS,
                    keep.id,
                )
    return candidates


def _detected_ts(value: datetime | str | None) -> float:
    if not value:
        return 0.0
    moment = parse_datetime(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.timestamp()
