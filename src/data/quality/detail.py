"""Typed view over the per-type ``signal_detail`` attribute bag.

Detail keys differ by signal type, so logical attributes are read through
declared fallback chains instead of direct key access. The end-client chain
is the one every consumer shares::

    company_name -> sponsor -> lead_sponsor -> acquirer_name

When the signal's company join is available its name wins over the chain.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

END_CLIENT_FIELDS = ("company_name", "sponsor", "lead_sponsor", "acquirer_name")
DEDUP_KEY_FIELDS = ("job_url", "source_url")


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def first_non_empty(detail: Mapping[str, Any], fields: tuple[str, ...]) -> str:
    for field in fields:
        value = _as_text(detail.get(field)).strip()
        if value:
            return value
    return ""


def resolve_end_client_name(
    detail: Mapping[str, Any] | None, joined_company_name: str | None = None
) -> str:
    if joined_company_name and joined_company_name.strip():
        return joined_company_name.strip()
    return first_non_empty(detail or {}, END_CLIENT_FIELDS)


@dataclass(frozen=True)
class SignalDetail:
    signal_id: str
    signal_type: str
    end_client_name: str = ""
    phase_from: str = ""
    phase_to: str = ""
    source: str = ""
    job_board: str = ""
    ats_source: str = ""
    job_title: str = ""
    job_url: str = ""
    source_url: str = ""

    @classmethod
    def from_signal(cls, signal: Any) -> "SignalDetail":
        detail = getattr(signal, "signal_detail", None) or {}
        company = getattr(signal, "company", None)
        joined_name = getattr(company, "name", None) if company is not None else None
        return cls(
            signal_id=signal.id,
            signal_type=signal.signal_type,
            end_client_name=resolve_end_client_name(detail, joined_name),
            phase_from=_as_text(detail.get("phase_from")),
            phase_to=_as_text(detail.get("phase_to")),
            source=_as_text(detail.get("source")),
            job_board=_as_text(detail.get("job_board")),
            ats_source=_as_text(detail.get("ats_source")),
            job_title=_as_text(detail.get("job_title")),
            job_url=_as_text(detail.get("job_url")).strip(),
            source_url=_as_text(
                detail.get("source_url") or getattr(signal, "source_url", None)
            ).strip(),
        )

    @property
    def dedup_key(self) -> str | None:
        return self.job_url or self.source_url or None
