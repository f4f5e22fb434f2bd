from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from data.quality.candidates import DeletionCandidates
from data.quality.dedupe import (
    DUPLICATE_JOB_URL,
    DUPLICATE_MA_TRANSACTION,
    compute_dedup_key,
    dedupe_job_signals,
    dedupe_ma_signals,
)

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _job(signal_id, row_url=None, **detail):
    return SimpleNamespace(
        id=signal_id,
        signal_type="competitor_job_posting",
        signal_detail=detail,
        source_url=row_url,
    )


def _deal(signal_id, days_ago=0, **detail):
    return SimpleNamespace(
        id=signal_id,
        signal_type="ma_transaction",
        signal_detail=detail,
        first_detected_at=NOW - timedelta(days=days_ago),
        created_at=NOW - timedelta(days=days_ago),
    )


def test_dedup_key_prefers_job_url():
    assert compute_dedup_key(_job("a", row_url="https://x/row", job_url="https://x/job")) == "https://x/job"
    assert compute_dedup_key(_job("b", row_url="https://x/row", job_url="")) == "https://x/row"
    assert compute_dedup_key(_job("c", row_url="https://x/row", source_url="https://x/detail")) == "https://x/detail"
    assert compute_dedup_key(_job("d")) is None


def test_only_the_older_duplicate_is_marked():
    newest = _job("new", job_url="https://jobs.example/1")
    older = _job("old", job_url="https://jobs.example/1")
    candidates = dedupe_job_signals([newest, older])
    assert candidates.reason_for("old") == DUPLICATE_JOB_URL
    assert "new" not in candidates


def test_every_duplicate_after_the_newest_is_marked():
    signals = [_job(f"s{i}", row_url="https://jobs.example/2") for i in range(3)]
    candidates = dedupe_job_signals(signals)
    assert sorted(candidates.ids()) == ["s1", "s2"]


def test_signals_without_key_are_exempt():
    candidates = dedupe_job_signals([_job("a"), _job("b"), _job("c", job_url="")])
    assert len(candidates) == 0


def test_existing_reason_is_kept():
    candidates = DeletionCandidates()
    candidates.add("old", "garbage_title")
    dedupe_job_signals([_job("new", job_url="u"), _job("old", job_url="u")], candidates)
    assert candidates.reason_for("old") == "garbage_title"
    assert len(candidates) == 1


def test_ma_same_parties_keeps_richer_signal():
    thin = _deal("a", company_name="Pfizer Inc.", acquirer_name="Pfizer", acquired_name="Seagen")
    rich = _deal(
        "b",
        company_name="Seagen Inc",
        acquirer_name="Pfizer Inc",
        acquired_name="Seagen",
        deal_value="43B",
    )
    candidates = dedupe_ma_signals([thin, rich])
    assert candidates.ids() == ["a"]
    assert candidates.reason_for("a") == DUPLICATE_MA_TRANSACTION


def test_ma_exact_duplicates_within_a_week():
    signals = [
        _deal("d0", days_ago=0, company_name="Moderna, Inc."),
        _deal("d3", days_ago=3, company_name="Moderna"),
        _deal("d20", days_ago=20, company_name="Moderna"),
        _deal("other", days_ago=1, company_name="Arcellx"),
    ]
    candidates = dedupe_ma_signals(signals)
    assert candidates.ids() == ["d3"]


def test_ma_symmetric_filings_collapse_regardless_of_age():
    buyer_side = _deal("a", days_ago=0, company_name="Pfizer", acquired_name="Seagen")
    target_side = _deal("b", days_ago=90, company_name="Seagen", acquired_name="Pfizer", deal_value="43B")
    candidates = dedupe_ma_signals([buyer_side, target_side])
    assert candidates.ids() == ["a"]


@pytest.mark.parametrize("gap_days, expected", [(30, ["b"]), (31, [])])
def test_ma_acquirer_match_window(gap_days, expected):
    first = _deal("a", days_ago=0, company_name="Pfizer", acquirer_name="Pfizer")
    second = _deal("b", days_ago=gap_days, company_name="Seagen", acquirer_name="Pfizer Inc")
    candidates = dedupe_ma_signals([first, second])
    assert candidates.ids() == expected


def test_ma_equal_richness_drops_the_later_signal():
    first = _deal("first", company_name="Pfizer", acquirer_name="Pfizer")
    second = _deal("second", company_name="Seagen", acquirer_name="Pfizer")
    assert dedupe_ma_signals([first, second]).ids() == ["second"]
    assert dedupe_ma_signals([second, first]).ids() == ["first"]
