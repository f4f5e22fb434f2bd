from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from app.services.feed_service import compute_stats, has_contacts

LOCAL = timezone(timedelta(hours=-5))
NOW = datetime(2026, 10, 18, 0, 30, tzinfo=LOCAL)


def _signal(first_detected_at=None, claimed_by=None):
    return SimpleNamespace(first_detected_at=first_detected_at, claimed_by=claimed_by)


def test_new_today_uses_local_calendar_date():
    signals = [
        _signal(datetime(2026, 10, 18, 0, 5, tzinfo=LOCAL)),
        _signal(datetime(2026, 10, 17, 23, 59, tzinfo=LOCAL)),
        _signal(datetime(2026, 10, 18, 5, 10, tzinfo=timezone.utc)),
        _signal(datetime(2026, 10, 18, 2, 0, tzinfo=timezone.utc)),
        _signal("2026-10-18T23:00:00-05:00"),
        _signal(None),
    ]
    stats = compute_stats(signals, NOW)
    assert stats.totalActive == 6
    assert stats.newToday == 3


def test_claimed_ignores_blank_owners():
    signals = [_signal(claimed_by="rep@example.com"), _signal(claimed_by="   "), _signal(claimed_by=None)]
    assert compute_stats(signals, NOW).claimed == 1


def test_has_contacts_via_link_or_company():
    linked = SimpleNamespace(id="s1", company_id=None)
    via_company = SimpleNamespace(id="s2", company_id="c1")
    neither = SimpleNamespace(id="s3", company_id="c2")
    assert has_contacts(linked, {"s1"}, {"c1"})
    assert has_contacts(via_company, {"s1"}, {"c1"})
    assert not has_contacts(neither, {"s1"}, {"c1"})
