from datetime import datetime, timezone
from dateutil import parser


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def local_now() -> datetime:
    return datetime.now().astimezone()


def parse_datetime(value: str | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return parser.isoparse(value)


def is_same_local_day(value: str | datetime | None, now: datetime) -> bool:
    """True when ``value`` falls on ``now``'s calendar date in ``now``'s zone.

    Naive timestamps are read as UTC, which is how the store hands them back.
    """
    if not value:
        return False
    moment = parse_datetime(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.astimezone()
    return moment.astimezone(now.tzinfo).date() == now.date()


def days_between(a: str | datetime | None, b: str | datetime | None) -> int:
    if not a or not b:
        return 999
    first = parse_datetime(a)
    second = parse_datetime(b)
    if first.tzinfo is None:
        first = first.replace(tzinfo=timezone.utc)
    if second.tzinfo is None:
        second = second.replace(tzinfo=timezone.utc)
    return int(abs((first - second).total_seconds()) // 86400)
