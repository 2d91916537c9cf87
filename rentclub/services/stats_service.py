from datetime import datetime
from typing import List

from sqlalchemy.orm import Session

from rentclub.core.cache import CACHE_PREFIX_STATS, cache_delete_pattern, cache_get, cache_set, stats_cache_key
from rentclub.core.config import settings
from rentclub.models.booking import Booking
from rentclub.models.member import Member
from rentclub.models.profile import Profile
from rentclub.models.property import Property
from rentclub.schemas.stats import AppStats, ChartPoint


def fetch_stats(db: Session) -> AppStats:
    key = stats_cache_key("counts")
    cached = cache_get(key)
    if cached is not None:
        return AppStats(**cached)
    stats = AppStats(
        users_count=db.query(Profile).count(),
        properties_count=db.query(Property).count(),
        bookings_count=db.query(Booking).filter(Booking.payment_status == True).count(),
        members_count=db.query(Member).filter(Member.is_active == True).count(),
    )
    cache_set(key, stats.model_dump(), settings.STATS_CACHE_TTL)
    return stats


def subtract_months(moment: datetime, months: int) -> datetime:
    month_index = moment.month - 1 - months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    return moment.replace(year=year, month=month, day=1, hour=0, minute=0, second=0, microsecond=0)


def fetch_charts_data(db: Session, months: int = 6, now: datetime = None) -> List[ChartPoint]:
    """Paid bookings per month (e.g. "January 2024") for the last ``months`` months."""
    now = now or datetime.utcnow()
    since = subtract_months(now, months)
    bookings = db.query(Booking.created_at).filter(
        Booking.payment_status == True,
        Booking.created_at >= since
    ).order_by(Booking.created_at.asc()).all()

    points: List[ChartPoint] = []
    for (created_at,) in bookings:
        label = created_at.strftime("%B %Y")
        if points and points[-1].date == label:
            points[-1].count += 1
        else:
            points.append(ChartPoint(date=label, count=1))
    return points


def reset_stats_cache() -> None:
    cache_delete_pattern(CACHE_PREFIX_STATS)
