"""Revenue aggregation over a trailing window of completed orders.

Every function takes the reference time explicitly so a single "now" is used
for the whole computation and results are reproducible in tests.
"""
import datetime
from typing import Dict, Iterable, List, NamedTuple, Tuple

from ..models import Order, OrderStatus

ANALYTICS_PERIODS = (7, 30, 90)


class Totals(NamedTuple):
    count: int
    revenue: float
    avg: float


class ServiceTotal(NamedTuple):
    name: str
    total: float


def local_day(moment: datetime.datetime) -> datetime.date:
    """Calendar date of *moment* in the local timezone."""
    return moment.astimezone().date()


def completed_in_window(orders: Iterable[Order], period_days: int,
                        now: datetime.datetime) -> List[Order]:
    """Done orders dated within ``[now - period_days, now]`` (both inclusive)."""
    start = now - datetime.timedelta(days=period_days)
    return [
        o for o in orders
        if o.status == OrderStatus.DONE and start <= o.date <= now
    ]


def totals(orders: Iterable[Order], period_days: int,
           now: datetime.datetime) -> Totals:
    done = completed_in_window(orders, period_days, now)
    revenue = sum(o.price for o in done)
    count = len(done)
    avg = revenue / count if count else 0.0
    return Totals(count, round(revenue, 2), round(avg, 2))


def service_breakdown(orders: Iterable[Order], period_days: int,
                      now: datetime.datetime) -> List[ServiceTotal]:
    """Per-service revenue, highest first.

    Equal totals are ordered alphabetically by service name.
    """
    grouped: Dict[str, float] = {}
    for o in completed_in_window(orders, period_days, now):
        grouped[o.service_name] = grouped.get(o.service_name, 0.0) + o.price
    items = [ServiceTotal(name, round(total, 2)) for name, total in grouped.items()]
    items.sort(key=lambda item: (-item.total, item.name.casefold(), item.name))
    return items


def daily_revenue(orders: Iterable[Order], period_days: int,
                  now: datetime.datetime) -> List[Tuple[datetime.date, float]]:
    """Done revenue per local calendar day, oldest first, ending today."""
    if period_days <= 0:
        return []
    today = local_day(now)
    days = [today - datetime.timedelta(days=offset)
            for offset in range(period_days - 1, -1, -1)]
    buckets: Dict[datetime.date, float] = {day: 0.0 for day in days}
    for o in orders:
        if o.status != OrderStatus.DONE:
            continue
        day = local_day(o.date)
        if day in buckets:
            buckets[day] += o.price
    return [(day, round(buckets[day], 2)) for day in days]
