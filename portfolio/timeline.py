# timeline.py
# Purpose: Projected annual coupon payments per calendar year (interest timeline)

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, List, Optional

from .config import BUCKET_TZ
from .filters import filter_timeline_entries, projection_years
from .models import BondRecord, dated_bonds, maturity_year, require_as_of
from .state import InterestFilters


@dataclass(frozen=True)
class TimelineEntry:
    bond: BondRecord
    payment_date: date
    interest_amount: float
    coupon_rate: float
    is_past: bool


@dataclass(frozen=True)
class TimelineYear:
    year: int
    entries: List[TimelineEntry] = field(default_factory=list)
    total: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.entries


def start_of_day(as_of: datetime) -> date:
    return require_as_of(as_of).astimezone(BUCKET_TZ).date()


def anniversary_in_year(maturity: datetime, year: int) -> date:
    """The maturity's month/day moved into `year`.

    Coupons are assumed to fall on the maturity anniversary. A 29 February
    maturity rolls over to 1 March in non-leap years.
    """
    local = maturity.astimezone(BUCKET_TZ)
    if local.month == 2 and local.day == 29 and not calendar.isleap(year):
        return date(year, 3, 1)
    return date(year, local.month, local.day)


def timeline_years(bonds: Iterable[BondRecord], as_of: datetime, selected_year: Optional[int] = None) -> List[int]:
    """Years shown on the timeline: as_of's year through the last maturity year.

    A selected year replaces the range. Without any dated bond the range is empty.
    """
    years = projection_years(bonds, as_of)
    if years and selected_year is not None:
        return [int(selected_year)]
    return years


def payments_for_year(bonds: Iterable[BondRecord], year: int, today: date) -> List[TimelineEntry]:
    """One synthetic annual coupon per bond that has not matured before `year`."""
    entries = []
    for bond in dated_bonds(bonds):
        if year > maturity_year(bond):
            continue
        payment_date = anniversary_in_year(bond.maturity_date, year)
        entries.append(
            TimelineEntry(
                bond=bond,
                payment_date=payment_date,
                interest_amount=bond.annual_coupon,
                coupon_rate=bond.coupon_rate,
                is_past=payment_date < today,
            )
        )
    return entries


def interest_timeline(
    bonds: Iterable[BondRecord],
    as_of: datetime,
    filters: InterestFilters,
) -> List[TimelineYear]:
    """Build the per-year interest timeline over the full collection.

    Every year in range is returned, empty ones included, each with its
    filtered entries sorted by payment date and their interest total.
    """
    bonds = list(bonds)
    today = start_of_day(as_of)
    result = []
    for year in timeline_years(bonds, as_of, filters.year):
        entries = filter_timeline_entries(payments_for_year(bonds, year, today), filters)
        entries.sort(key=lambda e: e.payment_date)
        result.append(
            TimelineYear(year=year, entries=entries, total=sum(e.interest_amount for e in entries))
        )
    return result
