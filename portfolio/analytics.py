# analytics.py
# Purpose: Portfolio statistics, per-year maturity/interest buckets and the per-issuer principal breakdown

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Sequence, Tuple

from .config import UNKNOWN_ISSUER_LABEL
from .models import BondRecord, active_bonds, dated_bonds, maturity_year


@dataclass(frozen=True)
class PortfolioStats:
    active_count: int = 0
    total_principal: float = 0.0
    average_yield: float = 0.0


@dataclass(frozen=True)
class YearBucket:
    year: int
    principal_maturing: float
    share_of_total: float
    principal_outstanding: float
    interest_expected: float
    yield_on_outstanding: float


@dataclass(frozen=True)
class MaturityTable:
    buckets: List[YearBucket] = field(default_factory=list)
    total_principal: float = 0.0
    total_share: float = 1.0

    @property
    def years(self) -> List[int]:
        return [b.year for b in self.buckets]


@dataclass(frozen=True)
class IssuerRow:
    issuer: str
    principal: float
    share: float


@dataclass(frozen=True)
class IssuerBreakdown:
    rows: List[IssuerRow] = field(default_factory=list)
    total_principal: float = 0.0
    total_share: float = 1.0


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0.0


def compute_stats(bonds: Iterable[BondRecord], as_of: datetime) -> PortfolioStats:
    """Headline numbers over the bonds still active at as_of."""
    active = active_bonds(bonds, as_of)
    if not active:
        return PortfolioStats()
    total_principal = sum(b.par_value for b in active)
    average_yield = sum(b.yield_to_maturity for b in active) / len(active)
    return PortfolioStats(
        active_count=len(active),
        total_principal=total_principal,
        average_yield=average_yield,
    )


def principal_outstanding(bonds: Sequence[BondRecord], year: int) -> float:
    """Par still outstanding during `year`: everything maturing in that year or later."""
    return sum(b.par_value for b in dated_bonds(bonds) if maturity_year(b) >= year)


def interest_expected(bonds: Sequence[BondRecord], year: int) -> float:
    """A full annual coupon for every bond outstanding during `year`."""
    return sum(b.annual_coupon for b in dated_bonds(bonds) if maturity_year(b) >= year)


def maturity_buckets(active: Sequence[BondRecord]) -> MaturityTable:
    """Group an (already active) bond set by maturity year.

    Bonds without a parsable maturity are left out of the buckets but still
    count towards the total principal.
    """
    total_principal = sum(b.par_value for b in active)

    maturing: Dict[int, float] = {}
    for bond in dated_bonds(active):
        year = maturity_year(bond)
        maturing[year] = maturing.get(year, 0.0) + bond.par_value

    buckets = []
    for year in sorted(maturing):
        outstanding = principal_outstanding(active, year)
        interest = interest_expected(active, year)
        buckets.append(
            YearBucket(
                year=year,
                principal_maturing=maturing[year],
                share_of_total=_ratio(maturing[year], total_principal),
                principal_outstanding=outstanding,
                interest_expected=interest,
                yield_on_outstanding=_ratio(interest, outstanding),
            )
        )
    return MaturityTable(buckets=buckets, total_principal=total_principal)


def interest_by_year(active: Sequence[BondRecord]) -> List[Tuple[int, float]]:
    """(year, expected interest) series for the interest bar chart."""
    years = sorted({maturity_year(b) for b in dated_bonds(active)})
    return [(year, interest_expected(active, year)) for year in years]


def issuer_breakdown(active: Sequence[BondRecord]) -> IssuerBreakdown:
    """Principal per issuer, largest first."""
    by_issuer: Dict[str, float] = {}
    for bond in active:
        issuer = bond.issuer or UNKNOWN_ISSUER_LABEL
        by_issuer[issuer] = by_issuer.get(issuer, 0.0) + bond.par_value

    total_principal = sum(by_issuer.values())
    ordered = sorted(by_issuer.items(), key=lambda item: item[1], reverse=True)
    rows = [
        IssuerRow(issuer=issuer, principal=principal, share=_ratio(principal, total_principal))
        for issuer, principal in ordered
    ]
    return IssuerBreakdown(rows=rows, total_principal=total_principal)
