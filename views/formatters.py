# views/formatters.py
# Purpose: Display formatting (de-DE numbers, EUR amounts, percentages) and JSON-ready serialisation
#          of engine results. The engine returns plain numbers; only this module produces strings.

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from portfolio.analytics import IssuerBreakdown, MaturityTable, PortfolioStats
from portfolio.models import BondRecord, days_to_maturity, is_active
from portfolio.state import FilterOptions
from portfolio.timeline import TimelineYear

NBSP = "\u00a0"
CURRENCY_SYMBOLS = {"EUR": "€", "USD": "$", "GBP": "£", "CHF": "CHF"}


def format_number(value: float, decimals: int = 2) -> str:
    """German grouping: '.' for thousands, ',' for decimals."""
    rounded = round(float(value), decimals)
    if rounded == 0:
        rounded = 0.0  # avoid '-0,00'
    text = f"{abs(rounded):,.{decimals}f}"
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"-{text}" if rounded < 0 else text


def format_currency(amount: float, decimals: int = 2, currency: str = "EUR") -> str:
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    return f"{format_number(amount, decimals)}{NBSP}{symbol}"


def format_percent(fraction: float, decimals: int = 0) -> str:
    """A fraction (0.0179) as a percentage string ('1,8%' with one decimal)."""
    return f"{format_number(fraction * 100, decimals)}%"


def format_rate(percent: float, decimals: int = 2) -> str:
    """A value already in percent (2.5 for 2.5%)."""
    return f"{format_number(percent, decimals)}%"


def format_date(value: Optional[date]) -> str:
    if value is None:
        return "–"
    if isinstance(value, datetime):
        value = value.date()
    return value.strftime("%d.%m.%Y")


def serialize_stats(stats: PortfolioStats, currency: str = "EUR") -> Dict[str, Any]:
    return {
        "activeBonds": stats.active_count,
        "totalPrincipal": stats.total_principal,
        "averageYield": stats.average_yield,
        "display": {
            "totalPrincipal": format_currency(stats.total_principal, currency=currency),
            "activeBonds": str(stats.active_count),
            "averageYield": format_rate(stats.average_yield),
        },
    }


def serialize_maturity_table(table: MaturityTable, currency: str = "EUR") -> Dict[str, Any]:
    rows = [
        {
            "year": b.year,
            "principalMaturing": b.principal_maturing,
            "shareOfTotal": b.share_of_total,
            "principalOutstanding": b.principal_outstanding,
            "interestExpected": b.interest_expected,
            "yieldOnOutstanding": b.yield_on_outstanding,
            "display": {
                "principalMaturing": format_currency(b.principal_maturing, 0, currency),
                "shareOfTotal": format_percent(b.share_of_total, 0),
                "yieldOnOutstanding": format_percent(b.yield_on_outstanding, 1),
            },
        }
        for b in table.buckets
    ]
    return {
        "rows": rows,
        "total": {
            "principal": table.total_principal,
            "share": table.total_share,
            "display": {
                "principal": format_currency(table.total_principal, 0, currency),
                "share": format_percent(table.total_share, 0),
            },
        },
    }


def serialize_issuer_breakdown(breakdown: IssuerBreakdown, currency: str = "EUR") -> Dict[str, Any]:
    return {
        "rows": [
            {
                "issuer": row.issuer,
                "principal": row.principal,
                "share": row.share,
                "display": {
                    "principal": format_currency(row.principal, 0, currency),
                    "share": format_percent(row.share, 0),
                },
            }
            for row in breakdown.rows
        ],
        "total": {
            "principal": breakdown.total_principal,
            "share": breakdown.total_share,
            "display": {
                "principal": format_currency(breakdown.total_principal, 0, currency),
                "share": format_percent(breakdown.total_share, 0),
            },
        },
    }


def serialize_bond_card(bond: BondRecord, as_of: datetime, currency: str = "EUR") -> Dict[str, Any]:
    active = is_active(bond, as_of)
    return {
        **bond.to_dict(),
        "status": "active" if active else "matured",
        "display": {
            "couponRate": format_rate(bond.coupon_rate, 3),
            "parValue": format_currency(bond.par_value, currency=currency),
            "maturityDate": format_date(bond.maturity_date),
            "status": "Active" if active else "Matured",
        },
    }


def serialize_bond_detail(bond: BondRecord, as_of: datetime, currency: str = "EUR") -> Dict[str, Any]:
    card = serialize_bond_card(bond, as_of, currency)
    card["daysToMaturity"] = days_to_maturity(bond, as_of)
    card["display"].update(
        {
            "couponRate": format_rate(bond.coupon_rate, 2),
            "yieldToMaturity": format_rate(bond.yield_to_maturity, 2),
            "initialPrice": format_currency(bond.initial_price, currency=currency),
        }
    )
    return card


def serialize_options(options: FilterOptions) -> Dict[str, List[Any]]:
    return {"issuers": options.issuers, "depots": options.depots, "years": options.years}


def serialize_timeline(years: List[TimelineYear], currency: str = "EUR") -> List[Dict[str, Any]]:
    out = []
    for block in years:
        entries = [
            {
                "bondId": e.bond.id,
                "title": e.bond.name or e.bond.isin or "Bond",
                "paymentDate": e.payment_date.isoformat(),
                "interestAmount": e.interest_amount,
                "couponRate": e.coupon_rate,
                "parValue": e.bond.par_value,
                "depotBank": e.bond.depot_bank,
                "isPast": e.is_past,
                "display": {
                    "interestAmount": format_currency(e.interest_amount, 0, currency),
                    "couponRate": format_rate(e.coupon_rate, 2),
                    "parValue": format_currency(e.bond.par_value, currency=currency),
                    "depotBank": e.bond.depot_bank or "N/A",
                    "paymentDate": format_date(e.payment_date),
                },
            }
            for e in block.entries
        ]
        out.append(
            {
                "year": block.year,
                "total": block.total,
                "empty": block.is_empty,
                "entries": entries,
                "display": {
                    "total": format_currency(block.total, 0, currency),
                    "emptyMessage": f"No expected interest in {block.year}." if block.is_empty else None,
                },
            }
        )
    return out
