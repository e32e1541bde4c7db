# filters.py
# Purpose: Predicate composition for the bond list and the interest timeline, plus dropdown option lists

from __future__ import annotations

import math
import unicodedata
from datetime import datetime
from typing import Any, Iterable, List, Optional, Sequence

from .config import BUCKET_TZ
from .models import BondRecord, active_bonds, dated_bonds, is_active, maturity_year, require_as_of
from .state import BondFilters, FilterOptions, InterestFilters


def matches_search(bond: BondRecord, text: str) -> bool:
    """Case-insensitive substring match on name, issuer or ISIN."""
    if not text:
        return True
    needle = text.lower()
    return any(needle in value.lower() for value in (bond.name, bond.issuer, bond.isin))


def matches_issuer(bond: BondRecord, issuer: str) -> bool:
    return not issuer or bond.issuer == issuer


def matches_depot(bond: BondRecord, depot: str) -> bool:
    return not depot or bond.depot_bank == depot


def matches_year(bond: BondRecord, year: Optional[int]) -> bool:
    if year is None:
        return True
    return maturity_year(bond) == year


def matches_bond_filters(bond: BondRecord, filters: BondFilters) -> bool:
    return (
        matches_search(bond, filters.search)
        and matches_issuer(bond, filters.issuer)
        and matches_depot(bond, filters.depot)
        and matches_year(bond, filters.year)
    )


def sort_bonds(bonds: Iterable[BondRecord], as_of: datetime) -> List[BondRecord]:
    """Active before matured, then soonest maturity first; undated bonds last."""
    as_of = require_as_of(as_of)

    def key(bond: BondRecord):
        when = bond.maturity_date.timestamp() if bond.maturity_date is not None else math.inf
        return (0 if is_active(bond, as_of) else 1, when)

    return sorted(bonds, key=key)


def working_set(bonds: Sequence[BondRecord], as_of: datetime, exclude_matured: bool) -> List[BondRecord]:
    """The collection the bond list (and its dropdowns) start from."""
    if exclude_matured:
        return active_bonds(bonds, as_of)
    return list(bonds)


def filter_bonds(bonds: Sequence[BondRecord], as_of: datetime, filters: BondFilters) -> List[BondRecord]:
    """Apply every bond-list filter and the list ordering. `bonds` is not modified."""
    source = working_set(bonds, as_of, filters.exclude_matured)
    return sort_bonds([b for b in source if matches_bond_filters(b, filters)], as_of)


def filter_timeline_entries(entries: Iterable[Any], filters: InterestFilters) -> List[Any]:
    """Issuer/depot/year/show-past filtering of timeline entries."""
    kept = []
    for entry in entries:
        if not matches_issuer(entry.bond, filters.issuer):
            continue
        if not matches_depot(entry.bond, filters.depot):
            continue
        if filters.year is not None and entry.payment_date.year != filters.year:
            continue
        if entry.is_past and not filters.show_past:
            continue
        kept.append(entry)
    return kept


def _unique(values: Iterable[str]) -> List[str]:
    seen = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen


def _collation_key(text: str):
    """Case- and accent-insensitive ordering, e.g. "bank" < "Émetteur" < "Zeta"."""
    decomposed = unicodedata.normalize("NFD", text)
    folded = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn").casefold()
    return (folded, text)


def bond_filter_options(bonds: Sequence[BondRecord], as_of: datetime, exclude_matured: bool) -> FilterOptions:
    """Dropdown values for the bond list, taken from the same working set the list shows."""
    source = working_set(bonds, as_of, exclude_matured)
    return FilterOptions(
        issuers=sorted(_unique(b.issuer for b in source), key=_collation_key),
        depots=_unique(b.depot_bank for b in source),
        years=sorted({maturity_year(b) for b in dated_bonds(source)}),
    )


def projection_years(bonds: Iterable[BondRecord], as_of: datetime) -> List[int]:
    """as_of's year through the last maturity year; empty without any dated bond."""
    dated = dated_bonds(bonds)
    if not dated:
        return []
    current_year = require_as_of(as_of).astimezone(BUCKET_TZ).year
    last_year = max([maturity_year(b) for b in dated] + [current_year])
    return list(range(current_year, last_year + 1))


def interest_filter_options(bonds: Sequence[BondRecord], as_of: datetime) -> FilterOptions:
    """Dropdown values for the interest timeline (dated bonds only)."""
    dated = dated_bonds(bonds)
    if not dated:
        return FilterOptions()
    return FilterOptions(
        issuers=sorted(_unique(b.issuer for b in dated), key=_collation_key),
        depots=sorted(_unique(b.depot_bank for b in dated), key=_collation_key),
        years=projection_years(dated, as_of),
    )
