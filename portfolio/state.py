# state.py
# Purpose: Explicit application state (bond snapshot + per-view filters) and the reducers that update it

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Iterable, List, Optional, Tuple

from .models import BondRecord

_TRUE_STRINGS = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class BondFilters:
    search: str = ""
    issuer: str = ""
    depot: str = ""
    year: Optional[int] = None
    exclude_matured: bool = True


@dataclass(frozen=True)
class InterestFilters:
    issuer: str = ""
    depot: str = ""
    year: Optional[int] = None
    show_past: bool = False


@dataclass(frozen=True)
class FilterState:
    bonds: BondFilters = field(default_factory=BondFilters)
    interest: InterestFilters = field(default_factory=InterestFilters)


@dataclass(frozen=True)
class FilterOptions:
    """Values a view offers in its issuer/depot/year dropdowns."""

    issuers: List[str] = field(default_factory=list)
    depots: List[str] = field(default_factory=list)
    years: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class PortfolioState:
    bonds: Tuple[BondRecord, ...] = ()
    filters: FilterState = field(default_factory=FilterState)


# UI field names (camelCase, as the dashboard sends them) -> dataclass attribute
FIELD_ALIASES = {
    "excludeMatured": "exclude_matured",
    "showPast": "show_past",
}


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _coerce_year(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _coerce_text(value: Any) -> str:
    return "" if value is None else str(value)


def _coerce(attr: str, value: Any) -> Any:
    if attr in ("exclude_matured", "show_past"):
        return _coerce_bool(value)
    if attr == "year":
        return _coerce_year(value)
    return _coerce_text(value)


def apply_filter(state: FilterState, view: str, field_name: str, value: Any) -> FilterState:
    """Return a new FilterState with one field of one view set.

    Raw UI values are coerced ('' clears a selection, '2025' selects a year).
    Unknown views or fields are programming errors and raise KeyError.
    """
    if view not in ("bonds", "interest"):
        raise KeyError(f"Unknown filter view: {view}")
    current = getattr(state, view)
    attr = FIELD_ALIASES.get(field_name, field_name)
    if attr not in {f.name for f in fields(current)}:
        raise KeyError(f"Unknown {view} filter field: {field_name}")
    updated = replace(current, **{attr: _coerce(attr, value)})
    return replace(state, **{view: updated})


def _reconcile_view(filters: Any, options: FilterOptions) -> Any:
    changes = {}
    if filters.issuer and filters.issuer not in options.issuers:
        changes["issuer"] = ""
    if filters.depot and filters.depot not in options.depots:
        changes["depot"] = ""
    if filters.year is not None and filters.year not in options.years:
        changes["year"] = None
    return replace(filters, **changes) if changes else filters


def reconcile_filters(
    state: FilterState,
    bond_options: Optional[FilterOptions] = None,
    interest_options: Optional[FilterOptions] = None,
) -> FilterState:
    """Clear selections that the current option lists no longer offer."""
    bonds = state.bonds if bond_options is None else _reconcile_view(state.bonds, bond_options)
    interest = state.interest if interest_options is None else _reconcile_view(state.interest, interest_options)
    return FilterState(bonds=bonds, interest=interest)


def replace_bonds(state: PortfolioState, bonds: Iterable[BondRecord]) -> PortfolioState:
    """Swap the whole collection; filters are kept."""
    return replace(state, bonds=tuple(bonds))
