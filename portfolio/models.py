# models.py
# Purpose: Typed bond record, one-shot normalisation of raw JSON input, and the active/matured predicates

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from core.data_utils import convert_to_numeric_robustly, parse_instants_robustly, text_or_empty

from .config import BUCKET_TZ

logger = logging.getLogger(__name__)

# Wire name -> attribute name
TEXT_FIELDS = {
    "issuer": "issuer",
    "name": "name",
    "isin": "isin",
    "wkn": "wkn",
    "depotBank": "depot_bank",
    "id": "id",
}
NUMERIC_FIELDS = {
    "parValue": "par_value",
    "couponRate": "coupon_rate",
    "yieldToMaturity": "yield_to_maturity",
    "initialPrice": "initial_price",
}


@dataclass(frozen=True)
class BondRecord:
    issuer: str = ""
    name: str = ""
    isin: str = ""
    wkn: str = ""
    depot_bank: str = ""
    id: str = ""
    par_value: float = 0.0
    coupon_rate: float = 0.0
    yield_to_maturity: float = 0.0
    initial_price: float = 0.0
    maturity_date: Optional[datetime] = None
    maturity_raw: Any = None

    @property
    def annual_coupon(self) -> float:
        """One full year of coupon interest on the par value."""
        return self.par_value * (self.coupon_rate / 100)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise back to the camelCase shape the bonds were uploaded in."""
        out: Dict[str, Any] = {wire: getattr(self, attr) for wire, attr in TEXT_FIELDS.items()}
        out.update({wire: getattr(self, attr) for wire, attr in NUMERIC_FIELDS.items()})
        raw = self.maturity_raw
        out["maturityDate"] = raw.isoformat() if isinstance(raw, datetime) else raw
        return out


def require_as_of(as_of: Any) -> datetime:
    """Validate the reference date. Naive datetimes are taken to be in BUCKET_TZ."""
    if not isinstance(as_of, datetime):
        raise TypeError(f"as_of must be a datetime, got {type(as_of).__name__}")
    if as_of.tzinfo is None:
        return as_of.replace(tzinfo=BUCKET_TZ)
    return as_of


def normalize_bonds(payload: Any) -> List[BondRecord]:
    """Turn a decoded JSON payload (list of objects or one object) into BondRecords.

    Non-object entries are skipped. Numeric fields default to 0.0 and unparsable
    maturity dates to None; a bad record never rejects the batch.
    """
    if payload is None:
        return []
    items = payload if isinstance(payload, list) else [payload]

    rows: List[Dict[str, Any]] = []
    for position, item in enumerate(items):
        if not isinstance(item, dict):
            logger.warning(f"normalize_bonds: skipping entry {position}, expected an object but got {type(item).__name__}")
            continue
        rows.append(item)
    if not rows:
        return []

    df = pd.DataFrame(
        {wire: [row.get(wire) for row in rows] for wire in [*TEXT_FIELDS, *NUMERIC_FIELDS, "maturityDate"]},
        dtype=object,
    )
    for wire in NUMERIC_FIELDS:
        df[wire] = convert_to_numeric_robustly(df[wire])
    maturities = parse_instants_robustly(df["maturityDate"])

    bonds = []
    for idx, row in enumerate(rows):
        ts = maturities.iloc[idx]
        kwargs: Dict[str, Any] = {attr: text_or_empty(row.get(wire)) for wire, attr in TEXT_FIELDS.items()}
        kwargs.update({attr: float(df[wire].iloc[idx]) for wire, attr in NUMERIC_FIELDS.items()})
        kwargs["maturity_date"] = ts if isinstance(ts, datetime) else None
        kwargs["maturity_raw"] = row.get("maturityDate")
        bonds.append(BondRecord(**kwargs))

    logger.info(f"normalize_bonds: normalised {len(bonds)} of {len(items)} entries")
    return bonds


def is_active(bond: BondRecord, as_of: datetime) -> bool:
    """A bond is active while its maturity lies strictly after as_of."""
    as_of = require_as_of(as_of)
    if bond.maturity_date is None:
        return False
    return bond.maturity_date > as_of


def active_bonds(bonds: Iterable[BondRecord], as_of: datetime) -> List[BondRecord]:
    as_of = require_as_of(as_of)
    return [b for b in bonds if is_active(b, as_of)]


def maturity_year(bond: BondRecord) -> Optional[int]:
    if bond.maturity_date is None:
        return None
    return bond.maturity_date.astimezone(BUCKET_TZ).year


def dated_bonds(bonds: Iterable[BondRecord]) -> List[BondRecord]:
    """Bonds whose maturity parsed; the only ones taking part in date-keyed aggregation."""
    return [b for b in bonds if b.maturity_date is not None]


def days_to_maturity(bond: BondRecord, as_of: datetime) -> Optional[int]:
    """Whole days until maturity, rounded up; negative once matured."""
    as_of = require_as_of(as_of)
    if bond.maturity_date is None:
        return None
    seconds = (bond.maturity_date - as_of).total_seconds()
    return math.ceil(seconds / 86400)


def find_bond(bonds: Sequence[BondRecord], bond_id: str) -> Optional[BondRecord]:
    for bond in bonds:
        if bond.id and bond.id == bond_id:
            return bond
    return None
