# Purpose: Tests for bond normalisation, record serialisation and the active/matured predicates.

from datetime import datetime

import pytest

from portfolio.models import (
    BondRecord,
    active_bonds,
    days_to_maturity,
    find_bond,
    is_active,
    maturity_year,
    normalize_bonds,
    require_as_of,
)

from bond_factories import make_bond, utc


class TestNormalizeBonds:
    def test_sample_fields_are_typed(self, sample_bonds):
        bp = sample_bonds[0]
        assert isinstance(bp, BondRecord)
        assert bp.issuer == "BP"
        assert bp.depot_bank == "ING"
        assert bp.par_value == 100000.0
        assert bp.coupon_rate == pytest.approx(1.08)
        assert bp.maturity_date == utc(2025, 6, 25, 22, 0)
        assert maturity_year(bp) == 2025

    def test_missing_and_garbage_numbers_default_to_zero(self):
        bonds = normalize_bonds(
            [{"issuer": "X", "parValue": "abc", "couponRate": None, "yieldToMaturity": {"a": 1}}]
        )
        bond = bonds[0]
        assert bond.par_value == 0.0
        assert bond.coupon_rate == 0.0
        assert bond.yield_to_maturity == 0.0
        assert bond.initial_price == 0.0

    def test_numeric_strings_are_accepted(self):
        bond = normalize_bonds([{"parValue": "50000", "couponRate": "3.5"}])[0]
        assert bond.par_value == 50000.0
        assert bond.coupon_rate == 3.5

    def test_unparsable_maturity_becomes_none(self):
        bonds = normalize_bonds(
            [
                {"issuer": "A", "maturityDate": "not a date"},
                {"issuer": "B"},
                {"issuer": "C", "maturityDate": 12},
            ]
        )
        assert [b.maturity_date for b in bonds] == [None, None, None]
        assert bonds[0].maturity_raw == "not a date"

    def test_single_object_is_wrapped(self):
        bonds = normalize_bonds({"issuer": "Solo", "maturityDate": "2030-01-01T00:00:00Z"})
        assert len(bonds) == 1
        assert bonds[0].issuer == "Solo"

    def test_non_object_entries_are_skipped(self):
        bonds = normalize_bonds([1, "x", None, {"issuer": "Kept"}])
        assert [b.issuer for b in bonds] == ["Kept"]

    def test_empty_inputs(self):
        assert normalize_bonds([]) == []
        assert normalize_bonds(None) == []
        assert normalize_bonds([1, 2]) == []

    def test_missing_text_fields_become_empty(self):
        bond = normalize_bonds([{"parValue": 1}])[0]
        assert bond.issuer == ""
        assert bond.depot_bank == ""
        assert bond.id == ""

    def test_far_future_maturities_stay_dated_and_active(self):
        bonds = normalize_bonds(
            [
                {"id": "perpetual", "parValue": 100000, "maturityDate": "9999-12-31T00:00:00Z"},
                {"id": "long", "parValue": 50000, "maturityDate": "2300-01-01T00:00:00Z"},
                {"id": "plain", "parValue": 10000, "maturityDate": "2030-01-01T00:00:00Z"},
            ]
        )
        assert [b.maturity_date for b in bonds] == [utc(9999, 12, 31), utc(2300, 1, 1), utc(2030, 1, 1)]
        assert [maturity_year(b) for b in bonds] == [9999, 2300, 2030]
        assert all(is_active(b, utc(2024, 1, 1)) for b in bonds)
        assert days_to_maturity(bonds[1], utc(2299, 12, 31)) == 1

    def test_integer_too_large_for_float_defaults_to_zero(self):
        bonds = normalize_bonds(
            [{"issuer": "Huge", "parValue": 10**400, "couponRate": 2}, {"issuer": "Fine", "parValue": 5}]
        )
        assert [b.par_value for b in bonds] == [0.0, 5.0]
        assert bonds[0].coupon_rate == 2.0


class TestBondRecord:
    def test_annual_coupon(self):
        bond = make_bond(par_value=100000.0, coupon_rate=2.5)
        assert bond.annual_coupon == pytest.approx(2500.0)

    def test_to_dict_uses_wire_names(self, sample_payload, sample_bonds):
        out = sample_bonds[1].to_dict()
        assert out["depotBank"] == "Deutsche Bank"
        assert out["parValue"] == 100000.0
        assert out["maturityDate"] == sample_payload[1]["maturityDate"]

    def test_to_dict_renormalises_to_same_record(self, sample_bonds):
        again = normalize_bonds([b.to_dict() for b in sample_bonds])
        assert again == sample_bonds


class TestActivity:
    def test_is_active_is_strict(self):
        bond = make_bond(maturity=(2025, 6, 25))
        assert is_active(bond, utc(2025, 6, 24))
        assert not is_active(bond, utc(2025, 6, 25))
        assert not is_active(bond, utc(2025, 7, 1))

    def test_undated_bond_is_never_active(self):
        assert not is_active(make_bond(), utc(2000, 1, 1))

    def test_active_bonds_filters(self, sample_bonds):
        assert [b.id for b in active_bonds(sample_bonds, utc(2025, 7, 1))] == ["2"]
        assert active_bonds(sample_bonds, utc(2026, 6, 1)) == []

    def test_naive_as_of_is_utc(self):
        bond = make_bond(maturity=(2025, 1, 1))
        assert is_active(bond, datetime(2024, 12, 31, 23, 59))
        assert require_as_of(datetime(2024, 1, 1)).tzinfo is not None

    @pytest.mark.parametrize("bad", [None, "2024-01-01", 1704067200])
    def test_as_of_must_be_datetime(self, bad):
        with pytest.raises(TypeError):
            is_active(make_bond(maturity=(2025, 1, 1)), bad)


class TestDaysToMaturity:
    def test_rounds_up_partial_days(self):
        bond = make_bond(maturity=utc(2025, 6, 25, 22, 0))
        assert days_to_maturity(bond, utc(2025, 6, 24, 22, 0)) == 1
        assert days_to_maturity(bond, utc(2025, 6, 24, 12, 0)) == 2

    def test_negative_after_maturity(self):
        bond = make_bond(maturity=(2025, 1, 1))
        assert days_to_maturity(bond, utc(2025, 1, 3)) == -2

    def test_none_without_maturity(self):
        assert days_to_maturity(make_bond(), utc(2025, 1, 1)) is None


def test_find_bond(sample_bonds):
    assert find_bond(sample_bonds, "2").issuer == "Deutsche Bank AG"
    assert find_bond(sample_bonds, "missing") is None
    assert find_bond([make_bond()], "") is None
