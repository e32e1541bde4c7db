# Purpose: Tests for bond-list filtering, ordering and the dropdown option lists.

from portfolio.filters import (
    bond_filter_options,
    filter_bonds,
    interest_filter_options,
    matches_search,
    projection_years,
    sort_bonds,
)
from portfolio.state import BondFilters

from bond_factories import make_bond, utc


class TestMatchesSearch:
    def test_case_insensitive_on_name_issuer_isin(self):
        bond = make_bond(name="Green Bond 2030", issuer="KfW", isin="DE000A1234")
        assert matches_search(bond, "green")
        assert matches_search(bond, "KFW")
        assert matches_search(bond, "a123")
        assert not matches_search(bond, "siemens")

    def test_empty_search_matches_everything(self):
        assert matches_search(make_bond(), "")

    def test_depot_is_not_searched(self):
        assert not matches_search(make_bond(depot_bank="ING"), "ing")


class TestFilterBonds:
    def test_issuer_filter(self, sample_bonds, as_of):
        result = filter_bonds(sample_bonds, as_of, BondFilters(issuer="Deutsche Bank AG"))
        assert [b.id for b in result] == ["2"]

    def test_excluding_matured_can_empty_the_list(self, sample_bonds):
        result = filter_bonds(sample_bonds, utc(2026, 6, 1), BondFilters(issuer="Deutsche Bank AG"))
        assert result == []

    def test_including_matured(self, sample_bonds):
        result = filter_bonds(
            sample_bonds, utc(2026, 6, 1), BondFilters(issuer="Deutsche Bank AG", exclude_matured=False)
        )
        assert [b.id for b in result] == ["2"]

    def test_filters_combine(self, sample_bonds, as_of):
        assert filter_bonds(sample_bonds, as_of, BondFilters(search="bp", depot="ING"))[0].id == "1"
        assert filter_bonds(sample_bonds, as_of, BondFilters(search="bp", depot="Deutsche Bank")) == []

    def test_year_filter(self, sample_bonds, as_of):
        assert [b.id for b in filter_bonds(sample_bonds, as_of, BondFilters(year=2026))] == ["2"]
        assert filter_bonds(sample_bonds, as_of, BondFilters(year=2031)) == []

    def test_input_is_not_modified(self, sample_bonds, as_of):
        before = list(sample_bonds)
        filter_bonds(sample_bonds, as_of, BondFilters(search="bp"))
        assert sample_bonds == before


def test_sort_active_first_then_soonest_undated_last():
    as_of = utc(2025, 1, 1)
    late = make_bond(id="late", maturity=(2030, 1, 1))
    soon = make_bond(id="soon", maturity=(2026, 1, 1))
    matured = make_bond(id="matured", maturity=(2020, 1, 1))
    undated = make_bond(id="undated")
    ordered = sort_bonds([undated, matured, late, soon], as_of)
    assert [b.id for b in ordered] == ["soon", "late", "matured", "undated"]


class TestOptions:
    def test_bond_options_from_working_set(self, sample_bonds):
        opts = bond_filter_options(sample_bonds, utc(2025, 7, 1), exclude_matured=True)
        assert opts.issuers == ["Deutsche Bank AG"]
        assert opts.depots == ["Deutsche Bank"]
        assert opts.years == [2026]

    def test_bond_options_depots_keep_first_seen_order(self):
        bonds = [
            make_bond(issuer="Zeta", depot_bank="ING", maturity=(2027, 1, 1)),
            make_bond(issuer="Alpha", depot_bank="Comdirect", maturity=(2026, 1, 1)),
            make_bond(issuer="", depot_bank="", maturity=(2026, 1, 1)),
        ]
        opts = bond_filter_options(bonds, utc(2025, 1, 1), exclude_matured=False)
        assert opts.issuers == ["Alpha", "Zeta"]
        assert opts.depots == ["ING", "Comdirect"]
        assert opts.years == [2026, 2027]

    def test_interest_options(self, sample_bonds, as_of):
        opts = interest_filter_options(sample_bonds, as_of)
        assert opts.issuers == ["BP", "Deutsche Bank AG"]
        assert opts.depots == ["Deutsche Bank", "ING"]
        assert opts.years == [2024, 2025, 2026]

    def test_issuers_sort_ignoring_case_and_accents(self):
        bonds = [
            make_bond(issuer="Société Générale", depot_bank="ing", maturity=(2027, 1, 1)),
            make_bond(issuer="Siemens", depot_bank="Comdirect", maturity=(2027, 1, 1)),
            make_bond(issuer="Émetteur", depot_bank="DKB", maturity=(2027, 1, 1)),
            make_bond(issuer="bank", depot_bank="Consors", maturity=(2027, 1, 1)),
        ]
        opts = bond_filter_options(bonds, utc(2025, 1, 1), exclude_matured=False)
        assert opts.issuers == ["bank", "Émetteur", "Siemens", "Société Générale"]
        timeline_opts = interest_filter_options(bonds, utc(2025, 1, 1))
        assert timeline_opts.issuers == opts.issuers
        assert timeline_opts.depots == ["Comdirect", "Consors", "DKB", "ing"]

    def test_interest_options_without_dated_bonds(self, as_of):
        opts = interest_filter_options([make_bond(issuer="X")], as_of)
        assert opts.issuers == [] and opts.years == []


def test_projection_years_cover_current_year_when_all_matured():
    bonds = [make_bond(maturity=(2020, 1, 1))]
    assert projection_years(bonds, utc(2024, 5, 1)) == [2024]
    assert projection_years([], utc(2024, 5, 1)) == []
