# Purpose: Tests for loading bond JSON from text, files and the bundled sample.

import json
import os

import pytest

from portfolio.data_loader import BondDataError, load_bonds_from_file, load_bonds_from_text, load_sample_bonds

PROJECT_DATA = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "Data"))


def test_load_from_text_array(sample_payload):
    bonds = load_bonds_from_text(json.dumps(sample_payload))
    assert [b.issuer for b in bonds] == ["BP", "Deutsche Bank AG"]


def test_load_from_text_single_object():
    bonds = load_bonds_from_text('{"issuer": "Solo", "parValue": 1000}')
    assert len(bonds) == 1
    assert bonds[0].par_value == 1000.0


@pytest.mark.parametrize("text", ["{not json", "", None])
def test_invalid_json_raises(text):
    with pytest.raises(BondDataError) as excinfo:
        load_bonds_from_text(text)
    assert "not valid JSON" in str(excinfo.value)


def test_bond_data_error_is_value_error():
    assert issubclass(BondDataError, ValueError)


def test_load_from_file(tmp_path, sample_payload):
    path = tmp_path / "bonds.json"
    path.write_text(json.dumps(sample_payload), encoding="utf-8")
    assert len(load_bonds_from_file(str(path))) == 2


def test_load_from_file_with_byte_order_mark(tmp_path, sample_payload):
    path = tmp_path / "bonds.json"
    path.write_bytes(b"\xef\xbb\xbf" + json.dumps(sample_payload).encode("utf-8"))
    assert [b.issuer for b in load_bonds_from_file(str(path))] == [p["issuer"] for p in sample_payload]


def test_load_from_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_bonds_from_file(str(tmp_path / "absent.json"))


def test_bundled_sample():
    bonds = load_sample_bonds(PROJECT_DATA)
    assert [b.issuer for b in bonds] == ["BP Capital Markets PLC", "Deutsche Bank AG"]
    assert all(b.id for b in bonds)
    assert bonds[0].depot_bank == "ING"
    assert bonds[1].coupon_rate == pytest.approx(2.5)
