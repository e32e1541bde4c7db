# Add project root to sys.path for module imports
import os, sys
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from portfolio.models import normalize_bonds

from bond_factories import SAMPLE_PAYLOAD, utc


@pytest.fixture
def sample_payload():
    return [dict(item) for item in SAMPLE_PAYLOAD]


@pytest.fixture
def sample_bonds(sample_payload):
    """The two-bond sample portfolio (BP 2025, Deutsche Bank 2026)."""
    return normalize_bonds(sample_payload)


@pytest.fixture
def as_of():
    """Reference date before either sample bond matures."""
    return utc(2024, 1, 15)
