# data_loader.py
# Purpose: Load bond JSON (uploaded text, files on disk, the bundled sample) into normalised BondRecords

from __future__ import annotations

import json
import logging
import os
from typing import List

from .config import SAMPLE_BONDS_FILENAME
from .models import BondRecord, normalize_bonds

logger = logging.getLogger(__name__)


class BondDataError(ValueError):
    """Raised when an uploaded document cannot be decoded as JSON."""


def load_bonds_from_text(text: str) -> List[BondRecord]:
    """Decode a JSON document (array of bonds or a single bond object)."""
    try:
        payload = json.loads(text)
    except (TypeError, json.JSONDecodeError) as e:
        raise BondDataError(f"File is not valid JSON: {e}") from e
    return normalize_bonds(payload)


def load_bonds_from_file(path: str) -> List[BondRecord]:
    with open(path, "r", encoding="utf-8-sig") as f:
        text = f.read()
    bonds = load_bonds_from_text(text)
    logger.info(f"Loaded {len(bonds)} bonds from {path}")
    return bonds


def load_sample_bonds(data_folder: str) -> List[BondRecord]:
    """The two-bond sample shipped in the data folder."""
    return load_bonds_from_file(os.path.join(data_folder, SAMPLE_BONDS_FILENAME))
