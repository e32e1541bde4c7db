# config.py
# Purpose: Constants shared by the portfolio engine (time zone policy, labels, cache keys)

from __future__ import annotations

from datetime import timezone

# Every calendar computation (bucket year, payment month/day, start of day)
# is done in this zone. Source data carries UTC ISO-8601 timestamps.
BUCKET_TZ = timezone.utc

# Issuer label used when a record has no issuer
UNKNOWN_ISSUER_LABEL = "—"

# Local store keys (versioned payload + companion timestamp)
CACHE_KEY_BONDS = "bonds_json_v1"
CACHE_KEY_TS = "bonds_cached_at"

SAMPLE_BONDS_FILENAME = "sample_bonds.json"
