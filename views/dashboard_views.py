# views/dashboard_views.py
# Purpose: Flask Blueprint exposing the bond dashboard as JSON: headline stats, maturity and issuer
#          tables, the interest chart and timeline, the filterable bond list, and bond upload/cache endpoints.

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Iterable, Tuple

from flask import Blueprint, current_app, jsonify, request

from core.bond_cache import (
    LocalStore,
    cached_at,
    clear_bonds_cache,
    load_bonds_from_cache,
    save_bonds_to_cache,
)
from core.settings_loader import get_dashboard_settings
from core.utils import resolve_as_of
from portfolio.analytics import compute_stats, interest_by_year, issuer_breakdown, maturity_buckets
from portfolio.data_loader import BondDataError, load_bonds_from_text, load_sample_bonds
from portfolio.filters import bond_filter_options, filter_bonds, interest_filter_options
from portfolio.models import active_bonds, find_bond
from portfolio.state import FilterState, PortfolioState, apply_filter, reconcile_filters, replace_bonds
from portfolio.timeline import interest_timeline
from views.formatters import (
    serialize_bond_card,
    serialize_bond_detail,
    serialize_issuer_breakdown,
    serialize_maturity_table,
    serialize_options,
    serialize_stats,
    serialize_timeline,
)

dashboard_bp = Blueprint("dashboard_bp", __name__, url_prefix="/api")

LOGGER = logging.getLogger(__name__)

BOND_FILTER_ARGS = ("search", "issuer", "depot", "year", "excludeMatured")
INTEREST_FILTER_ARGS = ("issuer", "depot", "year", "showPast")


# --- Internal helpers ---


def _store() -> LocalStore:
    return LocalStore(current_app.config["CACHE_FILE"])


def _load_state() -> PortfolioState:
    """Current bond snapshot from the local store (empty on a cache miss)."""
    return replace_bonds(PortfolioState(), load_bonds_from_cache(_store()) or ())


def _filters_from_args(view: str, names: Iterable[str]) -> FilterState:
    state = FilterState()
    for name in names:
        if name in request.args:
            state = apply_filter(state, view, name, request.args[name])
    return state


def _bad_request(message: str) -> Tuple:
    return jsonify({"status": "error", "message": message}), 400


def _currency() -> str:
    return get_dashboard_settings().get("currency", "EUR")


# --- Routes ---


@dashboard_bp.route("/dashboard")
def dashboard():
    """Headline stats, maturity table, interest chart series and issuer table."""
    try:
        as_of = resolve_as_of(request.args.get("asOf"))
    except ValueError as e:
        return _bad_request(str(e))

    state = _load_state()
    if not state.bonds:
        return jsonify({"status": "ok", "empty": True})

    currency = _currency()
    active = active_bonds(state.bonds, as_of)
    chart = interest_by_year(active)
    stamp = cached_at(_store())
    return jsonify(
        {
            "status": "ok",
            "empty": False,
            "asOf": as_of.isoformat(),
            "cachedAt": stamp.isoformat() if stamp else None,
            "stats": serialize_stats(compute_stats(state.bonds, as_of), currency),
            "maturityTable": serialize_maturity_table(maturity_buckets(active), currency),
            "interestChart": {
                "labels": [year for year, _ in chart],
                "data": [amount for _, amount in chart],
                "referenceLine": get_dashboard_settings().get("interest_reference_line"),
            },
            "issuerTable": serialize_issuer_breakdown(issuer_breakdown(active), currency),
        }
    )


@dashboard_bp.route("/bonds")
def bonds_list():
    """Filtered, sorted bond cards plus the dropdown values for the current working set."""
    try:
        as_of = resolve_as_of(request.args.get("asOf"))
    except ValueError as e:
        return _bad_request(str(e))

    state = _load_state()
    filters = _filters_from_args("bonds", BOND_FILTER_ARGS)
    options = bond_filter_options(state.bonds, as_of, filters.bonds.exclude_matured)
    filters = reconcile_filters(filters, bond_options=options)
    bonds = filter_bonds(state.bonds, as_of, filters.bonds)
    currency = _currency()
    return jsonify(
        {
            "status": "ok",
            "filters": asdict(filters.bonds),
            "options": serialize_options(options),
            "count": len(bonds),
            "bonds": [serialize_bond_card(b, as_of, currency) for b in bonds],
        }
    )


@dashboard_bp.route("/bonds/<bond_id>")
def bond_detail(bond_id):
    """Detail view of one bond, including days to maturity."""
    try:
        as_of = resolve_as_of(request.args.get("asOf"))
    except ValueError as e:
        return _bad_request(str(e))

    bond = find_bond(_load_state().bonds, bond_id)
    if bond is None:
        return jsonify({"status": "error", "message": f"Bond {bond_id} not found"}), 404
    return jsonify({"status": "ok", "bond": serialize_bond_detail(bond, as_of, _currency())})


@dashboard_bp.route("/interest")
def interest():
    """Projected coupon payments per year, with the timeline dropdown values."""
    try:
        as_of = resolve_as_of(request.args.get("asOf"))
    except ValueError as e:
        return _bad_request(str(e))

    state = _load_state()
    filters = _filters_from_args("interest", INTEREST_FILTER_ARGS)
    options = interest_filter_options(state.bonds, as_of)
    filters = reconcile_filters(filters, interest_options=options)
    years = interest_timeline(state.bonds, as_of, filters.interest)
    return jsonify(
        {
            "status": "ok",
            "filters": asdict(filters.interest),
            "options": serialize_options(options),
            "years": serialize_timeline(years, _currency()),
            "message": None if years else "Load bonds to see upcoming interest.",
        }
    )


@dashboard_bp.route("/bonds/upload", methods=["POST"])
def upload_bonds():
    """Replace the bond collection with an uploaded JSON document (multipart 'file' or raw body)."""
    upload = request.files.get("file")
    try:
        if upload is not None:
            raw = upload.read()
        else:
            raw = request.get_data()
        # utf-8-sig drops a leading byte order mark if present
        text = raw.decode("utf-8-sig")
        bonds = load_bonds_from_text(text)
    except UnicodeDecodeError as e:
        LOGGER.error(f"Uploaded bond file is not UTF-8 text: {e}")
        return _bad_request(f"Error reading file: {e}")
    except BondDataError as e:
        LOGGER.error(f"Error reading uploaded bonds: {e}")
        return _bad_request(f"Error reading file: {e}")

    if not bonds:
        return _bad_request("No bond records found in upload")

    save_bonds_to_cache(_store(), bonds)
    LOGGER.info(f"Stored {len(bonds)} uploaded bonds")
    return jsonify({"status": "ok", "count": len(bonds)})


@dashboard_bp.route("/bonds/sample", methods=["POST"])
def load_sample():
    """Replace the bond collection with the bundled sample."""
    try:
        bonds = load_sample_bonds(current_app.config["DATA_FOLDER"])
    except (OSError, BondDataError) as e:
        LOGGER.error(f"Error loading sample data: {e}", exc_info=True)
        return jsonify({"status": "error", "message": "Error loading sample data"}), 500

    save_bonds_to_cache(_store(), bonds)
    LOGGER.info(f"Stored {len(bonds)} sample bonds")
    return jsonify({"status": "ok", "count": len(bonds)})


@dashboard_bp.route("/bonds/cache", methods=["DELETE"])
def clear_cache():
    clear_bonds_cache(_store())
    LOGGER.info("Cleared bond cache")
    return jsonify({"status": "ok"})
