"""
Settings loader for the Bond Depot Dashboard.
Reads settings.yaml at the project root and hands out its sections merged over built-in defaults,
so a missing or partial file still yields a working configuration.
"""

import yaml
from pathlib import Path
import logging

logger = logging.getLogger(__name__)

# settings.yaml lives in the project root (parent of core/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
SETTINGS_FILE = _PROJECT_ROOT / 'settings.yaml'

DEFAULT_APP_CONFIG = {
    'data_folder': 'Data',
    'cache_file': 'local_storage.json',
}

DEFAULT_DASHBOARD_SETTINGS = {
    'interest_reference_line': 150000,
    'currency': 'EUR',
    'locale': 'de-DE',
}

# Parsed document and the mtime it was read at
_settings_cache = None
_cache_mtime = None

def load_settings():
    """
    Return the parsed settings.yaml as a dict.

    The document is re-read only when the file's mtime changes. A missing,
    unreadable or malformed file gives an empty dict.
    """
    global _settings_cache, _cache_mtime

    settings_path = Path(SETTINGS_FILE)
    if not settings_path.exists():
        logger.warning(f"Settings file {settings_path} not found, using defaults")
        return {}

    try:
        mtime = settings_path.stat().st_mtime
        if _settings_cache is not None and _cache_mtime == mtime:
            return _settings_cache
        parsed = yaml.safe_load(settings_path.read_text(encoding='utf-8'))
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Error loading settings from {settings_path}: {e}")
        return {}

    if not isinstance(parsed, dict):
        if parsed is not None:
            logger.warning(f"Settings file {settings_path} does not contain a mapping, ignoring it")
        parsed = {}
    _settings_cache, _cache_mtime = parsed, mtime
    logger.info(f"Loaded settings from {settings_path.name}")
    return _settings_cache

def _section(name, defaults):
    values = load_settings().get(name) or {}
    if not isinstance(values, dict):
        logger.warning(f"Settings section '{name}' is not a mapping, using defaults")
        values = {}
    return {**defaults, **values}

def get_app_config():
    """Application paths: data_folder and cache_file."""
    return _section('app_config', DEFAULT_APP_CONFIG)

def get_dashboard_settings():
    """Display settings: interest_reference_line, currency, locale."""
    return _section('dashboard', DEFAULT_DASHBOARD_SETTINGS)

def reload_settings():
    """Drop the cached document so the next access reads the file again."""
    global _settings_cache, _cache_mtime
    _settings_cache = None
    _cache_mtime = None
    logger.info("Settings cache cleared, will reload on next access")
