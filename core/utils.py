# Purpose: Utility functions for the Flask application: data folder resolution and the reference-date
# convenience used at the HTTP boundary (the engine itself always receives an explicit date).

"""
Utility functions for the Flask application.
"""
import os
import logging
from datetime import datetime, timezone
from typing import Optional

from core.data_utils import parse_instant

logger = logging.getLogger(__name__)  # Get logger for this module


def get_data_folder_path(app_root_path: Optional[str] = None) -> str:
    """
    Retrieves the data folder path from settings.

    Resolves the path to an absolute path relative to the provided
    app_root_path or the project root.

    Args:
        app_root_path (str, optional): The root path of the application or script.
                                      If None, the project root is used. Defaults to None.

    Returns:
        str: The absolute path to the data folder.
    """
    from core.settings_loader import get_app_config

    chosen_path = str(get_app_config().get("data_folder") or "").strip()
    if not chosen_path:
        error_msg = "'data_folder' must be specified in settings"
        logger.error(error_msg)
        raise RuntimeError(error_msg)

    if app_root_path:
        base_path = app_root_path
    else:
        base_path = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

    if os.path.isabs(chosen_path):
        absolute_path = chosen_path
        logger.info(f"Using absolute data folder from settings: {absolute_path}")
    else:
        absolute_path = os.path.abspath(os.path.join(base_path, chosen_path))
        logger.info(
            f"Resolved data folder '{chosen_path}' relative to '{base_path}' to: {absolute_path}"
        )

    if not os.path.isdir(absolute_path):
        error_msg = (
            f"Configured data folder does not exist or is not a directory: {absolute_path}. "
            "Please create the folder or update the data_folder setting."
        )
        logger.error(error_msg)
        raise FileNotFoundError(error_msg)

    return absolute_path


def resolve_as_of(value: Optional[str] = None) -> datetime:
    """
    Reference date for a request: the parsed `value` when given, else the current UTC time.

    Raises:
        ValueError: `value` was given but is not a recognisable timestamp.
    """
    if value is None or not str(value).strip():
        return datetime.now(timezone.utc)
    parsed = parse_instant(str(value))
    if parsed is None:
        raise ValueError(f"Invalid asOf timestamp: {value!r}")
    return parsed

