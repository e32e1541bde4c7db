# Purpose: This file defines configuration variables for the Bond Depot Dashboard Flask application.
# It is loaded with app.config.from_object("config"); values that operators are expected to
# change (data folder, cache file, display settings) live in settings.yaml instead.

"""
Configuration settings for the Flask application.
"""

import os

# Default secret key for development. CHANGE for production!
SECRET_KEY = os.getenv("BOND_DASHBOARD_SECRET_KEY", "dev")

# Uploaded bond files are small JSON documents
MAX_CONTENT_LENGTH = 5 * 1024 * 1024

# Rotating log file settings (file lives in the instance folder)
LOG_FILENAME = "app.log"
LOG_MAX_BYTES = 1024 * 1024 * 10  # 10 MB
LOG_BACKUP_COUNT = 5
LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]"
