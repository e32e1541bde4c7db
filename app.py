# This file defines the main entry point and structure for the Bond Depot Dashboard Flask application.
# It utilizes the Application Factory pattern (`create_app`) to initialize and configure the Flask app.
# Key responsibilities include:
# - Creating the Flask application instance.
# - Ensuring the instance folder (logs, local bond store) exists.
# - Determining the absolute data folder path using `core.utils.get_data_folder_path`.
# - Centralizing logging configuration (File and Console handlers).
# - Registering the dashboard Blueprint (`dashboard_bp`).
# - Providing a conditional block (`if __name__ == '__main__':`) to run the development server.

from flask import Flask
import os
import logging
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

from core.settings_loader import get_app_config
from core.utils import get_data_folder_path


def _configure_logging(app: Flask) -> None:
    """Replace Flask's default handlers with a rotating file handler and a console handler."""
    app.logger.handlers.clear()
    app.logger.setLevel(logging.DEBUG)

    log_formatter = logging.Formatter(app.config["LOG_FORMAT"])
    root_logger = logging.getLogger()

    log_file_path = os.path.join(app.instance_path, app.config["LOG_FILENAME"])
    try:
        file_handler = RotatingFileHandler(
            log_file_path,
            maxBytes=app.config["LOG_MAX_BYTES"],
            backupCount=app.config["LOG_BACKUP_COUNT"],
        )
        file_handler.setFormatter(log_formatter)
        file_handler.setLevel(logging.DEBUG)
        app.logger.addHandler(file_handler)
        root_logger.addHandler(file_handler)
        root_logger.setLevel(logging.DEBUG)
        app.logger.info(f"File logging configured to: {log_file_path} (Level: DEBUG)")
    except OSError as e:
        app.logger.error(
            f"Failed to configure file logging to {log_file_path}: {e}", exc_info=True
        )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(log_formatter)
    console_handler.setLevel(logging.INFO)
    app.logger.addHandler(console_handler)
    root_logger.addHandler(console_handler)

    app.logger.info("Centralized logging configured (File & Console).")


def create_app(
    test_config: Optional[Dict[str, Any]] = None, instance_path: Optional[str] = None
) -> Flask:
    """Factory function to create and configure the Flask app."""
    app = Flask(__name__, instance_relative_config=True, instance_path=instance_path)
    # Keep non-ASCII issuer names readable in JSON responses
    app.json.ensure_ascii = False

    app.config.from_object("config")
    if test_config:
        app.config.update(test_config)

    # Ensure the instance folder exists (needed for logging and the local store)
    try:
        os.makedirs(app.instance_path, exist_ok=True)
    except OSError as e:
        app.logger.error(
            f"Could not create instance folder at {app.instance_path}: {e}",
            exc_info=True,
        )

    _configure_logging(app)

    app_cfg = get_app_config()
    if "DATA_FOLDER" not in app.config:
        app.config["DATA_FOLDER"] = get_data_folder_path(app_root_path=app.root_path)
    app.logger.info(f"Data folder path set to: {app.config['DATA_FOLDER']}")

    if "CACHE_FILE" not in app.config:
        app.config["CACHE_FILE"] = os.path.join(app.instance_path, app_cfg["cache_file"])
    app.logger.info(f"Bond cache file: {app.config['CACHE_FILE']}")

    # --- Register Blueprints ---
    from views.dashboard_views import dashboard_bp

    app.register_blueprint(dashboard_bp)
    app.logger.info(f"- {dashboard_bp.name} (prefix: {dashboard_bp.url_prefix})")

    @app.route("/hello")
    def hello() -> str:
        return "Hello, World! App factory is working."

    return app


# --- Application Execution ---
if __name__ == "__main__":
    app = create_app()
    app.run(debug=True, host="0.0.0.0")
