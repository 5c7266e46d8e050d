from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, send_from_directory

from .attendance.controller import register as register_attendance
from .common.logging_utils import setup_logging
from .config import get_settings_module
from .container import Container, build_container
from .core.exceptions import ProviderUnavailableError
from .database.bootstrap import apply_schema, list_tables

logger = logging.getLogger(__name__)


def create_app(*, container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["UPLOAD_DIR"] = getattr(settings, "UPLOAD_DIR")

    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    logger.info("Starting with settings=%s", settings_module)

    if container is None:
        container = build_container(settings=settings)
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(container.conn)
            logger.info("Schema ready (tables=%d)", len(list_tables(container.conn)))

    if not container.embedding_provider.is_loaded:
        try:
            container.embedding_provider.load()
        except ProviderUnavailableError:
            # Face checks report "model not loaded" until the provider is reloaded.
            logger.warning("Starting without a face recognition model")

    @app.route("/uploads/<path:filename>", endpoint="uploads")
    def uploads(filename: str):
        return send_from_directory(app.config["UPLOAD_DIR"], filename)

    register_attendance(app, container)
    return app
