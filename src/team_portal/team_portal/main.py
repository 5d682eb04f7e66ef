from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .container import AuthSettings, Container, build_container, build_storage
from .core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from .database.bootstrap import apply_schema, list_tables

from .attendance.controller import register as register_attendance
from .employees.controller import register as register_employees
from .leaves.controller import register as register_leaves
from .notes.controller import register as register_notes
from .performance.controller import register as register_performance
from .reports.controller import register as register_reports
from .tasks.controller import register as register_tasks
from .teams.controller import register as register_teams
from .uploads.controller import register as register_uploads

logger = logging.getLogger(__name__)

_STATUS = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (UpstreamError, 502),
)


def register_error_handlers(app: Flask) -> None:
    for exc_type, status in _STATUS:

        def handler(e: DomainError, status: int = status):
            if status == 403:
                logger.warning("forbidden: %s", e)
            return jsonify({"error": str(e)}), status

        app.register_error_handler(exc_type, handler)

    @app.errorhandler(HTTPException)
    def http_error(e: HTTPException):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def unexpected_error(e: Exception):
        logger.exception("unhandled error")
        return jsonify({"error": "Internal server error"}), 500


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            auth=AuthSettings(
                secret=getattr(settings, "JWT_SECRET", app.secret_key),
                algorithm=getattr(settings, "JWT_ALGORITHM", "HS256"),
                ttl_days=int(getattr(settings, "TOKEN_TTL_DAYS", 7)),
            ),
            storage=build_storage(
                uploads_dir=getattr(settings, "UPLOADS_DIR", "uploads"),
                base_url=getattr(settings, "STORAGE_BASE_URL", ""),
                timeout=float(getattr(settings, "STORAGE_TIMEOUT_SECONDS", 30)),
            ),
        )

    app.extensions["team_portal"] = container
    register_error_handlers(app)

    register_employees(app, container)
    register_teams(app, container)
    register_attendance(app, container)
    register_tasks(app, container)
    register_leaves(app, container)
    register_notes(app, container)
    register_reports(app, container)
    register_uploads(app, container)
    register_performance(app, container)

    return app
