from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .attendance.import_service import size_limit_message
from .container import Container, build_container
from .core.constants import MAX_CSV_BYTES
from .core.enums import PairingMode
from .core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from .core.policy import PayPolicy
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables, seed_demo_attendance
from .payroll.controller import register as register_payroll
from .requests.controller import register as register_requests

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[3]

_DOMAIN_STATUS = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
)


def _error(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        for error_type, status in _DOMAIN_STATUS:
            if isinstance(e, error_type):
                return _error(str(e), status)
        return _error(str(e), 400)

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(_e: RequestEntityTooLarge):
        return _error(size_limit_message(app.config["MAX_CSV_BYTES"]), 400)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return _error(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error")
        if app.debug:
            return _error(f"Internal Server Error: {e}", 500)
        return _error("Internal Server Error", 500)


def _bootstrap_database(settings, db_config: dict, container: Container) -> None:
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
        logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
        seed_demo_attendance(container.employees_repo, container.attendance_repo, calculator=container.calculator)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["MAX_CSV_BYTES"] = int(getattr(settings, "MAX_CSV_BYTES", MAX_CSV_BYTES))
    # Leave room for the multipart envelope around the CSV itself.
    app.config["MAX_CONTENT_LENGTH"] = app.config["MAX_CSV_BYTES"] + 64 * 1024

    db_config = getattr(settings, "DB_CONFIG")
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        pay_policy = PayPolicy(pairing_mode=PairingMode(getattr(settings, "PUNCH_PAIRING_MODE", PairingMode.WINDOW.value)))
        container = build_container(db_config=db_config, pay_policy=pay_policy)
        _bootstrap_database(settings, db_config, container)

    register_error_handlers(app)
    register_attendance(app, container)
    register_requests(app, container)
    register_payroll(app, container)

    return app
