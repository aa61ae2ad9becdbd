from __future__ import annotations

import importlib
import logging
from types import ModuleType
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from werkzeug.exceptions import HTTPException

from .attendance.controller import register as register_attendance
from .authorization.controller import register as register_authorization
from .chat.controller import register as register_chat
from .classes.controller import register as register_classes
from .common.responses import fail
from .container import Container, build_container
from .core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from .database.bootstrap import apply_seed_sql, ensure_demo_users, initialize_database, list_tables
from .database.connection import DBConfig
from .pages.controller import register as register_pages
from .parents.controller import register as register_parents
from .physical.controller import register as register_physical
from .posts.controller import register as register_posts
from .settings import get_settings_module
from .students.controller import register as register_students
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

_ERROR_STATUS = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
)


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger("kindergarten").setLevel(level)


def _prepare_database(settings: ModuleType, db_config: dict) -> None:
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        created = initialize_database(db_config)
        logger.info(
            "Schema %s (tables=%s)",
            "applied" if created else "already present",
            len(list_tables(db_config)),
        )
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config)
        ensure_demo_users(db_config)
        logger.info("Demo seed ready")


def _register_error_handlers(app: Flask) -> None:
    def _domain_error(e: DomainError):
        for exc_type, status in _ERROR_STATUS:
            if isinstance(e, exc_type):
                break
        else:
            status = 400
        if status >= 403:
            logger.info("%s: %s", type(e).__name__, e)
        return fail(str(e), status)

    def _http_error(e: HTTPException):
        return fail(e.description or e.name, e.code or 500)

    def _unexpected_error(e: Exception):
        logger.exception("Unhandled error")
        if app.config.get("DEBUG"):
            return fail(f"Lỗi hệ thống: {e}", 500)
        return fail("Lỗi hệ thống", 500)

    app.register_error_handler(DomainError, _domain_error)
    app.register_error_handler(HTTPException, _http_error)
    app.register_error_handler(Exception, _unexpected_error)


def create_app(*, container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.json.ensure_ascii = False

    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = dict(getattr(settings, "DB_CONFIG"))
        logger.info("settings=%s db=%s", settings_module, DBConfig.from_dict(db_config).describe())
        _prepare_database(settings, db_config)
        container = build_container(db_config=db_config)

    _register_error_handlers(app)

    register_users(app, container)
    register_authorization(app, container)
    register_pages(app, container)
    register_parents(app, container)
    register_students(app, container)
    register_classes(app, container)
    register_attendance(app, container)
    register_posts(app, container)
    register_physical(app, container)
    register_chat(app, container)

    return app
