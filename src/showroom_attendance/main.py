from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .common.http import fail
from .config import get_settings_module
from .container import Container, build_container
from .core.exceptions import AlreadyExistsError, DomainError, InvalidStateError, NotFoundError, ValidationError
from .core.log import setup_logging
from .database.bootstrap import apply_schema, list_tables
from .payroll.controller import register as register_payroll
from .penalties.controller import register as register_penalties

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (AlreadyExistsError, 409),
    (InvalidStateError, 409),
)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), 400)
        return fail(str(exc), status)


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app; pass a container to run on other storage (tests)."""
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

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
            apply_schema(db_config)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        container = build_container(db_config=db_config, business_unit=getattr(settings, "BUSINESS_UNIT"))

    app.extensions["showroom_container"] = container
    _register_error_handlers(app)

    register_attendance(app, container)
    register_penalties(app, container)
    register_payroll(app, container)

    return app
