from __future__ import annotations

import importlib
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .common.logging import get_logger, setup_logging
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .registers.controller import register as register_registers
from .sessions.controller import register as register_sessions
from .settings import get_settings_module

logger = get_logger(__name__)


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    setup_logging(json_output=bool(getattr(settings, "LOG_JSON", False)), log_level=getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "app_starting",
            settings=settings_module,
            db=f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
        )
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("schema_ready", tables=len(list_tables(db_config)))
        container = build_container(settings)

    app.extensions["academy_register"] = container

    register_sessions(app, container)
    register_registers(app, container)

    return app
