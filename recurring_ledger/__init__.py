from typing import Any, Mapping, Optional

from flask import Flask

from recurring_ledger.extensions.database import db
from recurring_ledger.extensions.recurrence_cli import register_recurrence_commands
from recurring_ledger.models import (  # noqa: F401
    Account,
    RecurringTransaction,
    Transaction,
    User,
)


def create_app(config_overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    from config import Config

    app.config.from_object(Config)

    # Environment variables prefixed with FLASK_ override the defaults
    app.config.from_prefixed_env()
    if config_overrides:
        app.config.update(config_overrides)

    app.logger.setLevel(app.config["LOG_LEVEL"])

    db.init_app(app)

    # Development only; production schemas are managed outside the app
    if app.config["AUTO_CREATE_DB"]:
        with app.app_context():
            db.create_all()

    register_recurrence_commands(app)

    return app


__all__ = ["create_app"]
