import os

from dotenv import load_dotenv
from flask import Flask

from config.field_candidates import load_field_candidates

from .main.routes import main_bp
from .source import DEFAULT_API_URL
from .store import SnapshotStore

DEFAULT_REJECTION_TARGET = 2.5
DEFAULT_LOG_LEVEL = "INFO"


def _target_percent() -> float:
    raw = os.environ.get("REJECTION_TARGET_PERCENT")
    if not raw:
        return DEFAULT_REJECTION_TARGET
    try:
        return float(raw)
    except ValueError:
        return DEFAULT_REJECTION_TARGET


def _set_log_level(app) -> None:
    level = (os.environ.get("LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper()
    try:
        app.logger.setLevel(level)
    except ValueError:
        app.logger.setLevel(DEFAULT_LOG_LEVEL)
        app.logger.warning("Unknown LOG_LEVEL %r; using %s", level, DEFAULT_LOG_LEVEL)


def create_app():
    load_dotenv()

    app = Flask(__name__)
    app.secret_key = os.environ.get("SECRET_KEY", "dev")
    app.config["PRODUCTION_API_URL"] = os.environ.get("PRODUCTION_API_URL") or DEFAULT_API_URL
    app.config["REJECTION_TARGET_PERCENT"] = _target_percent()
    _set_log_level(app)

    store = SnapshotStore(
        app.config["PRODUCTION_API_URL"],
        candidates=load_field_candidates(),
        target_percent=app.config["REJECTION_TARGET_PERCENT"],
        logger=app.logger,
    )
    app.config["SNAPSHOT_STORE"] = store

    app.register_blueprint(main_bp)

    return app
