import logging
import os
import uuid
import weakref

from flask import Flask, g, request
from dotenv import load_dotenv
from sqlalchemy.engine import Engine

from app.carrental.config import check_production_settings, load_config
from app.carrental.db import init_db, teardown_db_session
from app.carrental.errors import register_error_handlers
from app.carrental import models  # noqa: F401  (registers all tables on Base.metadata)
from app.carrental.routes import bp as routes_bp
from app.carrental.modules.customers.api import bp as customers_api_bp


# Engines whose pooled connections must not be shared with a forked child.
# Weak refs so apps built and dropped (tests) are not kept alive by the hook.
_fork_engines: "weakref.WeakSet[Engine]" = weakref.WeakSet()
_fork_hook_registered = False


def _after_fork_child() -> None:
    for engine in list(_fork_engines):
        engine.dispose(close=False)
    logging.getLogger(__name__).info("Disposed DB engines after fork (pid=%s)", os.getpid())


def _dispose_engine_on_fork(engine: Engine) -> None:
    global _fork_hook_registered
    _fork_engines.add(engine)
    # os.register_at_fork hooks cannot be removed; register once per process.
    if not _fork_hook_registered and hasattr(os, "register_at_fork"):
        os.register_at_fork(after_in_child=_after_fork_child)
        _fork_hook_registered = True


def _configure_logging(app: Flask) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL") or "INFO"), logging.INFO)
    app.logger.setLevel(level)
    pkg_logger = logging.getLogger("app.carrental")
    pkg_logger.setLevel(level)
    if not logging.getLogger().handlers and not pkg_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
        pkg_logger.addHandler(handler)


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__)
    app.config.from_mapping(load_config())
    app.json.sort_keys = False

    _configure_logging(app)

    # Production guardrails (fail fast with clear logs)
    check_production_settings(app.config)

    init_db(app)

    _dispose_engine_on_fork(app.extensions["sqlalchemy_engine"])

    app.register_blueprint(routes_bp)
    app.register_blueprint(customers_api_bp)

    @app.before_request
    def _assign_request_id():
        # Per-request id for log correlation; honour one set by a proxy.
        inbound = (request.headers.get("X-Request-ID") or "").strip()
        g.request_id = inbound[:64] if inbound else uuid.uuid4().hex

    @app.after_request
    def _echo_request_id(response):
        rid = getattr(g, "request_id", None)
        if rid:
            response.headers["X-Request-ID"] = rid
        return response

    app.teardown_appcontext(teardown_db_session)
    register_error_handlers(app)

    app.logger.info("create_app() complete; app ready to serve (env=%s)", app.config.get("ENV"))
    return app
