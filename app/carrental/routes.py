from flask import Blueprint
from sqlalchemy import text

from app.carrental.db import db_session

bp = Blueprint("routes", __name__)


@bp.get("/health")
def health():
    """Health check endpoint. Returns JSON; touches the DB."""
    db_session().execute(text("SELECT 1"))
    return {"ok": True}


@bp.get("/healthz")
def healthz():
    """
    Fast health check for load balancer probes. No DB access, minimal overhead.
    """
    return "ok", 200
