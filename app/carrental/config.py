import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str
    database_url: str
    log_level: str
    sql_echo: bool


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _normalize_database_url(url: str) -> str:
    # Heroku/DO style URLs; SQLAlchemy 2.x only accepts the "postgresql" scheme.
    if url.startswith("postgres://"):
        return "postgresql://" + url[len("postgres://"):]
    return url


def load_settings() -> Settings:
    return Settings(
        secret_key=_getenv("SECRET_KEY", "change-me"),
        env=_getenv("ENV", "development"),
        database_url=_normalize_database_url(_getenv("DATABASE_URL", "sqlite:///carrental.db")),
        log_level=_getenv("LOG_LEVEL", "INFO").upper(),
        sql_echo=_getenv("SQL_ECHO", "0").lower() in ("1", "true", "yes"),
    )


def load_config() -> dict:
    s = load_settings()
    return {
        "SECRET_KEY": s.secret_key,
        "ENV": s.env,
        "DATABASE_URL": s.database_url,
        "LOG_LEVEL": s.log_level,
        "SQL_ECHO": s.sql_echo,
        # customer payloads are tiny; anything larger is a client bug
        "MAX_CONTENT_LENGTH": 1 * 1024 * 1024,
    }


def check_production_settings(config: dict) -> None:
    """Fail fast on unsafe production configuration."""
    env = (config.get("ENV") or "").strip().lower()
    if env not in ("prod", "production"):
        return
    if not config.get("DATABASE_URL") or str(config["DATABASE_URL"]).strip() == "":
        raise RuntimeError("DATABASE_URL is required in production.")
    if str(config["DATABASE_URL"]).startswith("sqlite"):
        raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
    if not config.get("SECRET_KEY") or str(config["SECRET_KEY"]) in ("", "change-me"):
        raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")
