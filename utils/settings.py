"""
Application settings loaded from the environment (and an optional .env file)
"""
import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables (do not override shell env)
try:
    load_dotenv()
    backend_env = Path(__file__).resolve().parents[1] / ".env"
    if backend_env.exists():
        load_dotenv(dotenv_path=str(backend_env), override=False)
except Exception:
    pass


def _int_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if raw.isdigit():
        return int(raw)
    return default


def _normalize_asyncpg_url(dsn: str) -> str:
    # Ensure SQLAlchemy uses asyncpg driver
    if dsn.startswith("postgresql+asyncpg://"):
        return dsn
    if dsn.startswith("postgresql://"):
        return "postgresql+asyncpg://" + dsn[len("postgresql://"):]
    if dsn.startswith("postgres://"):
        return "postgresql+asyncpg://" + dsn[len("postgres://"):]
    return dsn


class Settings:
    """Snapshot of the environment taken when the object is created."""

    def __init__(self):
        self.APP_NAME = os.getenv("APP_NAME", "Forms API")
        self.ENV = (os.getenv("ENV") or os.getenv("APP_ENV") or "development").lower()

        # Database
        self.DATABASE_URL = self._database_url()
        self.DB_POOL_SIZE = _int_env("DB_POOL_SIZE", 5)
        self.DB_MAX_OVERFLOW = _int_env("DB_MAX_OVERFLOW", 10)
        self.DB_POOL_TIMEOUT = _int_env("DB_POOL_TIMEOUT", 30)

        # Shared store for rate limiting; in-memory when unset
        self.REDIS_URL = (os.getenv("REDIS_URL") or "").strip() or None

        # Public submission endpoint
        self.SUBMIT_RATE_LIMIT = _int_env("SUBMIT_RATE_LIMIT", 10)
        self.SUBMIT_RATE_WINDOW_SECONDS = _int_env("SUBMIT_RATE_WINDOW_SECONDS", 15 * 60)
        self.MAX_REQUEST_BYTES = _int_env("MAX_REQUEST_BYTES", 1024 * 1024)
        self.CLIENT_KEY_STRATEGY = (os.getenv("CLIENT_KEY_STRATEGY") or "ip").strip().lower()
        self.CLIENT_KEY_HEADER = (os.getenv("CLIENT_KEY_HEADER") or "x-client-id").strip().lower()

        # Dashboard (tenant CRUD) throttling, slowapi syntax
        self.DASHBOARD_RATE_LIMIT = os.getenv("DASHBOARD_RATE_LIMIT", "60/minute")

        # CORS allowed origins: comma-separated, "*" when unset
        raw_origins = os.getenv("CORS_ALLOWED_ORIGINS") or ""
        self.CORS_ALLOWED_ORIGINS = [o.strip() for o in raw_origins.split(",") if o.strip()] or ["*"]

    @staticmethod
    def _database_url() -> str:
        url = (os.getenv("DATABASE_URL") or "").strip()
        if url:
            return _normalize_asyncpg_url(url)
        user = os.getenv("POSTGRES_USER", "postgres")
        password = os.getenv("POSTGRES_PASSWORD", "")
        host = os.getenv("POSTGRES_HOST", "localhost")
        port = os.getenv("POSTGRES_PORT", "5432")
        name = os.getenv("POSTGRES_DB", "forms")
        auth = f"{user}:{password}" if password else user
        return f"postgresql+asyncpg://{auth}@{host}:{port}/{name}"

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"


def get_settings() -> Settings:
    return Settings()
