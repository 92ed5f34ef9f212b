import os
from dataclasses import dataclass
from typing import Optional

# Optional: load a local .env file if present.
try:
    from dotenv import load_dotenv

    load_dotenv()
except Exception:
    # If python-dotenv isn't installed or .env isn't present, that's fine.
    pass


def _env_bool(name: str, default: Optional[bool] = None) -> Optional[bool]:
    """Parse a boolean environment variable.

    Returns:
      - True/False if the env var is set to a recognizable value
      - default if unset or unrecognized

    Accepted truthy: 1, true, yes, y, on
    Accepted falsy:  0, false, no, n, off
    """

    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in ("1", "true", "yes", "y", "on"):
        return True
    if v in ("0", "false", "no", "n", "off"):
        return False
    return default


@dataclass(frozen=True)
class Config:
    """Runtime configuration.

    IMPORTANT: Provide secrets via environment variables or a .env file.
    Do not hardcode secrets in source code.
    """

    # -----------------
    # Core
    # -----------------
    # Preferred: set C4KNIVES_DATABASE_URL (or DATABASE_URL) to use Postgres.
    # Fallback: C4KNIVES_DB_PATH for SQLite.
    DB_DSN: str = (
        os.environ.get("C4KNIVES_DATABASE_URL")
        or os.environ.get("DATABASE_URL")
        or os.environ.get("C4KNIVES_DB_PATH", "./c4knives.sqlite")
    )

    # -----------------
    # HTTP
    # -----------------
    API_HOST: str = os.environ.get("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.environ.get("PORT", os.environ.get("API_PORT", "5001")))

    # Every route is mounted below this prefix (the React client calls /api/...).
    API_PREFIX: str = os.environ.get("API_PREFIX", "/api")

    # Extra path segment inserted into every admin-only resource route, e.g.
    # ADMIN_API_ROUTE=manage -> POST /api/products/manage.
    # Empty (the default) keeps admin writes on the plain resource paths.
    ADMIN_API_ROUTE: str = os.environ.get("ADMIN_API_ROUTE", "")

    # -----------------
    # Auth (JWT)
    # -----------------
    # NOTE: In dev, this defaults to a fixed string so you can get started.
    # In production, you MUST set AUTH_JWT_SECRET to a strong random value.
    AUTH_JWT_SECRET: str = os.environ.get("AUTH_JWT_SECRET", os.environ.get("JWT_SECRET", "dev_change_me"))

    # Bootstrap the admin account if the admins table is empty
    AUTH_BOOTSTRAP_ADMIN_USERNAME: str = os.environ.get("AUTH_BOOTSTRAP_ADMIN_USERNAME", "admin")
    AUTH_BOOTSTRAP_ADMIN_PASSWORD: str = os.environ.get("AUTH_BOOTSTRAP_ADMIN_PASSWORD", "admin123")

    # -----------------
    # CORS
    # -----------------
    # The React dev server runs on :3000. In production (same origin behind a
    # reverse proxy) CORS is not required.
    CORS_ALLOW_ORIGINS: str = os.environ.get(
        "CORS_ALLOW_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000",
    )
    CORS_ALLOW_CREDENTIALS: bool = _env_bool("CORS_ALLOW_CREDENTIALS", True) is True


def load_config() -> Config:
    return Config()
