# khanya/config.py
import os
from dataclasses import dataclass
from typing import Dict, Optional


def _normalize_database_url(raw_url: str, default_path: str) -> str:
    """
    Normalizes a database URL for the right SQLAlchemy driver.

    - ``postgres://`` / ``postgresql://`` -> ``postgresql+psycopg://`` (psycopg 3),
      with ``sslmode=require`` unless the host is local
    - ``mysql://`` -> ``mysql+pymysql://``
    - empty -> local SQLite file at ``default_path``
    """
    if not raw_url:
        return f"sqlite:///{default_path}"
    url = raw_url
    if url.startswith("postgres://"):
        url = "postgresql+psycopg://" + url[len("postgres://"):]
    elif url.startswith("postgresql://"):
        url = "postgresql+psycopg://" + url[len("postgresql://"):]
    elif url.startswith("mysql://"):
        url = "mysql+pymysql://" + url[len("mysql://"):]

    is_local = "@localhost" in url or "@127.0.0.1" in url
    if url.startswith("postgresql+psycopg://") and "sslmode=" not in url and not is_local:
        sep = "&" if "?" in url else "?"
        url = f"{url}{sep}sslmode=require"
    return url


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


@dataclass
class Settings:
    """Application settings, built from the environment."""

    database_url: str = "sqlite://"
    legacy_database_url: Optional[str] = None
    secret_key: str = "khanya-dev-secret"

    paystack_secret_key: str = ""
    paystack_base_url: str = "https://api.paystack.co"
    resend_api_key: str = ""
    winsms_api_key: str = ""
    winsms_username: str = ""
    winsms_base_url: str = "https://api.winsms.co.za/api/rest/v1"
    supabase_url: str = ""
    supabase_service_role_key: str = ""

    mail_from: str = "Khanya <noreply@mail.khanya.store>"
    sales_email: str = "sales@khanya.store"
    orders_email: str = "orders@khanya.store"

    pin_ttl_minutes: int = 10
    http_timeout: int = 30
    log_level: str = "INFO"
    debug_routes: bool = False
    testing: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        base_dir = os.path.dirname(os.path.abspath(__file__))
        default_db = os.path.join(base_dir, "database", "app.db")
        legacy_raw = os.getenv("LEGACY_DATABASE_URL", "")
        return cls(
            database_url=_normalize_database_url(os.getenv("DATABASE_URL", ""), default_db),
            legacy_database_url=_normalize_database_url(legacy_raw, default_db) if legacy_raw else None,
            secret_key=os.getenv("SECRET_KEY", "khanya-dev-secret"),
            paystack_secret_key=os.getenv("PAYSTACK_SECRET_KEY", ""),
            paystack_base_url=os.getenv("PAYSTACK_BASE_URL", "https://api.paystack.co"),
            resend_api_key=os.getenv("RESEND_API_KEY", ""),
            winsms_api_key=os.getenv("WINSMS_API_KEY", ""),
            winsms_username=os.getenv("WINSMS_USERNAME", ""),
            winsms_base_url=os.getenv("WINSMS_BASE_URL", "https://api.winsms.co.za/api/rest/v1"),
            supabase_url=os.getenv("SUPABASE_URL", ""),
            supabase_service_role_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY", ""),
            mail_from=os.getenv("MAIL_FROM", "Khanya <noreply@mail.khanya.store>"),
            sales_email=os.getenv("SALES_EMAIL", "sales@khanya.store"),
            orders_email=os.getenv("ORDERS_EMAIL", "orders@khanya.store"),
            pin_ttl_minutes=_env_int("PIN_TTL_MINUTES", 10),
            http_timeout=_env_int("HTTP_TIMEOUT", 30),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            debug_routes=os.getenv("DEBUG_ROUTES") == "1",
        )

    def sqlalchemy_config(self) -> Dict[str, object]:
        return {
            "SQLALCHEMY_DATABASE_URI": self.database_url,
            "SQLALCHEMY_BINDS": {"legacy": self.legacy_database_url or self.database_url},
            "SQLALCHEMY_TRACK_MODIFICATIONS": False,
            "SQLALCHEMY_ENGINE_OPTIONS": {"pool_pre_ping": True},
        }
