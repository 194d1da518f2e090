# testdrive/config.py
"""Runtime settings read from the environment (and an optional .env file)."""
import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

DEV_JWT_SECRET = "dev-insecure-secret-change-me-in-production"


def normalize_database_url(url: str) -> str:
    # SQLAlchemy 2.x doesn't accept the 'postgres://' scheme
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg2://", 1)
    return url


@dataclass
class Settings:
    database_url: str = "sqlite:///./testdrive.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    jwt_secret: str = DEV_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_expires_days: int = 30
    firebase_project_id: Optional[str] = None
    upload_dir: str = "uploads"
    api_prefix: str = "/api"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    app_env: str = "development"
    log_level: str = "INFO"

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        app_env = os.getenv("APP_ENV", "development")
        jwt_secret = os.getenv("JWT_SECRET")
        if not jwt_secret:
            if app_env != "development":
                raise RuntimeError("JWT_SECRET not set")
            jwt_secret = DEV_JWT_SECRET
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            database_url=normalize_database_url(os.getenv("DATABASE_URL", "sqlite:///./testdrive.db")),
            db_pool_size=int(os.getenv("DB_POOL_SIZE", 5)),
            db_max_overflow=int(os.getenv("DB_MAX_OVERFLOW", 10)),
            jwt_secret=jwt_secret,
            jwt_expires_days=int(os.getenv("JWT_EXPIRES_DAYS", 30)),
            firebase_project_id=os.getenv("FIREBASE_PROJECT_ID") or None,
            upload_dir=os.getenv("UPLOAD_DIR", "uploads"),
            api_prefix=os.getenv("API_PREFIX", "/api"),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            app_env=app_env,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
