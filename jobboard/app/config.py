import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

_PROJECT_DIR = Path(__file__).resolve().parent.parent
_TRUE_VALUES = {"1", "true", "True", "yes", "YES"}

DEFAULT_SECRET_KEY = "dev_secret_change_me"
DEFAULT_MAX_UPLOAD_BYTES = 2 * 1024 * 1024  # 2MB


@dataclass(frozen=True)
class Settings:
    """
    Process-wide configuration, built once at startup.

    The instance is attached to the FastAPI app and handed to the gates and
    the path guard explicitly; nothing below the app factory reads os.environ.
    """

    database_url: str
    secret_key: str = DEFAULT_SECRET_KEY
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24  # 1 day
    # Stored file references are relative to storage_dir.
    storage_dir: Path = _PROJECT_DIR
    # Trusted root: every stored reference must resolve inside it.
    upload_dir: Path = _PROJECT_DIR / "uploads"
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    allow_admin_signup: bool = False
    frontend_origins: tuple[str, ...] = field(default_factory=tuple)
    log_level: str = "INFO"


def _env_flag(name: str, default: str = "0") -> bool:
    return (os.getenv(name, default) or default).strip() in _TRUE_VALUES


def load_settings() -> Settings:
    # Set DISABLE_DOTENV=1 (tests) so a local .env cannot override the environment.
    if os.getenv("DISABLE_DOTENV") != "1":
        load_dotenv(override=True)

    raw_database_url = (os.getenv("DATABASE_URL") or "").strip()
    default_sqlite_path = (_PROJECT_DIR / "dev.db").as_posix()

    storage_dir = Path(os.getenv("STORAGE_DIR") or _PROJECT_DIR).resolve()
    upload_dir = Path(os.getenv("UPLOAD_DIR") or (storage_dir / "uploads")).resolve()

    secret_key = os.getenv("SECRET_KEY") or DEFAULT_SECRET_KEY
    if secret_key == DEFAULT_SECRET_KEY:
        logger.warning("SECRET_KEY is not set; using the development default")

    origins = tuple(
        origin.strip()
        for origin in os.getenv("FRONTEND_ORIGINS", "").split(",")
        if origin.strip()
    )

    return Settings(
        database_url=raw_database_url or f"sqlite:///{default_sqlite_path}",
        secret_key=secret_key,
        access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440") or "1440"),
        storage_dir=storage_dir,
        upload_dir=upload_dir,
        max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES") or DEFAULT_MAX_UPLOAD_BYTES),
        allow_admin_signup=_env_flag("ALLOW_ADMIN_SIGNUP"),
        frontend_origins=origins,
        log_level=(os.getenv("LOG_LEVEL", "INFO") or "INFO").upper(),
    )
