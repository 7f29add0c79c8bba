import logging
import os
import sys
from dataclasses import dataclass
from typing import List, Optional, Tuple

from dotenv import load_dotenv

load_dotenv()  # read .env locally; in prod the platform env panel provides vars


def get_database_url() -> str:
    url = os.getenv("DATABASE_URL", "sqlite:///./task.db")
    # Some hosts still hand out the old scheme
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


@dataclass(frozen=True)
class Settings:
    """Token signing and app-level settings, passed explicitly to whoever needs them."""

    secret_key: str = "change-this"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    cors_origins: Tuple[str, ...] = ()


def get_settings() -> Settings:
    defaults = Settings()
    origins = os.getenv("CORS_ORIGINS", ",".join(defaults.cors_origins))
    return Settings(
        secret_key=os.getenv("SECRET_KEY", defaults.secret_key),
        algorithm=os.getenv("ALGORITHM", defaults.algorithm),
        access_token_expire_minutes=int(
            os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", defaults.access_token_expire_minutes)
        ),
        cors_origins=tuple(_split_origins(origins)),
    )


def _split_origins(value: str) -> List[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Install a single stderr handler on the root logger.

    Safe to call more than once; existing handlers are replaced.
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    # SQL echo is far too chatty at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
