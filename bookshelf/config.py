import os
from dataclasses import dataclass, field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()


def _number(name: str, fallback: Optional[int] = None, required: bool = False) -> Optional[int]:
    value = os.getenv(name)
    if not value:
        if required:
            raise RuntimeError(f"Environment variable {name} is required")
        return fallback
    try:
        return int(value)
    except ValueError:
        raise RuntimeError(f"Environment variable {name} must be a number. Found: {value}")


def _list(name: str, fallback: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, fallback).split(",") if item.strip()]


@dataclass
class Settings:
    database_url: str = "sqlite:///bookshelf.db"
    database_connection_limit: Optional[int] = None
    log_level: str = "INFO"
    sql_log_level: str = "INFO"
    statement_timeout_ms: int = 10_000
    migration_schemas: List[str] = field(default_factory=lambda: ["server"])

    @classmethod
    def from_env(cls) -> "Settings":
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///bookshelf.db"),
            database_connection_limit=_number("DATABASE_CONNECTION_LIMIT"),
            log_level=log_level,
            sql_log_level=os.getenv("SQL_LOG_LEVEL", log_level).upper(),
            statement_timeout_ms=_number("DATABASE_STATEMENT_TIMEOUT_MS", 10_000),
            migration_schemas=_list("MIGRATION_SCHEMAS", "server"),
        )


def get_settings() -> Settings:
    """Read settings from the environment (and .env) at call time."""
    return Settings.from_env()
