"""
Process configuration, read from the environment.

A `.env` file in the working directory is loaded first; variables that are
already set in the environment win over the file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

from dotenv import load_dotenv

DEFAULT_SERVER_ADDR = "127.0.0.1:8080"


@dataclass(frozen=True)
class Settings:
    server_addr: str
    database_url: str
    pool_min_size: int = 1
    pool_max_size: int = 10
    pool_timeout: float = 5.0
    command_timeout: float = 30.0
    statement_cache_size: int = 100
    log_level: str = "INFO"

    @property
    def bind(self) -> tuple[str, int]:
        return parse_server_addr(self.server_addr)


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, "").strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def parse_server_addr(addr: str) -> tuple[str, int]:
    host, sep, port = (addr or "").strip().rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"SERVER_ADDR must look like host:port, got {addr!r}.")
    return host.strip("[]"), int(port)


def _sanitize_database_url(url: str) -> str:
    # asyncpg does not understand libpq's sslmode query parameter.
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if url:
        return _sanitize_database_url(url)

    user = quote(_env_str("PG__USER", "postgres"), safe="")
    password = os.environ.get("PG__PASSWORD", "")
    host = _env_str("PG__HOST", "localhost")
    port = _env_int("PG__PORT", 5432)
    dbname = _env_str("PG__DBNAME", "postgres")

    credentials = f"{user}:{quote(password, safe='')}" if password else user
    return f"postgresql://{credentials}@{host}:{port}/{dbname}"


def load_settings(*, env_file: str | None = ".env") -> Settings:
    if env_file:
        load_dotenv(env_file, override=False)

    return Settings(
        server_addr=_env_str("SERVER_ADDR", DEFAULT_SERVER_ADDR),
        database_url=database_url(),
        pool_min_size=_env_int("PG__POOL__MIN_SIZE", 1),
        pool_max_size=_env_int("PG__POOL__MAX_SIZE", 10),
        pool_timeout=_env_float("PG__POOL__TIMEOUT", 5.0),
        command_timeout=_env_float("PG__COMMAND_TIMEOUT", 30.0),
        statement_cache_size=_env_int("PG__STATEMENT_CACHE_SIZE", 100),
        log_level=_env_str("LOG_LEVEL", "INFO").upper(),
    )
