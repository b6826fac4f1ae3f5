from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import List, Optional

_DURATION_RE = re.compile(r"^(\d+)\s*([smhd]?)$")
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'mongo' (default) or 'memory'
    - MONGO_URL: MongoDB connection string. Default 'mongodb://127.0.0.1:27017/todo-api'
    - PORT: listening port for the bundled server. Default 5000
    - JWT_SECRET: token signing secret (required when APP_ENV=production)
    - JWT_EXPIRES_IN: token lifetime, seconds or '<n>s/m/h/d'. Default '1h'
    - APP_ENV (or NODE_ENV): 'production' hides diagnostic details in error responses
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: logging level name. Default 'INFO'
    """

    persistence_backend: str = "mongo"
    mongo_url: str = "mongodb://127.0.0.1:27017/todo-api"
    port: int = 5000
    jwt_secret: str = "dev-secret"
    jwt_expires_in: int = 3600
    environment: str = "development"
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def parse_duration(value: str) -> int:
    """
    Convert a duration such as '3600', '45s', '30m', '1h' or '7d' into seconds.

    Raises:
        ValueError: if the value is not a positive duration.
    """
    match = _DURATION_RE.match(value.strip().lower())
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    seconds = int(match.group(1)) * _DURATION_UNITS[match.group(2)]
    if seconds <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")
    return seconds


def _parse_port(value: str) -> int:
    try:
        port = int(value)
    except ValueError as e:
        raise ValueError(f"Invalid PORT: {value!r}") from e
    if not (0 < port < 65536):
        raise ValueError(f"PORT out of range: {port}")
    return port


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "mongo").strip().lower()
    if backend not in {"memory", "mongo"}:
        # Fallback to mongo if unsupported
        backend = "mongo"

    environment = _get_env("APP_ENV", _get_env("NODE_ENV", "development")).strip().lower()

    secret: Optional[str] = os.getenv("JWT_SECRET") or None
    if secret is None:
        if environment == "production":
            raise ValueError("JWT_SECRET must be set in production")
        secret = Settings.jwt_secret

    return Settings(
        persistence_backend=backend,
        mongo_url=_get_env("MONGO_URL", Settings.mongo_url).strip(),
        port=_parse_port(_get_env("PORT", str(Settings.port))),
        jwt_secret=secret,
        jwt_expires_in=parse_duration(_get_env("JWT_EXPIRES_IN", "1h")),
        environment=environment,
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
    )
