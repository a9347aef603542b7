from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, List, Mapping, Optional

# Environment variables holding one provider credential each.
PROVIDER_CREDENTIAL_ENV_VARS: tuple[str, ...] = (
    "ALCHEMY_API_KEY",
    "PIMLICO_API_KEY",
    "SCROLLSCAN_API_KEY",
    "BASESCAN_API_KEY",
    "POLYGONSCAN_API_KEY",
    "ARBISCAN_API_KEY",
    "OPTIMISTIC_API_KEY",
)


def _as_bool(value: str | None, default: bool = False) -> bool:
    """Parse a truthy/falsey string into a boolean."""
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _parse_allowed_origins(env_value: str) -> List[str]:
    """Parse a comma-separated CORS origins string into a clean list."""
    return [origin.strip() for origin in env_value.split(",") if origin.strip()]


def _read_credentials(environ: Mapping[str, str]) -> Dict[str, str]:
    """Collect non-empty provider credentials from the environment."""
    credentials: Dict[str, str] = {}
    for name in PROVIDER_CREDENTIAL_ENV_VARS:
        value = (environ.get(name) or "").strip()
        if value:
            credentials[name] = value
    return credentials


@dataclass(frozen=True)
class Settings:
    """
    Process-wide configuration, built once at startup and passed by reference.

    Provider credentials are keyed by the environment variable name declared on
    each provider endpoint, so the registry stays free of secrets.
    """

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    CORS_ORIGINS: List[str] = field(default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"])

    # Internal tracker service
    TRACKER_API_URL: str = ""

    # Upstream calls
    UPSTREAM_TIMEOUT_SECONDS: float = 30.0
    UPSTREAM_CONNECT_TIMEOUT_SECONDS: float = 6.0

    # Provider credentials (env var name -> key)
    provider_credentials: Mapping[str, str] = field(default_factory=dict)

    # Debug / logging
    LOG_LEVEL: str = "WARNING"
    LOG_LEVEL_CHAINRELAY: str = "DEBUG"
    LOG_LEVEL_LIB_HTTPX: str = "WARNING"
    LOG_LEVEL_LIB_HTTPCORE: str = "WARNING"
    LOG_LEVEL_LIB_ASYNCIO: str = "WARNING"
    LOG_LEVEL_LIB_ANYIO: str = "WARNING"
    NO_COLOR: bool = False

    @classmethod
    def load(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from the process environment (or an explicit mapping)."""
        env = os.environ if environ is None else environ
        tracker_url = env.get("TRACKER_API_URL") or env.get("NEXT_PUBLIC_TRACKER_API_URL") or ""

        return cls(
            API_HOST=env.get("API_HOST", "0.0.0.0"),
            API_PORT=int(env.get("API_PORT", "8000")),
            CORS_ORIGINS=_parse_allowed_origins(
                env.get("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
            ),
            TRACKER_API_URL=tracker_url.strip().rstrip("/"),
            UPSTREAM_TIMEOUT_SECONDS=float(env.get("UPSTREAM_TIMEOUT_SECONDS", "30")),
            UPSTREAM_CONNECT_TIMEOUT_SECONDS=float(env.get("UPSTREAM_CONNECT_TIMEOUT_SECONDS", "6")),
            provider_credentials=_read_credentials(env),
            LOG_LEVEL=env.get("LOG_LEVEL", "WARNING").upper(),
            LOG_LEVEL_CHAINRELAY=env.get("LOG_LEVEL_CHAINRELAY", "DEBUG").upper(),
            LOG_LEVEL_LIB_HTTPX=env.get("LOG_LEVEL_LIB_HTTPX", "WARNING").upper(),
            LOG_LEVEL_LIB_HTTPCORE=env.get("LOG_LEVEL_LIB_HTTPCORE", "WARNING").upper(),
            LOG_LEVEL_LIB_ASYNCIO=env.get("LOG_LEVEL_LIB_ASYNCIO", "WARNING").upper(),
            LOG_LEVEL_LIB_ANYIO=env.get("LOG_LEVEL_LIB_ANYIO", "WARNING").upper(),
            NO_COLOR=_as_bool(env.get("NO_COLOR"), False),
        )

    def credential(self, env_var_name: Optional[str]) -> Optional[str]:
        """Return the configured provider key for an env var name, or None."""
        if not env_var_name:
            return None
        return self.provider_credentials.get(env_var_name)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Memoized accessor so the whole process shares a single settings instance."""
    return Settings.load()
