from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from equipdash.core.errors import ConfigurationError

STORE_BACKENDS = ("memory", "supabase")
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings, read from the environment.

    EQUIPDASH_STORE        memory | supabase (default memory)
    SUPABASE_URL           project URL, required for supabase
    SUPABASE_KEY           anon/service key, required for supabase
    EQUIPDASH_SEED         JSON file used to seed the memory store
    EQUIPDASH_ADMIN_EMAILS comma separated list of elevated users
    EQUIPDASH_LOG_LEVEL    logging level name (default INFO)
    EQUIPDASH_HOST / EQUIPDASH_PORT  web server bind address
    """
    store: str = "memory"
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    seed_path: Optional[str] = None
    admin_emails: Tuple[str, ...] = field(default_factory=tuple)
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        store = env.get("EQUIPDASH_STORE", "memory").strip().lower()
        if store not in STORE_BACKENDS:
            raise ConfigurationError(
                f"EQUIPDASH_STORE must be one of {', '.join(STORE_BACKENDS)}, got {store!r}"
            )

        url = env.get("SUPABASE_URL", "").strip() or None
        key = env.get("SUPABASE_KEY", "").strip() or None
        if store == "supabase" and not (url and key):
            raise ConfigurationError("SUPABASE_URL and SUPABASE_KEY are required for the supabase store")

        port_raw = env.get("EQUIPDASH_PORT", "8000").strip()
        try:
            port = int(port_raw)
        except ValueError:
            raise ConfigurationError(f"EQUIPDASH_PORT is not a number: {port_raw!r}") from None

        level = env.get("EQUIPDASH_LOG_LEVEL", "INFO").strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ConfigurationError(f"Unknown log level: {level!r}")

        admins = tuple(
            e.strip().lower()
            for e in env.get("EQUIPDASH_ADMIN_EMAILS", "").split(",")
            if e.strip()
        )

        return cls(
            store=store,
            supabase_url=url,
            supabase_key=key,
            seed_path=env.get("EQUIPDASH_SEED", "").strip() or None,
            admin_emails=admins,
            log_level=level,
            host=env.get("EQUIPDASH_HOST", "127.0.0.1").strip(),
            port=port,
        )

    def is_admin(self, email: Optional[str]) -> bool:
        return bool(email) and email.strip().lower() in self.admin_emails


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
