"""Configuration for RacikPC."""
import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


@dataclass
class Config:
    # Supabase project
    supabase_url: str = ""
    supabase_anon_key: str = ""

    # Local JSON catalog folder (used instead of Supabase when set)
    json_path: str = ""

    # HTTP settings
    request_timeout: float = 10.0  # seconds

    # Flask
    secret_key: str = "dev-only-change-me"

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ=None) -> "Config":
        if environ is None:
            load_dotenv()
        env = os.environ if environ is None else environ
        config = cls()
        config.supabase_url = env.get("SUPABASE_URL", config.supabase_url).rstrip("/")
        config.supabase_anon_key = env.get("SUPABASE_ANON_KEY", config.supabase_anon_key)
        config.json_path = env.get("RACIKPC_JSON_PATH", config.json_path)
        config.secret_key = env.get("RACIKPC_SECRET_KEY", config.secret_key)
        config.log_level = env.get("RACIKPC_LOG_LEVEL", config.log_level).upper()
        timeout = env.get("RACIKPC_TIMEOUT")
        if timeout:
            try:
                config.request_timeout = float(timeout)
            except ValueError:
                logger.warning(f"Ignoring invalid RACIKPC_TIMEOUT={timeout!r}")
        return config

    @property
    def uses_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key) and not self.json_path


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
