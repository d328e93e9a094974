"""Application configuration using Pydantic Settings."""

from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings

# Resolve config: prefer system config (installed), fall back to repo .env (dev)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_SYSTEM_CONF = Path("/etc/wxcache/wxcache.conf")
_ENV_FILE = _SYSTEM_CONF if _SYSTEM_CONF.exists() else _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    # Database
    db_path: str = "wxcache.db"

    @model_validator(mode="after")
    def _resolve_db_path(self) -> "Settings":
        """Make db_path absolute — relative to /var/lib/wxcache if installed, else project root."""
        p = Path(self.db_path)
        if not p.is_absolute():
            if _ENV_FILE == _SYSTEM_CONF:
                self.db_path = str(Path("/var/lib/wxcache") / p)
            else:
                self.db_path = str(_PROJECT_ROOT / p)
        return self

    # Day buckets are computed in this zone
    day_timezone: str = "UTC"

    # Preferences (location lookup key, metric vs imperial display)
    preferred_location: str = "94043"
    units_metric: bool = True

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = {"env_prefix": "WXCACHE_", "env_file": str(_ENV_FILE)}


settings = Settings()
