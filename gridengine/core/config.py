# gridengine/core/config.py
"""Environment-driven settings for the grid engine."""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dotenv import load_dotenv

load_dotenv()

# Modules whose catalogs are loaded by the startup warm-up.
WARM_UP_MODULES: Tuple[str, ...] = (
    "Acquisition",
    "LetterAgreement",
    "Buyer",
    "Operator",
    "County",
    "Referrer",
)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Runtime settings. All TTLs are expressed in seconds."""

    database_url: str = "sqlite:///./gridengine.db"
    log_level: str = "INFO"
    seed_sample_data: bool = False
    catalog_ttl: float = 24 * 3600
    user_preferences_ttl: float = 24 * 3600
    view_config_ttl: float = 3600
    named_filter_ttl: float = 3600
    saved_filter_list_sliding: float = 30 * 60
    entity_ttl: float = 15 * 60
    aggregate_ttl: float = 10 * 60
    aggregate_sliding: float = 5 * 60
    warm_up_modules: Tuple[str, ...] = field(default_factory=lambda: WARM_UP_MODULES)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("GRIDENGINE_DATABASE_URL", cls.database_url),
            log_level=os.getenv("GRIDENGINE_LOG_LEVEL", cls.log_level).upper(),
            seed_sample_data=_env_bool("GRIDENGINE_SEED_SAMPLE_DATA", cls.seed_sample_data),
            catalog_ttl=_env_float("GRIDENGINE_CATALOG_TTL_HOURS", 24) * 3600,
            user_preferences_ttl=_env_float("GRIDENGINE_USER_PREFS_TTL_HOURS", 24) * 3600,
            view_config_ttl=_env_float("GRIDENGINE_VIEW_CONFIG_TTL_MINUTES", 60) * 60,
            named_filter_ttl=_env_float("GRIDENGINE_NAMED_FILTER_TTL_MINUTES", 60) * 60,
            saved_filter_list_sliding=_env_float("GRIDENGINE_FILTER_LIST_SLIDING_MINUTES", 30) * 60,
            entity_ttl=_env_float("GRIDENGINE_ENTITY_TTL_MINUTES", 15) * 60,
            aggregate_ttl=_env_float("GRIDENGINE_AGGREGATE_TTL_MINUTES", 10) * 60,
            aggregate_sliding=_env_float("GRIDENGINE_AGGREGATE_SLIDING_MINUTES", 5) * 60,
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the process-wide settings, reading the environment on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
