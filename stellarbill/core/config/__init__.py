"""Configuration module for the Stellarbill backend.

Usage:
    from stellarbill.core.config import settings, Environment

    if settings.ENVIRONMENT == Environment.PRD:
        ...
"""

from stellarbill.core.config.enums import Environment
from stellarbill.core.config.settings import Settings

__all__ = [
    "Settings",
    "Environment",
    "settings",
]

# Singleton settings instance
settings = Settings()
