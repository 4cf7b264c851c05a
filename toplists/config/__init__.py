"""
Configuration module.

Handles environment variables, backend credentials, and feed/ranking limits.
"""

from toplists.config.config import (
    APP_ENV,
    DEBUG,
    LOG_LEVEL,
    SUPABASE_URL,
    SUPABASE_SERVICE_ROLE_KEY,
    SUPABASE_ANON_KEY,
    REQUEST_TIMEOUT,
    TRENDING_DEFAULT_LIMIT,
    TRENDING_MAX_LIMIT,
    TOP_ITEMS_PER_CATEGORY,
    TOP_CATEGORIES_LIMIT,
    RADAR_TRENDING_MONTHS,
    RADAR_TRENDING_LIMIT,
    USER_TOP_LISTS_LIMIT,
    SUGGESTED_USERS_LIMIT,
    SEARCH_LIMIT,
    WEB_PORT,
    is_production,
    is_development,
    is_supabase_configured,
    validate_config,
    config_summary,
)

__all__ = [
    "APP_ENV",
    "DEBUG",
    "LOG_LEVEL",
    "SUPABASE_URL",
    "SUPABASE_SERVICE_ROLE_KEY",
    "SUPABASE_ANON_KEY",
    "REQUEST_TIMEOUT",
    "TRENDING_DEFAULT_LIMIT",
    "TRENDING_MAX_LIMIT",
    "TOP_ITEMS_PER_CATEGORY",
    "TOP_CATEGORIES_LIMIT",
    "RADAR_TRENDING_MONTHS",
    "RADAR_TRENDING_LIMIT",
    "USER_TOP_LISTS_LIMIT",
    "SUGGESTED_USERS_LIMIT",
    "SEARCH_LIMIT",
    "WEB_PORT",
    "is_production",
    "is_development",
    "is_supabase_configured",
    "validate_config",
    "config_summary",
]
