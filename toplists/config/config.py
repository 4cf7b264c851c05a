"""
Configuration module for TopLists.

Loads environment variables from .env file and exposes them as typed configuration values.
Uses python-dotenv for loading and provides safe defaults where appropriate.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file from project root
# The .env file should be in the root directory (parent of toplists/)
_project_root = Path(__file__).parent.parent.parent
_env_path = _project_root / ".env"
load_dotenv(_env_path)


# =============================================================================
# Application Environment
# =============================================================================

# Application environment: "development", "staging", or "production"
APP_ENV: str = os.getenv("APP_ENV", "development")

# Enable debug mode for verbose logging (only in development)
DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

# Root log level for the toplists logger
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()


# =============================================================================
# Supabase (database + identity provider)
# =============================================================================

# Project URL, e.g. https://xyzcompany.supabase.co
SUPABASE_URL: str = os.getenv("SUPABASE_URL", "").rstrip("/")

# Service role key used for all data access from the server
SUPABASE_SERVICE_ROLE_KEY: str = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")

# Public anon key; a bearer token equal to it means "no user"
SUPABASE_ANON_KEY: str = os.getenv("SUPABASE_ANON_KEY", "")

# HTTP request timeout in seconds
REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "30"))


# =============================================================================
# Feed & Ranking Limits
# =============================================================================

TRENDING_DEFAULT_LIMIT: int = int(os.getenv("TRENDING_DEFAULT_LIMIT", "20"))
TRENDING_MAX_LIMIT: int = int(os.getenv("TRENDING_MAX_LIMIT", "100"))

# Leaderboard sizes
TOP_ITEMS_PER_CATEGORY: int = int(os.getenv("TOP_ITEMS_PER_CATEGORY", "10"))
TOP_CATEGORIES_LIMIT: int = int(os.getenv("TOP_CATEGORIES_LIMIT", "5"))

# Radar trending window (months) and size
RADAR_TRENDING_MONTHS: int = int(os.getenv("RADAR_TRENDING_MONTHS", "3"))
RADAR_TRENDING_LIMIT: int = int(os.getenv("RADAR_TRENDING_LIMIT", "10"))

USER_TOP_LISTS_LIMIT: int = int(os.getenv("USER_TOP_LISTS_LIMIT", "5"))
SUGGESTED_USERS_LIMIT: int = int(os.getenv("SUGGESTED_USERS_LIMIT", "5"))
SEARCH_LIMIT: int = int(os.getenv("SEARCH_LIMIT", "10"))


# =============================================================================
# Web Server
# =============================================================================

WEB_PORT: int = int(os.getenv("WEB_PORT", "5001"))


# =============================================================================
# Helper Functions
# =============================================================================

def is_production() -> bool:
    """Check if running in production environment."""
    return APP_ENV == "production"


def is_development() -> bool:
    """Check if running in development environment."""
    return APP_ENV == "development"


def is_supabase_configured() -> bool:
    """True when both the project URL and the service key are set."""
    return bool(SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY)


def validate_config() -> list[str]:
    """
    Validate that required configuration is present for production.

    Returns:
        List of missing or invalid configuration keys (empty if all valid).
    """
    errors = []

    if is_production():
        if not SUPABASE_URL:
            errors.append("SUPABASE_URL is required in production")
        if not SUPABASE_SERVICE_ROLE_KEY:
            errors.append("SUPABASE_SERVICE_ROLE_KEY is required in production")

    if REQUEST_TIMEOUT < 1:
        errors.append("REQUEST_TIMEOUT must be at least 1 second")

    limits = {
        "TRENDING_DEFAULT_LIMIT": TRENDING_DEFAULT_LIMIT,
        "TRENDING_MAX_LIMIT": TRENDING_MAX_LIMIT,
        "TOP_ITEMS_PER_CATEGORY": TOP_ITEMS_PER_CATEGORY,
        "TOP_CATEGORIES_LIMIT": TOP_CATEGORIES_LIMIT,
        "RADAR_TRENDING_MONTHS": RADAR_TRENDING_MONTHS,
        "RADAR_TRENDING_LIMIT": RADAR_TRENDING_LIMIT,
        "USER_TOP_LISTS_LIMIT": USER_TOP_LISTS_LIMIT,
        "SUGGESTED_USERS_LIMIT": SUGGESTED_USERS_LIMIT,
        "SEARCH_LIMIT": SEARCH_LIMIT,
    }
    for key, value in limits.items():
        if value < 1:
            errors.append(f"{key} must be at least 1")

    if TRENDING_DEFAULT_LIMIT > TRENDING_MAX_LIMIT:
        errors.append("TRENDING_DEFAULT_LIMIT cannot exceed TRENDING_MAX_LIMIT")

    return errors


def config_summary() -> dict:
    """Summary of current configuration (safe for logs, no secrets)."""
    return {
        "APP_ENV": APP_ENV,
        "DEBUG": DEBUG,
        "LOG_LEVEL": LOG_LEVEL,
        "SUPABASE_URL": SUPABASE_URL or "(not set)",
        "SUPABASE_SERVICE_ROLE_KEY": "***" if SUPABASE_SERVICE_ROLE_KEY else "(not set)",
        "SUPABASE_ANON_KEY": "***" if SUPABASE_ANON_KEY else "(not set)",
        "REQUEST_TIMEOUT": f"{REQUEST_TIMEOUT}s",
        "TRENDING_DEFAULT_LIMIT": TRENDING_DEFAULT_LIMIT,
        "TOP_ITEMS_PER_CATEGORY": TOP_ITEMS_PER_CATEGORY,
        "TOP_CATEGORIES_LIMIT": TOP_CATEGORIES_LIMIT,
        "RADAR_TRENDING_MONTHS": RADAR_TRENDING_MONTHS,
        "RADAR_TRENDING_LIMIT": RADAR_TRENDING_LIMIT,
    }
