"""
Event Finance Manager - Configuration Settings

This module handles all application configuration using Pydantic Settings.
Environment variables are loaded from .env file.
"""

from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str) -> List[str]:
    return [part.strip().lower() for part in value.split(",") if part.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ===========================================
    # APPLICATION CONFIGURATION
    # ===========================================
    app_name: str = "Event Finance Manager"
    app_env: str = "development"
    debug: bool = False
    api_version: str = "v1"

    # ===========================================
    # DATABASE CONFIGURATION
    # ===========================================
    database_url_async: str = "sqlite+aiosqlite:///./event_finance.db"
    database_echo: bool = False

    # ===========================================
    # JWT AUTHENTICATION
    # ===========================================
    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # ===========================================
    # DEMO MODE
    # Demo mode grants every budget capability. The global flag applies to
    # every request; allow_demo_sessions lets a single session opt in via
    # the demo_mode cookie or X-Demo-Mode header.
    # ===========================================
    demo_mode: bool = False
    allow_demo_sessions: bool = False

    # ===========================================
    # ROLE CAPABILITY LISTS (comma separated, case-insensitive)
    # ===========================================
    budget_edit_estimated_roles: str = "admin,marketing,eventmanager"
    budget_edit_actual_roles: str = "admin,finance,accountant,eventmanager"
    budget_edit_all_roles: str = "admin,eventmanager"
    expense_approve_roles: str = "admin,eventmanager"
    expense_create_roles: str = "admin,eventmanager,finance"
    event_manage_roles: str = "admin,eventmanager"
    event_delete_roles: str = "admin"

    @property
    def budget_edit_estimated_roles_list(self) -> List[str]:
        return _split_csv(self.budget_edit_estimated_roles)

    @property
    def budget_edit_actual_roles_list(self) -> List[str]:
        return _split_csv(self.budget_edit_actual_roles)

    @property
    def budget_edit_all_roles_list(self) -> List[str]:
        return _split_csv(self.budget_edit_all_roles)

    @property
    def expense_approve_roles_list(self) -> List[str]:
        return _split_csv(self.expense_approve_roles)

    @property
    def expense_create_roles_list(self) -> List[str]:
        return _split_csv(self.expense_create_roles)

    @property
    def event_manage_roles_list(self) -> List[str]:
        return _split_csv(self.event_manage_roles)

    @property
    def event_delete_roles_list(self) -> List[str]:
        return _split_csv(self.event_delete_roles)

    # ===========================================
    # BUDGET RULES
    # ===========================================
    # Reject budget items whose estimated total would exceed the event budget
    enforce_event_budget_cap: bool = True

    # ===========================================
    # CORS SETTINGS
    # ===========================================
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:8000"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string into list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env.lower() == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to avoid reading .env file on every call.
    """
    return Settings()


# Export settings instance
settings = get_settings()
