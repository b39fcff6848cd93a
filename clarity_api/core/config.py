"""
Central configuration for the FastAPI backend.

Loads environment variables via Pydantic Settings.
SQLite by default so a checkout runs without a database server.
"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./clarity.db"
    JWT_SECRET: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 120

    # Used for CORS; locked to the local frontend by default
    FRONTEND_ORIGIN: str = "http://localhost:5173"

    LOG_LEVEL: str = "INFO"

    # "owner": project creators own everything below their projects.
    # "membership": the earlier model where project members and admins get access.
    ACCESS_MODEL: Literal["owner", "membership"] = "owner"

    # Startup creates this admin profile if it does not exist yet.
    # Global roles are otherwise never changed through the API.
    SEED_ADMIN_EMAIL: str = ""
    SEED_ADMIN_PASSWORD: str = ""


settings = Settings()
