"""
Core settings and environment variables for the Community Services Portal.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "Community Services Portal"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - Frontend URLs allowed to access this API (comma separated)
    CORS_ORIGINS: str = "http://localhost:5173,http://127.0.0.1:5173"

    # Firebase/Firestore
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON

    # Mock DB mode for local development without Firebase credentials
    USE_MOCK_DB: bool = False
    MOCK_DB_PATH: Optional[str] = "./mock_db.json"

    # Collection names
    COLLECTION_LOST_FOUND: str = "lost_found_items"
    COLLECTION_COMPLAINTS: str = "complaints"
    COLLECTION_VOLUNTEERS: str = "volunteers"
    COLLECTION_NOTIFICATIONS: str = "notifications"
    COLLECTION_USERS: str = "users"

    # Keyword matching: tokens shorter than this never take part in a match
    MATCH_MIN_KEYWORD_LENGTH: int = 4

    # Audience of admin announcements
    BROADCAST_ROLE: str = "user"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

    @property
    def cors_origins_list(self) -> list:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Global settings instance
settings = Settings()
