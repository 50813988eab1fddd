"""
Configuration management for PawMarket.
Loads settings from environment variables and provides typed configuration access.
"""

from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application Settings
    environment: str = Field(default="development", description="Environment: development, staging, production")
    log_level: str = Field(default="INFO", description="Logging level")
    debug: bool = Field(default=False, description="Enable debug mode")
    host: str = Field(default="0.0.0.0", description="API bind host")
    port: int = Field(default=8080, description="API bind port")

    # Google Cloud Platform
    gcp_project_id: str = Field(default="pawmarket", description="GCP Project ID")
    gcp_credentials_path: Optional[str] = Field(default=None, description="Path to GCP credentials JSON")

    # Firestore tables
    firestore_collection_profiles: str = Field(
        default="profiles",
        description="Firestore collection for user profiles"
    )
    firestore_collection_pets: str = Field(
        default="pets",
        description="Firestore collection for pet listings"
    )
    firestore_collection_services: str = Field(
        default="services",
        description="Firestore collection for service listings"
    )
    firestore_collection_vaccines: str = Field(
        default="vaccines",
        description="Firestore collection for the vaccine catalogue"
    )
    firestore_collection_pet_vaccines: str = Field(
        default="pet_vaccines",
        description="Firestore collection linking pets to vaccines"
    )
    firestore_collection_favorites: str = Field(
        default="favorites",
        description="Firestore collection for user favorites"
    )

    # Cloud Storage
    storage_bucket_pets: str = Field(default="pets", description="Bucket for pet listing images")
    storage_bucket_services: str = Field(default="services", description="Bucket for service listing images")
    storage_bucket_avatars: str = Field(default="avatars", description="Bucket for profile avatars")
    storage_public_base_url: str = Field(
        default="https://storage.googleapis.com",
        description="Base URL for public object links"
    )

    # Uploads
    allowed_image_extensions: List[str] = Field(
        default_factory=lambda: ["jpg", "jpeg", "png", "gif", "webp"],
        description="Accepted listing image extensions"
    )
    max_image_size_bytes: int = Field(
        default=5 * 1024 * 1024,
        description="Maximum listing image size in bytes"
    )

    # Display
    default_pet_image_url: str = Field(
        default="https://images.pexels.com/photos/1805164/pexels-photo-1805164.jpeg?auto=compress&cs=tinysrgb&w=400",
        description="Placeholder image for pets without a photo"
    )
    overview_preview_limit: int = Field(
        default=3,
        description="Number of listings shown on the profile overview tab"
    )

    # Testing
    testing_mode: bool = Field(default=False, description="Enable testing mode")
    mock_backend: bool = Field(default=False, description="Use the in-memory backend instead of GCP")

    def get_table(self, table: str) -> str:
        """Get the Firestore collection name for a logical table."""
        return getattr(self, f"firestore_collection_{table}", table)

    def get_bucket(self, bucket: str) -> str:
        """Get the storage bucket name for a logical bucket."""
        return getattr(self, f"storage_bucket_{bucket}", bucket)


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Reload settings from environment (useful for testing)."""
    global _settings
    _settings = Settings()
    return _settings


# Convenience access
settings = get_settings()
