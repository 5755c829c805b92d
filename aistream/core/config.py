# aistream/core/config.py

"""
Configuration settings for the AIStream group chat application.
"""

import os
from pydantic_settings import BaseSettings
from pydantic import validator
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings class using Pydantic for validation"""

    # Application info
    APP_NAME: str = "AIStream"
    VERSION: str = "1.0.0"
    DEBUG: bool = os.getenv("DEBUG", "False") == "True"
    PRODUCTION: bool = os.getenv("PRODUCTION", "False") == "True"

    # Server settings
    PORT: int = int(os.getenv("PORT", "5050"))

    # Path settings
    STATIC_DIR: str = os.path.join(os.getcwd(), "static")
    LOG_DIR: str = os.path.join(os.getcwd(), "logs")

    # CORS Settings
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    # Azure OpenAI settings (used when a deployment name is configured)
    AZURE_OPENAI_ENDPOINT: Optional[str] = os.getenv("AZURE_OPENAI_ENDPOINT")
    AZURE_OPENAI_API_KEY: Optional[str] = os.getenv("AZURE_OPENAI_API_KEY")
    AZURE_OPENAI_DEPLOYMENT_NAME: Optional[str] = os.getenv("AZURE_OPENAI_DEPLOYMENT_NAME")
    AZURE_OPENAI_MODEL: Optional[str] = os.getenv("AZURE_OPENAI_MODEL")
    AZURE_OPENAI_API_VERSION: str = os.getenv("AZURE_OPENAI_API_VERSION", "2024-06-01")

    # OpenAI settings
    OPENAI_API_KEY: Optional[str] = os.getenv("OPENAI_API_KEY")
    OPENAI_ENDPOINT: Optional[str] = os.getenv("OPENAI_ENDPOINT")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

    # Completion request options, omitted from the request when unset
    COMPLETION_MAX_TOKENS: Optional[int] = None
    COMPLETION_TEMPERATURE: Optional[float] = None

    # Group chat trigger
    TRIGGER_MARKER: str = os.getenv("TRIGGER_MARKER", "@gpt")
    # None strips the marker, any other value is substituted for it
    TRIGGER_REPLACEMENT: Optional[str] = os.getenv("TRIGGER_REPLACEMENT")

    # WebSocket settings
    WS_MAX_MSG_SIZE: int = 64 * 1024  # 64KB

    @validator("AZURE_OPENAI_ENDPOINT", "OPENAI_ENDPOINT")
    def validate_endpoint(cls, v):
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("Endpoint must start with http:// or https://")
        return v

    @validator("TRIGGER_MARKER")
    def validate_trigger_marker(cls, v):
        if not v or not v.strip():
            raise ValueError("TRIGGER_MARKER must be a non-empty string")
        return v

    @property
    def use_azure_openai(self) -> bool:
        """Azure is wired in whenever a deployment name is configured."""
        return bool(self.AZURE_OPENAI_DEPLOYMENT_NAME)

    class Config:
        """Pydantic settings configuration"""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


# Create a global settings instance
try:
    settings = Settings()
    print("✅ Configuration loaded successfully")
except Exception as e:
    print(f"❌ Configuration error: {str(e)}")
    print("Please check your .env file and fix the configuration issues.")
    raise
