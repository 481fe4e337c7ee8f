from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field, ConfigDict
from dotenv import load_dotenv

# Load the project .env file (repo root, next to pyproject.toml)
root_env = Path(__file__).parent.parent.parent / ".env"
load_dotenv(root_env)


class Settings(BaseSettings):
    """Application settings - environment variables override the root .env file"""

    model_config = ConfigDict(
        case_sensitive=True,
        extra="ignore"
    )

    # LLM (Gemini)
    GOOGLE_AI_API_KEY: str = Field(default="")
    GEMINI_MODEL: str = Field(default="gemini-2.0-flash")
    ORACLE_TEMPERATURE: float = Field(default=0.0, ge=0.0, le=2.0)

    # No timeout by default - callers own cancellation
    ORACLE_TIMEOUT_SECONDS: Optional[float] = Field(default=None, gt=0)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")


settings = Settings()
