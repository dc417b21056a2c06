"""
Configuration Models

System configuration resolved from environment variables (optionally loaded
from a .env file).
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class SystemConfig(BaseModel):
    """Overall system configuration"""

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_dir: str = Field(default="logs", description="Directory for rotating log files")
    enable_console_logging: bool = Field(default=True, description="Mirror logs to stdout")

    # Engine
    random_seed: Optional[int] = Field(default=None, description="Seed for template selection, unset for nondeterministic")

    # Sessions
    session_timeout_minutes: int = Field(default=30, description="Idle minutes before a session is dropped")
    max_transcript_entries: int = Field(default=200, description="Transcript length that triggers trimming")

    # Music services
    music_service: str = Field(default="spotify", description="Preferred catalog: spotify or youtube")
    spotify_access_token: Optional[str] = Field(default=None, description="User access token supplied by the host")
    youtube_api_key: Optional[str] = Field(default=None, description="YouTube Data API key")

    # Rate limiting
    spotify_rate_limit: int = Field(default=50, description="Spotify requests per hour")
    youtube_rate_limit: float = Field(default=5.0, description="YouTube requests per second")

    # Backend
    backend_host: str = Field(default="127.0.0.1", description="Host for the FastAPI backend")
    backend_port: int = Field(default=8000, description="Port for the FastAPI backend")

    @classmethod
    def from_env(cls, load_dotenv_file: bool = True) -> "SystemConfig":
        """
        Build configuration from environment variables.

        Args:
            load_dotenv_file: Whether to load a .env file first

        Returns:
            Resolved configuration
        """
        if load_dotenv_file:
            load_dotenv()

        seed = os.getenv("MOODMUSIC_RANDOM_SEED")

        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_dir=os.getenv("LOG_DIR", "logs"),
            enable_console_logging=os.getenv("LOG_CONSOLE", "true").lower() == "true",
            random_seed=int(seed) if seed else None,
            session_timeout_minutes=int(os.getenv("SESSION_TIMEOUT_MINUTES", "30")),
            max_transcript_entries=int(os.getenv("MAX_TRANSCRIPT_ENTRIES", "200")),
            music_service=os.getenv("MUSIC_SERVICE", "spotify").lower(),
            spotify_access_token=os.getenv("SPOTIFY_ACCESS_TOKEN") or None,
            youtube_api_key=os.getenv("YOUTUBE_API_KEY") or None,
            spotify_rate_limit=int(os.getenv("SPOTIFY_RATE_LIMIT", "50")),
            youtube_rate_limit=float(os.getenv("YOUTUBE_RATE_LIMIT", "5.0")),
            backend_host=os.getenv("BACKEND_HOST", "127.0.0.1"),
            backend_port=int(os.getenv("BACKEND_PORT", "8000")),
        )
