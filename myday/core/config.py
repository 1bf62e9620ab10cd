from pydantic import BaseModel
from typing import Optional, List


class Settings(BaseModel):
    """Application settings and configuration."""

    # Database
    database_url: str = "sqlite:///./myday.db"

    # API
    api_title: str = "MyDay API"
    api_version: str = "0.1.0-alpha"
    api_description: str = "A FastAPI application for daily tasks, habits, journal and events"

    # CORS
    cors_origins: List[str] = ["*"]

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Environment
    environment: str = "development"
    debug: bool = True

    # Session
    jwt_secret: Optional[str] = None
    session_cookie_name: str = "myday_session"
    session_cookie_domain: Optional[str] = None
    dev_login_enabled: bool = False

    # Storage mode: "database" (hosted backend) or "local" (legacy JSON files)
    storage_mode: str = "database"
    local_storage_dir: str = "./local_data"

    # Weather
    weather_api_key: Optional[str] = None
    weather_api_url: str = "https://api.openweathermap.org/data/2.5/forecast"
    weather_units: str = "imperial"

    # Statistics windows
    insight_weeks: int = 3
    insight_threshold: int = 40
    streak_window_days: int = 30
    missed_window_days: int = 7
    dashboard_event_days: int = 3

    # Family
    invitation_expiry_days: int = 7

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        import os
        from dotenv import load_dotenv

        # Load .env.local first, then .env (if they exist)
        load_dotenv(".env.local", override=True)
        load_dotenv(".env", override=False)
        cors_origins_str = os.getenv("CORS_ORIGINS", "")
        if cors_origins_str:
            cors_origins = [origin.strip() for origin in cors_origins_str.split(",")]
        else:
            cors_origins = [
                "http://localhost:5173",
                "http://127.0.0.1:5173",
                "http://localhost:3000",
                "http://127.0.0.1:3000"
            ]

        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///./myday.db"),
            api_title=os.getenv("API_TITLE", "MyDay API"),
            api_version=os.getenv("API_VERSION", "0.1.0-alpha"),
            api_description=os.getenv("API_DESCRIPTION", "A FastAPI application for daily tasks, habits, journal and events"),
            cors_origins=cors_origins,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            environment=os.getenv("ENVIRONMENT", "development"),
            debug=os.getenv("DEBUG", "true").lower() == "true",
            jwt_secret=os.getenv("JWT_SECRET"),
            session_cookie_name=os.getenv("SESSION_COOKIE_NAME", "myday_session"),
            session_cookie_domain=os.getenv("SESSION_COOKIE_DOMAIN") or None,
            dev_login_enabled=os.getenv("DEV_LOGIN_ENABLED", "false").lower() == "true",
            storage_mode=os.getenv("STORAGE_MODE", "database").lower(),
            local_storage_dir=os.getenv("LOCAL_STORAGE_DIR", "./local_data"),
            weather_api_key=os.getenv("WEATHER_API_KEY") or None,
            weather_api_url=os.getenv("WEATHER_API_URL", "https://api.openweathermap.org/data/2.5/forecast"),
            weather_units=os.getenv("WEATHER_UNITS", "imperial"),
            insight_weeks=int(os.getenv("INSIGHT_WEEKS", "3")),
            insight_threshold=int(os.getenv("INSIGHT_THRESHOLD", "40")),
            streak_window_days=int(os.getenv("STREAK_WINDOW_DAYS", "30")),
            missed_window_days=int(os.getenv("MISSED_WINDOW_DAYS", "7")),
            dashboard_event_days=int(os.getenv("DASHBOARD_EVENT_DAYS", "3")),
            invitation_expiry_days=int(os.getenv("INVITATION_EXPIRY_DAYS", "7")),
        )


# Global settings instance
settings = Settings.from_env()
