from pydantic_settings import BaseSettings
from functools import lru_cache
import os


class Settings(BaseSettings):
    # App
    app_name: str = "Lakers Athletics"
    debug: bool = False
    environment: str = "development"  # development, staging, production, testing

    # Database - Use /data for a mounted volume, local path for development
    # Can be overridden with DATABASE_URL env var
    # Note: SQLite absolute paths need 4 slashes (sqlite:////path)
    database_url: str = (
        "sqlite+aiosqlite:///:memory:"
        if os.environ.get("TESTING") == "1"
        else (
            "sqlite+aiosqlite:////data/athletics.db"
            if os.path.exists("/data")
            else "sqlite+aiosqlite:///./athletics.db"
        )
    )

    # Public site (used for unsubscribe links)
    app_url: str = "http://localhost:8000"
    team_name: str = "Lakers"

    # Reminder scheduling
    reference_timezone: str = "America/New_York"  # Game times and quiet hours are local to the school
    quiet_hours_start: int = 0   # 12:00 AM
    quiet_hours_end: int = 5     # 5:00 AM (exclusive)
    notification_run_minute: int = 15  # Hourly pass runs at HH:15
    notification_stale_minutes: int = 5  # Claims older than this are presumed abandoned

    # Mailjet email delivery
    mailjet_api_key: str = ""
    mailjet_secret_key: str = ""
    mailjet_api_url: str = "https://api.mailjet.com/v3.1/send"
    from_email: str = "noreply@colchestersd.org"
    from_name: str = "Colchester Lakers Athletics"

    # Web Push Notifications (VAPID)
    # Generate keys: npx web-push generate-vapid-keys
    vapid_public_key: str = ""
    vapid_private_key: str = ""
    vapid_contact_email: str = "admin@colchestersd.org"

    class Config:
        env_file = ".env"

    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
