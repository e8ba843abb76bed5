from dataclasses import dataclass
from enum import Enum

from pydantic_settings import BaseSettings

from app.providers.exceptions import ConfigurationError


class WaitMode(str, Enum):
    FIXED = "fixed"
    EVENT_DRIVEN = "event_driven"
    HYBRID = "hybrid"


@dataclass(frozen=True)
class SiteCredentials:
    """Login details and page URLs for the club booking website."""

    username: str
    password: str
    login_page_url: str
    booking_page_url: str


REQUIRED_SITE_SETTINGS = {
    "website_username": "WEBSITE_USERNAME",
    "website_password": "WEBSITE_PASSWORD",
    "website_login_page": "WEBSITE_LOGIN_PAGE",
    "website_booking_page": "WEBSITE_BOOKING_PAGE",
}


class Settings(BaseSettings):
    website_username: str = ""
    website_password: str = ""
    website_login_page: str = ""
    website_booking_page: str = ""

    use_mock_provider: bool = False

    port: int = 3000
    log_level: str = "INFO"

    # Empty means the host's local time
    timezone: str = ""

    cookie_dir: str = "."

    headless: bool = True
    chromedriver_path: str = ""

    wait_mode: WaitMode = WaitMode.FIXED
    retry_attempts: int = 3
    retry_backoff_seconds: float = 0.0
    page_load_timeout_seconds: float = 30.0
    wait_timeout_seconds: float = 30.0
    element_timeout_seconds: float = 5.0

    day_settle_seconds: float = 3.0
    dialog_settle_seconds: float = 3.0
    add_player_settle_seconds: float = 3.0
    save_settle_seconds: float = 5.0

    capture_diagnostics: bool = False
    diagnostics_dir: str = "/tmp"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def missing_site_settings(self) -> list[str]:
        """Return the environment variable names of unset site settings."""
        return [
            env_name
            for field_name, env_name in REQUIRED_SITE_SETTINGS.items()
            if not getattr(self, field_name)
        ]

    def site_credentials(self) -> SiteCredentials:
        missing = self.missing_site_settings()
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )
        return SiteCredentials(
            username=self.website_username,
            password=self.website_password,
            login_page_url=self.website_login_page,
            booking_page_url=self.website_booking_page,
        )


settings = Settings()
