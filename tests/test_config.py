"""Tests for settings, provider selection and startup checks."""

from unittest.mock import MagicMock, patch

import pytest

from app.config import Settings, WaitMode
from app.main import build_provider, lifespan
from app.providers.exceptions import ConfigurationError
from app.providers.northstar_provider import MockCourtProvider, NorthstarCourtProvider


def make_settings(**overrides) -> Settings:
    values = {
        "website_username": "member42",
        "website_password": "secret",
        "website_login_page": "https://club.example/login",
        "website_booking_page": "https://club.example/book",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSettings:
    def test_defaults(self) -> None:
        settings = make_settings()
        assert settings.port == 3000
        assert settings.wait_mode == WaitMode.FIXED
        assert settings.retry_attempts == 3
        assert settings.element_timeout_seconds == 5.0
        assert settings.save_settle_seconds == 5.0

    def test_site_credentials(self) -> None:
        credentials = make_settings().site_credentials()
        assert credentials.username == "member42"
        assert credentials.booking_page_url == "https://club.example/book"

    def test_missing_site_settings_named(self) -> None:
        settings = make_settings(website_password="", website_booking_page="")
        assert settings.missing_site_settings() == ["WEBSITE_PASSWORD", "WEBSITE_BOOKING_PAGE"]

    def test_site_credentials_raise_when_missing(self) -> None:
        settings = make_settings(website_username="")
        with pytest.raises(ConfigurationError, match="WEBSITE_USERNAME"):
            settings.site_credentials()


class TestBuildProvider:
    def test_mock_provider_when_flag_set(self) -> None:
        with patch("app.main.settings", make_settings(use_mock_provider=True)):
            assert isinstance(build_provider(), MockCourtProvider)

    def test_real_provider_with_credentials(self) -> None:
        with patch("app.main.settings", make_settings()):
            assert isinstance(build_provider(), NorthstarCourtProvider)

    def test_missing_credentials_are_fatal(self) -> None:
        with patch("app.main.settings", make_settings(website_login_page="")):
            with pytest.raises(ConfigurationError):
                build_provider()


class TestLifespan:
    @pytest.mark.asyncio
    async def test_installs_provider(self) -> None:
        mock_service = MagicMock()
        with (
            patch("app.main.settings", make_settings(use_mock_provider=True)),
            patch("app.main.court_service", mock_service),
        ):
            async with lifespan(MagicMock()):
                provider = mock_service.set_provider.call_args.args[0]
                assert isinstance(provider, MockCourtProvider)

    @pytest.mark.asyncio
    async def test_startup_fails_without_credentials(self) -> None:
        with patch("app.main.settings", make_settings(website_username="")):
            with pytest.raises(ConfigurationError):
                async with lifespan(MagicMock()):
                    pass
