import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api import courts, health
from app.config import settings
from app.providers.base import CourtBookingProvider
from app.providers.exceptions import ConfigurationError
from app.providers.northstar_provider import MockCourtProvider, NorthstarCourtProvider
from app.services.court_service import court_service

logger = logging.getLogger(__name__)


def build_provider() -> CourtBookingProvider:
    """
    Choose the booking provider for this process.

    Raises:
        ConfigurationError: If the real provider is needed and site settings are missing.
    """
    if settings.use_mock_provider:
        logger.warning(
            "USE_MOCK_PROVIDER is set - using MockCourtProvider. No real bookings will be made."
        )
        return MockCourtProvider()

    credentials = settings.site_credentials()
    logger.info(f"Booking site credentials configured for {credentials.username}")
    return NorthstarCourtProvider(credentials)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    provider = build_provider()
    court_service.set_provider(provider)

    yield

    await provider.close()


app = FastAPI(
    title="CourtBook",
    description="Tennis court availability and reservation API for the club booking site",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


app.include_router(health.router)
app.include_router(courts.router)


def run() -> None:
    """Start the API server, refusing to start without site settings."""
    import uvicorn

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not settings.use_mock_provider:
        try:
            settings.site_credentials()
        except ConfigurationError as e:
            logger.error(str(e))
            sys.exit(1)

    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
