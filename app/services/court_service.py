"""
Court service for open-court lookups and reservations.

This module sits between the HTTP routes and the booking provider. It holds
the provider chosen at startup and times each browser-backed request.
"""

import logging
import time

from app.models.schemas import OpenCourtEntry, ReservationRequest
from app.providers.base import CourtBookingProvider, ReservationOutcome

logger = logging.getLogger(__name__)


class CourtService:
    """
    Runs court lookups and reservations through the configured provider.

    Attributes:
        _provider: Provider that drives the club booking website.
    """

    def __init__(self) -> None:
        self._provider: CourtBookingProvider | None = None

    def set_provider(self, provider: CourtBookingProvider) -> None:
        self._provider = provider

    @property
    def provider(self) -> CourtBookingProvider:
        if self._provider is None:
            raise RuntimeError("Court booking provider has not been configured")
        return self._provider

    async def get_open_courts(self, day: str) -> list[OpenCourtEntry]:
        started = time.monotonic()
        open_courts = await self.provider.get_open_courts(day)
        logger.info(
            f"Open courts lookup for {day} returned {len(open_courts)} entries "
            f"in {time.monotonic() - started:.1f}s"
        )
        return open_courts

    async def reserve_court(self, request: ReservationRequest) -> ReservationOutcome:
        started = time.monotonic()
        outcome = await self.provider.reserve_court(request)
        logger.info(
            f"Reservation of court {request.court_number} at {request.start_time} on "
            f"{request.day} ended with {outcome.status.value} "
            f"in {time.monotonic() - started:.1f}s"
        )
        return outcome


court_service = CourtService()
