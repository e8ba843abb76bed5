from abc import ABC, abstractmethod
from dataclasses import dataclass

from app.models.schemas import (
    OpenCourtEntry,
    ReservationRequest,
    ReservationState,
    ReservationStatus,
)


@dataclass
class ReservationOutcome:
    status: ReservationStatus
    message: str
    reached_state: ReservationState = ReservationState.START

    @property
    def success(self) -> bool:
        return self.status == ReservationStatus.SUCCESS


class CourtBookingProvider(ABC):
    """Abstract base class for tennis court booking providers."""

    @abstractmethod
    async def get_open_courts(self, day: str) -> list[OpenCourtEntry]:
        """List the open (court, time) slots for a weekday in the booking window."""
        pass

    @abstractmethod
    async def reserve_court(self, request: ReservationRequest) -> ReservationOutcome:
        """Book a single slot with a partner attached."""
        pass

    @abstractmethod
    async def close(self) -> None:
        pass
