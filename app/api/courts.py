import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.models.schemas import (
    ErrorResponse,
    OpenCourtsResponse,
    ReservationRequest,
    ReservationResponse,
    ReservationStatus,
)
from app.services.court_service import court_service
from app.services.day_window import validate_day

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["courts"])

RESTRICTED_MESSAGE = "Booking restricted due to club policy."
RESERVATION_ERROR_MESSAGE = "An error occurred while reserving the court."
OPEN_COURTS_ERROR_MESSAGE = "An error occurred while fetching open courts"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@router.get("/open-courts", response_model=OpenCourtsResponse)
async def get_open_courts(day: str | None = None) -> OpenCourtsResponse | JSONResponse:
    if not day:
        return _error(400, "Day parameter is required")

    if not validate_day(day):
        return _error(400, "Day must be within the next 4 days")

    try:
        open_courts = await court_service.get_open_courts(day)
    except Exception:
        logger.exception(f"An error occurred while fetching open courts for {day}")
        return _error(500, OPEN_COURTS_ERROR_MESSAGE)

    return OpenCourtsResponse(day=day, open_courts=open_courts)


@router.post("/reserve-court", response_model=ReservationResponse, response_model_exclude_none=True)
async def reserve_court(request: ReservationRequest) -> ReservationResponse | JSONResponse:
    """
    Reserve a court slot with a partner.

    Status codes:
        200: The booking was saved.
        403: The club rejected the booking under one of its restrictions.
        500: Anything else, including a missing date or an unavailable slot.
    """
    try:
        outcome = await court_service.reserve_court(request)
    except Exception:
        logger.exception("An error occurred while reserving the court")
        outcome = None

    if outcome is not None and outcome.status == ReservationStatus.SUCCESS:
        return ReservationResponse(success=True, message=outcome.message)

    if outcome is not None and outcome.status == ReservationStatus.RESTRICTED:
        status_code, message = 403, RESTRICTED_MESSAGE
    else:
        if outcome is not None:
            logger.error(f"Reservation failed ({outcome.status.value}): {outcome.message}")
        status_code, message = 500, RESERVATION_ERROR_MESSAGE

    return JSONResponse(
        status_code=status_code,
        content=ReservationResponse(success=False, error=message).model_dump(exclude_none=True),
    )
