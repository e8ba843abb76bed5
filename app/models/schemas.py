import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.services.day_window import get_next_four_days

START_TIME_PATTERN = re.compile(r"^(1[0-2]|0?[1-9]):[0-5][0-9]\s?(AM|PM)$", re.IGNORECASE)


class ReservationStatus(str, Enum):
    SUCCESS = "success"
    RESTRICTED = "restricted"
    SLOT_UNAVAILABLE = "slot_unavailable"
    DATE_NOT_FOUND = "date_not_found"
    ERROR = "error"


class ReservationState(str, Enum):
    """Steps of the reservation workflow, in the order they are reached."""

    START = "start"
    AUTHENTICATED = "authenticated"
    DAY_SELECTED = "day_selected"
    SLOT_FOUND = "slot_found"
    DIALOG_OPEN = "dialog_open"
    PARTNER_ATTACHED = "partner_attached"
    CONFIRMED = "confirmed"


class OpenCourtEntry(BaseModel):
    court: int = Field(..., description="Column position of the court in the slot grid")
    time: str = Field(..., description="Declared start time of the open slot")


class OpenCourtsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    day: str
    open_courts: list[OpenCourtEntry] = Field(default_factory=list, alias="openCourts")


class ReservationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    day: str = Field(..., description="Weekday name within the next four days")
    court_number: int = Field(..., gt=0, alias="courtNumber")
    start_time: str = Field(..., alias="startTime", description="12-hour time, e.g. 9:30 AM")
    partner_name: str = Field(..., min_length=1, alias="partnerName")
    partner_membership_number: str = Field(..., min_length=1, alias="partnerMembershipNumber")

    @field_validator("day")
    @classmethod
    def day_in_window(cls, value: str) -> str:
        valid_days = get_next_four_days()
        if value not in valid_days:
            raise ValueError(f"day must be one of {', '.join(valid_days)}")
        return value

    @field_validator("start_time")
    @classmethod
    def start_time_format(cls, value: str) -> str:
        if not START_TIME_PATTERN.match(value):
            raise ValueError("startTime must look like '10:30 AM' or '2:00 PM'")
        return value


class ReservationResponse(BaseModel):
    success: bool
    message: str | None = None
    error: str | None = None


class ErrorResponse(BaseModel):
    error: str
