"""Tests for the request and response models."""

import pytest
from pydantic import ValidationError

from app.models.schemas import (
    OpenCourtEntry,
    OpenCourtsResponse,
    ReservationRequest,
    ReservationResponse,
    ReservationState,
    ReservationStatus,
)
from app.services.day_window import WEEKDAY_NAMES, get_next_four_days


def _request_body(**overrides) -> dict:
    body = {
        "day": get_next_four_days()[0],
        "courtNumber": 2,
        "startTime": "9:00 AM",
        "partnerName": "Pat Smith",
        "partnerMembershipNumber": "1001",
    }
    body.update(overrides)
    return body


class TestReservationRequest:
    def test_accepts_camel_case_body(self) -> None:
        request = ReservationRequest(**_request_body())
        assert request.court_number == 2
        assert request.start_time == "9:00 AM"
        assert request.partner_name == "Pat Smith"
        assert request.partner_membership_number == "1001"

    def test_accepts_field_names(self) -> None:
        request = ReservationRequest(
            day=get_next_four_days()[1],
            court_number=1,
            start_time="10:30 PM",
            partner_name="Pat",
            partner_membership_number="7",
        )
        assert request.court_number == 1

    @pytest.mark.parametrize("start_time", ["9:00 AM", "09:00 AM", "12:45 pm", "1:05PM"])
    def test_valid_start_times(self, start_time: str) -> None:
        assert ReservationRequest(**_request_body(startTime=start_time)).start_time == start_time

    @pytest.mark.parametrize(
        "start_time", ["25:00 AM", "13:00 PM", "0:30 AM", "9:60 AM", "9:00", "nine", ""]
    )
    def test_invalid_start_times_rejected(self, start_time: str) -> None:
        with pytest.raises(ValidationError):
            ReservationRequest(**_request_body(startTime=start_time))

    def test_day_outside_window_rejected(self) -> None:
        window = get_next_four_days()
        outside = next(day for day in WEEKDAY_NAMES if day not in window)
        with pytest.raises(ValidationError) as exc_info:
            ReservationRequest(**_request_body(day=outside))
        assert "day must be one of" in str(exc_info.value)

    @pytest.mark.parametrize("court_number", [0, -1])
    def test_court_number_must_be_positive(self, court_number: int) -> None:
        with pytest.raises(ValidationError):
            ReservationRequest(**_request_body(courtNumber=court_number))

    @pytest.mark.parametrize("field_name", ["partnerName", "partnerMembershipNumber"])
    def test_partner_fields_must_not_be_empty(self, field_name: str) -> None:
        with pytest.raises(ValidationError):
            ReservationRequest(**_request_body(**{field_name: ""}))

    def test_missing_field_rejected(self) -> None:
        body = _request_body()
        del body["partnerMembershipNumber"]
        with pytest.raises(ValidationError):
            ReservationRequest(**body)


class TestResponses:
    def test_open_courts_response_serializes_alias(self) -> None:
        response = OpenCourtsResponse(
            day="Monday", open_courts=[OpenCourtEntry(court=1, time="9:00 AM")]
        )
        assert response.model_dump(by_alias=True) == {
            "day": "Monday",
            "openCourts": [{"court": 1, "time": "9:00 AM"}],
        }

    def test_reservation_response_excludes_unset_fields(self) -> None:
        response = ReservationResponse(success=True, message="Court reserved successfully")
        assert response.model_dump(exclude_none=True) == {
            "success": True,
            "message": "Court reserved successfully",
        }


class TestEnums:
    def test_reservation_status_values(self) -> None:
        assert [status.value for status in ReservationStatus] == [
            "success",
            "restricted",
            "slot_unavailable",
            "date_not_found",
            "error",
        ]

    def test_reservation_states_in_workflow_order(self) -> None:
        assert list(ReservationState)[0] == ReservationState.START
        assert list(ReservationState)[-1] == ReservationState.CONFIRMED
