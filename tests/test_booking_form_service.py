"""
Tests for reading Slack modal state, preparing submissions and end-date adjustment.
"""

import json
from datetime import datetime, timezone

import pytest

from exceptions import StatusRequiredError, ValidationError
from models.booking import Booking, BookingFlags, BookingIntent, BookingStatus
from services.booking_form_service import (
    BookingFormService,
    FormMetadata,
    errors_to_blocks,
    extract_form_values,
    find_action_state,
    schema_action_for,
)
from services.validation_service import ClientHints
from utils.constants import ActionIds, BlockIds, ErrorMessages

CUSTODIAN = json.dumps({"id": "tm_1", "name": "Jane Doe", "userId": None})
HINTS = ClientHints(time_zone="UTC")


def fixed_clock():
    return datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_view(metadata, name="Camera kit", custodian=CUSTODIAN, start=("2024-01-02", "09:00"),
              end=("2024-01-02", "18:00"), description=None, revision_suffix=""):
    values = {
        BlockIds.NAME: {ActionIds.NAME_INPUT: {"type": "plain_text_input", "value": name}},
        BlockIds.DESCRIPTION: {ActionIds.DESCRIPTION_INPUT: {"type": "plain_text_input", "value": description}},
    }
    if custodian is not False:
        selected = {"text": {"type": "plain_text", "text": "Jane"}, "value": custodian} if custodian else None
        values[BlockIds.CUSTODIAN] = {
            ActionIds.CUSTODIAN_SELECT: {"type": "external_select", "selected_option": selected}
        }
    if start is not None:
        values[BlockIds.START_DATE + revision_suffix] = {ActionIds.START_DATE: {"selected_date": start[0]}}
        values[BlockIds.START_TIME + revision_suffix] = {ActionIds.START_TIME: {"selected_time": start[1]}}
    if end is not None:
        values[BlockIds.END_DATE + revision_suffix] = {ActionIds.END_DATE: {"selected_date": end[0]}}
        values[BlockIds.END_TIME + revision_suffix] = {ActionIds.END_TIME: {"selected_time": end[1]}}

    blocks = [{"type": "input", "block_id": block_id} for block_id in values]
    return {
        "id": "V1",
        "hash": "h1",
        "private_metadata": metadata.encode(),
        "state": {"values": values},
        "blocks": blocks,
    }


@pytest.fixture
def service():
    return BookingFormService(clock=fixed_clock)


def test_metadata_round_trip():
    metadata = FormMetadata(
        booking_id="bk_1",
        status=BookingStatus.RESERVED,
        asset_ids=["a1", "a2"],
        booking_flags=BookingFlags(has_assets=True),
        custodian=CUSTODIAN,
        custodian_ref="tm_1",
        revision=3,
    )

    decoded = FormMetadata.decode(metadata.encode())

    assert decoded == metadata
    assert not decoded.is_new_booking
    assert FormMetadata.decode(None).is_new_booking


def test_find_action_state_ignores_block_revision():
    view = make_view(FormMetadata(), revision_suffix=":2")

    assert find_action_state(view, ActionIds.START_DATE) == {"selected_date": "2024-01-02"}
    assert find_action_state(view, "missing_action") is None


def test_extract_form_values_joins_pickers():
    metadata = FormMetadata(asset_ids=["a1"])
    values = extract_form_values(make_view(metadata, description="Notes"), metadata)

    assert values == {
        "assetIds": ["a1"],
        "name": "Camera kit",
        "description": "Notes",
        "custodian": CUSTODIAN,
        "startDate": "2024-01-02T09:00",
        "endDate": "2024-01-02T18:00",
    }


def test_incomplete_picker_is_submitted_empty():
    view = make_view(FormMetadata())
    view["state"]["values"][BlockIds.END_TIME][ActionIds.END_TIME]["selected_time"] = None

    assert extract_form_values(view, FormMetadata())["endDate"] == ""


def test_read_only_fields_are_not_submitted_except_custodian():
    metadata = FormMetadata(booking_id="bk_1", status=BookingStatus.RESERVED, custodian=CUSTODIAN)
    values = extract_form_values(make_view(metadata, custodian=False, start=None, end=None), metadata)

    assert "startDate" not in values
    assert "endDate" not in values
    assert values["custodian"] == CUSTODIAN
    assert values["id"] == "bk_1"


@pytest.mark.parametrize("intent, booking_id, expected", [
    (BookingIntent.CREATE, None, "new"),
    (BookingIntent.SCAN, None, "new"),
    (BookingIntent.SAVE, None, "new"),
    (BookingIntent.SAVE, "bk_1", "save"),
    (BookingIntent.RESERVE, "bk_1", "reserve"),
    (BookingIntent.CHECK_IN, "bk_1", "checkIn"),
])
def test_schema_action_for(intent, booking_id, expected):
    assert schema_action_for(intent, FormMetadata(booking_id=booking_id)) == expected


def test_prepare_new_booking(service):
    metadata = FormMetadata(asset_ids=["a1", "a2"])
    prepared = service.prepare(make_view(metadata), BookingIntent.CREATE, HINTS)

    assert prepared.is_valid
    assert prepared.submission.to_form() == {
        "name": "Camera kit",
        "custodian": json.dumps({"id": "tm_1", "name": "Jane Doe", "userId": None}),
        "startDate": "2024-01-02T09:00",
        "endDate": "2024-01-02T18:00",
        "assetIds[0]": "a1",
        "assetIds[1]": "a2",
        "intent": "create",
    }


def test_prepare_returns_field_errors(service):
    prepared = service.prepare(make_view(FormMetadata(), name="x", custodian=None), BookingIntent.CREATE, HINTS)

    assert not prepared.is_valid
    assert prepared.submission is None
    assert prepared.result.errors["name"] == ErrorMessages.NAME_REQUIRED
    assert prepared.result.errors["custodian"] == ErrorMessages.CUSTODIAN_REQUIRED


def test_prepare_status_restricted_save(service):
    metadata = FormMetadata(booking_id="bk_1", status=BookingStatus.ONGOING, custodian=CUSTODIAN)
    view = make_view(metadata, custodian=False, start=None, end=None, description="Updated")

    prepared = service.prepare(view, BookingIntent.SAVE, HINTS)

    assert prepared.is_valid
    form = prepared.submission.to_form()
    assert form["id"] == "bk_1"
    assert form["nameChangeOnly"] == "yes"
    assert form["description"] == "Updated"
    assert "startDate" not in form


def test_prepare_draft_save_sends_full_form(service):
    metadata = FormMetadata(booking_id="bk_1", status=BookingStatus.DRAFT)
    prepared = service.prepare(make_view(metadata), BookingIntent.SAVE, HINTS)

    assert prepared.is_valid
    assert prepared.submission.to_form()["nameChangeOnly"] == "no"


def test_prepare_save_without_status_is_fatal(service):
    metadata = FormMetadata(booking_id="bk_1")

    with pytest.raises(StatusRequiredError):
        service.prepare(make_view(metadata), BookingIntent.SAVE, HINTS)


def test_submit_refuses_invalid_submission(service):
    prepared = service.prepare(make_view(FormMetadata(), name=""), BookingIntent.CREATE, HINTS)

    with pytest.raises(ValidationError) as excinfo:
        service.submit(prepared)

    assert str(excinfo.value) == ErrorMessages.FORM_INVALID
    assert excinfo.value.field_errors["name"] == ErrorMessages.NAME_REQUIRED


@pytest.mark.parametrize("intent", [
    BookingIntent.CHECK_OUT,
    BookingIntent.CHECK_IN,
    BookingIntent.CANCEL,
    BookingIntent.ARCHIVE,
])
def test_lifecycle_intent_sends_only_id(service, intent):
    metadata = FormMetadata(booking_id="bk_1", status=BookingStatus.COMPLETED, custodian=CUSTODIAN)
    view = make_view(metadata, name=None, custodian=None, start=None, end=None)

    prepared = service.prepare(view, intent, HINTS)

    assert prepared.is_valid
    assert prepared.submission.to_form() == {"id": "bk_1", "intent": intent.value}


def test_lifecycle_intent_without_booking_id(service):
    prepared = service.prepare(make_view(FormMetadata()), BookingIntent.CANCEL, HINTS)

    assert not prepared.is_valid
    assert prepared.result.errors == {"id": ErrorMessages.FIELD_REQUIRED}
    with pytest.raises(ValidationError):
        service.submit(prepared)


def test_submit_posts_through_api(service):
    class FakeApi:
        def __init__(self):
            self.sent = []

        def submit(self, submission):
            self.sent.append(submission)
            return {"ok": True}

    api = FakeApi()
    service.api = api
    prepared = service.prepare(make_view(FormMetadata()), BookingIntent.CREATE, HINTS)

    assert service.submit(prepared) == {"ok": True}
    assert api.sent[0].intent is BookingIntent.CREATE


def test_adjust_end_date_for_new_booking(service):
    view = make_view(FormMetadata(), start=("2024-01-12", "09:00"), end=("2024-01-10", "10:00"))

    assert service.adjust_end_date(view) == "2024-01-12T18:00"


def test_adjust_end_date_ignores_existing_booking(service):
    metadata = FormMetadata(booking_id="bk_1", status=BookingStatus.DRAFT)
    view = make_view(metadata, start=("2024-01-12", "09:00"), end=("2024-01-10", "10:00"))

    assert service.adjust_end_date(view) is None


def test_adjust_end_date_without_start_time(service):
    view = make_view(FormMetadata(), start=("2024-01-12", None), end=("2024-01-10", "10:00"))

    assert service.adjust_end_date(view) is None


def test_current_booking_keeps_read_only_values(service):
    metadata = FormMetadata(booking_id="bk_1", status=BookingStatus.RESERVED, custodian_ref="tm_1")
    view = make_view(metadata, custodian=False, start=None, end=None)
    stored = Booking(id="bk_1", name="Old", start_date="2024-01-02T09:00", end_date="2024-01-02T18:00")

    booking = service.current_booking(view, base=stored)

    assert booking.name == "Camera kit"
    assert booking.start_date == "2024-01-02T09:00"
    assert booking.custodian_ref == "tm_1"
    assert booking.status is BookingStatus.RESERVED


def test_current_custodian(service):
    custodian = service.current_custodian(make_view(FormMetadata()))

    assert custodian.id == "tm_1"
    assert custodian.name == "Jane Doe"


def test_errors_to_blocks_uses_current_block_ids():
    view = make_view(FormMetadata(), revision_suffix=":1")
    errors = {"name": "Name is required", "endDate": "End date cannot be earlier than start date", "id": "bad"}

    assert errors_to_blocks(errors, view) == {
        BlockIds.NAME: "Name is required / id: bad",
        f"{BlockIds.END_DATE}:1": "End date cannot be earlier than start date",
    }
