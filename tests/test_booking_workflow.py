"""
Tests for workflow buttons submitted from a rendered booking modal.

The view passed to the form service is built from the modal itself, the way Slack
sends it back: state only holds the input blocks, filled with their initial values.
"""

from datetime import datetime, timezone

import pytest

from models.booking import Booking, BookingFlags, BookingIntent, BookingStatus, TeamMember
from models.user_context import Organization, Role, UserContext
from services.booking_controls import build_form_controls
from services.booking_form_service import BookingFormService
from services.validation_service import ClientHints
from utils.constants import BlockIds
from views.booking_view import build_booking_modal

ADMIN = UserContext(user_id="U1", roles=frozenset({Role.ADMIN}), organization=Organization(id="org"))
JANE = TeamMember(id="tm_1", name="Jane", user_id="U9", first_name="Jane", last_name="Doe", email="jane@example.com")
HINTS = ClientHints(time_zone="UTC")


def fixed_clock():
    return datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def stored_booking(status, description=None, **flags):
    return Booking(
        id="bk_1",
        name="Camera kit",
        description=description,
        custodian_ref="tm_1",
        start_date="2024-01-02T09:00",
        end_date="2024-01-02T18:00",
        status=status,
        asset_ids=["a1"],
        booking_flags=BookingFlags(**flags),
    )


def render(booking, custodian=JANE):
    controls = build_form_controls(booking, ADMIN, custodian=custodian)
    return controls, build_booking_modal(booking, controls, custodian=custodian)


def element_state(element):
    kind = element["type"]
    if kind == "plain_text_input":
        return {"type": kind, "value": element.get("initial_value")}
    if kind == "datepicker":
        return {"type": kind, "selected_date": element.get("initial_date")}
    if kind == "timepicker":
        return {"type": kind, "selected_time": element.get("initial_time")}
    if kind == "external_select":
        return {"type": kind, "selected_option": element.get("initial_option")}
    raise AssertionError(f"unexpected input element {kind}")


def submitted_view(modal):
    values = {}
    for block in modal["blocks"]:
        if block["type"] != "input":
            continue
        element = block["element"]
        values[block["block_id"]] = {element["action_id"]: element_state(element)}
    return {
        "id": "V1",
        "hash": "h1",
        "private_metadata": modal["private_metadata"],
        "blocks": modal["blocks"],
        "state": {"values": values},
    }


def offered_intents(modal):
    header = next(
        (block for block in modal["blocks"] if block.get("block_id") == BlockIds.HEADER_ACTIONS),
        {"elements": []},
    )
    intents = []
    for element in header["elements"]:
        if element["type"] == "overflow":
            intents.extend(option["value"] for option in element["options"])
        else:
            intents.append(element["value"])
    return intents


@pytest.fixture
def service():
    return BookingFormService(clock=fixed_clock)


def test_reserve_draft_booking(service):
    controls, modal = render(stored_booking(BookingStatus.DRAFT, has_assets=True))

    assert controls.reserve.enabled
    assert BookingIntent.RESERVE.value in offered_intents(modal)

    prepared = service.prepare(submitted_view(modal), BookingIntent.RESERVE, HINTS)

    assert prepared.is_valid
    assert prepared.submission.to_form() == {
        "id": "bk_1",
        "name": "Camera kit",
        "custodian": JANE.to_custodian_json(),
        "startDate": "2024-01-02T09:00",
        "endDate": "2024-01-02T18:00",
        "assetIds[0]": "a1",
        "nameChangeOnly": "no",
        "intent": "reserve",
    }


@pytest.mark.parametrize("status, control, intent", [
    (BookingStatus.RESERVED, "check_out", BookingIntent.CHECK_OUT),
    (BookingStatus.RESERVED, "cancel", BookingIntent.CANCEL),
    (BookingStatus.ONGOING, "check_in", BookingIntent.CHECK_IN),
    (BookingStatus.OVERDUE, "check_in", BookingIntent.CHECK_IN),
    (BookingStatus.OVERDUE, "cancel", BookingIntent.CANCEL),
    (BookingStatus.COMPLETED, "archive", BookingIntent.ARCHIVE),
    (BookingStatus.CANCELLED, "archive", BookingIntent.ARCHIVE),
])
def test_enabled_status_action_can_be_submitted(service, status, control, intent):
    controls, modal = render(stored_booking(status, has_assets=True))

    assert getattr(controls, control).enabled
    assert intent.value in offered_intents(modal)

    prepared = service.prepare(submitted_view(modal), intent, HINTS)

    assert prepared.is_valid
    assert prepared.submission.to_form() == {"id": "bk_1", "intent": intent.value}


def test_cancel_booking_without_custodian(service):
    controls, modal = render(stored_booking(BookingStatus.RESERVED), custodian=None)

    assert controls.cancel.enabled

    prepared = service.prepare(submitted_view(modal), BookingIntent.CANCEL, HINTS)

    assert prepared.is_valid
    assert prepared.submission.to_form() == {"id": "bk_1", "intent": "cancel"}


def test_completed_modal_has_no_inputs_but_archives(service):
    _, modal = render(stored_booking(BookingStatus.COMPLETED))
    view = submitted_view(modal)

    assert view["state"]["values"] == {}
    assert service.prepare(view, BookingIntent.ARCHIVE, HINTS).is_valid


def test_save_reserved_booking_from_modal(service):
    controls, modal = render(stored_booking(BookingStatus.RESERVED, description="Tripod included"))

    assert controls.save.enabled
    assert controls.dates_disabled

    prepared = service.prepare(submitted_view(modal), BookingIntent.SAVE, HINTS)

    assert prepared.is_valid
    assert prepared.submission.to_form() == {
        "id": "bk_1",
        "name": "Camera kit",
        "description": "Tripod included",
        "custodian": JANE.to_custodian_json(),
        "assetIds[0]": "a1",
        "nameChangeOnly": "yes",
        "intent": "save",
    }
