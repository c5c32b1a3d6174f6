"""
Tests for the booking modal layout.
"""

import json

from models.booking import Booking, BookingFlags, BookingStatus, TeamMember
from models.user_context import Organization, Role, UserContext
from services.booking_controls import build_form_controls
from services.booking_form_service import FormMetadata
from utils.constants import ActionIds, BlockIds, CallbackIds, DisabledReasons
from views.booking_view import build_booking_modal, build_custodian_option, build_header_actions

ADMIN = UserContext(user_id="U1", roles=frozenset({Role.ADMIN}), organization=Organization(id="org"))
SELF_SERVICE = UserContext(user_id="U1", roles=frozenset({Role.SELF_SERVICE}), organization=Organization(id="org"))
JANE = TeamMember(id="tm_1", name="Jane", user_id="U9", first_name="Jane", last_name="Doe", email="jane@example.com")


def block_ids(modal):
    return [block.get("block_id") for block in modal["blocks"] if block.get("block_id")]


def texts(modal):
    return [
        element["text"]
        for block in modal["blocks"]
        if block["type"] == "context"
        for element in block["elements"]
    ]


def render(booking, user=ADMIN, **kwargs):
    custodian = kwargs.pop("custodian", None)
    controls = build_form_controls(booking, user, custodian=custodian)
    return build_booking_modal(booking, controls, custodian=custodian, **kwargs)


def test_new_booking_modal():
    booking = Booking(start_date="2024-01-02T09:00", end_date="2024-01-02T18:00")
    modal = render(booking)

    assert modal["callback_id"] == CallbackIds.BOOKING_NEW
    assert modal["submit"]["text"] == "View assets list"
    assert BlockIds.NAME in block_ids(modal)
    assert BlockIds.FOOTER_ACTIONS in block_ids(modal)

    start_block = next(block for block in modal["blocks"] if block.get("block_id") == BlockIds.START_DATE)
    assert start_block["dispatch_action"] is True
    assert start_block["element"]["initial_date"] == "2024-01-02"


def test_revision_changes_date_block_ids():
    modal = render(Booking(start_date="2024-01-02T09:00", end_date="2024-01-02T18:00"), revision=2)

    assert f"{BlockIds.START_DATE}:2" in block_ids(modal)
    assert f"{BlockIds.END_TIME}:2" in block_ids(modal)
    assert BlockIds.NAME in block_ids(modal)
    assert FormMetadata.decode(modal["private_metadata"]).revision == 2


def test_reserved_booking_renders_dates_read_only():
    booking = Booking(
        id="bk_1",
        name="Camera kit",
        status=BookingStatus.RESERVED,
        start_date="2024-01-02T09:00",
        end_date="2024-01-02T18:00",
        booking_flags=BookingFlags(has_assets=True),
    )
    modal = render(booking, custodian=JANE, calendar_url="https://example.com/bookings/bk_1/cal.ics")

    assert modal["callback_id"] == CallbackIds.BOOKING_EDIT
    assert modal["submit"]["text"] == "Save"
    assert BlockIds.START_DATE not in block_ids(modal)
    assert BlockIds.CUSTODIAN not in block_ids(modal)
    assert BlockIds.NAME in block_ids(modal)
    assert BlockIds.HEADER_ACTIONS in block_ids(modal)

    metadata = FormMetadata.decode(modal["private_metadata"])
    assert metadata.booking_id == "bk_1"
    assert json.loads(metadata.custodian)["id"] == "tm_1"


def test_header_actions_show_disabled_reasons():
    booking = Booking(id="bk_1", name="Camera kit", status=BookingStatus.DRAFT)
    controls = build_form_controls(booking, ADMIN)

    blocks = build_header_actions(controls)

    assert all(block["type"] == "context" for block in blocks)
    assert DisabledReasons.NO_ASSETS in blocks[0]["elements"][0]["text"]


def test_header_actions_overflow_menu():
    booking = Booking(id="bk_1", name="Camera kit", status=BookingStatus.ONGOING)
    controls = build_form_controls(booking, ADMIN)

    elements = build_header_actions(controls)[0]["elements"]

    assert [element.get("action_id") for element in elements] == [ActionIds.CHECK_IN, ActionIds.ACTIONS_MENU]
    assert elements[1]["options"][0]["value"] == "cancel"


def test_completed_booking_without_save_is_read_only():
    booking = Booking(id="bk_1", name="Camera kit", status=BookingStatus.COMPLETED, custodian_ref="tm_1")
    modal = render(booking, custodian=JANE)

    assert "submit" not in modal
    assert not any(block["type"] == "input" for block in modal["blocks"])


def test_inline_errors_are_rendered():
    booking = Booking(start_date="2024-01-02T09:00", end_date="2024-01-02T08:00")
    modal = render(booking, errors={"endDate": "End date cannot be earlier than start date", "id": "bad"})

    assert "⚠️ End date cannot be earlier than start date" in texts(modal)
    assert "⚠️ id: bad" in texts(modal)


def test_custodian_option():
    option = build_custodian_option(JANE)

    assert option["text"]["text"] == "Jane Doe (jane@example.com)"
    assert json.loads(option["value"]) == {"id": "tm_1", "name": "Jane Doe", "userId": "U9"}
    assert build_custodian_option(JANE, can_see_custodian=False)["text"]["text"] == "Private"


def test_private_custodian_is_hidden():
    booking = Booking(id="bk_1", name="Camera kit", status=BookingStatus.RESERVED, custodian_ref="tm_1")
    modal = render(booking, user=SELF_SERVICE, custodian=JANE)

    custodian_block = next(
        block for block in modal["blocks"]
        if block["type"] == "section" and block["text"]["text"].startswith("*Custodian*")
    )
    assert "Private" in custodian_block["text"]["text"]
