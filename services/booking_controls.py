# services/booking_controls.py
# 예약 상태, 자산 플래그, 사용자 권한에 따라 폼 컨트롤의 표시/비활성 상태를 계산합니다.

from dataclasses import dataclass, field
from typing import Optional

from models.booking import Booking, BookingStatus, TeamMember
from models.user_context import UserContext
from utils.constants import DisabledReasons

from .permission_service import (
    BOOKING_ENTITY,
    PermissionAction,
    can_perform,
    can_see_actions,
    can_view_specific_custody,
)


@dataclass
class ControlState:
    """버튼 하나의 상태"""
    visible: bool = False
    disabled: bool = False
    # 비활성화 사유 (툴팁으로 표시)
    reason: Optional[str] = None
    label: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return self.visible and not self.disabled


@dataclass
class BookingFormControls:
    """폼 전체 컨트롤 상태"""
    is_new_booking: bool
    can_see_actions: bool = False
    can_see_custodian: bool = True
    show_process_info: bool = False
    name_disabled: bool = False
    dates_disabled: bool = False
    custodian_disabled: bool = False
    description_disabled: bool = False
    # 상태 제한 저장(이름만 변경) 여부: "yes" / "no"
    name_change_only: str = "no"
    save: ControlState = field(default_factory=ControlState)
    reserve: ControlState = field(default_factory=ControlState)
    check_out: ControlState = field(default_factory=ControlState)
    check_in: ControlState = field(default_factory=ControlState)
    cancel: ControlState = field(default_factory=ControlState)
    archive: ControlState = field(default_factory=ControlState)
    add_to_calendar: ControlState = field(default_factory=ControlState)
    scan: ControlState = field(default_factory=ControlState)
    create: ControlState = field(default_factory=ControlState)


def _reserve_state(booking: Booking, disabled: bool, is_processing: bool, user: UserContext) -> ControlState:
    flags = booking.booking_flags
    label = "Request reservation" if user.is_base else "Reserve"
    blocked = (
        disabled
        or not flags.has_assets
        or flags.has_already_booked_assets
        or flags.has_unavailable_assets
    )
    if not blocked:
        return ControlState(visible=True, label=label)

    if flags.has_unavailable_assets:
        reason = DisabledReasons.UNAVAILABLE_ASSETS
    elif flags.has_already_booked_assets:
        reason = DisabledReasons.ALREADY_BOOKED_ASSETS
    elif is_processing:
        reason = None
    else:
        reason = DisabledReasons.NO_ASSETS
    return ControlState(visible=True, disabled=True, reason=reason, label=label)


def _check_out_state(booking: Booking, disabled: bool, is_processing: bool) -> ControlState:
    flags = booking.booking_flags
    blocked = (
        disabled
        or flags.has_unavailable_assets
        or flags.has_checked_out_assets
        or flags.has_assets_in_custody
    )
    if not blocked:
        return ControlState(visible=True, label="Check-out")

    if flags.has_assets_in_custody:
        reason = DisabledReasons.ASSETS_IN_CUSTODY
    elif is_processing:
        reason = None
    else:
        reason = DisabledReasons.ASSETS_NOT_AVAILABLE
    return ControlState(visible=True, disabled=True, reason=reason, label="Check-out")


def build_form_controls(
    booking: Booking,
    user: UserContext,
    custodian: Optional[TeamMember] = None,
    is_processing: bool = False
) -> BookingFormControls:
    """
    예약 폼의 컨트롤 상태를 계산합니다.

    Args:
        booking: 폼에 표시할 예약
        user: 현재 사용자
        custodian: booking.custodian_ref에 해당하는 팀 멤버 (없으면 None)
        is_processing: 제출 처리 중 여부

    Returns:
        BookingFormControls: 컨트롤 상태
    """
    status = booking.status
    is_new = booking.is_new
    disabled = is_processing or booking.archived

    inputs_locked = booking.has_status(
        BookingStatus.RESERVED,
        BookingStatus.ONGOING,
        BookingStatus.COMPLETED,
        BookingStatus.OVERDUE,
        BookingStatus.CANCELLED,
    )
    final = (status is not None and status.is_final) or booking.archived

    controls = BookingFormControls(is_new_booking=is_new)
    controls.dates_disabled = disabled or inputs_locked
    controls.name_disabled = disabled or final
    controls.description_disabled = disabled or final
    controls.custodian_disabled = disabled or user.is_base_or_self_service or controls.dates_disabled
    controls.can_see_custodian = is_new or can_view_specific_custody(
        roles=user.roles,
        custodian_user_id=custodian.user_id if custodian else None,
        organization=user.organization,
        current_user_id=user.user_id,
    )

    if is_new:
        # 새 예약 하단 버튼
        has_assets = booking.asset_ids is not None
        controls.scan = ControlState(visible=not has_assets, disabled=disabled, label="Scan QR codes")
        controls.create = ControlState(
            visible=True,
            disabled=disabled,
            label="Create Booking" if has_assets else "View assets list",
        )
        return controls

    controls.can_see_actions = can_see_actions(user, custodian)
    controls.add_to_calendar = ControlState(
        visible=True,
        disabled=disabled or booking.has_status(BookingStatus.DRAFT, BookingStatus.CANCELLED),
        label="Add to calendar",
    )
    controls.add_to_calendar.reason = (
        DisabledReasons.CALENDAR_UNAVAILABLE
        if controls.add_to_calendar.disabled
        else DisabledReasons.CALENDAR_AVAILABLE
    )

    if not controls.can_see_actions:
        return controls

    controls.show_process_info = user.is_base

    # 종료 상태가 아니면 저장 버튼을 항상 보여줍니다
    if not final:
        controls.save = ControlState(visible=True, disabled=disabled, label="Save")
        controls.name_change_only = "no" if status is BookingStatus.DRAFT else "yes"

    if status is BookingStatus.DRAFT:
        controls.reserve = _reserve_state(booking, disabled, is_processing, user)

    if status is BookingStatus.RESERVED and can_perform(user.roles, BOOKING_ENTITY, PermissionAction.CHECKOUT):
        controls.check_out = _check_out_state(booking, disabled, is_processing)

    if booking.has_status(BookingStatus.ONGOING, BookingStatus.OVERDUE) and can_perform(
        user.roles, BOOKING_ENTITY, PermissionAction.CHECKIN
    ):
        controls.check_in = ControlState(visible=True, disabled=disabled, label="Check-in")

    if booking.has_status(BookingStatus.RESERVED, BookingStatus.ONGOING, BookingStatus.OVERDUE) and can_perform(
        user.roles, BOOKING_ENTITY, PermissionAction.CANCEL
    ):
        controls.cancel = ControlState(visible=True, disabled=disabled, label="Cancel booking")

    if booking.has_status(BookingStatus.COMPLETED, BookingStatus.CANCELLED) and not booking.archived and can_perform(
        user.roles, BOOKING_ENTITY, PermissionAction.ARCHIVE
    ):
        controls.archive = ControlState(visible=True, disabled=disabled, label="Archive")

    return controls
