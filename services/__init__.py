# services/__init__.py

from .booking_api import BookingApiClient, BookingSubmission
from .booking_controls import BookingFormControls, ControlState, build_form_controls
from .booking_form_service import BookingFormService, FormMetadata, PreparedSubmission
from .team_member_service import TeamMemberService
from .validation_service import BookingFormResult, BookingFormSchema, ClientHints, select_schema

# 명확한 인터페이스 노출
__all__ = [
    'BookingApiClient',
    'BookingSubmission',
    'BookingFormControls',
    'ControlState',
    'build_form_controls',
    'BookingFormService',
    'FormMetadata',
    'PreparedSubmission',
    'TeamMemberService',
    'BookingFormResult',
    'BookingFormSchema',
    'ClientHints',
    'select_schema',
]
