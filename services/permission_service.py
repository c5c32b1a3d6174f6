# services/permission_service.py
# 역할 기반 권한 확인과 커스터디 공개 여부 판단을 담당합니다.

from typing import Dict, FrozenSet, Iterable, Optional

from config import AppConfig
from models.booking import TeamMember
from models.user_context import Organization, Role, UserContext
from utils.logger import get_logger

logger = get_logger(__name__)

BOOKING_ENTITY = "booking"


class PermissionAction:
    """예약 엔티티에 대한 권한 액션 상수"""
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    CHECKOUT = "checkout"
    CHECKIN = "checkin"
    CANCEL = "cancel"
    ARCHIVE = "archive"


def can_perform(
    roles: Iterable[Role],
    entity: str,
    action: str,
    permissions: Optional[Dict[Role, Dict[str, FrozenSet[str]]]] = None
) -> bool:
    """
    역할 중 하나라도 해당 엔티티/액션을 허용하는지 확인합니다.

    Args:
        roles: 사용자 역할 목록
        entity: 엔티티 이름 (예: "booking")
        action: 액션 이름 (예: "checkout")
        permissions: 역할별 권한 표 (None이면 AppConfig.ROLE_PERMISSIONS)
    """
    table = permissions if permissions is not None else AppConfig.ROLE_PERMISSIONS
    for role in roles:
        if action in table.get(role, {}).get(entity, frozenset()):
            return True
    return False


def can_view_specific_custody(
    roles: Iterable[Role],
    custodian_user_id: Optional[str],
    organization: Optional[Organization],
    current_user_id: str
) -> bool:
    """
    사용자가 특정 커스터디 정보를 볼 수 있는지 확인합니다.

    관리자/소유자는 항상 볼 수 있고, 셀프서비스/기본 사용자는 본인이 커스터디언이거나
    조직 설정이 공개를 허용할 때만 볼 수 있습니다.
    """
    roles = frozenset(roles)
    if Role.OWNER in roles or Role.ADMIN in roles:
        return True
    if custodian_user_id and custodian_user_id == current_user_id:
        return True
    if organization is None:
        return False
    if Role.SELF_SERVICE in roles:
        return organization.self_service_can_see_custody
    if Role.BASE in roles:
        return organization.base_user_can_see_custody
    return False


def can_see_actions(user: UserContext, custodian: Optional[TeamMember]) -> bool:
    """
    예약 액션 버튼을 볼 수 있는지 확인합니다.

    1. 관리자/소유자는 항상 볼 수 있습니다.
    2. 셀프서비스/기본 사용자는 본인이 커스터디언일 때만 볼 수 있습니다.
    """
    if not user.is_base_or_self_service:
        return True
    if custodian is None:
        return False
    return custodian.user_id == user.user_id or custodian.id == user.user_id
