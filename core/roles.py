# ============================================
# ROLES
# ============================================
from models.enums import MemberRole, UserRole


# Per-building roles (building_members.role)
BUILDING_ROLES = MemberRole.list()

# Roles an admin may assign through update-role.
# Committee is granted only through building membership.
ASSIGNABLE_SYSTEM_ROLES = [UserRole.admin.value, UserRole.tenant.value]


def profile_role_for_member_role(member_role: str) -> str:
    """
    System role given to a newly created profile, derived from the
    building role it is being added with.
    """
    if member_role == MemberRole.committee.value:
        return UserRole.committee.value
    return UserRole.tenant.value
