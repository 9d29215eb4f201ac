# -------------------------
# Enums
# -------------------------
from .enums import (
    UserRole,
    MemberRole,
    ReportType,
    ContactStatus,
    SagaOperation,
    SagaStatus,
)

# -------------------------
# Onboarding Models
# -------------------------
from .onboarding import (
    AdminCreateUser,
    AdminUpdateRole,
    OnboardingResult,
    ActionResult,
)

# -------------------------
# Invite Models
# -------------------------
from .invite import (
    InviteCreate,
    InviteRead,
    PendingInviteCreate,
)

# -------------------------
# Profile Models
# -------------------------
from .profile import ProfileRead, ProfileUpdate

# -------------------------
# Saga Models
# -------------------------
from .saga import SagaRead

# -------------------------
# Contact Models
# -------------------------
from .contact import ContactRequestCreate

__all__ = [
    # enums
    "UserRole",
    "MemberRole",
    "ReportType",
    "ContactStatus",
    "SagaOperation",
    "SagaStatus",

    # onboarding
    "AdminCreateUser",
    "AdminUpdateRole",
    "OnboardingResult",
    "ActionResult",

    # invites
    "InviteCreate",
    "InviteRead",
    "PendingInviteCreate",

    # profiles
    "ProfileRead",
    "ProfileUpdate",

    # sagas
    "SagaRead",

    # contact
    "ContactRequestCreate",
]
