from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for validation messages.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# SYSTEM ROLE (profiles.role)
# -----------------------------------------------------
class UserRole(BaseStrEnum):
    """Platform-wide role tag on a profile."""

    admin = "admin"
    committee = "committee"
    tenant = "tenant"


# -----------------------------------------------------
# BUILDING ROLE (building_members.role)
# -----------------------------------------------------
class MemberRole(BaseStrEnum):
    """Per-building role of a member."""

    committee = "committee"
    tenant = "tenant"


# -----------------------------------------------------
# BUG REPORT TYPE
# -----------------------------------------------------
class ReportType(BaseStrEnum):
    bug = "bug"
    suggestion = "suggestion"


# -----------------------------------------------------
# CONTACT REQUEST STATUS
# -----------------------------------------------------
class ContactStatus(BaseStrEnum):
    new = "new"
    handled = "handled"


# -----------------------------------------------------
# ONBOARDING SAGA
# -----------------------------------------------------
class SagaOperation(BaseStrEnum):
    add_member = "add_member"
    delete_member = "delete_member"


class SagaStatus(BaseStrEnum):
    """Lifecycle of an onboarding saga record."""

    running = "running"
    completed = "completed"
    compensated = "compensated"
    partial = "partial"      # committed state left behind, compensations pending
    failed = "failed"
