# services/onboarding_saga.py

"""
Persisted step log for multi-step onboarding operations.

Supabase offers no transaction spanning GoTrue and PostgREST, so the
add-member and delete-member flows record each step in the
`onboarding_sagas` table:

    current_step     the external call in flight (written before the call)
    completed_steps  steps that returned successfully
    compensations    undo actions for committed steps, in commit order

A crash between steps therefore leaves a `running` row naming exactly
what was committed, and a `partial` row can be undone later by running
its compensations in reverse.

Writing the saga row is best-effort: a failure to persist it is logged
and never blocks the onboarding step itself.
"""

import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from supabase import Client

from core.errors import extract_supabase_error
from core.logging_config import get_logger
from models.enums import SagaOperation, SagaStatus


log = get_logger("saga")

SAGA_TABLE = "onboarding_sagas"


# -----------------------------------------------------
# Compensating actions (name → callable(client, user_id))
# -----------------------------------------------------
def _delete_auth_user(client: Client, user_id: str):
    client.auth.admin.delete_user(user_id)


def _delete_profile(client: Client, user_id: str):
    client.table("profiles").delete().eq("id", user_id).execute()


COMPENSATIONS: Dict[str, Callable[[Client, str], None]] = {
    "delete_auth_user": _delete_auth_user,
    "delete_profile": _delete_profile,
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class OnboardingSaga:

    def __init__(
        self,
        client: Client,
        operation: SagaOperation,
        *,
        target_email: Optional[str] = None,
        target_user_id: Optional[str] = None,
        building_id: Optional[str] = None,
        requested_by: Optional[str] = None,
        saga_id: Optional[str] = None,
    ):
        self.client = client
        self.id = saga_id or str(uuid.uuid4())
        self.operation = str(operation)
        self.target_email = target_email
        self.target_user_id = target_user_id
        self.building_id = building_id
        self.requested_by = requested_by

        self.status = SagaStatus.running.value
        self.current_step: Optional[str] = None
        self.completed_steps: List[str] = []
        self.compensations: List[str] = []
        self.error: Optional[str] = None

    @classmethod
    def from_row(cls, client: Client, row: dict) -> "OnboardingSaga":
        saga = cls(
            client,
            row["operation"],
            target_email=row.get("target_email"),
            target_user_id=row.get("target_user_id"),
            building_id=row.get("building_id"),
            requested_by=row.get("requested_by"),
            saga_id=row["id"],
        )
        saga.status = row.get("status") or SagaStatus.running.value
        saga.current_step = row.get("current_step")
        saga.completed_steps = list(row.get("completed_steps") or [])
        saga.compensations = list(row.get("compensations") or [])
        saga.error = row.get("error")
        return saga

    # -------------------------------------------------
    # Lifecycle
    # -------------------------------------------------
    def begin(self) -> "OnboardingSaga":
        self._persist(insert=True)
        log.info(f"Saga {self.id} started ({self.operation}, target={self.target_email or self.target_user_id})")
        return self

    def enter(self, step: str):
        """Record the step about to run, before its external call."""
        self.current_step = step
        self._persist()

    def done(self, step: str, compensation: Optional[str] = None):
        self.completed_steps.append(step)
        if compensation:
            self.compensations.append(compensation)
        self.current_step = None
        self._persist()

    def finish(self, status: SagaStatus, error: Optional[str] = None):
        self.status = str(status)
        self.error = error
        self.current_step = None
        self._persist()

        if status == SagaStatus.completed:
            log.info(f"Saga {self.id} completed: {self.completed_steps}")
        else:
            log.warning(
                f"Saga {self.id} ended {self.status}: steps={self.completed_steps} "
                f"pending_compensations={self.compensations} error={error}"
            )

    def compensate(self, error: Optional[str] = None) -> List[str]:
        """
        Run recorded compensations newest-first.
        Returns the names that failed; those stay recorded and the
        saga is marked partial, otherwise compensated.
        """
        failed = []

        for name in reversed(self.compensations):
            action = COMPENSATIONS.get(name)
            if action is None or not self.target_user_id:
                log.error(f"Saga {self.id}: cannot run compensation {name!r}")
                failed.append(name)
                continue
            try:
                action(self.client, self.target_user_id)
                log.info(f"Saga {self.id}: compensation {name} done for {self.target_user_id}")
            except Exception as e:
                log.error(f"Saga {self.id}: compensation {name} failed: {extract_supabase_error(e)}")
                failed.append(name)

        self.compensations = [c for c in self.compensations if c in failed]
        self.finish(SagaStatus.partial if failed else SagaStatus.compensated, error=error or self.error)
        return failed

    # -------------------------------------------------
    # Persistence
    # -------------------------------------------------
    def to_row(self) -> dict:
        return {
            "id": self.id,
            "operation": self.operation,
            "status": self.status,
            "target_email": self.target_email,
            "target_user_id": self.target_user_id,
            "building_id": self.building_id,
            "requested_by": self.requested_by,
            "current_step": self.current_step,
            "completed_steps": self.completed_steps,
            "compensations": self.compensations,
            "error": self.error,
            "updated_at": _now(),
        }

    def _persist(self, insert: bool = False):
        row = self.to_row()
        try:
            if insert:
                row["created_at"] = row["updated_at"]
                self.client.table(SAGA_TABLE).insert(row).execute()
            else:
                self.client.table(SAGA_TABLE).update(row).eq("id", self.id).execute()
        except Exception as e:
            log.warning(f"Saga {self.id}: could not persist state: {extract_supabase_error(e)}")
