"""
approval_service.py — One approval state machine for every reviewable row

Shops, directly entered materials and supplier submissions all pass the
same pending → approved / rejected gate. Two producers feed it:

- direct entry (Shop, Material): boolean gate, re-reviewable. A rejected
  row may be approved later; approve clears any prior rejection reason.
- submission-derived (MaterialSubmission): tri-state, terminal. The
  transition only applies while approved IS NULL, and an on_approve hook
  materializes the Material inside the same transaction.

Business Rules:
- Transitions are a single conditional UPDATE; the rowcount decides the
  outcome, never a read-then-write in Python. Two concurrent approvals of
  one submission cannot both succeed.
- Public listing: approved IS TRUE. Pending listing: approved IS NOT TRUE
  for direct entries (captures false and legacy NULL), approved IS NULL for
  terminal rows.
- Rejecting a terminal row requires a reason.

Called by: services/catalog_service.py, services/submission_service.py
Depends on: models.ApprovableMixin, database.unit_of_work
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from sqlalchemy.orm import Query, Session

from ..database import unit_of_work
from ..exceptions import InvalidState, MissingField, NotFound
from ..models import Material, MaterialSubmission, Shop, User

log = logging.getLogger(__name__)

ApproveHook = Callable[[Session, Any], Any]


class ApprovalGate:
    """Pending/approve/reject capability over an ApprovableMixin model."""

    def __init__(self, model, label: str, *, terminal: bool = False, order_by=None):
        self.model = model
        self.label = label
        self.terminal = terminal
        self.order_by = order_by if order_by is not None else model.created_at

    # ── Listings ─────────────────────────────────────────────────────

    def public(self, db: Session) -> Query:
        return (
            db.query(self.model)
            .filter(self.model.approved.is_(True))
            .order_by(self.order_by.desc())
        )

    def pending(self, db: Session) -> Query:
        if self.terminal:
            cond = self.model.approved.is_(None)
        else:
            cond = self.model.approved.is_not(True)
        return db.query(self.model).filter(cond).order_by(self.order_by.desc())

    # ── Transitions ──────────────────────────────────────────────────

    def approve(
        self,
        db: Session,
        entity_id: int,
        user: User | None = None,
        on_approve: ApproveHook | None = None,
    ) -> tuple[Any, Any]:
        """Flip to approved. Returns (row, on_approve result)."""
        values = {
            self.model.approved: True,
            self.model.approval_reason: None,
        }
        return self._transition(db, entity_id, values, user, on_approve, "approved")

    def reject(
        self,
        db: Session,
        entity_id: int,
        reason: str | None = None,
        user: User | None = None,
    ):
        reason = (reason or "").strip() or None
        if self.terminal and not reason:
            raise MissingField("A rejection reason is required")
        values = {
            self.model.approved: False,
            self.model.approval_reason: reason,
        }
        row, _ = self._transition(db, entity_id, values, user, None, "rejected")
        return row

    def _transition(self, db, entity_id, values, user, on_approve, outcome):
        values = {
            **values,
            self.model.reviewed_at: datetime.now(timezone.utc),
            self.model.reviewed_by_id: user.id if user else None,
        }
        result = None
        with unit_of_work(db):
            q = db.query(self.model).filter(self.model.id == entity_id)
            if self.terminal:
                q = q.filter(self.model.approved.is_(None))
            changed = q.update(values, synchronize_session="fetch")
            if not changed:
                exists = db.query(self.model.id).filter(self.model.id == entity_id).first()
                if not exists:
                    raise NotFound(f"{self.label} not found")
                raise InvalidState(f"{self.label} {entity_id} has already been reviewed")
            row = db.get(self.model, entity_id)
            if on_approve is not None:
                result = on_approve(db, row)
        db.refresh(row)
        log.info(
            "%s %s %s by user %s",
            self.label,
            entity_id,
            outcome,
            user.id if user else None,
        )
        return row, result


SHOP_GATE = ApprovalGate(Shop, "Shop")
MATERIAL_GATE = ApprovalGate(Material, "Material")
SUBMISSION_GATE = ApprovalGate(
    MaterialSubmission,
    "Submission",
    terminal=True,
    order_by=MaterialSubmission.submitted_at,
)
