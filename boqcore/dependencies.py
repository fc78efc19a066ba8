"""
dependencies.py — Shared FastAPI Dependencies

Authentication and role gates. All routers import from here instead of
defining their own auth logic. Sessions are issued by the external auth
service; this module only reads the user id it stored in the cookie.

Business Rules:
- get_user returns None if not logged in (non-throwing)
- require_user raises 401 if not logged in, 403 if deactivated
- require_staff raises 403 unless role is admin/software_team/purchase_team
- require_submitter raises 403 unless role is supplier/purchase_team/admin
- require_supplier raises 403 unless role is supplier
- Role gates resolve before the endpoint body runs, so a disallowed role
  never reaches a service call

Called by: all routers
Depends on: models, database, config
"""

import logging

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db
from .models import User

log = logging.getLogger(__name__)


# ── Authentication ────────────────────────────────────────────────────


def get_user(request: Request, db: Session) -> User | None:
    """Return current user from session, or None if not logged in."""
    uid = request.session.get("user_id")
    if not uid:
        return None
    return db.get(User, uid)


def require_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Dependency: raises 401 if no authenticated user, 403 if deactivated."""
    user = get_user(request, db)
    if not user:
        raise HTTPException(401, "Not authenticated")
    if not getattr(user, "is_active", True):
        request.session.clear()
        raise HTTPException(403, "Account deactivated")
    return user


# ── Role gates ────────────────────────────────────────────────────────


def is_staff(user: User) -> bool:
    """Admin, software team and purchase team review the catalog."""
    return user.role in settings.staff_roles


def require_staff(user: User = Depends(require_user)) -> User:
    """Dependency: catalog review and taxonomy management."""
    if not is_staff(user):
        log.info("Staff gate denied user %s (role=%s)", user.id, user.role)
        raise HTTPException(403, "Staff role required for this action")
    return user


def require_submitter(user: User = Depends(require_user)) -> User:
    """Dependency: who may file material submissions against a template."""
    if user.role not in settings.submitter_roles:
        raise HTTPException(403, "Supplier role required to submit materials")
    return user


def require_supplier(user: User = Depends(require_user)) -> User:
    """Dependency: supplier self-service views."""
    if user.role != "supplier":
        raise HTTPException(403, "Supplier role required")
    return user
