"""
Row-Level Security helpers.

PostgreSQL policies on the tenant tables read `app.current_user_id`; these
helpers set it per database session. Other dialects (SQLite in development
and tests) have no RLS, so the helpers are no-ops there and the repositories'
own `user_id` filters are the only guard.
"""

import logging

from sqlalchemy import text
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def _supports_rls(db: Session) -> bool:
    bind = db.get_bind()
    return bind is not None and bind.dialect.name == "postgresql"


def set_rls_context(db: Session, user_id: int) -> None:
    """
    Set the RLS context for a database session.

    Called by get_current_user right after the tenant is resolved, so every
    query made with the same session runs under that tenant's policies.

    Args:
        db: SQLAlchemy database session
        user_id: ID of the authenticated user
    """
    if not _supports_rls(db):
        return
    try:
        db.execute(
            text("SELECT set_config('app.current_user_id', :user_id, false)"),
            {"user_id": str(user_id)},
        )
        logger.debug(f"RLS context set for user_id={user_id}")
    except Exception as e:
        logger.error(f"Failed to set RLS context for user_id={user_id}: {e}")
        raise


def bypass_rls(db: Session) -> None:
    """
    Bypass RLS for cross-tenant maintenance jobs (cron tasks, webhooks).

    WARNING: Only for system-level operations that are not driven by a user request.
    """
    if not _supports_rls(db):
        return
    try:
        db.execute(text("SET LOCAL row_security = off"))
        logger.warning("RLS bypassed for this transaction - USE WITH CAUTION")
    except Exception as e:
        logger.error(f"Failed to bypass RLS: {e}")
        raise
