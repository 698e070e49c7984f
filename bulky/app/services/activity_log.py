# bulky/app/services/activity_log.py
"""Audit trail of authentication and administrative actions."""
import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.models.auth import ActivityLog

ACTION_LOGIN = "LOGIN"
ACTION_LOGIN_FAILED = "LOGIN_FAILED"
ACTION_LOGOUT = "LOGOUT"
ACTION_CHANGE_PASSWORD = "CHANGE_PASSWORD"
ACTION_UPDATE_PROFILE = "UPDATE_PROFILE"
ACTION_RESET_PASSWORD = "RESET_PASSWORD"


async def log_activity(
    session: AsyncSession,
    user_type: str,
    action: str,
    modul: str,
    deskripsi: Optional[str] = None,
    user_id: Optional[uuid.UUID] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> ActivityLog:
    """Add an activity row to the session. The caller's commit persists it."""
    entry = ActivityLog(
        user_type=user_type,
        user_id=user_id,
        action=action,
        modul=modul,
        deskripsi=deskripsi,
        ip_address=ip_address,
        user_agent=(user_agent or "")[:255] or None,
    )
    session.add(entry)
    return entry
