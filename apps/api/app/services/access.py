"""Caller identity and editor permission checks.

The API sits behind a proxy that forwards the signed-in user's email in the
``X-User-Email`` header. With no admin emails configured the API runs in local
mode and every caller may edit.
"""

from fastapi import Header, HTTPException

from app.settings import settings


def is_admin(email: str | None) -> bool:
    """Return True when the caller may edit lessons and templates."""
    if not settings.admin_emails:
        return True
    if not email:
        return False
    return email.strip().lower() in {a.strip().lower() for a in settings.admin_emails}


async def current_user(x_user_email: str | None = Header(None)) -> str | None:
    """Dependency returning the caller's email, if any."""
    return x_user_email


async def require_admin(x_user_email: str | None = Header(None)) -> str | None:
    """Dependency that rejects callers who may not edit."""
    if not is_admin(x_user_email):
        raise HTTPException(status_code=403, detail="Admin only")
    return x_user_email
