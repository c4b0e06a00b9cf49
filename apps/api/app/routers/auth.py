from fastapi import APIRouter, Depends

from app.services.access import current_user, is_admin
from app.settings import settings

router = APIRouter()


@router.get("/auth/status")
async def auth_status(email: str | None = Depends(current_user)) -> dict[str, str | bool]:
    """Report the access mode and whether the caller may edit."""
    if not settings.admin_emails:
        return {
            "status": "no_auth_required",
            "message": "Local mode - every caller may edit",
            "can_edit": True,
        }
    return {
        "status": "header_auth",
        "message": "Editors are identified by the X-User-Email header",
        "can_edit": is_admin(email),
    }
