from fastapi import Depends, Request, status

from core.config import Settings
from core.errors import AdminError
from core.security import extract_admin_token, verify_admin_token
from dependencies.services import get_settings


async def require_admin(request: Request, settings: Settings = Depends(get_settings)) -> None:
    if not settings.admin_token:
        raise AdminError(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Admin not configured. Set ADMIN_TOKEN on the server.",
        )
    token = await extract_admin_token(request)
    if not verify_admin_token(token, settings.admin_token):
        raise AdminError(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden: bad or missing token.")
