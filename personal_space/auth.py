"""
Shared-secret gate for mutation routes.
"""

from __future__ import annotations

import hmac
from typing import Optional

from fastapi import Depends, Header, HTTPException

from personal_space.config import Settings
from personal_space.dependencies import get_app_settings

ADMIN_HEADER = "X-Admin-Password"


def is_admin(credential: Optional[str], secret: Optional[str]) -> bool:
    """An unset secret never authorizes anything."""
    if not credential or not secret:
        return False
    return hmac.compare_digest(credential.encode("utf-8"), secret.encode("utf-8"))


def require_admin(
    x_admin_password: Optional[str] = Header(default=None, alias=ADMIN_HEADER),
    settings: Settings = Depends(get_app_settings),
) -> None:
    if not is_admin(x_admin_password, settings.admin_password):
        raise HTTPException(status_code=403, detail="Unauthorized")
