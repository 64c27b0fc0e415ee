"""Admin login / logout. The session cookie is managed by SessionMiddleware."""

from __future__ import annotations

import logging
import secrets

from fastapi import APIRouter, Depends, Request

from internhub.core.config import Settings
from internhub.core.exceptions import UnauthorizedError
from internhub.routers.deps import client_ip, get_settings
from internhub.schemas.common import LoginRequest, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

ADMIN_ROLE = "admin"


@router.post("/login", response_model=MessageResponse)
async def login(body: LoginRequest, request: Request, settings: Settings = Depends(get_settings)):
    expected = settings.admin_password
    if not expected or not secrets.compare_digest(body.password.encode(), expected.encode()):
        logger.warning("Rejected admin login from %s", client_ip(request))
        raise UnauthorizedError("Invalid password")

    request.session.clear()
    request.session["role"] = ADMIN_ROLE
    logger.info("Admin session started from %s", client_ip(request))
    return MessageResponse(message="Logged in")


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request):
    request.session.clear()
    return MessageResponse(message="Logged out")
