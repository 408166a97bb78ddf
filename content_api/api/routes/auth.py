"""Admin login routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from content_api.api.schemas import AdminResponse, LoginRequest, TokenResponse
from content_api.auth.admin_repository import AdminRepository
from content_api.auth.config import AuthConfig, get_auth_config
from content_api.auth.dependencies import CurrentAdminDep, get_admin_repository
from content_api.auth.security import create_access_token, verify_password

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    repo: Annotated[AdminRepository, Depends(get_admin_repository)],
    config: Annotated[AuthConfig, Depends(get_auth_config)],
) -> TokenResponse:
    """Exchange admin credentials for a bearer token."""
    admin = await repo.get_by_email(request.email)
    if admin is None or not verify_password(request.password, admin.password_hash):
        logger.info("Failed login for %s", request.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    logger.info("[admin=%s] Logged in", admin.id)
    return TokenResponse(token=create_access_token(str(admin.id), config))


@router.get("/me", response_model=AdminResponse)
async def me(admin: CurrentAdminDep) -> AdminResponse:
    return AdminResponse.from_document(admin)
