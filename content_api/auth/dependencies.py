"""FastAPI dependencies for admin authentication."""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from content_api.auth.admin_repository import AdminRepository
from content_api.auth.config import AuthConfig, get_auth_config
from content_api.auth.security import InvalidTokenError, decode_access_token
from content_api.mongodb.schemas import AdminDocument

logger = logging.getLogger(__name__)

# auto_error is off so a missing header yields 401 rather than 403
bearer_scheme = HTTPBearer(auto_error=False)


def get_admin_repository() -> AdminRepository:
    return AdminRepository.create()


async def get_current_admin(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    config: Annotated[AuthConfig, Depends(get_auth_config)],
    repo: Annotated[AdminRepository, Depends(get_admin_repository)],
) -> AdminDocument:
    """Resolve the admin behind the bearer token.

    Raises:
        HTTPException: 401 if the token is missing, invalid, expired or
            names an unknown admin.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization token required",
        )
    try:
        admin_id = decode_access_token(credentials.credentials, config)
    except InvalidTokenError as err:
        logger.info("Rejected admin token: %s", err)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        ) from err

    admin = await repo.get_admin(admin_id)
    if admin is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin not found",
        )
    return admin


CurrentAdminDep = Annotated[AdminDocument, Depends(get_current_admin)]
