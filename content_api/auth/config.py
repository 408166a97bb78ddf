"""Admin authentication settings."""

import os
from pathlib import Path

from dotenv import load_dotenv

from content_api.common.base_content_model import BaseContentModel

_project_dir = Path(__file__).parent.parent.parent
load_dotenv(_project_dir / ".env")


class AuthConfig(BaseContentModel):
    """Configuration for admin JWTs."""

    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_expires_hours: int = 24


def get_auth_config() -> AuthConfig:
    """Get auth configuration from environment variables.

    Environment variables:
        JWT_SECRET: Secret used to sign admin tokens (required)
        JWT_ALGORITHM: Signing algorithm (default: HS256)
        JWT_EXPIRES_HOURS: Token lifetime in hours (default: 24)
    """
    jwt_secret = os.environ.get("JWT_SECRET", "")
    if not jwt_secret:
        msg = "JWT_SECRET environment variable is required"
        raise ValueError(msg)

    return AuthConfig(
        jwt_secret=jwt_secret,
        jwt_algorithm=os.environ.get("JWT_ALGORITHM", "HS256"),
        jwt_expires_hours=int(os.environ.get("JWT_EXPIRES_HOURS", "24")),
    )
