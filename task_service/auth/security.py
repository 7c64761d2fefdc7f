# task_service/auth/security.py
from typing import FrozenSet

from jose import JWTError, jwt
from loguru import logger

from task_service.core.config import settings


def read_token_claims(token: str) -> dict:
    """
    Returns the claims of a bearer token.
    Signature and expiry are checked by the gateway in front of this service,
    so the claims are read without verification here.
    Raises JWTError if the token cannot be parsed.
    """
    try:
        return jwt.get_unverified_claims(token)
    except JWTError as e:
        logger.warning(f"JWT parsing error: {e}")
        raise


def username_from_claims(claims: dict) -> str:
    """Keycloak puts the login name in ``preferred_username``; ``sub`` is the fallback"""
    return claims.get("preferred_username") or claims.get("sub") or ""


def client_roles_from_claims(claims: dict, client_id: str = None) -> FrozenSet[str]:
    """
    Client roles live under ``resource_access.<client>.roles`` in Keycloak tokens.
    """
    client_id = client_id or settings.KEYCLOAK_CLIENT_ID
    resource_access = claims.get("resource_access") or {}
    client_access = resource_access.get(client_id) or {}
    return frozenset(client_access.get("roles") or [])
