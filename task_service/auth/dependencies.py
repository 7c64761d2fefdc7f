# task_service/auth/dependencies.py
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from loguru import logger

from task_service.auth.security import read_token_claims, username_from_claims, client_roles_from_claims
from task_service.api.v1.schemas.auth import Actor

# Bearer token extraction
bearer_scheme = HTTPBearer(auto_error=False)


async def get_access_token(
        credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)
) -> str:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


async def get_current_actor(token: str = Depends(get_access_token)) -> Actor:
    """
    Resolve the acting username and client roles from the bearer token
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        claims = read_token_claims(token)
    except JWTError:
        raise credentials_exception

    username = username_from_claims(claims)
    if not username:
        logger.warning("Invalid token payload - missing username")
        raise credentials_exception

    actor = Actor(username=username, roles=client_roles_from_claims(claims))
    logger.debug(f"Actor resolved | username={actor.username} | roles={sorted(actor.roles)}")
    return actor
