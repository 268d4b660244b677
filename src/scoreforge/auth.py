# src/scoreforge/auth.py

"""Bearer credential boundary.

Token issuance and user management live outside this service. The only
contract here is the ``get_current_user_id`` dependency, which turns a
bearer token into the id of the calling user. The bundled implementation
checks a static token table from configuration; deployments swap it via
``app.dependency_overrides``.
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from scoreforge import config
from scoreforge.exceptions import UnauthorizedError

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> int:
    """Resolve the bearer token to a user id or raise UnauthorizedError."""
    if credentials is None:
        raise UnauthorizedError("Missing bearer credential")

    user_id = config.API_TOKENS.get(credentials.credentials)
    if user_id is None:
        raise UnauthorizedError("Invalid bearer credential")
    return user_id
