"""FastAPI auth dependencies.

``get_current_user_id`` reads ``Authorization: Bearer <token>``, verifies
it with the app's ``TokenService`` and returns the acting user id.
Protected routes depend on it; public routes do not.
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from blog_api.auth.tokens import TokenService
from blog_api.errors import AuthenticationError

logger = logging.getLogger(__name__)

# auto_error=False so a missing header goes through our own 401 envelope.
_bearer_scheme = HTTPBearer(auto_error=False)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> int:
    if credentials is None:
        logger.warning("Missing or malformed Authorization header")
        raise AuthenticationError("missing or malformed bearer token")

    claims = tokens.verify(credentials.credentials)
    return claims.user_id
