"""FastAPI dependency: get_current_identity.

Usage in any protected router:
    @router.post("/predictions")
    async def post(identity: str = Depends(get_current_identity)):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from src.ps_common.errors import InvalidCredentialsError
from src.ps_gateway.auth.jwt_handler import decode_token

# Tokens are issued by the wallet layer; tokenUrl is only for Swagger UI.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_identity(token: str = Depends(oauth2_scheme)) -> str:
    """Validate the bearer token and return its ``sub`` claim."""
    try:
        payload = decode_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    identity = payload.get("sub")
    if not identity:
        raise _CREDENTIALS_EXCEPTION
    return identity
