from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from planvault.services.auth import resolve_session
from planvault.storage import Storage

bearer_scheme = HTTPBearer(auto_error=False)


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_session_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    """Bearer token from the Authorization header, or None when absent."""
    return credentials.credentials if credentials else None


def get_current_user_id(
    token: Optional[str] = Depends(get_session_token),
    storage: Storage = Depends(get_storage),
) -> str:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    session = resolve_session(storage, token)
    if not session:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session.user_id
