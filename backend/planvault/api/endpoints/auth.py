import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from planvault.api.deps import get_current_user_id, get_session_token, get_storage
from planvault.models import User
from planvault.schemas.auth import (
    AccountRecover,
    AuthResponse,
    RecoveryKeyResponse,
    UserCreate,
    UserLogin,
    UserResponse,
)
from planvault.schemas.common import MessageResponse
from planvault.services.auth import (
    authenticate_user,
    end_session,
    generate_recovery_key,
    recover_account,
    register_user,
    start_session,
)
from planvault.storage import Storage

logger = logging.getLogger(__name__)

router = APIRouter()


def _invalid_credentials() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def _auth_response(storage: Storage, user: User) -> AuthResponse:
    session = start_session(storage, user.id)
    return AuthResponse(user=UserResponse.model_validate(user), session_token=session.session_token)


@router.post("/generate-recovery-key", response_model=RecoveryKeyResponse)
def fetch_recovery_key():
    return RecoveryKeyResponse(recovery_key=generate_recovery_key())


@router.post("/auth/register", response_model=AuthResponse)
def register(user_data: UserCreate, storage: Storage = Depends(get_storage)):
    # A taken username raises DuplicateException, answered with 400.
    user = register_user(storage, user_data)
    return _auth_response(storage, user)


@router.post("/auth/login", response_model=AuthResponse)
def login(credentials: UserLogin, storage: Storage = Depends(get_storage)):
    user = authenticate_user(storage, credentials.username, credentials.password)
    if not user:
        logger.warning("Failed login attempt")
        raise _invalid_credentials()
    logger.info("User %s logged in", user.id)
    return _auth_response(storage, user)


@router.post("/auth/recover", response_model=AuthResponse)
def recover(payload: AccountRecover, storage: Storage = Depends(get_storage)):
    user = recover_account(storage, payload.username, payload.recovery_key, payload.new_password)
    if not user:
        logger.warning("Failed account recovery attempt")
        raise _invalid_credentials()
    return _auth_response(storage, user)


@router.post("/auth/logout", response_model=MessageResponse)
def logout(token: Optional[str] = Depends(get_session_token), storage: Storage = Depends(get_storage)):
    if token:
        end_session(storage, token)
        logger.info("Session ended")
    return MessageResponse(message="Logged out successfully")


@router.get("/auth/me", response_model=UserResponse)
def me(user_id: str = Depends(get_current_user_id), storage: Storage = Depends(get_storage)):
    user = storage.get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
