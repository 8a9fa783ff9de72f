from pydantic import Field
from planvault.schemas.common import CamelModel


class UserCreate(CamelModel):
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=8)
    recovery_key: str      # phrase from /generate-recovery-key, kept for account recovery


class UserLogin(CamelModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class AccountRecover(CamelModel):
    username: str = Field(min_length=1)
    recovery_key: str = Field(min_length=1)
    new_password: str = Field(min_length=8)


class UserResponse(CamelModel):
    id: str
    username: str
    encryption_key: str    # used client-side only


class AuthResponse(CamelModel):
    user: UserResponse
    session_token: str


class RecoveryKeyResponse(CamelModel):
    recovery_key: str
