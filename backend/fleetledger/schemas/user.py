"""
Pydantic schemas for fleet accounts (admins, drivers) and authentication.
"""
from pydantic import BaseModel, field_validator
from typing import Optional, Literal
from datetime import datetime
from fleetledger.models.account import RecordStatus


Role = Literal["admin", "driver", "finance"]


class AccountInfo(BaseModel):
    """Logged-in account, as stored in the client session."""
    name: str
    role: Role
    user_id: int
    driver_id: Optional[int] = None  # Set for drivers only


class LoginRequest(BaseModel):
    """Schema for login."""
    username: str
    password: str


class Token(BaseModel):
    """Schema for JWT token response."""
    access_token: str
    token_type: str = "bearer"
    user: AccountInfo


class PasswordChange(BaseModel):
    """
    Schema for password change.
    With old_password the user changes their own password; without it an
    admin resets someone else's.
    """
    user_type: Literal["admin", "driver"]
    user_id: int
    new_password: str
    old_password: Optional[str] = None


class AdminCreate(BaseModel):
    """Schema for admin creation."""
    name: str
    password: str

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        return v.strip().upper()


class AdminUpdate(BaseModel):
    """Schema for admin update."""
    name: Optional[str] = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v is not None else v


class AdminResponse(BaseModel):
    """Schema for admin response."""
    id: int
    name: str
    created_at: datetime

    class Config:
        from_attributes = True


class DriverCreate(BaseModel):
    """Schema for driver creation."""
    name: str
    cnh: str
    phone: str
    password: str

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        return v.strip().upper()


class DriverUpdate(BaseModel):
    """Schema for driver update."""
    name: Optional[str] = None
    cnh: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[RecordStatus] = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v is not None else v


class DriverResponse(BaseModel):
    """Schema for driver response."""
    id: int
    name: str
    cnh: str
    phone: str
    status: RecordStatus
    created_at: datetime

    class Config:
        from_attributes = True
