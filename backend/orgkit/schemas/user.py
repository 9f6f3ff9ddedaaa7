"""Pydantic schemas for user operations."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from orgkit.models.user import SystemRole


class UserPublicKey(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    key: str = Field(..., min_length=1)


class UserKeyPair(BaseModel):
    public_key: str
    private_key: str


class UserCreate(BaseModel):
    """User registration input."""

    id: str = Field(..., min_length=1, max_length=255, description="Externally issued user id")
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(default="", max_length=255)
    email_verified: bool = False
    role: SystemRole = SystemRole.USER
    public_keys: List[UserPublicKey] = Field(default_factory=list)
    key_pair: Optional[UserKeyPair] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "user-1",
                "name": "Jane Doe",
                "email": "jane@example.com",
                "email_verified": True,
                "public_keys": [{"name": "laptop", "key": "ssh-ed25519 AAAA..."}],
            }
        }
    )
