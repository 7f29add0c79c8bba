from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional

from models import TaskStatus


class AuthCredentials(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    # bcrypt only looks at the first 72 bytes
    password: str = Field(..., min_length=1, max_length=72)

    @field_validator("password")
    @classmethod
    def no_nul_bytes(cls, v):
        if "\x00" in v:
            raise ValueError("Password must not contain NUL characters")
        return v


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str


class Token(BaseModel):
    access_token: str = Field(..., description="Signed bearer token to send as `Authorization: Bearer <token>`")
    token_type: str = "bearer"


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskFilter(BaseModel):
    status: Optional[TaskStatus] = None
    search: Optional[str] = None


class TaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    status: TaskStatus
    owner_id: int


class Message(BaseModel):
    message: str
