import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


# --- Post ---

class PostCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    image: str | None = Field(None, max_length=2048)


class PostUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    content: str | None = None
    image: str | None = Field(None, max_length=2048)


class PostResponse(BaseModel):
    id: uuid.UUID
    title: str
    content: str
    image: str | None
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# --- Envelopes ---

class PostEnvelope(BaseModel):
    status: Literal["success"] = "success"
    data: PostResponse


class PostListEnvelope(BaseModel):
    status: Literal["success"] = "success"
    results: int
    data: list[PostResponse]


class ErrorResponse(BaseModel):
    status: Literal["fail", "error"]
    message: str


class HealthResponse(BaseModel):
    status: Literal["success"] = "success"
    message: str
