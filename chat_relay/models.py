"""Chat Relay — request/response models."""

from typing import Any, List, Literal, Optional, TypedDict

from pydantic import BaseModel, Field

Role = Literal["user", "assistant"]


class ConversationTurn(TypedDict):
    role: Role
    content: str


class ChatRequest(BaseModel):
    # Turns are forwarded untouched, so only the array itself is checked here.
    messages: List[Any] = Field(
        ...,
        strict=True,
        description="Conversation turns in chronological order",
        examples=[[ConversationTurn(role="user", content="How much is Botox?")]],
    )


class ChatResponse(BaseModel):
    message: str
    success: bool = True


class ErrorResponse(BaseModel):
    error: str
    message: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    message: str
