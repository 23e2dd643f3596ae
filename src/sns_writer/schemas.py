from typing import Optional

from pydantic import BaseModel, Field


class GenerateRequest(BaseModel):
    prompt: Optional[str] = Field(
        default=None,
        description="Prompt text, optionally followed by the rendered condition block.",
    )


class GenerateResponse(BaseModel):
    text: str


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    mock: bool
    model: str
