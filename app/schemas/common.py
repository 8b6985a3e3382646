"""Shared schema base, the uniform error body, and the health check response."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire; either spelling is accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    """Body of every error response."""

    status: int = Field(..., description="HTTP status code")
    message: str = Field(..., description="Client-safe error message")


class HealthResponse(BaseModel):
    """Service status and database reachability, for load balancers and monitoring."""

    status: Literal["ok"] = "ok"
    environment: str = Field(description="Current app environment (dev or prod)")
    database: Literal["connected", "disconnected"]
