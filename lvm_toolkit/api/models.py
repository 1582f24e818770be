"""
Pydantic models for API responses.

Request bodies are the raw tool argument objects and are validated by the
per-tool schemas in `lvm_toolkit.cli.lib.schemas`.
"""

from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, Field


class CallStatus(str, Enum):
    """Tool call status values."""

    OK = "ok"
    FAILED = "failed"
    CONFIRM = "confirm"
    ERROR = "error"


class ToolInfo(BaseModel):
    """Description of a registered tool."""

    name: str
    description: str
    destructive: bool = Field(False, description="Requires confirm=true to run")
    inputSchema: Dict[str, Any] = Field(..., description="JSON schema of the tool arguments")


class ToolListResponse(BaseModel):
    """Response model for tool list."""

    request_id: str
    status: str
    data: Dict[str, List[ToolInfo]]


class ToolInfoResponse(BaseModel):
    """Response model for a single tool."""

    request_id: str
    status: str
    data: Dict[str, ToolInfo]


class ToolCallResponse(BaseModel):
    """Response model for a tool call."""

    request_id: str
    status: CallStatus
    data: dict


class ErrorResponse(BaseModel):
    """Error response model."""

    request_id: str
    status: str
    error: dict
