"""
FastAPI main application.
"""

import functools
import logging
import uuid
from typing import Any, Dict

from fastapi import Body, Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from lvm_toolkit import __version__
from lvm_toolkit.api.models import ErrorResponse, ToolCallResponse, ToolInfoResponse, ToolListResponse
from lvm_toolkit.cli.lib.config import load_config
from lvm_toolkit.cli.lib.exceptions import UnknownToolError
from lvm_toolkit.cli.lib.executor import SubprocessExecutor
from lvm_toolkit.cli.lib.registry import (ERROR_INTERNAL, ERROR_UNKNOWN_TOOL, ERROR_VALIDATION, STATUS_ERROR,
                                          Dispatcher, error_envelope)

app = FastAPI(
    title="LVM Toolkit API",
    description="Validated LVM command tools with confirmation for destructive operations",
    version=__version__,
)
logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    ERROR_VALIDATION: 400,
    ERROR_UNKNOWN_TOOL: 404,
    ERROR_INTERNAL: 500,
}


@functools.lru_cache(maxsize=None)
def get_dispatcher() -> Dispatcher:
    """Dispatcher backed by the real executor, built once from config."""
    cfg = load_config()
    return Dispatcher(SubprocessExecutor(timeout=cfg.command_timeout))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler."""
    request_id = str(uuid.uuid4())
    logger.exception("Unhandled error (request_id=%s, path=%s)", request_id, request.url.path)
    return JSONResponse(
        status_code=500,
        content=error_envelope(request_id, ERROR_INTERNAL, "Internal server error"),
    )


def _unknown_tool(e: UnknownToolError) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content=error_envelope(str(uuid.uuid4()), ERROR_UNKNOWN_TOOL, e.message),
    )


# Tool endpoints


@app.get("/v1/tools", response_model=ToolListResponse)
def list_tools(dispatcher: Dispatcher = Depends(get_dispatcher)) -> Dict[str, Any]:
    """
    List all tools.
    """
    request_id = str(uuid.uuid4())
    return {"request_id": request_id, "status": "ok", "data": {"items": dispatcher.list_tools()}}


@app.get("/v1/tools/{name}", response_model=ToolInfoResponse, responses={404: {"model": ErrorResponse}})
def get_tool(name: str, dispatcher: Dispatcher = Depends(get_dispatcher)) -> Any:
    """
    Describe a single tool.
    """
    request_id = str(uuid.uuid4())
    try:
        spec = dispatcher.get(name)
    except UnknownToolError as e:
        return _unknown_tool(e)
    return {"request_id": request_id, "status": "ok", "data": {"tool": spec.describe()}}


@app.post(
    "/v1/tools/{name}",
    response_model=ToolCallResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def call_tool(
    name: str,
    arguments: Any = Body(None, description="Tool arguments (camelCase field names)"),
    dispatcher: Dispatcher = Depends(get_dispatcher),
) -> Any:
    """
    Call a tool.

    Command failures are reported with HTTP 200 and status "failed";
    destructive tools answer status "confirm" until called with confirm=true.
    """
    envelope = dispatcher.call(name, arguments)
    if envelope["status"] == STATUS_ERROR:
        return JSONResponse(status_code=ERROR_STATUS_CODES.get(envelope["error"]["code"], 500), content=envelope)
    return envelope
