"""
Response envelope.

Every endpoint answers with:
    {"success": bool, "message": str, "data"?: ..., "error"?: str, "errors"?: [str]}
"""

from typing import Any, List, Optional

from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder


def envelope(message: str, data: Any = None) -> dict:
    """Successful response body. Route decorators set the status code."""
    body = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return body


def error_response(
    status_code: int,
    message: str,
    error: Optional[str] = None,
    errors: Optional[List[str]] = None,
    data: Any = None,
) -> JSONResponse:
    body = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    if errors:
        body["errors"] = errors
    if data is not None:
        body["data"] = data
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))
