from typing import Any, Optional
from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from ..schemas.common import ApiResponse, ErrorResponse

def ok(request: Request, data: Any = None, message: str = "") -> ApiResponse[Any]:
    req_id = getattr(request.state, "request_id", None)
    return ApiResponse(success=True, message=message, request_id=req_id or "", data=data)

def fail(request: Request, error: str, message: str, details: Optional[dict] = None, status_message: str = "") -> ErrorResponse:
    req_id = getattr(request.state, "request_id", None)
    return ErrorResponse(error=error, message=message or status_message, request_id=req_id or "", details=details or {})

def server_error(request: Request, message: str) -> JSONResponse:
    """500 with an ApiResponse whose error fields are set."""
    req_id = getattr(request.state, "request_id", None)
    response: ApiResponse[Any] = ApiResponse(request_id=req_id or "")
    response.set_error(message)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=jsonable_encoder(response),
    )
