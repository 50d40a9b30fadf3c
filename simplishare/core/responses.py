"""Uniform success/error response envelopes."""
from typing import Any, Mapping, Optional

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from ..logging_config import request_id_var


def get_request_id(request: Request) -> Optional[int]:
    return getattr(request.state, "request_id", None) or request_id_var.get()


def success_response(
    request: Request,
    status_code: int,
    message: str,
    data: Any = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": True,
            "message": message,
            "data": jsonable_encoder(data),
            "requestId": get_request_id(request),
        },
    )


def error_response(
    request: Request,
    status_code: int,
    message: str,
    error: Any,
    error_code: int,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "message": message,
            "error": jsonable_encoder(error),
            "errorCode": int(error_code),
            "requestId": get_request_id(request),
        },
        headers=headers,
    )
