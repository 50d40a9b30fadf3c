# simplishare/middleware.py
"""Request id and request logging middleware"""

import secrets
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from .logging_config import get_logger, request_id_var

logger = get_logger("middleware")


def new_request_id() -> int:
    """Random 6-digit id for correlating a response with its log lines"""
    return 100000 + secrets.randbelow(900000)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Mint a request id, log the request with timing and status"""

    async def dispatch(self, request: Request, call_next):
        request_id = new_request_id()
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        start_time = time.time()

        logger.info(
            f"[REQUEST] {request.method} {request.url.path} - "
            f"Client: {request.client.host if request.client else 'unknown'}"
        )

        try:
            response = await call_next(request)
            process_time = (time.time() - start_time) * 1000  # ms

            logger.info(
                f"[RESPONSE] {request.method} {request.url.path} - "
                f"Status: {response.status_code} - Duration: {process_time:.2f}ms"
            )

            response.headers["X-Request-ID"] = str(request_id)
            response.headers["X-Process-Time"] = f"{process_time:.2f}ms"
            return response

        except Exception as e:
            process_time = (time.time() - start_time) * 1000
            logger.error(
                f"[ERROR] {request.method} {request.url.path} - "
                f"Duration: {process_time:.2f}ms - Error: {str(e)}",
                exc_info=True
            )
            raise
        finally:
            request_id_var.reset(token)
