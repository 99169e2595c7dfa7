from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR
import time
import traceback

from cypress_extractor.db.mongo import log_api_call
from cypress_extractor.core.logging import logger
from cypress_extractor.models.schemas import utc_timestamp

# health checks are not audited
SKIP_PATHS = ("/health", "/health/")


class AuditMiddleware(BaseHTTPMiddleware):
    """
    Write one audit record per API request.

    Routes attach analysis metadata (file name, file/record/diagnostic
    counts, handled errors) to ``request.state.audit``; it is merged into
    the request record.
    """

    async def dispatch(self, request, call_next):
        if request.url.path in SKIP_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        timestamp = utc_timestamp()
        request.state.audit = {}
        error_data = {}

        try:
            response = await call_next(request)
            status_code = response.status_code

        except Exception as exc:
            status_code = HTTP_500_INTERNAL_SERVER_ERROR
            logger.error(f"Unhandled error on {request.url.path}: {exc}")

            error_data = {
                "error": str(exc),
                "traceback": traceback.format_exc(),
            }

            response = JSONResponse(
                {"detail": "Internal Server Error"},
                status_code=status_code,
            )

        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.info(
            f"{request.method} {request.url.path} -> {status_code} ({duration_ms} ms)"
        )

        record = {
            "timestamp": timestamp,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "ip": request.client.host if request.client else None,
            "user_agent": request.headers.get("user-agent"),
            "duration_ms": duration_ms,
            "status": status_code,
            **getattr(request.state, "audit", {}),
            **error_data,
        }

        try:
            await log_api_call(record)
        except Exception as log_exc:
            logger.error(f"Failed to write API log: {log_exc}")

        return response
