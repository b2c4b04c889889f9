"""LoggingMiddleware -- 请求级日志与 request_id 关联

调用方通过 X-Request-ID 传入的 id（可打印且不超过 128 字符）原样沿用，
否则生成 ULID；id 绑定到 structlog contextvars，下游日志（包括 RequestHandler 的
rpc_method / task_id）都带上它，并在响应头中返回。
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID

REQUEST_ID_HEADER = "X-Request-ID"
_MAX_REQUEST_ID_LENGTH = 128

log = structlog.get_logger()


def resolve_request_id(header_value: str | None) -> str:
    """沿用调用方的 request id，不合法或缺失时生成新的 ULID"""
    if (
        header_value
        and len(header_value) <= _MAX_REQUEST_ID_LENGTH
        and header_value.isprintable()
    ):
        return header_value
    return str(ULID())


class LoggingMiddleware(BaseHTTPMiddleware):
    """每个请求一条 request_started 与一条 request_completed / request_failed"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            http_method=request.method,
            path=request.url.path,
        )
        await log.ainfo("request_started")

        started = time.monotonic()
        try:
            response = await call_next(request)
        except Exception:
            await log.aexception(
                "request_failed",
                duration_ms=int((time.monotonic() - started) * 1000),
            )
            raise

        # SSE 响应在此时只完成了响应头，流本身由 RequestHandler 记录
        await log.ainfo(
            "request_completed",
            status_code=response.status_code,
            streaming=response.headers.get("content-type", "").startswith(
                "text/event-stream"
            ),
            duration_ms=int((time.monotonic() - started) * 1000),
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
