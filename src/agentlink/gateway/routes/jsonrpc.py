"""JSON-RPC 路由

POST /: 接收一个 JSON-RPC 2.0 请求信封。
- 非流式方法：HTTP 200 + application/json 响应信封
- tasks/sendSubscribe / tasks/resubscribe：text/event-stream，每个信封一条 data
- 请求体不是合法 JSON：返回 parse error 信封
"""

import json

import structlog
from fastapi import APIRouter, Depends, Request
from sse_starlette.sse import EventSourceResponse
from starlette.responses import JSONResponse

from agentlink.core.config import SSE_PING_INTERVAL
from agentlink.core.exceptions import JSONParseError

from ..deps import get_request_handler
from ..services.request_handler import RequestHandler, error_envelope

log = structlog.get_logger()

router = APIRouter()


@router.post("/")
async def jsonrpc_endpoint(
    request: Request,
    handler: RequestHandler = Depends(get_request_handler),
):
    """JSON-RPC 入口"""
    try:
        payload = await request.json()
    except ValueError:
        log.warning("rpc_parse_error")
        return JSONResponse(error_envelope(None, JSONParseError()))

    if not handler.is_streaming(payload):
        return JSONResponse(await handler.handle(payload))

    async def event_generator():
        async for envelope in handler.handle_stream(payload):
            yield {"data": json.dumps(envelope, ensure_ascii=False)}

    return EventSourceResponse(event_generator(), ping=SSE_PING_INTERVAL)
