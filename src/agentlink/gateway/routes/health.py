"""健康检查路由

GET /health: Liveness 检查，永远返回 200。
GET /ready: Readiness 检查，探测 TaskStore 可用性。
"""

import structlog
from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(request: Request):
    """Readiness 检查 -- 验证 TaskStore 与 Executor 已就绪

    检查项：
    1. task_store: store.ping()
    2. executor: lifespan 已装配 Executor
    """
    checks: dict[str, str] = {}
    all_ok = True

    # 1. TaskStore 连通性
    task_store = getattr(request.app.state, "task_store", None)
    if task_store is None:
        checks["task_store"] = "error: not initialized"
        all_ok = False
    else:
        try:
            if await task_store.ping():
                checks["task_store"] = "ok"
            else:
                checks["task_store"] = "unreachable"
                all_ok = False
        except Exception as e:
            log.warning("ready_check_error", check="task_store", error=str(e))
            checks["task_store"] = f"error: {e}"
            all_ok = False

    # 2. Executor
    if getattr(request.app.state, "executor", None) is None:
        checks["executor"] = "error: not initialized"
        all_ok = False
    else:
        checks["executor"] = "ok"

    status_code = 200 if all_ok else 503
    return JSONResponse(
        status_code=status_code,
        content={
            "status": "ready" if all_ok else "not_ready",
            "checks": checks,
        },
    )
