"""日志配置 -- structlog + 标准库 logging 统一输出

AGENTLINK_LOG_FORMAT=dev（默认）时彩色控制台输出，json 时每行一个 JSON 对象。
httpx / aiosqlite 等依赖库的日志经同一个 ProcessorFormatter 渲染，
非 DEBUG 级别下只保留它们的 WARNING 及以上。
可选的 Logfire APM 由 LOGFIRE_SEND_TO_LOGFIRE 控制。
"""

import logging
import os

import structlog
from fastapi import FastAPI

# 依赖库 logger：INFO 级别下逐请求输出，默认压到 WARNING
_CHATTY_LOGGERS = ("httpx", "httpcore", "aiosqlite")


def _pre_chain(json_mode: bool) -> list[structlog.types.Processor]:
    """structlog 与标准库记录共用的前置处理器"""
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_mode:
        # traceback 作为 exception 字段输出，而不是多行文本
        processors.append(structlog.processors.format_exc_info)
    processors.append(structlog.processors.UnicodeDecoder())
    return processors


def setup_logging() -> None:
    """配置 structlog 与根 logger，可重复调用（后一次覆盖前一次）

    环境变量:
        AGENTLINK_LOG_FORMAT: dev / json
        AGENTLINK_LOG_LEVEL: 根 logger 级别，默认 INFO
    """
    json_mode = os.environ.get("AGENTLINK_LOG_FORMAT", "dev").lower() == "json"
    level = getattr(
        logging,
        os.environ.get("AGENTLINK_LOG_LEVEL", "INFO").upper(),
        logging.INFO,
    )

    pre_chain = _pre_chain(json_mode)
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer(ensure_ascii=False)
        if json_mode
        else structlog.dev.ConsoleRenderer()
    )
    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain)
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    chatty_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(chatty_level)


def setup_logfire(app: FastAPI) -> bool:
    """按需启用 Logfire：FastAPI 入站请求 + httpx 出站请求

    仅当 LOGFIRE_SEND_TO_LOGFIRE=true 时尝试（需要 LOGFIRE_TOKEN 与 observability extra）；
    初始化失败只记录告警，服务照常以本地日志运行。

    Returns:
        True 如果 Logfire 已启用
    """
    if os.environ.get("LOGFIRE_SEND_TO_LOGFIRE", "false").lower() != "true":
        return False

    try:
        import logfire

        logfire.configure()
        logfire.instrument_fastapi(app)
        logfire.instrument_httpx()
    except Exception as e:
        structlog.get_logger().warning(
            "logfire_init_failed",
            error_type=type(e).__name__,
            error=str(e),
        )
        return False
    return True
