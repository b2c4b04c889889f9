"""依赖注入模块 -- 通过 FastAPI Depends 注入运行时组件

组件实例通过 app.state 管理，在 lifespan 中初始化/清理。
"""

from fastapi import Request

from agentlink.core.models import AgentCard

from .services.request_handler import RequestHandler


def get_request_handler(request: Request) -> RequestHandler:
    """从 app.state 获取 RequestHandler 实例"""
    return request.app.state.request_handler


def get_agent_card(request: Request) -> AgentCard:
    """从 app.state 获取 AgentCard"""
    return request.app.state.agent_card
