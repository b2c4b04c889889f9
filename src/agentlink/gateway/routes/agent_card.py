"""发现文档路由

GET /.well-known/agent.json: 返回 AgentCard（camelCase 字段）。
"""

from fastapi import APIRouter, Depends

from agentlink.core.models import AgentCard

from ..deps import get_agent_card

router = APIRouter()


@router.get("/.well-known/agent.json")
async def agent_card(card: AgentCard = Depends(get_agent_card)):
    return card.to_wire()
