"""agentlink Client -- A2A 服务调用方

client 包的公开接口导出。
"""

from .client import AGENT_CARD_PATH, A2ACardResolver, A2AClient
from .exceptions import A2AClientError, A2AClientHTTPError, A2AClientJSONRPCError

__all__ = [
    "AGENT_CARD_PATH",
    "A2ACardResolver",
    "A2AClient",
    "A2AClientError",
    "A2AClientHTTPError",
    "A2AClientJSONRPCError",
]
