"""GreetingAgentExecutor -- 问候类任务

入站文本按 JSON 解析为 {"type": "greeting", "input": {"name": ...}}；
非 JSON 文本视为不带名字的问候。data Part 中的同结构请求优先。
"""

import json
from typing import Any

from agentlink.core.models import (
    AgentSkill,
    Message,
    Role,
    Task,
    extract_structured,
    extract_text,
    text_message,
)

from .base import BaseAgentExecutor
from .models import ExecutionRequest, ExecutionResult

GREETING_SKILL = AgentSkill(
    id="greeting",
    name="Greeting Handler",
    description="Handles greeting tasks and replies politely",
    tags=["greeting", "social"],
    examples=["greeting", "hello"],
)


class GreetingAgent:
    """问候逻辑"""

    def __init__(self, signature: str = "Agent B") -> None:
        self._signature = signature

    async def handle_greeting(self, payload: dict[str, Any]) -> str:
        name = payload.get("name") or "friend"
        return f"Hey {name}, greetings from {self._signature} 🤝"


class GreetingAgentExecutor(BaseAgentExecutor):
    """问候 Executor

    行为:
        1. 解析任务载荷（data Part 优先，其次 text 的 JSON）
        2. type == "greeting" 时回复问候语
        3. 其他 type 回复 "Unsupported task type"，作为失败结果
    """

    skills = (GREETING_SKILL,)
    streaming = True

    def __init__(self, signature: str = "Agent B") -> None:
        self._agent = GreetingAgent(signature)

    async def on_message_send(
        self, request: ExecutionRequest, task: Task | None
    ) -> ExecutionResult:
        task_data = self._parse_task_data(request.message)

        if task_data.get("type") != "greeting":
            return ExecutionResult(
                message=text_message(Role.AGENT, "Unsupported task type"),
                is_failure=True,
            )

        payload = task_data.get("input")
        reply = await self._agent.handle_greeting(payload if isinstance(payload, dict) else {})
        return ExecutionResult(message=text_message(Role.AGENT, reply))

    @staticmethod
    def _parse_task_data(message: Message | None) -> dict[str, Any]:
        """提取任务载荷

        Returns:
            含 type 字段的 dict；无法识别时按纯文本问候处理
        """
        structured = extract_structured(message)
        if isinstance(structured, dict) and "type" in structured:
            return structured

        text = extract_text(message)
        try:
            parsed = json.loads(text)
        except ValueError:
            parsed = None
        if isinstance(parsed, dict):
            return parsed

        return {"type": "greeting", "input": {"message": text}}
