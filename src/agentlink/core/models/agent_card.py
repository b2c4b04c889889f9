"""AgentCard -- 发现文档 (/.well-known/agent.json)

描述 agent 的名称、版本、技能与能力开关，调用方在首次 tasks/send 前读取。
"""

from pydantic import Field

from .base import WireModel


class AgentProvider(WireModel):
    organization: str
    url: str | None = None


class AgentCapabilities(WireModel):
    streaming: bool = False
    push_notifications: bool = Field(default=False, alias="pushNotifications")
    state_transition_history: bool = Field(default=False, alias="stateTransitionHistory")


class AgentAuthentication(WireModel):
    schemes: list[str] = Field(default_factory=lambda: ["public"])


class AgentSkill(WireModel):
    id: str
    name: str
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    examples: list[str] = Field(default_factory=list)


class AgentCard(WireModel):
    """Agent 能力声明"""

    name: str
    description: str | None = None
    url: str
    version: str = "1.0.0"
    provider: AgentProvider | None = None
    capabilities: AgentCapabilities = Field(default_factory=AgentCapabilities)
    authentication: AgentAuthentication = Field(default_factory=AgentAuthentication)
    default_input_modes: list[str] = Field(
        default_factory=lambda: ["text"], alias="defaultInputModes"
    )
    default_output_modes: list[str] = Field(
        default_factory=lambda: ["text"], alias="defaultOutputModes"
    )
    skills: list[AgentSkill] = Field(default_factory=list)

    def get_skill(self, skill_id: str) -> AgentSkill | None:
        for skill in self.skills:
            if skill.id == skill_id:
                return skill
        return None
