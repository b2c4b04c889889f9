"""Artifact 数据模型 -- 对齐 A2A Artifact 规范

Artifact 是 Task 的结构化输出单元，与对话消息分开存放。
一次处理周期可产生零个或多个 Artifact，index 表示其在序列中的位置。
"""

from typing import Any

from pydantic import Field

from .base import WireModel
from .message import DataPart, Part, TextPart


class Artifact(WireModel):
    """Artifact -- 一个结构化输出单元"""

    name: str | None = Field(default=None, description="产物名称")
    description: str | None = Field(default=None, description="产物描述")
    parts: list[Part] = Field(default_factory=list, description="Parts 数组")
    index: int = Field(default=0, ge=0, description="在 artifacts 序列中的位置")
    metadata: dict[str, Any] = Field(default_factory=dict, description="附加元数据")

    @classmethod
    def from_data(
        cls,
        data: Any,
        name: str | None = None,
        description: str | None = None,
        **kwargs: Any,
    ) -> "Artifact":
        """构造只含一个 data Part 的 Artifact"""
        return cls(name=name, description=description, parts=[DataPart(data=data)], **kwargs)

    @classmethod
    def from_text(
        cls,
        text: str,
        name: str | None = None,
        description: str | None = None,
        **kwargs: Any,
    ) -> "Artifact":
        """构造只含一个 text Part 的 Artifact"""
        return cls(name=name, description=description, parts=[TextPart(text=text)], **kwargs)
