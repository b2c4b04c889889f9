"""线上模型基类 -- camelCase 别名 + JSON 序列化"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class WireModel(BaseModel):
    """所有协议对象的基类

    字段在 Python 侧使用 snake_case，线上使用 camelCase 别名；
    两种命名都可用于构造。
    """

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """序列化为 JSON 兼容的线上格式"""
        return self.model_dump(mode="json", by_alias=True)
