"""Message / Part 数据模型 -- 对齐 A2A Message 规范

Part 为带 type 标签的联合类型：text / data / file，每个实例只有一个变体生效。
Message 一旦追加进 Task.history 即不可变。
"""

from typing import Annotated, Any, Literal

from pydantic import ConfigDict, Field, JsonValue, model_validator

from .base import WireModel
from .enums import Role


class TextPart(WireModel):
    """文本 Part，text 可以为空字符串但必须是字符串"""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str = Field(description="文本内容")
    metadata: dict[str, Any] | None = Field(default=None, description="附加元数据")


class DataPart(WireModel):
    """结构化数据 Part"""

    model_config = ConfigDict(frozen=True)

    type: Literal["data"] = "data"
    data: JsonValue = Field(description="任意 JSON 结构")
    metadata: dict[str, Any] | None = Field(default=None, description="附加元数据")


class FileContent(WireModel):
    """文件内容：inline base64 bytes 或 URI 引用，二者恰好其一"""

    model_config = ConfigDict(frozen=True)

    name: str | None = Field(default=None, description="文件名")
    mime_type: str | None = Field(default=None, alias="mimeType", description="MIME 类型")
    bytes: str | None = Field(default=None, description="base64 编码内容")
    uri: str | None = Field(default=None, description="文件引用 URI")

    @model_validator(mode="after")
    def _exactly_one_source(self) -> "FileContent":
        if (self.bytes is None) == (self.uri is None):
            raise ValueError("file part requires exactly one of 'bytes' or 'uri'")
        return self


class FilePart(WireModel):
    """文件 Part"""

    model_config = ConfigDict(frozen=True)

    type: Literal["file"] = "file"
    file: FileContent
    metadata: dict[str, Any] | None = Field(default=None, description="附加元数据")


Part = Annotated[TextPart | DataPart | FilePart, Field(discriminator="type")]


class Message(WireModel):
    """Message -- 请求方 (user) 或执行方 (agent) 的一次发言"""

    model_config = ConfigDict(frozen=True)

    role: Role = Field(description="发送方")
    parts: list[Part] = Field(min_length=1, description="Parts 数组，非空")
    metadata: dict[str, Any] | None = Field(default=None, description="附加元数据")


def extract_text(message: Message | None) -> str:
    """按顺序拼接所有 text Part 的内容，没有 text Part 时返回空字符串"""
    if message is None:
        return ""
    return "".join(part.text for part in message.parts if isinstance(part, TextPart))


def extract_structured(message: Message | None) -> JsonValue | None:
    """返回第一个 data Part 的 data，没有时返回 None"""
    if message is None:
        return None
    for part in message.parts:
        if isinstance(part, DataPart):
            return part.data
    return None


def text_message(role: Role, text: str) -> Message:
    """构造只含一个 text Part 的消息"""
    return Message(role=role, parts=[TextPart(text=text)])
