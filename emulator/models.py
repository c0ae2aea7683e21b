from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, computed_field, field_validator


class ChatMessage(BaseModel):
    role: Optional[str] = None  # user/assistant/system
    content: Optional[str] = None

    @field_validator("role", "content", mode="before")
    @classmethod
    def text_or_none(cls, value):
        return value if isinstance(value, str) else None


class ChatCompletionRequest(BaseModel):
    """
    请求体。所有字段均可选，类型不符的字段视为未提供。
    """
    model: Optional[str] = None
    messages: Optional[list[Optional[ChatMessage]]] = None
    stream: bool = False

    @field_validator("model", mode="before")
    @classmethod
    def text_or_none(cls, value):
        return value if isinstance(value, str) else None

    @field_validator("messages", mode="before")
    @classmethod
    def object_messages_only(cls, value):
        if not isinstance(value, list):
            return None
        # 非对象元素保留位置，但按空消息计
        return [item if isinstance(item, dict) else None for item in value]

    @field_validator("stream", mode="before")
    @classmethod
    def strict_true(cls, value):
        return value is True


class Usage(BaseModel):
    prompt_tokens: int
    completion_tokens: int

    @computed_field
    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class Message(BaseModel):
    role: str = "assistant"
    content: str


class Delta(BaseModel):
    role: Optional[str] = None
    content: Optional[str] = None


class MessageChoice(BaseModel):
    index: int = 0
    message: Message
    finish_reason: str


class DeltaChoice(BaseModel):
    index: int = 0
    delta: Delta
    finish_reason: str


class _CompletionBase(BaseModel):
    id: str
    created: int
    model: str
    usage: Usage
    system_fingerprint: Optional[str] = None


class FullCompletion(_CompletionBase):
    object: Literal["chat.completion"] = "chat.completion"
    choices: list[MessageChoice]


class ChunkCompletion(_CompletionBase):
    object: Literal["chat.completion.chunk"] = "chat.completion.chunk"
    choices: list[DeltaChoice]


# stream 为 true 时使用 chunk 结构，否则为完整消息
Completion = Annotated[Union[FullCompletion, ChunkCompletion], Field(discriminator="object")]
