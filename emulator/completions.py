# completions.py
import random
import string
import time
from typing import Iterable, Optional

from .models import (
    ChatCompletionRequest,
    ChatMessage,
    ChunkCompletion,
    Completion,
    Delta,
    DeltaChoice,
    FullCompletion,
    Message,
    MessageChoice,
    Usage,
)

ID_PREFIX = "chatcmpl-"
ID_ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits
ID_LENGTH = 30

DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_PROMPT_TOKENS = 57
COMPLETION_TOKENS = 8
CHARS_PER_TOKEN = 3.5

PLACEHOLDER_TEXT = "Blank response from OpenAI API emulator."
FINISH_REASON = "STOP"


def generate_completion_id(rng: random.Random = random) -> str:
    """
    生成形如 "chatcmpl-XXXX" 的随机 ID，仅作展示用途，不保证唯一。

    Args:
        rng: 随机数来源，测试时可传入固定种子的 random.Random。

    Returns:
        str: "chatcmpl-" 加 30 个字母数字字符。
    """
    return ID_PREFIX + "".join(rng.choices(ID_ALPHABET, k=ID_LENGTH))


def estimate_prompt_tokens(messages: Iterable[Optional[ChatMessage]]) -> int:
    """
    粗略估算 prompt token 数：所有 content 的字符数之和除以 3.5，向零取整。
    非对象消息或非字符串 content 计为 0。
    """
    total_length = sum(
        len(message.content)
        for message in messages
        if message is not None and message.content is not None
    )
    return int(total_length / CHARS_PER_TOKEN)


def build_usage(request: ChatCompletionRequest) -> Usage:
    if request.messages is None:
        prompt_tokens = DEFAULT_PROMPT_TOKENS
    else:
        prompt_tokens = estimate_prompt_tokens(request.messages)
    return Usage(prompt_tokens=prompt_tokens, completion_tokens=COMPLETION_TOKENS)


def build_completion(request: ChatCompletionRequest, now: Optional[float] = None) -> Completion:
    """
    根据请求构造固定回复。stream 为 true 时返回 chunk 结构（delta，无 role），
    否则返回完整的 assistant 消息。

    Args:
        request: 已解析的请求。
        now: 创建时间（epoch 秒），默认为当前时间。

    Returns:
        Completion: FullCompletion 或 ChunkCompletion。
    """
    fields = {
        "id": generate_completion_id(),
        "created": int(time.time() if now is None else now),
        "model": request.model if request.model is not None else DEFAULT_MODEL,
        "usage": build_usage(request),
    }

    if request.stream:
        return ChunkCompletion(
            choices=[
                DeltaChoice(
                    index=0,
                    delta=Delta(content=PLACEHOLDER_TEXT),
                    finish_reason=FINISH_REASON,
                )
            ],
            **fields,
        )

    return FullCompletion(
        choices=[
            MessageChoice(
                index=0,
                message=Message(role="assistant", content=PLACEHOLDER_TEXT),
                finish_reason=FINISH_REASON,
            )
        ],
        **fields,
    )
