import json
import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response

from .completions import build_completion
from .config import Settings, configure_app_logging, load_settings, setup_logging
from .models import ChatCompletionRequest, Completion

logger = logging.getLogger("emulator")

COMPLETIONS_PATH = "/v1/chat/completions"
# 不限制请求方法
ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]
# JSON 空白字符
JSON_WHITESPACE = " \t\n\r"

_decoder = json.JSONDecoder()


def parse_request_body(raw: bytes) -> ChatCompletionRequest:
    """
    解析请求体。请求体为空、不是合法 JSON 或不是 JSON 对象时，
    记录错误并按"未提供任何字段"处理，不拒绝请求。
    只解码第一个 JSON 值，其后的内容忽略。
    """
    if not raw:
        return ChatCompletionRequest()

    try:
        data, _ = _decoder.raw_decode(raw.decode("utf-8").lstrip(JSON_WHITESPACE))
    except (ValueError, RecursionError) as e:
        logger.error(f"请求体解码失败: {e}")
        return ChatCompletionRequest()

    if not isinstance(data, dict):
        logger.error(f"请求体解码失败: 需要 JSON 对象，收到 {type(data).__name__}")
        return ChatCompletionRequest()

    return ChatCompletionRequest.model_validate(data)


def encode_completion(completion: Completion) -> str:
    # 未设置的可选字段（system_fingerprint、delta.role）不输出
    return completion.model_dump_json(exclude_none=True)


async def chat_completions(request: Request) -> Response:
    settings: Settings = request.app.state.settings

    if settings.debug:
        client = request.client.host if request.client else "-"
        logger.info(f"收到 {request.method} 请求 {request.url.path}，来自 {client}")

    completion_request = parse_request_body(await request.body())

    if settings.debug:
        logger.info(f"请求体: {completion_request!r}")

    completion = build_completion(completion_request)

    try:
        body = encode_completion(completion)
    except (TypeError, ValueError) as e:
        logger.error(f"响应编码失败: {e}")
        return PlainTextResponse("Error encoding response", status_code=500)

    if settings.debug:
        logger.info(f"已发送响应: {body}")
    return Response(content=body, media_type="application/json")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    app = FastAPI(title="OpenAI API emulator")
    app.state.settings = settings if settings is not None else load_settings()
    configure_app_logging(app.state.settings)

    # 允许所有来源的跨域请求
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_api_route(
        COMPLETIONS_PATH,
        chat_completions,
        methods=ALL_METHODS,
        include_in_schema=False,
    )
    return app


app = create_app()


def run():
    settings = load_settings()
    setup_logging(settings.log_level)
    logger.info(f"Starting server on {settings.host}:{settings.port}")
    # 端口绑定失败时 uvicorn 以非零状态退出
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
