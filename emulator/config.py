import logging
import sys

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """从 EMULATOR_* 环境变量读取配置（"1"/"true"/"yes" 均可开启 debug）。"""
    model_config = SettingsConfigDict(env_prefix="EMULATOR_", env_file=".env", extra="ignore")

    host: str = "0.0.0.0"
    port: int = 8383
    debug: bool = False  # 为 true 时记录请求体与响应体
    log_level: str = "INFO"


def load_settings() -> Settings:
    return Settings()


def setup_logging(level: str = "INFO") -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()
    root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def configure_app_logging(settings: Settings) -> None:
    """
    以 `uvicorn emulator.main:app` 启动时 run() 不会执行，
    根 logger 尚无 handler 时在这里补上。
    """
    if not logging.getLogger().handlers:
        setup_logging(settings.log_level)
    # debug 回显使用 INFO，不受 log_level 限制
    logging.getLogger("emulator").setLevel(logging.INFO if settings.debug else logging.NOTSET)
