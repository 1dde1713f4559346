# src/jsonlingo/config.py
"""
jsonlingo 服务配置（Pydantic v2）。

所有字段均可通过 `JSONLINGO_` 前缀的环境变量覆盖，嵌套字段以 "__" 分隔，
例如 `JSONLINGO_DATABASE__URL`、`JSONLINGO_TRANSLATION_RETRY__MAX_ATTEMPTS`。
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine.url import make_url

from jsonlingo.domain.retry import BackoffPolicy

ALLOWED_ASYNC_DRIVERS = frozenset({"sqlite+aiosqlite", "postgresql+asyncpg"})

# ===================== 子模型 =====================


class DatabaseSettings(BaseModel):
    """主库（运行期异步驱动）"""

    url: str = Field(
        default="sqlite+aiosqlite:///jsonlingo.db",
        description="异步 DSN（sqlite+aiosqlite / postgresql+asyncpg）",
    )
    echo: bool = Field(default=False, description="SQLAlchemy echo（调试）")

    @field_validator("url")
    @classmethod
    def _validate_async_driver(cls, v: str) -> str:
        try:
            drv = make_url(v).drivername.lower()
        except Exception as e:
            raise ValueError(f"非法数据库 URL：{v!r}（{e}）") from e
        if drv not in ALLOWED_ASYNC_DRIVERS:
            raise ValueError(
                f"不支持的运行期数据库驱动：{drv!r}，"
                f"仅允许 {', '.join(sorted(ALLOWED_ASYNC_DRIVERS))}"
            )
        return v


class CacheSettings(BaseModel):
    ttl: int = Field(default=3600, ge=1)
    maxsize: int = Field(default=10000, ge=1)


class RedisSettings(BaseModel):
    """未配置 url 时，L1 缓存退化为进程内 TTL 缓存。"""

    url: Optional[str] = Field(default=None)
    key_prefix: str = Field(default="jl:dev:")
    cache: CacheSettings = Field(default_factory=CacheSettings)


class WorkerSettings(BaseModel):
    poll_interval: float = Field(default=2.0, gt=0)
    translation_concurrency: int = Field(default=5, ge=1)
    callback_concurrency: int = Field(default=10, ge=1)
    visibility_timeout: float = Field(default=600.0, gt=0)


class QueueSettings(BaseModel):
    translation_queue: str = Field(default="translation")
    callback_queue: str = Field(default="callback")


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    format: Literal["console", "json"] = Field(default="console")


class RetryPolicySettings(BaseModel):
    max_attempts: int = Field(default=3, ge=1)
    initial_backoff: float = Field(default=5.0, gt=0)
    max_backoff: float = Field(default=300.0, gt=0)

    def to_policy(self) -> BackoffPolicy:
        return BackoffPolicy(
            max_attempts=self.max_attempts,
            initial_backoff=self.initial_backoff,
            max_backoff=self.max_backoff,
        )


class CallbackSettings(BaseModel):
    timeout: float = Field(default=10.0, gt=0)
    response_body_limit: int = Field(default=1000, ge=0)


class OpenAISettings(BaseModel):
    api_key: Optional[str] = Field(default=None)
    base_url: Optional[str] = Field(default=None)
    model: str = Field(default="gpt-4o-mini")
    temperature: float = Field(default=0.1, ge=0)
    shortener_temperature: float = Field(default=0.3, ge=0)
    timeout: float = Field(default=60.0, gt=0)
    connect_timeout: float = Field(default=5.0, gt=0)
    max_retries: int = Field(default=2, ge=0)
    max_concurrency: int = Field(default=5, ge=1)


class DeepLSettings(BaseModel):
    auth_key: Optional[str] = Field(default=None)
    server_url: Optional[str] = Field(default=None)


class DebugEngineSettings(BaseModel):
    mode: Literal["SUCCESS", "FAIL"] = Field(default="SUCCESS")
    fail_on_text: Optional[str] = Field(default=None)
    fail_is_retryable: bool = Field(default=True)


# ===================== 顶层配置 =====================
class JsonLingoConfig(BaseSettings):
    """
    jsonlingo 核心配置模型。
    """

    # --- 领域子配置 ---
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    worker: WorkerSettings = Field(default_factory=WorkerSettings)
    queue: QueueSettings = Field(default_factory=QueueSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    translation_retry: RetryPolicySettings = Field(default_factory=RetryPolicySettings)
    callback_retry: RetryPolicySettings = Field(
        default_factory=lambda: RetryPolicySettings(
            max_attempts=10, initial_backoff=10.0, max_backoff=3600.0
        )
    )
    callback: CallbackSettings = Field(default_factory=CallbackSettings)
    openai: OpenAISettings = Field(default_factory=OpenAISettings)
    deepl: DeepLSettings = Field(default_factory=DeepLSettings)
    debug_engine: DebugEngineSettings = Field(default_factory=DebugEngineSettings)

    # --- 连接池高级参数 ---
    db_pool_size: Optional[int] = None
    db_max_overflow: Optional[int] = None
    db_pool_timeout: int = 30
    db_pool_recycle: Optional[int] = None
    db_pool_pre_ping: bool = True
    db_echo: bool = False

    # --- 引擎/批量/切分 ---
    active_engine: Literal["debug", "openai", "deepl"] = "debug"
    batch_size: int = Field(default=50, ge=1)
    segment_min_length: int = Field(default=100, ge=1)

    # --- Pydantic v2 设置 ---
    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_prefix="JSONLINGO_",
        case_sensitive=False,
        extra="ignore",
        env_file_encoding="utf-8",
    )
