# 读取 .env 配置
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""  # 为空时只输出到控制台

    # MMR
    MMR_LAMBDA: float = Field(0.7, ge=0.0, le=1.0)
    MMR_MAX_RESULTS: Optional[int] = Field(None, ge=0)  # None 表示不限制
    MMR_MIN_SCORE: Optional[float] = None
    MMR_FORCE_EMBEDDING_GENERATION: bool = False
    MMR_EMBEDDING_STRATEGY: Optional[Literal["use_existing", "generate", "hybrid"]] = None  # None 表示自动选择

    # RRF
    RRF_K: int = Field(60, gt=0)

    # OpenAI Embedding
    OPENAI_API_KEY: str = ""
    OPENAI_API_BASE: str = ""
    OPENAI_EMBEDDING_MODEL: str = "text-embedding-3-small"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore" # 忽略多余的环境变量
    )

settings = Settings()
