"""
OpenAI Embedding 模型

封装 OpenAI Embedding API 调用（同步客户端）
"""

from typing import List, Optional

from loguru import logger
from openai import OpenAI

from app.core.config import Settings, settings as default_settings
from app.rag.embedding.base import IEmbeddingModel


class OpenAIEmbeddingModel(IEmbeddingModel):
    """
    OpenAI Embedding 模型

    失败时记录日志后原样抛出，不做重试
    """

    def __init__(self, config: Optional[Settings] = None, client: Optional[OpenAI] = None):
        """
        初始化 OpenAI 客户端

        Args:
            config: 配置（默认使用全局 settings）
            client: 已创建的客户端（测试时注入）
        """
        config = config or default_settings

        if client is None:
            client_params = {"api_key": config.OPENAI_API_KEY}

            # 如果配置了自定义 API 端点
            if config.OPENAI_API_BASE:
                client_params["base_url"] = config.OPENAI_API_BASE
                logger.info(f"使用自定义 OpenAI API 端点: {config.OPENAI_API_BASE}")

            client = OpenAI(**client_params)

        self.client = client
        self.model = config.OPENAI_EMBEDDING_MODEL
        logger.info(f"Embedding 模型初始化完成，使用模型: {self.model}")

    def embed(self, text: str) -> List[float]:
        try:
            logger.debug(f"执行文本向量化: text_length={len(text)}")

            response = self.client.embeddings.create(input=text, model=self.model)

            vector = response.data[0].embedding
            logger.debug(f"向量化完成: vector_dim={len(vector)}")

            return vector

        except Exception as e:
            logger.error(f"文本向量化失败: {e}")
            raise

    def embed_all(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []

        try:
            logger.debug(f"批量向量化: batch_size={len(texts)}")

            response = self.client.embeddings.create(input=texts, model=self.model)

            # 按 index 排序，保证与输入顺序一致
            data = sorted(response.data, key=lambda item: item.index)
            vectors = [item.embedding for item in data]
            logger.info(f"批量向量化完成: count={len(vectors)}")

            return vectors

        except Exception as e:
            logger.error(f"批量向量化失败: {e}")
            raise
