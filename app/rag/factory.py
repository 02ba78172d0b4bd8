"""
MMR 聚合器配置工厂

提供便捷的聚合器初始化方法
"""

from typing import Optional

from loguru import logger

from app.core.config import Settings, settings as default_settings
from app.rag.embedding.base import IEmbeddingModel
from app.rag.embedding.openai_model import OpenAIEmbeddingModel
from app.rag.mmr_aggregator import MmrAggregator, QuerySelector


def create_embedding_model(config: Optional[Settings] = None) -> IEmbeddingModel:
    """
    创建向量化模型实例

    Args:
        config: 配置（默认使用全局 settings）
    """
    config = config or default_settings
    logger.info(f"[MmrFactory] 创建 OpenAI Embedding 模型: model={config.OPENAI_EMBEDDING_MODEL}")
    return OpenAIEmbeddingModel(config=config)


def _needs_model(config: Settings) -> bool:
    # 只有明确指定 use_existing 时才完全不需要模型
    return config.MMR_EMBEDDING_STRATEGY != "use_existing"


def create_aggregator(
    config: Optional[Settings] = None,
    embedding_model: Optional[IEmbeddingModel] = None,
    query_selector: Optional[QuerySelector] = None,
) -> MmrAggregator:
    """
    创建 MMR 聚合器

    Args:
        config: 配置（默认使用全局 settings）
        embedding_model: 向量化模型（未提供且需要时按配置创建 OpenAI 模型）
        query_selector: 多查询时的查询选择函数

    Returns:
        聚合器实例
    """
    config = config or default_settings

    if embedding_model is None and _needs_model(config):
        embedding_model = create_embedding_model(config)

    aggregator = MmrAggregator.from_settings(
        config, embedding_model=embedding_model, query_selector=query_selector
    )
    logger.info("[MmrFactory] MMR 聚合器创建完成")
    return aggregator
