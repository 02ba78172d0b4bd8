"""
向量化策略选择

根据候选文档的向量覆盖情况自动选择策略
"""

from typing import Dict, List, Type

from loguru import logger

from app.rag.models.candidate import Candidate
from app.rag.strategies.base import IEmbeddingStrategy
from app.rag.strategies.generate import GenerateEmbeddings
from app.rag.strategies.hybrid import HybridEmbeddings
from app.rag.strategies.use_existing import UseExistingEmbeddings
from app.rag.utils.embedding_metadata import has_document_embedding

STRATEGIES: Dict[str, Type[IEmbeddingStrategy]] = {
    "use_existing": UseExistingEmbeddings,
    "generate": GenerateEmbeddings,
    "hybrid": HybridEmbeddings,
}


def select_embedding_strategy(
    candidates: List[Candidate], force_generation: bool = False
) -> IEmbeddingStrategy:
    """
    选择向量化策略

    规则:
        - force_generation=True: GenerateEmbeddings
        - 没有任何候选带向量: GenerateEmbeddings
        - 部分带向量: HybridEmbeddings
        - 全部带向量: UseExistingEmbeddings

    Args:
        candidates: 候选文档列表
        force_generation: 是否强制生成

    Returns:
        策略实例
    """
    if force_generation:
        logger.debug("[StrategySelector] 强制生成向量: GenerateEmbeddings")
        return GenerateEmbeddings()

    with_embedding = sum(1 for candidate in candidates if has_document_embedding(candidate))

    if with_embedding == 0:
        strategy: IEmbeddingStrategy = GenerateEmbeddings()
    elif with_embedding < len(candidates):
        strategy = HybridEmbeddings()
    else:
        strategy = UseExistingEmbeddings()

    logger.debug(
        f"[StrategySelector] 选择策略: {strategy.strategy_name} "
        f"(带向量 {with_embedding}/{len(candidates)})"
    )
    return strategy


def create_strategy(name: str) -> IEmbeddingStrategy:
    """
    按名称创建策略实例

    Args:
        name: "use_existing" / "generate" / "hybrid"
    """
    try:
        return STRATEGIES[name]()
    except KeyError:
        raise ValueError(
            f"不支持的向量化策略: {name}，可选: {', '.join(STRATEGIES)}"
        ) from None
