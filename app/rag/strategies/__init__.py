"""
向量化策略模块

定义向量化策略接口和具体实现（复用已有、全量生成、混合）
"""

from app.rag.strategies.base import IEmbeddingStrategy
from app.rag.strategies.generate import GenerateEmbeddings
from app.rag.strategies.hybrid import HybridEmbeddings
from app.rag.strategies.use_existing import UseExistingEmbeddings
from app.rag.strategies.selector import create_strategy, select_embedding_strategy

__all__ = [
    "IEmbeddingStrategy",
    "UseExistingEmbeddings",
    "GenerateEmbeddings",
    "HybridEmbeddings",
    "create_strategy",
    "select_embedding_strategy",
]
