"""
RAG 模块 - 多样性感知的结果选择引擎

将多路召回的候选结果经 RRF 融合、向量化、MMR 选择，输出有界且不冗余的排序列表
"""

# 数据模型
from app.rag.models import Candidate, Query, ScoredCandidate

# 向量化模型
from app.rag.embedding import IEmbeddingModel, OpenAIEmbeddingModel

# 向量化策略
from app.rag.strategies import (
    IEmbeddingStrategy,
    UseExistingEmbeddings,
    GenerateEmbeddings,
    HybridEmbeddings,
    select_embedding_strategy,
)

# 融合服务
from app.rag.fusion import IFusionService, RRFMergeImpl

# MMR 选择
from app.rag.ranking import cosine_similarity, mmr_select

# 聚合器（核心编排器）
from app.rag.mmr_aggregator import MmrAggregator, default_query_selector

__all__ = [
    # 数据模型
    "Candidate",
    "Query",
    "ScoredCandidate",
    # 向量化模型
    "IEmbeddingModel",
    "OpenAIEmbeddingModel",
    # 向量化策略
    "IEmbeddingStrategy",
    "UseExistingEmbeddings",
    "GenerateEmbeddings",
    "HybridEmbeddings",
    "select_embedding_strategy",
    # 融合服务
    "IFusionService",
    "RRFMergeImpl",
    # MMR
    "cosine_similarity",
    "mmr_select",
    # 核心聚合器
    "MmrAggregator",
    "default_query_selector",
]
