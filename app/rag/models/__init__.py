"""
数据模型模块

定义 MMR 聚合引擎的核心数据结构
"""

from app.rag.models.candidate import (
    Candidate,
    ScoredCandidate,
    Vector,
    embedding_id_of,
    to_vector,
)
from app.rag.models.query import Query

__all__ = [
    "Candidate",
    "ScoredCandidate",
    "Vector",
    "Query",
    "embedding_id_of",
    "to_vector",
]
