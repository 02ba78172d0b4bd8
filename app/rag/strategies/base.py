"""
向量化策略接口定义

定义统一的向量化策略接口，所有策略必须实现此接口
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from app.rag.embedding.base import IEmbeddingModel
from app.rag.models.candidate import Candidate, ScoredCandidate, Vector, to_vector
from app.rag.models.query import Query
from app.rag.ranking.similarity import cosine_similarity


class IEmbeddingStrategy(ABC):
    """
    向量化策略接口

    为查询和候选文档准备向量（复用已有向量、全部生成、或两者混合）
    """

    @abstractmethod
    def process_query_embedding(
        self,
        query: Query,
        candidates: List[Candidate],
        embedding_model: Optional[IEmbeddingModel],
    ) -> Vector:
        """
        获取查询向量

        Args:
            query: 查询
            candidates: 候选文档列表
            embedding_model: 向量化模型

        Returns:
            查询向量
        """
        pass

    @abstractmethod
    def process_candidates(
        self,
        candidates: List[Candidate],
        query_embedding: Vector,
        embedding_model: Optional[IEmbeddingModel],
    ) -> List[ScoredCandidate]:
        """
        获取候选文档向量，并以与查询向量的余弦相似度打分

        Args:
            candidates: 候选文档列表
            query_embedding: 查询向量
            embedding_model: 向量化模型

        Returns:
            与 candidates 顺序一致的打分结果
        """
        pass

    @property
    @abstractmethod
    def strategy_name(self) -> str:
        """
        策略名称

        用于配置和日志，例如 "generate" 或 "hybrid"
        """
        pass

    def vectorize(
        self,
        query: Query,
        candidates: List[Candidate],
        embedding_model: Optional[IEmbeddingModel],
    ) -> Tuple[Vector, List[ScoredCandidate]]:
        """先获取查询向量，再处理候选文档"""
        query_embedding = self.process_query_embedding(query, candidates, embedding_model)
        matches = self.process_candidates(candidates, query_embedding, embedding_model)
        return query_embedding, matches

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


def require_model(
    embedding_model: Optional[IEmbeddingModel], strategy_name: str
) -> IEmbeddingModel:
    if embedding_model is None:
        raise ValueError(f"策略 {strategy_name} 需要 embedding_model，但未配置")
    return embedding_model


def score_candidate(candidate: Candidate, embedding: Vector, query_embedding: Vector) -> ScoredCandidate:
    return ScoredCandidate(
        candidate=candidate,
        embedding=embedding,
        score=cosine_similarity(embedding, query_embedding),
    )


def generate_embeddings(
    candidates: List[Candidate], embedding_model: IEmbeddingModel
) -> List[Vector]:
    """调用模型批量生成向量，并校验返回数量"""
    vectors = embedding_model.embed_all([c.content for c in candidates])
    if len(vectors) != len(candidates):
        raise ValueError(
            f"向量化模型返回数量不一致: 期望 {len(candidates)}，实际 {len(vectors)}"
        )
    return [to_vector(v) for v in vectors]
