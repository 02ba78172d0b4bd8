"""
全量生成向量策略

忽略已有向量，查询和所有候选文档都由向量化模型生成
"""

from typing import List, Optional

from loguru import logger

from app.rag.embedding.base import IEmbeddingModel
from app.rag.models.candidate import Candidate, ScoredCandidate, Vector, to_vector
from app.rag.models.query import Query
from app.rag.strategies.base import (
    IEmbeddingStrategy,
    generate_embeddings,
    require_model,
    score_candidate,
)


class GenerateEmbeddings(IEmbeddingStrategy):
    """
    全量生成向量

    查询调用一次 embed，候选文档调用一次 embed_all
    """

    def process_query_embedding(
        self,
        query: Query,
        candidates: List[Candidate],
        embedding_model: Optional[IEmbeddingModel],
    ) -> Vector:
        model = require_model(embedding_model, self.strategy_name)
        logger.debug(f"[GenerateEmbeddings] 生成查询向量: query='{query.text[:50]}'")
        return to_vector(model.embed(query.text))

    def process_candidates(
        self,
        candidates: List[Candidate],
        query_embedding: Vector,
        embedding_model: Optional[IEmbeddingModel],
    ) -> List[ScoredCandidate]:
        model = require_model(embedding_model, self.strategy_name)
        logger.debug(f"[GenerateEmbeddings] 批量生成候选向量: count={len(candidates)}")

        embeddings = generate_embeddings(candidates, model)
        return [
            score_candidate(candidate, embedding, query_embedding)
            for candidate, embedding in zip(candidates, embeddings)
        ]

    @property
    def strategy_name(self) -> str:
        return "generate"
