"""
混合向量策略

部分候选文档已有向量时使用：复用已有的，只为缺失的部分调用模型
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
from app.rag.utils.embedding_metadata import (
    extract_document_embedding,
    extract_query_embedding,
)


class HybridEmbeddings(IEmbeddingStrategy):
    """
    混合向量

    生成的向量按原下标放回，输出顺序与输入一致
    """

    def process_query_embedding(
        self,
        query: Query,
        candidates: List[Candidate],
        embedding_model: Optional[IEmbeddingModel],
    ) -> Vector:
        if query.embedding is not None:
            return query.embedding

        # 优先从元数据中提取
        for candidate in candidates:
            query_embedding = extract_query_embedding(candidate)
            if query_embedding is not None:
                logger.debug("[HybridEmbeddings] 使用元数据中的查询向量")
                return query_embedding

        logger.debug("[HybridEmbeddings] 元数据中没有查询向量，调用模型生成")
        model = require_model(embedding_model, self.strategy_name)
        return to_vector(model.embed(query.text))

    def process_candidates(
        self,
        candidates: List[Candidate],
        query_embedding: Vector,
        embedding_model: Optional[IEmbeddingModel],
    ) -> List[ScoredCandidate]:
        embeddings: List[Optional[Vector]] = [
            extract_document_embedding(candidate) for candidate in candidates
        ]
        missing = [idx for idx, embedding in enumerate(embeddings) if embedding is None]

        if missing:
            model = require_model(embedding_model, self.strategy_name)
            generated = generate_embeddings([candidates[idx] for idx in missing], model)
            for idx, embedding in zip(missing, generated):
                embeddings[idx] = embedding

        logger.debug(
            f"[HybridEmbeddings] 处理完成: total={len(candidates)}, "
            f"existing={len(candidates) - len(missing)}, generated={len(missing)}"
        )

        return [
            score_candidate(candidate, embedding, query_embedding)
            for candidate, embedding in zip(candidates, embeddings)
        ]

    @property
    def strategy_name(self) -> str:
        return "hybrid"
