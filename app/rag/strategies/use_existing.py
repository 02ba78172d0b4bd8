"""
复用已有向量策略

所有候选文档都已携带向量时使用，不调用向量化模型
"""

from typing import List, Optional

from loguru import logger

from app.rag.embedding.base import IEmbeddingModel
from app.rag.models.candidate import Candidate, ScoredCandidate, Vector
from app.rag.models.query import Query
from app.rag.strategies.base import IEmbeddingStrategy, score_candidate
from app.rag.utils.embedding_metadata import (
    extract_document_embedding,
    extract_query_embedding,
)


class UseExistingEmbeddings(IEmbeddingStrategy):
    """
    复用已有向量

    查询向量取自 query.embedding，或第一个候选文档元数据中的查询向量
    """

    def process_query_embedding(
        self,
        query: Query,
        candidates: List[Candidate],
        embedding_model: Optional[IEmbeddingModel],
    ) -> Vector:
        if query.embedding is not None:
            logger.debug("[UseExistingEmbeddings] 使用 query 自带的查询向量")
            return query.embedding

        if not candidates:
            raise ValueError("候选列表为空，无法提取查询向量")

        query_embedding = extract_query_embedding(candidates[0])
        if query_embedding is None:
            raise ValueError(
                "元数据中没有查询向量，请在召回阶段使用 enrich_with_embeddings 写入，"
                "或在 Query 中提供 embedding"
            )

        logger.debug("[UseExistingEmbeddings] 使用元数据中的查询向量")
        return query_embedding

    def process_candidates(
        self,
        candidates: List[Candidate],
        query_embedding: Vector,
        embedding_model: Optional[IEmbeddingModel],
    ) -> List[ScoredCandidate]:
        logger.debug(f"[UseExistingEmbeddings] 处理已有向量: count={len(candidates)}")

        matches = []
        for candidate in candidates:
            embedding = extract_document_embedding(candidate)
            if embedding is None:
                raise ValueError(
                    f"候选文档缺少向量: doc_id={candidate.doc_id}, "
                    f"content='{candidate.content[:100]}'"
                )
            matches.append(score_candidate(candidate, embedding, query_embedding))
        return matches

    @property
    def strategy_name(self) -> str:
        return "use_existing"
