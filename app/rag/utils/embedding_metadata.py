"""
向量与元数据互转工具

部分存储的元数据只支持标量类型，向量以 base64 字符串（大端 float32）形式存放，
读取时再还原为向量
"""

import base64
import dataclasses
from typing import Optional, Sequence

import numpy as np

from app.rag.models.candidate import Candidate, Vector, to_vector

DOCUMENT_EMBEDDING_KEY = "embedding"
QUERY_EMBEDDING_KEY = "query_embedding"

_FLOAT32_BE = np.dtype(">f4")


def embedding_to_base64(embedding: Optional[Sequence[float]]) -> Optional[str]:
    """向量 -> base64 字符串"""
    if embedding is None:
        return None
    raw = np.asarray(embedding, dtype=_FLOAT32_BE).tobytes()
    return base64.b64encode(raw).decode("ascii")


def base64_to_embedding(encoded: Optional[str]) -> Optional[Vector]:
    """base64 字符串 -> 向量"""
    if encoded is None:
        return None
    raw = base64.b64decode(encoded)
    return to_vector(np.frombuffer(raw, dtype=_FLOAT32_BE).tolist())


def enrich_with_embeddings(
    candidate: Candidate,
    query_embedding: Optional[Sequence[float]] = None,
    document_embedding: Optional[Sequence[float]] = None,
) -> Candidate:
    """
    将查询向量和文档向量写入元数据

    Args:
        candidate: 原候选文档（不会被修改）
        query_embedding: 查询向量（可选）
        document_embedding: 文档向量（可选）

    Returns:
        元数据中带有向量的新候选文档
    """
    metadata = dict(candidate.metadata)
    if document_embedding is not None:
        metadata[DOCUMENT_EMBEDDING_KEY] = embedding_to_base64(document_embedding)
    if query_embedding is not None:
        metadata[QUERY_EMBEDDING_KEY] = embedding_to_base64(query_embedding)
    return dataclasses.replace(candidate, metadata=metadata)


def _extract(candidate: Candidate, key: str) -> Optional[Vector]:
    stored = candidate.metadata.get(key)
    if isinstance(stored, str):
        return base64_to_embedding(stored)
    return None


def extract_document_embedding(candidate: Candidate) -> Optional[Vector]:
    """文档向量：优先 candidate.embedding，其次元数据"""
    if candidate.embedding is not None:
        return candidate.embedding
    return _extract(candidate, DOCUMENT_EMBEDDING_KEY)


def extract_query_embedding(candidate: Candidate) -> Optional[Vector]:
    return _extract(candidate, QUERY_EMBEDDING_KEY)


def has_document_embedding(candidate: Candidate) -> bool:
    return extract_document_embedding(candidate) is not None


def has_query_embedding(candidate: Candidate) -> bool:
    return extract_query_embedding(candidate) is not None
