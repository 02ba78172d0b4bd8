"""
候选文档数据模型

定义融合阶段和 MMR 选择阶段的文档表示
"""

import hashlib
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

Vector = Tuple[float, ...]

TEMP_EMBEDDING_ID_PREFIX = "mmr-content-"


def to_vector(values: Optional[Sequence[float]]) -> Optional[Vector]:
    """
    转换为不可变向量

    接受 list / tuple / numpy 数组，None 原样返回
    """
    if values is None:
        return None
    return tuple(float(v) for v in values)


@dataclass(frozen=True, eq=False)
class Candidate:
    """
    候选文档

    由上游召回（向量库、全文检索等）产生，引擎只重排、过滤或包装，不修改内容
    """

    doc_id: str  # 文档ID（用于去重和融合）
    content: str = ""  # 文档内容片段
    metadata: Dict[str, Any] = field(default_factory=dict)  # 额外元数据
    embedding: Optional[Vector] = None  # 文档向量（可选）
    score: Optional[float] = None  # 上游相关性分数（可选）
    source: Optional[str] = None  # 召回来源标识

    def __post_init__(self):
        if self.metadata is None:
            object.__setattr__(self, "metadata", {})
        object.__setattr__(self, "embedding", to_vector(self.embedding))

    def __hash__(self):
        """
        用于去重

        当多路召回返回相同文档时，可以使用 set() 去重
        """
        return hash(self.doc_id)

    def __eq__(self, other):
        """相等性判断：仅比较 doc_id"""
        if not isinstance(other, Candidate):
            return False
        return self.doc_id == other.doc_id

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        return {
            "doc_id": self.doc_id,
            "content": self.content,
            "metadata": dict(self.metadata),
            "score": self.score,
            "source": self.source,
        }


@dataclass(frozen=True)
class ScoredCandidate:
    """
    带向量和分数的候选文档

    MMR 选择器的操作单元，分数为文档向量与查询向量的余弦相似度
    """

    candidate: Candidate
    embedding: Vector
    score: Optional[float] = None
    embedding_id: str = ""

    def __post_init__(self):
        object.__setattr__(self, "embedding", to_vector(self.embedding))
        if not self.embedding_id:
            object.__setattr__(self, "embedding_id", embedding_id_of(self.candidate))


def embedding_id_of(candidate: Candidate) -> str:
    """取元数据中的 embedding_id，缺失时按 doc_id 生成稳定的临时 ID"""
    embedding_id = candidate.metadata.get("embedding_id")
    if isinstance(embedding_id, str) and embedding_id.strip():
        return embedding_id
    digest = hashlib.md5(candidate.doc_id.encode("utf-8")).hexdigest()[:16]
    return f"{TEMP_EMBEDDING_ID_PREFIX}{digest}"
