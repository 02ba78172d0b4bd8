"""
查询数据模型

驱动相关性计算的信息需求
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from app.rag.models.candidate import Vector, to_vector


@dataclass(frozen=True)
class Query:
    """
    查询

    可作为字典键使用（仅按 text 计算哈希）
    """

    text: str
    metadata: Optional[Dict[str, Any]] = field(default=None, compare=False, hash=False)
    embedding: Optional[Vector] = field(default=None, compare=False, hash=False)  # 预计算的查询向量

    def __post_init__(self):
        """数据验证"""
        if not self.text or not self.text.strip():
            raise ValueError("query text 不能为空")
        object.__setattr__(self, "embedding", to_vector(self.embedding))
