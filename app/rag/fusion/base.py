"""
融合服务接口定义

定义统一的融合服务接口
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from app.rag.models.candidate import Candidate


class IFusionService(ABC):
    """
    融合服务接口

    负责将多路排序结果融合为单一的排序列表
    """

    @abstractmethod
    def rrf_merge(
        self,
        candidate_lists: List[List[Candidate]],
        top_n: Optional[int] = None,
        k: Optional[int] = None,
    ) -> List[Candidate]:
        """
        RRF (Reciprocal Rank Fusion) 融合算法

        公式: score(d) = Σ 1/(k + rank(d))

        Args:
            candidate_lists: 多路排序结果列表
            top_n: 返回最终结果数量（None 表示不截断）
            k: RRF 参数（None 时使用实现的默认值）

        Returns:
            融合后的候选列表
        """
        pass
