"""
RRF 融合算法实现

实现 Reciprocal Rank Fusion (RRF) 融合算法
"""

import dataclasses
from typing import Dict, List, Optional

from loguru import logger

from app.rag.fusion.base import IFusionService
from app.rag.models.candidate import Candidate

DEFAULT_RRF_K = 60


class RRFMergeImpl(IFusionService):
    """
    RRF 融合算法实现

    使用 Reciprocal Rank Fusion 公式合并多路排序结果
    """

    def __init__(self, k: int = DEFAULT_RRF_K):
        if k <= 0:
            raise ValueError(f"RRF 参数 k 必须为正数，当前值: {k}")
        self.k = k

    def rrf_merge(
        self,
        candidate_lists: List[List[Candidate]],
        top_n: Optional[int] = None,
        k: Optional[int] = None,
    ) -> List[Candidate]:
        """
        RRF 融合算法

        公式: score(d) = Σ 1/(k + rank(d))
        其中 rank(d) 是文档 d 在某一列表中的排名（从 1 开始）

        Args:
            candidate_lists: 多路排序结果列表
            top_n: 返回最终结果数量（None 表示不截断）
            k: RRF 参数（默认使用构造时的 k）

        Returns:
            融合后的新候选列表，按 RRF 分数降序排列（分数相同按首次出现顺序）
        """
        k = self.k if k is None else k
        if k <= 0:
            raise ValueError(f"RRF 参数 k 必须为正数，当前值: {k}")

        logger.debug(
            f"[RRF] 开始融合: lists_count={len(candidate_lists)}, k={k}, top_n={top_n}, "
            f"各路数量={[len(lst) for lst in candidate_lists]}"
        )

        # doc_id -> 累计分数；首次出现的候选作为代表（dict 保持插入顺序）
        scores: Dict[str, float] = {}
        representatives: Dict[str, Candidate] = {}

        for candidate_list in candidate_lists:
            for rank, candidate in enumerate(candidate_list, start=1):
                scores[candidate.doc_id] = scores.get(candidate.doc_id, 0.0) + 1.0 / (k + rank)
                representatives.setdefault(candidate.doc_id, candidate)

        # sorted 是稳定排序
        ordered = sorted(scores, key=lambda doc_id: scores[doc_id], reverse=True)
        merged = [
            dataclasses.replace(representatives[doc_id], score=scores[doc_id])
            for doc_id in ordered
        ]

        if top_n is not None:
            merged = merged[:top_n]

        logger.debug(
            f"[RRF] 融合完成: 合并前总数={len(scores)}, 返回={len(merged)}, "
            f"Top 3 分数: {[(c.doc_id, round(c.score, 4)) for c in merged[:3]]}"
        )
        return merged
