"""
MMR (最大边际相关性) 算法实现

用于在保持相关性的同时，增加结果集的多样性。
"""

from typing import List, Optional, Sequence

import numpy as np
from loguru import logger

from app.rag.models.candidate import Candidate, ScoredCandidate
from app.rag.ranking.similarity import cosine_similarity, normalize_rows

MIN_LAMBDA = 0.0
MAX_LAMBDA = 1.0


def validate_selection_parameters(lambda_param: float, max_results: Optional[int]) -> None:
    """lambda 与 max_results 的取值校验（NaN 视为越界）"""
    if not lambda_param >= MIN_LAMBDA:
        raise ValueError(
            f"lambda 必须 >= {MIN_LAMBDA}（区间 [{MIN_LAMBDA}, {MAX_LAMBDA}]），当前值: {lambda_param}"
        )
    if not lambda_param <= MAX_LAMBDA:
        raise ValueError(
            f"lambda 必须 <= {MAX_LAMBDA}（区间 [{MIN_LAMBDA}, {MAX_LAMBDA}]），当前值: {lambda_param}"
        )
    if max_results is not None and max_results < 0:
        raise ValueError(f"max_results 不能为负数，当前值: {max_results}")


def validate_parameters(
    query_embedding: Optional[Sequence[float]], lambda_param: float, max_results: int
) -> None:
    """参数校验，任何选择工作之前失败"""
    if query_embedding is None:
        raise ValueError("query embedding required")
    validate_selection_parameters(lambda_param, max_results)


def relevance_of(match: ScoredCandidate, query_embedding: Sequence[float]) -> float:
    """
    相关性分数

    已有分数优先，不重新计算；没有分数时才使用与查询向量的余弦相似度
    """
    if match.score is not None:
        return float(match.score)
    return cosine_similarity(match.embedding, query_embedding)


def mmr_select_matches(
    query_embedding: Optional[Sequence[float]],
    candidates: Optional[List[ScoredCandidate]],
    max_results: int,
    lambda_param: float,
) -> List[ScoredCandidate]:
    """
    使用 MMR 算法选择结果

    算法公式:
        MMR = argmax[λ * Rel(D) - (1-λ) * max Sim(D, Di)]
              D∈R\\S

    参数说明:
        - λ=1: 只看相关性（等价于按分数取 TopK）
        - λ=0: 只看多样性（第一个仍是相关性最高的）
        - 分数相同时优先相关性更高的文档

    Args:
        query_embedding: 查询向量（必填）
        candidates: 带向量和分数的候选列表
        max_results: 返回数量上限
        lambda_param: 平衡参数 [0, 1]

    Returns:
        按选择顺序排列的结果
    """
    validate_parameters(query_embedding, lambda_param, max_results)

    if not candidates or max_results == 0:
        return []

    # 数量不足时全部返回，不做排序
    if max_results >= len(candidates):
        return list(candidates)

    query = np.asarray(query_embedding, dtype=float)
    for match in candidates:
        if len(match.embedding) != query.shape[0]:
            raise ValueError(
                f"候选向量维度与查询向量不一致: doc_id={match.candidate.doc_id}, "
                f"{len(match.embedding)} != {query.shape[0]}"
            )

    logger.debug(
        f"[MMR] 开始选择: 候选数={len(candidates)}, lambda={lambda_param}, max_results={max_results}"
    )

    # 按相关性稳定降序，平分时先出现的（相关性更高的）胜出
    relevance = [relevance_of(match, query) for match in candidates]
    order = sorted(range(len(candidates)), key=lambda i: relevance[i], reverse=True)
    pool = [candidates[i] for i in order]
    rel = np.asarray([relevance[i] for i in order], dtype=float)

    unit = normalize_rows(np.asarray([m.embedding for m in pool], dtype=float))
    max_similarity = np.zeros(len(pool))
    available = np.ones(len(pool), dtype=bool)

    selected: List[ScoredCandidate] = []
    while len(selected) < max_results:
        mmr_scores = lambda_param * rel - (1 - lambda_param) * max_similarity
        mmr_scores[~available] = -np.inf
        best_idx = int(np.argmax(mmr_scores))

        selected.append(pool[best_idx])
        available[best_idx] = False

        # 只需要与最新选中文档比较
        similarities = unit @ unit[best_idx]
        if len(selected) == 1:
            max_similarity = similarities
        else:
            max_similarity = np.maximum(max_similarity, similarities)

    logger.debug(f"[MMR] 选择完成: 输出数={len(selected)}")
    return selected


def mmr_select(
    query_embedding: Optional[Sequence[float]],
    candidates: Optional[List[ScoredCandidate]],
    max_results: int,
    lambda_param: float = 0.7,
) -> List[Candidate]:
    """MMR 选择，返回去掉向量和分数的候选文档"""
    matches = mmr_select_matches(query_embedding, candidates, max_results, lambda_param)
    return [match.candidate for match in matches]
