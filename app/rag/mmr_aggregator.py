"""
MMR 聚合器 - 结果选择引擎核心入口

协调 RRF 融合、向量化策略、分数过滤和 MMR 选择的完整流程
"""

from typing import Callable, Collection, List, Mapping, Optional

from loguru import logger

from app.core.config import Settings
from app.rag.embedding.base import IEmbeddingModel
from app.rag.fusion.base import IFusionService
from app.rag.fusion.rrf_fusion import RRFMergeImpl
from app.rag.models.candidate import Candidate
from app.rag.models.query import Query
from app.rag.ranking.mmr import mmr_select, validate_selection_parameters
from app.rag.strategies.base import IEmbeddingStrategy
from app.rag.strategies.selector import create_strategy, select_embedding_strategy

DEFAULT_LAMBDA = 0.7
MIN_POOL_FACTOR = 5
MAX_POOL_FACTOR = 10

QueryToCandidates = Mapping[Query, Collection[List[Candidate]]]
QuerySelector = Callable[[QueryToCandidates], Query]


def default_query_selector(query_to_candidates: QueryToCandidates) -> Query:
    """只允许单个查询，多查询时需要调用方提供 query_selector"""
    if len(query_to_candidates) > 1:
        raise ValueError(
            f"query_to_candidates 包含 {len(query_to_candidates)} 个 queries, making MMR ambiguous. "
            "Please provide a 'query_selector'."
        )
    return next(iter(query_to_candidates))


class MmrAggregator:
    """
    MMR 聚合器

    执行流程:
        1. 选择驱动相关性的查询
        2. RRF 融合（先按查询融合，再跨查询融合）
        3. 选择向量化策略（手动 > 强制生成 > 自动）
        4. 向量化并按 min_score 过滤
        5. MMR 选择
    """

    def __init__(
        self,
        embedding_model: Optional[IEmbeddingModel] = None,
        fusion_service: Optional[IFusionService] = None,
        query_selector: Optional[QuerySelector] = None,
        min_score: Optional[float] = None,
        max_results: Optional[int] = None,
        lambda_param: float = DEFAULT_LAMBDA,
        force_embedding_generation: bool = False,
        strategy: Optional[IEmbeddingStrategy] = None,
    ):
        """
        初始化 MMR 聚合器

        Args:
            embedding_model: 向量化模型（未强制生成且未指定策略时必填）
            fusion_service: 融合服务（默认 RRF）
            query_selector: 多查询时选择驱动查询的函数
            min_score: 最低分数阈值（可选）
            max_results: 返回数量上限（None 表示不限制）
            lambda_param: MMR 平衡参数，默认 0.7（略偏向相关性）
            force_embedding_generation: 是否忽略已有向量强制生成
            strategy: 手动指定的向量化策略（优先级最高）
        """
        if embedding_model is None and not force_embedding_generation and strategy is None:
            raise ValueError("embedding_model 不能为空")
        validate_selection_parameters(lambda_param, max_results)

        self.embedding_model = embedding_model
        self.fusion_service = fusion_service or RRFMergeImpl()
        self.query_selector = query_selector or default_query_selector
        self.min_score = min_score
        self.max_results = max_results
        self.lambda_param = lambda_param
        self.force_embedding_generation = force_embedding_generation
        self.strategy = strategy

        if force_embedding_generation and strategy is not None:
            logger.warning(
                "[MmrAggregator] 同时指定了 force_embedding_generation 和 strategy，以手动策略为准"
            )

        if strategy is not None:
            mode = f"manual({strategy.strategy_name})"
        elif force_embedding_generation:
            mode = "force_generation"
        else:
            mode = "auto"

        logger.info(
            f"MmrAggregator 初始化完成: strategy={mode}, lambda={lambda_param}, "
            f"max_results={max_results}, min_score={min_score}"
        )

    @classmethod
    def from_settings(
        cls,
        config: Settings,
        embedding_model: Optional[IEmbeddingModel] = None,
        query_selector: Optional[QuerySelector] = None,
        fusion_service: Optional[IFusionService] = None,
    ) -> "MmrAggregator":
        """按配置创建聚合器"""
        strategy = (
            create_strategy(config.MMR_EMBEDDING_STRATEGY)
            if config.MMR_EMBEDDING_STRATEGY
            else None
        )
        return cls(
            embedding_model=embedding_model,
            fusion_service=fusion_service or RRFMergeImpl(k=config.RRF_K),
            query_selector=query_selector,
            min_score=config.MMR_MIN_SCORE,
            max_results=config.MMR_MAX_RESULTS,
            lambda_param=config.MMR_LAMBDA,
            force_embedding_generation=config.MMR_FORCE_EMBEDDING_GENERATION,
            strategy=strategy,
        )

    def aggregate(self, query_to_candidates: QueryToCandidates) -> List[Candidate]:
        """
        聚合多路候选结果

        Args:
            query_to_candidates: 查询 -> 多路排序结果

        Returns:
            MMR 选择后的候选文档（有序）
        """
        if not query_to_candidates:
            return []

        query = self.query_selector(query_to_candidates)

        logger.info(
            f"[MmrAggregator] 开始聚合: query='{query.text[:50]}', queries={len(query_to_candidates)}"
        )

        # Step 1: 按查询融合，再跨查询融合
        fused_per_query = [
            self.fusion_service.rrf_merge(list(candidate_lists))
            for candidate_lists in query_to_candidates.values()
        ]
        fused = self.fusion_service.rrf_merge(fused_per_query)

        if not fused:
            logger.info("[MmrAggregator] 融合结果为空")
            return fused

        if self.max_results is not None and len(fused) < MIN_POOL_FACTOR * self.max_results:
            logger.warning(
                f"[MmrAggregator] MMR 前候选数量偏少: {len(fused)} 条 "
                f"(建议为 max_results 的 {MIN_POOL_FACTOR}-{MAX_POOL_FACTOR} 倍, "
                f"当前区间: {MIN_POOL_FACTOR * self.max_results}-{MAX_POOL_FACTOR * self.max_results})"
            )

        return self._apply_mmr(query, fused)

    def _resolve_strategy(self, candidates: List[Candidate]) -> IEmbeddingStrategy:
        """手动策略 > 强制生成 > 自动选择"""
        if self.strategy is not None:
            logger.debug(f"[MmrAggregator] 使用手动策略: {self.strategy.strategy_name}")
            return self.strategy
        return select_embedding_strategy(candidates, self.force_embedding_generation)

    def _apply_mmr(self, query: Query, candidates: List[Candidate]) -> List[Candidate]:
        # Step 2: 向量化
        strategy = self._resolve_strategy(candidates)
        query_embedding, matches = strategy.vectorize(query, candidates, self.embedding_model)

        # Step 3: 分数过滤
        if self.min_score is not None:
            before = len(matches)
            matches = [
                m for m in matches if m.score is not None and m.score >= self.min_score
            ]
            logger.debug(
                f"[MmrAggregator] min_score 过滤: {before} -> {len(matches)} (min_score={self.min_score})"
            )

        # Step 4: MMR 选择
        limit = len(matches) if self.max_results is None else min(self.max_results, len(matches))
        results = mmr_select(query_embedding, matches, limit, self.lambda_param)

        logger.info(
            f"[MmrAggregator] 聚合完成: strategy={strategy.strategy_name}, "
            f"candidates={len(candidates)}, results={len(results)}"
        )
        return results
