"""
融合服务模块

实现 RRF (Reciprocal Rank Fusion) 多路结果融合算法
"""

from app.rag.fusion.base import IFusionService
from app.rag.fusion.rrf_fusion import DEFAULT_RRF_K, RRFMergeImpl

__all__ = ["IFusionService", "RRFMergeImpl", "DEFAULT_RRF_K"]
