"""
排序模块

提供向量相似度计算和 MMR 多样性选择。
"""

from app.rag.ranking.mmr import mmr_select, mmr_select_matches
from app.rag.ranking.similarity import cosine_similarity

__all__ = ["cosine_similarity", "mmr_select", "mmr_select_matches"]
