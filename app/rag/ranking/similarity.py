"""
向量相似度计算
"""

from typing import Sequence

import numpy as np


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    余弦相似度

    任一向量范数为 0 时返回 0.0

    Args:
        a, b: 等长向量

    Returns:
        相似度，范围 [-1, 1]
    """
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)

    if va.shape != vb.shape:
        raise ValueError(f"向量维度不一致: {va.shape[0]} != {vb.shape[0]}")

    norm = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if norm == 0.0:
        return 0.0

    return float(np.dot(va, vb) / norm)


def normalize_rows(matrix: np.ndarray) -> np.ndarray:
    """按行 L2 归一化，零向量保持为零"""
    norms = np.linalg.norm(matrix, axis=-1, keepdims=True)
    norms[norms == 0] = 1.0
    return matrix / norms
