"""
向量化模型接口定义
"""

from abc import ABC, abstractmethod
from typing import List


class IEmbeddingModel(ABC):
    """
    向量化模型接口

    负责将文本转换为向量，GenerateEmbeddings / HybridEmbeddings 策略依赖此接口
    """

    @abstractmethod
    def embed(self, text: str) -> List[float]:
        """
        单条文本向量化

        Args:
            text: 输入文本

        Returns:
            向量表示
        """
        pass

    @abstractmethod
    def embed_all(self, texts: List[str]) -> List[List[float]]:
        """
        批量文本向量化

        Args:
            texts: 文本列表

        Returns:
            向量列表（与 texts 顺序一致）
        """
        pass
