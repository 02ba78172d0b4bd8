"""
向量化模型模块
"""

from app.rag.embedding.base import IEmbeddingModel
from app.rag.embedding.openai_model import OpenAIEmbeddingModel

__all__ = ["IEmbeddingModel", "OpenAIEmbeddingModel"]
