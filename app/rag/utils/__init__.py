from app.rag.utils.embedding_metadata import (
    enrich_with_embeddings,
    extract_document_embedding,
    extract_query_embedding,
    has_document_embedding,
    has_query_embedding,
)

__all__ = [
    "enrich_with_embeddings",
    "extract_document_embedding",
    "extract_query_embedding",
    "has_document_embedding",
    "has_query_embedding",
]
