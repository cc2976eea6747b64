"""LLM clients: embeddings, tool-calling classification, and text generation."""

from .chat import ChatGenerator, MalformedModelResponse, ToolCallingClassifier, ToolSelection
from .embeddings import EmbeddingClient

__all__ = [
    "ChatGenerator",
    "EmbeddingClient",
    "MalformedModelResponse",
    "ToolCallingClassifier",
    "ToolSelection",
]
