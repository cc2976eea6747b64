"""OpenAI embeddings client used by the semantic cache."""

from __future__ import annotations

from typing import List, Optional

import httpx
import structlog

from libs.common.settings import Settings, get_settings

logger = structlog.get_logger(__name__)


class EmbeddingClient:
    """OpenAI client for generating embeddings."""

    def __init__(self, settings: Optional[Settings] = None, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings or get_settings()
        self._http_client = http_client

    async def embed(self, text: str, max_len: int = 1000) -> Optional[List[float]]:
        """
        Get the embedding for ``text`` truncated to ``max_len`` characters.

        Returns:
            Embedding vector, or None if the service is unavailable or the
            response is not what we expect
        """
        if not self.settings.openai_api_key:
            logger.warning("OpenAI API key not configured, embeddings disabled")
            return None

        payload = {
            "model": self.settings.embedding_model,
            "input": text[:max_len],
            "encoding_format": "float",
        }
        headers = {
            "Authorization": f"Bearer {self.settings.openai_api_key}",
            "Content-Type": "application/json",
        }
        url = f"{self.settings.openai_base_url.rstrip('/')}/embeddings"

        try:
            if self._http_client is not None:
                response = await self._http_client.post(url, headers=headers, json=payload)
            else:
                async with httpx.AsyncClient(timeout=httpx.Timeout(self.settings.llm_timeout_seconds)) as client:
                    response = await client.post(url, headers=headers, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "OpenAI embedding failed",
                status_code=e.response.status_code,
                response=e.response.text[:200],
            )
            return None
        except Exception as e:
            logger.error("OpenAI embedding error", error=str(e))
            return None

        try:
            embedding = data["data"][0]["embedding"]
        except (KeyError, IndexError, TypeError):
            logger.warning("Unexpected embedding response format")
            return None

        if not isinstance(embedding, list):
            logger.warning("Unexpected embedding type", value_type=type(embedding).__name__)
            return None

        logger.debug(
            "Embedding generated",
            model=self.settings.embedding_model,
            input_length=len(text),
            embedding_dim=len(embedding),
        )
        return embedding
