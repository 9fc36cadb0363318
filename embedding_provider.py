"""
Embedding Providers - Text -> vector, via Gemini REST API or a local model
Both providers are async and time-limited; any failure is raised as
EmbeddingProviderError.
"""
import asyncio
from typing import List, Optional

import aiohttp

from config_loader import Config
from constants import (
    EMBEDDING_TIMEOUT, GEMINI_API_BASE, GEMINI_EMBEDDING_MODEL, LOCAL_EMBEDDING_MODEL,
    MAX_CONCURRENT_REQUESTS
)
from enhanced_error_handler import ConfigurationError, EmbeddingProviderError
from structured_logger import get_logger


class EmbeddingProvider:
    """Base class: embed(text) -> list of floats"""

    name = "base"

    async def embed(self, text: str) -> List[float]:
        raise NotImplementedError

    async def close(self):
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


class GeminiEmbeddingProvider(EmbeddingProvider):
    """Google Gemini embedContent endpoint (text-embedding-004 by default)"""

    name = "gemini"

    def __init__(self, api_key: str, model: str = GEMINI_EMBEDDING_MODEL,
                 timeout: float = EMBEDDING_TIMEOUT, max_connections: int = MAX_CONCURRENT_REQUESTS):
        if not api_key:
            raise ConfigurationError("Google API key not configured")
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.max_connections = max_connections
        self.api_url = f"{GEMINI_API_BASE}/models/{model}:embedContent"
        self.session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            connector = aiohttp.TCPConnector(limit=self.max_connections)
            self.session = aiohttp.ClientSession(connector=connector)
        return self.session

    async def embed(self, text: str) -> List[float]:
        payload = {
            "model": f"models/{self.model}",
            "content": {"parts": [{"text": text}]}
        }
        headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}

        session = await self._get_session()
        try:
            async with session.post(self.api_url, json=payload, headers=headers,
                                    timeout=aiohttp.ClientTimeout(total=self.timeout)) as response:
                if response.status != 200:
                    body = await response.text()
                    raise EmbeddingProviderError(
                        f"Gemini embedding request failed with HTTP {response.status}: {body[:200]}",
                        status=response.status
                    )
                data = await response.json()
        except asyncio.TimeoutError as e:
            raise EmbeddingProviderError(f"Gemini embedding request timed out after {self.timeout}s") from e
        except aiohttp.ClientError as e:
            raise EmbeddingProviderError(f"Gemini embedding connection error: {e}") from e
        except ValueError as e:
            raise EmbeddingProviderError(f"Gemini response was not valid JSON: {e}") from e

        try:
            values = data.get("embedding", {}).get("values")
            if not values:
                raise EmbeddingProviderError("Gemini response did not contain embedding values")
            return [float(v) for v in values]
        except (AttributeError, TypeError, ValueError) as e:
            raise EmbeddingProviderError(f"Malformed Gemini embedding response: {e}") from e

    async def close(self):
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None


class LocalEmbeddingProvider(EmbeddingProvider):
    """sentence-transformers model run in a worker thread"""

    name = "local"

    def __init__(self, model_name: str = LOCAL_EMBEDDING_MODEL, timeout: float = EMBEDDING_TIMEOUT):
        self.model_name = model_name
        self.timeout = timeout
        self.model = None

    def _load_model(self):
        if self.model is None:
            from sentence_transformers import SentenceTransformer
            get_logger().info("loading_embedding_model", model=self.model_name)
            self.model = SentenceTransformer(self.model_name)
        return self.model

    def _encode(self, text: str) -> List[float]:
        vector = self._load_model().encode([text], normalize_embeddings=True)[0]
        return [float(v) for v in vector]

    async def embed(self, text: str) -> List[float]:
        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(loop.run_in_executor(None, self._encode, text), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise EmbeddingProviderError(f"Local embedding timed out after {self.timeout}s") from e
        except (ImportError, OSError, RuntimeError, ValueError) as e:
            raise EmbeddingProviderError(f"Local embedding failed: {e}") from e


def create_embedding_provider(config: Config) -> Optional[EmbeddingProvider]:
    """
    Build the provider named in config ('gemini', 'local' or 'none')

    Returns:
        Provider, or None when embeddings are disabled or the API key is missing
    """
    logger = get_logger()
    provider = config.embedding_provider

    if provider in ('none', 'off', 'lexical', ''):
        logger.info("embedding_provider_disabled")
        return None

    if provider == 'local':
        return LocalEmbeddingProvider(model_name=config.local_embedding_model, timeout=config.embedding_timeout)

    if provider == 'gemini':
        api_key = config.google_api_key
        if not api_key:
            logger.warning("embedding_provider_unconfigured", provider=provider,
                           reason="GOOGLE_API_KEY not set")
            return None
        return GeminiEmbeddingProvider(
            api_key=api_key,
            model=config.embedding_model,
            timeout=config.embedding_timeout,
            max_connections=config.max_concurrent_requests
        )

    raise ConfigurationError(f"Unknown embedding provider '{provider}' (expected gemini, local or none)")
