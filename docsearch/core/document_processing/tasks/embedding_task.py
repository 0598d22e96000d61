"""
Embedding generation task using sentence-transformers.

The model is held by an EmbeddingModelHandle: loaded lazily on first use,
exactly once even under concurrent first callers, and never torn down.
Embeddings are mean-pooled by the model's pooling module and L2-normalized,
so cosine similarity and inner product rank identically.

Dependencies: sentence_transformers, numpy
System role: Third stage of document indexing pipeline, query encoder for retrieval
"""

import asyncio
import logging
import threading
from typing import Any, Callable

import numpy as np
from sentence_transformers import SentenceTransformer

from docsearch.core.exceptions import EmbeddingError

logger = logging.getLogger(__name__)

DEFAULT_MODEL_NAME = "sentence-transformers/all-MiniLM-L6-v2"
DEFAULT_DIMENSION = 384


class EmbeddingModelHandle:
    """
    Lazily constructed, shared embedding model.

    Only the first load is guarded by a lock; once loaded the model is used
    read-only by every caller.
    """

    def __init__(
        self,
        model_name: str = DEFAULT_MODEL_NAME,
        device: str = "cpu",
        model_factory: Callable[[], Any] | None = None,
    ) -> None:
        """
        Initialize handle without loading the model.

        Args:
            model_name: sentence-transformers model name or local path
            device: Torch device ("cpu", "cuda")
            model_factory: Optional zero-argument callable returning the model
        """
        self.model_name = model_name
        self.device = device
        self._model_factory = model_factory or self._load_sentence_transformer
        self._model: Any | None = None
        self._lock = threading.Lock()

    def _load_sentence_transformer(self) -> SentenceTransformer:
        return SentenceTransformer(self.model_name, device=self.device)

    @property
    def is_loaded(self) -> bool:
        """Whether the underlying model has been constructed."""
        return self._model is not None

    def get(self) -> Any:
        """
        Return the model, constructing it on first call.

        Returns:
            The loaded model instance

        Raises:
            EmbeddingError: When the model cannot be loaded
        """
        if self._model is not None:
            return self._model

        with self._lock:
            if self._model is None:
                logger.info(
                    f"{__name__}:get - Loading embedding model",
                    extra={"model_name": self.model_name, "device": self.device},
                )
                try:
                    self._model = self._model_factory()
                except Exception as e:
                    raise EmbeddingError(
                        f"Failed to load embedding model: {e}",
                        details={"model_name": self.model_name},
                    ) from e
                logger.info(f"{__name__}:get - Embedding model loaded")
        return self._model


_default_handle: EmbeddingModelHandle | None = None
_default_handle_lock = threading.Lock()


def get_model_handle(
    model_name: str = DEFAULT_MODEL_NAME,
    device: str = "cpu",
) -> EmbeddingModelHandle:
    """
    Get the process-wide model handle.

    The first call fixes the model name and device for the process lifetime;
    later calls with different arguments get the same handle.

    Returns:
        EmbeddingModelHandle: Shared handle
    """
    global _default_handle
    with _default_handle_lock:
        if _default_handle is None:
            _default_handle = EmbeddingModelHandle(model_name=model_name, device=device)
        elif _default_handle.model_name != model_name:
            logger.warning(
                f"{__name__}:get_model_handle - Handle already bound to another model",
                extra={"bound_model": _default_handle.model_name, "requested_model": model_name},
            )
        return _default_handle


class Embedder:
    """Map text to fixed-dimension, unit-length vectors."""

    def __init__(
        self,
        handle: EmbeddingModelHandle,
        dimension: int = DEFAULT_DIMENSION,
    ) -> None:
        """
        Initialize embedder around a shared model handle.

        Args:
            handle: Model handle (shared across embedders)
            dimension: Expected output dimension

        Raises:
            ValueError: When dimension is not positive
        """
        if dimension <= 0:
            raise ValueError("dimension must be positive")
        self._handle = handle
        self.dimension = dimension

    @property
    def model_name(self) -> str:
        """Name of the model producing the embeddings."""
        return self._handle.model_name

    def embed(self, text: str) -> list[float]:
        """
        Embed a single text.

        Args:
            text: Non-empty text

        Returns:
            list[float]: Unit-length vector of length `dimension`

        Raises:
            EmbeddingError: Empty input, model failure or dimension mismatch
        """
        return self.embed_batch([text])[0]

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """
        Embed several texts with one model call.

        Args:
            texts: Non-empty texts

        Returns:
            list[list[float]]: One unit-length vector per text, same order

        Raises:
            EmbeddingError: Empty input, model failure or dimension mismatch
        """
        if not texts:
            return []
        for index, text in enumerate(texts):
            if not isinstance(text, str) or not text.strip():
                raise EmbeddingError(
                    "Cannot embed empty text",
                    details={"batch_index": index},
                )

        model = self._handle.get()
        try:
            raw = model.encode(
                texts,
                convert_to_numpy=True,
                normalize_embeddings=True,
                show_progress_bar=False,
            )
        except Exception as e:
            raise EmbeddingError(
                f"Failed to generate embeddings: {e}",
                details={"batch_size": len(texts), "model_name": self.model_name},
            ) from e

        vectors = np.asarray(raw, dtype=np.float32).reshape(len(texts), -1)
        if vectors.shape[1] != self.dimension:
            raise EmbeddingError(
                "Embedding dimension mismatch",
                details={"expected": self.dimension, "actual": int(vectors.shape[1])},
            )

        norms = np.linalg.norm(vectors, axis=1, keepdims=True)
        if not np.all(np.isfinite(norms)) or np.any(norms == 0):
            raise EmbeddingError("Model produced a zero or non-finite embedding")
        vectors = vectors / norms

        logger.debug(
            f"{__name__}:embed_batch - Embedded texts",
            extra={"batch_size": len(texts), "dimension": self.dimension},
        )
        return vectors.tolist()

    async def aembed(self, text: str) -> list[float]:
        """Embed a single text without blocking the event loop."""
        return await asyncio.to_thread(self.embed, text)

    async def aembed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed a batch without blocking the event loop."""
        return await asyncio.to_thread(self.embed_batch, texts)
