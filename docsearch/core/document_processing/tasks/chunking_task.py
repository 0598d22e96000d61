"""
Text chunking task.

Splits extracted text into overlapping fixed-length character windows.
Boundaries are character offsets: no attempt is made to respect words,
sentences or tokens.

Dependencies: docsearch.core.exceptions
System role: Second stage of document indexing pipeline
"""

from docsearch.core.exceptions import ValidationError

from ..models import Chunk

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_CHUNK_OVERLAP = 200


def _validate(chunk_size: int, overlap: int) -> None:
    if chunk_size <= 0:
        raise ValidationError("chunk_size must be positive", field="chunk_size")
    if overlap < 0:
        raise ValidationError("overlap must not be negative", field="overlap")
    if overlap >= chunk_size:
        raise ValidationError(
            "overlap must be smaller than chunk_size",
            field="overlap",
            details={"chunk_size": chunk_size, "overlap": overlap},
        )


def _windows(text: str, chunk_size: int, overlap: int) -> list[tuple[int, int]]:
    length = len(text)
    if length <= chunk_size:
        return [(0, length)]

    windows = []
    start = 0
    while start < length:
        end = min(start + chunk_size, length)
        windows.append((start, end))
        start = end - overlap
        # The remaining tail is already covered by the overlap of the last window
        if start >= length - overlap:
            break
    return windows


def split_text(
    text: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> list[str]:
    """
    Split text into overlapping character windows.

    Text no longer than chunk_size comes back as a single chunk equal to the
    whole text. Otherwise each window is chunk_size long (the last may be
    shorter) and starts chunk_size - overlap after the previous one.

    Args:
        text: Text to split
        chunk_size: Characters per chunk
        overlap: Characters shared by consecutive chunks

    Returns:
        list[str]: Chunks in document order

    Raises:
        ValidationError: chunk_size <= 0, overlap < 0 or overlap >= chunk_size
    """
    _validate(chunk_size, overlap)
    return [text[start:end] for start, end in _windows(text, chunk_size, overlap)]


class ChunkingTask:
    """Split extracted text into positioned chunks."""

    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
    ) -> None:
        """
        Initialize chunking task with splitter configuration.

        Args:
            chunk_size: Chunk size in characters
            chunk_overlap: Overlap between consecutive chunks

        Raises:
            ValidationError: When the configuration cannot make progress
        """
        _validate(chunk_size, chunk_overlap)
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    def split(self, text: str) -> list[str]:
        """Split text into chunk strings."""
        return split_text(text, self.chunk_size, self.chunk_overlap)

    def split_with_offsets(self, text: str) -> list[Chunk]:
        """
        Split text into chunks carrying position and character offsets.

        Args:
            text: Extracted document text

        Returns:
            list[Chunk]: Chunks in position order
        """
        return [
            Chunk(position=position, start=start, end=end, text=text[start:end])
            for position, (start, end) in enumerate(
                _windows(text, self.chunk_size, self.chunk_overlap)
            )
        ]
