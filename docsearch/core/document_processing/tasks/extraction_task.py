"""
Raw text extraction task.

Turns a stored source file into one string of plain text. PDFs go through
LangChain's PyPDFLoader (pages joined by a single space, then trimmed);
plain-text and markdown files are read as UTF-8.

Dependencies: langchain_community.document_loaders
System role: First stage of document indexing pipeline
"""

import logging
from pathlib import Path
from typing import Protocol

from langchain_community.document_loaders import PyPDFLoader

from docsearch.core.exceptions import ExtractionError

logger = logging.getLogger(__name__)

PDF_EXTENSIONS = {".pdf"}
TEXT_EXTENSIONS = {".txt", ".md"}
SUPPORTED_EXTENSIONS = PDF_EXTENSIONS | TEXT_EXTENSIONS


class TextExtractor(Protocol):
    """Anything that can turn a stored file into raw text."""

    def extract(self, source_path: str) -> str:
        """Return the full extracted text or raise ExtractionError."""
        ...


def _require_file(source_path: str) -> Path:
    path = Path(source_path)
    if not path.is_file():
        raise ExtractionError(f"File not found: {source_path}", source_path=source_path)
    return path


class PdfTextExtractor:
    """Extract text from PDF documents using PyPDFLoader."""

    def extract(self, source_path: str) -> str:
        """
        Extract the text of every page.

        Args:
            source_path: Path to PDF document

        Returns:
            str: Page texts joined by a space, trimmed

        Raises:
            ExtractionError: When the file is missing or cannot be parsed
        """
        _require_file(source_path)

        try:
            pages = PyPDFLoader(source_path).load()
        except Exception as e:
            raise ExtractionError(
                f"Failed to parse PDF: {e}", source_path=source_path
            ) from e

        text = " ".join(page.page_content for page in pages).strip()
        logger.info(
            f"{__name__}:extract - Extracted PDF text",
            extra={"source_path": source_path, "pages": len(pages), "text_length": len(text)},
        )
        return text


class PlainTextExtractor:
    """Read .txt and .md documents as UTF-8 text."""

    def extract(self, source_path: str) -> str:
        """
        Read the file contents.

        Args:
            source_path: Path to text document

        Returns:
            str: File contents, trimmed

        Raises:
            ExtractionError: When the file is missing or not valid UTF-8
        """
        path = _require_file(source_path)
        try:
            return path.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError) as e:
            raise ExtractionError(
                f"Failed to read text file: {e}", source_path=source_path
            ) from e


class ExtractionTask:
    """Dispatch extraction on the source file extension."""

    def __init__(
        self,
        pdf_extractor: TextExtractor | None = None,
        text_extractor: TextExtractor | None = None,
    ) -> None:
        """
        Initialize extraction task.

        Args:
            pdf_extractor: Extractor used for PDF files
            text_extractor: Extractor used for .txt/.md files
        """
        self._pdf_extractor = pdf_extractor or PdfTextExtractor()
        self._text_extractor = text_extractor or PlainTextExtractor()

    def extractor_for(self, source_path: str) -> TextExtractor:
        """
        Pick the extractor for a file by its extension.

        Raises:
            ExtractionError: Unsupported extension
        """
        suffix = Path(source_path).suffix.lower()
        if suffix in PDF_EXTENSIONS:
            return self._pdf_extractor
        if suffix in TEXT_EXTENSIONS:
            return self._text_extractor
        raise ExtractionError(
            f"Unsupported file format: {suffix or '<none>'}",
            source_path=source_path,
            details={"supported": sorted(SUPPORTED_EXTENSIONS)},
        )

    def extract(self, source_path: str) -> str:
        """
        Extract text from a stored document.

        Args:
            source_path: Path to the stored document

        Returns:
            str: Extracted text

        Raises:
            ExtractionError: Unsupported extension or extraction failure
        """
        return self.extractor_for(source_path).extract(source_path)


def get_extractor(source_path: str) -> TextExtractor:
    """Default extractor for the file's extension."""
    return ExtractionTask().extractor_for(source_path)
