"""Overlapping text chunking."""
import logging

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN = 4
PARAGRAPH_BREAK = "\n\n"
SENTENCE_BREAK = ". "


class TextChunker:
    """Split text into overlapping segments sized in approximate tokens."""

    def __init__(
        self,
        chunk_size: int = 500,
        overlap: int = 50,
        chars_per_token: int = CHARS_PER_TOKEN,
    ):
        """Initialize chunker.

        Args:
            chunk_size: Target chunk size in tokens.
            overlap: Overlap between consecutive chunks in tokens.
            chars_per_token: Characters counted as one token.
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if overlap < 0:
            raise ValueError(f"overlap must not be negative, got {overlap}")

        self.chunk_size = chunk_size
        self.overlap = overlap
        self._window = chunk_size * chars_per_token
        self._overlap_chars = overlap * chars_per_token

    def chunk(self, text: str) -> list[str]:
        """Split text into trimmed, non-empty chunks in document order.

        Args:
            text: Text to chunk.

        Returns:
            List of chunks.
        """
        chunks: list[str] = []
        start = 0

        while start < len(text):
            end = self._find_end(text, start)

            segment = text[start:end].strip()
            if segment:
                chunks.append(segment)

            if end >= len(text):
                break

            next_start = end - self._overlap_chars
            if next_start <= start:
                next_start = end
            start = next_start

        return chunks

    def _find_end(self, text: str, start: int) -> int:
        """Pick the window end, preferring paragraph then sentence breaks."""
        end = start + self._window
        if end >= len(text):
            return len(text)

        min_break = start + self._window // 2
        for marker in (PARAGRAPH_BREAK, SENTENCE_BREAK):
            pos = text.rfind(marker, start, end + len(marker))
            if pos > min_break:
                return pos + len(marker)

        return end


def chunk_text(text: str, chunk_size: int, overlap: int) -> list[str]:
    return TextChunker(chunk_size, overlap).chunk(text)
