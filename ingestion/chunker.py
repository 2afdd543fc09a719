"""Paragraph-aware stage chunking module."""
import re
from typing import List
from utils.logger import setup_logger
from ingestion.cleaner import count_words
from ingestion.models import Chunk
import config

logger = setup_logger(__name__)

_PARAGRAPH_BREAK_RE = re.compile(r'\n{2,}')


def split_paragraphs(text: str) -> List[str]:
    """Split text on blank lines, dropping empty paragraphs."""
    paragraphs = (para.strip() for para in _PARAGRAPH_BREAK_RE.split(text))
    return [para for para in paragraphs if para]


class StageChunker:
    """Packs whole paragraphs into stage-sized chunks."""

    def __init__(
        self,
        target_words: int = config.WORDS_PER_STAGE,
        min_words: int = config.MIN_CHUNK_WORDS
    ):
        """Initialize chunker.

        Args:
            target_words: Target stage size in words
            min_words: Chunks with this many words or fewer are dropped
        """
        self.target_words = target_words
        self.min_words = min_words

    def chunk(self, text: str) -> List[Chunk]:
        """Split text into stage chunks at paragraph boundaries.

        A chunk is closed only once it is more than half full, so a paragraph
        larger than the target still lands whole in an under-filled chunk.

        Args:
            text: Segment text

        Returns:
            List of Chunks above the minimum size, in text order
        """
        chunks: List[Chunk] = []
        current: List[str] = []
        current_words = 0

        for para in split_paragraphs(text):
            para_words = count_words(para)

            # If adding this paragraph exceeds the target AND the chunk is past half, close it
            if (current_words + para_words > self.target_words
                    and current_words > self.target_words * 0.5):
                chunks.append(Chunk(text='\n\n'.join(current), word_count=current_words))
                current = [para]
                current_words = para_words
            else:
                current.append(para)
                current_words += para_words

        # Add final chunk
        if current:
            chunks.append(Chunk(text='\n\n'.join(current), word_count=current_words))

        kept = [c for c in chunks if c.word_count > self.min_words]
        if len(kept) < len(chunks):
            logger.debug(f"Dropped {len(chunks) - len(kept)} chunk(s) at or under {self.min_words} words")

        return kept


def split_into_chunks(
    text: str,
    target_words: int = config.WORDS_PER_STAGE,
    min_words: int = config.MIN_CHUNK_WORDS
) -> List[Chunk]:
    """Functional shortcut for ``StageChunker(target_words, min_words).chunk(text)``."""
    return StageChunker(target_words, min_words).chunk(text)
