"""Turn chunks of one reading into linked stage records."""
import math
import re
from typing import List, Optional

from extraction.classifiers import is_heading
from extraction.html_renderer import text_to_html
from extraction.metadata import extract_key_terms, extract_learning_outcomes
from ingestion.models import Chunk
from pipeline.models import ResolvedReading, Stage
import config

MAX_TITLE_LENGTH = 80

_UNSAFE_ID_CHARS_RE = re.compile(r'[^a-z0-9-]', re.IGNORECASE)


def sanitize_reading_id(reading_id: str) -> str:
    """Replace every character outside [a-z0-9-] with a dash."""
    return _UNSAFE_ID_CHARS_RE.sub('-', reading_id)


def make_stage_id(reading_id: str, stage_number: int) -> str:
    return f"{sanitize_reading_id(reading_id)}-s{stage_number}"


def estimate_minutes(
    word_count: int,
    words_per_minute: int = config.AVG_READING_WPM,
    minimum: int = config.MIN_STAGE_MINUTES,
    maximum: int = config.MAX_STAGE_MINUTES
) -> int:
    """Reading time rounded half-up and clamped to [minimum, maximum]."""
    minutes = math.floor(word_count / words_per_minute + 0.5)
    return max(minimum, min(maximum, minutes))


def first_line(text: str) -> Optional[str]:
    for line in text.split('\n'):
        if line.strip():
            return line.strip()
    return None


def stage_title(chunk_text: str, reading: ResolvedReading, index: int) -> str:
    """Use the chunk's opening line when it is a short heading, else a numbered part title.

    Args:
        chunk_text: Chunk text
        reading: Reading the chunk belongs to
        index: 0-based chunk index within the reading

    Returns:
        Stage title
    """
    line = first_line(chunk_text)
    if line and is_heading(line) and len(line) < MAX_TITLE_LENGTH:
        return line
    return f"{reading.short_title} — Part {index + 1}"


def build_stages(reading: ResolvedReading, chunks: List[Chunk]) -> List[Stage]:
    """Build the ordered, linked stage records for one reading.

    Args:
        reading: Resolved reading metadata
        chunks: Chunks in reading order

    Returns:
        Stages numbered from 1 with prev/next links
    """
    total = len(chunks)
    stages = []

    for i, chunk in enumerate(chunks):
        stage_number = i + 1
        stages.append(
            Stage(
                id=make_stage_id(reading.reading_id, stage_number),
                stage_number=stage_number,
                total_stages=total,
                reading_id=reading.reading_id,
                topic_id=reading.topic_id,
                title=stage_title(chunk.text, reading, i),
                reading_title=reading.title,
                topic_title=reading.topic_title,
                word_count=chunk.word_count,
                estimated_minutes=estimate_minutes(chunk.word_count),
                content=text_to_html(chunk.text),
                learning_outcomes=extract_learning_outcomes(chunk.text),
                key_terms=extract_key_terms(chunk.text),
                prev_stage_id=make_stage_id(reading.reading_id, i) if i > 0 else None,
                next_stage_id=make_stage_id(reading.reading_id, i + 2) if i < total - 1 else None
            )
        )

    return stages
