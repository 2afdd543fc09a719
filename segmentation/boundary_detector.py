"""Locate where each reading starts inside a multi-reading volume.

The search is a greedy left-to-right scan. Each title after the first is
fingerprinted by its "signal words" and matched against 3-page windows
starting a few pages past the previous boundary. When no window scores well
enough, the remaining pages are divided evenly instead. Earlier boundaries
are never revised, so a poor early match shifts every later search.
"""
import re
from dataclasses import dataclass, field
from functools import reduce
from typing import FrozenSet, List, Sequence, Tuple

from pydantic import BaseModel, Field
from utils.logger import setup_logger
from extraction.vocabulary import STOP_WORDS
from ingestion.models import Page

logger = setup_logger(__name__)

MIN_SIGNAL_WORD_LENGTH = 5
MIN_PAGES_PER_READING = 5  # Search starts this many pages past the last boundary
TAIL_EXCLUSION_FRACTION = 0.1  # Never search the final 10% of pages
WINDOW_RADIUS = 1  # Pages either side of the candidate

_NON_WORD_RE = re.compile(r'\W+')


class BoundaryMatch(BaseModel):
    """How one reading's start page was resolved."""
    reading_index: int
    title: str
    page: int
    score: int = 0
    threshold: int = 0
    signal_words: List[str] = Field(default_factory=list)
    method: str  # first, matched, fallback, even-split


@dataclass(frozen=True)
class ScanState:
    """State carried between titles: next page to search from and the results so far."""
    search_from: int = 0
    matches: Tuple[BoundaryMatch, ...] = field(default_factory=tuple)

    @property
    def last_page(self) -> int:
        return self.matches[-1].page if self.matches else -1


def signal_words(title: str, stop_words: FrozenSet[str] = STOP_WORDS) -> List[str]:
    """Distinct title tokens of 5+ characters that are not stop words, in title order."""
    words: List[str] = []
    for token in _NON_WORD_RE.split(title.lower()):
        if len(token) >= MIN_SIGNAL_WORD_LENGTH and token not in stop_words and token not in words:
            words.append(token)
    return words


def window_text(page_texts: Sequence[str], center: int, radius: int = WINDOW_RADIUS) -> str:
    """Lowercased text of the pages within ``radius`` of ``center``, clamped to the volume."""
    start = max(0, center - radius)
    end = min(len(page_texts), center + radius + 1)
    return '\n'.join(page_texts[start:end]).lower()


def score_window(text: str, words: Sequence[str]) -> int:
    """Number of signal words found as substrings of the window text."""
    return sum(1 for word in words if word in text)


def match_threshold(word_count: int) -> int:
    return max(1, word_count // 2)


def search_range(search_from: int, page_count: int) -> range:
    """Candidate pages for the next boundary."""
    first = search_from + MIN_PAGES_PER_READING
    last_possible = max(first, page_count - int(page_count * TAIL_EXCLUSION_FRACTION))
    return range(first, min(last_possible, page_count))


def best_window(page_texts: Sequence[str], words: Sequence[str], candidates: range) -> Tuple[int, int]:
    """Highest-scoring candidate page and its score. The earliest page wins a tie."""
    best_page, best_score = -1, 0
    for page in candidates:
        score = score_window(window_text(page_texts, page), words)
        if score > best_score:
            best_page, best_score = page, score
    return best_page, best_score


def even_split(search_from: int, page_count: int, remaining_readings: int) -> int:
    """Start page that divides the unsearched pages evenly among the remaining readings."""
    return search_from + (page_count - search_from) // (remaining_readings + 1)


class BoundaryDetector:
    """Detects reading start pages within a volume."""

    def __init__(self, stop_words: FrozenSet[str] = STOP_WORDS):
        self.stop_words = stop_words

    def detect(self, pages: Sequence[Page], titles: Sequence[str]) -> List[BoundaryMatch]:
        """Resolve a start page for every title.

        Args:
            pages: Volume pages in document order
            titles: Expected reading titles in document order

        Returns:
            One BoundaryMatch per title; pages are strictly increasing and
            the first is always 0
        """
        if not titles:
            raise ValueError("At least one reading title is required")

        first = BoundaryMatch(reading_index=0, title=titles[0], page=0, method="first")
        if len(titles) == 1:
            return [first]

        page_texts = [page.text for page in pages]
        initial = ScanState(search_from=0, matches=(first,))

        def step(state: ScanState, indexed_title: Tuple[int, str]) -> ScanState:
            index, title = indexed_title
            return self._resolve(state, index, title, page_texts, len(titles))

        final = reduce(step, enumerate(titles[1:], start=1), initial)
        return list(final.matches)

    def _resolve(
        self,
        state: ScanState,
        index: int,
        title: str,
        page_texts: Sequence[str],
        title_count: int
    ) -> ScanState:
        """Resolve one title and return the advanced scan state."""
        page_count = len(page_texts)
        words = signal_words(title, self.stop_words)

        if not words:
            page = index * page_count // title_count
            method, score, threshold = "even-split", 0, 0
            logger.warning(f"No signal words in '{title}', placing it at page {page + 1} by even split")
        else:
            threshold = match_threshold(len(words))
            best_page, score = best_window(page_texts, words, search_range(state.search_from, page_count))
            if score >= threshold:
                page, method = best_page, "matched"
                logger.info(f"'{title}' starts at page {page + 1} (score {score}/{len(words)})")
            else:
                page = even_split(state.search_from, page_count, title_count - index)
                method = "fallback"
                logger.warning(
                    f"Weak match for '{title}' (best score {score}, need {threshold}); "
                    f"falling back to page {page + 1}"
                )

        # Keep boundaries strictly increasing even when a fallback lands behind the last one
        page = max(page, state.last_page + 1)
        match = BoundaryMatch(
            reading_index=index,
            title=title,
            page=page,
            score=score,
            threshold=threshold,
            signal_words=words,
            method=method
        )
        return ScanState(
            search_from=max(state.search_from, page + 1),
            matches=state.matches + (match,)
        )


def detect_reading_boundaries(pages: Sequence[Page], titles: Sequence[str]) -> List[int]:
    """Start page index (0-based) of each reading, in title order."""
    return [match.page for match in BoundaryDetector().detect(pages, titles)]
