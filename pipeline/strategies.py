"""
Segment sources: where each reading's text comes from.

Two modes share one interface. ``segmented`` reads one PDF per volume and
finds the reading boundaries inside it. ``direct`` reads one PDF per
reading and uses the whole document.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import BaseModel
from utils.logger import setup_logger
from ingestion.models import Page
from ingestion.pdf_extractor import PDFExtractor
from segmentation.boundary_detector import BoundaryDetector
from pipeline.errors import ConfigurationError
from pipeline.models import ReadingSegment, ResolvedReading, VolumeMap

logger = setup_logger(__name__)

SEGMENTED = "segmented"
DIRECT = "direct"
MODES = (SEGMENTED, DIRECT)


class SourceUnit(BaseModel):
    """One source PDF and the reading ids expected in it, in physical order."""
    file_name: str
    reading_ids: List[str]


def slice_segments(
    pages: Sequence[Page],
    boundaries: Sequence[int],
    readings: Sequence[ResolvedReading]
) -> List[ReadingSegment]:
    """Cut pages into one segment per reading.

    Segment ``r`` runs from ``boundaries[r]`` up to, not including,
    ``boundaries[r + 1]`` (or the last page for the final reading).
    Boundaries past the last page give empty segments.
    """
    segments = []
    for r, reading in enumerate(readings):
        start = min(boundaries[r], len(pages))
        end = min(boundaries[r + 1], len(pages)) if r + 1 < len(boundaries) else len(pages)
        text = '\n'.join(page.text for page in pages[start:end])
        segments.append(ReadingSegment(reading=reading, text=text, start_page=start, end_page=end))
    return segments


class SegmentStrategy(ABC):
    """Abstract source of per-reading text segments."""

    name: str = ""

    @abstractmethod
    def units(self, volume_map: VolumeMap) -> List[SourceUnit]:
        """Source PDFs to process, in configured order."""
        pass

    @abstractmethod
    def segments(self, pdf_path: Path, readings: List[ResolvedReading]) -> List[ReadingSegment]:
        """Text segment for each resolved reading of one source PDF."""
        pass


class VolumeSegmentationStrategy(SegmentStrategy):
    """One PDF per volume; reading start pages found by the boundary detector."""

    name = SEGMENTED

    def __init__(
        self,
        extractor: Optional[PDFExtractor] = None,
        detector: Optional[BoundaryDetector] = None
    ):
        self.extractor = extractor or PDFExtractor()
        self.detector = detector or BoundaryDetector()

    def units(self, volume_map: VolumeMap) -> List[SourceUnit]:
        return [
            SourceUnit(file_name=file_name, reading_ids=list(reading_ids))
            for file_name, reading_ids in volume_map.volumes.items()
        ]

    def segments(self, pdf_path: Path, readings: List[ResolvedReading]) -> List[ReadingSegment]:
        """Extract the volume, detect boundaries and slice.

        Raises:
            PDFExtractionError: If the volume cannot be read
        """
        volume = self.extractor.extract(str(pdf_path))
        matches = self.detector.detect(volume.pages, [reading.title for reading in readings])

        for match in matches:
            logger.info(f"  [{match.method}] page {match.page + 1}: {match.title}")

        return slice_segments(volume.pages, [match.page for match in matches], readings)


class DirectMappingStrategy(SegmentStrategy):
    """One PDF per reading; the whole document is the segment."""

    name = DIRECT

    def __init__(self, extractor: Optional[PDFExtractor] = None):
        self.extractor = extractor or PDFExtractor()

    def units(self, volume_map: VolumeMap) -> List[SourceUnit]:
        return [
            SourceUnit(file_name=file_name, reading_ids=[reading_id])
            for reading_id, file_name in volume_map.readings.items()
        ]

    def segments(self, pdf_path: Path, readings: List[ResolvedReading]) -> List[ReadingSegment]:
        text = self.extractor.extract_text(str(pdf_path))
        if not text.strip():
            logger.warning(f"No text extracted from {pdf_path.name}")
        return [ReadingSegment(reading=readings[0], text=text)]


def make_strategy(mode: str, extractor: Optional[PDFExtractor] = None) -> SegmentStrategy:
    """Build the segment strategy for a pipeline mode.

    Raises:
        ConfigurationError: If the mode is unknown
    """
    if mode == SEGMENTED:
        return VolumeSegmentationStrategy(extractor=extractor)
    if mode == DIRECT:
        return DirectMappingStrategy(extractor=extractor)
    raise ConfigurationError(f"Unknown pipeline mode '{mode}' (expected one of: {', '.join(MODES)})")
