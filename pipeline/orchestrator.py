"""Run the full stage pipeline: sources → segments → chunks → stages → index."""
from pathlib import Path
from typing import Callable, Dict, List, Optional

from utils.logger import setup_logger
from ingestion.chunker import StageChunker
from ingestion.cleaner import count_words
from ingestion.pdf_extractor import PDFExtractionError
from pipeline.index_updater import apply_stage_updates
from pipeline.models import Curriculum, ReadingSegment, ResolvedReading, RunSummary, VolumeMap
from pipeline.stage_builder import build_stages
from pipeline.strategies import SegmentStrategy, SourceUnit
from storage.curriculum_store import CurriculumStore
from storage.stage_store import StageStore
import config

logger = setup_logger(__name__)


class StagePipeline:
    """Processes every configured source PDF and rewrites the curriculum once at the end."""

    def __init__(
        self,
        strategy: SegmentStrategy,
        volume_map: VolumeMap,
        stage_store: StageStore,
        curriculum_store: CurriculumStore,
        pdf_dir: Path = config.PDF_DIR,
        chunker: Optional[StageChunker] = None,
        min_segment_words: int = config.MIN_SEGMENT_WORDS
    ):
        """Initialize pipeline.

        Args:
            strategy: Where reading segments come from
            volume_map: Source PDF → reading id configuration
            stage_store: Destination for stage records
            curriculum_store: Curriculum index read at start and written at the end
            pdf_dir: Directory holding the source PDFs
            chunker: Stage chunker (defaults to configured stage size)
            min_segment_words: Segments below this size are reported as suspicious
        """
        self.strategy = strategy
        self.volume_map = volume_map
        self.stage_store = stage_store
        self.curriculum_store = curriculum_store
        self.pdf_dir = Path(pdf_dir)
        self.chunker = chunker or StageChunker()
        self.min_segment_words = min_segment_words

    def units(self) -> List[SourceUnit]:
        return self.strategy.units(self.volume_map)

    def run(self, on_unit_done: Optional[Callable[[SourceUnit], None]] = None) -> RunSummary:
        """Process all source units, then write the updated curriculum index.

        Args:
            on_unit_done: Called after each unit, processed or skipped

        Returns:
            RunSummary with totals and stage ids per reading

        Raises:
            CurriculumError: If the curriculum index cannot be loaded
        """
        raw_index, curriculum = self.curriculum_store.load()
        summary = RunSummary()

        for unit in self.units():
            produced = self.process_unit(unit, curriculum)
            if produced is None:
                summary.units_skipped += 1
            else:
                summary.units_processed += 1
                summary.stage_ids.update(produced)
            if on_unit_done:
                on_unit_done(unit)

        summary.readings_processed = len(summary.stage_ids)
        summary.stages_written = sum(len(ids) for ids in summary.stage_ids.values())

        self.curriculum_store.save(apply_stage_updates(raw_index, curriculum, summary.stage_ids))

        logger.info(
            f"Processed {summary.readings_processed} readings → {summary.stages_written} stages "
            f"({summary.units_skipped} source file(s) skipped)"
        )
        return summary

    def resolve_readings(self, unit: SourceUnit, curriculum: Curriculum) -> List[ResolvedReading]:
        """Look up a unit's reading ids, skipping repeats and any the curriculum does not know."""
        readings = []
        seen = set()
        for reading_id in unit.reading_ids:
            if reading_id in seen:
                logger.warning(f"Reading {reading_id} listed twice for {unit.file_name}; keeping the first")
                continue
            seen.add(reading_id)
            reading = curriculum.find_reading(reading_id)
            if reading is None:
                logger.warning(f"Reading {reading_id} not found in curriculum; skipping")
                continue
            readings.append(reading)
        return readings

    def process_unit(self, unit: SourceUnit, curriculum: Curriculum) -> Optional[Dict[str, List[str]]]:
        """Produce stages for every reading of one source PDF.

        Args:
            unit: Source PDF and its reading ids
            curriculum: Parsed curriculum index

        Returns:
            Stage ids per reading id, or None if the unit was skipped
        """
        logger.info(f"Processing {unit.file_name}")

        readings = self.resolve_readings(unit, curriculum)
        if not readings:
            logger.warning(f"No readings of {unit.file_name} resolved against the curriculum; skipping")
            return None

        pdf_path = self.pdf_dir / unit.file_name
        if not pdf_path.exists():
            logger.warning(f"PDF not found: {pdf_path}")
            return None

        try:
            segments = self.strategy.segments(pdf_path, readings)
        except PDFExtractionError as e:
            logger.error(f"Failed to process {unit.file_name}: {e}")
            return None

        return {segment.reading.reading_id: self.process_segment(segment) for segment in segments}

    def process_segment(self, segment: ReadingSegment) -> List[str]:
        """Chunk one reading's text, build its stages and persist them.

        Returns:
            Stage ids in order
        """
        reading = segment.reading
        word_count = count_words(segment.text)

        if word_count < self.min_segment_words:
            logger.warning(
                f"Reading {reading.reading_id} has only {word_count} words; "
                "check the volume map for this reading"
            )

        chunks = self.chunker.chunk(segment.text)
        stages = build_stages(reading, chunks)
        stage_ids = self.stage_store.save_all(stages)

        source = f" ({segment.page_label})" if segment.page_label else ""
        logger.info(f"  {reading.reading_id}: {len(stage_ids)} stages from {word_count:,} words{source}")
        return stage_ids
