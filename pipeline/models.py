"""Pydantic models for stage records, the curriculum index and run configuration."""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Dict, List, Optional


class CamelModel(BaseModel):
    """Base for records persisted with camelCase JSON keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Stage(CamelModel):
    """One persisted reading stage."""
    id: str
    stage_number: int = Field(ge=1)
    total_stages: int = Field(ge=1)
    reading_id: str
    topic_id: str
    title: str
    reading_title: str
    topic_title: str
    word_count: int
    estimated_minutes: int
    content: str
    learning_outcomes: List[str] = Field(default_factory=list)
    key_terms: List[str] = Field(default_factory=list)
    prev_stage_id: Optional[str] = None
    next_stage_id: Optional[str] = None

    def to_dict(self) -> Dict:
        """Convert to the JSON shape the reader consumes."""
        return self.model_dump(by_alias=True)


class ReadingMeta(CamelModel):
    """A reading entry of the curriculum index."""
    model_config = ConfigDict(extra="allow")

    id: str
    title: str
    stage_count: int = 0
    stages: List[str] = Field(default_factory=list)


class TopicMeta(CamelModel):
    """A topic entry of the curriculum index."""
    model_config = ConfigDict(extra="allow")

    id: str
    title: str
    color: str = ""
    readings: List[ReadingMeta] = Field(default_factory=list)


class ResolvedReading(BaseModel):
    """A reading looked up in the curriculum, with its position in the index."""
    reading_id: str
    title: str
    topic_id: str
    topic_title: str
    topic_index: int
    reading_index: int

    @property
    def short_title(self) -> str:
        """Title up to the first colon."""
        return self.title.split(':')[0].strip()


class Curriculum(CamelModel):
    """Topic → reading hierarchy that stage output is written back into."""
    model_config = ConfigDict(extra="allow")

    topics: List[TopicMeta] = Field(default_factory=list)

    def find_reading(self, reading_id: str) -> Optional[ResolvedReading]:
        """Look up a reading by id.

        Args:
            reading_id: Reading id from the volume map

        Returns:
            ResolvedReading or None if no topic holds that id
        """
        for topic_index, topic in enumerate(self.topics):
            for reading_index, reading in enumerate(topic.readings):
                if reading.id == reading_id:
                    return ResolvedReading(
                        reading_id=reading.id,
                        title=reading.title,
                        topic_id=topic.id,
                        topic_title=topic.title,
                        topic_index=topic_index,
                        reading_index=reading_index
                    )
        return None


class VolumeMap(BaseModel):
    """Which readings live in which source PDFs.

    ``volumes`` maps a volume PDF to its readings in physical order (segmented
    mode); ``readings`` maps a reading to its own PDF (direct mode).
    """
    model_config = ConfigDict(extra="forbid")

    volumes: Dict[str, List[str]] = Field(default_factory=dict)
    readings: Dict[str, str] = Field(default_factory=dict)


class ReadingSegment(BaseModel):
    """The slice of source text belonging to one reading."""
    reading: ResolvedReading
    text: str
    start_page: Optional[int] = None  # 0-based, inclusive
    end_page: Optional[int] = None  # 0-based, exclusive

    @property
    def page_label(self) -> str:
        """1-based page span for log lines, empty when the segment is a whole document."""
        if self.start_page is None or self.end_page is None:
            return ""
        if self.end_page <= self.start_page:
            return "no pages"
        if self.end_page - self.start_page == 1:
            return f"page {self.start_page + 1}"
        return f"pages {self.start_page + 1}-{self.end_page}"


class RunSummary(BaseModel):
    """Totals reported at the end of a pipeline run."""
    units_processed: int = 0
    units_skipped: int = 0
    readings_processed: int = 0
    stages_written: int = 0
    stage_ids: Dict[str, List[str]] = Field(default_factory=dict)
