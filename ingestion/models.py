"""Pydantic models for ingestion module."""
from pydantic import BaseModel, ConfigDict, Field
from typing import List


class Page(BaseModel):
    """One page of extracted text, numbered from 1."""
    model_config = ConfigDict(frozen=True)

    page_number: int = Field(ge=1)
    text: str = ""


class ExtractedVolume(BaseModel):
    """Represents the pages extracted from one source PDF."""
    title: str
    file_path: str
    pages: List[Page] = Field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)


class Chunk(BaseModel):
    """A run of whole paragraphs packed together by the chunker."""
    text: str
    word_count: int
