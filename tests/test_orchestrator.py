"""Test the end-to-end stage pipeline with in-memory page sources."""
import json
from pathlib import Path
import pytest
from ingestion.chunker import StageChunker
from ingestion.models import ExtractedVolume, Page
from ingestion.pdf_extractor import PDFExtractionError
from pipeline.errors import CurriculumError
from pipeline.models import Curriculum, ResolvedReading, VolumeMap
from pipeline.orchestrator import StagePipeline
from pipeline.strategies import DirectMappingStrategy, VolumeSegmentationStrategy, slice_segments
from storage.curriculum_store import CurriculumStore
from storage.stage_store import StageStore

FILLER = " ".join(["lorem ipsum dolor sit amet"] * 12)  # 60 words


def filler_page(number: int, heading: str = None) -> Page:
    paragraphs = [FILLER, FILLER]
    if heading:
        paragraphs.insert(0, heading)
    return Page(page_number=number, text="\n\n".join(paragraphs))


def two_reading_volume() -> list:
    """20 pages; the second reading opens on page index 10."""
    return [
        filler_page(i + 1, "CAPITAL MARKET EXPECTATIONS" if i == 10 else None)
        for i in range(20)
    ]


class FakeExtractor:
    """Serves prepared pages by file name."""

    def __init__(self, volumes: dict, failing: tuple = ()):
        self.volumes = volumes
        self.failing = failing
        self.calls = []

    def extract(self, pdf_path: str) -> ExtractedVolume:
        name = Path(pdf_path).name
        self.calls.append(name)
        if name in self.failing:
            raise PDFExtractionError(f"Failed to open PDF: {name} is corrupt")
        return ExtractedVolume(title=Path(name).stem, file_path=str(pdf_path), pages=self.volumes[name])

    def extract_text(self, pdf_path: str) -> str:
        try:
            volume = self.extract(pdf_path)
        except PDFExtractionError:
            return ""
        return "\n".join(page.text for page in volume.pages)


@pytest.fixture
def workspace(tmp_path):
    """PDF dir, stage dir and curriculum file."""
    pdf_dir = tmp_path / "pdfs"
    pdf_dir.mkdir()
    curriculum_path = tmp_path / "curriculum.json"
    curriculum_path.write_text(json.dumps({
        "topics": [
            {"id": "1", "title": "Behavioral Finance", "color": "#6366f1", "readings": [
                {"id": "1-1", "title": "Behavioral Biases of Individuals", "stageCount": 0, "stages": []},
            ]},
            {"id": "2", "title": "Capital Market Expectations", "color": "#10b981", "readings": [
                {"id": "2-1", "title": "Capital Market Expectations: Forecasting", "stageCount": 0, "stages": []},
                {"id": "2-2", "title": "Untouched Reading", "stageCount": 7, "stages": ["old"]},
            ]},
        ]
    }, indent=2), encoding="utf-8")
    return tmp_path


def touch_pdfs(workspace: Path, *names):
    for name in names:
        (workspace / "pdfs" / name).write_bytes(b"%PDF-1.4 placeholder")


def make_pipeline(workspace: Path, volume_map: VolumeMap, strategy) -> StagePipeline:
    return StagePipeline(
        strategy=strategy,
        volume_map=volume_map,
        stage_store=StageStore(workspace / "stages"),
        curriculum_store=CurriculumStore(workspace / "curriculum.json"),
        pdf_dir=workspace / "pdfs",
        chunker=StageChunker(target_words=300)
    )


def read_curriculum(workspace: Path) -> dict:
    return json.loads((workspace / "curriculum.json").read_text(encoding="utf-8"))


def reading_entry(curriculum: dict, reading_id: str) -> dict:
    for topic in curriculum["topics"]:
        for reading in topic["readings"]:
            if reading["id"] == reading_id:
                return reading
    raise KeyError(reading_id)


def load_stage(workspace: Path, stage_id: str) -> dict:
    return json.loads((workspace / "stages" / f"{stage_id}.json").read_text(encoding="utf-8"))


def test_segmented_run_writes_linked_stages(workspace):
    """Test a full run over one volume with two readings."""
    touch_pdfs(workspace, "volume-1.pdf")
    extractor = FakeExtractor({"volume-1.pdf": two_reading_volume()})
    volume_map = VolumeMap(volumes={"volume-1.pdf": ["1-1", "2-1"]})

    summary = make_pipeline(workspace, volume_map, VolumeSegmentationStrategy(extractor=extractor)).run()

    curriculum = read_curriculum(workspace)
    assert summary.units_processed == 1
    assert summary.readings_processed == 2

    for reading_id in ("1-1", "2-1"):
        entry = reading_entry(curriculum, reading_id)
        assert entry["stageCount"] == len(entry["stages"]) >= 2
        stages = [load_stage(workspace, stage_id) for stage_id in entry["stages"]]
        assert [s["stageNumber"] for s in stages] == list(range(1, len(stages) + 1))
        assert all(s["totalStages"] == len(stages) for s in stages)
        assert stages[0]["prevStageId"] is None
        assert stages[-1]["nextStageId"] is None
        for current, following in zip(stages, stages[1:]):
            assert current["nextStageId"] == following["id"]
            assert following["prevStageId"] == current["id"]
        assert all(5 <= s["estimatedMinutes"] <= 30 for s in stages)

    assert reading_entry(curriculum, "2-2") == {
        "id": "2-2", "title": "Untouched Reading", "stageCount": 7, "stages": ["old"]
    }
    assert curriculum["topics"][1]["color"] == "#10b981"


def test_second_reading_starts_at_detected_boundary(workspace):
    """Test that the detected boundary decides which text each reading gets."""
    touch_pdfs(workspace, "volume-1.pdf")
    extractor = FakeExtractor({"volume-1.pdf": two_reading_volume()})
    volume_map = VolumeMap(volumes={"volume-1.pdf": ["1-1", "2-1"]})

    summary = make_pipeline(workspace, volume_map, VolumeSegmentationStrategy(extractor=extractor)).run()

    first_reading_text = "".join(load_stage(workspace, s)["content"] for s in summary.stage_ids["1-1"])
    second_reading_text = "".join(load_stage(workspace, s)["content"] for s in summary.stage_ids["2-1"])
    assert "CAPITAL MARKET EXPECTATIONS" not in first_reading_text
    assert "CAPITAL MARKET EXPECTATIONS" in second_reading_text


def test_rerun_is_idempotent(workspace):
    """Test that two runs produce byte-identical output."""
    touch_pdfs(workspace, "volume-1.pdf")
    volume_map = VolumeMap(volumes={"volume-1.pdf": ["1-1", "2-1"]})

    def run_and_snapshot():
        extractor = FakeExtractor({"volume-1.pdf": two_reading_volume()})
        make_pipeline(workspace, volume_map, VolumeSegmentationStrategy(extractor=extractor)).run()
        files = sorted((workspace / "stages").glob("*.json"))
        return (
            {f.name: f.read_bytes() for f in files},
            (workspace / "curriculum.json").read_bytes(),
        )

    first = run_and_snapshot()
    second = run_and_snapshot()

    assert first == second


def test_missing_pdf_is_skipped(workspace):
    """Test that a missing volume does not stop the others."""
    touch_pdfs(workspace, "volume-1.pdf")
    extractor = FakeExtractor({"volume-1.pdf": two_reading_volume()})
    volume_map = VolumeMap(volumes={"missing.pdf": ["1-1"], "volume-1.pdf": ["2-1"]})

    summary = make_pipeline(workspace, volume_map, VolumeSegmentationStrategy(extractor=extractor)).run()

    curriculum = read_curriculum(workspace)
    assert summary.units_skipped == 1
    assert extractor.calls == ["volume-1.pdf"]
    assert reading_entry(curriculum, "1-1")["stageCount"] == 0
    assert reading_entry(curriculum, "2-1")["stageCount"] > 0


def test_extraction_failure_skips_only_that_volume(workspace):
    """Test that a corrupt volume is logged and skipped."""
    touch_pdfs(workspace, "corrupt.pdf", "volume-1.pdf")
    extractor = FakeExtractor({"volume-1.pdf": two_reading_volume()}, failing=("corrupt.pdf",))
    volume_map = VolumeMap(volumes={"corrupt.pdf": ["1-1"], "volume-1.pdf": ["2-1"]})

    summary = make_pipeline(workspace, volume_map, VolumeSegmentationStrategy(extractor=extractor)).run()

    assert summary.units_skipped == 1
    assert list(summary.stage_ids) == ["2-1"]


def test_unknown_reading_is_skipped(workspace):
    """Test that ids missing from the curriculum are dropped from the volume."""
    touch_pdfs(workspace, "volume-1.pdf")
    extractor = FakeExtractor({"volume-1.pdf": two_reading_volume()})
    volume_map = VolumeMap(volumes={"volume-1.pdf": ["1-1", "9-9"]})

    summary = make_pipeline(workspace, volume_map, VolumeSegmentationStrategy(extractor=extractor)).run()

    assert list(summary.stage_ids) == ["1-1"]
    assert "9-9" not in json.dumps(read_curriculum(workspace))


def test_repeated_reading_id_is_processed_once(workspace):
    """Test that a reading listed twice in one volume keeps its first position only."""
    touch_pdfs(workspace, "volume-1.pdf")
    extractor = FakeExtractor({"volume-1.pdf": two_reading_volume()})
    volume_map = VolumeMap(volumes={"volume-1.pdf": ["1-1", "2-1", "1-1"]})
    pipeline = make_pipeline(workspace, volume_map, VolumeSegmentationStrategy(extractor=extractor))

    readings = pipeline.resolve_readings(pipeline.units()[0], Curriculum.model_validate(read_curriculum(workspace)))
    summary = pipeline.run()

    assert [r.reading_id for r in readings] == ["1-1", "2-1"]
    assert list(summary.stage_ids) == ["1-1", "2-1"]
    assert reading_entry(read_curriculum(workspace), "1-1")["stages"] == summary.stage_ids["1-1"]


def test_volume_without_known_readings_is_skipped(workspace):
    """Test that a volume whose ids all fail to resolve is not extracted."""
    touch_pdfs(workspace, "volume-1.pdf")
    extractor = FakeExtractor({"volume-1.pdf": two_reading_volume()})
    volume_map = VolumeMap(volumes={"volume-1.pdf": ["8-8", "9-9"]})

    summary = make_pipeline(workspace, volume_map, VolumeSegmentationStrategy(extractor=extractor)).run()

    assert summary.units_skipped == 1
    assert extractor.calls == []


def test_undersized_reading_gets_zero_stages(workspace):
    """Test that a tiny segment is processed but yields no stages."""
    touch_pdfs(workspace, "tiny.pdf")
    extractor = FakeExtractor({"tiny.pdf": [Page(page_number=1, text="Only thirty words " * 10)]})
    volume_map = VolumeMap(volumes={"tiny.pdf": ["2-2"]})

    summary = make_pipeline(workspace, volume_map, VolumeSegmentationStrategy(extractor=extractor)).run()

    assert summary.stage_ids == {"2-2": []}
    assert reading_entry(read_curriculum(workspace), "2-2") == {
        "id": "2-2", "title": "Untouched Reading", "stageCount": 0, "stages": []
    }


def test_direct_mode(workspace):
    """Test one PDF per reading."""
    touch_pdfs(workspace, "reading-1-1.pdf")
    pages = [filler_page(i + 1) for i in range(5)]
    extractor = FakeExtractor({"reading-1-1.pdf": pages})
    volume_map = VolumeMap(readings={"1-1": "reading-1-1.pdf"})

    summary = make_pipeline(workspace, volume_map, DirectMappingStrategy(extractor=extractor)).run()

    entry = reading_entry(read_curriculum(workspace), "1-1")
    assert summary.units_processed == 1
    assert entry["stages"] == summary.stage_ids["1-1"]
    assert entry["stages"][0] == "1-1-s1"
    assert load_stage(workspace, "1-1-s1")["title"] == "Behavioral Biases of Individuals — Part 1"


def test_unreadable_curriculum_is_fatal(workspace):
    """Test that a broken curriculum aborts the run and is left as it was."""
    (workspace / "curriculum.json").write_text("{not json", encoding="utf-8")
    touch_pdfs(workspace, "volume-1.pdf")
    extractor = FakeExtractor({"volume-1.pdf": two_reading_volume()})
    volume_map = VolumeMap(volumes={"volume-1.pdf": ["1-1"]})

    with pytest.raises(CurriculumError):
        make_pipeline(workspace, volume_map, VolumeSegmentationStrategy(extractor=extractor)).run()

    assert (workspace / "curriculum.json").read_text(encoding="utf-8") == "{not json"
    assert extractor.calls == []


def test_slice_segments():
    """Test that segments run from one boundary to the next."""
    pages = [Page(page_number=i + 1, text=f"page{i}") for i in range(6)]
    readings = [
        ResolvedReading(reading_id=f"r{i}", title=f"R{i}", topic_id="t", topic_title="T",
                        topic_index=0, reading_index=i)
        for i in range(3)
    ]

    segments = slice_segments(pages, [0, 2, 5], readings)

    assert [s.text for s in segments] == ["page0\npage1", "page2\npage3\npage4", "page5"]
    assert [(s.start_page, s.end_page) for s in segments] == [(0, 2), (2, 5), (5, 6)]



def test_slice_segments_past_last_page():
    """Test that boundaries beyond the volume give empty segments with a clamped span."""
    pages = [Page(page_number=i + 1, text=f"page{i}") for i in range(2)]
    readings = [
        ResolvedReading(reading_id=f"r{i}", title=f"R{i}", topic_id="t", topic_title="T",
                        topic_index=0, reading_index=i)
        for i in range(4)
    ]

    segments = slice_segments(pages, [0, 1, 2, 3], readings)

    assert [s.text for s in segments] == ["page0", "page1", "", ""]
    assert [(s.start_page, s.end_page) for s in segments] == [(0, 1), (1, 2), (2, 2), (2, 2)]
    assert [s.page_label for s in segments] == ["page 1", "page 2", "no pages", "no pages"]

if __name__ == "__main__":
    pytest.main([__file__, "-v"])
