"""Main CLI entry point for the reading stage pipeline."""
import sys
import click
from pathlib import Path
from rich.table import Table

from utils.logger import setup_logger, console
from monitoring.progress_tracker import ProgressTracker
from ingestion.pdf_extractor import PDFExtractor, PDFExtractionError
from ingestion.chunker import StageChunker
from segmentation.boundary_detector import BoundaryDetector
from pipeline.errors import PipelineError
from pipeline.orchestrator import StagePipeline
from pipeline.strategies import MODES, make_strategy
from storage.curriculum_store import CurriculumStore, load_volume_map
from storage.stage_store import StageStore
import config

logger = setup_logger(__name__)


@click.group()
def cli():
    """Reading Stage Pipeline: split curriculum PDFs into timed reading stages"""
    pass


@cli.command()
@click.option('--mode', type=click.Choice(MODES), default=config.PIPELINE_MODE, show_default=True,
              help='segmented: one PDF per volume; direct: one PDF per reading')
@click.option('--pdf-dir', type=click.Path(file_okay=False, path_type=Path), default=config.PDF_DIR,
              show_default=True, help='Directory holding the source PDFs')
@click.option('--stages-dir', type=click.Path(file_okay=False, path_type=Path), default=config.STAGES_DIR,
              show_default=True, help='Where stage JSON files are written')
@click.option('--curriculum', 'curriculum_path', type=click.Path(dir_okay=False, path_type=Path),
              default=config.CURRICULUM_PATH, show_default=True, help='Curriculum index JSON')
@click.option('--volume-map', 'volume_map_path', type=click.Path(dir_okay=False, path_type=Path),
              default=config.VOLUME_MAP_PATH, show_default=True, help='Volume → readings JSON')
@click.option('--words-per-stage', type=click.IntRange(min=1), default=config.WORDS_PER_STAGE,
              show_default=True, help='Target stage size in words')
def process(mode, pdf_dir, stages_dir, curriculum_path, volume_map_path, words_per_stage):
    """Generate stage files and update the curriculum index."""
    console.print("\n[bold cyan]Reading Stage Processor[/bold cyan]\n")

    try:
        volume_map = load_volume_map(volume_map_path)
        pipeline = StagePipeline(
            strategy=make_strategy(mode),
            volume_map=volume_map,
            stage_store=StageStore(stages_dir),
            curriculum_store=CurriculumStore(curriculum_path),
            pdf_dir=pdf_dir,
            chunker=StageChunker(target_words=words_per_stage)
        )

        tracker = ProgressTracker(console)
        with tracker.track_units(pipeline.units(), f"Processing {mode} sources...") as unit_done:
            summary = pipeline.run(on_unit_done=unit_done)
    except PipelineError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    table = Table(title="Stages per reading")
    table.add_column("Reading", style="cyan")
    table.add_column("Stages", justify="right")
    for reading_id, stage_ids in summary.stage_ids.items():
        table.add_row(reading_id, str(len(stage_ids)))
    console.print(table)

    console.print(f"\n[green]✓ Processed {summary.readings_processed} readings → {summary.stages_written} stages[/green]")
    console.print(f"Stages saved to: [cyan]{stages_dir}[/cyan]")
    console.print(f"Curriculum updated: [cyan]{curriculum_path}[/cyan]")

    if summary.stages_written == 0:
        console.print("\n[yellow]⚠ No stages generated. Make sure to:[/yellow]")
        console.print(f"  1. Place the PDF files in {pdf_dir}")
        console.print(f"  2. List them in {volume_map_path}")


@cli.command()
@click.option('--pdf', required=True, type=click.Path(exists=True, dir_okay=False), help='Path to volume PDF')
@click.option('--reading', 'reading_ids', required=True, multiple=True,
              help='Reading id in volume order (repeat for each reading)')
@click.option('--curriculum', 'curriculum_path', type=click.Path(dir_okay=False, path_type=Path),
              default=config.CURRICULUM_PATH, show_default=True, help='Curriculum index JSON')
def boundaries(pdf, reading_ids, curriculum_path):
    """Show where each reading is detected to start inside a volume."""
    try:
        _, curriculum = CurriculumStore(curriculum_path).load()
    except PipelineError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    titles = []
    for reading_id in reading_ids:
        reading = curriculum.find_reading(reading_id)
        if reading is None:
            console.print(f"[yellow]Reading {reading_id} not found in curriculum; skipping[/yellow]")
            continue
        titles.append(reading.title)

    if not titles:
        console.print("[red]Error: none of the readings were found in the curriculum[/red]")
        sys.exit(1)

    try:
        volume = PDFExtractor().extract(pdf)
    except PDFExtractionError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    matches = BoundaryDetector().detect(volume.pages, titles)

    table = Table(title=f"{volume.title} ({volume.page_count} pages)")
    table.add_column("#", justify="right")
    table.add_column("Reading", style="cyan")
    table.add_column("Start page", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Method")
    for match in matches:
        score = f"{match.score}/{len(match.signal_words)}" if match.signal_words else "-"
        table.add_row(str(match.reading_index + 1), match.title, str(match.page + 1), score, match.method)
    console.print(table)


@cli.command()
@click.option('--curriculum', 'curriculum_path', type=click.Path(dir_okay=False, path_type=Path),
              default=config.CURRICULUM_PATH, show_default=True, help='Curriculum index JSON')
def summary(curriculum_path):
    """List topics and readings with their stage counts."""
    try:
        _, curriculum = CurriculumStore(curriculum_path).load()
    except PipelineError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    table = Table(title="Curriculum")
    table.add_column("Topic", style="cyan")
    table.add_column("Reading")
    table.add_column("Title")
    table.add_column("Stages", justify="right")

    total = 0
    for topic in curriculum.topics:
        for reading in topic.readings:
            table.add_row(topic.id, reading.id, reading.title, str(reading.stage_count))
            total += reading.stage_count
    console.print(table)
    console.print(f"Total stages: [cyan]{total}[/cyan]")


if __name__ == '__main__':
    cli()
