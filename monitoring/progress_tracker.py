from contextlib import contextmanager
from typing import Callable, Iterator, Sequence

from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, MofNCompleteColumn


class ProgressTracker:
    """Progress bar over the source PDFs of one pipeline run."""

    def __init__(self, console):
        self.console = console

    def create_progress(self):
        return Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TextColumn("[cyan]{task.fields[source]}"),
            console=self.console
        )

    @contextmanager
    def track_units(self, units: Sequence, label: str) -> Iterator[Callable]:
        """Yield a callback that advances the bar once per finished source unit."""
        with self.create_progress() as progress:
            task = progress.add_task(label, total=len(units), source="")

            def unit_done(unit) -> None:
                progress.update(task, advance=1, source=unit.file_name)

            yield unit_done
