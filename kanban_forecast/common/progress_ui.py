from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)


@dataclass(frozen=True)
class Ui:
    console: Console
    progress: Progress

    def simulation_tracker(self, total: int, description: str = "Simulating") -> Callable[[int, int], None]:
        """Return a callback advancing a progress task per completed simulation."""
        task: TaskID = self.progress.add_task(description, total=total)

        def _on_simulation_completed(completed: int, total_: int) -> None:
            self.progress.update(task, completed=completed, total=total_)

        return _on_simulation_completed


@contextmanager
def progress_ui(console: Console | None = None) -> Iterator[Ui]:
    console = console or Console(stderr=True)
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
    with progress:
        yield Ui(console=console, progress=progress)
